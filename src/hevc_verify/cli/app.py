"""CLI application entry point and command routing for hevc-verify.

This module is the **sole error boundary** for the entire application.
It catches :class:`~hevc_verify.exceptions.HevcVerifyError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages and returning well-defined exit codes.

Architecture notes
------------------
* No verification logic lives here; handlers only wire infra adapters
  into the core services and hand the results to :mod:`hevc_verify.cli.report`.
* Heavy imports happen inside the handlers so ``--help`` and
  ``--version`` work without Rich.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
import sys
import threading
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from hevc_verify.cli import exit_codes
from hevc_verify.cli.console import console, escape_markup
from hevc_verify.core.config import (
    DEFAULT_CONVERTED_MARKER,
    DEFAULT_DURATION_TOLERANCE,
    DEFAULT_FRAME_TOLERANCE,
    DEFAULT_PLAYBACK_SECONDS,
    DEFAULT_TARGET_CODEC,
    DEFAULT_VMAF_THRESHOLD,
)
from hevc_verify.exceptions import ConfigurationError, HevcVerifyError
from hevc_verify.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _common_options() -> argparse.ArgumentParser:
    """Options shared by ``verify`` and ``analyze``."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("source_dir", type=Path, help="Directory holding the original files.")
    common.add_argument("converted_dir", type=Path, help="Directory holding the HEVC transcodes.")
    common.add_argument(
        "--marker",
        default=DEFAULT_CONVERTED_MARKER,
        help="Name marker identifying converted files (default: %(default)s).",
    )
    common.add_argument(
        "--vmaf-model",
        type=Path,
        default=None,
        help="Path to the VMAF model JSON (or set HEVC_VERIFY_VMAF_MODEL).",
    )
    common.add_argument("--vmaf-start", type=float, default=None, metavar="SECONDS")
    common.add_argument("--vmaf-duration", type=float, default=None, metavar="SECONDS")
    common.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Per-invocation timeout for ffmpeg/ffprobe.",
    )
    common.add_argument(
        "--report",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write a CSV report (default: on).",
    )
    common.add_argument("--report-path", type=Path, default=None)
    common.add_argument("-v", "--verbose", action="store_true", help="Log every tool invocation.")
    common.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    common.add_argument("--log-file", type=Path, default=None, help="Also write a run log here.")
    return common


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    * ``hevc-verify verify SOURCE CONVERTED``   verify transcodes
    * ``hevc-verify analyze SOURCE CONVERTED``  compression-efficiency report
    * ``hevc-verify doctor``                    environment diagnostics
    * ``hevc-verify --version``
    """
    parser = argparse.ArgumentParser(
        prog="hevc-verify",
        description="Batch verification of HEVC transcodes against their sources.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command")
    common = _common_options()

    verify = sub.add_parser("verify", parents=[common], help="Verify converted files.")
    verify.add_argument(
        "--mode",
        default="basic",
        help="basic, full or deepscan (default: %(default)s).",
    )
    verify.add_argument("--vmaf-threshold", type=float, default=DEFAULT_VMAF_THRESHOLD)
    verify.add_argument("--codec", default=DEFAULT_TARGET_CODEC, help="Expected codec name.")
    verify.add_argument("--playback-seconds", type=float, default=DEFAULT_PLAYBACK_SECONDS)
    verify.add_argument("--duration-tolerance", type=float, default=DEFAULT_DURATION_TOLERANCE)
    verify.add_argument("--frame-tolerance", type=float, default=DEFAULT_FRAME_TOLERANCE)
    verify.add_argument(
        "--psnr-ssim",
        action="store_true",
        help="Also compute PSNR and SSIM during DeepScan scoring.",
    )

    sub.add_parser("analyze", parents=[common], help="Rank compression efficiency.")

    doctor = sub.add_parser("doctor", help="Check the runtime environment.")
    doctor.add_argument("--vmaf-model", type=Path, default=None)
    return parser


# ---------------------------------------------------------------------------
# Shared wiring helpers
# ---------------------------------------------------------------------------

def _build_segment(args: argparse.Namespace) -> Any:
    from hevc_verify.core.models import Segment

    if args.vmaf_start is None and args.vmaf_duration is None:
        return None
    if args.vmaf_duration is None:
        raise ConfigurationError(
            "--vmaf-start requires --vmaf-duration.",
            hint="Pass both to score a time-bounded segment.",
        )
    return Segment(args.vmaf_start or 0.0, args.vmaf_duration)


def _setup_logging(args: argparse.Namespace) -> Any:
    """Configure logging; return the shared Rich console or ``None``."""
    from hevc_verify.cli.console import get_rich_console, rich_available
    from hevc_verify.utils.logging_setup import configure_logging

    shared = get_rich_console() if rich_available() else None
    configure_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=args.log_file,
        console=shared,
    )
    return shared


def _report_path(args: argparse.Namespace, prefix: str) -> Path:
    if args.report_path is not None:
        return args.report_path
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return args.converted_dir / f"{prefix}_{stamp}.csv"


def _write_report(writer: Any, path: Path, rows: Any) -> None:
    """Write a CSV report; a failure is shown but never changes the outcome."""
    from hevc_verify.exceptions import ReportWriteError

    try:
        written = writer(path, rows)
    except ReportWriteError as exc:
        logger.error("%s", exc)
        console.print(f"[bold red]Report not written:[/bold red] {escape_markup(str(exc))}")
        return
    console.print(f"Report written to [bold]{escape_markup(str(written))}[/bold]")


@contextlib.contextmanager
def _cancel_on_interrupt(event: threading.Event) -> Iterator[None]:
    """First Ctrl+C sets *event*; a second one aborts immediately."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: Any) -> None:
        if event.is_set():
            raise KeyboardInterrupt
        event.set()
        logger.warning("Cancelling after the current file (Ctrl+C again to abort)")

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_verify(args: argparse.Namespace) -> int:
    """Verify every converted file in ``args.converted_dir``.

    Flow:
    1. Validate configuration and tool preconditions (abort early).
    2. Discover converted/source pairs.
    3. Run the batch with a progress display and Ctrl+C cancellation.
    4. Render the verdict table and write the CSV report.
    """
    from hevc_verify.cli.progress import make_progress
    from hevc_verify.cli.report import render_verdicts
    from hevc_verify.core.batch_service import BatchVerifier
    from hevc_verify.core.config import VerificationConfig
    from hevc_verify.core.models import VerificationMode
    from hevc_verify.core.verification_engine import VerificationEngine
    from hevc_verify.infra.discovery import discover_pairs
    from hevc_verify.infra.ffmpeg_detector import (
        require_libvmaf,
        require_tools,
        require_vmaf_model,
        resolve_vmaf_model,
    )
    from hevc_verify.infra.ffprobe_prober import FfprobeMediaProber
    from hevc_verify.infra.playback_prober import FfmpegPlaybackProber
    from hevc_verify.infra.process_runner import SubprocessRunner
    from hevc_verify.infra.quality_scorer import FfmpegQualityScorer
    from hevc_verify.infra.report_writer import write_verdict_csv
    from hevc_verify.infra.stream_hasher import FfmpegStreamHasher

    cfg = VerificationConfig(
        mode=VerificationMode.parse(args.mode),
        target_codec=args.codec,
        vmaf_threshold=args.vmaf_threshold,
        duration_tolerance=args.duration_tolerance,
        frame_tolerance=args.frame_tolerance,
        playback_seconds=args.playback_seconds,
        vmaf_segment=_build_segment(args),
        include_psnr_ssim=args.psnr_ssim,
        timeout_seconds=args.timeout,
    )
    shared_console = _setup_logging(args)

    runner = SubprocessRunner()
    require_tools()
    scorer = None
    if cfg.mode is VerificationMode.DEEP_SCAN:
        require_libvmaf(runner)
        model = require_vmaf_model(resolve_vmaf_model(args.vmaf_model))
        scorer = FfmpegQualityScorer(runner, model, timeout=cfg.timeout_seconds)

    pairs = discover_pairs(args.source_dir, args.converted_dir, args.marker)
    if not pairs:
        console.print(
            f"[yellow]No converted files containing '{args.marker}' "
            f"found in {args.converted_dir}.[/yellow]",
        )
        return exit_codes.SUCCESS

    engine = VerificationEngine(
        FfprobeMediaProber(runner, timeout=cfg.timeout_seconds),
        FfmpegStreamHasher(runner, timeout=cfg.timeout_seconds),
        scorer,
        FfmpegPlaybackProber(runner, timeout=cfg.timeout_seconds),
        cfg,
    )
    batch = BatchVerifier(engine)

    console.print(
        f"\n[bold]Verifying {len(pairs)} file(s)[/bold]  mode={cfg.mode.label}\n",
    )
    cancel = threading.Event()
    with _cancel_on_interrupt(cancel), make_progress(len(pairs), console=shared_console) as progress:
        report = batch.run(pairs, cancel=cancel, on_verdict=progress)

    render_verdicts(report)
    if args.report:
        _write_report(write_verdict_csv, _report_path(args, "verification_report"), report.verdicts)

    if report.summary.all_succeeded:
        return exit_codes.SUCCESS
    return exit_codes.VERIFICATION_FAILED


def _handle_analyze(args: argparse.Namespace) -> int:
    """Score every pair and rank by VMAF per kilobit."""
    from hevc_verify.cli.report import render_quality_records
    from hevc_verify.core.analyzer import (
        QualityAnalysisService,
        rank_by_quality_per_bit,
        summarize_records,
    )
    from hevc_verify.infra.discovery import discover_pairs
    from hevc_verify.infra.ffmpeg_detector import (
        require_libvmaf,
        require_tools,
        require_vmaf_model,
        resolve_vmaf_model,
    )
    from hevc_verify.infra.ffprobe_prober import FfprobeMediaProber
    from hevc_verify.infra.process_runner import SubprocessRunner
    from hevc_verify.infra.quality_scorer import FfmpegQualityScorer
    from hevc_verify.infra.report_writer import write_quality_csv

    segment = _build_segment(args)
    if args.timeout is not None and args.timeout <= 0:
        raise ConfigurationError("Timeout must be positive.")
    _setup_logging(args)

    runner = SubprocessRunner()
    require_tools()
    require_libvmaf(runner)
    model = require_vmaf_model(resolve_vmaf_model(args.vmaf_model))

    pairs = discover_pairs(args.source_dir, args.converted_dir, args.marker)
    if not pairs:
        console.print(
            f"[yellow]No converted files containing '{args.marker}' "
            f"found in {args.converted_dir}.[/yellow]",
        )
        return exit_codes.SUCCESS

    service = QualityAnalysisService(
        FfprobeMediaProber(runner, timeout=args.timeout),
        FfmpegQualityScorer(runner, model, timeout=args.timeout),
        lambda path: path.stat().st_size,
        segment=segment,
    )
    console.print(f"\n[bold]Analyzing {len(pairs)} file(s)…[/bold]\n")
    records, failures = service.analyze(pairs)
    ranked = rank_by_quality_per_bit(records)
    render_quality_records(ranked, summarize_records(ranked), failures)

    if args.report and ranked:
        _write_report(write_quality_csv, _report_path(args, "quality_analysis"), ranked)

    return exit_codes.SUCCESS if not failures else exit_codes.VERIFICATION_FAILED


def _handle_doctor(args: argparse.Namespace) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from hevc_verify.cli.doctor import run_doctor

    return run_doctor(vmaf_model=args.vmaf_model)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the hevc-verify CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS
    if args.command == "doctor":
        return _handle_doctor(args)
    if args.command == "analyze":
        return _handle_analyze(args)
    return _handle_verify(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Wraps :func:`main` so the process never exits with a raw stack trace
    during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except HevcVerifyError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape_markup(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
