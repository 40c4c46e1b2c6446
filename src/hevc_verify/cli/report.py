"""Console rendering of verification and analysis results.

Read-only consumers of :class:`~hevc_verify.core.models.RunReport` and
:class:`~hevc_verify.core.models.QualityRecord` lists.  Rich tables when
Rich is available, fixed-width plain text on stderr otherwise.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from hevc_verify.cli.console import console, escape_markup, rich_available, styled_status
from hevc_verify.core.models import (
    AnalysisFailure,
    AnalysisSummary,
    CheckName,
    QualityRecord,
    RunReport,
    RunSummary,
    Verdict,
)

_CHECK_COLUMNS: tuple[tuple[CheckName, str], ...] = (
    (CheckName.CODEC_VALID, "Codec"),
    (CheckName.DURATION_MATCH, "Duration"),
    (CheckName.FRAME_MATCH, "Frames"),
    (CheckName.AUDIO_HASH_MATCH, "Audio#"),
    (CheckName.VIDEO_HASH_MATCH, "Video#"),
    (CheckName.PLAYBACK_OK, "Play"),
    (CheckName.VMAF_SCORE, "VMAF"),
)


# ---------------------------------------------------------------------------
# Cell formatting (pure)
# ---------------------------------------------------------------------------

def check_cell(verdict: Verdict, name: CheckName) -> str:
    """``OK`` / ``FAIL`` / ``-`` (not run); the VMAF cell shows the score."""
    result = verdict.check(name)
    if result is None:
        return "-"
    if name is CheckName.VMAF_SCORE and result.value is not None:
        return f"{result.value:.2f}"
    return "OK" if result.passed else "FAIL"


def format_optional(value: float | None, spec: str = ".2f", suffix: str = "") -> str:
    if value is None:
        return "n/a"
    return f"{value:{spec}}{suffix}"


def format_bytes(size: int) -> str:
    mb = size / (1024 * 1024)
    if mb >= 1024:
        return f"{mb / 1024:.2f} GB"
    return f"{mb:.1f} MB"


def summary_line(summary: RunSummary) -> str:
    return (
        f"{summary.total} file(s): {summary.succeeded} succeeded, "
        f"{summary.failed} failed, {summary.errored} errored"
    )


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------

def render_verdicts(report: RunReport) -> None:
    """Render the verdict table, failure reasons and the summary line."""
    verdicts = report.verdicts
    if rich_available():
        from rich.table import Table

        table = Table(
            title="Verification results",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("File", style="bold", overflow="fold")
        for _, header in _CHECK_COLUMNS:
            table.add_column(header, justify="center")
        table.add_column("Status", justify="center")
        for verdict in verdicts:
            table.add_row(
                escape_markup(verdict.name),
                *(check_cell(verdict, name) for name, _ in _CHECK_COLUMNS),
                styled_status(verdict.status),
            )
        console.print()
        console.print(table)
    else:
        _print_plain_verdicts(verdicts)

    for verdict in verdicts:
        for message in verdict.errors:
            console.print(f"[red]✗[/red] {escape_markup(verdict.name)}: {escape_markup(message)}")
        for message in verdict.warnings:
            console.print(f"[yellow]![/yellow] {escape_markup(verdict.name)}: {escape_markup(message)}")

    console.print()
    if report.cancelled:
        console.print("[yellow]Run was cancelled before all files were verified.[/yellow]")
    style = "bold green" if report.summary.all_succeeded else "bold red"
    console.print(f"[{style}]{summary_line(report.summary)}[/{style}]")


def _print_plain_verdicts(verdicts: Sequence[Verdict]) -> None:
    headers = [header for _, header in _CHECK_COLUMNS]
    print(f"\n{'File':<40} " + " ".join(f"{h:<8}" for h in headers) + " Status", file=sys.stderr)
    print("-" * (41 + 9 * len(headers) + 7), file=sys.stderr)
    for verdict in verdicts:
        cells = " ".join(f"{check_cell(verdict, name):<8}" for name, _ in _CHECK_COLUMNS)
        print(f"{verdict.name[:40]:<40} {cells} {verdict.status.value}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Quality analysis
# ---------------------------------------------------------------------------

def render_quality_records(
    records: Sequence[QualityRecord],
    summary: AnalysisSummary,
    failures: Sequence[AnalysisFailure] = (),
) -> None:
    """Render *records* (already ranked) plus aggregate figures."""
    rows = [
        (
            r.name,
            format_bytes(r.source_size),
            format_bytes(r.converted_size),
            format_optional(r.size_reduction_pct, ".1f", "%"),
            format_optional(r.compression_ratio, ".2f", "x"),
            format_optional(r.vmaf),
            format_optional(r.psnr),
            format_optional(r.ssim, ".4f"),
            format_optional(r.quality_per_bit, ".3f"),
        )
        for r in records
    ]
    headers = ("File", "Source", "Converted", "Saved", "Ratio", "VMAF", "PSNR", "SSIM", "Q/kbit")

    if rich_available():
        from rich.table import Table

        table = Table(
            title="Compression efficiency (most efficient first)",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column(headers[0], style="bold", overflow="fold")
        for header in headers[1:]:
            table.add_column(header, justify="right")
        for name, *cells in rows:
            table.add_row(escape_markup(name), *cells)
        console.print()
        console.print(table)
    else:
        print("\n" + " ".join(f"{h:<12}" for h in headers), file=sys.stderr)
        for row in rows:
            print(" ".join(f"{cell[:12]:<12}" for cell in row), file=sys.stderr)

    for failure in failures:
        console.print(f"[red]✗[/red] {escape_markup(failure.name)}: {escape_markup(failure.reason)}")

    console.print()
    console.print(
        f"[bold]{summary.file_count} file(s)[/bold]  "
        f"saved {format_bytes(summary.total_bytes_saved)}  "
        f"avg reduction {format_optional(summary.avg_size_reduction_pct, '.1f', '%')}  "
        f"avg ratio {format_optional(summary.avg_compression_ratio, '.2f', 'x')}  "
        f"avg VMAF {format_optional(summary.avg_vmaf)}",
    )
