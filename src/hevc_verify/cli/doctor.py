"""``hevc-verify doctor``: environment diagnostics command.

Collects one row per requirement (Python, ffmpeg, ffprobe, the libvmaf
filter, a VMAF model) and renders them as a table.  Missing ffmpeg or
ffprobe is a failure; missing libvmaf or model only disables DeepScan
and ``analyze``, so those rows are warnings.
"""

from __future__ import annotations

import platform
import sys
from pathlib import Path

from hevc_verify.cli import exit_codes
from hevc_verify.cli.console import console, escape_markup, rich_available
from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.infra.ffmpeg_detector import (
    REQUIRED_TOOLS,
    VMAF_MODEL_ENV,
    detect_tool,
    ffmpeg_has_libvmaf,
    resolve_vmaf_model,
)
from hevc_verify.version import __version__

OK = "OK"
WARN = "WARN"
FAIL = "FAIL"

_STYLES: dict[str, str] = {OK: "green", WARN: "yellow", FAIL: "red"}

Row = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Row:
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", platform.python_version(), OK if ok else FAIL


def _tool_check(name: str) -> Row:
    status = detect_tool(name)
    if status.found:
        return name, str(status.path) if status.path else "found", OK
    return name, "not found", FAIL


def _libvmaf_check(runner: ProcessRunner | None, ffmpeg_found: bool) -> Row:
    if not ffmpeg_found:
        return "libvmaf", "ffmpeg missing", WARN
    if runner is None:
        from hevc_verify.infra.process_runner import SubprocessRunner

        runner = SubprocessRunner()
    if ffmpeg_has_libvmaf(runner):
        return "libvmaf", "filter available", OK
    return "libvmaf", "not compiled in", WARN


def _vmaf_model_check(explicit: Path | None) -> Row:
    path = resolve_vmaf_model(explicit)
    if path is None:
        return "VMAF model", f"not configured ({VMAF_MODEL_ENV})", WARN
    if not path.is_file():
        return "VMAF model", f"missing: {path}", WARN
    return "VMAF model", str(path), OK


def _os_check() -> Row:
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    return "OS", f"{system_display} {platform.release()} ({platform.machine()})", OK


def collect_checks(
    vmaf_model: Path | None = None,
    runner: ProcessRunner | None = None,
) -> list[Row]:
    """Return ``(component, value, status)`` rows in display order."""
    rows: list[Row] = [
        ("hevc-verify", __version__, OK),
        _python_version_check(),
    ]
    tool_rows = [_tool_check(name) for name in REQUIRED_TOOLS]
    rows.extend(tool_rows)
    ffmpeg_found = tool_rows[0][2] == OK
    rows.append(_libvmaf_check(runner, ffmpeg_found))
    rows.append(_vmaf_model_check(vmaf_model))
    rows.append(_os_check())
    return rows


def _print_plain_doctor_table(rows: list[Row]) -> None:
    print("\nhevc-verify doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<42} {'Status':<6}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in rows:
        print(f"{label:<12} {value:<42} {status:<6}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(
    vmaf_model: Path | None = None,
    runner: ProcessRunner | None = None,
) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no row failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  Warnings do not fail.
    """
    rows = collect_checks(vmaf_model, runner)
    has_failure = any(status == FAIL for _, _, status in rows)

    if rich_available():
        from rich.table import Table

        table = Table(
            title="hevc-verify doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20, overflow="fold")
        table.add_column("Status", justify="center", min_width=6)
        for label, value, status in rows:
            style = _STYLES[status]
            table.add_row(label, escape_markup(value), f"[{style}]{status}[/{style}]")
        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(rows)

    missing = [detect_tool(name) for name in REQUIRED_TOOLS]
    missing = [status for status in missing if not status.found]
    if missing and missing[0].install_commands:
        console.print("[yellow]ffmpeg/ffprobe are not installed.[/yellow]")
        console.print("Install using one of the following commands:\n")
        for cmd in missing[0].install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All required checks passed.[/bold green]")
    return exit_codes.SUCCESS
