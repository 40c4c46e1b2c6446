"""Infrastructure: CSV export of verdicts and quality records.

Read-only consumers of core results.  A failed write raises
:class:`ReportWriteError` to the caller, which reports it without
touching the verdicts themselves.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path

from hevc_verify.core.models import CheckName, QualityRecord, Verdict
from hevc_verify.exceptions import ReportWriteError

VERDICT_COLUMNS: tuple[str, ...] = (
    "file",
    "source",
    "mode",
    "status",
    "passed",
    *(name.value for name in CheckName),
    "vmaf",
    "elapsed_seconds",
    "errors",
    "warnings",
)

QUALITY_COLUMNS: tuple[str, ...] = (
    "file",
    "source_size",
    "converted_size",
    "source_bitrate_bps",
    "converted_bitrate_bps",
    "size_reduction_pct",
    "compression_ratio",
    "bitrate_reduction_pct",
    "vmaf",
    "psnr",
    "ssim",
    "quality_per_bit",
)


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.4f}"
    return str(value)


def verdict_row(verdict: Verdict) -> list[str]:
    row: list[object] = [
        verdict.name,
        verdict.source_path.name if verdict.source_path is not None else "",
        verdict.mode.label,
        verdict.status.value,
        verdict.passed,
    ]
    for name in CheckName:
        result = verdict.check(name)
        row.append(None if result is None else result.passed)
    row.extend(
        [
            verdict.quality.vmaf if verdict.quality is not None else None,
            verdict.elapsed_seconds,
            "; ".join(verdict.errors),
            "; ".join(verdict.warnings),
        ],
    )
    return [_cell(v) for v in row]


def quality_row(record: QualityRecord) -> list[str]:
    return [
        _cell(v)
        for v in (
            record.name,
            record.source_size,
            record.converted_size,
            record.source_bitrate_bps,
            record.converted_bitrate_bps,
            record.size_reduction_pct,
            record.compression_ratio,
            record.bitrate_reduction_pct,
            record.vmaf,
            record.psnr,
            record.ssim,
            record.quality_per_bit,
        )
    ]


def _write(path: Path, header: Sequence[str], rows: Iterable[list[str]]) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            writer.writerows(rows)
    except OSError as exc:
        raise ReportWriteError(f"Could not write report {path}: {exc}") from exc
    return path


def write_verdict_csv(path: Path, verdicts: Iterable[Verdict]) -> Path:
    """Write one row per verdict, in the given order."""
    return _write(path, VERDICT_COLUMNS, (verdict_row(v) for v in verdicts))


def write_quality_csv(path: Path, records: Iterable[QualityRecord]) -> Path:
    """Write one row per quality record, in the given order."""
    return _write(path, QUALITY_COLUMNS, (quality_row(r) for r in records))
