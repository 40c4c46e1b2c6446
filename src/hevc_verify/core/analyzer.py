"""Compression and quality analysis across a set of converted files.

The metric functions are pure and return ``None`` whenever a
denominator is zero or missing, so no NaN or ``ZeroDivisionError`` can
reach a report.  :class:`QualityAnalysisService` gathers the raw inputs
(sizes, probes, quality scores) for each pair, one file at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from statistics import fmean

from hevc_verify.core.models import (
    AnalysisFailure,
    AnalysisSummary,
    FilePair,
    MediaDescriptor,
    QualityMetrics,
    QualityRecord,
    Segment,
)
from hevc_verify.core.protocols import MediaProber, QualityScorer
from hevc_verify.exceptions import HevcVerifyError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metrics (pure)
# ---------------------------------------------------------------------------

def size_reduction_pct(source_size: int, converted_size: int) -> float | None:
    """``(source - converted) / source * 100``."""
    if not source_size:
        return None
    return (source_size - converted_size) / source_size * 100


def compression_ratio(source_size: int, converted_size: int) -> float | None:
    """``source / converted``."""
    if not converted_size:
        return None
    return source_size / converted_size


def bitrate_reduction_pct(
    source_bitrate_bps: int | None,
    converted_bitrate_bps: int | None,
) -> float | None:
    if not source_bitrate_bps or converted_bitrate_bps is None:
        return None
    return (source_bitrate_bps - converted_bitrate_bps) / source_bitrate_bps * 100


def quality_per_bit(vmaf: float | None, converted_bitrate_bps: int | None) -> float | None:
    """``(VMAF * 10) / converted bitrate in kbps``."""
    if vmaf is None or not converted_bitrate_bps:
        return None
    return (vmaf * 10) / (converted_bitrate_bps / 1000)


def build_quality_record(
    name: str,
    source_size: int,
    converted_size: int,
    source_media: MediaDescriptor | None,
    converted_media: MediaDescriptor | None,
    quality: QualityMetrics | None,
) -> QualityRecord:
    """Join sizes, bitrates and quality scores into one record."""
    src_bps = source_media.bitrate_bps if source_media is not None else None
    conv_bps = converted_media.bitrate_bps if converted_media is not None else None
    vmaf = quality.vmaf if quality is not None else None
    return QualityRecord(
        name=name,
        source_size=source_size,
        converted_size=converted_size,
        source_bitrate_bps=src_bps,
        converted_bitrate_bps=conv_bps,
        size_reduction_pct=size_reduction_pct(source_size, converted_size),
        compression_ratio=compression_ratio(source_size, converted_size),
        bitrate_reduction_pct=bitrate_reduction_pct(src_bps, conv_bps),
        vmaf=vmaf,
        psnr=quality.psnr if quality is not None else None,
        ssim=quality.ssim if quality is not None else None,
        quality_per_bit=quality_per_bit(vmaf, conv_bps),
    )


# ---------------------------------------------------------------------------
# Ranking / summary (pure)
# ---------------------------------------------------------------------------

def rank_by_quality_per_bit(records: Iterable[QualityRecord]) -> list[QualityRecord]:
    """Most efficient first; records without a quality-per-bit value last.

    Stable: ties keep their input order.
    """
    items = list(records)
    defined = [r for r in items if r.quality_per_bit is not None]
    undefined = [r for r in items if r.quality_per_bit is None]
    return sorted(defined, key=lambda r: r.quality_per_bit, reverse=True) + undefined


def _mean(values: Iterable[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    return fmean(present) if present else None


def summarize_records(records: Sequence[QualityRecord]) -> AnalysisSummary:
    return AnalysisSummary(
        file_count=len(records),
        total_bytes_saved=sum(r.source_size - r.converted_size for r in records),
        avg_size_reduction_pct=_mean(r.size_reduction_pct for r in records),
        avg_compression_ratio=_mean(r.compression_ratio for r in records),
        avg_vmaf=_mean(r.vmaf for r in records),
        avg_psnr=_mean(r.psnr for r in records),
        avg_ssim=_mean(r.ssim for r in records),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class QualityAnalysisService:
    """Collect a :class:`QualityRecord` for every matched pair.

    Parameters
    ----------
    prober, scorer:
        Protocol implementations used for bitrates and quality scores.
    stat_size:
        Returns a file's size in bytes (``lambda p: p.stat().st_size``
        in production).
    segment:
        Optional scoring window applied to every file.
    """

    def __init__(
        self,
        prober: MediaProber,
        scorer: QualityScorer,
        stat_size: Callable[[Path], int],
        *,
        segment: Segment | None = None,
    ) -> None:
        self._prober = prober
        self._scorer = scorer
        self._stat_size = stat_size
        self._segment = segment

    def analyze(
        self,
        pairs: Sequence[FilePair],
    ) -> tuple[list[QualityRecord], list[AnalysisFailure]]:
        """Return records in discovery order plus per-file failures."""
        records: list[QualityRecord] = []
        failures: list[AnalysisFailure] = []
        for pair in pairs:
            name = pair.converted.name
            if pair.source is None:
                failures.append(AnalysisFailure(name, "Source file not found"))
                continue
            try:
                records.append(self._analyze_pair(name, pair.source, pair.converted))
            except (HevcVerifyError, OSError) as exc:
                logger.warning("Analysis of %s failed: %s", name, exc)
                failures.append(AnalysisFailure(name, str(exc)))
        return records, failures

    def _analyze_pair(self, name: str, source: Path, converted: Path) -> QualityRecord:
        source_media = self._prober.probe(source)
        converted_media = self._prober.probe(converted)
        quality = self._scorer.score(
            source,
            converted,
            segment=self._segment,
            include_psnr_ssim=True,
        )
        record = build_quality_record(
            name,
            self._stat_size(source),
            self._stat_size(converted),
            source_media,
            converted_media,
            quality,
        )
        logger.info(
            "%s: VMAF %.2f, size -%s%%",
            name,
            quality.vmaf,
            f"{record.size_reduction_pct:.1f}" if record.size_reduction_pct is not None else "?",
        )
        return record
