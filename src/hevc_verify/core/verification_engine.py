"""Core verification engine: one verdict per converted/source file pair.

The engine walks a linear, mode-gated sequence of states::

    FIND_SOURCE -> PROBE_BOTH -> CHECK_CODEC -> CHECK_DURATION -> CHECK_FRAMES
        -> [>= FULL]   CHECK_AUDIO_HASH
        -> [DEEP_SCAN] CHECK_VIDEO_HASH
        -> CHECK_PLAYBACK
        -> [DEEP_SCAN] CHECK_VMAF
        -> AGGREGATE

All collaborators are injected as protocol implementations, so the
engine never touches a subprocess itself.

Guarantees
----------
* ``verify`` never raises for a per-file problem: probe, hash and score
  failures become failed checks; a missing source or any unexpected
  exception becomes an ``Error`` verdict.
* No state survives between two ``verify`` calls.
* ``BASIC`` mode never calls the hasher or the scorer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from hevc_verify.core import checks
from hevc_verify.core.config import VerificationConfig
from hevc_verify.core.models import (
    CheckName,
    CheckResult,
    FilePair,
    MediaDescriptor,
    QualityMetrics,
    StreamType,
    Verdict,
    VerdictStatus,
    VerificationMode,
    aggregate_passed,
    gating_checks,
)
from hevc_verify.core.protocols import MediaProber, PlaybackProber, QualityScorer, StreamHasher
from hevc_verify.exceptions import (
    ConfigurationError,
    HashError,
    ProbeError,
    ScoreError,
    SourceNotFoundError,
    StreamNotFoundError,
)

logger = logging.getLogger(__name__)


class _VerdictBuilder:
    """Mutable accumulator owned by exactly one ``verify`` call."""

    def __init__(self, pair: FilePair, mode: VerificationMode) -> None:
        self.pair = pair
        self.mode = mode
        self._gates = frozenset(gating_checks(mode))
        self.checks: list[CheckResult] = []
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.status: VerdictStatus | None = None
        self.source_media: MediaDescriptor | None = None
        self.converted_media: MediaDescriptor | None = None
        self.quality: QualityMetrics | None = None

    def record(self, result: CheckResult) -> None:
        self.checks.append(result)
        if result.passed or result.detail is None:
            return
        if result.name in self._gates:
            self.errors.append(result.detail)
        else:
            self.warnings.append(result.detail)

    def fail(self, message: str) -> None:
        self.status = VerdictStatus.ERROR
        self.errors.append(message)

    def build(self, elapsed_seconds: float) -> Verdict:
        status = self.status
        if status is None:
            passed = aggregate_passed(self.checks, self.mode)
            status = VerdictStatus.SUCCESS if passed else VerdictStatus.FAILED
        return Verdict(
            converted_path=self.pair.converted,
            source_path=self.pair.source,
            mode=self.mode,
            status=status,
            checks=tuple(self.checks),
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            elapsed_seconds=elapsed_seconds,
            source_media=self.source_media,
            converted_media=self.converted_media,
            quality=self.quality,
        )


class VerificationEngine:
    """Run the mode-appropriate checks for one file pair.

    Parameters
    ----------
    prober, hasher, playback:
        Objects satisfying the matching protocols in
        :mod:`hevc_verify.core.protocols`.
    scorer:
        Quality scorer; may be ``None`` unless the mode is ``DEEP_SCAN``.
    config:
        Thresholds, tolerances and mode for the run.
    clock:
        Monotonic clock used for ``elapsed_seconds``.
    """

    def __init__(
        self,
        prober: MediaProber,
        hasher: StreamHasher,
        scorer: QualityScorer | None,
        playback: PlaybackProber,
        config: VerificationConfig,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if scorer is None and config.mode is VerificationMode.DEEP_SCAN:
            raise ConfigurationError("DeepScan verification requires a quality scorer.")
        self._prober = prober
        self._hasher = hasher
        self._scorer = scorer
        self._playback = playback
        self._config = config
        self._clock = clock

    @property
    def config(self) -> VerificationConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def verify(self, pair: FilePair) -> Verdict:
        """Verify *pair* and return its finalized :class:`Verdict`."""
        started = self._clock()
        builder = _VerdictBuilder(pair, self._config.mode)
        try:
            self._run(pair, builder)
        except SourceNotFoundError as exc:
            builder.fail(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.debug("Verification of %s raised", pair.converted.name, exc_info=True)
            builder.fail(f"Verification error: {type(exc).__name__}: {exc}")

        verdict = builder.build(self._clock() - started)
        logger.info(
            "%s: %s (%d check(s), %.1fs)",
            verdict.name,
            verdict.status.value,
            len(verdict.checks),
            verdict.elapsed_seconds,
        )
        for message in verdict.errors:
            logger.info("  %s: %s", verdict.name, message)
        return verdict

    # ------------------------------------------------------------------
    # State sequence
    # ------------------------------------------------------------------

    def _run(self, pair: FilePair, builder: _VerdictBuilder) -> None:
        cfg = self._config
        source = self._find_source(pair)
        converted = pair.converted

        probe_failure = self._probe_both(source, converted, builder)
        source_media = builder.source_media
        converted_media = builder.converted_media
        if source_media is not None and converted_media is not None:
            builder.record(checks.check_codec(converted_media, cfg.target_codec))
            builder.record(
                checks.check_duration(source_media, converted_media, cfg.duration_tolerance),
            )
            frames = checks.check_frame_count(
                source_media, converted_media, cfg.frame_tolerance,
            )
            if frames is not None:
                builder.record(frames)
        else:
            builder.record(CheckResult(CheckName.CODEC_VALID, False, detail=probe_failure))
            builder.record(
                CheckResult(
                    CheckName.DURATION_MATCH,
                    False,
                    detail="Duration check skipped: media probe failed",
                ),
            )

        if cfg.mode >= VerificationMode.FULL:
            builder.record(
                self._hash_check(CheckName.AUDIO_HASH_MATCH, StreamType.AUDIO, source, converted),
            )
        if cfg.mode is VerificationMode.DEEP_SCAN:
            builder.record(
                self._hash_check(CheckName.VIDEO_HASH_MATCH, StreamType.VIDEO, source, converted),
            )

        ok = self._playback.probe_playback(converted, cfg.playback_seconds)
        builder.record(checks.check_playback(ok, cfg.playback_seconds))

        if cfg.mode is VerificationMode.DEEP_SCAN:
            builder.record(self._vmaf_check(source, converted, builder))

    @staticmethod
    def _find_source(pair: FilePair) -> Path:
        if pair.source is None:
            raise SourceNotFoundError(f"Source file not found for {pair.converted.name}")
        return pair.source

    def _probe_both(
        self,
        source: Path,
        converted: Path,
        builder: _VerdictBuilder,
    ) -> str | None:
        """Probe both files; return a combined failure message or ``None``."""
        failures: list[str] = []
        try:
            builder.source_media = self._prober.probe(source)
        except ProbeError as exc:
            failures.append(f"Probe failed for source: {exc}")
        try:
            builder.converted_media = self._prober.probe(converted)
        except ProbeError as exc:
            failures.append(f"Probe failed for converted: {exc}")
        return "; ".join(failures) if failures else None

    def _hash_check(
        self,
        name: CheckName,
        stream_type: StreamType,
        source: Path,
        converted: Path,
    ) -> CheckResult:
        digests: list[str | None] = []
        reasons: list[str] = []
        for label, path in (("source", source), ("converted", converted)):
            try:
                digests.append(self._hasher.hash_stream(path, stream_type))
            except StreamNotFoundError:
                digests.append(None)
                reasons.append(f"no {stream_type.value} stream in {label} file")
            except HashError as exc:
                digests.append(None)
                reasons.append(f"{label}: {exc}")
        return checks.check_hash(
            name,
            digests[0],
            digests[1],
            failure_reason="; ".join(reasons) if reasons else None,
        )

    def _vmaf_check(
        self,
        source: Path,
        converted: Path,
        builder: _VerdictBuilder,
    ) -> CheckResult:
        cfg = self._config
        scorer = self._scorer
        if scorer is None:
            raise ConfigurationError("DeepScan verification requires a quality scorer.")
        try:
            metrics = scorer.score(
                source,
                converted,
                segment=cfg.vmaf_segment,
                include_psnr_ssim=cfg.include_psnr_ssim,
            )
        except ScoreError as exc:
            return checks.vmaf_unavailable(str(exc))
        builder.quality = metrics
        return checks.check_vmaf(metrics.vmaf, cfg.vmaf_threshold)
