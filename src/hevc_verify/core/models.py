"""Domain models for hevc-verify.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access and pure derivations.  They carry zero I/O
and zero dependencies on external packages.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from hevc_verify.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Media descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MediaDescriptor:
    """Structural description of the first video stream of one file."""

    codec_name: str
    """Codec name exactly as reported by the prober (e.g. ``hevc``)."""

    width: int
    """Frame width in pixels (> 0)."""

    height: int
    """Frame height in pixels (> 0)."""

    duration_seconds: float
    """Container-level duration (>= 0)."""

    frame_count: int | None
    """Number of frames, or ``None`` when the container does not report it."""

    bitrate_bps: int | None
    """Stream bitrate, falling back to the container bitrate, or ``None``."""

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True, slots=True)
class QualityMetrics:
    """Perceptual comparison result.  VMAF is always present."""

    vmaf: float
    psnr: float | None = None
    ssim: float | None = None


@dataclass(frozen=True, slots=True)
class Segment:
    """Time-bounded window used for quality scoring."""

    start_seconds: float
    duration_seconds: float

    def __post_init__(self) -> None:
        if self.start_seconds < 0:
            raise ConfigurationError("Segment start must not be negative.")
        if self.duration_seconds <= 0:
            raise ConfigurationError("Segment duration must be positive.")


class StreamType(str, enum.Enum):
    """Stream selector for the stream hasher."""

    VIDEO = "video"
    AUDIO = "audio"

    @property
    def selector(self) -> str:
        """ffmpeg stream specifier letter (``v`` / ``a``)."""
        return self.value[0]


# ---------------------------------------------------------------------------
# Verification mode and checks
# ---------------------------------------------------------------------------

class VerificationMode(enum.IntEnum):
    """Verification depth.  Higher values run a superset of the checks."""

    BASIC = 1
    FULL = 2
    DEEP_SCAN = 3

    @property
    def label(self) -> str:
        return {1: "Basic", 2: "Full", 3: "DeepScan"}[self.value]

    @classmethod
    def parse(cls, text: str) -> VerificationMode:
        """Parse ``basic`` / ``full`` / ``deepscan`` (case-insensitive)."""
        key = text.strip().lower().replace("-", "").replace("_", "")
        mapping = {"basic": cls.BASIC, "full": cls.FULL, "deepscan": cls.DEEP_SCAN}
        try:
            return mapping[key]
        except KeyError:
            raise ConfigurationError(
                f"Unknown verification mode: {text}",
                hint="Use one of: basic, full, deepscan",
            ) from None


class CheckName(str, enum.Enum):
    """Names of the individual verification checks."""

    CODEC_VALID = "CodecValid"
    DURATION_MATCH = "DurationMatch"
    FRAME_MATCH = "FrameMatch"
    AUDIO_HASH_MATCH = "AudioHashMatch"
    VIDEO_HASH_MATCH = "VideoHashMatch"
    PLAYBACK_OK = "PlaybackOK"
    VMAF_SCORE = "VmafScore"


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of one named check."""

    name: CheckName
    passed: bool
    value: float | None = None
    """Optional numeric payload (e.g. the VMAF score)."""

    detail: str | None = None
    """Human-readable failure detail; ``None`` for a clean pass."""


_BASE_GATES: tuple[CheckName, ...] = (
    CheckName.CODEC_VALID,
    CheckName.DURATION_MATCH,
    CheckName.PLAYBACK_OK,
)
_DEEP_SCAN_GATES: tuple[CheckName, ...] = (
    CheckName.VMAF_SCORE,
    CheckName.VIDEO_HASH_MATCH,
)


def gating_checks(mode: VerificationMode) -> tuple[CheckName, ...]:
    """Return the checks that decide ``passed`` under *mode*.

    FrameMatch and AudioHashMatch are never gating, in any mode.
    """
    if mode is VerificationMode.DEEP_SCAN:
        return _BASE_GATES + _DEEP_SCAN_GATES
    return _BASE_GATES


def aggregate_passed(checks: Iterable[CheckResult], mode: VerificationMode) -> bool:
    """Derive the overall verdict from *checks* under *mode*.

    Every gating check must be present and passed; a missing gating
    check counts as a failure.
    """
    outcomes = {check.name: check.passed for check in checks}
    return all(outcomes.get(name, False) for name in gating_checks(mode))


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------

class VerdictStatus(str, enum.Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    ERROR = "Error"


@dataclass(frozen=True, slots=True)
class FilePair:
    """A converted file and its matched source (``None`` when unmatched)."""

    converted: Path
    source: Path | None


@dataclass(frozen=True, slots=True)
class Verdict:
    """Finalized verification outcome for one converted file."""

    converted_path: Path
    source_path: Path | None
    mode: VerificationMode
    status: VerdictStatus
    checks: tuple[CheckResult, ...] = ()
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    """Failures of informational (non-gating) checks."""

    elapsed_seconds: float = 0.0
    source_media: MediaDescriptor | None = None
    converted_media: MediaDescriptor | None = None
    quality: QualityMetrics | None = None

    @property
    def name(self) -> str:
        return self.converted_path.name

    @property
    def source_found(self) -> bool:
        return self.source_path is not None

    @property
    def passed(self) -> bool:
        return aggregate_passed(self.checks, self.mode)

    def check(self, name: CheckName) -> CheckResult | None:
        """Return the result for *name*, or ``None`` when it was not run."""
        return next((c for c in self.checks if c.name is name), None)


@dataclass(frozen=True, slots=True)
class RunSummary:
    total: int
    succeeded: int
    failed: int
    errored: int

    @classmethod
    def from_verdicts(cls, verdicts: Iterable[Verdict]) -> RunSummary:
        statuses = [v.status for v in verdicts]
        return cls(
            total=len(statuses),
            succeeded=statuses.count(VerdictStatus.SUCCESS),
            failed=statuses.count(VerdictStatus.FAILED),
            errored=statuses.count(VerdictStatus.ERROR),
        )

    @property
    def all_succeeded(self) -> bool:
        return self.succeeded == self.total


@dataclass(frozen=True, slots=True)
class RunReport:
    """Ordered verdicts of one run (discovery order) plus summary counts."""

    verdicts: tuple[Verdict, ...]
    summary: RunSummary
    cancelled: bool = False


# ---------------------------------------------------------------------------
# Analyzer records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class QualityRecord:
    """Compression and quality metrics for one converted file.

    Undefined metrics (zero or missing denominators) are ``None``.
    """

    name: str
    source_size: int
    converted_size: int
    source_bitrate_bps: int | None
    converted_bitrate_bps: int | None
    size_reduction_pct: float | None
    compression_ratio: float | None
    bitrate_reduction_pct: float | None
    vmaf: float | None
    psnr: float | None
    ssim: float | None
    quality_per_bit: float | None


@dataclass(frozen=True, slots=True)
class AnalysisFailure:
    name: str
    reason: str


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    file_count: int
    total_bytes_saved: int
    avg_size_reduction_pct: float | None
    avg_compression_ratio: float | None
    avg_vmaf: float | None
    avg_psnr: float | None
    avg_ssim: float | None
