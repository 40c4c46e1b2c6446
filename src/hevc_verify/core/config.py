"""Run configuration passed explicitly into the core services.

There is no module-level mutable state anywhere in hevc-verify; the CLI
builds one :class:`VerificationConfig` per run and hands it to the
engine and adapters.
"""

from __future__ import annotations

from dataclasses import dataclass

from hevc_verify.core.models import Segment, VerificationMode
from hevc_verify.exceptions import ConfigurationError

DEFAULT_TARGET_CODEC: str = "hevc"
DEFAULT_VMAF_THRESHOLD: float = 90.0
VMAF_THRESHOLD_RANGE: tuple[float, float] = (80.0, 100.0)
DEFAULT_DURATION_TOLERANCE: float = 0.005
DEFAULT_FRAME_TOLERANCE: float = 0.01
DEFAULT_PLAYBACK_SECONDS: float = 10.0
DEFAULT_CONVERTED_MARKER: str = "_x265"


@dataclass(frozen=True, slots=True)
class VerificationConfig:
    """Parameters that shape one verification run."""

    mode: VerificationMode = VerificationMode.BASIC
    target_codec: str = DEFAULT_TARGET_CODEC
    vmaf_threshold: float = DEFAULT_VMAF_THRESHOLD
    duration_tolerance: float = DEFAULT_DURATION_TOLERANCE
    """Relative tolerance, as a fraction of the source duration."""

    frame_tolerance: float = DEFAULT_FRAME_TOLERANCE
    """Relative tolerance, as a fraction of the source frame count."""

    playback_seconds: float = DEFAULT_PLAYBACK_SECONDS
    vmaf_segment: Segment | None = None
    include_psnr_ssim: bool = False
    timeout_seconds: float | None = None
    """Per-invocation timeout for every external tool call."""

    def __post_init__(self) -> None:
        low, high = VMAF_THRESHOLD_RANGE
        if not low <= self.vmaf_threshold <= high:
            raise ConfigurationError(
                f"VMAF threshold must be between {low:g} and {high:g}, "
                f"got {self.vmaf_threshold:g}.",
            )
        if self.duration_tolerance < 0 or self.frame_tolerance < 0:
            raise ConfigurationError("Tolerances must not be negative.")
        if self.playback_seconds <= 0:
            raise ConfigurationError("Playback test duration must be positive.")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("Timeout must be positive.")
        if not self.target_codec:
            raise ConfigurationError("Target codec must not be empty.")
