"""Pure check rules applied by the verification engine.

Every function in this module is a **pure** transformation: no I/O,
no side effects, fully deterministic.  Each rule turns measured values
into a :class:`~hevc_verify.core.models.CheckResult` whose ``detail``
is the human-readable failure message (``None`` on a clean pass).
"""

from __future__ import annotations

import math

from hevc_verify.core.models import CheckName, CheckResult, MediaDescriptor


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def check_codec(converted: MediaDescriptor, target_codec: str) -> CheckResult:
    """Exact, case-sensitive comparison against *target_codec*."""
    if converted.codec_name == target_codec:
        return CheckResult(CheckName.CODEC_VALID, True)
    return CheckResult(
        CheckName.CODEC_VALID,
        False,
        detail=f"Invalid codec: {converted.codec_name}",
    )


# ---------------------------------------------------------------------------
# Duration / frame count
# ---------------------------------------------------------------------------

def within_relative_tolerance(reference: float, measured: float, tolerance: float) -> bool:
    """``|reference - measured| <= tolerance * reference``, boundary inclusive.

    Float noise at the exact boundary (e.g. 10.0 vs 10.05 at 0.5%) still passes.
    """
    diff = abs(reference - measured)
    limit = tolerance * reference
    return diff <= limit or math.isclose(diff, limit, rel_tol=1e-9, abs_tol=1e-12)


def check_duration(
    source: MediaDescriptor,
    converted: MediaDescriptor,
    tolerance: float,
) -> CheckResult:
    """Relative duration check.  A zero source duration is indeterminate."""
    src = source.duration_seconds
    conv = converted.duration_seconds
    if src <= 0:
        return CheckResult(
            CheckName.DURATION_MATCH,
            False,
            detail=(
                f"Duration check indeterminate: Source duration is {src:.3f}s "
                f"(Converted {conv:.3f}s)"
            ),
        )
    if within_relative_tolerance(src, conv, tolerance):
        return CheckResult(CheckName.DURATION_MATCH, True, value=abs(src - conv))
    return CheckResult(
        CheckName.DURATION_MATCH,
        False,
        value=abs(src - conv),
        detail=f"Duration mismatch: Source {src:.3f}s vs Converted {conv:.3f}s",
    )


def check_frame_count(
    source: MediaDescriptor,
    converted: MediaDescriptor,
    tolerance: float,
) -> CheckResult | None:
    """Relative frame-count check.

    Returns ``None`` (check omitted) when either side lacks a frame count.
    """
    src = source.frame_count
    conv = converted.frame_count
    if src is None or conv is None:
        return None
    if within_relative_tolerance(src, conv, tolerance):
        return CheckResult(CheckName.FRAME_MATCH, True, value=float(abs(src - conv)))
    return CheckResult(
        CheckName.FRAME_MATCH,
        False,
        value=float(abs(src - conv)),
        detail=f"Frame count mismatch: Source {src} vs Converted {conv}",
    )


# ---------------------------------------------------------------------------
# Stream hashes
# ---------------------------------------------------------------------------

def digests_match(first: str | None, second: str | None) -> bool:
    """Exact digest equality; a missing digest never matches anything."""
    if first is None or second is None:
        return False
    return first == second


def check_hash(
    name: CheckName,
    source_digest: str | None,
    converted_digest: str | None,
    *,
    failure_reason: str | None = None,
) -> CheckResult:
    """Build an Audio/VideoHashMatch result.

    *failure_reason* explains why a digest is missing, when one is.
    """
    label = "Audio" if name is CheckName.AUDIO_HASH_MATCH else "Video"
    if digests_match(source_digest, converted_digest):
        return CheckResult(name, True)
    if failure_reason is not None:
        detail = f"{label} stream hash unavailable: {failure_reason}"
    else:
        detail = f"{label} stream hash mismatch"
    return CheckResult(name, False, detail=detail)


# ---------------------------------------------------------------------------
# Playback / VMAF
# ---------------------------------------------------------------------------

def check_playback(ok: bool, duration_seconds: float) -> CheckResult:
    if ok:
        return CheckResult(CheckName.PLAYBACK_OK, True)
    return CheckResult(
        CheckName.PLAYBACK_OK,
        False,
        detail=f"Playback test failed (first {duration_seconds:g}s did not decode cleanly)",
    )


def check_vmaf(score: float, threshold: float) -> CheckResult:
    if score >= threshold:
        return CheckResult(CheckName.VMAF_SCORE, True, value=score)
    return CheckResult(
        CheckName.VMAF_SCORE,
        False,
        value=score,
        detail=f"VMAF score below threshold: {score:.2f} < {threshold:.2f}",
    )


def vmaf_unavailable(reason: str) -> CheckResult:
    """A scoring failure: recorded with no value, never as a zero score."""
    return CheckResult(
        CheckName.VMAF_SCORE,
        False,
        value=None,
        detail=f"VMAF scoring failed: {reason}",
    )
