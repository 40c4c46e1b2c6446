"""Parsers for ffprobe / ffmpeg output.

Each parser takes raw tool output and either returns a typed value or
raises the matching typed error.  None of them ever substitutes a
default for a missing or malformed field.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from hevc_verify.core.models import MediaDescriptor, QualityMetrics
from hevc_verify.exceptions import HashError, ProbeError, ScoreError

_VMAF_SCORE_RE = re.compile(r"VMAF score\s*[:=]\s*([-+]?\d+(?:\.\d+)?)", re.IGNORECASE)
_SHA256_RE = re.compile(r"^SHA256=([0-9a-fA-F]{64})\s*$", re.MULTILINE)
_MISSING_STREAM_SIGNALS: tuple[str, ...] = (
    "matches no streams",
    "does not contain any stream",
    "output file #0 does not contain any stream",
)


# ---------------------------------------------------------------------------
# ffprobe
# ---------------------------------------------------------------------------

def _optional_int(value: Any) -> int | None:
    """ffprobe reports unknown numeric fields as missing or ``"N/A"``."""
    if value is None or value == "N/A" or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _required_number(raw: dict[str, Any], key: str, label: str) -> float:
    value = raw.get(key)
    if value is None or value == "N/A":
        raise ProbeError(f"ffprobe output for {label} has no {key}.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ProbeError(f"ffprobe output for {label} has invalid {key}: {value!r}") from None
    if not math.isfinite(number):
        raise ProbeError(f"ffprobe output for {label} has invalid {key}: {value!r}")
    return number


def parse_probe_output(stdout: str, *, label: str = "file") -> MediaDescriptor:
    """Parse ``ffprobe -of json`` output into a :class:`MediaDescriptor`.

    Expects the first video stream in ``streams`` and the container
    duration in ``format``.

    Raises
    ------
    ProbeError
        On non-JSON output, zero streams, or missing/invalid required
        fields (codec name, dimensions, duration).
    """
    try:
        data = json.loads(stdout)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ProbeError(f"ffprobe returned unparsable output for {label}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProbeError(f"ffprobe returned an unexpected structure for {label}.")

    streams = data.get("streams")
    if not isinstance(streams, list) or not streams or not isinstance(streams[0], dict):
        raise ProbeError(f"ffprobe reported no video stream for {label}.")
    stream: dict[str, Any] = streams[0]
    fmt = data.get("format")
    container: dict[str, Any] = fmt if isinstance(fmt, dict) else {}

    codec = stream.get("codec_name")
    if not isinstance(codec, str) or not codec:
        raise ProbeError(f"ffprobe output for {label} has no codec_name.")

    width = int(_required_number(stream, "width", label))
    height = int(_required_number(stream, "height", label))
    if width <= 0 or height <= 0:
        raise ProbeError(f"ffprobe output for {label} has invalid dimensions {width}x{height}.")

    duration = _required_number(container, "duration", label)
    if duration < 0:
        raise ProbeError(f"ffprobe output for {label} has negative duration {duration}.")

    bitrate = _optional_int(stream.get("bit_rate"))
    if bitrate is None:
        bitrate = _optional_int(container.get("bit_rate"))

    return MediaDescriptor(
        codec_name=codec,
        width=width,
        height=height,
        duration_seconds=duration,
        frame_count=_optional_int(stream.get("nb_frames")),
        bitrate_bps=bitrate,
    )


# ---------------------------------------------------------------------------
# Stream hash
# ---------------------------------------------------------------------------

def is_missing_stream(stderr: str) -> bool:
    """Return ``True`` when ffmpeg stderr says the stream map matched nothing."""
    lowered = stderr.lower()
    return any(signal in lowered for signal in _MISSING_STREAM_SIGNALS)


def parse_hash_output(stdout: str) -> str:
    """Extract the lowercase hex digest from ``-f hash -hash sha256`` output."""
    match = _SHA256_RE.search(stdout)
    if match is None:
        raise HashError("ffmpeg hash output contained no SHA256 digest.")
    return match.group(1).lower()


# ---------------------------------------------------------------------------
# VMAF / PSNR / SSIM
# ---------------------------------------------------------------------------

def parse_vmaf_score(text: str) -> float:
    """Return the **last** ``VMAF score: NN.NN`` value found in *text*."""
    matches = _VMAF_SCORE_RE.findall(text)
    if not matches:
        raise ScoreError("No VMAF score line found in ffmpeg output.")
    return float(matches[-1])


def _pooled_mean(pooled: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        entry = pooled.get(key)
        if isinstance(entry, dict) and isinstance(entry.get("mean"), (int, float)):
            return float(entry["mean"])
    return None


def parse_vmaf_log(text: str) -> QualityMetrics:
    """Parse a libvmaf JSON log into :class:`QualityMetrics`.

    Reads ``pooled_metrics`` (libvmaf 2.x) and falls back to the
    ``aggregate`` block written by libvmaf 1.x.

    Raises
    ------
    ScoreError
        When the log is not JSON or carries no aggregate VMAF value.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ScoreError(f"VMAF log is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ScoreError("VMAF log has an unexpected structure.")

    pooled = data.get("pooled_metrics")
    if isinstance(pooled, dict):
        vmaf = _pooled_mean(pooled, "vmaf")
        if vmaf is not None:
            return QualityMetrics(
                vmaf=vmaf,
                psnr=_pooled_mean(pooled, "psnr_y", "psnr"),
                ssim=_pooled_mean(pooled, "float_ssim", "ssim"),
            )

    aggregate = data.get("aggregate")
    if isinstance(aggregate, dict) and isinstance(aggregate.get("VMAF_score"), (int, float)):
        psnr = aggregate.get("PSNR_score")
        ssim = aggregate.get("SSIM_score")
        return QualityMetrics(
            vmaf=float(aggregate["VMAF_score"]),
            psnr=float(psnr) if isinstance(psnr, (int, float)) else None,
            ssim=float(ssim) if isinstance(ssim, (int, float)) else None,
        )

    raise ScoreError("VMAF log contains no aggregate VMAF score.")
