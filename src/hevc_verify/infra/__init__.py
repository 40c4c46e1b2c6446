"""Infrastructure layer: external system integration.

This layer wraps all interaction with ffmpeg, ffprobe and the file
system.  Every raw OS or subprocess exception must be caught here and
re-raised as a :class:`~hevc_verify.exceptions.HevcVerifyError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from hevc_verify.infra.discovery import discover_pairs
from hevc_verify.infra.ffmpeg_detector import ToolStatus, detect_tool, require_tools
from hevc_verify.infra.ffprobe_prober import FfprobeMediaProber
from hevc_verify.infra.playback_prober import FfmpegPlaybackProber
from hevc_verify.infra.process_runner import SubprocessRunner
from hevc_verify.infra.quality_scorer import FfmpegQualityScorer
from hevc_verify.infra.stream_hasher import FfmpegStreamHasher

__all__: list[str] = [
    "FfmpegPlaybackProber",
    "FfmpegQualityScorer",
    "FfmpegStreamHasher",
    "FfprobeMediaProber",
    "SubprocessRunner",
    "ToolStatus",
    "detect_tool",
    "discover_pairs",
    "require_tools",
]
