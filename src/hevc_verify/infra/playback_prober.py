"""ffmpeg-backed implementation of :class:`~hevc_verify.core.protocols.PlaybackProber`."""

from __future__ import annotations

import logging
from pathlib import Path

from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.exceptions import ToolTimeoutError

logger = logging.getLogger(__name__)


class FfmpegPlaybackProber:
    """Decode the first seconds of a file to the null muxer.

    A smoke test only: it catches unreadable headers, broken indexes and
    undecodable streams, nothing about quality.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        ffmpeg: str = "ffmpeg",
        timeout: float | None = None,
    ) -> None:
        self._runner = runner
        self._ffmpeg = ffmpeg
        self._timeout = timeout

    def build_command(self, path: Path, duration_seconds: float) -> list[str]:
        return [
            self._ffmpeg,
            "-hide_banner",
            "-v", "error",
            "-t", f"{duration_seconds:g}",
            "-i", str(path),
            "-f", "null",
            "-",
        ]

    def probe_playback(self, path: Path, duration_seconds: float = 10) -> bool:
        """Return ``True`` iff the bounded decode exits with status 0.

        A decode that hangs past the timeout counts as a failed decode.
        ``ToolNotFoundError`` / ``ToolInvocationError`` propagate.
        """
        try:
            result = self._runner.run(
                self.build_command(path, duration_seconds),
                timeout=self._timeout,
            )
        except ToolTimeoutError:
            logger.warning("Playback test of %s timed out", path.name)
            return False
        if not result.ok:
            logger.debug("Playback test of %s failed: %s", path.name, result.stderr.strip())
        return result.ok
