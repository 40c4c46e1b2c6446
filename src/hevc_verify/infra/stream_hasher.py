"""ffmpeg-backed implementation of :class:`~hevc_verify.core.protocols.StreamHasher`.

The first stream of the requested type is decoded into ffmpeg's ``hash``
muxer, so two files whose decoded stream content is identical hash the
same regardless of their container.
"""

from __future__ import annotations

from pathlib import Path

from hevc_verify.core.models import StreamType
from hevc_verify.core.parsers import is_missing_stream, parse_hash_output
from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.exceptions import HashError, StreamNotFoundError, ToolTimeoutError


class FfmpegStreamHasher:
    """Compute a SHA-256 digest over one stream of a file."""

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

    def build_command(self, path: Path, stream_type: StreamType) -> list[str]:
        return [
            self._ffmpeg,
            "-hide_banner",
            "-v", "error",
            "-i", str(path),
            "-map", f"0:{stream_type.selector}:0",
            "-f", "hash",
            "-hash", "sha256",
            "-",
        ]

    def hash_stream(self, path: Path, stream_type: StreamType) -> str:
        """Return the lowercase hex digest of the first *stream_type* stream.

        Raises
        ------
        StreamNotFoundError
            When *path* has no stream of that type.
        HashError
            On any other ffmpeg failure, timeout, or unparsable output.
        """
        try:
            result = self._runner.run(self.build_command(path, stream_type), timeout=self._timeout)
        except ToolTimeoutError as exc:
            raise HashError(f"{path.name}: {exc}") from exc

        if not result.ok:
            if is_missing_stream(result.stderr):
                raise StreamNotFoundError(f"{path.name} has no {stream_type.value} stream.")
            detail = result.stderr.strip().splitlines()[-1:] or ["ffmpeg error"]
            raise HashError(
                f"Hashing {stream_type.value} of {path.name} failed "
                f"(exit {result.returncode}): {detail[0]}",
            )
        return parse_hash_output(result.stdout)
