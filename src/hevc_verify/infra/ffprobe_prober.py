"""ffprobe-backed implementation of :class:`~hevc_verify.core.protocols.MediaProber`."""

from __future__ import annotations

from pathlib import Path

from hevc_verify.core.models import MediaDescriptor
from hevc_verify.core.parsers import parse_probe_output
from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.exceptions import ProbeError, ToolTimeoutError

_SHOW_ENTRIES = "stream=codec_name,width,height,nb_frames,bit_rate:format=duration,bit_rate"


class FfprobeMediaProber:
    """Probe the first video stream and the container duration.

    Parameters
    ----------
    runner:
        Process runner used to invoke ffprobe.
    ffprobe:
        Binary name or path.
    timeout:
        Per-call timeout in seconds.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        ffprobe: str = "ffprobe",
        timeout: float | None = None,
    ) -> None:
        self._runner = runner
        self._ffprobe = ffprobe
        self._timeout = timeout

    def build_command(self, path: Path) -> list[str]:
        return [
            self._ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", _SHOW_ENTRIES,
            "-of", "json",
            str(path),
        ]

    def probe(self, path: Path) -> MediaDescriptor:
        """Return the :class:`MediaDescriptor` for *path*.

        Raises
        ------
        ProbeError
            When ffprobe exits non-zero, times out, or its output is
            unusable.  ``ToolNotFoundError`` propagates unchanged.
        """
        try:
            result = self._runner.run(self.build_command(path), timeout=self._timeout)
        except ToolTimeoutError as exc:
            raise ProbeError(f"{path.name}: {exc}") from exc
        if not result.ok:
            message = result.stderr.strip().splitlines()[-1:] or ["ffprobe error"]
            raise ProbeError(f"ffprobe failed for {path.name} (exit {result.returncode}): {message[0]}")
        return parse_probe_output(result.stdout, label=path.name)
