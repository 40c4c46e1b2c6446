"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so the verification engine can be driven entirely by
fakes in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from hevc_verify.core.models import MediaDescriptor, QualityMetrics, Segment, StreamType


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Captured outcome of one external process."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Contract for running an external tool to completion."""

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> ProcessResult:
        """Run *args* and capture stdout/stderr/exit code.

        Raises
        ------
        ToolNotFoundError
            When ``args[0]`` cannot be executed.
        ToolTimeoutError
            When the process outlives *timeout* (it is killed).
        ToolInvocationError
            For any other OS-level launch failure.
        """
        ...  # pragma: no cover


class MediaProber(Protocol):
    """Structural probe of the first video stream plus container duration."""

    def probe(self, path: Path) -> MediaDescriptor:
        """Raises :class:`~hevc_verify.exceptions.ProbeError` on failure."""
        ...  # pragma: no cover


class StreamHasher(Protocol):
    """SHA-256 digest over the first stream of a given type."""

    def hash_stream(self, path: Path, stream_type: StreamType) -> str:
        """Return the hex digest.

        Raises
        ------
        StreamNotFoundError
            When the file has no stream of *stream_type*.
        HashError
            For any other failure.
        """
        ...  # pragma: no cover


class QualityScorer(Protocol):
    """Perceptual comparison of a converted file against its source."""

    def score(
        self,
        source: Path,
        converted: Path,
        *,
        segment: Segment | None = None,
        include_psnr_ssim: bool = False,
    ) -> QualityMetrics:
        """Raises :class:`~hevc_verify.exceptions.ScoreError` when no score is produced."""
        ...  # pragma: no cover


class PlaybackProber(Protocol):
    """Bounded decode smoke test."""

    def probe_playback(self, path: Path, duration_seconds: float = 10) -> bool:
        """Return ``True`` iff the decode exits cleanly.

        Only raises when the decoder itself cannot be invoked.
        """
        ...  # pragma: no cover


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool:
        ...  # pragma: no cover
