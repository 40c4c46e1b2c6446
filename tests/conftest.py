"""Shared pytest fixtures and configuration for the hevc-verify test suite.

Guidelines
----------
* No real ffmpeg or ffprobe invocation in any test.
* Infra adapters are driven through :class:`FakeRunner`.
* Core tests must be pure: no side effects.
* Tests must not depend on OS state beyond ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from hevc_verify.core.models import MediaDescriptor
from hevc_verify.core.protocols import ProcessResult

Response = ProcessResult | BaseException | Callable[[list[str]], ProcessResult]


class FakeRunner:
    """Scripted :class:`~hevc_verify.core.protocols.ProcessRunner`.

    Responses are consumed in order; the last one repeats.  A response
    may be a :class:`ProcessResult`, an exception to raise, or a
    callable receiving the argument list.
    """

    def __init__(self, *responses: Response) -> None:
        self._responses: list[Response] = list(responses) or [ProcessResult(0, "", "")]
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []

    def run(self, args: Sequence[str], *, timeout: float | None = None) -> ProcessResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        self.timeouts.append(timeout)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(argv)
        return response


def make_media(**overrides: object) -> MediaDescriptor:
    defaults: dict[str, object] = {
        "codec_name": "hevc",
        "width": 1920,
        "height": 1080,
        "duration_seconds": 200.0,
        "frame_count": 1000,
        "bitrate_bps": 4_000_000,
    }
    defaults.update(overrides)
    return MediaDescriptor(**defaults)  # type: ignore[arg-type]


@pytest.fixture()
def fake_runner() -> Callable[..., FakeRunner]:
    """Factory fixture: ``fake_runner(ProcessResult(0, "...", ""), ...)``."""
    return FakeRunner


@pytest.fixture()
def media_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """Empty ``source`` and ``converted`` directories."""
    source = tmp_path / "source"
    converted = tmp_path / "converted"
    source.mkdir()
    converted.mkdir()
    return source, converted
