"""ffmpeg/libvmaf-backed implementation of :class:`~hevc_verify.core.protocols.QualityScorer`.

The converted file is fed as input 0 ("distorted") and the source as
input 1 ("reference").  libvmaf writes a JSON log to a temporary file
that is unique per call and removed on every exit path.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from hevc_verify.core.models import QualityMetrics, Segment
from hevc_verify.core.parsers import parse_vmaf_log, parse_vmaf_score
from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.exceptions import ScoreError, ToolTimeoutError

logger = logging.getLogger(__name__)

_EXTRA_FEATURES = "name=psnr|name=float_ssim"


def escape_filter_value(value: str) -> str:
    """Escape a path for use inside an ffmpeg filtergraph option value."""
    return value.replace("\\", "/").replace(":", "\\:").replace("'", "\\'")


class FfmpegQualityScorer:
    """Score a converted file against its source with libvmaf.

    Parameters
    ----------
    runner:
        Process runner used to invoke ffmpeg.
    model_path:
        VMAF model asset on disk.  Its existence is checked once at
        startup by :func:`~hevc_verify.infra.ffmpeg_detector.require_vmaf_model`.
    ffmpeg:
        Binary name or path.
    timeout:
        Per-call timeout in seconds.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        model_path: Path,
        *,
        ffmpeg: str = "ffmpeg",
        timeout: float | None = None,
    ) -> None:
        self._runner = runner
        self._model_path = model_path
        self._ffmpeg = ffmpeg
        self._timeout = timeout

    def build_filter(self, log_path: Path, *, include_psnr_ssim: bool) -> str:
        options = [
            f"model=path={escape_filter_value(str(self._model_path))}",
            "log_fmt=json",
            f"log_path={escape_filter_value(str(log_path))}",
        ]
        if include_psnr_ssim:
            options.append(f"feature={_EXTRA_FEATURES}")
        return "[0:v][1:v]libvmaf=" + ":".join(options)

    def build_command(
        self,
        source: Path,
        converted: Path,
        log_path: Path,
        *,
        segment: Segment | None = None,
        include_psnr_ssim: bool = False,
    ) -> list[str]:
        window: list[str] = []
        if segment is not None:
            window = [
                "-ss", f"{segment.start_seconds:g}",
                "-t", f"{segment.duration_seconds:g}",
            ]
        return [
            self._ffmpeg,
            "-hide_banner",
            "-nostdin",
            *window, "-i", str(converted),
            *window, "-i", str(source),
            "-lavfi", self.build_filter(log_path, include_psnr_ssim=include_psnr_ssim),
            "-f", "null",
            "-",
        ]

    def score(
        self,
        source: Path,
        converted: Path,
        *,
        segment: Segment | None = None,
        include_psnr_ssim: bool = False,
    ) -> QualityMetrics:
        """Return VMAF (plus PSNR/SSIM when requested).

        Raises
        ------
        ScoreError
            On non-zero exit, timeout, or when no aggregate score can be
            read from either the JSON log or ffmpeg's output.
        """
        fd, raw_log_path = tempfile.mkstemp(prefix="hevc-verify-vmaf-", suffix=".json")
        os.close(fd)
        log_path = Path(raw_log_path)
        try:
            cmd = self.build_command(
                source,
                converted,
                log_path,
                segment=segment,
                include_psnr_ssim=include_psnr_ssim,
            )
            try:
                result = self._runner.run(cmd, timeout=self._timeout)
            except ToolTimeoutError as exc:
                raise ScoreError(f"{converted.name}: {exc}") from exc
            if not result.ok:
                detail = result.stderr.strip().splitlines()[-1:] or ["ffmpeg error"]
                raise ScoreError(
                    f"VMAF comparison of {converted.name} failed "
                    f"(exit {result.returncode}): {detail[0]}",
                )
            return self._read_metrics(log_path, result.stderr)
        finally:
            log_path.unlink(missing_ok=True)

    @staticmethod
    def _read_metrics(log_path: Path, stderr: str) -> QualityMetrics:
        log_text = log_path.read_text(encoding="utf-8") if log_path.exists() else ""
        if log_text.strip():
            try:
                return parse_vmaf_log(log_text)
            except ScoreError as exc:
                logger.debug("Falling back to ffmpeg output for VMAF: %s", exc)
        return QualityMetrics(vmaf=parse_vmaf_score(stderr))
