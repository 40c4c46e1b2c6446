"""Tests for the pure check rules (core/checks.py).

Boundary values follow the default tolerances: 0.5 % of the source
duration and 1 % of the source frame count.
"""

from __future__ import annotations

import pytest

from hevc_verify.core import checks
from hevc_verify.core.models import CheckName

from conftest import make_media


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class TestCheckCodec:
    def test_match(self) -> None:
        result = checks.check_codec(make_media(codec_name="hevc"), "hevc")
        assert result.passed is True
        assert result.detail is None

    def test_mismatch_detail(self) -> None:
        result = checks.check_codec(make_media(codec_name="h264"), "hevc")
        assert result.passed is False
        assert result.detail == "Invalid codec: h264"

    def test_case_sensitive(self) -> None:
        assert checks.check_codec(make_media(codec_name="HEVC"), "hevc").passed is False


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------

class TestCheckDuration:
    @pytest.mark.parametrize("converted", [200.0, 201.0, 199.0])
    def test_within_tolerance(self, converted: float) -> None:
        result = checks.check_duration(
            make_media(duration_seconds=200.0),
            make_media(duration_seconds=converted),
            0.005,
        )
        assert result.passed is True

    def test_just_outside_tolerance(self) -> None:
        result = checks.check_duration(
            make_media(duration_seconds=200.0),
            make_media(duration_seconds=201.0001),
            0.005,
        )
        assert result.passed is False
        assert result.detail == "Duration mismatch: Source 200.000s vs Converted 201.000s"

    def test_zero_source_duration_is_indeterminate(self) -> None:
        result = checks.check_duration(
            make_media(duration_seconds=0.0),
            make_media(duration_seconds=0.0),
            0.005,
        )
        assert result.passed is False
        assert result.detail is not None
        assert "indeterminate" in result.detail

    def test_value_is_absolute_difference(self) -> None:
        result = checks.check_duration(
            make_media(duration_seconds=100.0),
            make_media(duration_seconds=100.25),
            0.005,
        )
        assert result.value == pytest.approx(0.25)

    @pytest.mark.parametrize(
        ("source", "converted"),
        [(10.0, 10.05), (0.7, 0.7035), (120.0, 120.6), (30.0, 29.85), (1000.0, 1005.0)],
    )
    def test_exact_boundary_passes_despite_float_noise(
        self, source: float, converted: float,
    ) -> None:
        result = checks.check_duration(
            make_media(duration_seconds=source),
            make_media(duration_seconds=converted),
            0.005,
        )
        assert result.passed is True
        assert result.detail is None

    def test_within_relative_tolerance_rejects_real_overshoot(self) -> None:
        assert checks.within_relative_tolerance(10.0, 10.0501, 0.005) is False
        assert checks.within_relative_tolerance(0.7, 0.7036, 0.005) is False


# ---------------------------------------------------------------------------
# Frame count
# ---------------------------------------------------------------------------

class TestCheckFrameCount:
    @pytest.mark.parametrize(("converted", "passed"), [(1000, True), (990, True), (1010, True), (989, False)])
    def test_tolerance_boundary(self, converted: int, passed: bool) -> None:
        result = checks.check_frame_count(
            make_media(frame_count=1000),
            make_media(frame_count=converted),
            0.01,
        )
        assert result is not None
        assert result.name is CheckName.FRAME_MATCH
        assert result.passed is passed

    def test_failure_detail(self) -> None:
        result = checks.check_frame_count(
            make_media(frame_count=1000),
            make_media(frame_count=900),
            0.01,
        )
        assert result is not None
        assert result.detail == "Frame count mismatch: Source 1000 vs Converted 900"

    @pytest.mark.parametrize(("src", "conv"), [(None, 1000), (1000, None), (None, None)])
    def test_omitted_when_count_unknown(self, src: int | None, conv: int | None) -> None:
        result = checks.check_frame_count(
            make_media(frame_count=src),
            make_media(frame_count=conv),
            0.01,
        )
        assert result is None


# ---------------------------------------------------------------------------
# Hashes
# ---------------------------------------------------------------------------

class TestDigests:
    def test_equal(self) -> None:
        assert checks.digests_match("ab" * 32, "ab" * 32) is True

    def test_different(self) -> None:
        assert checks.digests_match("ab" * 32, "cd" * 32) is False

    @pytest.mark.parametrize(("a", "b"), [(None, "ab"), ("ab", None), (None, None)])
    def test_missing_never_matches(self, a: str | None, b: str | None) -> None:
        assert checks.digests_match(a, b) is False


class TestCheckHash:
    def test_match(self) -> None:
        result = checks.check_hash(CheckName.AUDIO_HASH_MATCH, "a" * 64, "a" * 64)
        assert result.passed is True
        assert result.detail is None

    def test_mismatch(self) -> None:
        result = checks.check_hash(CheckName.VIDEO_HASH_MATCH, "a" * 64, "b" * 64)
        assert result.passed is False
        assert result.detail == "Video stream hash mismatch"

    def test_unavailable_reason(self) -> None:
        result = checks.check_hash(
            CheckName.AUDIO_HASH_MATCH,
            None,
            None,
            failure_reason="no audio stream in source file",
        )
        assert result.passed is False
        assert result.detail == "Audio stream hash unavailable: no audio stream in source file"


# ---------------------------------------------------------------------------
# Playback / VMAF
# ---------------------------------------------------------------------------

class TestCheckPlayback:
    def test_ok(self) -> None:
        assert checks.check_playback(True, 10).passed is True

    def test_failed_detail(self) -> None:
        result = checks.check_playback(False, 10)
        assert result.passed is False
        assert "Playback test failed" in (result.detail or "")


class TestCheckVmaf:
    def test_at_threshold_passes(self) -> None:
        result = checks.check_vmaf(90.0, 90.0)
        assert result.passed is True
        assert result.value == 90.0

    def test_below_threshold(self) -> None:
        result = checks.check_vmaf(88.0, 90.0)
        assert result.passed is False
        assert result.value == 88.0
        assert result.detail == "VMAF score below threshold: 88.00 < 90.00"

    def test_unavailable_has_no_value(self) -> None:
        result = checks.vmaf_unavailable("libvmaf crashed")
        assert result.passed is False
        assert result.value is None
        assert result.detail == "VMAF scoring failed: libvmaf crashed"
