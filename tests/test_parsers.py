"""Tests for ffprobe / ffmpeg output parsers (core/parsers.py).

Focus on malformed input: every parser must raise its typed error
rather than fabricate a value.
"""

from __future__ import annotations

import json

import pytest

from hevc_verify.core.parsers import (
    is_missing_stream,
    parse_hash_output,
    parse_probe_output,
    parse_vmaf_log,
    parse_vmaf_score,
)
from hevc_verify.exceptions import HashError, ProbeError, ScoreError


def _probe_json(stream: dict | None = None, fmt: dict | None = None) -> str:
    stream_defaults = {
        "codec_name": "hevc",
        "width": 1920,
        "height": 1080,
        "nb_frames": "4800",
        "bit_rate": "3500000",
    }
    if stream is not None:
        stream_defaults.update(stream)
    fmt_defaults = {"duration": "200.200000", "bit_rate": "4000000"}
    if fmt is not None:
        fmt_defaults.update(fmt)
    return json.dumps({"streams": [stream_defaults], "format": fmt_defaults})


# ---------------------------------------------------------------------------
# parse_probe_output
# ---------------------------------------------------------------------------

class TestParseProbeOutput:
    def test_happy_path(self) -> None:
        media = parse_probe_output(_probe_json())
        assert media.codec_name == "hevc"
        assert (media.width, media.height) == (1920, 1080)
        assert media.duration_seconds == pytest.approx(200.2)
        assert media.frame_count == 4800
        assert media.bitrate_bps == 3_500_000

    def test_nb_frames_not_available(self) -> None:
        media = parse_probe_output(_probe_json({"nb_frames": "N/A"}))
        assert media.frame_count is None

    def test_nb_frames_absent(self) -> None:
        data = json.loads(_probe_json())
        del data["streams"][0]["nb_frames"]
        assert parse_probe_output(json.dumps(data)).frame_count is None

    def test_bitrate_falls_back_to_container(self) -> None:
        media = parse_probe_output(_probe_json({"bit_rate": "N/A"}))
        assert media.bitrate_bps == 4_000_000

    def test_bitrate_unknown(self) -> None:
        data = json.loads(_probe_json())
        del data["streams"][0]["bit_rate"]
        del data["format"]["bit_rate"]
        assert parse_probe_output(json.dumps(data)).bitrate_bps is None

    def test_not_json(self) -> None:
        with pytest.raises(ProbeError, match="unparsable"):
            parse_probe_output("Invalid data found when processing input")

    def test_no_streams(self) -> None:
        with pytest.raises(ProbeError, match="no video stream"):
            parse_probe_output(json.dumps({"streams": [], "format": {"duration": "1.0"}}))

    def test_missing_codec(self) -> None:
        data = json.loads(_probe_json())
        del data["streams"][0]["codec_name"]
        with pytest.raises(ProbeError, match="codec_name"):
            parse_probe_output(json.dumps(data))

    def test_missing_duration(self) -> None:
        data = json.loads(_probe_json())
        del data["format"]["duration"]
        with pytest.raises(ProbeError, match="duration"):
            parse_probe_output(json.dumps(data), label="Movie.mkv")

    def test_duration_not_available(self) -> None:
        with pytest.raises(ProbeError):
            parse_probe_output(_probe_json(fmt={"duration": "N/A"}))

    def test_zero_width(self) -> None:
        with pytest.raises(ProbeError, match="dimensions"):
            parse_probe_output(_probe_json({"width": 0}))

    def test_label_in_message(self) -> None:
        with pytest.raises(ProbeError, match="Movie.mkv"):
            parse_probe_output("[]", label="Movie.mkv")


# ---------------------------------------------------------------------------
# Stream hash
# ---------------------------------------------------------------------------

class TestParseHashOutput:
    def test_extracts_lowercase_digest(self) -> None:
        digest = "AB" * 32
        assert parse_hash_output(f"SHA256={digest}\n") == digest.lower()

    def test_ignores_noise(self) -> None:
        digest = "0f" * 32
        assert parse_hash_output(f"some banner\nSHA256={digest}\n") == digest

    @pytest.mark.parametrize("text", ["", "SHA256=abc", "MD5=" + "a" * 32])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(HashError):
            parse_hash_output(text)


class TestIsMissingStream:
    def test_stream_map_no_match(self) -> None:
        assert is_missing_stream("Stream map '0:a:0' matches no streams.") is True

    def test_other_error(self) -> None:
        assert is_missing_stream("Invalid data found when processing input") is False


# ---------------------------------------------------------------------------
# VMAF
# ---------------------------------------------------------------------------

class TestParseVmafScore:
    def test_last_line_wins(self) -> None:
        text = "VMAF score: 91.20\n...\nVMAF score: 93.45\n"
        assert parse_vmaf_score(text) == pytest.approx(93.45)

    def test_equals_form(self) -> None:
        assert parse_vmaf_score("[libvmaf @ 0x1] VMAF score = 95.1") == pytest.approx(95.1)

    def test_missing(self) -> None:
        with pytest.raises(ScoreError):
            parse_vmaf_score("frame=  100 fps=25")


class TestParseVmafLog:
    def test_pooled_metrics(self) -> None:
        log = {
            "pooled_metrics": {
                "vmaf": {"min": 80.0, "max": 99.0, "mean": 94.5},
                "psnr_y": {"mean": 41.2},
                "float_ssim": {"mean": 0.987},
            },
        }
        metrics = parse_vmaf_log(json.dumps(log))
        assert metrics.vmaf == pytest.approx(94.5)
        assert metrics.psnr == pytest.approx(41.2)
        assert metrics.ssim == pytest.approx(0.987)

    def test_vmaf_only(self) -> None:
        metrics = parse_vmaf_log(json.dumps({"pooled_metrics": {"vmaf": {"mean": 90.0}}}))
        assert metrics.psnr is None
        assert metrics.ssim is None

    def test_legacy_aggregate(self) -> None:
        log = {"aggregate": {"VMAF_score": 92.0, "PSNR_score": 40.0}}
        metrics = parse_vmaf_log(json.dumps(log))
        assert metrics.vmaf == 92.0
        assert metrics.psnr == 40.0
        assert metrics.ssim is None

    def test_not_json(self) -> None:
        with pytest.raises(ScoreError):
            parse_vmaf_log("not json")

    def test_no_vmaf(self) -> None:
        with pytest.raises(ScoreError):
            parse_vmaf_log(json.dumps({"pooled_metrics": {"psnr_y": {"mean": 40.0}}}))
