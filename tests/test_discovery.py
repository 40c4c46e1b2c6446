"""Tests for converted/source file discovery (infra/discovery.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from hevc_verify.exceptions import ConfigurationError
from hevc_verify.infra.discovery import (
    discover_pairs,
    find_converted_files,
    is_video_file,
    source_stem_for,
)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"\x00")


class TestSourceStem:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Movie_x265.mkv", "Movie"),
            ("Show S01E01_x265.mp4", "Show S01E01"),
            ("a_x265_b_x265.mkv", "a_x265_b"),
            ("Movie_x265_final.mkv", "Movie_final"),
            ("Plain.mkv", "Plain"),
        ],
    )
    def test_marker_removed(self, name: str, expected: str) -> None:
        assert source_stem_for(Path(name), "_x265") == expected


class TestIsVideoFile:
    def test_extensions(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.MKV", "b.txt")
        assert is_video_file(tmp_path / "a.MKV") is True
        assert is_video_file(tmp_path / "b.txt") is False

    def test_directory_is_not_video(self, tmp_path: Path) -> None:
        (tmp_path / "folder.mkv").mkdir()
        assert is_video_file(tmp_path / "folder.mkv") is False


class TestDiscoverPairs:
    def test_pairs_sorted_and_matched(self, media_dirs: tuple[Path, Path]) -> None:
        source, converted = media_dirs
        _touch(source, "b.mp4", "a.mkv", "notes.txt")
        _touch(converted, "b_x265.mkv", "a_x265.mkv", "a.nfo", "other.mkv")

        pairs = discover_pairs(source, converted)

        assert [p.converted.name for p in pairs] == ["a_x265.mkv", "b_x265.mkv"]
        assert pairs[0].source == source / "a.mkv"
        assert pairs[1].source == source / "b.mp4"

    def test_unmatched_converted_kept(self, media_dirs: tuple[Path, Path]) -> None:
        source, converted = media_dirs
        _touch(converted, "lonely_x265.mkv")

        pairs = discover_pairs(source, converted)

        assert len(pairs) == 1
        assert pairs[0].source is None

    def test_first_source_by_name_wins(self, media_dirs: tuple[Path, Path]) -> None:
        source, converted = media_dirs
        _touch(source, "a.mp4", "a.avi")
        _touch(converted, "a_x265.mkv")

        assert discover_pairs(source, converted)[0].source == source / "a.avi"

    def test_same_directory(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.mkv", "a_x265.mkv")
        pairs = discover_pairs(tmp_path, tmp_path)
        assert [(p.converted.name, p.source.name if p.source else None) for p in pairs] == [
            ("a_x265.mkv", "a.mkv"),
        ]

    def test_custom_marker(self, media_dirs: tuple[Path, Path]) -> None:
        source, converted = media_dirs
        _touch(source, "clip.mov")
        _touch(converted, "clip.hevc.mkv", "clip_x265.mkv")

        pairs = discover_pairs(source, converted, marker=".hevc")
        assert [p.converted.name for p in pairs] == ["clip.hevc.mkv"]
        assert pairs[0].source == source / "clip.mov"

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Source directory not found"):
            discover_pairs(tmp_path / "nope", tmp_path)

    def test_empty_marker(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            discover_pairs(tmp_path, tmp_path, marker="")

    def test_find_converted_ignores_unmarked(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.mkv", "a_x265.mkv")
        assert [p.name for p in find_converted_files(tmp_path, "_x265")] == ["a_x265.mkv"]
