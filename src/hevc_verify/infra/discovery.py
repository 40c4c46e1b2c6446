"""Infrastructure: locate converted files and match them to their sources.

Converted outputs are recognised by a marker in the file stem (``_x265``
by default).  The source stem is the converted stem with the marker
removed, e.g. ``Movie_x265.mkv`` → ``Movie.*``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hevc_verify.core.models import FilePair
from hevc_verify.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {".mkv", ".mp4", ".mov", ".avi", ".m4v", ".ts", ".webm"},
)


def is_video_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in VIDEO_EXTENSIONS


def source_stem_for(converted: Path, marker: str) -> str:
    """Strip the last occurrence of *marker* from the converted stem."""
    stem = converted.stem
    head, sep, tail = stem.rpartition(marker)
    if not sep:
        return stem
    return head + tail


def find_converted_files(converted_dir: Path, marker: str) -> list[Path]:
    """Video files in *converted_dir* whose stem contains *marker*, sorted by name."""
    return sorted(
        (p for p in converted_dir.iterdir() if is_video_file(p) and marker in p.stem),
        key=lambda p: p.name,
    )


def find_source(source_dir: Path, converted: Path, marker: str) -> Path | None:
    """Return the first (by name) source video with the matching stem."""
    stem = source_stem_for(converted, marker)
    candidates = sorted(
        (
            p for p in source_dir.iterdir()
            if is_video_file(p) and p.stem == stem and p != converted
        ),
        key=lambda p: p.name,
    )
    return candidates[0] if candidates else None


def discover_pairs(source_dir: Path, converted_dir: Path, marker: str = "_x265") -> list[FilePair]:
    """Enumerate converted files and resolve each to its source.

    Unmatched converted files are still returned (with ``source=None``)
    so they appear in the report as errors.

    Raises
    ------
    ConfigurationError
        When either directory does not exist or *marker* is empty.
    """
    if not marker:
        raise ConfigurationError("Converted-file marker must not be empty.")
    for label, directory in (("Source", source_dir), ("Converted", converted_dir)):
        if not directory.is_dir():
            raise ConfigurationError(f"{label} directory not found: {directory}")

    pairs = [
        FilePair(converted=converted, source=find_source(source_dir, converted, marker))
        for converted in find_converted_files(converted_dir, marker)
    ]
    matched = sum(1 for p in pairs if p.source is not None)
    logger.info("Discovered %d converted file(s), %d with a source", len(pairs), matched)
    return pairs
