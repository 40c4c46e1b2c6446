"""hevc-verify: batch verification of HEVC transcodes.

Compares converted files against their sources with ffprobe/ffmpeg and
produces a pass/fail verdict per file.
"""

from hevc_verify.version import __version__

__all__: list[str] = ["__version__"]
