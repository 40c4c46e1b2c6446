"""Infrastructure: tool detection, VMAF model lookup and run preconditions.

Locates ffmpeg/ffprobe on the system PATH, resolves the VMAF model
asset, and raises :class:`~hevc_verify.exceptions.PreconditionError`
subclasses before a run starts when the environment cannot support it.

Rules
-----
* Binary detection via :func:`shutil.which` only.
* No automatic installation.
* No ``print()``: callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from hevc_verify.core.protocols import ProcessRunner
from hevc_verify.exceptions import (
    FfmpegNotFoundError,
    PreconditionError,
    ToolInvocationError,
    VmafModelNotFoundError,
)

VMAF_MODEL_ENV: str = "HEVC_VERIFY_VMAF_MODEL"
"""Environment variable naming the VMAF model file."""

DEFAULT_VMAF_MODEL_LOCATIONS: tuple[Path, ...] = (
    Path("/usr/share/model/vmaf_v0.6.1.json"),
    Path("/usr/local/share/model/vmaf_v0.6.1.json"),
    Path("/opt/homebrew/share/libvmaf/model/vmaf_v0.6.1.json"),
)

REQUIRED_TOOLS: tuple[str, ...] = ("ffmpeg", "ffprobe")


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of a binary detection probe.

    Attributes
    ----------
    name : str
        Binary name that was searched for.
    found : bool
        Whether the binary was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing ffmpeg on the current
        platform.  Empty when the binary is already present.
    """

    name: str
    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str = "ffmpeg") -> ToolStatus:
    """Probe the system for *name*.

    Returns a :class:`ToolStatus` regardless of whether the binary is
    present; the caller decides whether to abort or merely warn.
    """
    result = shutil.which(name)

    if result is not None:
        resolved = Path(result).resolve()
        return ToolStatus(
            name=name,
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(),
    )


def require_tools(names: Sequence[str] = REQUIRED_TOOLS) -> dict[str, Path]:
    """Locate every binary in *names* or raise :class:`FfmpegNotFoundError`.

    Returns a mapping of binary name to resolved path.
    """
    found: dict[str, Path] = {}
    missing: list[ToolStatus] = []
    for name in names:
        status = detect_tool(name)
        if status.found and status.path is not None:
            found[name] = status.path
        else:
            missing.append(status)

    if missing:
        commands = missing[0].install_commands
        hint_lines: list[str] = []
        if commands:
            hint_lines.append("Install ffmpeg using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in commands)
        raise FfmpegNotFoundError(
            f"{', '.join(s.name for s in missing)} not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return found


# ---------------------------------------------------------------------------
# libvmaf / VMAF model
# ---------------------------------------------------------------------------

def ffmpeg_has_libvmaf(runner: ProcessRunner, ffmpeg: str = "ffmpeg") -> bool:
    """Return ``True`` when ``ffmpeg -filters`` lists ``libvmaf``."""
    try:
        result = runner.run([ffmpeg, "-hide_banner", "-filters"], timeout=30)
    except ToolInvocationError:
        return False
    if not result.ok:
        return False
    for line in result.stdout.splitlines():
        parts = line.split()
        # Lines look like: " ... libvmaf           VV->V      Calculate the VMAF ..."
        if len(parts) >= 2 and parts[1] == "libvmaf":
            return True
    return False


def require_libvmaf(runner: ProcessRunner, ffmpeg: str = "ffmpeg") -> None:
    if not ffmpeg_has_libvmaf(runner, ffmpeg):
        raise PreconditionError(
            "ffmpeg was built without the libvmaf filter.",
            hint="Install an ffmpeg build with --enable-libvmaf.",
        )


def resolve_vmaf_model(explicit: Path | None = None) -> Path | None:
    """Pick the VMAF model path: explicit > environment > known locations.

    Returns ``None`` when nothing is configured and no default exists.
    """
    if explicit is not None:
        return explicit
    env_value = os.environ.get(VMAF_MODEL_ENV)
    if env_value:
        return Path(env_value)
    return next((p for p in DEFAULT_VMAF_MODEL_LOCATIONS if p.is_file()), None)


def require_vmaf_model(path: Path | None) -> Path:
    """Return *path* when it is an existing file, else raise."""
    if path is None:
        raise VmafModelNotFoundError(
            "No VMAF model configured.",
            hint=f"Pass --vmaf-model PATH or set {VMAF_MODEL_ENV}.",
        )
    if not path.is_file():
        raise VmafModelNotFoundError(
            f"VMAF model not found: {path}",
            hint="Download vmaf_v0.6.1.json from the libvmaf repository.",
        )
    return path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install Gyan.FFmpeg",
            "choco install ffmpeg-full",
        )
    if system == "linux":
        return (
            "sudo apt install ffmpeg",
            "sudo dnf install ffmpeg",
            "sudo pacman -S ffmpeg",
        )
    if system == "darwin":
        return ("brew install ffmpeg",)
    return ("Please install ffmpeg from https://ffmpeg.org/download.html",)
