"""Custom exception hierarchy for hevc-verify.

All exceptions that cross layer boundaries must inherit from
:class:`HevcVerifyError`.  Raw OS / subprocess exceptions must NEVER
propagate beyond the infrastructure layer; they must be caught and
re-raised as a typed subclass defined here.

Hierarchy
---------
HevcVerifyError
├── ConfigurationError
├── PreconditionError
│   ├── FfmpegNotFoundError
│   └── VmafModelNotFoundError
├── ToolInvocationError
│   ├── ToolNotFoundError
│   └── ToolTimeoutError
├── ProbeError
├── HashError
│   └── StreamNotFoundError
├── ScoreError
├── SourceNotFoundError
└── ReportWriteError

Only :class:`PreconditionError` and :class:`ConfigurationError` abort a
whole run.  Everything else is contained in the verdict of the file
being processed.
"""

from __future__ import annotations


class HevcVerifyError(Exception):
    """Base exception for all hevc-verify errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Run setup -------------------------------------------------------------

class ConfigurationError(HevcVerifyError):
    """Raised when a run parameter is outside its valid range."""


class PreconditionError(HevcVerifyError):
    """Raised when the environment cannot support a run at all."""


class FfmpegNotFoundError(PreconditionError):
    """Raised when ffmpeg or ffprobe cannot be located on the system PATH."""


class VmafModelNotFoundError(PreconditionError):
    """Raised when the VMAF model asset is missing, or libvmaf is unavailable."""


# --- External tool invocation ----------------------------------------------

class ToolInvocationError(HevcVerifyError):
    """Raised when an external tool process cannot be run."""


class ToolNotFoundError(ToolInvocationError):
    """Raised when the tool binary does not exist."""


class ToolTimeoutError(ToolInvocationError):
    """Raised when a tool exceeds its timeout and was killed."""


# --- Per-file verification -------------------------------------------------

class ProbeError(HevcVerifyError):
    """Raised when structural probing fails or returns unusable output."""


class HashError(HevcVerifyError):
    """Raised when a stream digest cannot be computed."""


class StreamNotFoundError(HashError):
    """Raised when the requested stream type does not exist in the file."""


class ScoreError(HevcVerifyError):
    """Raised when the perceptual quality comparison yields no score."""


class SourceNotFoundError(HevcVerifyError):
    """Raised when no source file matches a converted file."""


# --- Reporting -------------------------------------------------------------

class ReportWriteError(HevcVerifyError):
    """Raised when a report file cannot be written."""
