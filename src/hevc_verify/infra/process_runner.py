"""Subprocess-backed implementation of :class:`~hevc_verify.core.protocols.ProcessRunner`.

This module is the **only** place in the codebase that calls
:mod:`subprocess`.  OS-level failures are mapped to the typed
:class:`~hevc_verify.exceptions.ToolInvocationError` family.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from hevc_verify.core.protocols import ProcessResult
from hevc_verify.exceptions import ToolInvocationError, ToolNotFoundError, ToolTimeoutError

logger = logging.getLogger(__name__)


class SubprocessRunner:
    """Run a tool to completion, capturing text output.

    On timeout :func:`subprocess.run` kills the child before
    :class:`ToolTimeoutError` is raised, so no process outlives a call.

    Children start in their own session with stdin closed, so a Ctrl+C at
    the terminal reaches only this process.  The CLI turns the first one
    into a between-files cancel; the tool in flight finishes normally.
    """

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> ProcessResult:
        argv = [str(arg) for arg in args]
        logger.debug("exec: %s", shlex.join(argv))
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
                start_new_session=True,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(
                f"{argv[0]} is not installed or not on PATH.",
                hint="Run 'hevc-verify doctor' to check the environment.",
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolTimeoutError(
                f"{argv[0]} timed out after {timeout:g}s and was stopped.",
            ) from exc
        except OSError as exc:
            raise ToolInvocationError(f"Could not run {argv[0]}: {exc}") from exc

        logger.debug("exit %d: %s", completed.returncode, argv[0])
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
