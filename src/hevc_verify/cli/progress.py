"""Per-file progress display driven by the batch runner's verdict callback.

:class:`RichBatchProgress` bridges
:meth:`~hevc_verify.core.batch_service.BatchVerifier.run`'s
``on_verdict`` callback with a Rich :class:`~rich.progress.Progress`
bar.  :class:`PlainBatchProgress` prints one line per file when Rich is
unavailable.

Both are context managers and shutdown-safe: calls after ``stop`` are
ignored.
"""

from __future__ import annotations

import sys
from typing import Any

from hevc_verify.cli.console import escape_markup, get_rich_console, styled_status
from hevc_verify.core.models import Verdict
from hevc_verify.exceptions import PreconditionError


class RichBatchProgress:
    """Callable ``(index, total, verdict)`` adapter for Rich.

    Usage::

        with RichBatchProgress(total=len(pairs)) as progress:
            batch.run(pairs, on_verdict=progress)
    """

    def __init__(self, total: int, *, console: Any | None = None) -> None:
        try:
            from rich.progress import (
                BarColumn,
                MofNCompleteColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeElapsedColumn,
            )
        except ModuleNotFoundError as exc:
            raise PreconditionError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._console: Any = console if console is not None else get_rich_console()
        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._total = total
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichBatchProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._started:
            self._progress.start()
            self._task_id = self._progress.add_task("Verifying", total=self._total)
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    def __call__(self, index: int, total: int, verdict: Verdict) -> None:
        if not self._started:
            return
        self._progress.console.print(
            f"[dim]{index}/{total}[/dim] {escape_markup(_shorten(verdict.name))}  "
            f"{styled_status(verdict.status)}",
        )
        self._progress.update(self._task_id, completed=index, total=total)


class PlainBatchProgress:
    """Fallback progress reporter writing one plain line per file."""

    def __enter__(self) -> PlainBatchProgress:
        return self

    def __exit__(self, *_args: object) -> None:
        return None

    def __call__(self, index: int, total: int, verdict: Verdict) -> None:
        print(f"{index}/{total} {verdict.name}  {verdict.status.value}", file=sys.stderr)


def make_progress(total: int, *, console: Any | None = None) -> RichBatchProgress | PlainBatchProgress:
    """Return a Rich progress bar, or the plain fallback without Rich."""
    try:
        return RichBatchProgress(total, console=console)
    except PreconditionError:
        return PlainBatchProgress()


def _shorten(name: str, limit: int = 60) -> str:
    if len(name) > limit:
        return name[: limit - 3] + "..."
    return name
