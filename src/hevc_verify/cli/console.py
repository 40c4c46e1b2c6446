"""CLI console helpers with optional Rich support.

This module avoids module-level imports of Rich so bootstrap paths
(``--help``, ``--version``) keep working when Rich is not installed.
Without Rich, markup tags are stripped and text goes to plain stderr.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from hevc_verify.core.models import VerdictStatus
from hevc_verify.exceptions import PreconditionError

_STYLE_WORDS = "bold|dim|red|green|yellow|blue|cyan"
_MARKUP_RE = re.compile(rf"\[(?:/|/?(?:{_STYLE_WORDS})(?: (?:{_STYLE_WORDS}))*)\]")

_STATUS_STYLES: dict[VerdictStatus, str] = {
    VerdictStatus.SUCCESS: "green",
    VerdictStatus.FAILED: "red",
    VerdictStatus.ERROR: "yellow",
}


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``PreconditionError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise PreconditionError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def rich_available() -> bool:
    try:
        _load_rich_console_class()
    except PreconditionError:
        return False
    return True


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def strip_markup(text: str) -> str:
    """Remove Rich ``[style]...[/style]`` tags for plain output."""
    return _MARKUP_RE.sub("", text)


def escape_markup(text: str) -> str:
    """Escape *text* (usually a file name) for interpolation into markup.

    Without Rich the plain fallback only strips known style tags, so the
    text is returned unchanged.
    """
    try:
        from rich.markup import escape
    except ModuleNotFoundError:
        return text
    return escape(text)


def styled_status(status: VerdictStatus) -> str:
    """Rich markup for a verdict status cell."""
    style = _STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with a plain-text fallback."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = get_rich_console()
        except PreconditionError:
            print(
                *(strip_markup(o) if isinstance(o, str) else o for o in objects),
                file=sys.stderr,
            )
            return
        rich_console.print(*objects)


console = _ConsoleProxy()
