"""Allow ``python -m hevc_verify`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m hevc_verify`` behaves identically to the ``hevc-verify``
console script.
"""

from __future__ import annotations

from hevc_verify.cli.app import cli

if __name__ == "__main__":
    cli()
