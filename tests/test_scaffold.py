"""Package-level wiring: version string, error taxonomy, exit codes and
the ``cli()`` error boundary.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from hevc_verify import __version__
from hevc_verify.cli import exit_codes
from hevc_verify.cli.app import cli, main
from hevc_verify.exceptions import (
    ConfigurationError,
    FfmpegNotFoundError,
    HashError,
    HevcVerifyError,
    PreconditionError,
    ProbeError,
    ReportWriteError,
    ScoreError,
    SourceNotFoundError,
    StreamNotFoundError,
    ToolInvocationError,
    ToolNotFoundError,
    ToolTimeoutError,
    VmafModelNotFoundError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_type(self) -> None:
        assert isinstance(__version__, str)

    def test_version_has_three_numeric_parts(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            PreconditionError,
            FfmpegNotFoundError,
            VmafModelNotFoundError,
            ToolInvocationError,
            ToolNotFoundError,
            ToolTimeoutError,
            ProbeError,
            HashError,
            StreamNotFoundError,
            ScoreError,
            SourceNotFoundError,
            ReportWriteError,
        ],
    )
    def test_every_error_is_a_hevc_verify_error(
        self, exc_class: type[HevcVerifyError]
    ) -> None:
        assert issubclass(exc_class, HevcVerifyError)

    @pytest.mark.parametrize(
        ("child", "parent"),
        [
            (FfmpegNotFoundError, PreconditionError),
            (VmafModelNotFoundError, PreconditionError),
            (ToolNotFoundError, ToolInvocationError),
            (ToolTimeoutError, ToolInvocationError),
            (StreamNotFoundError, HashError),
        ],
    )
    def test_subfamilies(self, child: type, parent: type) -> None:
        assert issubclass(child, parent)

    def test_score_error_is_not_a_hash_error(self) -> None:
        assert not issubclass(ScoreError, HashError)

    def test_hint_is_stored(self) -> None:
        err = HevcVerifyError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = HevcVerifyError("boom")
        assert err.hint is None


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2

    def test_verification_failed_is_three(self) -> None:
        assert exit_codes.VERIFICATION_FAILED == 3

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        code = main([])
        assert code == exit_codes.SUCCESS
        assert "verify" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("hevc_verify.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_returns_success(self, _mock_doc: object) -> None:
        code = main(["doctor"])
        assert code == exit_codes.SUCCESS

    def test_verify_routes_to_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from hevc_verify.cli import app as app_module

        seen: list[object] = []
        monkeypatch.setattr(
            app_module, "_handle_verify", lambda args: seen.append(args) or exit_codes.SUCCESS,
        )
        code = main(["verify", "src", "out"])
        assert code == exit_codes.SUCCESS
        assert len(seen) == 1

    def test_analyze_routes_to_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from hevc_verify.cli import app as app_module

        monkeypatch.setattr(
            app_module, "_handle_analyze", lambda args: exit_codes.VERIFICATION_FAILED,
        )
        assert main(["analyze", "src", "out"]) == exit_codes.VERIFICATION_FAILED


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    @pytest.mark.parametrize(
        ("raised", "expected"),
        [
            (ConfigurationError("bad threshold"), exit_codes.GENERAL_ERROR),
            (FfmpegNotFoundError("no ffmpeg", hint="install it"), exit_codes.GENERAL_ERROR),
            (KeyboardInterrupt(), exit_codes.KEYBOARD_INTERRUPT),
            (RuntimeError("kaboom"), exit_codes.UNEXPECTED_ERROR),
        ],
    )
    def test_exceptions_map_to_exit_codes(
        self, raised: BaseException, expected: int,
    ) -> None:
        with patch("hevc_verify.cli.app.main", side_effect=raised):
            with pytest.raises(SystemExit) as exc_info:
                cli()
        assert exc_info.value.code == expected

    def test_main_return_value_becomes_exit_code(self) -> None:
        with patch("hevc_verify.cli.app.main", return_value=exit_codes.VERIFICATION_FAILED):
            with pytest.raises(SystemExit) as exc_info:
                cli()
        assert exc_info.value.code == exit_codes.VERIFICATION_FAILED

    def test_hint_is_rendered(self, capsys: pytest.CaptureFixture[str]) -> None:
        err = FfmpegNotFoundError("ffmpeg not installed", hint="brew install ffmpeg")
        with patch("hevc_verify.cli.app.main", side_effect=err):
            with pytest.raises(SystemExit):
                cli()
        captured = capsys.readouterr()
        assert "brew install ffmpeg" in captured.err
