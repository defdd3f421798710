"""Unit tests for EnvReader."""

from pathlib import Path

import pytest

from grace.config.env import EnvReader


class TestEnvReader:
    """Tests for EnvReader with injected environments."""

    def test_get_str(self) -> None:
        reader = EnvReader(env={"GRACE_BIND": "0.0.0.0"})
        assert reader.get_str("GRACE_BIND") == "0.0.0.0"
        assert reader.get_str("GRACE_MISSING", "fallback") == "fallback"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_is_unset(self, value: str) -> None:
        reader = EnvReader(env={"GRACE_BIND": value, "GRACE_PORT": value})
        assert reader.get_str("GRACE_BIND", "127.0.0.1") == "127.0.0.1"
        assert reader.get_int("GRACE_PORT", 8080) == 8080

    def test_get_int(self) -> None:
        reader = EnvReader(env={"GRACE_PORT": " 9000 "})
        assert reader.get_int("GRACE_PORT", 8080) == 9000

    def test_get_int_invalid_logs_and_defaults(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"GRACE_PORT": "eighty"})
        assert reader.get_int("GRACE_PORT", 8080) == 8080
        assert "Ignoring GRACE_PORT='eighty': expected an integer" in caplog.text

    def test_get_float(self) -> None:
        reader = EnvReader(env={"GRACE_SHUTDOWN_TIMEOUT": "2.5"})
        assert reader.get_float("GRACE_SHUTDOWN_TIMEOUT") == 2.5

    def test_get_float_invalid(self) -> None:
        reader = EnvReader(env={"GRACE_SHUTDOWN_TIMEOUT": "soon"})
        assert reader.get_float("GRACE_SHUTDOWN_TIMEOUT", 1.0) == 1.0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("true", True),
            ("1", True),
            ("YES", True),
            ("on", True),
            ("no", False),
            ("Off", False),
            ("0", False),
        ],
    )
    def test_get_bool(self, value: str, expected: bool) -> None:
        reader = EnvReader(env={"GRACE_LOG_INCLUDE_STDERR": value})
        assert reader.get_bool("GRACE_LOG_INCLUDE_STDERR") is expected

    def test_get_bool_unrecognised_uses_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"GRACE_LOG_INCLUDE_STDERR": "maybe"})
        assert reader.get_bool("GRACE_LOG_INCLUDE_STDERR") is None
        assert "expected a boolean" in caplog.text

    def test_get_path_expands_user(self) -> None:
        reader = EnvReader(env={"GRACE_LOG_FILE": "~/grace.log"})
        assert reader.get_path("GRACE_LOG_FILE") == Path("~/grace.log").expanduser()

    def test_get_list(self) -> None:
        reader = EnvReader(env={"GRACE_HEALTH_PATHS": " /healthz, /ready ,,"})
        assert reader.get_list("GRACE_HEALTH_PATHS") == ["/healthz", "/ready"]

    def test_get_list_unset(self) -> None:
        assert EnvReader(env={}).get_list("GRACE_SIGNALS") is None

    def test_get_list_custom_separator(self) -> None:
        reader = EnvReader(env={"GRACE_SIGNALS": "SIGINT:SIGHUP"})
        assert reader.get_list("GRACE_SIGNALS", separator=":") == [
            "SIGINT",
            "SIGHUP",
        ]

    def test_reads_os_environ_by_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GRACE_PORT", "7000")
        assert EnvReader().get_int("GRACE_PORT") == 7000
