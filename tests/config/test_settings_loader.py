"""Tests for console settings loading and precedence."""

from pathlib import Path

import pytest
import yaml

from progress_config import ConsoleSettings, load_settings, parse_settings
from progress_config.loader import DEFAULTS_FILE, load_yaml_file


def _write_yaml(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def _base(**overrides) -> dict:
    data = {
        "api_base_url": "http://localhost:8080",
        "request_timeout": 30,
        "session_file": "/tmp/session.json",
        "log_level": "INFO",
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Packaged defaults
# ---------------------------------------------------------------------------


class TestPackagedDefaults:
    """The shipped console.yaml parses on its own."""

    def test_defaults_file_exists(self):
        assert DEFAULTS_FILE.is_file()

    def test_defaults_parse(self):
        settings = load_settings(environ={})
        assert isinstance(settings, ConsoleSettings)
        assert settings.api_base_url == "http://localhost:8080"
        assert settings.request_timeout == 30
        assert settings.session_file.name == "session.json"
        assert "~" not in str(settings.session_file)

    def test_empty_yaml_is_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_file(path) == {}


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestPrecedence:
    """Environment beats override file beats packaged defaults."""

    def test_override_file(self, tmp_path):
        path = _write_yaml(tmp_path / "c.yaml", {"api_base_url": "https://pm.example.com/"})
        settings = load_settings(path, environ={})
        assert settings.api_base_url == "https://pm.example.com"
        assert settings.request_timeout == 30

    def test_override_file_from_environment(self, tmp_path):
        path = _write_yaml(tmp_path / "c.yaml", {"log_level": "debug"})
        settings = load_settings(environ={"PROGRESS_CONFIG": str(path)})
        assert settings.log_level == "DEBUG"

    def test_environment_wins(self, tmp_path):
        path = _write_yaml(tmp_path / "c.yaml", {"request_timeout": 10})
        settings = load_settings(path, environ={"PROGRESS_REQUEST_TIMEOUT": "5"})
        assert settings.request_timeout == 5

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml", environ={})

    def test_blank_log_file_means_none(self):
        settings = load_settings(environ={"PROGRESS_LOG_FILE": ""})
        assert settings.log_file is None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestParseSettings:
    """Bad values raise ValueError naming the key."""

    def test_non_http_url(self):
        with pytest.raises(ValueError, match="api_base_url"):
            parse_settings(_base(api_base_url="ftp://x"))

    @pytest.mark.parametrize("timeout", ["abc", 0, -1])
    def test_bad_timeout(self, timeout):
        with pytest.raises(ValueError, match="request_timeout"):
            parse_settings(_base(request_timeout=timeout))

    def test_bad_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            parse_settings(_base(log_level="LOUD"))

    def test_session_file_required(self):
        with pytest.raises(ValueError, match="session_file"):
            parse_settings(_base(session_file=""))

    def test_paths_expanded(self):
        settings = parse_settings(_base(session_file="~/s.json", log_file="~/c.log"))
        assert settings.session_file == Path("~/s.json").expanduser()
        assert settings.log_file == Path("~/c.log").expanduser()
