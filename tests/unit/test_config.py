"""Unit tests for configuration resolution."""

import json

import pytest

from branchflow.models.types import Settings
from branchflow.utils.config import (
    ConfigManager, mask_secret, parse_bool, settings_from_env
)
from branchflow.utils.errors import ConfigurationError


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))


def test_precedence(config_paths):
    """Test project file beats global file beats environment."""
    project, global_path = config_paths
    env = {"GOOGLE_AI_KEY": "from-env"}
    _write(project, {"googleAiKey": "from-project"})
    _write(global_path, {"googleAiKey": "from-global"})

    manager = ConfigManager(project, global_path, environ=env)
    assert manager.get_config().googleAiKey == "from-project"

    project.unlink()
    assert manager.get_config().googleAiKey == "from-global"

    global_path.unlink()
    assert manager.get_config().googleAiKey == "from-env"


def test_sources_are_not_merged(config_paths):
    """Test a file source is used whole."""
    project, global_path = config_paths
    _write(project, {"githubToken": "gh"})
    manager = ConfigManager(project, global_path, environ={"GOOGLE_AI_KEY": "env"})

    settings = manager.get_config()
    assert settings.githubToken == "gh"
    assert settings.googleAiKey is None


def test_linear_enabled_default_and_explicit_false(config_paths):
    """Test linearEnabled defaults to true but explicit false is honored."""
    project, global_path = config_paths
    manager = ConfigManager(project, global_path, environ={})
    assert manager.get_config().linearEnabled is True
    assert manager.is_linear_enabled()

    _write(global_path, {"linearEnabled": False})
    assert manager.get_config().linearEnabled is False
    assert not manager.is_linear_enabled()

    global_path.unlink()
    env_manager = ConfigManager(project, global_path, environ={"LINEAR_ENABLED": "false"})
    assert env_manager.get_config().linearEnabled is False


def test_empty_settings():
    """Test an empty object is valid with only the default set."""
    settings = Settings(**{})
    assert settings.linearEnabled is True
    assert settings.googleAiKey is None
    assert settings.githubToken is None
    assert settings.linearApiKey is None
    assert settings.to_dict() == {}


def test_settings_from_env():
    """Test environment variable mapping."""
    settings = settings_from_env({
        "GOOGLE_AI_KEY": "g",
        "GH_TOKEN": "first",
        "GITHUB_TOKEN": "second",
        "LINEAR_API_KEY": "l",
        "LINEAR_ENABLED": "TRUE",
    })
    assert settings.googleAiKey == "g"
    assert settings.githubToken == "first"
    assert settings.linearApiKey == "l"
    assert settings.linearEnabled is True

    assert settings_from_env({"GITHUB_TOKEN": "second"}).githubToken == "second"
    assert settings_from_env({"LINEAR_ENABLED": "1"}).linearEnabled is True
    assert settings_from_env({"LINEAR_ENABLED": "yes"}).linearEnabled is False
    assert "linearEnabled" not in settings_from_env({}).model_fields_set


def test_invalid_file_is_treated_as_absent(config_paths):
    """Test malformed JSON falls through to the next source."""
    project, global_path = config_paths
    _write(project, "{not json")
    _write(global_path, {"githubToken": "gh"})

    manager = ConfigManager(project, global_path, environ={})
    assert manager.get_config().githubToken == "gh"


def test_non_utf8_file_is_treated_as_absent(config_paths):
    """Test a file that is not valid UTF-8 falls through to the next source."""
    project, global_path = config_paths
    project.parent.mkdir(parents=True, exist_ok=True)
    project.write_bytes(b'{"googleAiKey": "\xff\xfe"}')
    _write(global_path, {"googleAiKey": "from-global"})

    manager = ConfigManager(project, global_path, environ={})
    assert manager.get_config().googleAiKey == "from-global"


def test_schema_violation_is_treated_as_absent(config_paths):
    """Test a file failing validation falls through."""
    project, global_path = config_paths
    _write(project, {"linearEnabled": "maybe"})
    manager = ConfigManager(project, global_path, environ={"GH_TOKEN": "env"})
    assert manager.get_config().githubToken == "env"


def test_set_values_merges_into_global(config_paths):
    """Test writes merge into the global file with stable formatting."""
    project, global_path = config_paths
    _write(global_path, {"githubToken": "gh"})
    manager = ConfigManager(project, global_path, environ={})

    path = manager.set_config_value("googleAiKey", "g")

    assert path == global_path
    text = global_path.read_text()
    assert text.endswith("\n")
    assert '  "githubToken": "gh"' in text
    assert json.loads(text) == {"githubToken": "gh", "googleAiKey": "g"}
    assert not project.exists()


def test_set_creates_parent_directory(tmp_path):
    """Test the global directory is created on first write."""
    global_path = tmp_path / "nested" / "dir" / "config.json"
    manager = ConfigManager(tmp_path / "p.json", global_path, environ={})
    manager.set_config_values({"linearEnabled": False})
    assert json.loads(global_path.read_text()) == {"linearEnabled": False}


def test_unknown_key_rejected(config_manager):
    """Test invalid keys list the valid ones."""
    with pytest.raises(ConfigurationError) as exc:
        config_manager.get_config_value("openaiKey")
    assert "googleAiKey" in str(exc.value)

    with pytest.raises(ConfigurationError):
        config_manager.set_config_values({"bogus": "x"})


def test_config_path(config_paths):
    """Test the displayed path prefers an existing project file."""
    project, global_path = config_paths
    manager = ConfigManager(project, global_path, environ={})
    assert manager.get_config_path() == global_path
    _write(project, {})
    assert manager.get_config_path() == project


def test_required_keys(config_manager):
    """Test missing required keys are reported, never enforced."""
    assert config_manager.missing_required_keys() == ["googleAiKey", "githubToken"]
    assert not config_manager.validate_required_config()

    config_manager.set_config_values({"googleAiKey": "g", "githubToken": "t"})
    assert config_manager.validate_required_config()


def test_helpers():
    """Test boolean parsing and secret masking."""
    assert parse_bool("Yes")
    assert parse_bool(" on ")
    assert not parse_bool("nope")
    assert mask_secret("short") == "****"
    assert mask_secret("abcd1234efgh") == "abcd****efgh"
