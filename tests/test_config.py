import json

import pytest

from extension_risk.config import DEFAULT_RETIRE_COMMAND, Settings, load_settings
from extension_risk.errors import ConfigError


def test_defaults(tmp_path):
    settings = load_settings(environ={"EXTENSION_RISK_CONFIG": str(tmp_path / "absent.json")})
    assert settings == Settings()
    assert settings.max_download_bytes == 50 * 1024 * 1024
    assert settings.retire_command == DEFAULT_RETIRE_COMMAND


def test_config_file_and_env_precedence(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({
        "download": {"max_download_bytes": 1024, "prodversion": "99.0"},
        "scanners": {"external_scanners_enabled": False, "retire_command": ["retire", "{path}"]},
        "server": {"port": 9000},
    }))

    settings = load_settings(config_path, environ={
        "EXTENSION_RISK_PORT": "9100",
        "EXTENSION_RISK_TOOL_TIMEOUT": "5",
    })

    assert settings.max_download_bytes == 1024
    assert settings.prodversion == "99.0"
    assert settings.external_scanners_enabled is False
    assert settings.retire_command == ["retire", "{path}"]
    assert settings.port == 9100
    assert settings.tool_timeout == 5.0


def test_env_list_value(tmp_path):
    settings = load_settings(environ={
        "EXTENSION_RISK_CONFIG": str(tmp_path / "absent.json"),
        "EXTENSION_RISK_ESLINT_COMMAND": '["npx", "eslint", "{path}"]',
        "EXTENSION_RISK_EXTERNAL_SCANNERS_ENABLED": "no",
    })
    assert settings.eslint_command == ["npx", "eslint", "{path}"]
    assert settings.external_scanners_enabled is False


@pytest.mark.parametrize("content", [
    "{broken",
    "[]",
    json.dumps({"download": []}),
    json.dumps({"download": {"max_download_bytes": "lots"}}),
    json.dumps({"scanners": {"retire_command": "retire"}}),
])
def test_invalid_config(tmp_path, content):
    config_path = tmp_path / "config.json"
    config_path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(config_path, environ={})


def test_explicit_missing_config(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.json", environ={})
