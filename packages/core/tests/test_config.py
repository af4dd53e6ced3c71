"""Tests for configuration loading."""

import pytest

from coolwatch_core.config import load_config, validate_config

_ENV_NAMES = (
    "COOLIFY_BASE_URL",
    "COOLIFY_APP_UUID",
    "COOLIFY_API_TOKEN",
    "GITHUB_TOKEN",
    "POLL_INTERVAL",
    "TIMEOUT_MINUTES",
    "UPDATE_DEPLOYMENT_STATUS",
    "WEBHOOK_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"INPUT_{name}", raising=False)


def _valid(**overrides):
    config = {
        "base_url": "https://coolify.example.com/",
        "app_uuid": "app-1",
        "coolify_api_token": "tok",
        "poll_interval": 10,
        "timeout_minutes": 30,
        "take": 20,
        "update_deployment_status": False,
        "webhook_mode": False,
    }
    config.update(overrides)
    return config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["poll_interval"] == 10
    assert config["timeout_minutes"] == 30
    assert config["take"] == 20
    assert config["update_deployment_status"] is False
    assert config["webhook_mode"] is False
    assert config["base_url"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".coolwatch.yml"
    cfg.write_text("base_url: https://coolify.example.com\npoll_interval: 5\nupdate_deployment_status: true\n")
    config = load_config(config_path=str(cfg))
    assert config["base_url"] == "https://coolify.example.com"
    assert config["poll_interval"] == 5
    assert config["update_deployment_status"] is True


def test_env_overrides_config_file(tmp_path, monkeypatch):
    cfg = tmp_path / ".coolwatch.yml"
    cfg.write_text("app_uuid: from-file\n")
    monkeypatch.setenv("COOLIFY_APP_UUID", "from-env")
    assert load_config(config_path=str(cfg))["app_uuid"] == "from-env"


def test_action_input_env_form(tmp_path, monkeypatch):
    monkeypatch.setenv("INPUT_COOLIFY_BASE_URL", "https://coolify.example.com")
    monkeypatch.setenv("INPUT_COOLIFY_API_TOKEN", "input-token")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["base_url"] == "https://coolify.example.com"
    assert config["coolify_api_token"] == "input-token"


def test_cli_overrides_win(tmp_path, monkeypatch):
    monkeypatch.setenv("COOLIFY_APP_UUID", "from-env")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"), cli_overrides={"app_uuid": "from-cli"})
    assert config["app_uuid"] == "from-cli"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".coolwatch.yml"
    cfg.write_text("poll_interval: 3\n")
    config = load_config(config_path=str(cfg), cli_overrides={"poll_interval": None})
    assert config["poll_interval"] == 3


def test_credentials_loaded_from_env(monkeypatch):
    monkeypatch.setenv("COOLIFY_API_TOKEN", "cool-token")
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path="nonexistent.yml")
    assert config["coolify_api_token"] == "cool-token"
    assert config["github_token"] == "gh-token"


def test_credentials_in_file_are_ignored(tmp_path):
    cfg = tmp_path / ".coolwatch.yml"
    cfg.write_text("coolify_api_token: leaked\n")
    assert load_config(config_path=str(cfg))["coolify_api_token"] is None


class TestValidateConfig:
    def test_strips_trailing_slash(self):
        assert validate_config(_valid())["base_url"] == "https://coolify.example.com"

    def test_missing_settings_named(self):
        with pytest.raises(ValueError, match="COOLIFY_APP_UUID.*COOLIFY_API_TOKEN"):
            validate_config(_valid(app_uuid=None, coolify_api_token=None))

    def test_numeric_strings_from_env_converted(self):
        config = validate_config(_valid(poll_interval="15", timeout_minutes="2.5", take="10"))
        assert config["poll_interval"] == 15.0
        assert config["timeout_minutes"] == 2.5
        assert config["take"] == 10

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValueError, match="poll_interval"):
            validate_config(_valid(poll_interval=0))

    def test_non_numeric_timeout_rejected(self):
        with pytest.raises(ValueError, match="timeout_minutes"):
            validate_config(_valid(timeout_minutes="soon"))

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False), ("", False), (True, True)])
    def test_boolean_strings(self, raw, expected):
        assert validate_config(_valid(update_deployment_status=raw))["update_deployment_status"] is expected

    def test_invalid_boolean_rejected(self):
        with pytest.raises(ValueError, match="update_deployment_status"):
            validate_config(_valid(update_deployment_status="maybe"))

    @pytest.mark.parametrize("raw,expected", [("false", False), ("true", True), (False, False), (None, None), ("", None)])
    def test_production_normalized_but_unset_stays_none(self, raw, expected):
        assert validate_config(_valid(production=raw))["production"] is expected

    def test_invalid_production_rejected(self):
        with pytest.raises(ValueError, match="production"):
            validate_config(_valid(production="sometimes"))

    def test_webhook_mode_warns_and_continues(self, caplog):
        config = validate_config(_valid(webhook_mode="true"))
        assert config["webhook_mode"] is True
        assert "webhook_mode is not supported" in caplog.text
