import logging
import os
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "base_url": None,  # e.g. https://coolify.example.com
    "app_uuid": None,
    "poll_interval": 10,  # seconds between polls
    "timeout_minutes": 30,
    "take": 20,  # size of the recent-deployments window searched for the commit
    "update_deployment_status": False,
    "webhook_mode": False,
    "production": None,  # None = infer from the triggering event
    "environment": None,  # None = "production" or "preview"
}

# Config key -> environment variable. Each is also read in the GitHub Action
# input form (INPUT_<NAME>), which is how `with:` values reach the process.
_ENV_KEYS = {
    "base_url": "COOLIFY_BASE_URL",
    "app_uuid": "COOLIFY_APP_UUID",
    "poll_interval": "POLL_INTERVAL",
    "timeout_minutes": "TIMEOUT_MINUTES",
    "update_deployment_status": "UPDATE_DEPLOYMENT_STATUS",
    "webhook_mode": "WEBHOOK_MODE",
}

_BOOL_KEYS = ("update_deployment_status", "webhook_mode")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _getenv(name: str) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        value = os.environ.get(f"INPUT_{name}")
    return value if value not in (None, "") else None


def _to_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean (true/false), got {value!r}")


def load_config(config_path: str = ".coolwatch.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .coolwatch.yml in the current directory
      3. Environment variables (plain or INPUT_-prefixed)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for key, env_name in _ENV_KEYS.items():
        value = _getenv(env_name)
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials never come from the config file.
    config["coolify_api_token"] = _getenv("COOLIFY_API_TOKEN")
    config["github_token"] = _getenv("GITHUB_TOKEN")

    return config


def validate_config(config: dict) -> dict:
    """
    Check that a run has everything it needs and normalise value types.

    Raises ValueError describing the first problem found.
    """
    missing = [
        env
        for key, env in (
            ("base_url", "COOLIFY_BASE_URL"),
            ("app_uuid", "COOLIFY_APP_UUID"),
            ("coolify_api_token", "COOLIFY_API_TOKEN"),
        )
        if not config.get(key)
    ]
    if missing:
        raise ValueError(f"Missing required setting(s): {', '.join(missing)}")

    config["base_url"] = str(config["base_url"]).rstrip("/")

    for key, cast in (("poll_interval", float), ("timeout_minutes", float), ("take", int)):
        try:
            config[key] = cast(config[key])
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be a number, got {config[key]!r}")
        if config[key] <= 0:
            raise ValueError(f"{key} must be positive, got {config[key]!r}")

    for key in _BOOL_KEYS:
        config[key] = _to_bool(key, config.get(key, False))

    # production stays None (infer from the event) unless set to something non-empty.
    if config.get("production") not in (None, ""):
        config["production"] = _to_bool("production", config["production"])
    else:
        config["production"] = None

    if config["webhook_mode"]:
        logger.warning("webhook_mode is not supported; falling back to polling.")

    return config
