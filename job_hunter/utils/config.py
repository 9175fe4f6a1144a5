"""
Configuration management for Job Hunter.
"""

from pathlib import Path
from typing import Optional
import copy
import json
import os

from job_hunter.exceptions import ConfigError


class Config:
    """Manages application configuration and API keys."""

    DEFAULT_CONFIG = {
        "api_keys": {
            "adzuna_app_id": "",
            "adzuna": "",
            "rapidapi": "",
            "themuse": "",
            "anthropic": "",
        },
        "search": {
            "default_query": "software engineer",
            "default_location": "Stockholm",
            "adzuna_country": "se",
            "results_per_page": 20,
            "providers": ["adzuna", "jsearch", "themuse"],
            "parallel_search": True,
            "retry_attempts": 3,
            "retry_delay_ms": 1000,
            "request_timeout": 30,
            "max_requests_per_minute": 10,
        },
        "application": {
            "enable_auto_apply": False,
            "auto_apply_threshold": 85,
            "auto_apply_batch_size": 5,
            "application_delay_ms": 2000,
            "max_auto_apply_per_day": 20,
            "max_stored_applications": 1000,
        },
        "generation": {
            "enable_cover_letter_ai": True,
            "model": "claude-sonnet-4-20250514",
        },
        "storage": {
            "data_dir": "./job_hunter_data",
        },
    }

    # Environment variables that don't follow the <PROVIDER>_API_KEY pattern
    ENV_OVERRIDES = {
        "adzuna_app_id": "ADZUNA_APP_ID",
    }

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[dict] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file (default: ~/.job_hunter/config.json)
            overrides: Values merged over the file, mostly useful in tests
        """
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = Path.home() / ".job_hunter" / "config.json"

        self.config = self._load_config()
        if overrides:
            self.config = self._deep_merge(self.config, overrides)

    def _load_config(self) -> dict:
        """Load configuration from file or fall back to defaults."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    user_config = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Cannot read config {self.config_path}: {e}") from e

            if not isinstance(user_config, dict):
                raise ConfigError(f"Config {self.config_path} must hold a JSON object")

            return self._deep_merge(copy.deepcopy(self.DEFAULT_CONFIG), user_config)

        return copy.deepcopy(self.DEFAULT_CONFIG)

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def save(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default=None):
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "application.auto_apply_threshold")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value) -> None:
        """Set a configuration value using dot notation."""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def get_int(self, key: str) -> int:
        """Get a numeric setting, falling back to the built-in default."""
        value = self.get(key)
        if value is None:
            value = self._default(key)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{key} must be a number, got {value!r}") from e

    def _default(self, key: str):
        value = self.DEFAULT_CONFIG
        for k in key.split('.'):
            value = value.get(k) if isinstance(value, dict) else None
        return value

    def get_api_key(self, provider: str) -> str:
        """
        Get API key for a provider.

        Environment variables take precedence over the config file.
        """
        env_var = self.ENV_OVERRIDES.get(provider, f"{provider.upper()}_API_KEY")
        env_value = os.environ.get(env_var)

        if env_value:
            return env_value.strip()

        return self.get(f"api_keys.{provider}", "") or ""

    def set_api_key(self, provider: str, key: str) -> None:
        """Set API key for a provider."""
        self.set(f"api_keys.{provider}", key)
        self.save()

    def get_providers_config(self) -> dict:
        """Get credentials and request settings for the job board providers."""
        return {
            "adzuna_app_id": self.get_api_key("adzuna_app_id"),
            "adzuna_api_key": self.get_api_key("adzuna"),
            "rapidapi_key": self.get_api_key("rapidapi"),
            "themuse_api_key": self.get_api_key("themuse"),
            "adzuna_country": self.get("search.adzuna_country", "se"),
            "results_per_page": self.get_int("search.results_per_page"),
            "timeout": self.get_int("search.request_timeout"),
            "retry_attempts": self.get_int("search.retry_attempts"),
            "retry_delay": self.get_int("search.retry_delay_ms") / 1000.0,
            "max_requests_per_minute": self.get_int("search.max_requests_per_minute"),
        }

    def get_enabled_providers(self) -> list[str]:
        return [p.lower() for p in self.get("search.providers", []) or []]

    def get_data_dir(self) -> str:
        """Get the directory holding persisted state."""
        return self.get("storage.data_dir", "./job_hunter_data")

    def is_auto_apply_enabled(self) -> bool:
        return bool(self.get("application.enable_auto_apply", False))

    def print_config(self) -> None:
        """Print current configuration (with API keys masked)."""
        print(json.dumps(self._mask_sensitive(self.config), indent=2))

    def _mask_sensitive(self, data: dict, sensitive_keys: Optional[set] = None) -> dict:
        """Mask sensitive values in configuration."""
        if sensitive_keys is None:
            sensitive_keys = {"api_key", "api_keys", "key", "secret", "password", "token"}

        result = {}
        for key, value in data.items():
            if isinstance(value, dict):
                if any(s in key.lower() for s in sensitive_keys):
                    result[key] = {k: self._mask_value(v) for k, v in value.items()}
                else:
                    result[key] = self._mask_sensitive(value, sensitive_keys)
            elif any(s in key.lower() for s in sensitive_keys):
                result[key] = self._mask_value(value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _mask_value(value) -> str:
        if not value:
            return "(not set)"
        value = str(value)
        return f"{value[:4]}...{value[-4:]}" if len(value) > 8 else "****"
