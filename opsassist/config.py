"""Configuration management for the operations assistant."""

from __future__ import annotations

import logging
import os
from typing import Any, cast

import yaml
from dotenv import load_dotenv

RUNTIME_CONFIG_ENV = "OPSASSIST_RUNTIME_CONFIG"


class Configuration:
    """YAML-backed configuration with optional runtime overrides."""

    def __init__(
        self,
        runtime_config_path: str | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            runtime_config_path: Optional YAML file deep-merged over the
                packaged defaults. Falls back to ``$OPSASSIST_RUNTIME_CONFIG``.
            overrides: Optional in-process overrides applied last.
        """
        self.load_env()  # Load .env for API keys
        self._default_config = self._load_yaml_config()
        self._runtime_config_path = runtime_config_path or os.getenv(RUNTIME_CONFIG_ENV)
        self._overrides = overrides or {}
        self._current_config: dict[str, Any] = {}
        self._reload_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load the packaged default configuration."""
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError("Configuration file must contain a dictionary")
            return cast(dict[str, Any], config)

    def _load_runtime_config(self) -> dict[str, Any]:
        """Load runtime overrides, if a runtime config file is configured."""
        if not self._runtime_config_path:
            return {}
        if not os.path.exists(self._runtime_config_path):
            logging.warning(
                f"Runtime config '{self._runtime_config_path}' not found, using defaults"
            )
            return {}

        with open(self._runtime_config_path) as file:
            config = yaml.safe_load(file) or {}
            if not isinstance(config, dict):
                raise ValueError("Runtime configuration file must contain a dictionary")
            return cast(dict[str, Any], config)

    def _deep_merge(
        self, base: dict[str, Any], override: dict[str, Any]
    ) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(
                    cast(dict[str, Any], result[key]), cast(dict[str, Any], value)
                )
            else:
                result[key] = value

        return result

    def _reload_config(self) -> None:
        merged = self._deep_merge(self._default_config, self._load_runtime_config())
        self._current_config = self._deep_merge(merged, self._overrides)

    def reload_runtime_config(self) -> None:
        """Re-read the runtime config file."""
        self._reload_config()

    def _get_current_config(self) -> dict[str, Any]:
        return self._current_config

    @property
    def llm_api_key(self) -> str:
        """Get the API key for the active LLM provider.

        Raises:
            ValueError: If the API key is not found in environment variables.
        """
        llm_config = self._get_current_config().get("llm", {})
        active_provider = llm_config.get("active", "openai")

        provider_key_map = {
            "openai": "OPENAI_API_KEY",
            "groq": "GROQ_API_KEY",
            "openrouter": "OPENROUTER_API_KEY",
        }

        env_key = provider_key_map.get(active_provider)
        if not env_key:
            raise ValueError(
                f"Unknown provider '{active_provider}' - no API key mapping found"
            )

        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(
                f"API key '{env_key}' not found in environment variables "
                f"for provider '{active_provider}'"
            )

        return api_key

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._get_current_config()

    def get_llm_config(self) -> dict[str, Any]:
        """Get active LLM provider configuration."""
        llm_config = self._get_current_config().get("llm", {})
        active_provider = llm_config.get("active", "openai")
        providers = llm_config.get("providers", {})

        if active_provider not in providers:
            raise ValueError(
                f"Active provider '{active_provider}' not found in providers config"
            )

        return providers[active_provider]

    def get_logging_config(self) -> dict[str, Any]:
        return self._get_current_config().get("logging", {})

    def get_chat_service_config(self) -> dict[str, Any]:
        return self._get_current_config().get("chat", {}).get("service", {})

    def get_chat_storage_config(self) -> dict[str, Any]:
        return self._get_current_config().get("chat", {}).get("storage", {})

    def get_http_config(self) -> dict[str, Any]:
        http_config = self._get_current_config().get("http", {})
        return {
            "host": http_config.get("host", "0.0.0.0"),
            "port": int(http_config.get("port", 8000)),
        }

    def get_max_tool_hops(self) -> int:
        """Get the maximum number of agent/tool round-trips per turn.

        Returns:
            Maximum number of tool hops (default: 25).
        """
        max_hops = self.get_chat_service_config().get("max_tool_hops", 25)

        # bool is an int subclass
        if not isinstance(max_hops, int) or isinstance(max_hops, bool) or max_hops < 1:
            raise ValueError("max_tool_hops must be a positive integer")

        return max_hops

    def get_timeouts(self) -> dict[str, float]:
        """Get model, tool and whole-turn timeouts in seconds."""
        service_config = self.get_chat_service_config()
        timeouts = {
            "model_timeout_seconds": service_config.get("model_timeout_seconds", 60.0),
            "tool_timeout_seconds": service_config.get("tool_timeout_seconds", 30.0),
            "turn_timeout_seconds": service_config.get("turn_timeout_seconds", 180.0),
        }

        for name, value in timeouts.items():
            if not isinstance(value, int | float) or value <= 0:
                raise ValueError(f"{name} must be positive")

        return {name: float(value) for name, value in timeouts.items()}

    def get_connection_pool_config(self) -> dict[str, Any]:
        """Get HTTP connection pool settings for the LLM client."""
        pool_config = self._get_current_config().get("connection_pool", {})
        return {
            "max_connections": pool_config.get("max_connections", 20),
            "max_keepalive_connections": pool_config.get("max_keepalive_connections", 10),
            "keepalive_expiry_seconds": pool_config.get("keepalive_expiry_seconds", 30.0),
        }
