"""
Configuration management for services.
"""

import json
import os
from typing import Any

import yaml

from dotenv import load_dotenv

DEFAULT_GEMINIGEN_BASE_URL = "https://api.geminigen.ai/uapi/v1"


class ServiceConfig:
    """Configuration management for services using environment variables."""

    def __init__(self) -> None:
        """Initialize configuration by loading environment variables."""
        # Always load .env from the project root (where app.py is located)
        env_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.env"))
        load_dotenv(dotenv_path=env_path, override=False)
        self.config: dict[str, Any] = {}
        self.catalog: dict[str, Any] = {}
        self.catalog_path = os.getenv(
            "GENERATION_CONFIG_PATH",
            os.path.join(os.path.dirname(__file__), "../config/generation.yaml"),
        )
        self.load_from_env()
        self.load_catalog()

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.config = {
            "geminigen_api_key": os.getenv("GEMINIGEN_API_KEY"),
            "geminigen_base_url": os.getenv("GEMINIGEN_BASE_URL", DEFAULT_GEMINIGEN_BASE_URL),
            "generation_provider": os.getenv("GENERATION_PROVIDER", "geminigen"),
            # Unset polling values fall back to the YAML catalog
            "generation_poll_interval": os.getenv("GENERATION_POLL_INTERVAL"),
            "generation_max_attempts": os.getenv("GENERATION_MAX_ATTEMPTS"),
            "generation_request_timeout": int(os.getenv("GENERATION_REQUEST_TIMEOUT", "120")),
            "reference_image_url": os.getenv("AMAL_REFERENCE_URL") or None,
            "media_root": os.getenv("MEDIA_ROOT", "./media"),
            "openai_api_key": os.getenv("OPENAI_API_KEY"),
            "openai_base_url": os.getenv("OPENAI_BASE_URL") or None,
            "text_generation_provider": os.getenv("AI_PROVIDER", "openai"),
            "text_generation_model": os.getenv("TEXT_GENERATION_MODEL", "gpt-5-mini"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "allowed_origins": json.loads(os.getenv("ALLOWED_ORIGINS", '["*"]')),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value

    def reload(self) -> None:
        """Reload configuration from environment variables."""
        self.load_from_env()
        self.load_catalog()

    def load_catalog(self) -> None:
        """Load the provider catalog from YAML."""
        path = os.path.abspath(self.catalog_path)
        try:
            with open(path, "r", encoding="utf-8") as stream:
                data = yaml.safe_load(stream) or {}
        except FileNotFoundError:
            data = {}
        self.catalog = data

    def get_catalog_value(self, path: str, default: Any = None) -> Any:
        """Retrieve a catalog value via dotted path."""
        env_override_key = f"GENERATION_FLAG_{path.replace('.', '_').replace('-', '_').upper()}"
        env_value = os.getenv(env_override_key)
        if env_value is not None:
            return self._coerce_env_value(env_value, default)

        node: Any = self.catalog
        for part in path.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node if node is not None else default

    def set_catalog(self, catalog: dict[str, Any]) -> None:
        """Override the provider catalog (useful for tests)."""
        self.catalog = catalog

    @staticmethod
    def _coerce_env_value(raw: str, default: Any) -> Any:
        lowered = raw.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        if lowered.replace(".", "", 1).isdigit():
            try:
                return float(lowered) if "." in lowered else int(lowered)
            except ValueError:
                return raw
        return raw or default


# Global configuration instance
config = ServiceConfig()
