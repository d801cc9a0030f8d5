"""Simple YAML configuration loader for ClipScribe."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from dotenv import load_dotenv

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "clipscribe.yaml"

DEFAULTS: Dict[str, Any] = {
    "gemini": {
        "model": "gemini-2.5-flash",
        "base_url": "https://generativelanguage.googleapis.com",
        "api_key_env": "API_KEY",
    },
    "transcription": {
        "timeout_seconds": 120.0,
        "reformat": True,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
    },
    "clipboard": {
        "ack_seconds": 2.0,
    },
    "logging": {
        "level": "INFO",
        "file_path": str(Path.home() / ".clipscribe" / "logs" / "clipscribe.log"),
        "console_output": True,
    },
}

# Checked after gemini.api_key_env
FALLBACK_API_KEY_ENV = "GEMINI_API_KEY"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if value is None and isinstance(base.get(key), dict):
            # Empty section, keep defaults
            continue
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class ClipscribeConfig:
    """ClipScribe configuration loader."""

    def __init__(self, config_path: Optional[str] = None, load_env: bool = True):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses clipscribe.yaml
                        in the current directory when present, built-in defaults otherwise.
            load_env: Whether to load a .env file into the process environment.
        """
        if load_env:
            load_dotenv()

        if config_path:
            self.config_file: Optional[Path] = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_NAME
            self.config_file = candidate if candidate.exists() else None

        self.config = copy.deepcopy(DEFAULTS)
        if self.config_file:
            logger.info(f"Loading configuration from: {self.config_file}")
            _merge(self.config, self._load_config())
        else:
            logger.info("No configuration file found, using defaults")

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if not config:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        self._resolve_paths(config)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        logging_section = config.get('logging')
        if isinstance(logging_section, dict) and logging_section.get('file_path'):
            log_path = os.path.expanduser(config['logging']['file_path'])
            if not os.path.isabs(log_path):
                log_path = str(config_dir / log_path)
            config['logging']['file_path'] = log_path

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'gemini.model').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'gemini.model')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def find_api_key(self) -> Optional[str]:
        """Return the Gemini credential from the environment, or None."""
        env_names = [self.get('gemini.api_key_env', 'API_KEY'), FALLBACK_API_KEY_ENV]
        for name in env_names:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return None

    def get_api_key(self) -> str:
        """Get the Gemini credential - raises ConfigurationError if not set."""
        api_key = self.find_api_key()
        if not api_key:
            env_name = self.get('gemini.api_key_env', 'API_KEY')
            raise ConfigurationError(f"{env_name} environment variable is not set")
        return api_key
