"""Configuration file management."""
import copy
import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from envelope.editor_config import DEFAULT_ENVELOPE_CONFIG
from envelope.errors import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        if config_file is None:
            config_file = Path(__file__).parent / "config.json"
        self.config_file = Path(config_file)
        self.config = self._load_config()

    def _load_config(self) -> dict:
        """Load configuration from file, falling back to defaults."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding="utf-8") as f:
                    loaded = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Could not read %s, using defaults: %s", self.config_file, e)
                return self._default_config()
            if not isinstance(loaded, dict):
                logger.warning("Ignoring %s: top level is not an object", self.config_file)
                return self._default_config()
            config = self._default_config()
            config.update(loaded)
            return config
        return self._default_config()

    def _default_config(self) -> dict:
        """Return default configuration."""
        return {
            "log_level": "WARNING",
            "envelope": copy.deepcopy(DEFAULT_ENVELOPE_CONFIG),
        }

    def save_config(self) -> bool:
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w', encoding="utf-8") as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            logger.error("Error saving config: %s", e)
            return False
        return True

    # ── Envelope editor ──────────────────────────────────────────

    def get_envelope_config(self) -> dict:
        """Raw envelope section; validated by EditorConfig.from_dict.

        Raises:
            ConfigurationError: the section is present but not an object.
        """
        section = self.config.get("envelope") or {}
        if not isinstance(section, Mapping):
            raise ConfigurationError(
                f"'envelope' in {self.config_file} must be an object, "
                f"got {type(section).__name__}"
            )
        return dict(section)

    def set_envelope_config(self, envelope: dict):
        """Replace the envelope section and save."""
        self.config["envelope"] = dict(envelope)
        self.save_config()

    # ── Logging ──────────────────────────────────────────────────

    def get_log_level(self) -> str:
        """Return the configured log level name (default WARNING)."""
        level = str(self.config.get("log_level", "WARNING")).upper()
        if level not in _LOG_LEVELS:
            logger.warning("Unknown log_level %r, using WARNING", level)
            return "WARNING"
        return level
