"""Persistent fslint configuration.

The configuration lives in a JSON file at ``$FSLINT_CONFIG`` or, when the
variable is unset, ``~/.config/fslint/config.json``. A missing file yields
the defaults. The scan engine never reads this file itself: the CLI loads
it and passes the enabled set, the per-capability options and the
ScanPolicy on.

Example file:
    {
      "enabled_plugins": ["git-status", "file-age", "grouping"],
      "plugin_config": {"file-age": {"threshold_days": "14"}},
      "scanner": {"max_depth": 10, "include_hidden": false,
                  "follow_symlinks": false, "respect_ignore_rules": true,
                  "max_files": null}
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from fslint.models import ScanPolicy

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FSLINT_CONFIG"

DEFAULT_ENABLED_PLUGINS = ["git-status", "file-age", "grouping"]


def default_config_path() -> Path:
    """Return the configuration file location."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "fslint" / "config.json"


@dataclass
class FslintConfig:
    """User configuration: enabled capabilities, their options, scan policy."""
    enabled_plugins: List[str] = field(default_factory=lambda: list(DEFAULT_ENABLED_PLUGINS))
    plugin_config: Dict[str, Dict[str, str]] = field(default_factory=dict)
    scanner: ScanPolicy = field(default_factory=ScanPolicy)

    def enable_plugin(self, name: str) -> None:
        if name not in self.enabled_plugins:
            self.enabled_plugins.append(name)

    def disable_plugin(self, name: str) -> None:
        self.enabled_plugins = [p for p in self.enabled_plugins if p != name]

    def is_plugin_enabled(self, name: str) -> bool:
        return name in self.enabled_plugins

    def get_plugin_config(self, name: str) -> Optional[Dict[str, str]]:
        return self.plugin_config.get(name)

    def set_plugin_config(self, name: str, config: Dict[str, str]) -> None:
        self.plugin_config[name] = {str(k): str(v) for k, v in config.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled_plugins": list(self.enabled_plugins),
            "plugin_config": {name: dict(opts) for name, opts in self.plugin_config.items()},
            "scanner": self.scanner.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FslintConfig":
        """Build a configuration from parsed JSON.

        Raises:
            ValueError: If a section has the wrong shape or a policy value
                is invalid.
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a JSON object")

        enabled = data.get("enabled_plugins", list(DEFAULT_ENABLED_PLUGINS))
        if not isinstance(enabled, list) or not all(isinstance(n, str) for n in enabled):
            raise ValueError("'enabled_plugins' must be a list of names")

        raw_plugin_config = data.get("plugin_config", {})
        if not isinstance(raw_plugin_config, dict):
            raise ValueError("'plugin_config' must be an object")
        plugin_config: Dict[str, Dict[str, str]] = {}
        for name, options in raw_plugin_config.items():
            if not isinstance(options, dict):
                raise ValueError(f"Options for plugin '{name}' must be an object")
            # Options are plain strings; capabilities parse them in initialize()
            plugin_config[name] = {str(k): str(v) for k, v in options.items()}

        scanner = data.get("scanner", {})
        if not isinstance(scanner, dict):
            raise ValueError("'scanner' must be an object")

        return cls(
            enabled_plugins=list(enabled),
            plugin_config=plugin_config,
            scanner=ScanPolicy.from_dict(scanner),
        )


def load_config(path: Optional[Path] = None) -> FslintConfig:
    """Load the configuration, or the defaults if the file does not exist.

    Args:
        path: Configuration file. Defaults to ``default_config_path()``.

    Raises:
        ValueError: If the file exists but is not a valid configuration.
        OSError: If the file exists but cannot be read.
    """
    config_path = path if path is not None else default_config_path()
    if not config_path.exists():
        logger.debug("No configuration at %s, using defaults", config_path)
        return FslintConfig()

    content = config_path.read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse config from {config_path}: {e}") from e
    try:
        return FslintConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config in {config_path}: {e}") from e


def save_config(config: FslintConfig, path: Optional[Path] = None) -> Path:
    """Write the configuration as JSON, creating parent directories.

    Returns:
        The path written to.
    """
    config_path = path if path is not None else default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    return config_path
