"""
Configuration for the jolt command line.

Settings live in a small YAML file:

    echo: true           # print the value of every expression statement
    show_timing: true    # print elapsed time after each run
    check: false         # run the static checker before executing
    prompt: "jolt> "     # REPL prompt
    max_errors: 20       # checker diagnostics before giving up

The file is found from an explicit path, else $JOLT_CONFIG, else
./jolt.yaml when present; with none of those the defaults apply.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_FILENAME = "jolt.yaml"
CONFIG_ENV_VAR = "JOLT_CONFIG"


class ConfigError(ValueError):
    """Malformed or invalid configuration file."""
    pass


@dataclass(frozen=True)
class JoltConfig:
    echo: bool = True
    show_timing: bool = True
    check: bool = False
    prompt: str = "jolt> "
    max_errors: int = 20

    @classmethod
    def from_dict(cls, data: Dict[str, Any], origin: str = "<config>") -> "JoltConfig":
        """Build a config from a mapping, validating keys and value types."""
        unknown = sorted(set(data) - set(_FIELD_TYPES))
        if unknown:
            raise ConfigError(f"{origin}: unknown configuration keys: {', '.join(unknown)}")

        for key, value in data.items():
            expected = _FIELD_TYPES[key]
            # bool is a subclass of int; max_errors must not accept true/false
            if isinstance(value, bool) and expected is not bool:
                raise ConfigError(f"{origin}: '{key}' must be {expected.__name__}, got bool")
            if not isinstance(value, expected):
                raise ConfigError(
                    f"{origin}: '{key}' must be {expected.__name__}, got {type(value).__name__}"
                )

        if data.get("max_errors", 1) < 1:
            raise ConfigError(f"{origin}: 'max_errors' must be at least 1")

        return cls(**data)

    def with_overrides(self, **overrides: Any) -> "JoltConfig":
        """Copy with the given fields replaced; None values are ignored."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


_FIELD_TYPES = {
    "echo": bool,
    "show_timing": bool,
    "check": bool,
    "prompt": str,
    "max_errors": int,
}


def find_config(path: Union[str, Path, None] = None) -> Optional[Path]:
    """Locate the configuration file to use, if any."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    local = Path.cwd() / CONFIG_FILENAME
    if local.is_file():
        return local
    return None


def load_config(path: Union[str, Path, None] = None) -> JoltConfig:
    """
    Load configuration.

    Args:
        path: Explicit configuration file; overrides the search

    Returns:
        The resolved JoltConfig (defaults when no file is found)

    Raises:
        ConfigError: If the file is missing, unreadable YAML, or invalid
    """
    config_path = find_config(path)
    if config_path is None:
        return JoltConfig()

    if not config_path.is_file():
        raise ConfigError(f"configuration file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{config_path}: YAML parse error: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping, got {type(data).__name__}")

    return JoltConfig.from_dict(data, origin=str(config_path))
