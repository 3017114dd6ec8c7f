"""Configuration loading for the task harness."""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from task_harness.constants import (
    DEFAULT_BIN_DIR,
    DEFAULT_BUILD_COMMAND,
    DEFAULT_INPUT_DIR,
    DEFAULT_INPUT_PREFIX,
    DEFAULT_INPUT_SUFFIX,
    DEFAULT_LABEL,
    DEFAULT_LAST_TASK,
    DEFAULT_TASK_PREFIX,
    ENV_VARS,
)


@dataclass
class HarnessConfig:
    """Harness configuration, passed explicitly into the build step and loop."""

    last_task: int = DEFAULT_LAST_TASK
    build_command: str = DEFAULT_BUILD_COMMAND
    bin_dir: str = DEFAULT_BIN_DIR
    input_dir: str = DEFAULT_INPUT_DIR
    task_prefix: str = DEFAULT_TASK_PREFIX
    input_prefix: str = DEFAULT_INPUT_PREFIX
    input_suffix: str = DEFAULT_INPUT_SUFFIX
    label: str = DEFAULT_LABEL

    def validate(self) -> "HarnessConfig":
        """
        Check the values the loop depends on.

        Raises:
            ConfigError: If any value is unusable.
        """
        problems = []
        if self.last_task < 1:
            problems.append(f"last_task must be >= 1 (got {self.last_task})")
        if not self.build_command.strip():
            problems.append("build_command must not be empty")
        if not self.task_prefix:
            problems.append("task_prefix must not be empty")

        if problems:
            raise ConfigError("Invalid configuration:\n  " + "\n  ".join(problems))
        return self


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    exit_code = 1


FIELD_NAMES = tuple(f.name for f in fields(HarnessConfig))


def _coerce(name: str, value: Any, source: str) -> Any:
    if value is None:
        raise ConfigError(f"{source}: {name} must not be empty")
    if name != "last_task":
        if not isinstance(value, str):
            raise ConfigError(f"{source}: {name} must be a string, got {value!r}")
        return value
    if isinstance(value, bool):
        raise ConfigError(f"{source}: last_task must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"{source}: last_task must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: last_task must be an integer, got {value!r}")


def load_config_file(config_file: Path) -> Dict[str, Any]:
    """
    Load harness settings from YAML or JSON.

    Only keys naming a HarnessConfig field are accepted.
    """
    try:
        content = config_file.read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}")

    try:
        if config_file.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif config_file.suffix == ".json":
            data = json.loads(content)
        else:
            raise ConfigError(
                f"Unsupported config file type: {config_file.suffix}. Use .yaml, .yml, or .json"
            )
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse config file {config_file}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")

    unknown = sorted(set(data) - set(FIELD_NAMES))
    if unknown:
        raise ConfigError(f"Unknown keys in {config_file}: {', '.join(unknown)}")

    return {name: _coerce(name, value, str(config_file)) for name, value in data.items()}


def load_env_overrides() -> Dict[str, Any]:
    """Read HARNESS_* environment variables (after loading .env)."""
    # .env is looked up from the working directory, not from this package
    load_dotenv(find_dotenv(usecwd=True))

    values = {}
    for name, var in ENV_VARS.items():
        raw = os.environ.get(var)
        if raw is None or raw == "":
            continue
        values[name] = _coerce(name, raw, var)
    return values


def load_config(
    config_file: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> HarnessConfig:
    """
    Resolve the harness configuration.

    Precedence (later wins): defaults, config file, environment, overrides.

    Args:
        config_file: Optional YAML/JSON file with HarnessConfig keys.
        overrides: Explicit values, e.g. from CLI options. None entries are ignored.

    Returns:
        A validated HarnessConfig.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """
    config = HarnessConfig()

    if config_file is not None:
        config = replace(config, **load_config_file(config_file))

    config = replace(config, **load_env_overrides())

    if overrides:
        explicit = {
            name: _coerce(name, value, "override")
            for name, value in overrides.items()
            if value is not None
        }
        config = replace(config, **explicit)

    return config.validate()
