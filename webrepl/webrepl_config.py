"""
webrepl configuration.

Values are layered: defaults, then an optional YAML file, then environment
variables:
    WEBREPL_CONFIG          Path to a YAML file with any of the keys below
    WEBREPL_HOST            Interface to bind (default 127.0.0.1)
    WEBREPL_PORT            Port to listen on (default 8080)
    WEBREPL_NAMESPACE       Module the REPL evaluates in (default "user")
    WEBREPL_SHOW_TRACEBACK  Full tracebacks in the error column (default off)
    WEBREPL_LOG_LEVEL       Logging level name (default INFO)
    WEBREPL_TITLE           Page title
"""
import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

ENV_PREFIX = "WEBREPL_"


class ConfigError(ValueError):
    """The service's own configuration could not be read or is invalid."""


@dataclass(frozen=True)
class ReplConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    namespace: str = "user"
    show_traceback: bool = False
    log_level: str = "INFO"
    title: str = "webrepl"


def _coerce(key: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        match value:
            case bool():
                return value
            case str() if value.strip().lower() in ("1", "true", "yes", "on"):
                return True
            case str() if value.strip().lower() in ("0", "false", "no", "off", ""):
                return False
            case _:
                raise ConfigError(f"{key}: expected a boolean, got {value!r}")
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{key}: expected an integer, got {value!r}") from None
    if not isinstance(value, str):
        raise ConfigError(f"{key}: expected a string, got {value!r}")
    return value


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must hold a mapping, got {type(data).__name__}")
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ReplConfig:
    """Build a ReplConfig from an optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    defaults = ReplConfig()
    known = {f.name: getattr(defaults, f.name) for f in dataclasses.fields(ReplConfig)}

    values: Dict[str, Any] = {}
    file_path = path or env.get(ENV_PREFIX + "CONFIG")
    if file_path:
        for key, value in _read_file(Path(file_path)).items():
            if key not in known:
                raise ConfigError(f"unknown config key: {key}")
            values[key] = _coerce(key, value, known[key])

    for key, default in known.items():
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = _coerce(key, raw, default)

    level = str(values.get("log_level", defaults.log_level)).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"log_level: unknown level {level!r}")
    values["log_level"] = level
    return dataclasses.replace(defaults, **values)


__all__ = [
    "ConfigError",
    "ReplConfig",
    "load_config",
]
