# src/tracelang/config.py
"""Interpreter configuration.

Values are resolved from, lowest precedence first: built-in defaults, the JSON
config file (``~/.tracelang/config.json`` or ``$TRACELANG_CONFIG``),
environment variables, then explicit overrides.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".tracelang" / "config.json"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_DEFAULTS = {
    "log_level": "WARNING",
    "max_call_depth": 200,
    "show_traces": False,
}


class TraceLangConfig:
    def __init__(self, **overrides):
        self.log_level = _DEFAULTS["log_level"]
        self.max_call_depth = _DEFAULTS["max_call_depth"]
        self.show_traces = _DEFAULTS["show_traces"]
        self.update(overrides)

    @classmethod
    def load(cls, path=None, environ=None, **overrides):
        """Build a config from file, environment and keyword overrides."""
        environ = os.environ if environ is None else environ
        config = cls()

        file_path = Path(path or environ.get("TRACELANG_CONFIG") or DEFAULT_CONFIG_PATH)
        if file_path.is_file():
            try:
                data = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("ignoring unreadable config file %s: %s", file_path, exc)
            else:
                config.update(data)

        env_values = {}
        if environ.get("TRACELANG_LOG_LEVEL"):
            env_values["log_level"] = environ["TRACELANG_LOG_LEVEL"]
        if environ.get("TRACELANG_MAX_CALL_DEPTH"):
            env_values["max_call_depth"] = environ["TRACELANG_MAX_CALL_DEPTH"]
        config.update(env_values)

        config.update({k: v for k, v in overrides.items() if v is not None})
        return config

    def update(self, values):
        for key, value in values.items():
            if key not in _DEFAULTS:
                logger.warning("unknown config key '%s'", key)
                continue
            setattr(self, key, self._coerce(key, value))

    @staticmethod
    def _coerce(key, value):
        if key == "log_level":
            level = str(value).upper()
            if level not in _LEVELS:
                raise ValueError(f"invalid log level '{value}'")
            return level
        if key == "max_call_depth":
            depth = int(value)
            if depth < 1:
                raise ValueError("max_call_depth must be positive")
            return depth
        if key == "show_traces":
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        return value

    def to_dict(self):
        return {key: getattr(self, key) for key in _DEFAULTS}

    def __repr__(self):
        return f"TraceLangConfig({self.to_dict()})"


config = TraceLangConfig()
