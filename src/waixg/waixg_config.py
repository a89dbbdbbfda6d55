"""
Provides the `Settings` class for configuring the WAIXG REPL and CLI.

Settings are layered, later sources winning:

    1. Built-in defaults
    2. A JSON file (an explicit path, else `$WAIXG_CONFIG` when set)
    3. Environment variables: `WAIXG_MAX_DEPTH`, `WAIXG_VERBOSE`, `WAIXG_TRACE`
    4. Command-line flags (applied by `waixg_cli`)

Classes:
    - Settings: The resolved configuration.
    - ConfigError: Raised when a configuration source is invalid.

Usage:
    >>> settings = load_settings("waixg.json")
    >>> settings.max_depth
    200

Example JSON file:
    {
        "max_depth": 500,
        "prompt": "waixg> ",
        "verbose": true
    }
"""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from waixg.waixg_eval import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT

CONFIG_ENV = "WAIXG_CONFIG"

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off", ""}

FIELD_TYPES: dict[str, type] = {
    "max_depth": int,
    "prompt": str,
    "continuation_prompt": str,
    "verbose": bool,
    "trace": bool,
}


class ConfigError(Exception):
    """Raised when a WAIXG configuration source is invalid.

    Attributes:
        problems (list[str]): Every problem found, one entry per offending key.

    Example:
        raise ConfigError("Invalid configuration", ["max_depth: expected int, got str"])
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []

    def __str__(self) -> str:
        if not self.problems:
            return super().__str__()
        return super().__str__() + ": " + "; ".join(self.problems)


@dataclass(frozen=True)
class Settings:
    """Resolved WAIXG configuration.

    Attributes:
        max_depth (int): Maximum nesting of function calls before evaluation fails.
        prompt (str): REPL prompt for the first line of an input.
        continuation_prompt (str): REPL prompt while a `{` or `(` is still open.
        verbose (bool): Print the parsed AST before evaluating.
        trace (bool): Print a parse-function trace to stderr.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    prompt: str = ">> "
    continuation_prompt: str = ".. "
    verbose: bool = False
    trace: bool = False

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any], base: "Settings | None" = None) -> "Settings":
        """
        Builds settings from a mapping, on top of `base` (defaults if omitted).

        Raises:
            ConfigError: If keys are unknown, values have the wrong type, or
                `max_depth` is outside 1..MAX_DEPTH_LIMIT. All problems are
                reported together.
        """
        if not isinstance(cfg, Mapping):
            raise ConfigError("Configuration must be a JSON object")

        problems: list[str] = []
        values: dict[str, Any] = {}

        for key, value in cfg.items():
            if key not in FIELD_TYPES:
                problems.append(f"{key}: unknown setting")
                continue
            want = FIELD_TYPES[key]
            # bool is a subclass of int; reject it for integer settings
            if not isinstance(value, want) or (want is int and isinstance(value, bool)):
                problems.append(
                    f"{key}: expected {want.__name__}, got {type(value).__name__}"
                )
                continue
            values[key] = value

        if "max_depth" in values and values["max_depth"] < 1:
            problems.append(f"max_depth: must be positive, got {values['max_depth']}")
        elif "max_depth" in values and values["max_depth"] > MAX_DEPTH_LIMIT:
            problems.append(
                f"max_depth: must be at most {MAX_DEPTH_LIMIT}, got {values['max_depth']}"
            )

        if problems:
            raise ConfigError("Invalid configuration", problems)

        return replace(base or cls(), **values)

    @classmethod
    def load_from_json(cls, path: str, base: "Settings | None" = None) -> "Settings":
        """
        Loads settings from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or parsed, or its content is invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        return cls.from_mapping(raw_cfg, base)


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    raise ConfigError("Invalid environment", [f"{name}: expected a boolean, got {raw!r}"])


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(
            "Invalid environment", [f"{name}: expected an integer, got {raw!r}"]
        ) from None


def load_settings(
    path: str | None = None, env: Mapping[str, str] | None = None
) -> Settings:
    """
    Resolves settings from defaults, a JSON file and environment variables.

    Args:
        path: JSON config file; falls back to `$WAIXG_CONFIG` when None.
        env: Environment to read; defaults to `os.environ`.

    Raises:
        ConfigError: If any source is invalid.
    """
    env = os.environ if env is None else env
    settings = Settings()

    path = path or env.get(CONFIG_ENV) or None
    if path:
        settings = Settings.load_from_json(path, settings)

    overrides: dict[str, Any] = {}
    if "WAIXG_MAX_DEPTH" in env:
        overrides["max_depth"] = _parse_int("WAIXG_MAX_DEPTH", env["WAIXG_MAX_DEPTH"])
    if "WAIXG_VERBOSE" in env:
        overrides["verbose"] = _parse_bool("WAIXG_VERBOSE", env["WAIXG_VERBOSE"])
    if "WAIXG_TRACE" in env:
        overrides["trace"] = _parse_bool("WAIXG_TRACE", env["WAIXG_TRACE"])

    return Settings.from_mapping(overrides, settings)


__all__ = ["ConfigError", "Settings", "load_settings"]
