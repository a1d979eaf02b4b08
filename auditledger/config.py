"""
auditledger configuration.

The core takes explicit paths and options. This module is how callers
(the CLI, agent integrations) resolve them.

Precedence, highest first:
    1. explicit arguments (CLI flags)
    2. environment variables
    3. YAML config file (AUDIT_LEDGER_CONFIG or --config)
    4. built-in defaults

Environment:
    AUDIT_LEDGER_PATH          ledger file path
    AUDIT_LEDGER_DEFAULT_TYPE  action type used when none is given
    AUDIT_LEDGER_MODE          "redact" or "strict"
    AUDIT_LEDGER_CONFIG        path to a YAML config file

YAML keys: ledger_path, default_type, mode, extra_key_patterns,
extra_value_patterns.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from auditledger.core.exceptions import ConfigError
from auditledger.core.models import ACTION_TYPES, ActionType, is_action_type
from auditledger.core.redaction import RedactMode, RedactOptions
from auditledger.ledger.ledger import Ledger

DEFAULT_LEDGER_PATH = "./memory/action-ledger.jsonl"

ENV_LEDGER_PATH  = "AUDIT_LEDGER_PATH"
ENV_DEFAULT_TYPE = "AUDIT_LEDGER_DEFAULT_TYPE"
ENV_MODE         = "AUDIT_LEDGER_MODE"
ENV_CONFIG       = "AUDIT_LEDGER_CONFIG"

_YAML_KEYS = {
    "ledger_path",
    "default_type",
    "mode",
    "extra_key_patterns",
    "extra_value_patterns",
}


def _parse_mode(value: str, source: str) -> RedactMode:
    try:
        return RedactMode(str(value).lower())
    except ValueError:
        raise ConfigError(
            f"Invalid redaction mode {value!r} from {source}",
            {"valid": ", ".join(m.value for m in RedactMode)},
        )


def _parse_type(value: str, source: str) -> str:
    if not is_action_type(value):
        raise ConfigError(
            f"Invalid default action type {value!r} from {source}",
            {"valid": ", ".join(ACTION_TYPES)},
        )
    return value


def _string_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Config key '{key}' must be a list of strings")
    return list(value)


def _pattern_list(value: Any, key: str) -> List[str]:
    patterns = _string_list(value, key)
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid regex in '{key}': {pattern!r} ({e})")
    return patterns


@dataclass
class LedgerConfig:
    """Resolved settings for one ledger."""

    ledger_path:          Path = Path(DEFAULT_LEDGER_PATH)
    default_type:         str = ActionType.OTHER
    mode:                 RedactMode = RedactMode.REDACT
    extra_key_patterns:   List[str] = field(default_factory=list)
    extra_value_patterns: List[str] = field(default_factory=list)

    # ── Loaders ───────────────────────────────────────────────

    @classmethod
    def from_yaml(cls, config_file: Path) -> "LedgerConfig":
        """Load settings from a YAML file. Missing keys keep defaults."""
        config_file = Path(config_file)
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_file}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")

        unknown = set(data) - _YAML_KEYS
        if unknown:
            raise ConfigError(
                f"Unknown config key(s) in {config_file}",
                {"keys": ", ".join(sorted(unknown))},
            )

        config = cls()
        source = str(config_file)
        if data.get("ledger_path"):
            config.ledger_path = Path(data["ledger_path"])
        if data.get("default_type"):
            config.default_type = _parse_type(data["default_type"], source)
        if data.get("mode"):
            config.mode = _parse_mode(data["mode"], source)
        config.extra_key_patterns   = _pattern_list(
            data.get("extra_key_patterns"), "extra_key_patterns"
        )
        config.extra_value_patterns = _pattern_list(
            data.get("extra_value_patterns"), "extra_value_patterns"
        )
        return config

    @classmethod
    def from_env(
        cls,
        environ:     Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
    ) -> "LedgerConfig":
        """
        Resolve settings from the environment, layered over the config
        file (config_file argument, else AUDIT_LEDGER_CONFIG).
        """
        env = os.environ if environ is None else environ

        config_file = config_file or env.get(ENV_CONFIG)
        config = cls.from_yaml(Path(config_file)) if config_file else cls()

        if env.get(ENV_LEDGER_PATH):
            config.ledger_path = Path(env[ENV_LEDGER_PATH])
        if env.get(ENV_DEFAULT_TYPE):
            config.default_type = _parse_type(env[ENV_DEFAULT_TYPE], ENV_DEFAULT_TYPE)
        if env.get(ENV_MODE):
            config.mode = _parse_mode(env[ENV_MODE], ENV_MODE)
        return config

    def with_overrides(
        self,
        ledger_path: Optional[Path] = None,
        mode:        Optional[RedactMode] = None,
    ) -> "LedgerConfig":
        """Copy with explicit (CLI flag) values applied."""
        changes: Dict[str, Any] = {}
        if ledger_path is not None:
            changes["ledger_path"] = Path(ledger_path)
        if mode is not None:
            changes["mode"] = mode
        return replace(self, **changes)

    # ── Builders ──────────────────────────────────────────────

    def redact_options(self) -> RedactOptions:
        return RedactOptions(
            mode=                 self.mode,
            extra_key_patterns=   tuple(self.extra_key_patterns),
            extra_value_patterns= tuple(self.extra_value_patterns),
        )

    def open_ledger(self, redact: bool = True, on_fault=None) -> Ledger:
        """A Ledger bound to ledger_path with this config's redaction options."""
        return Ledger(
            self.ledger_path,
            options=  self.redact_options(),
            redact=   redact,
            on_fault= on_fault,
        )
