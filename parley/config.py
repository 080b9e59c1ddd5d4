"""
User configuration persistence.

Stores settings like where sessions live, which rules table to use, and
default starting values in a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import TypedDict

from .rules.arguments import DEFAULT_RULES
from .rules.tables import load_rules_table
from .state.manager import NarrativeHook, NegotiationManager
from .state.schema import CreateNegotiationInput
from .state.store import ensure_dir

logger = logging.getLogger(__name__)


class Config(TypedDict, total=False):
    """User configuration."""
    sessions_dir: str  # Where JsonSessionStore writes session files
    rules_file: str | None  # YAML rules table; None uses the built-in table
    default_interest: int
    default_patience: int
    default_impression: int


DEFAULT_CONFIG: Config = {
    "sessions_dir": "negotiations",
    "rules_file": None,
    "default_interest": 2,
    "default_patience": 5,
    "default_impression": 0,
}


# Lives beside the session files; the leading dot keeps stores from reading it
CONFIG_FILENAME = ".parley_config.json"


def get_config_path(config_dir: Path | str = "negotiations") -> Path:
    return Path(config_dir) / CONFIG_FILENAME


def load_config(config_dir: Path | str = "negotiations") -> Config:
    """
    Saved settings layered over DEFAULT_CONFIG.

    A missing or unreadable file yields the defaults; keys this version
    does not know are dropped.
    """
    config: Config = DEFAULT_CONFIG.copy()
    path = get_config_path(config_dir)
    if not path.exists():
        return config

    try:
        saved = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return config

    if not isinstance(saved, dict):
        logger.warning(f"Ignoring config {path}: expected a JSON object")
        return config

    config.update({key: value for key, value in saved.items() if key in DEFAULT_CONFIG})
    return config


def save_config(config: Config, config_dir: Path | str = "negotiations") -> Path:
    """Write the config into config_dir, creating it. Returns the file path."""
    path = ensure_dir(config_dir) / CONFIG_FILENAME
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def set_rules_file(rules_file: str | None, config_dir: Path | str = "negotiations") -> None:
    """Save rules table preference."""
    config = load_config(config_dir)
    config["rules_file"] = rules_file
    save_config(config, config_dir)


def new_session_input(config: Config, **fields) -> CreateNegotiationInput:
    """CreateNegotiationInput with the configured starting values filled in."""
    fields.setdefault("interest", config.get("default_interest", DEFAULT_CONFIG["default_interest"]))
    fields.setdefault("patience", config.get("default_patience", DEFAULT_CONFIG["default_patience"]))
    fields.setdefault("impression", config.get("default_impression", DEFAULT_CONFIG["default_impression"]))
    return CreateNegotiationInput(**fields)


def manager_from_config(
    config: Config,
    narrative_hook: NarrativeHook | None = None,
) -> NegotiationManager:
    """Build a file-backed NegotiationManager from a config."""
    rules_file = config.get("rules_file")
    rules = load_rules_table(rules_file) if rules_file else DEFAULT_RULES

    return NegotiationManager(
        store=config.get("sessions_dir", DEFAULT_CONFIG["sessions_dir"]),
        rules=rules,
        narrative_hook=narrative_hook,
    )
