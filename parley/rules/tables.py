"""
Loading alternate rules tables from YAML.

File format, one mapping per argument type, each tier an
[interest, patience] pair:

    motivation:     {1: [1, 0], 2: [1, 0], 3: [2, 0]}
    no_motivation:  {1: [0, -1], 2: [1, -1], 3: [1, -1]}
    pitfall:        {1: [-1, -1], 2: [-1, -1], 3: [-2, -1]}
"""

import logging
from pathlib import Path

import pydantic
import yaml

from ..errors import ValidationError
from ..state.store import ensure_dir
from .arguments import RulesTable

logger = logging.getLogger(__name__)


def rules_table_from_dict(data: dict) -> RulesTable:
    """Build a RulesTable from a {type: {tier: [interest, patience]}} mapping."""
    if not isinstance(data, dict):
        raise ValidationError("Rules table must be a mapping of argument types")
    try:
        return RulesTable.model_validate({"effects": data})
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid rules table: {e}") from e


def rules_table_to_dict(rules: RulesTable) -> dict:
    """Inverse of rules_table_from_dict, for writing a table back out."""
    return {
        arg_type.value: {
            tier: [effect.interest, effect.patience]
            for tier, effect in sorted(tiers.items())
        }
        for arg_type, tiers in rules.effects.items()
    }


def load_rules_table(path: Path | str) -> RulesTable:
    """
    Load a rules table from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML is malformed or the table incomplete
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(f"Could not parse rules table {path}: {e}") from e

    rules = rules_table_from_dict(data)
    logger.info(f"Loaded rules table from {path}")
    return rules


def save_rules_table(rules: RulesTable, path: Path | str) -> Path:
    """Write a rules table as YAML. Returns the written path."""
    path = Path(path)
    ensure_dir(path.parent)
    path.write_text(
        yaml.safe_dump(rules_table_to_dict(rules), sort_keys=False),
        encoding="utf-8",
    )
    return path
