"""
Negotiation rules as pure functions.

Separates logic from data models for easier testing.
"""

from .outcome import classify, OUTCOME_BY_INTEREST
from .arguments import (
    ArgumentEffect,
    RulesTable,
    DEFAULT_RULES,
    apply_argument,
    resolve_deltas,
    validate_argument,
)
from .tables import load_rules_table, save_rules_table, rules_table_from_dict
from .reveal import reveal_motivation, reveal_pitfall

__all__ = [
    "classify",
    "OUTCOME_BY_INTEREST",
    "ArgumentEffect",
    "RulesTable",
    "DEFAULT_RULES",
    "apply_argument",
    "resolve_deltas",
    "validate_argument",
    "load_rules_table",
    "save_rules_table",
    "rules_table_from_dict",
    "reveal_motivation",
    "reveal_pitfall",
]
