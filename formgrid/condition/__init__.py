"""Condition vocabulary and predicate (de)synthesis for conditional rules."""

from .lib import (
    LITERAL_OPERATORS,
    SCOPE_PREFIX,
    Condition,
    Operator,
    RuleEffect,
    build_predicate,
    build_rule,
    build_rule_condition,
    coerce_value,
    name_from_scope,
    parse_predicate,
    parse_rule_condition,
    scope_for,
)

__all__ = [
    "SCOPE_PREFIX",
    "LITERAL_OPERATORS",
    "Operator",
    "RuleEffect",
    "Condition",
    "scope_for",
    "name_from_scope",
    "build_predicate",
    "parse_predicate",
    "build_rule",
    "build_rule_condition",
    "parse_rule_condition",
    "coerce_value",
]
