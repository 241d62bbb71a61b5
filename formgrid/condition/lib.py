"""Conditional rule vocabulary and predicate synthesis.

A condition ties the visibility or read-only state of one field to the value
of another field. This module owns the operator vocabulary, the mapping of an
operator onto a JSON Schema predicate (and back), and the rule envelopes used
by the presentation document.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

SCOPE_PREFIX = "#/properties/"


class Operator(str, Enum):
    """Comparison applied to the referenced field's value."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"

    @property
    def takes_value(self) -> bool:
        """Whether the operator compares against a literal."""
        return self not in (Operator.IS_EMPTY, Operator.IS_NOT_EMPTY)


# Operators whose predicate cannot be built from a null literal.
LITERAL_OPERATORS = frozenset(
    {Operator.CONTAINS, Operator.GREATER_THAN, Operator.LESS_THAN}
)


class RuleEffect(str, Enum):
    """Effect of a presentation rule."""

    SHOW = "SHOW"
    DISABLE = "DISABLE"


class Condition(BaseModel):
    """Reference to another field plus the comparison to apply to it.

    Attributes:
        field: Structural name of the referenced field.
        operator: Comparison operator.
        value: Literal compared against; always None for isEmpty/isNotEmpty.
    """

    field: str = Field(..., description="Structural name of the referenced field")
    operator: Operator = Field(default=Operator.EQUALS)
    value: Any = Field(default=None, description="Literal compared against")

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _drop_value_for_unary(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("operator") in ("isEmpty", "isNotEmpty"):
            return {**data, "value": None}
        return data

    @model_validator(mode="after")
    def _require_literal(self) -> "Condition":
        # const null is a valid predicate; pattern and bounds are not.
        if self.value is None and self.operator in LITERAL_OPERATORS:
            raise ValueError(f"{self.operator.value} condition needs a value")
        return self


# =============================================================================
# Scope pointers
# =============================================================================


def scope_for(name: str) -> str:
    """Build the scope pointer for a data-shape property."""
    return f"{SCOPE_PREFIX}{name}"


def name_from_scope(scope: Any) -> str:
    """Extract the property name from a scope pointer.

    Unknown pointer shapes are returned with only the standard prefix removed;
    a missing or non-string scope yields an empty name.
    """
    if not isinstance(scope, str) or not scope:
        return ""
    if scope.startswith(SCOPE_PREFIX):
        return scope[len(SCOPE_PREFIX) :]
    return scope


# =============================================================================
# Predicate synthesis and inversion
# =============================================================================


def build_predicate(condition: Condition) -> dict[str, Any]:
    """Translate a condition into the JSON Schema its field value must match.

    Args:
        condition: The condition to translate.

    Returns:
        A JSON Schema fragment, e.g. ``{"const": "yes"}``.
    """
    value = condition.value
    match condition.operator:
        case Operator.EQUALS:
            return {"const": value}
        case Operator.NOT_EQUALS:
            return {"not": {"const": value}}
        case Operator.CONTAINS:
            return {"pattern": str(value)}
        case Operator.GREATER_THAN:
            return {"minimum": value, "exclusiveMinimum": True}
        case Operator.LESS_THAN:
            return {"maximum": value, "exclusiveMaximum": True}
        case Operator.IS_EMPTY:
            return {"maxLength": 0}
        case Operator.IS_NOT_EMPTY:
            return {"minLength": 1}
    return {"const": value}


def parse_predicate(schema: Any) -> tuple[Operator, Any]:
    """Recover the operator and literal from a predicate schema.

    The first matching shape wins; anything unrecognised is read as
    ``equals`` with an empty value.

    Args:
        schema: Predicate fragment produced by `build_predicate` (or by hand).

    Returns:
        Tuple of (operator, value).
    """
    if not isinstance(schema, dict):
        return Operator.EQUALS, ""

    negated = schema.get("not")
    if "const" in schema:
        return Operator.EQUALS, schema["const"]
    if isinstance(negated, dict) and "const" in negated:
        return Operator.NOT_EQUALS, negated["const"]
    if isinstance(schema.get("pattern"), str):
        return Operator.CONTAINS, schema["pattern"]
    if schema.get("minimum") is not None:
        return Operator.GREATER_THAN, schema["minimum"]
    if schema.get("maximum") is not None:
        return Operator.LESS_THAN, schema["maximum"]
    if schema.get("maxLength") == 0:
        return Operator.IS_EMPTY, None
    if schema.get("minLength") == 1:
        return Operator.IS_NOT_EMPTY, None
    return Operator.EQUALS, ""


# =============================================================================
# Rule envelopes
# =============================================================================


def build_rule_condition(condition: Condition) -> dict[str, Any]:
    """Build the ``{"scope", "schema"}`` pair used inside rules."""
    return {
        "scope": scope_for(condition.field),
        "schema": build_predicate(condition),
    }


def build_rule(condition: Condition, effect: RuleEffect) -> dict[str, Any]:
    """Build a presentation rule for a condition.

    Args:
        condition: The condition driving the rule.
        effect: SHOW for visibility, DISABLE for read-only.

    Returns:
        Rule dict with ``effect`` and ``condition`` keys.
    """
    return {"effect": effect.value, "condition": build_rule_condition(condition)}


def parse_rule_condition(rule_condition: Any) -> Condition:
    """Rebuild a Condition from a rule's ``condition`` block.

    Missing or malformed parts fall back to an empty field name and
    ``equals`` with an empty value.
    """
    if not isinstance(rule_condition, dict):
        logger.warning("Rule condition is not an object, using defaults")
        return Condition(field="", operator=Operator.EQUALS, value="")

    field_name = name_from_scope(rule_condition.get("scope"))
    operator, value = parse_predicate(rule_condition.get("schema"))
    return Condition(field=field_name, operator=operator, value=value)


# =============================================================================
# Value typing
# =============================================================================


def coerce_value(
    operator: Operator,
    value: Any,
    kind: str | None,
    options: list[str] | None = None,
) -> Any:
    """Type a condition literal from the referenced field's kind.

    Boolean fields take bools, enumerated strings take one of their options,
    number fields take numbers, everything else takes strings.

    Args:
        operator: The condition operator.
        value: Raw literal (often a string typed by the user).
        kind: Kind of the referenced field, or None when it does not exist.
        options: Enumerated options of the referenced field, if any.

    Returns:
        The typed literal.

    Raises:
        ValueError: If the literal cannot be represented for that kind.
    """
    if not operator.takes_value:
        return None

    if kind == "boolean":
        if isinstance(value, bool):
            return value
        normalized = str(value).strip().lower()
        if normalized in ("true", "1", "yes"):
            return True
        if normalized in ("false", "0", "no", ""):
            return False
        raise ValueError(f"'{value}' is not a boolean")

    if kind == "number":
        if isinstance(value, bool):
            raise ValueError(f"'{value}' is not a number")
        if isinstance(value, (int, float)):
            return value
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            try:
                return float(text)
            except ValueError:
                raise ValueError(f"'{value}' is not a number") from None

    text = "" if value is None else str(value)
    if options and operator in (Operator.EQUALS, Operator.NOT_EQUALS):
        if text not in options:
            raise ValueError(
                f"'{text}' is not one of the options: {', '.join(options)}"
            )
    return text


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
