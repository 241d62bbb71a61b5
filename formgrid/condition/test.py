"""Unit tests for the condition engine."""

import pytest
from pydantic import ValidationError

from formgrid.condition import (
    Condition,
    Operator,
    RuleEffect,
    build_predicate,
    build_rule,
    coerce_value,
    name_from_scope,
    parse_predicate,
    parse_rule_condition,
    scope_for,
)


class TestCondition:
    """Tests for the Condition model."""

    @pytest.mark.unit
    def test_defaults_to_equals(self):
        """Operator defaults to equals."""
        condition = Condition(field="country")
        assert condition.operator == Operator.EQUALS
        assert condition.value is None

    @pytest.mark.unit
    def test_unary_operators_drop_value(self):
        """isEmpty and isNotEmpty never carry a value."""
        condition = Condition(field="notes", operator="isEmpty", value="ignored")
        assert condition.value is None
        condition = Condition(field="notes", operator=Operator.IS_NOT_EMPTY, value=3)
        assert condition.value is None

    @pytest.mark.unit
    def test_serializes_operator_as_camel_case(self):
        """Operators keep their document spelling."""
        data = Condition(field="age", operator=Operator.GREATER_THAN, value=18).model_dump(
            mode="json"
        )
        assert data == {"field": "age", "operator": "greaterThan", "value": 18}

    @pytest.mark.unit
    @pytest.mark.parametrize("operator", ["contains", "greaterThan", "lessThan"])
    def test_literal_operators_need_a_value(self, operator):
        """Pattern and bound operators refuse a missing literal."""
        with pytest.raises(ValidationError, match="needs a value"):
            Condition(field="n", operator=operator)

    @pytest.mark.unit
    def test_equals_accepts_null(self):
        """equals null is a valid const predicate."""
        assert build_predicate(Condition(field="n", value=None)) == {"const": None}


class TestScopes:
    """Tests for scope pointer helpers."""

    @pytest.mark.unit
    def test_scope_round_trip(self):
        """Names survive conversion to a scope pointer and back."""
        assert scope_for("age") == "#/properties/age"
        assert name_from_scope("#/properties/age") == "age"

    @pytest.mark.unit
    def test_missing_scope(self):
        """A missing scope yields an empty name."""
        assert name_from_scope(None) == ""
        assert name_from_scope("") == ""


class TestBuildPredicate:
    """Tests for operator to predicate synthesis."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("operator", "value", "expected"),
        [
            (Operator.EQUALS, "yes", {"const": "yes"}),
            (Operator.NOT_EQUALS, "no", {"not": {"const": "no"}}),
            (Operator.CONTAINS, "acme", {"pattern": "acme"}),
            (Operator.GREATER_THAN, 18, {"minimum": 18, "exclusiveMinimum": True}),
            (Operator.LESS_THAN, 5, {"maximum": 5, "exclusiveMaximum": True}),
            (Operator.IS_EMPTY, None, {"maxLength": 0}),
            (Operator.IS_NOT_EMPTY, None, {"minLength": 1}),
        ],
    )
    def test_predicate_table(self, operator, value, expected):
        """Each operator maps onto its predicate shape."""
        condition = Condition(field="x", operator=operator, value=value)
        assert build_predicate(condition) == expected

    @pytest.mark.unit
    def test_boolean_literal_kept(self):
        """Boolean literals are emitted unchanged."""
        condition = Condition(field="subscribe", value=True)
        assert build_predicate(condition) == {"const": True}


class TestParsePredicate:
    """Tests for predicate inversion."""

    @pytest.mark.unit
    def test_inverts_every_operator(self):
        """Each synthesized predicate inverts to its operator and value."""
        cases = [
            (Operator.EQUALS, "a"),
            (Operator.NOT_EQUALS, "b"),
            (Operator.CONTAINS, "c"),
            (Operator.GREATER_THAN, 18),
            (Operator.LESS_THAN, 2.5),
            (Operator.IS_EMPTY, None),
            (Operator.IS_NOT_EMPTY, None),
        ]
        for operator, value in cases:
            predicate = build_predicate(Condition(field="f", operator=operator, value=value))
            assert parse_predicate(predicate) == (operator, value)

    @pytest.mark.unit
    def test_empty_pattern_is_contains(self):
        """An empty pattern still reads as contains."""
        predicate = build_predicate(Condition(field="f", operator="contains", value=""))
        assert predicate == {"pattern": ""}
        assert parse_predicate(predicate) == (Operator.CONTAINS, "")

    @pytest.mark.unit
    def test_const_false_is_equals(self):
        """A falsy const still reads as equals."""
        assert parse_predicate({"const": False}) == (Operator.EQUALS, False)

    @pytest.mark.unit
    def test_first_match_wins(self):
        """const takes precedence over later shapes."""
        assert parse_predicate({"const": 1, "minimum": 3}) == (Operator.EQUALS, 1)

    @pytest.mark.unit
    def test_unknown_shape_defaults_to_equals(self):
        """Unrecognised shapes read as equals with an empty value."""
        assert parse_predicate({"type": "string"}) == (Operator.EQUALS, "")
        assert parse_predicate(None) == (Operator.EQUALS, "")


class TestRules:
    """Tests for rule envelopes."""

    @pytest.mark.unit
    def test_build_show_rule(self):
        """Visibility rules carry the SHOW effect and scoped predicate."""
        rule = build_rule(
            Condition(field="age", operator=Operator.GREATER_THAN, value=18),
            RuleEffect.SHOW,
        )
        assert rule == {
            "effect": "SHOW",
            "condition": {
                "scope": "#/properties/age",
                "schema": {"minimum": 18, "exclusiveMinimum": True},
            },
        }

    @pytest.mark.unit
    def test_parse_rule_condition(self):
        """Rule conditions rebuild into Condition values."""
        condition = parse_rule_condition(
            {"scope": "#/properties/status", "schema": {"not": {"const": "closed"}}}
        )
        assert condition == Condition(
            field="status", operator=Operator.NOT_EQUALS, value="closed"
        )

    @pytest.mark.unit
    def test_parse_rule_condition_missing_parts(self):
        """Missing scope and schema fall back to permissive defaults."""
        condition = parse_rule_condition({})
        assert condition.field == ""
        assert condition.operator == Operator.EQUALS
        assert condition.value == ""
        assert parse_rule_condition("broken").operator == Operator.EQUALS


class TestCoerceValue:
    """Tests for typing literals from the referenced kind."""

    @pytest.mark.unit
    def test_boolean(self):
        """Boolean kinds take bools."""
        assert coerce_value(Operator.EQUALS, "true", "boolean") is True
        assert coerce_value(Operator.EQUALS, "no", "boolean") is False
        with pytest.raises(ValueError):
            coerce_value(Operator.EQUALS, "maybe", "boolean")

    @pytest.mark.unit
    def test_number(self):
        """Number kinds take ints or floats."""
        assert coerce_value(Operator.GREATER_THAN, "18", "number") == 18
        assert coerce_value(Operator.LESS_THAN, "2.5", "number") == 2.5
        with pytest.raises(ValueError):
            coerce_value(Operator.LESS_THAN, "many", "number")

    @pytest.mark.unit
    def test_enumerated_options(self):
        """Enumerated strings only accept listed options for equality."""
        options = ["Red", "Green"]
        assert coerce_value(Operator.EQUALS, "Red", "string", options) == "Red"
        with pytest.raises(ValueError):
            coerce_value(Operator.EQUALS, "Blue", "string", options)
        assert coerce_value(Operator.CONTAINS, "Bl", "string", options) == "Bl"

    @pytest.mark.unit
    def test_unary_operator_returns_none(self):
        """Unary operators ignore the literal."""
        assert coerce_value(Operator.IS_EMPTY, "x", "string") is None

    @pytest.mark.unit
    def test_other_kinds_take_strings(self):
        """Unknown or missing kinds fall back to strings."""
        assert coerce_value(Operator.EQUALS, 5, None) == "5"
