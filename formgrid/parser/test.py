"""Unit tests for the schema parser."""

import logging

import pytest

from formgrid.compiler import compile_form
from formgrid.condition import Condition, Operator
from formgrid.layout import assign_rows
from formgrid.parser import SchemaParser, infer_kind, parse_form
from formgrid.tree import ChartConfig, FieldKind, FieldNode, WidthClass


def _control(name: str, **extra) -> dict:
    return {"type": "Control", "scope": f"#/properties/{name}", **extra}


def _rule(effect: str, field: str, schema: dict) -> dict:
    return {"effect": effect, "condition": {"scope": f"#/properties/{field}", "schema": schema}}


class TestInferKind:
    """Tests for kind inference."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "prop,kind",
        [
            ({"type": "string"}, FieldKind.STRING),
            ({"type": "integer"}, FieldKind.NUMBER),
            ({"type": "richText"}, FieldKind.RICH_TEXT),
            ({"type": "object", "chartType": "pie"}, FieldKind.CHART),
            ({"textType": "header"}, FieldKind.RICH_TEXT),
            ({"type": "array", "navItems": []}, FieldKind.NAVIGATION),
        ],
    )
    def test_known_shapes(self, prop, kind):
        """Type tags and hints select the kind."""
        assert infer_kind(prop) == kind

    @pytest.mark.unit
    def test_unknown_type_is_string(self, caplog):
        """Unknown tags read as string, with a warning."""
        with caplog.at_level(logging.WARNING):
            assert infer_kind({"type": "mystery"}) == FieldKind.STRING
        assert "mystery" in caplog.text


class TestParse:
    """Tests for SchemaParser.parse."""

    @pytest.mark.unit
    def test_properties_in_order(self):
        """One full-width node per property, in property order."""
        schema = {
            "type": "object",
            "properties": {
                "first": {"type": "string", "title": "First"},
                "age": {"type": "number", "minimum": 0},
                "agree": {"type": "boolean"},
            },
            "required": ["age"],
        }
        nodes = parse_form(schema)
        assert [node.name for node in nodes] == ["first", "age", "agree"]
        assert [node.kind for node in nodes] == [
            FieldKind.STRING,
            FieldKind.NUMBER,
            FieldKind.BOOLEAN,
        ]
        assert [node.required for node in nodes] == [False, True, False]
        assert [node.row for node in nodes] == [0, 1, 2]
        assert all(node.width == WidthClass.FULL for node in nodes)
        assert nodes[0].label == "First"
        assert nodes[1].label == "age"
        assert nodes[1].config.minimum == 0

    @pytest.mark.unit
    def test_config_read_from_property(self):
        """Kind-specific attributes are read back."""
        schema = {
            "properties": {
                "sales": {
                    "type": "chart",
                    "chartType": "line",
                    "data": [{"name": "Q1", "value": 10}],
                }
            }
        }
        (node,) = parse_form(schema)
        assert isinstance(node.config, ChartConfig)
        assert node.config.chart_type.value == "line"
        assert node.config.data[0].value == 10

    @pytest.mark.unit
    def test_rules_become_conditions(self):
        """SHOW and DISABLE rules map to visibility and read-only."""
        schema = {"properties": {"age": {"type": "number"}, "a": {}, "b": {}}}
        ui_schema = {
            "type": "VerticalLayout",
            "elements": [
                _control("age"),
                _control("a", rule=_rule("SHOW", "age", {"minimum": 18, "exclusiveMinimum": True})),
                _control("b", rule=_rule("DISABLE", "age", {"maximum": 5})),
            ],
        }
        age, a, b = SchemaParser().parse(schema, ui_schema)
        assert age.visibility is None
        assert a.visibility == Condition(field="age", operator=Operator.GREATER_THAN, value=18)
        assert b.readonly == Condition(field="age", operator=Operator.LESS_THAN, value=5)

    @pytest.mark.unit
    def test_controls_found_in_nested_layouts(self):
        """Controls inside HorizontalLayouts and Groups are matched."""
        schema = {"properties": {"x": {"type": "string"}, "y": {"type": "string"}}}
        ui_schema = {
            "type": "VerticalLayout",
            "elements": [
                {
                    "type": "Group",
                    "elements": [
                        {
                            "type": "HorizontalLayout",
                            "elements": [
                                _control("x"),
                                _control("y", rule=_rule("SHOW", "x", {"minLength": 1})),
                            ],
                        }
                    ],
                }
            ],
        }
        _, y = parse_form(schema, ui_schema)
        assert y.visibility.operator == Operator.IS_NOT_EMPTY

    @pytest.mark.unit
    def test_readonly_from_options(self):
        """A read-only condition beside a SHOW rule is recovered."""
        schema = {"properties": {"x": {"type": "string"}, "y": {"type": "string"}}}
        ui_schema = {
            "elements": [
                _control(
                    "y",
                    rule=_rule("SHOW", "x", {"const": "on"}),
                    options={
                        "readonly": {
                            "condition": {"scope": "#/properties/x", "schema": {"maxLength": 0}}
                        }
                    },
                )
            ]
        }
        _, y = parse_form(schema, ui_schema)
        assert y.visibility == Condition(field="x", value="on")
        assert y.readonly.operator == Operator.IS_EMPTY

    @pytest.mark.unit
    def test_unrecognised_predicate_defaults_to_equals(self):
        """An unknown predicate reads as equals with an empty value."""
        schema = {"properties": {"x": {}, "y": {}}}
        ui_schema = {"elements": [_control("y", rule=_rule("SHOW", "x", {"enum": [1]}))]}
        _, y = parse_form(schema, ui_schema)
        assert y.visibility == Condition(field="x", operator=Operator.EQUALS, value="")


class TestMalformedInput:
    """Tests for permissive parsing."""

    @pytest.mark.unit
    @pytest.mark.parametrize("schema", [None, [], "text", {"properties": []}])
    def test_unusable_schema(self, schema):
        """Unusable documents load as an empty tree."""
        assert parse_form(schema) == []

    @pytest.mark.unit
    def test_non_object_property_skipped(self, caplog):
        """Non-object properties are skipped without blocking others."""
        schema = {"properties": {"bad": 42, "good": {"type": "string"}}}
        with caplog.at_level(logging.WARNING):
            nodes = parse_form(schema)
        assert [node.name for node in nodes] == ["good"]
        assert "bad" in caplog.text

    @pytest.mark.unit
    def test_invalid_config_uses_defaults(self):
        """Invalid attributes fall back to the kind's defaults."""
        schema = {"properties": {"n": {"type": "number", "minimum": "lots"}}}
        (node,) = parse_form(schema)
        assert node.kind == FieldKind.NUMBER
        assert node.config.minimum is None

    @pytest.mark.unit
    def test_self_reference_dropped(self):
        """A rule pointing at its own field is ignored."""
        schema = {"properties": {"x": {"type": "string"}}}
        ui_schema = {"elements": [_control("x", rule=_rule("SHOW", "x", {"const": "a"}))]}
        (node,) = parse_form(schema, ui_schema)
        assert node.visibility is None

    @pytest.mark.unit
    def test_malformed_rule_condition(self):
        """A rule without a usable condition is dropped."""
        schema = {"properties": {"x": {"type": "string"}}}
        ui_schema = {"elements": [_control("x", rule={"effect": "SHOW", "condition": "?"})]}
        (node,) = parse_form(schema, ui_schema)
        assert node.visibility is None

    @pytest.mark.unit
    def test_required_not_a_list(self):
        """A malformed required entry is ignored."""
        schema = {"properties": {"x": {"type": "string"}}, "required": "x"}
        (node,) = parse_form(schema)
        assert node.required is False


class TestRoundTrip:
    """Tests for compile then parse."""

    @pytest.mark.unit
    def test_flat_tree_round_trip(self):
        """Names, kinds, required flags and rules survive."""
        nodes = assign_rows(
            [
                FieldNode(name="age", kind="number", required=True),
                FieldNode(
                    name="license",
                    kind="boolean",
                    visibility=Condition(field="age", operator="greaterThan", value=18),
                ),
                FieldNode(
                    name="notes",
                    kind="string",
                    visibility=Condition(field="license", value=True),
                    readonly=Condition(field="age", operator="lessThan", value=21),
                ),
                FieldNode(name="intro", kind="rich_text", config={"textType": "header"}),
            ]
        )
        compiled = compile_form(nodes)
        restored = parse_form(compiled.schema, compiled.ui_schema)

        def _summary(items):
            return [
                (n.name, n.kind, n.required, n.visibility, n.readonly, n.config)
                for n in items
            ]

        assert _summary(restored) == _summary(nodes)

    @pytest.mark.unit
    def test_empty_contains_round_trip(self):
        """contains with an empty literal keeps its operator."""
        nodes = assign_rows(
            [
                FieldNode(name="code", kind="string"),
                FieldNode(
                    name="hint",
                    kind="string",
                    visibility=Condition(field="code", operator="contains", value=""),
                ),
            ]
        )
        compiled = compile_form(nodes)
        _, hint = parse_form(compiled.schema, compiled.ui_schema)
        assert hint.visibility == Condition(field="code", operator=Operator.CONTAINS, value="")
