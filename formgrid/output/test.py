"""Tests for output module."""

import json

import pytest

from formgrid.condition import Condition, Operator
from formgrid.layout import assign_rows
from formgrid.output import FormOutput, OutputGenerator, format_condition, format_field_tree
from formgrid.tree import FieldNode


@pytest.fixture
def sample_tree() -> list[FieldNode]:
    """Create sample tree for testing."""
    return assign_rows(
        [
            FieldNode(id="email", name="email", label="Email", kind="string", width="half", required=True),
            FieldNode(id="age", name="age", label="Age", kind="number", width="half"),
            FieldNode(
                id="details",
                name="details",
                label="Details",
                kind="container",
                visibility=Condition(field="age", operator=Operator.GREATER_THAN, value=18),
                children=[FieldNode(id="notes", name="notes", label="Notes", kind="string")],
            ),
        ]
    )


class TestFormatFieldTree:
    """Tests for format_field_tree function."""

    @pytest.mark.unit
    def test_empty_tree(self):
        """An empty tree is just the title."""
        assert format_field_tree([]) == "Form"

    @pytest.mark.unit
    def test_nested_tree(self, sample_tree):
        """Nested nodes are drawn with box connectors."""
        assert format_field_tree(sample_tree, title="Signup").splitlines() == [
            "Signup",
            "├── Email [string, 50%, r0c0, required]",
            "├── Age [number, 50%, r0c1]",
            "└── Details [container, 100%, r1c0, shown if age greaterThan 18]",
            "    └── Notes [string, 100%, r0c0]",
        ]

    @pytest.mark.unit
    def test_readonly_marker(self):
        """Read-only conditions are shown."""
        nodes = [
            FieldNode(name="a", kind="boolean"),
            FieldNode(name="b", kind="string", readonly=Condition(field="a", value=True)),
        ]
        assert "readonly if a equals true" in format_field_tree(assign_rows(nodes))


class TestFormatCondition:
    """Tests for format_condition."""

    @pytest.mark.unit
    def test_unary_operator_has_no_value(self):
        """isEmpty and isNotEmpty print without a literal."""
        assert format_condition(Condition(field="x", operator="isEmpty")) == "x isEmpty"

    @pytest.mark.unit
    def test_string_value_is_quoted(self):
        """String literals are quoted."""
        assert format_condition(Condition(field="x", value="yes")) == 'x equals "yes"'


class TestOutputGenerator:
    """Tests for OutputGenerator class."""

    @pytest.mark.unit
    def test_generate(self, sample_tree):
        """Output carries the text tree and compiled documents."""
        output = OutputGenerator().generate(sample_tree)
        assert isinstance(output, FormOutput)
        assert output.text_tree.startswith("Form\n")
        assert set(output.compiled.schema["properties"]) == {"email", "age", "notes"}
        assert output.nodes is sample_tree

    @pytest.mark.unit
    def test_documents_json(self, sample_tree):
        """Documents serialize to the schema/uiSchema envelope."""
        output = OutputGenerator(title="Signup").generate(sample_tree)
        data = json.loads(output.documents_json(indent=4))
        assert set(data) == {"schema", "uiSchema"}
        assert output.text_tree.startswith("Signup")
