"""Unit tests for the schema compiler."""

import pytest

from formgrid.compiler import (
    CompiledForm,
    SchemaCompiler,
    WarningKind,
    compile_form,
    type_tag,
)
from formgrid.condition import Condition, Operator
from formgrid.layout import assign_rows
from formgrid.tree import FieldKind, FieldNode


def _field(name: str, kind: str = "string", width: str = "full", **kwargs) -> FieldNode:
    return FieldNode(id=name, name=name, kind=kind, width=width, **kwargs)


def _compile(nodes: list[FieldNode]) -> CompiledForm:
    return compile_form(assign_rows(nodes))


class TestDataShape:
    """Tests for the data-shape document."""

    @pytest.mark.unit
    def test_empty_tree(self):
        """An empty tree compiles to an empty object schema."""
        compiled = _compile([])
        assert compiled.schema == {"type": "object", "properties": {}}
        assert compiled.ui_schema == {"type": "VerticalLayout", "elements": []}
        assert not compiled.has_warnings

    @pytest.mark.unit
    def test_property_carries_type_config_and_title(self):
        """Properties merge the type tag, config and title."""
        compiled = _compile(
            [_field("email", label="Email", config={"format": "email"}, required=True)]
        )
        assert compiled.schema["properties"]["email"] == {
            "type": "string",
            "format": "email",
            "title": "Email",
        }
        assert compiled.schema["required"] == ["email"]

    @pytest.mark.unit
    def test_required_omitted_when_empty(self):
        """No required list is written when nothing is required."""
        compiled = _compile([_field("notes")])
        assert "required" not in compiled.schema

    @pytest.mark.unit
    def test_properties_flattened_across_containers(self):
        """Leaves inside containers land in the root properties map."""
        box = FieldNode(
            id="box",
            name="box",
            kind="container",
            children=[_field("inner", "number", required=True)],
        )
        compiled = _compile([_field("outer"), box])
        assert list(compiled.schema["properties"]) == ["outer", "inner"]
        assert compiled.schema["required"] == ["inner"]
        assert "box" not in compiled.schema["properties"]

    @pytest.mark.unit
    def test_rich_text_type_tag(self):
        """Rich text uses the camelCase type tag."""
        assert type_tag(FieldKind.RICH_TEXT) == "richText"
        compiled = _compile([_field("intro", "rich_text")])
        prop = compiled.schema["properties"]["intro"]
        assert prop["type"] == "richText"
        assert prop["textType"] == "paragraph"

    @pytest.mark.unit
    def test_array_columns_and_items(self):
        """Tables write their columns and an item schema."""
        compiled = _compile([_field("rows", "array")])
        prop = compiled.schema["properties"]["rows"]
        assert [column["name"] for column in prop["columns"]] == ["column1", "column2"]
        assert prop["items"]["properties"]["column1"] == {
            "type": "string",
            "title": "Column 1",
        }

    @pytest.mark.unit
    def test_duplicate_name_warns_and_keeps_first(self):
        """The first node with a name keeps the property."""
        nodes = [
            _field("dup", label="First"),
            FieldNode(id="second", name="dup", kind="number", label="Second"),
        ]
        compiled = _compile(nodes)
        assert compiled.schema["properties"]["dup"]["title"] == "First"
        assert [w.kind for w in compiled.warnings] == [WarningKind.DUPLICATE_NAME]
        assert compiled.warnings[0].node_id == "second"


class TestPresentation:
    """Tests for the presentation document."""

    @pytest.mark.unit
    def test_plain_string_is_multiline(self):
        """Strings without format or options get the multi option."""
        compiled = _compile([_field("notes"), _field("email", config={"format": "email"})])
        notes, email = compiled.ui_schema["elements"]
        assert notes == {
            "type": "Control",
            "scope": "#/properties/notes",
            "options": {"multi": True},
        }
        assert "options" not in email

    @pytest.mark.unit
    def test_enum_string_is_not_multiline(self):
        """Enumerated strings render as a select."""
        compiled = _compile([_field("color", config={"enum": ["red", "blue"]})])
        assert "options" not in compiled.ui_schema["elements"][0]

    @pytest.mark.unit
    def test_shared_row_becomes_horizontal_layout(self):
        """Rows with several members carry grid widths."""
        compiled = _compile(
            [
                _field("a", "number", "quarter"),
                _field("b", "number", "quarter"),
                _field("c", "number", "half"),
                _field("d", "number", "quarter"),
            ]
        )
        first, second = compiled.ui_schema["elements"]
        assert first["type"] == "HorizontalLayout"
        assert [el["options"]["xs"] for el in first["elements"]] == [3, 3, 6]
        assert second == {"type": "Control", "scope": "#/properties/d"}

    @pytest.mark.unit
    def test_single_member_row_unwrapped(self):
        """A lone node is emitted directly, without its width."""
        compiled = _compile([_field("a", "number", "half"), _field("b", "number")])
        assert [el["type"] for el in compiled.ui_schema["elements"]] == ["Control", "Control"]

    @pytest.mark.unit
    def test_stored_rows_are_honoured(self):
        """Rows split by a resize stay split in the document."""
        nodes = [
            _field("a", "number", "quarter", row=0),
            _field("b", "number", "quarter", row=1),
        ]
        compiled = compile_form(nodes)
        assert len(compiled.ui_schema["elements"]) == 2

    @pytest.mark.unit
    def test_groups(self):
        """Containers and panels compile to Groups with chrome options."""
        section = FieldNode(
            id="s",
            name="s",
            label="Details",
            kind="container",
            config={"variant": "section"},
            children=[_field("inner", "number")],
        )
        plain = FieldNode(id="p", name="p", kind="container")
        panel = FieldNode(id="w", name="w", kind="panel")
        compiled = _compile([section, plain, panel])
        group, subgroup, window = compiled.ui_schema["elements"]
        assert group == {
            "type": "Group",
            "label": "Details",
            "elements": [{"type": "Control", "scope": "#/properties/inner"}],
            "options": {"detail": "GENERATED"},
        }
        assert subgroup["options"] == {"detail": "NONE"}
        assert window["options"] == {"detail": "GENERATED"}

    @pytest.mark.unit
    def test_groups_share_rows(self):
        """Containers take part in row packing with their width."""
        box = FieldNode(id="box", name="box", kind="container", width="half")
        compiled = _compile([box, _field("n", "number", "half")])
        row = compiled.ui_schema["elements"][0]
        assert row["type"] == "HorizontalLayout"
        assert row["elements"][0]["options"] == {"detail": "NONE", "xs": 6}


class TestRules:
    """Tests for rule synthesis."""

    @pytest.mark.unit
    def test_visibility_rule(self):
        """greaterThan compiles to a strictly greater SHOW rule."""
        nodes = [
            _field("age", "number"),
            _field(
                "license",
                "boolean",
                visibility=Condition(field="age", operator=Operator.GREATER_THAN, value=18),
            ),
        ]
        element = _compile(nodes).ui_schema["elements"][1]
        assert element["rule"] == {
            "effect": "SHOW",
            "condition": {
                "scope": "#/properties/age",
                "schema": {"minimum": 18, "exclusiveMinimum": True},
            },
        }

    @pytest.mark.unit
    def test_readonly_alone_is_disable_rule(self):
        """Read-only without visibility becomes a DISABLE rule."""
        nodes = [
            _field("locked", "boolean"),
            _field("notes", readonly=Condition(field="locked", value=True)),
        ]
        element = _compile(nodes).ui_schema["elements"][1]
        assert element["rule"]["effect"] == "DISABLE"
        assert element["rule"]["condition"]["schema"] == {"const": True}

    @pytest.mark.unit
    def test_readonly_with_visibility_goes_to_options(self):
        """With a SHOW rule present, read-only moves into options."""
        nodes = [
            _field("kind", config={"enum": ["a", "b"]}),
            _field(
                "notes",
                visibility=Condition(field="kind", value="a"),
                readonly=Condition(field="kind", operator="isEmpty"),
            ),
        ]
        element = _compile(nodes).ui_schema["elements"][1]
        assert element["rule"]["effect"] == "SHOW"
        assert element["options"] == {
            "multi": True,
            "readonly": {
                "condition": {"scope": "#/properties/kind", "schema": {"maxLength": 0}}
            },
        }

    @pytest.mark.unit
    def test_group_rules(self):
        """Containers carry rules too."""
        box = FieldNode(
            id="box",
            name="box",
            kind="container",
            visibility=Condition(field="toggle", value=True),
        )
        compiled = _compile([_field("toggle", "boolean"), box])
        assert compiled.ui_schema["elements"][1]["rule"]["effect"] == "SHOW"

    @pytest.mark.unit
    def test_dangling_reference_warns(self):
        """A missing reference still compiles, with a warning."""
        nodes = [_field("notes", visibility=Condition(field="ghost", value="x"))]
        compiled = _compile(nodes)
        element = compiled.ui_schema["elements"][0]
        assert element["rule"]["condition"]["scope"] == "#/properties/ghost"
        assert "ghost" not in compiled.schema["properties"]
        assert compiled.warnings[0].kind == WarningKind.DANGLING_CONDITION
        assert compiled.warnings[0].reference == "ghost"


class TestSchemaCompiler:
    """Tests for the compiler object."""

    @pytest.mark.unit
    def test_reusable(self):
        """State does not leak between runs."""
        compiler = SchemaCompiler()
        first = compiler.compile(assign_rows([_field("a", required=True)]))
        second = compiler.compile(assign_rows([_field("b")]))
        assert list(first.schema["properties"]) == ["a"]
        assert list(second.schema["properties"]) == ["b"]
        assert "required" not in second.schema

    @pytest.mark.unit
    def test_compile_is_pure(self):
        """Compiling twice gives equal documents."""
        nodes = assign_rows([_field("a", "quarter"), _field("b", "number", "half")])
        assert compile_form(nodes).to_documents() == compile_form(nodes).to_documents()
