"""Integration tests for the form building workflow.

Tests the full lifecycle:
1. Build a form through drag-and-drop and settings edits
2. Compile it to the document pair
3. Save it, reload it from the store, and parse it back
"""

import pytest

from formgrid.compiler import compile_form
from formgrid.condition import Condition, Operator
from formgrid.layout import DropTarget
from formgrid.parser import parse_form
from formgrid.session import (
    DragSession,
    ExistingFieldPayload,
    FormSession,
    NewFieldPayload,
)
from formgrid.tree import FieldKind, WidthClass, find_by_path, iter_nodes
from formgrid.validation import validate_tree


def _drop(session: FormSession, payload, target: DropTarget | None = None):
    drag = DragSession().begin(payload).hover(target or DropTarget.root()).drop()
    return session.drop(drag)


def _summary(nodes):
    return sorted(
        (node.name, node.kind, node.required, node.visibility, node.readonly)
        for node in nodes
    )


@pytest.mark.integration
class TestDragAndDropLayout:
    """Grid packing through palette drops and moves."""

    def test_quarter_quarter_half_then_quarter(self):
        """Three drops fill one row; the fourth starts the next."""
        session = FormSession()
        for width in (WidthClass.QUARTER, WidthClass.QUARTER, WidthClass.HALF):
            assert _drop(session, NewFieldPayload(FieldKind.STRING, width))
        assert [node.row for node in session.nodes] == [0, 0, 0]

        assert _drop(session, NewFieldPayload(FieldKind.STRING, WidthClass.QUARTER))
        assert [node.row for node in session.nodes] == [0, 0, 0, 1]
        assert [node.column for node in session.nodes] == [0, 1, 2, 0]

    def test_move_child_out_of_container(self, nested_form):
        """Moving one of two children out leaves exactly the other."""
        session = FormSession(nested_form)
        assert _drop(session, ExistingFieldPayload("street"), DropTarget.root())

        box = find_by_path(session.nodes, "box")
        assert [child.id for child in box.children] == ["city"]
        assert session.nodes[-1].id == "street"
        assert validate_tree(session.nodes) == []

    def test_cyclic_move_leaves_tree_identical(self, nested_form):
        """Dropping a container into its own child container is refused."""
        session = FormSession(nested_form)
        assert _drop(session, NewFieldPayload(FieldKind.CONTAINER), DropTarget.into("box"))
        inner = find_by_path(session.nodes, "box").children[-1]
        before = session.compile().to_documents()

        result = _drop(session, ExistingFieldPayload("box"), DropTarget.into(inner.id))
        assert not result.ok
        assert session.compile().to_documents() == before

    def test_rows_never_overflow(self):
        """Every row stays within 12 columns across a long edit sequence."""
        session = FormSession()
        widths = ["quarter", "three_quarter", "half", "full", "quarter", "half", "quarter"]
        for width in widths:
            session.add_field("number", width=width)
        ids = [node.id for node in session.nodes]
        session.resize_field(ids[0])
        session.resize_field(ids[2])
        session.move_field(ids[6], DropTarget.root(0))
        session.remove_field(ids[3])
        session.set_width(ids[4], "three_quarter")

        assert validate_tree(session.nodes) == []
        rows: dict[int, int] = {}
        for node in session.nodes:
            rows[node.row] = rows.get(node.row, 0) + node.width.span
        assert max(rows.values()) <= 12


@pytest.mark.integration
class TestCompileAndParse:
    """Document generation and reload."""

    def test_greater_than_round_trip(self, flat_form):
        """greaterThan 18 compiles to a strict minimum and reads back."""
        compiled = compile_form(flat_form)
        license_element = compiled.ui_schema["elements"][1]
        assert license_element["rule"] == {
            "effect": "SHOW",
            "condition": {
                "scope": "#/properties/age",
                "schema": {"minimum": 18, "exclusiveMinimum": True},
            },
        }

        restored = parse_form(compiled.schema, compiled.ui_schema)
        license_node = next(node for node in restored if node.name == "license")
        assert license_node.visibility == Condition(
            field="age", operator=Operator.GREATER_THAN, value=18
        )
        assert _summary(restored) == _summary(flat_form)

    def test_nested_form_documents(self, nested_form):
        """Containers become Groups; their leaves are flattened into properties."""
        compiled = compile_form(nested_form)
        assert list(compiled.schema["properties"]) == ["street", "city", "summary", "footer"]

        section, panel, footer = compiled.ui_schema["elements"]
        assert section["type"] == "Group"
        assert section["label"] == "Address"
        assert section["options"] == {"detail": "GENERATED"}
        (row,) = section["elements"]
        assert row["type"] == "HorizontalLayout"
        assert [el["options"]["xs"] for el in row["elements"]] == [3, 3]
        assert panel["options"] == {"detail": "GENERATED"}
        assert footer == {"type": "Control", "scope": "#/properties/footer"}

    def test_nested_form_reloads_flat(self, nested_form):
        """Reloading nested documents yields full-width top-level fields."""
        compiled = compile_form(nested_form)
        restored = parse_form(compiled.schema, compiled.ui_schema)
        assert [node.name for node in restored] == ["street", "city", "summary", "footer"]
        assert all(node.width == WidthClass.FULL for node in restored)
        assert not any(node.is_container for node in restored)

    def test_removing_referenced_field(self, flat_form):
        """Deleting a referenced field clears rules and compiles cleanly."""
        session = FormSession(flat_form)
        assert session.remove_field("age")
        compiled = session.compile()
        assert not compiled.has_warnings
        assert "rule" not in str(compiled.ui_schema)


@pytest.mark.integration
class TestPersistence:
    """Saving and reloading through the SQLite store."""

    def test_save_and_reload(self, flat_form, form_store):
        """A saved form reloads with the same fields and rules."""
        session = FormSession(flat_form, name="Driving licence", description="DMV")
        session.set_condition("notes", "readonly", "license", "equals", "true")
        saved = form_store.save(session.to_stored())

        loaded = form_store.get(saved.id)
        restored = FormSession()
        restored.load_stored(loaded)

        assert restored.name == "Driving licence"
        assert restored.description == "DMV"
        assert restored.form_id == saved.id
        assert _summary(restored.nodes) == _summary(session.nodes)
        notes = next(node for node in restored.nodes if node.name == "notes")
        assert notes.readonly == Condition(field="license", value=True)

    def test_resave_updates_in_place(self, form_store):
        """Saving an edited form again keeps one stored copy."""
        session = FormSession()
        session.load_template("signup")
        form_store.save(session.to_stored())

        session.add_field("boolean", name="newsletter", label="Newsletter")
        form_store.save(session.to_stored())

        forms = form_store.list_forms()
        assert len(forms) == 1
        assert "newsletter" in forms[0].schema["properties"]

    def test_every_template_survives_the_store(self, form_store):
        """Template forms compile, save and parse without loss of names."""
        for template_id in ("login", "signup", "registration", "survey"):
            session = FormSession()
            session.load_template(template_id)
            form_store.save(session.to_stored())

        for form in form_store.list_forms():
            session = FormSession()
            session.load_stored(form)
            names = {node.name for node in iter_nodes(session.nodes)}
            assert names == set(form.schema["properties"])
