"""Unit tests for the form builder session and drag state machine."""

import pytest

from formgrid.condition import Condition, Operator
from formgrid.layout import DropTarget, assign_rows
from formgrid.session import (
    ConfigEditRejected,
    DragSession,
    DragState,
    DragStateError,
    ExistingFieldPayload,
    FormSession,
    NewFieldPayload,
)
from formgrid.tree import FieldKind, FieldNode, WidthClass


def _field(node_id: str, kind: str = "string", width: str = "full", **kwargs) -> FieldNode:
    return FieldNode(id=node_id, name=node_id, kind=kind, width=width, **kwargs)


def _dropped(payload, target: DropTarget) -> DragSession:
    return DragSession().begin(payload).hover(target).drop()


@pytest.fixture
def session() -> FormSession:
    """Session holding age (number), color (enum string) and notes."""
    nodes = assign_rows(
        [
            _field("age", "number"),
            _field("color", config={"enum": ["red", "blue"]}),
            _field("notes"),
        ]
    )
    return FormSession(nodes, name="Profile")


class TestDragSession:
    """Tests for drag state transitions."""

    @pytest.mark.unit
    def test_full_gesture(self):
        """begin -> hover -> drop keeps the payload and target."""
        payload = NewFieldPayload(FieldKind.BOOLEAN)
        drag = DragSession().begin(payload)
        assert drag.state == DragState.DRAGGING
        drag = drag.hover(DropTarget.root(1))
        assert drag.state == DragState.HOVERING
        drag = drag.drop()
        assert drag.state == DragState.DROPPED
        assert drag.payload is payload
        assert drag.target == DropTarget.root(1)

    @pytest.mark.unit
    def test_leave_clears_target(self):
        """Leaving a drop zone returns to plain dragging."""
        drag = DragSession().begin(ExistingFieldPayload("a")).hover(DropTarget.root())
        drag = drag.leave()
        assert drag.state == DragState.DRAGGING
        assert drag.target is None

    @pytest.mark.unit
    def test_cancel(self):
        """Cancelling ends the gesture without a target."""
        drag = DragSession().begin(ExistingFieldPayload("a")).hover(DropTarget.root()).cancel()
        assert drag.state == DragState.CANCELLED
        assert not drag.is_active

    @pytest.mark.unit
    def test_drop_requires_hover(self):
        """Dropping outside a drop zone is not allowed."""
        drag = DragSession().begin(ExistingFieldPayload("a"))
        with pytest.raises(DragStateError):
            drag.drop()

    @pytest.mark.unit
    def test_no_nested_drags(self):
        """A second drag cannot start while one is active."""
        drag = DragSession().begin(ExistingFieldPayload("a"))
        with pytest.raises(DragStateError):
            drag.begin(ExistingFieldPayload("b"))

    @pytest.mark.unit
    def test_idle_transitions_rejected(self):
        """Hover and cancel need an active drag."""
        with pytest.raises(DragStateError):
            DragSession().hover(DropTarget.root())
        with pytest.raises(DragStateError):
            DragSession().cancel()

    @pytest.mark.unit
    def test_new_drag_after_drop(self):
        """A finished drag can be followed by a new one."""
        drag = _dropped(ExistingFieldPayload("a"), DropTarget.root())
        assert drag.begin(ExistingFieldPayload("b")).state == DragState.DRAGGING


class TestDrop:
    """Tests for applying drags to the session."""

    @pytest.mark.unit
    def test_drop_new_field(self, session):
        """A palette drop creates a node at the target."""
        payload = NewFieldPayload(FieldKind.BOOLEAN, WidthClass.HALF)
        result = session.drop(_dropped(payload, DropTarget.root(0)))
        assert result.ok
        node = session.nodes[0]
        assert node.id == result.node_id
        assert node.kind == FieldKind.BOOLEAN
        assert node.width == WidthClass.HALF
        assert node.name == "field_4"
        assert node.label == "Checkbox"

    @pytest.mark.unit
    def test_drop_existing_field(self, session):
        """Dragging an existing node moves it."""
        result = session.drop(_dropped(ExistingFieldPayload("notes"), DropTarget.root(0)))
        assert result.ok
        assert [node.id for node in session.nodes] == ["notes", "age", "color"]
        assert [node.row for node in session.nodes] == [0, 1, 2]

    @pytest.mark.unit
    def test_cancelled_drag_changes_nothing(self, session):
        """Only dropped gestures reach the tree."""
        before = session.nodes
        drag = DragSession().begin(ExistingFieldPayload("notes")).hover(DropTarget.root(0))
        assert not session.drop(drag.cancel())
        assert not session.drop(drag)
        assert session.nodes is before

    @pytest.mark.unit
    def test_drop_into_own_descendant_rejected(self):
        """A cyclic drop fails and keeps the tree."""
        box = FieldNode(
            id="outer",
            name="outer",
            kind="container",
            children=[FieldNode(id="inner", name="inner", kind="container")],
        )
        session = FormSession(assign_rows([box]))
        before = session.nodes
        result = session.drop(_dropped(ExistingFieldPayload("outer"), DropTarget.into("inner")))
        assert not result.ok
        assert result.error
        assert session.nodes is before


class TestFieldOperations:
    """Tests for add, resize, remove and settings edits."""

    @pytest.mark.unit
    def test_add_field_appends(self):
        """Fields without a target go to the end of the root list."""
        session = FormSession()
        assert session.add_field("string")
        assert session.add_field("number", width="half")
        assert [node.name for node in session.nodes] == ["field_1", "field_2"]
        assert [node.row for node in session.nodes] == [0, 1]

    @pytest.mark.unit
    def test_add_field_unknown_kind(self):
        """Unknown kinds are rejected without raising."""
        session = FormSession()
        result = session.add_field("hologram")
        assert not result.ok
        assert session.nodes == []

    @pytest.mark.unit
    def test_resize_cycles_width(self, session):
        """Resizing advances to the next width class."""
        assert session.resize_field("age")
        assert session.get_field("age").width == WidthClass.QUARTER

    @pytest.mark.unit
    def test_set_width_splits_row(self):
        """Widening a node in a shared row pushes it and later rows down."""
        nodes = [_field("a", width="half"), _field("b", width="half"), _field("c")]
        session = FormSession(assign_rows(nodes))
        assert session.set_width("b", "full")
        assert [node.row for node in session.nodes] == [0, 1, 2]

    @pytest.mark.unit
    def test_remove_clears_references(self, session):
        """Removing a field clears conditions that pointed at it."""
        session.set_condition("notes", "visibility", "age", "greaterThan", "18")
        assert session.remove_field("age")
        assert session.get_field("notes").visibility is None
        assert [node.row for node in session.nodes] == [0, 1]

    @pytest.mark.unit
    def test_remove_missing_field(self, session):
        """Unknown identities fail and keep the tree."""
        before = session.nodes
        result = session.remove_field("ghost")
        assert not result.ok
        assert "ghost" in result.error
        assert session.nodes is before

    @pytest.mark.unit
    def test_update_field(self, session):
        """Settings edits apply to one node."""
        assert session.update_field("notes", label="Notes", required=True)
        notes = session.get_field("notes")
        assert notes.label == "Notes"
        assert notes.required is True

    @pytest.mark.unit
    def test_update_width_repacks(self):
        """A width edit goes through the layout engine."""
        nodes = [_field("a", width="half"), _field("b", width="half")]
        session = FormSession(assign_rows(nodes))
        assert session.update_field("b", width="full", label="B")
        b = session.get_field("b")
        assert b.width == WidthClass.FULL
        assert b.label == "B"
        assert b.row == 1

    @pytest.mark.unit
    def test_rename_collision_rejected(self, session):
        """Renaming onto an existing name fails."""
        result = session.update_field("notes", name="age")
        assert not result.ok
        assert session.get_field("notes").name == "notes"

    @pytest.mark.unit
    def test_invalid_value_rejected(self, session):
        """A value that fails validation leaves the tree unchanged."""
        before = session.nodes
        assert not session.update_field("notes", required="maybe")
        assert session.nodes is before

    @pytest.mark.unit
    def test_rename_keeps_conditions(self, session):
        """Conditions follow a renamed field."""
        assert session.set_condition("notes", "visibility", "age", "greaterThan", "18")
        assert session.update_field("age", name="years")
        assert session.get_field("notes").visibility.field == "years"
        assert not session.compile().has_warnings


class TestConditions:
    """Tests for condition editing."""

    @pytest.mark.unit
    def test_number_value_typed(self, session):
        """Literals for number fields become numbers."""
        assert session.set_condition("notes", "visibility", "age", "greaterThan", "18")
        assert session.get_field("notes").visibility == Condition(
            field="age", operator=Operator.GREATER_THAN, value=18
        )

    @pytest.mark.unit
    def test_enum_value_must_be_an_option(self, session):
        """Enumerated fields only accept their options."""
        assert session.set_condition("notes", "readonly", "color", "equals", "red")
        result = session.set_condition("notes", "readonly", "color", "equals", "green")
        assert not result.ok
        assert session.get_field("notes").readonly.value == "red"

    @pytest.mark.unit
    def test_unary_operator_has_no_value(self, session):
        """isEmpty ignores the literal."""
        session.set_condition("notes", "visibility", "color", "isEmpty", "whatever")
        assert session.get_field("notes").visibility.value is None

    @pytest.mark.unit
    def test_clear_condition(self, session):
        """A missing field clears the condition."""
        session.set_condition("notes", "visibility", "age", "equals", 1)
        assert session.set_condition("notes", "visibility", None)
        assert session.get_field("notes").visibility is None

    @pytest.mark.unit
    def test_self_reference_rejected(self, session):
        """A node cannot depend on itself."""
        result = session.set_condition("notes", "visibility", "notes", "isNotEmpty")
        assert not result.ok
        assert session.get_field("notes").visibility is None

    @pytest.mark.unit
    def test_unknown_role(self, session):
        """Only visibility and readonly can be set."""
        assert not session.set_condition("notes", "required", "age", "equals", 1)


class TestConfigJson:
    """Tests for hand-edited configuration JSON."""

    @pytest.fixture
    def chart_session(self) -> FormSession:
        return FormSession(assign_rows([_field("sales", "chart")]))

    @pytest.mark.unit
    def test_replace_series(self, chart_session):
        """A chart's series can be replaced from JSON."""
        result = chart_session.edit_config_json(
            "sales", '[{"name": "Q1", "value": 10}]', attribute="data"
        )
        assert result.ok
        config = chart_session.get_field("sales").config
        assert [(point.name, point.value) for point in config.data] == [("Q1", 10)]

    @pytest.mark.unit
    def test_camel_case_attribute(self, chart_session):
        """Attributes can be named as they appear in documents."""
        chart_session.edit_config_json("sales", '"pie"', attribute="chartType")
        assert chart_session.get_field("sales").config.chart_type.value == "pie"

    @pytest.mark.unit
    def test_whole_config(self, session):
        """Without an attribute the whole config is replaced."""
        assert session.edit_config_json("age", '{"minimum": 0, "maximum": 120}')
        config = session.get_field("age").config
        assert (config.minimum, config.maximum) == (0, 120)

    @pytest.mark.unit
    def test_invalid_json_keeps_config(self, chart_session):
        """Unparseable JSON raises and the previous config stays."""
        before = chart_session.get_field("sales").config
        with pytest.raises(ConfigEditRejected, match="Invalid JSON"):
            chart_session.edit_config_json("sales", "[{", attribute="data")
        assert chart_session.get_field("sales").config == before

    @pytest.mark.unit
    def test_invalid_shape_keeps_config(self, chart_session):
        """JSON of the wrong shape raises and the previous config stays."""
        before = chart_session.get_field("sales").config
        with pytest.raises(ConfigEditRejected) as excinfo:
            chart_session.edit_config_json("sales", '{"value": 1}', attribute="data")
        assert excinfo.value.node_id == "sales"
        assert chart_session.get_field("sales").config == before

    @pytest.mark.unit
    def test_unknown_attribute(self, chart_session):
        """Attributes the kind does not have are rejected."""
        with pytest.raises(ConfigEditRejected):
            chart_session.edit_config_json("sales", "1", attribute="minimum")


class TestFormLifecycle:
    """Tests for whole-form operations."""

    @pytest.mark.unit
    def test_load_template(self):
        """Templates replace the tree and name the form."""
        session = FormSession()
        assert session.load_template("login")
        assert session.name == "Login Form"
        assert [node.name for node in session.nodes] == ["email", "password"]

    @pytest.mark.unit
    def test_load_unknown_template(self, session):
        """Unknown templates fail and keep the form."""
        before = session.nodes
        result = session.load_template("nope")
        assert not result.ok
        assert session.nodes is before

    @pytest.mark.unit
    def test_new_form(self, session):
        """Starting over clears everything."""
        session.form_id = "abc"
        session.new_form()
        assert session.nodes == []
        assert session.name == ""
        assert session.form_id is None

    @pytest.mark.unit
    def test_to_stored_needs_name(self):
        """Unnamed forms cannot be saved."""
        with pytest.raises(ValueError, match="form name"):
            FormSession().to_stored()

    @pytest.mark.unit
    def test_to_stored_keeps_identity(self, session):
        """Saving twice updates the same stored form."""
        first = session.to_stored()
        second = session.to_stored()
        assert first.id == second.id == session.form_id
        assert first.name == "Profile"
        assert list(first.schema["properties"]) == ["age", "color", "notes"]

    @pytest.mark.unit
    def test_load_stored(self, session):
        """A stored form loads back with its metadata."""
        session.set_condition("notes", "visibility", "age", "lessThan", 5)
        stored = session.to_stored()

        restored = FormSession()
        restored.load_stored(stored)
        assert restored.name == "Profile"
        assert restored.form_id == stored.id
        assert [node.name for node in restored.nodes] == ["age", "color", "notes"]
        assert restored.nodes[2].visibility == Condition(
            field="age", operator=Operator.LESS_THAN, value=5
        )
