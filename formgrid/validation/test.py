"""Unit tests for validation module."""

import pytest

from formgrid.condition import Condition
from formgrid.layout import assign_rows
from formgrid.tree import FieldNode
from formgrid.validation import ValidationError, is_valid, validate_tree


def _field(node_id: str, width: str = "full", **kwargs) -> FieldNode:
    kwargs.setdefault("name", node_id)
    return FieldNode(id=node_id, kind="string", width=width, **kwargs)


class TestValidateTree:
    """Tests for validate_tree function."""

    @pytest.mark.unit
    def test_valid_tree(self):
        """Engine-laid-out trees pass validation."""
        nodes = assign_rows(
            [
                _field("a", "quarter"),
                _field("b", "three_quarter"),
                FieldNode(id="box", name="box", kind="container", children=[_field("c")]),
                _field("d", visibility=Condition(field="a", value="x")),
            ]
        )
        assert validate_tree(nodes) == []
        assert is_valid(nodes)

    @pytest.mark.unit
    def test_empty_tree(self):
        """An empty tree is valid."""
        assert is_valid([])

    @pytest.mark.unit
    def test_duplicate_ids(self):
        """Duplicate IDs are detected across nesting levels."""
        nodes = [
            _field("dupe", name="one"),
            FieldNode(
                id="box", name="box", kind="container", children=[_field("dupe", name="two")]
            ),
        ]
        errors = validate_tree(assign_rows(nodes))
        assert len(errors) == 1
        assert errors[0].error_type == "duplicate_id"
        assert "dupe" in errors[0].message

    @pytest.mark.unit
    def test_duplicate_names(self):
        """Structural names must be unique tree-wide."""
        nodes = assign_rows([_field("a", name="same"), _field("b", name="same")])
        errors = validate_tree(nodes)
        assert [e.error_type for e in errors] == ["duplicate_name"]
        assert errors[0].node_id == "a"

    @pytest.mark.unit
    def test_row_overflow(self):
        """Stored rows wider than the grid are reported."""
        nodes = [_field("a", "three_quarter", row=0), _field("b", "half", row=0)]
        errors = validate_tree(nodes)
        assert [e.error_type for e in errors] == ["row_overflow"]
        assert "15" in errors[0].message

    @pytest.mark.unit
    def test_full_row_shared(self):
        """A full-width node cannot share its row."""
        nodes = [_field("a", row=0), _field("b", "quarter", row=0)]
        types = {e.error_type for e in validate_tree(nodes)}
        assert types == {"row_overflow", "full_row_shared"}

    @pytest.mark.unit
    def test_rows_checked_inside_containers(self):
        """Container children are checked on their own grid."""
        box = FieldNode(
            id="box",
            name="box",
            kind="container",
            children=[_field("x", "half", row=0), _field("y", "three_quarter", row=0)],
        )
        errors = validate_tree([box])
        assert errors == [
            ValidationError(
                node_id="x",
                message="Row 0 spans 15 of 12 columns",
                error_type="row_overflow",
            )
        ]

    @pytest.mark.unit
    def test_self_condition(self):
        """Self references slipped past the model are reported."""
        node = _field("a").model_copy(update={"readonly": Condition(field="a")})
        errors = validate_tree([node])
        assert [e.error_type for e in errors] == ["self_condition"]

    @pytest.mark.unit
    def test_dangling_condition(self):
        """References to missing fields are reported."""
        nodes = assign_rows([_field("a", visibility=Condition(field="ghost"))])
        errors = validate_tree(nodes)
        assert [e.error_type for e in errors] == ["dangling_condition"]
        assert "ghost" in errors[0].message

    @pytest.mark.unit
    def test_container_name_is_not_a_field(self):
        """Containers have no value to compare against."""
        nodes = assign_rows(
            [
                FieldNode(id="box", name="box", kind="container"),
                _field("a", visibility=Condition(field="box", operator="isEmpty")),
            ]
        )
        assert [e.error_type for e in validate_tree(nodes)] == ["dangling_condition"]
