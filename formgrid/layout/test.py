"""Unit tests for the layout engine."""

import pytest

from formgrid.condition import Condition
from formgrid.layout import (
    GRID_COLUMNS,
    DropTarget,
    WidthClass,
    assign_rows,
    create_node,
    drop_after,
    drop_before,
    insert_node,
    move_node,
    pack_rows,
    remove_node,
    resize_node,
    set_width,
)
from formgrid.tree import (
    CyclicMove,
    DuplicateId,
    FieldKind,
    FieldNode,
    InvalidTarget,
    NotFound,
    find_by_path,
    iter_nodes,
)


def _field(node_id: str, width: str = "full", **kwargs) -> FieldNode:
    return FieldNode(id=node_id, name=node_id, kind=FieldKind.STRING, width=width, **kwargs)


def _box(node_id: str, children: list[FieldNode], width: str = "full") -> FieldNode:
    return FieldNode(
        id=node_id, name=node_id, kind=FieldKind.CONTAINER, width=width, children=children
    )


def _ids(nodes: list[FieldNode]) -> list[str]:
    return [node.id for node in nodes]


def _positions(nodes: list[FieldNode]) -> dict[str, tuple[int, int]]:
    return {node.id: (node.row, node.column) for node in nodes}


class TestPackRows:
    """Tests for row packing."""

    @pytest.mark.unit
    def test_quarters_and_half_share_a_row(self):
        """quarter + quarter + half fill one row exactly."""
        nodes = [_field("a", "quarter"), _field("b", "quarter"), _field("c", "half")]
        assert [_ids(row) for row in pack_rows(nodes)] == [["a", "b", "c"]]

    @pytest.mark.unit
    def test_overflow_starts_new_row(self):
        """A node that does not fit starts the next row."""
        nodes = [_field("a", "three_quarter"), _field("b", "half")]
        assert [_ids(row) for row in pack_rows(nodes)] == [["a"], ["b"]]

    @pytest.mark.unit
    def test_full_width_is_alone(self):
        """Full-width nodes never share a row."""
        nodes = [_field("a", "quarter"), _field("b"), _field("c", "quarter")]
        assert [_ids(row) for row in pack_rows(nodes)] == [["a"], ["b"], ["c"]]

    @pytest.mark.unit
    def test_keep_rows_breaks_on_row_change(self):
        """Stored row indices are honoured when asked."""
        nodes = [_field("a", "quarter", row=0), _field("b", "quarter", row=1)]
        assert len(pack_rows(nodes)) == 1
        assert len(pack_rows(nodes, keep_rows=True)) == 2

    @pytest.mark.unit
    def test_keep_rows_still_enforces_capacity(self):
        """Stale rows that overflow are still split."""
        nodes = [_field("a", "three_quarter", row=0), _field("b", "half", row=0)]
        assert len(pack_rows(nodes, keep_rows=True)) == 2

    @pytest.mark.unit
    def test_capacity_never_exceeded(self):
        """Every packed row fits in the grid."""
        widths = ["quarter", "three_quarter", "half", "half", "quarter", "full", "quarter"] * 3
        nodes = [_field(f"n{i}", width) for i, width in enumerate(widths)]
        for row in pack_rows(nodes):
            assert sum(node.width.span for node in row) <= GRID_COLUMNS

    @pytest.mark.unit
    def test_empty(self):
        """An empty list has no rows."""
        assert pack_rows([]) == []


class TestAssignRows:
    """Tests for assign_rows."""

    @pytest.mark.unit
    def test_columns_are_positions_in_row(self):
        """Columns count from zero inside each row."""
        nodes = assign_rows(
            [_field("a", "half"), _field("b", "half"), _field("c", "quarter")]
        )
        assert _positions(nodes) == {"a": (0, 0), "b": (0, 1), "c": (1, 0)}

    @pytest.mark.unit
    def test_containers_have_their_own_grid(self):
        """Children are packed independently of the parent's rows."""
        nodes = assign_rows(
            [
                _field("top", "quarter"),
                _box("box", [_field("x", "quarter"), _field("y", "quarter")], "half"),
            ]
        )
        box = find_by_path(nodes, "box")
        assert (box.row, box.column) == (0, 1)
        assert _positions(box.children) == {"x": (0, 0), "y": (0, 1)}


class TestResize:
    """Tests for resize_node and set_width."""

    @pytest.fixture
    def nodes(self) -> list[FieldNode]:
        return assign_rows(
            [
                _field("a", "quarter"),
                _field("b", "quarter"),
                _field("c", "half"),
                _field("d"),
            ]
        )

    @pytest.mark.unit
    def test_cycle(self, nodes):
        """Resizing advances one width class."""
        result = resize_node(nodes, "a")
        assert find_by_path(result, "a").width == WidthClass.HALF

    @pytest.mark.unit
    def test_full_wraps_to_quarter(self, nodes):
        """Full width cycles back to quarter."""
        result = resize_node(nodes, "d")
        assert find_by_path(result, "d").width == WidthClass.QUARTER

    @pytest.mark.unit
    def test_overflowing_row_splits(self, nodes):
        """A row that no longer fits splits and later rows shift down."""
        result = resize_node(nodes, "a")
        assert _positions(result) == {
            "a": (0, 0),
            "b": (0, 1),
            "c": (1, 0),
            "d": (2, 0),
        }

    @pytest.mark.unit
    def test_other_rows_untouched(self):
        """Shrinking a node does not pull nodes up from later rows."""
        nodes = assign_rows(
            [
                _field("a", "half"),
                _field("b", "half"),
                _field("c", "quarter"),
                _field("d", "quarter"),
            ]
        )
        result = set_width(nodes, "a", WidthClass.QUARTER)
        assert _positions(result) == {
            "a": (0, 0),
            "b": (0, 1),
            "c": (1, 0),
            "d": (1, 1),
        }
        assert result[2] is nodes[2]
        assert result[3] is nodes[3]

    @pytest.mark.unit
    def test_nested_resize(self):
        """Resizing works inside containers."""
        nodes = assign_rows([_box("box", [_field("x", "quarter"), _field("y", "quarter")])])
        result = set_width(nodes, "x", "three_quarter")
        box = find_by_path(result, "box")
        assert _positions(box.children) == {"x": (0, 0), "y": (0, 1)}
        assert box.children[0].width == WidthClass.THREE_QUARTER

    @pytest.mark.unit
    def test_same_width_is_noop(self, nodes):
        """Setting the current width returns the tree unchanged."""
        assert set_width(nodes, "d", "full") is nodes

    @pytest.mark.unit
    def test_missing_node(self, nodes):
        """Unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            resize_node(nodes, "missing")


class TestCreateNode:
    """Tests for create_node."""

    @pytest.mark.unit
    def test_generated_name(self):
        """Names count every node in the tree."""
        assert create_node("string", []).name == "field_1"
        nodes = [_field("a"), _box("box", [_field("b")])]
        assert create_node("number", nodes).name == "field_4"

    @pytest.mark.unit
    def test_generated_name_avoids_collision(self):
        """Generated names skip names already taken."""
        node = create_node("string", [_field("field_2")])
        assert node.name == "field_2_2"

    @pytest.mark.unit
    def test_defaults(self):
        """New nodes carry default config and label for the kind."""
        node = create_node(FieldKind.CHART, [])
        assert node.label == "Chart"
        assert node.config.chart_type.value == "bar"
        assert node.width == WidthClass.FULL

    @pytest.mark.unit
    def test_container_gets_children(self):
        """Containers are created empty."""
        assert create_node("panel", [], width="half").children == []


class TestInsertNode:
    """Tests for insert_node."""

    @pytest.mark.unit
    def test_fourth_quarter_starts_second_row(self):
        """Inserted nodes are packed into rows."""
        nodes: list[FieldNode] = []
        for node_id, width in [("a", "quarter"), ("b", "quarter"), ("c", "half"), ("d", "quarter")]:
            nodes = insert_node(nodes, _field(node_id, width))
        assert _positions(nodes) == {
            "a": (0, 0),
            "b": (0, 1),
            "c": (0, 2),
            "d": (1, 0),
        }

    @pytest.mark.unit
    def test_colliding_name_renamed(self):
        """A second node with a used name gets a numeric suffix."""
        nodes = insert_node([], _field("one"))
        nodes = insert_node(nodes, FieldNode(id="two", name="one", kind="string"))
        nodes = insert_node(nodes, FieldNode(id="three", name="one", kind="string"))
        assert [node.name for node in nodes] == ["one", "one_2", "one_3"]

    @pytest.mark.unit
    def test_subtree_names_renamed(self):
        """Names inside an inserted container are checked too."""
        nodes = insert_node([], _field("email"))
        box = FieldNode(
            id="box",
            name="box",
            kind="container",
            children=[FieldNode(id="inner", name="email", kind="string")],
        )
        nodes = insert_node(nodes, box)
        assert find_by_path(nodes, "inner").name == "email_2"

    @pytest.mark.unit
    def test_insert_into_container(self):
        """Drop targets can address container children."""
        nodes = insert_node([], _box("box", []))
        nodes = insert_node(nodes, _field("x", "half"), DropTarget.into("box"))
        nodes = insert_node(nodes, _field("y", "half"), DropTarget.into("box", 0))
        box = find_by_path(nodes, "box")
        assert _ids(box.children) == ["y", "x"]
        assert _positions(box.children) == {"y": (0, 0), "x": (0, 1)}

    @pytest.mark.unit
    def test_insert_into_leaf(self):
        """Leaves are not drop targets."""
        nodes = insert_node([], _field("a"))
        with pytest.raises(InvalidTarget):
            insert_node(nodes, _field("b"), DropTarget.into("a"))

    @pytest.mark.unit
    def test_duplicate_identity(self):
        """Identities stay unique."""
        nodes = insert_node([], _field("a"))
        with pytest.raises(DuplicateId):
            insert_node(nodes, FieldNode(id="a", name="other", kind="string"))


class TestRemoveNode:
    """Tests for remove_node."""

    @pytest.mark.unit
    def test_remaining_nodes_repacked(self):
        """Rows close up after removal."""
        nodes = assign_rows([_field("a", "half"), _field("b"), _field("c", "half")])
        result = remove_node(nodes, "b")
        assert _positions(result) == {"a": (0, 0), "c": (0, 1)}

    @pytest.mark.unit
    def test_conditions_cleared(self):
        """Conditions referencing the removed node are dropped."""
        nodes = assign_rows(
            [
                _field("a"),
                _field("b", visibility=Condition(field="a", value="x")),
                _field("c", readonly=Condition(field="b")),
            ]
        )
        result = remove_node(nodes, "a")
        assert find_by_path(result, "b").visibility is None
        assert find_by_path(result, "c").readonly == Condition(field="b")

    @pytest.mark.unit
    def test_descendant_conditions_cleared(self):
        """Removing a container clears references to its children."""
        nodes = assign_rows(
            [
                _box("box", [_field("inner")]),
                _field("outside", visibility=Condition(field="inner", operator="isNotEmpty")),
            ]
        )
        result = remove_node(nodes, "box")
        assert _ids(result) == ["outside"]
        assert result[0].visibility is None

    @pytest.mark.unit
    def test_missing_node(self):
        """Unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            remove_node([], "missing")


class TestMoveNode:
    """Tests for move_node and drop zones."""

    @pytest.fixture
    def flat(self) -> list[FieldNode]:
        return assign_rows([_field("a"), _field("b"), _field("c")])

    @pytest.mark.unit
    def test_move_forward_in_same_list(self, flat):
        """Dropping before a later sibling lands right before it."""
        result = move_node(flat, "a", drop_before(flat, "c"))
        assert _ids(result) == ["b", "a", "c"]

    @pytest.mark.unit
    def test_move_to_end(self, flat):
        """Dropping after the last sibling appends."""
        result = move_node(flat, "a", drop_after(flat, "c"))
        assert _ids(result) == ["b", "c", "a"]

    @pytest.mark.unit
    def test_move_backward(self, flat):
        """Moving backward uses the index as-is."""
        result = move_node(flat, "c", DropTarget.root(0))
        assert _ids(result) == ["c", "a", "b"]
        assert [node.row for node in result] == [0, 1, 2]

    @pytest.mark.unit
    def test_move_child_out_of_container(self):
        """Moving one of two children out leaves exactly the other."""
        nodes = assign_rows([_box("box", [_field("x"), _field("y")])])
        result = move_node(nodes, "x", DropTarget.root())
        assert _ids(result) == ["box", "x"]
        assert _ids(find_by_path(result, "box").children) == ["y"]
        assert find_by_path(result, "y").row == 0

    @pytest.mark.unit
    def test_move_into_container(self, flat):
        """Nodes can be dropped into containers."""
        nodes = insert_node(flat, _box("box", []))
        result = move_node(nodes, "b", DropTarget.into("box"))
        assert _ids(result) == ["a", "c", "box"]
        assert _ids(find_by_path(result, "box").children) == ["b"]

    @pytest.mark.unit
    def test_move_into_itself(self):
        """A container cannot be dropped into itself."""
        nodes = assign_rows([_box("box", [])])
        with pytest.raises(CyclicMove):
            move_node(nodes, "box", DropTarget.into("box"))

    @pytest.mark.unit
    def test_move_into_descendant_leaves_tree_unchanged(self):
        """A cyclic move raises and the tree stays as it was."""
        nodes = assign_rows([_box("outer", [_box("inner", [_field("deep")])])])
        before = [node.model_copy(deep=True) for node in nodes]
        with pytest.raises(CyclicMove):
            move_node(nodes, "outer", DropTarget.into("inner"))
        assert nodes == before

    @pytest.mark.unit
    def test_subtree_moves_with_node(self):
        """Children travel with their container."""
        nodes = assign_rows([_field("a"), _box("box", [_field("x")])])
        result = move_node(nodes, "box", DropTarget.root(0))
        assert _ids(result) == ["box", "a"]
        assert _ids(result[0].children) == ["x"]

    @pytest.mark.unit
    def test_drop_zones_in_container(self):
        """Drop zones are addressed within the anchor's list."""
        nodes = assign_rows([_box("box", [_field("x"), _field("y")])])
        assert drop_before(nodes, "y") == DropTarget("box", 1)
        assert drop_after(nodes, "y") == DropTarget("box", 2)

    @pytest.mark.unit
    def test_ids_stay_unique(self, flat):
        """Moves never duplicate or lose nodes."""
        nodes = insert_node(flat, _box("box", []))
        result = move_node(nodes, "a", DropTarget.into("box"))
        result = move_node(result, "box", DropTarget.root(0))
        ids = [node.id for node in iter_nodes(result)]
        assert sorted(ids) == ["a", "b", "box", "c"]
