"""Unit tests for the field tree."""

import pytest
from pydantic import ValidationError

from formgrid.condition import Condition, Operator
from formgrid.tree import (
    ChartConfig,
    ContainerConfig,
    CyclicMove,
    DuplicateId,
    DuplicateName,
    FieldKind,
    FieldNode,
    InvalidCondition,
    InvalidTarget,
    NotFound,
    NumberConfig,
    StringConfig,
    WidthClass,
    clear_conditions,
    collect_ids,
    collect_names,
    default_config,
    find_by_name,
    find_by_path,
    find_parent,
    insert_into,
    is_descendant,
    iter_nodes,
    node_path,
    remove_by_id,
    rename_references,
    replace_by_id,
    unique_name,
    update_node,
)


def _leaf(node_id: str, name: str | None = None, **kwargs) -> FieldNode:
    return FieldNode(id=node_id, name=name or node_id, kind=FieldKind.STRING, **kwargs)


def _box(node_id: str, children: list[FieldNode]) -> FieldNode:
    return FieldNode(id=node_id, name=node_id, kind=FieldKind.CONTAINER, children=children)


@pytest.fixture
def tree() -> list[FieldNode]:
    """outer(inner(deep), middle), tail"""
    deep = _leaf("deep")
    inner = _box("inner", [deep])
    middle = _leaf("middle")
    outer = _box("outer", [inner, middle])
    return [outer, _leaf("tail")]


class TestWidthClass:
    """Tests for width classes."""

    @pytest.mark.unit
    def test_spans(self):
        """Width classes cover 3, 6, 9 and 12 columns."""
        assert [w.span for w in WidthClass] == [3, 6, 9, 12]

    @pytest.mark.unit
    def test_percent(self):
        """Percentages are derived from the span."""
        assert WidthClass.QUARTER.percent == 25
        assert WidthClass.THREE_QUARTER.percent == 75

    @pytest.mark.unit
    def test_resize_cycle_wraps(self):
        """Full wraps back to quarter."""
        assert WidthClass.QUARTER.next() == WidthClass.HALF
        assert WidthClass.HALF.next() == WidthClass.THREE_QUARTER
        assert WidthClass.THREE_QUARTER.next() == WidthClass.FULL
        assert WidthClass.FULL.next() == WidthClass.QUARTER

    @pytest.mark.unit
    def test_from_span_rounds_up(self):
        """Spans between classes round up."""
        assert WidthClass.from_span(3) == WidthClass.QUARTER
        assert WidthClass.from_span(4) == WidthClass.HALF
        assert WidthClass.from_span(12) == WidthClass.FULL
        assert WidthClass.from_span(20) == WidthClass.FULL


class TestFieldNode:
    """Tests for FieldNode construction rules."""

    @pytest.mark.unit
    def test_default_config_for_kind(self):
        """A missing config is filled with the kind's defaults."""
        node = FieldNode(name="chart", kind="chart")
        assert isinstance(node.config, ChartConfig)
        assert len(node.config.data) == 5

    @pytest.mark.unit
    def test_config_dict_without_kind(self):
        """A config dict is validated against the node kind."""
        node = FieldNode(name="age", kind="number", config={"minimum": 0})
        assert isinstance(node.config, NumberConfig)
        assert node.config.minimum == 0

    @pytest.mark.unit
    def test_camel_case_config_keys(self):
        """Config accepts the document spelling of attributes."""
        node = FieldNode(name="bio", kind="string", config={"maxLength": 10})
        assert node.config.max_length == 10

    @pytest.mark.unit
    def test_mismatched_config_rejected(self):
        """Config kind must match node kind."""
        with pytest.raises(ValidationError):
            FieldNode(name="age", kind=FieldKind.NUMBER, config=StringConfig())

    @pytest.mark.unit
    def test_containers_default_to_empty_children(self):
        """Container and panel nodes always own a list."""
        assert FieldNode(name="box", kind="container").children == []
        assert FieldNode(name="win", kind="panel").children == []

    @pytest.mark.unit
    def test_leaf_children_rejected(self):
        """Leaf kinds cannot own children."""
        with pytest.raises(ValidationError):
            FieldNode(name="email", kind="string", children=[])

    @pytest.mark.unit
    def test_self_condition_rejected(self):
        """A node cannot be conditioned on itself."""
        with pytest.raises(ValidationError):
            FieldNode(name="email", kind="string", visibility=Condition(field="email"))

    @pytest.mark.unit
    def test_empty_name_rejected(self):
        """Structural names are required."""
        with pytest.raises(ValidationError):
            FieldNode(name="", kind="string")

    @pytest.mark.unit
    def test_generated_ids_are_unique(self):
        """Each node gets its own identity."""
        first = FieldNode(name="a", kind="string")
        second = FieldNode(name="b", kind="string")
        assert first.id != second.id
        assert first.id.startswith("field_")

    @pytest.mark.unit
    def test_json_round_trip(self):
        """Nodes survive model_dump / model_validate."""
        node = _box("box", [_leaf("email", required=True, width=WidthClass.HALF)])
        restored = FieldNode.model_validate(node.model_dump(mode="json"))
        assert restored == node

    @pytest.mark.unit
    def test_title_falls_back_to_name(self):
        """Title is the label, or the name when unlabeled."""
        assert _leaf("email").title == "email"
        assert _leaf("email", label="E-mail").title == "E-mail"

    @pytest.mark.unit
    def test_config_to_property_is_camel_case(self):
        """Config attributes are emitted camelCase without the kind tag."""
        config = StringConfig(format="email", max_length=5)
        assert config.to_property() == {"format": "email", "maxLength": 5}

    @pytest.mark.unit
    def test_default_container_variant(self):
        """Containers default to subsection."""
        config = default_config(FieldKind.CONTAINER)
        assert isinstance(config, ContainerConfig)
        assert config.variant.value == "subsection"


class TestTraversal:
    """Tests for lookup helpers."""

    @pytest.mark.unit
    def test_iter_nodes_depth_first(self, tree):
        """Parents come before their children."""
        assert [node.id for node in iter_nodes(tree)] == [
            "outer",
            "inner",
            "deep",
            "middle",
            "tail",
        ]

    @pytest.mark.unit
    def test_find_nested(self, tree):
        """Nodes are found at any depth."""
        assert find_by_path(tree, "deep").name == "deep"
        assert find_by_path(tree, "missing") is None
        assert find_by_name(tree, "middle").id == "middle"

    @pytest.mark.unit
    def test_node_path(self, tree):
        """Path lists ancestors then the node."""
        assert [node.id for node in node_path(tree, "deep")] == ["outer", "inner", "deep"]
        assert node_path(tree, "missing") == []

    @pytest.mark.unit
    def test_find_parent(self, tree):
        """Parent id and index are reported; root nodes have no parent."""
        assert find_parent(tree, "middle") == ("outer", 1)
        assert find_parent(tree, "tail") == (None, 1)
        with pytest.raises(NotFound):
            find_parent(tree, "missing")

    @pytest.mark.unit
    def test_is_descendant(self, tree):
        """Only strict descendants count."""
        assert is_descendant(tree, "outer", "deep")
        assert not is_descendant(tree, "deep", "outer")
        assert not is_descendant(tree, "outer", "outer")
        assert not is_descendant(tree, "outer", "tail")

    @pytest.mark.unit
    def test_collections(self, tree):
        """Ids and names are collected from every level."""
        assert collect_ids(tree) == {"outer", "inner", "deep", "middle", "tail"}
        assert "deep" in collect_names(tree)

    @pytest.mark.unit
    def test_unique_name(self, tree):
        """Collisions get the next free numeric suffix."""
        assert unique_name(tree, "fresh") == "fresh"
        assert unique_name(tree, "deep") == "deep_2"
        extended = insert_into(tree, None, None, _leaf("x", name="deep_2"))
        assert unique_name(extended, "deep") == "deep_3"

    @pytest.mark.unit
    def test_unique_name_excludes_self(self, tree):
        """A node's own name is free for itself."""
        assert unique_name(tree, "deep", exclude_id="deep") == "deep"


class TestInsert:
    """Tests for insert_into."""

    @pytest.mark.unit
    def test_insert_into_container(self, tree):
        """Nodes can be inserted at an index inside a container."""
        result = insert_into(tree, "outer", 1, _leaf("new"))
        assert [n.id for n in find_by_path(result, "outer").children] == [
            "inner",
            "new",
            "middle",
        ]

    @pytest.mark.unit
    def test_input_not_mutated(self, tree):
        """The input tree is left as it was."""
        before = [node.model_copy(deep=True) for node in tree]
        insert_into(tree, "inner", 0, _leaf("new"))
        assert tree == before

    @pytest.mark.unit
    def test_index_clamped(self, tree):
        """Out-of-range indices append or prepend."""
        appended = insert_into(tree, None, 99, _leaf("new"))
        assert appended[-1].id == "new"
        prepended = insert_into(tree, None, -5, _leaf("new"))
        assert prepended[0].id == "new"

    @pytest.mark.unit
    def test_missing_parent(self, tree):
        """Unknown parents are invalid targets."""
        with pytest.raises(InvalidTarget):
            insert_into(tree, "missing", 0, _leaf("new"))

    @pytest.mark.unit
    def test_leaf_parent(self, tree):
        """Leaves cannot receive children."""
        with pytest.raises(InvalidTarget):
            insert_into(tree, "tail", 0, _leaf("new"))

    @pytest.mark.unit
    def test_duplicate_id(self, tree):
        """Inserting an existing identity is rejected."""
        with pytest.raises(DuplicateId):
            insert_into(tree, None, 0, _leaf("deep", name="other"))

    @pytest.mark.unit
    def test_duplicate_id_in_subtree(self, tree):
        """Identities inside an inserted subtree are checked too."""
        with pytest.raises(DuplicateId):
            insert_into(tree, None, 0, _box("fresh", [_leaf("middle", name="m2")]))


class TestRemoveAndReplace:
    """Tests for remove_by_id and replace_by_id."""

    @pytest.mark.unit
    def test_remove_nested(self, tree):
        """Removing a nested node returns it with its subtree."""
        result, removed = remove_by_id(tree, "inner")
        assert removed.children[0].id == "deep"
        assert collect_ids(result) == {"outer", "middle", "tail"}
        assert "deep" in collect_ids(tree)

    @pytest.mark.unit
    def test_remove_missing(self, tree):
        """Unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            remove_by_id(tree, "missing")

    @pytest.mark.unit
    def test_replace_keeps_position(self, tree):
        """Replacement keeps the slot of the old node."""
        result = replace_by_id(tree, "middle", _leaf("middle", label="Middle"))
        outer = find_by_path(result, "outer")
        assert outer.children[1].label == "Middle"

    @pytest.mark.unit
    def test_replace_rejects_foreign_identity(self, tree):
        """A replacement cannot reuse an identity held elsewhere."""
        with pytest.raises(DuplicateId):
            replace_by_id(tree, "middle", _leaf("tail"))

    @pytest.mark.unit
    def test_replace_missing(self, tree):
        """Unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            replace_by_id(tree, "missing", _leaf("missing"))


class TestUpdateNode:
    """Tests for settings edits."""

    @pytest.mark.unit
    def test_rename_and_label(self, tree):
        """Names and labels can be edited."""
        result = update_node(tree, "deep", name="email", label="Email")
        node = find_by_path(result, "deep")
        assert (node.name, node.label) == ("email", "Email")

    @pytest.mark.unit
    def test_rename_collision(self, tree):
        """Renaming onto a used name is rejected."""
        with pytest.raises(DuplicateName):
            update_node(tree, "deep", name="tail")

    @pytest.mark.unit
    def test_config_dict_validated(self, tree):
        """A config dict is validated against the node's kind."""
        result = update_node(tree, "tail", config={"format": "email"})
        assert find_by_path(result, "tail").config.format == "email"

    @pytest.mark.unit
    def test_config_of_wrong_kind(self, tree):
        """A config model for another kind is rejected."""
        with pytest.raises(ValueError):
            update_node(tree, "tail", config=NumberConfig())

    @pytest.mark.unit
    def test_self_condition(self, tree):
        """Conditions cannot reference the node itself."""
        with pytest.raises(InvalidCondition):
            update_node(tree, "tail", visibility={"field": "tail", "operator": "isEmpty"})

    @pytest.mark.unit
    def test_condition_dict(self, tree):
        """Condition dicts are validated into Condition models."""
        result = update_node(
            tree, "tail", readonly={"field": "deep", "operator": "notEquals", "value": "x"}
        )
        readonly = find_by_path(result, "tail").readonly
        assert readonly.operator == Operator.NOT_EQUALS

    @pytest.mark.unit
    def test_unknown_attribute(self, tree):
        """Placement and identity are not settings."""
        with pytest.raises(ValueError):
            update_node(tree, "tail", row=3)

    @pytest.mark.unit
    def test_missing_node(self, tree):
        """Unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            update_node(tree, "missing", label="x")

    @pytest.mark.unit
    def test_width_is_not_a_setting(self, tree):
        """Width changes belong to the layout engine."""
        with pytest.raises(ValueError, match="width"):
            update_node(tree, "tail", width="half")

    @pytest.mark.unit
    def test_values_are_validated(self, tree):
        """Edited attributes go through model validation."""
        with pytest.raises(ValidationError):
            update_node(tree, "tail", required="maybe")
        with pytest.raises(ValidationError):
            update_node(tree, "tail", label=["not", "text"])

    @pytest.mark.unit
    def test_input_untouched_on_success(self, tree):
        """The edited node is a new object; the input keeps the old one."""
        result = update_node(tree, "tail", required=True)
        assert find_by_path(result, "tail").required is True
        assert find_by_path(tree, "tail").required is False
        assert result[0] is tree[0]

    @pytest.mark.unit
    def test_rename_rewrites_references(self):
        """Conditions on the old name follow the rename."""
        nodes = [
            _leaf("a"),
            _leaf("b", visibility=Condition(field="a", operator="isEmpty")),
            _box("box", [_leaf("c", readonly=Condition(field="a", value="x"))]),
        ]
        result = update_node(nodes, "a", name="first")
        assert find_by_path(result, "b").visibility == Condition(
            field="first", operator=Operator.IS_EMPTY
        )
        assert find_by_path(result, "c").readonly == Condition(field="first", value="x")


class TestClearConditions:
    """Tests for clear_conditions."""

    @pytest.mark.unit
    def test_clears_matching_references(self):
        """Only conditions naming a cleared field are dropped."""
        nodes = [
            _leaf("a"),
            _leaf("b", visibility=Condition(field="a")),
            _box("box", [_leaf("c", readonly=Condition(field="a"))]),
            _leaf("d", visibility=Condition(field="b")),
        ]
        result = clear_conditions(nodes, {"a"})
        assert find_by_path(result, "b").visibility is None
        assert find_by_path(result, "c").readonly is None
        assert find_by_path(result, "d").visibility == Condition(field="b")

    @pytest.mark.unit
    def test_untouched_nodes_are_shared(self):
        """Nodes with nothing to clear are returned as-is."""
        nodes = [_leaf("a"), _leaf("b")]
        result = clear_conditions(nodes, {"zzz"})
        assert all(new is old for new, old in zip(result, nodes))


class TestRenameReferences:
    """Tests for rename_references."""

    @pytest.mark.unit
    def test_untouched_nodes_are_shared(self):
        """Nodes that do not reference the old name are returned as-is."""
        nodes = [_leaf("a"), _leaf("b", visibility=Condition(field="z"))]
        result = rename_references(nodes, "a", "first")
        assert all(new is old for new, old in zip(result, nodes))


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.unit
    def test_errors_carry_node_id(self, tree):
        """Errors name the identity they were about."""
        with pytest.raises(NotFound) as exc_info:
            remove_by_id(tree, "ghost")
        assert exc_info.value.node_id == "ghost"

    @pytest.mark.unit
    def test_cyclic_move_is_tree_error(self):
        """All tree errors share a base class."""
        from formgrid.tree import FieldTreeError

        assert issubclass(CyclicMove, FieldTreeError)
