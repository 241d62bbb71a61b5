"""Grid layout engine.

Every sibling list (the root list, and each container's children) is laid
out on its own 12-column grid. Nodes flow left to right into the current row;
a node that would overflow the row, or is full width, starts a new one.

All operations take the current tree and return a new one. Errors are raised
before anything is built, so a rejected drop leaves the caller's tree as it
was.
"""

import logging
from dataclasses import dataclass

from formgrid.tree import (
    GRID_COLUMNS,
    CyclicMove,
    FieldKind,
    FieldNode,
    NotFound,
    WidthClass,
    children_of,
    clear_conditions,
    collect_names,
    default_config,
    find_by_path,
    find_parent,
    insert_into,
    is_descendant,
    iter_nodes,
    new_node_id,
    remove_by_id,
    replace_children,
    unique_name,
)

logger = logging.getLogger(__name__)

DEFAULT_LABELS: dict[FieldKind, str] = {
    FieldKind.STRING: "Text Field",
    FieldKind.NUMBER: "Number",
    FieldKind.BOOLEAN: "Checkbox",
    FieldKind.ARRAY: "Table",
    FieldKind.CHART: "Chart",
    FieldKind.RICH_TEXT: "Text",
    FieldKind.NAVIGATION: "Navigation",
    FieldKind.DISPLAY: "Alert",
    FieldKind.CONTAINER: "Section",
    FieldKind.PANEL: "Panel",
}


# =============================================================================
# Drop targets
# =============================================================================


@dataclass(frozen=True)
class DropTarget:
    """Where a dragged node should land.

    Attributes:
        parent_id: Container receiving the node, or None for the root list.
        index: Position in the destination list as currently displayed;
            None appends.
    """

    parent_id: str | None = None
    index: int | None = None

    @classmethod
    def root(cls, index: int | None = None) -> "DropTarget":
        """Target the root list (append by default)."""
        return cls(parent_id=None, index=index)

    @classmethod
    def into(cls, container_id: str, index: int | None = None) -> "DropTarget":
        """Target a container's children (append by default)."""
        return cls(parent_id=container_id, index=index)


def drop_before(nodes: list[FieldNode], anchor_id: str) -> DropTarget:
    """Drop zone immediately before an existing node, in its list."""
    parent_id, index = find_parent(nodes, anchor_id)
    return DropTarget(parent_id=parent_id, index=index)


def drop_after(nodes: list[FieldNode], anchor_id: str) -> DropTarget:
    """Drop zone immediately after an existing node, in its list."""
    parent_id, index = find_parent(nodes, anchor_id)
    return DropTarget(parent_id=parent_id, index=index + 1)


# =============================================================================
# Row packing
# =============================================================================


def pack_rows(nodes: list[FieldNode], keep_rows: bool = False) -> list[list[FieldNode]]:
    """Group a sibling list into grid rows.

    Args:
        nodes: Sibling list in display order.
        keep_rows: Also break wherever the stored row index changes, so rows
            the engine assigned earlier are honoured. Capacity is still
            enforced.

    Returns:
        Rows in order; each row's spans sum to at most 12.
    """
    rows: list[list[FieldNode]] = []
    current: list[FieldNode] = []
    used = 0

    for node in nodes:
        span = node.width.span
        if current and (
            used + span > GRID_COLUMNS
            or span == GRID_COLUMNS
            or (keep_rows and node.row != current[-1].row)
        ):
            rows.append(current)
            current, used = [], 0
        current.append(node)
        used += span

    if current:
        rows.append(current)
    return rows


def _stamp(rows: list[list[FieldNode]], first_row: int = 0) -> list[FieldNode]:
    """Write row/column positions onto packed rows."""
    return [
        node
        if node.row == first_row + row_index and node.column == column
        else node.model_copy(update={"row": first_row + row_index, "column": column})
        for row_index, row in enumerate(rows)
        for column, node in enumerate(row)
    ]


def layout_list(nodes: list[FieldNode], keep_rows: bool = False) -> list[FieldNode]:
    """Re-pack one sibling list without touching its children."""
    return _stamp(pack_rows(nodes, keep_rows=keep_rows))


def assign_rows(nodes: list[FieldNode], keep_rows: bool = False) -> list[FieldNode]:
    """Stamp row/column on every node, each container on its own grid.

    Args:
        nodes: Sibling list to lay out.
        keep_rows: See `pack_rows`.

    Returns:
        New list with positions assigned at every depth.
    """
    laid_out = []
    for node in layout_list(nodes, keep_rows=keep_rows):
        if node.children:
            node = node.model_copy(
                update={"children": assign_rows(node.children, keep_rows=keep_rows)}
            )
        laid_out.append(node)
    return laid_out


def _relayout(nodes: list[FieldNode], parent_id: str | None) -> list[FieldNode]:
    return replace_children(nodes, parent_id, layout_list(children_of(nodes, parent_id)))


# =============================================================================
# Resize
# =============================================================================


def set_width(nodes: list[FieldNode], node_id: str, width: WidthClass | str) -> list[FieldNode]:
    """Give a node a new width class and re-pack only its row.

    The node's previous row is packed again in the same order. If it no
    longer fits it splits, and later rows in the same list move down. Other
    rows keep their positions.

    Raises:
        NotFound: If no node has the identity.
    """
    width = WidthClass(width)
    parent_id, index = find_parent(nodes, node_id)
    siblings = children_of(nodes, parent_id)
    target = siblings[index]
    if target.width == width:
        return nodes

    resized = target.model_copy(update={"width": width})
    members = [
        resized if node.id == node_id else node
        for node in siblings
        if node.row == target.row
    ]
    rows = pack_rows(members)
    shift = len(rows) - 1
    repacked = {node.id: node for node in _stamp(rows, first_row=target.row)}

    updated = []
    for node in siblings:
        if node.row == target.row:
            updated.append(repacked[node.id])
        elif node.row > target.row and shift:
            updated.append(node.model_copy(update={"row": node.row + shift}))
        else:
            updated.append(node)

    logger.debug(
        "Resized %s to %s; row %d became %d row(s)",
        node_id,
        width.value,
        target.row,
        shift + 1,
    )
    return replace_children(nodes, parent_id, updated)


def resize_node(nodes: list[FieldNode], node_id: str) -> list[FieldNode]:
    """Advance a node to the next width class in the resize cycle.

    quarter -> half -> three_quarter -> full -> quarter.

    Raises:
        NotFound: If no node has the identity.
    """
    node = find_by_path(nodes, node_id)
    if node is None:
        raise NotFound(f"No node with id '{node_id}'", node_id=node_id)
    return set_width(nodes, node_id, node.width.next())


# =============================================================================
# Insert / remove / move
# =============================================================================


def create_node(
    kind: FieldKind | str,
    nodes: list[FieldNode],
    name: str | None = None,
    label: str | None = None,
    width: WidthClass | str = WidthClass.FULL,
) -> FieldNode:
    """Build a fresh node for a palette drop.

    The node gets a new identity, the default config for its kind and a
    structural name that is free in `nodes` (``field_<n>`` unless given).
    """
    kind = FieldKind(kind)
    base = name or f"field_{sum(1 for _ in iter_nodes(nodes)) + 1}"
    return FieldNode(
        id=new_node_id(),
        name=unique_name(nodes, base),
        label=DEFAULT_LABELS[kind] if label is None else label,
        kind=kind,
        config=default_config(kind),
        width=WidthClass(width),
    )


def _rename_collisions(node: FieldNode, taken: set[str]) -> FieldNode:
    """Rename names in an inserted subtree that collide with `taken`."""
    name = node.name
    if name in taken:
        suffix = 2
        while f"{node.name}_{suffix}" in taken:
            suffix += 1
        name = f"{node.name}_{suffix}"
        logger.info("Renamed '%s' to '%s' to keep names unique", node.name, name)
    taken.add(name)

    update = {}
    if name != node.name:
        update["name"] = name
    if node.children:
        update["children"] = [_rename_collisions(child, taken) for child in node.children]
    return node.model_copy(update=update) if update else node


def insert_node(
    nodes: list[FieldNode], node: FieldNode, target: DropTarget | None = None
) -> list[FieldNode]:
    """Insert a node at a drop target and re-pack the destination list.

    Structural names in the inserted subtree that are already used are
    renamed deterministically (``name_2``, ``name_3``...).

    Raises:
        InvalidTarget: If the target parent is missing or is not a container.
        DuplicateId: If an identity in the subtree already exists.
    """
    target = target or DropTarget.root()
    children_of(nodes, target.parent_id)
    node = _rename_collisions(node, collect_names(nodes))
    if node.children:
        node = node.model_copy(update={"children": assign_rows(node.children)})
    inserted = insert_into(nodes, target.parent_id, target.index, node)
    return _relayout(inserted, target.parent_id)


def remove_node(nodes: list[FieldNode], node_id: str) -> list[FieldNode]:
    """Delete a node with its subtree and re-pack the list it lived in.

    Conditions elsewhere that referenced the removed node, or any node inside
    it, are cleared.

    Raises:
        NotFound: If no node has the identity.
    """
    parent_id, _ = find_parent(nodes, node_id)
    remaining, removed = remove_by_id(nodes, node_id)
    names = {node.name for node in iter_nodes([removed])}
    remaining = clear_conditions(remaining, names)
    return _relayout(remaining, parent_id)


def move_node(nodes: list[FieldNode], node_id: str, target: DropTarget) -> list[FieldNode]:
    """Move a node (with its subtree) to a drop target in one step.

    The target index refers to the destination list as displayed before the
    move; moving forward within the same list accounts for the vacated slot.

    Raises:
        NotFound: If no node has the identity.
        CyclicMove: If the target is the node itself or one of its
            descendants.
        InvalidTarget: If the target parent is missing or is not a container.
    """
    source_parent, source_index = find_parent(nodes, node_id)
    if target.parent_id is not None:
        if target.parent_id == node_id or is_descendant(nodes, node_id, target.parent_id):
            raise CyclicMove(
                f"Cannot move '{node_id}' into itself or a descendant", node_id=node_id
            )
    children_of(nodes, target.parent_id)

    index = target.index
    if index is not None and source_parent == target.parent_id and source_index < index:
        index -= 1

    remaining, moved = remove_by_id(nodes, node_id)
    result = insert_into(remaining, target.parent_id, index, moved)
    result = _relayout(result, target.parent_id)
    if source_parent != target.parent_id:
        result = _relayout(result, source_parent)
    return result


__all__ = [
    "DEFAULT_LABELS",
    "DropTarget",
    "drop_before",
    "drop_after",
    "pack_rows",
    "layout_list",
    "assign_rows",
    "set_width",
    "resize_node",
    "create_node",
    "insert_node",
    "remove_node",
    "move_node",
]
