"""Field tree operations.

The field tree is a plain ``list[FieldNode]``; container nodes own their
children. Every operation here returns a new list and leaves the input (and
every node it references) untouched, so callers can keep the previous tree as
an undo point or discard a failed attempt without cleanup. Errors are raised
before any new structure is returned.
"""

import logging
from collections.abc import Iterator
from typing import Any

from formgrid.condition import Condition

from .models import FieldConfig, FieldNode, config_model_for

logger = logging.getLogger(__name__)

# Attributes a settings edit may change. Identity, kind, width, placement and
# children are owned by the layout engine.
EDITABLE_ATTRIBUTES = frozenset(
    {"name", "label", "required", "config", "visibility", "readonly"}
)


class FieldTreeError(Exception):
    """Base exception for rejected tree operations.

    Attributes:
        node_id: Identity the operation was addressing, if any.
    """

    def __init__(self, message: str, node_id: str | None = None):
        super().__init__(message)
        self.node_id = node_id


class InvalidTarget(FieldTreeError):
    """Raised when a parent is missing or cannot own children."""


class CyclicMove(FieldTreeError):
    """Raised when a node would be moved into itself or a descendant."""


class NotFound(FieldTreeError):
    """Raised when no node has the requested identity."""


class DuplicateId(FieldTreeError):
    """Raised when an inserted identity already exists in the tree."""


class DuplicateName(FieldTreeError):
    """Raised when a rename collides with another structural name."""


class InvalidCondition(FieldTreeError):
    """Raised when a condition references the node that owns it."""


# =============================================================================
# Traversal
# =============================================================================


def iter_nodes(nodes: list[FieldNode]) -> Iterator[FieldNode]:
    """Yield every node depth-first, parents before their children."""
    for node in nodes:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


def collect_ids(nodes: list[FieldNode]) -> set[str]:
    """All identities in the tree."""
    return {node.id for node in iter_nodes(nodes)}


def collect_names(nodes: list[FieldNode]) -> set[str]:
    """All structural names in the tree."""
    return {node.name for node in iter_nodes(nodes)}


def find_by_path(nodes: list[FieldNode], target_id: str) -> FieldNode | None:
    """Find a node by identity anywhere in the nesting.

    Args:
        nodes: Root list of the tree.
        target_id: Identity to look for.

    Returns:
        The node, or None when no node has that identity.
    """
    path = node_path(nodes, target_id)
    return path[-1] if path else None


def find_by_name(nodes: list[FieldNode], name: str) -> FieldNode | None:
    """Find the first node with a structural name."""
    for node in iter_nodes(nodes):
        if node.name == name:
            return node
    return None


def node_path(nodes: list[FieldNode], target_id: str) -> list[FieldNode]:
    """Chain of nodes from the root list down to the target.

    Returns:
        ``[outermost ancestor, ..., target]``, or an empty list if not found.
    """
    for node in nodes:
        if node.id == target_id:
            return [node]
        if node.children:
            inner = node_path(node.children, target_id)
            if inner:
                return [node, *inner]
    return []


def find_parent(nodes: list[FieldNode], target_id: str) -> tuple[str | None, int]:
    """Locate the owning list of a node.

    Returns:
        Tuple of (parent id or None for the root list, index in that list).

    Raises:
        NotFound: If no node has the identity.
    """
    path = node_path(nodes, target_id)
    if not path:
        raise NotFound(f"No node with id '{target_id}'", node_id=target_id)

    parent = path[-2] if len(path) > 1 else None
    siblings = parent.children if parent is not None else nodes
    index = next(i for i, node in enumerate(siblings) if node.id == target_id)
    return (parent.id if parent is not None else None), index


def children_of(nodes: list[FieldNode], parent_id: str | None) -> list[FieldNode]:
    """The list owned by a parent (the root list when parent_id is None).

    Raises:
        InvalidTarget: If the parent is missing or is not a container kind.
    """
    if parent_id is None:
        return nodes
    parent = find_by_path(nodes, parent_id)
    if parent is None:
        raise InvalidTarget(f"No container with id '{parent_id}'", node_id=parent_id)
    if not parent.is_container:
        raise InvalidTarget(
            f"Node '{parent_id}' is a {parent.kind.value} and cannot hold children",
            node_id=parent_id,
        )
    return parent.children or []


def is_descendant(nodes: list[FieldNode], ancestor_id: str, target_id: str) -> bool:
    """Whether target_id lies strictly inside the subtree of ancestor_id."""
    path = node_path(nodes, target_id)
    return any(node.id == ancestor_id for node in path[:-1])


def unique_name(nodes: list[FieldNode], base: str, exclude_id: str | None = None) -> str:
    """Return base, or base_2, base_3... whichever is free in the tree.

    Args:
        nodes: Root list of the tree.
        base: Preferred name.
        exclude_id: Node whose own name does not count as taken.
    """
    taken = {node.name for node in iter_nodes(nodes) if node.id != exclude_id}
    if base not in taken:
        return base
    suffix = 2
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return f"{base}_{suffix}"


# =============================================================================
# Structural edits
# =============================================================================


def _map_list(
    nodes: list[FieldNode], parent_id: str | None, edit
) -> tuple[list[FieldNode], bool]:
    """Apply `edit` to the list owned by parent_id, copying the path to it."""
    if parent_id is None:
        return edit(list(nodes)), True

    result: list[FieldNode] = []
    applied = False
    for node in nodes:
        if applied or not node.children and node.id != parent_id:
            result.append(node)
            continue
        if node.id == parent_id:
            result.append(node.model_copy(update={"children": edit(list(node.children or []))}))
            applied = True
            continue
        children, applied = _map_list(node.children, parent_id, edit)
        result.append(node.model_copy(update={"children": children}) if applied else node)
    return result, applied


def replace_children(
    nodes: list[FieldNode], parent_id: str | None, children: list[FieldNode]
) -> list[FieldNode]:
    """Swap the list owned by parent_id for `children`.

    Raises:
        InvalidTarget: If the parent is missing or is not a container kind.
    """
    children_of(nodes, parent_id)
    result, _ = _map_list(nodes, parent_id, lambda _old: list(children))
    return result


def insert_into(
    nodes: list[FieldNode],
    parent_id: str | None,
    index: int | None,
    node: FieldNode,
) -> list[FieldNode]:
    """Insert a node into the root list or into a container's children.

    Args:
        nodes: Root list of the tree.
        parent_id: Container to insert into, or None for the root list.
        index: Position in the destination list; None or past-the-end appends,
            negative values clamp to the front.
        node: Node (with its subtree) to insert.

    Returns:
        New root list.

    Raises:
        InvalidTarget: If the parent is missing or is not a container kind.
        DuplicateId: If any identity in the inserted subtree already exists.
    """
    children_of(nodes, parent_id)

    clashes = collect_ids([node]) & collect_ids(nodes)
    if clashes:
        raise DuplicateId(
            f"Identities already in the tree: {', '.join(sorted(clashes))}",
            node_id=node.id,
        )

    def _insert(siblings: list[FieldNode]) -> list[FieldNode]:
        position = len(siblings) if index is None else max(0, min(index, len(siblings)))
        siblings.insert(position, node)
        return siblings

    result, _ = _map_list(nodes, parent_id, _insert)
    return result


def remove_by_id(
    nodes: list[FieldNode], target_id: str
) -> tuple[list[FieldNode], FieldNode]:
    """Detach a node (and its subtree) from wherever it lives.

    Returns:
        Tuple of (new root list, removed node).

    Raises:
        NotFound: If no node has the identity; the input is left untouched,
            so retrying is safe.
    """
    parent_id, index = find_parent(nodes, target_id)
    removed = children_of(nodes, parent_id)[index]

    def _remove(siblings: list[FieldNode]) -> list[FieldNode]:
        del siblings[index]
        return siblings

    result, _ = _map_list(nodes, parent_id, _remove)
    return result, removed


def replace_by_id(
    nodes: list[FieldNode], target_id: str, new_node: FieldNode
) -> list[FieldNode]:
    """Replace a node in place, keeping its position.

    Raises:
        NotFound: If no node has the identity.
        DuplicateId: If the replacement introduces an identity used elsewhere.
    """
    parent_id, index = find_parent(nodes, target_id)
    old = children_of(nodes, parent_id)[index]

    others = collect_ids(nodes) - collect_ids([old])
    clashes = collect_ids([new_node]) & others
    if clashes:
        raise DuplicateId(
            f"Identities already in the tree: {', '.join(sorted(clashes))}",
            node_id=new_node.id,
        )

    def _replace(siblings: list[FieldNode]) -> list[FieldNode]:
        siblings[index] = new_node
        return siblings

    result, _ = _map_list(nodes, parent_id, _replace)
    return result


def update_node(nodes: list[FieldNode], target_id: str, **changes: Any) -> list[FieldNode]:
    """Apply a settings edit to one node.

    Accepted keys: name, label, required, config, visibility, readonly. Width
    changes go through the layout engine so the row is re-packed. The edited
    node is rebuilt through model validation; a rename rewrites conditions on
    other nodes that referenced the old name.

    Raises:
        NotFound: If no node has the identity.
        DuplicateName: If a new name is already used elsewhere in the tree.
        InvalidCondition: If a condition references the node's own name.
        ValueError: For unknown keys, a config of the wrong kind or a value
            that fails validation.
    """
    unknown = set(changes) - EDITABLE_ATTRIBUTES
    if unknown:
        raise ValueError(f"Cannot edit attributes: {', '.join(sorted(unknown))}")

    node = find_by_path(nodes, target_id)
    if node is None:
        raise NotFound(f"No node with id '{target_id}'", node_id=target_id)

    name = changes.get("name", node.name)
    if not name:
        raise ValueError("Structural name cannot be empty")
    if name != node.name and unique_name(nodes, name, exclude_id=node.id) != name:
        raise DuplicateName(f"Name '{name}' is already used", node_id=target_id)

    if "config" in changes:
        changes["config"] = _coerce_config(node, changes["config"])

    for key in ("visibility", "readonly"):
        condition = changes.get(key, getattr(node, key))
        if isinstance(condition, dict):
            condition = Condition.model_validate(condition)
            changes[key] = condition
        if condition is not None and condition.field == name:
            raise InvalidCondition(
                f"{key} condition on '{name}' references itself", node_id=target_id
            )

    edited = FieldNode.model_validate({**dict(node), **changes})
    result = replace_by_id(nodes, target_id, edited)
    if edited.name != node.name:
        result = rename_references(result, node.name, edited.name)
    return result


def _coerce_config(node: FieldNode, config: Any) -> FieldConfig:
    model = config_model_for(node.kind)
    if isinstance(config, dict):
        return model.model_validate({**config, "kind": node.kind.value})
    if not isinstance(config, model):
        raise ValueError(
            f"{type(config).__name__} does not configure a {node.kind.value} node"
        )
    return config


def clear_conditions(nodes: list[FieldNode], names: set[str]) -> list[FieldNode]:
    """Drop visibility/readonly conditions that reference any of `names`.

    Returns:
        New root list; untouched nodes are shared with the input.
    """
    result: list[FieldNode] = []
    for node in nodes:
        update: dict[str, Any] = {}
        for key in ("visibility", "readonly"):
            condition = getattr(node, key)
            if condition is not None and condition.field in names:
                logger.debug(
                    "Clearing %s condition on '%s' (referenced '%s')",
                    key,
                    node.name,
                    condition.field,
                )
                update[key] = None
        if node.children:
            children = clear_conditions(node.children, names)
            if any(new is not old for new, old in zip(children, node.children)):
                update["children"] = children
        result.append(node.model_copy(update=update) if update else node)
    return result



def rename_references(nodes: list[FieldNode], old: str, new: str) -> list[FieldNode]:
    """Point visibility/readonly conditions on `old` at `new` instead.

    Returns:
        New root list; untouched nodes are shared with the input.
    """
    result: list[FieldNode] = []
    for node in nodes:
        update: dict[str, Any] = {}
        for key in ("visibility", "readonly"):
            condition = getattr(node, key)
            if condition is not None and condition.field == old:
                update[key] = condition.model_copy(update={"field": new})
        if node.children:
            children = rename_references(node.children, old, new)
            if any(child is not before for child, before in zip(children, node.children)):
                update["children"] = children
        result.append(node.model_copy(update=update) if update else node)
    return result

__all__ = [
    "EDITABLE_ATTRIBUTES",
    "FieldTreeError",
    "InvalidTarget",
    "CyclicMove",
    "NotFound",
    "DuplicateId",
    "DuplicateName",
    "InvalidCondition",
    "iter_nodes",
    "collect_ids",
    "collect_names",
    "find_by_path",
    "find_by_name",
    "node_path",
    "find_parent",
    "children_of",
    "is_descendant",
    "unique_name",
    "replace_children",
    "insert_into",
    "remove_by_id",
    "replace_by_id",
    "update_node",
    "clear_conditions",
    "rename_references",
]
