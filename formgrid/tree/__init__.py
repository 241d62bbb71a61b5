"""Field tree - node model and identity-addressed tree operations.

Example usage:
    >>> from formgrid.tree import FieldKind, FieldNode, insert_into
    >>> node = FieldNode(name="email", kind=FieldKind.STRING)
    >>> nodes = insert_into([], None, None, node)
"""

from .lib import (
    EDITABLE_ATTRIBUTES,
    CyclicMove,
    DuplicateId,
    DuplicateName,
    FieldTreeError,
    InvalidCondition,
    InvalidTarget,
    NotFound,
    children_of,
    clear_conditions,
    rename_references,
    collect_ids,
    collect_names,
    find_by_name,
    find_by_path,
    find_parent,
    insert_into,
    is_descendant,
    iter_nodes,
    node_path,
    remove_by_id,
    replace_by_id,
    replace_children,
    unique_name,
    update_node,
)
from .models import (
    CONFIG_MODELS,
    CONTAINER_KINDS,
    GRID_COLUMNS,
    ArrayColumn,
    ArrayConfig,
    BooleanConfig,
    ChartConfig,
    ChartPoint,
    ChartType,
    ContainerConfig,
    ContainerVariant,
    DisplayConfig,
    FieldConfig,
    FieldKind,
    FieldNode,
    NavigationConfig,
    NavItem,
    NumberConfig,
    PanelConfig,
    RichTextConfig,
    StringConfig,
    WidthClass,
    config_model_for,
    default_config,
    new_node_id,
)

__all__ = [
    # Models
    "GRID_COLUMNS",
    "FieldKind",
    "CONTAINER_KINDS",
    "WidthClass",
    "FieldNode",
    "new_node_id",
    # Configuration
    "StringConfig",
    "NumberConfig",
    "BooleanConfig",
    "ArrayColumn",
    "ArrayConfig",
    "ChartType",
    "ChartPoint",
    "ChartConfig",
    "RichTextConfig",
    "NavItem",
    "NavigationConfig",
    "DisplayConfig",
    "ContainerVariant",
    "ContainerConfig",
    "PanelConfig",
    "FieldConfig",
    "CONFIG_MODELS",
    "config_model_for",
    "default_config",
    # Errors
    "FieldTreeError",
    "InvalidTarget",
    "CyclicMove",
    "NotFound",
    "DuplicateId",
    "DuplicateName",
    "InvalidCondition",
    # Operations
    "EDITABLE_ATTRIBUTES",
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
