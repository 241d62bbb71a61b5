"""Layout engine - 12-column row packing, resize, and drag-and-drop moves.

Example usage:
    >>> from formgrid.layout import DropTarget, create_node, insert_node
    >>> node = create_node("string", [])
    >>> nodes = insert_node([], node, DropTarget.root())
"""

from formgrid.tree import GRID_COLUMNS, WidthClass

from .lib import (
    DEFAULT_LABELS,
    DropTarget,
    assign_rows,
    create_node,
    drop_after,
    drop_before,
    insert_node,
    layout_list,
    move_node,
    pack_rows,
    remove_node,
    resize_node,
    set_width,
)

__all__ = [
    "GRID_COLUMNS",
    "WidthClass",
    "DEFAULT_LABELS",
    # Drop targets
    "DropTarget",
    "drop_before",
    "drop_after",
    # Packing
    "pack_rows",
    "layout_list",
    "assign_rows",
    # Mutations
    "set_width",
    "resize_node",
    "create_node",
    "insert_node",
    "remove_node",
    "move_node",
]
