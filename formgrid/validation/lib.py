"""Field tree validation and static analysis.

This module provides validation functions for field trees, detecting
structural issues before compilation. Trees produced by the layout engine
always pass; trees loaded from files or built by hand may not.
"""

from collections import Counter
from dataclasses import dataclass

from formgrid.tree import GRID_COLUMNS, FieldNode, WidthClass, iter_nodes


@dataclass
class ValidationError:
    """Represents a validation error in a field tree.

    Attributes:
        node_id: ID of the node with the error.
        message: Human-readable error description.
        error_type: Category of the error.
    """

    node_id: str
    message: str
    error_type: str


def validate_tree(nodes: list[FieldNode]) -> list[ValidationError]:
    """Validate a field tree for structural issues.

    Performs the following checks:
        - Unique ID enforcement (no duplicate IDs)
        - Unique structural names across the tree
        - Row capacity (stored rows never exceed 12 columns)
        - Full-width nodes alone in their row
        - Conditions referencing their own node or a missing field

    Args:
        nodes: Root list of the field tree.

    Returns:
        list[ValidationError]: List of validation errors (empty if valid).

    Example:
        >>> errors = validate_tree(nodes)
        >>> if errors:
        ...     for e in errors:
        ...         print(f"{e.node_id}: {e.message}")
    """
    errors: list[ValidationError] = []
    errors.extend(_check_duplicates(nodes))
    errors.extend(_check_rows(nodes))
    errors.extend(_check_conditions(nodes))
    return errors


def is_valid(nodes: list[FieldNode]) -> bool:
    """Check if a field tree is valid.

    Convenience function that returns True if no validation errors exist.
    """
    return not validate_tree(nodes)


def _check_duplicates(nodes: list[FieldNode]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    all_nodes = list(iter_nodes(nodes))

    id_counts = Counter(node.id for node in all_nodes)
    for node_id, count in id_counts.items():
        if count > 1:
            errors.append(
                ValidationError(
                    node_id=node_id,
                    message=f"Duplicate ID '{node_id}' appears {count} times",
                    error_type="duplicate_id",
                )
            )

    name_counts = Counter(node.name for node in all_nodes)
    for name, count in name_counts.items():
        if count > 1:
            first = next(node for node in all_nodes if node.name == name)
            errors.append(
                ValidationError(
                    node_id=first.id,
                    message=f"Duplicate name '{name}' appears {count} times",
                    error_type="duplicate_name",
                )
            )
    return errors


def _check_rows(nodes: list[FieldNode]) -> list[ValidationError]:
    """Check stored rows of every sibling list against the grid.

    Args:
        nodes: Sibling list to check; containers are checked recursively.

    Returns:
        list[ValidationError]: Row errors found.
    """
    errors: list[ValidationError] = []

    rows: dict[int, list[FieldNode]] = {}
    for node in nodes:
        rows.setdefault(node.row, []).append(node)

    for row, members in rows.items():
        used = sum(node.width.span for node in members)
        if used > GRID_COLUMNS:
            errors.append(
                ValidationError(
                    node_id=members[0].id,
                    message=f"Row {row} spans {used} of {GRID_COLUMNS} columns",
                    error_type="row_overflow",
                )
            )
        if len(members) > 1:
            for node in members:
                if node.width == WidthClass.FULL:
                    errors.append(
                        ValidationError(
                            node_id=node.id,
                            message=f"Full-width node '{node.name}' shares row {row}",
                            error_type="full_row_shared",
                        )
                    )

    for node in nodes:
        if node.children:
            errors.extend(_check_rows(node.children))
    return errors


def _check_conditions(nodes: list[FieldNode]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    fields = {node.name for node in iter_nodes(nodes) if not node.is_container}

    for node in iter_nodes(nodes):
        for label, condition in (("visibility", node.visibility), ("readonly", node.readonly)):
            if condition is None:
                continue
            if condition.field == node.name:
                errors.append(
                    ValidationError(
                        node_id=node.id,
                        message=f"{label} condition on '{node.name}' references itself",
                        error_type="self_condition",
                    )
                )
            elif condition.field not in fields:
                errors.append(
                    ValidationError(
                        node_id=node.id,
                        message=(
                            f"{label} condition on '{node.name}' references "
                            f"missing field '{condition.field}'"
                        ),
                        error_type="dangling_condition",
                    )
                )
    return errors
