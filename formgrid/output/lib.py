"""Output formatting for form visualization.

Generates human-readable text representations of field trees
for review on the command line.
"""

import json
from dataclasses import dataclass

from formgrid.compiler import CompiledForm, SchemaCompiler
from formgrid.condition import Condition
from formgrid.tree import FieldNode, WidthClass


@dataclass
class FormOutput:
    """Complete output for user feedback.

    Attributes:
        text_tree: Human-readable tree representation.
        compiled: Compiled document pair with warnings.
        nodes: Field tree the output was produced from.
    """

    text_tree: str
    compiled: CompiledForm
    nodes: list[FieldNode]

    def documents_json(self, indent: int = 2) -> str:
        """Both documents as a JSON string."""
        return json.dumps(self.compiled.to_documents(), indent=indent)


def format_condition(condition: Condition) -> str:
    """Short text form of a condition, e.g. ``age greaterThan 18``."""
    text = f"{condition.field} {condition.operator.value}"
    if condition.operator.takes_value:
        text += f" {json.dumps(condition.value, default=str)}"
    return text


def format_field_tree(nodes: list[FieldNode], title: str = "Form") -> str:
    """Format a field tree as a human-readable tree.

    Example output:
        Form
        ├── Email [string, 50%, r0c0, required]
        ├── Age [number, 50%, r0c1]
        └── Details [container, 100%, r1c0, shown if age greaterThan 18]
            └── Notes [string, 100%, r0c0]

    Args:
        nodes: Root list of the field tree.
        title: Text of the root line.

    Returns:
        Formatted tree string.
    """
    lines: list[str] = [title]
    for i, node in enumerate(nodes):
        _format_node(node, lines, "", is_last=i == len(nodes) - 1)
    return "\n".join(lines)


def _format_node(node: FieldNode, lines: list[str], prefix: str, is_last: bool) -> None:
    """Recursively format a node and its children."""
    connector = "└── " if is_last else "├── "
    child_prefix = prefix + ("    " if is_last else "│   ")

    attrs = [node.kind.value, f"{node.width.percent}%", f"r{node.row}c{node.column}"]
    if node.required:
        attrs.append("required")
    if node.visibility is not None:
        attrs.append(f"shown if {format_condition(node.visibility)}")
    if node.readonly is not None:
        attrs.append(f"readonly if {format_condition(node.readonly)}")

    lines.append(f"{prefix}{connector}{node.title} [{', '.join(attrs)}]")

    children = node.children or []
    for i, child in enumerate(children):
        _format_node(child, lines, child_prefix, is_last=i == len(children) - 1)


class OutputGenerator:
    """Generates complete output for user feedback.

    Produces both human-readable text and the compiled documents
    from a field tree.
    """

    def __init__(self, title: str = "Form"):
        """Initialize generator.

        Args:
            title: Root line used in text trees.
        """
        self._title = title
        self._compiler = SchemaCompiler()

    def generate(self, nodes: list[FieldNode], title: str | None = None) -> FormOutput:
        """Generate output from a field tree.

        Args:
            nodes: Field tree to visualize.
            title: Root line override.

        Returns:
            FormOutput with text tree and compiled documents.
        """
        return FormOutput(
            text_tree=format_field_tree(nodes, title or self._title),
            compiled=self._compiler.compile(nodes),
            nodes=nodes,
        )


__all__ = [
    "format_condition",
    "format_field_tree",
    "FormOutput",
    "OutputGenerator",
]
