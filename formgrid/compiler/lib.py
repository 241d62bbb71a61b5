"""Field tree to document compiler.

Turns a field tree into the pair of documents consumed by form renderers:

- the data-shape document, a JSON Schema object whose ``properties`` map holds
  every leaf field (flattened across containers), and
- the presentation document, a ``VerticalLayout`` of Controls, Groups and
  HorizontalLayouts carrying grid widths and conditional rules.

Compilation is a pure function of the tree. Problems that do not prevent a
usable document (a condition pointing at a field that no longer exists, two
leaves sharing a name) are reported as warnings instead of errors.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from formgrid.condition import (
    Condition,
    RuleEffect,
    build_rule,
    build_rule_condition,
    scope_for,
)
from formgrid.layout import pack_rows
from formgrid.tree import (
    ContainerVariant,
    FieldKind,
    FieldNode,
    StringConfig,
    iter_nodes,
)

logger = logging.getLogger(__name__)

# Property ``type`` tag per kind; kinds missing here use their own value.
TYPE_TAGS: dict[FieldKind, str] = {
    FieldKind.RICH_TEXT: "richText",
}


class WarningKind(str, Enum):
    """Categories of compiler warning."""

    DANGLING_CONDITION = "dangling_condition"
    DUPLICATE_NAME = "duplicate_name"


@dataclass
class CompilationWarning:
    """Problem found while compiling that did not stop compilation.

    Attributes:
        kind: Warning category.
        node_id: ID of the node where the issue occurred.
        message: Human-readable explanation.
        reference: The offending structural name, if any.
    """

    kind: WarningKind
    node_id: str
    message: str
    reference: str | None = None


@dataclass
class CompiledForm:
    """Compiled document pair plus any warnings.

    Attributes:
        schema: Data-shape document.
        ui_schema: Presentation document.
        warnings: Problems found while compiling.
    """

    schema: dict[str, Any]
    ui_schema: dict[str, Any]
    warnings: list[CompilationWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were emitted."""
        return len(self.warnings) > 0

    def to_documents(self) -> dict[str, Any]:
        """Both documents in the ``{"schema", "uiSchema"}`` envelope."""
        return {"schema": self.schema, "uiSchema": self.ui_schema}


def type_tag(kind: FieldKind) -> str:
    """Property ``type`` tag written for a field kind."""
    return TYPE_TAGS.get(kind, kind.value)


class SchemaCompiler:
    """Compiles a field tree into data-shape and presentation documents.

    A compiler instance holds per-run state only inside `compile`; it can be
    reused for any number of trees.

    Example:
        >>> compiled = SchemaCompiler().compile(nodes)
        >>> compiled.schema["properties"].keys()
    """

    def __init__(self):
        self._properties: dict[str, dict[str, Any]] = {}
        self._required: list[str] = []
        self._warnings: list[CompilationWarning] = []
        self._known_names: set[str] = set()

    def compile(self, nodes: list[FieldNode]) -> CompiledForm:
        """Compile a field tree.

        Args:
            nodes: Root list of the field tree.

        Returns:
            CompiledForm with both documents and any warnings.
        """
        self._properties = {}
        self._required = []
        self._warnings = []
        self._known_names = {
            node.name for node in iter_nodes(nodes) if not node.is_container
        }

        elements = self._compile_list(nodes)

        schema: dict[str, Any] = {"type": "object", "properties": self._properties}
        if self._required:
            schema["required"] = self._required
        ui_schema = {"type": "VerticalLayout", "elements": elements}

        for warning in self._warnings:
            logger.warning("%s: %s", warning.kind.value, warning.message)
        return CompiledForm(schema=schema, ui_schema=ui_schema, warnings=self._warnings)

    def _compile_list(self, nodes: list[FieldNode]) -> list[dict[str, Any]]:
        """Compile one sibling list, wrapping shared rows in HorizontalLayouts."""
        elements: list[dict[str, Any]] = []
        for row in pack_rows(nodes, keep_rows=True):
            compiled = [self._compile_node(node) for node in row]
            if len(row) == 1:
                elements.append(compiled[0])
                continue
            for node, element in zip(row, compiled):
                element["options"] = {**element.get("options", {}), "xs": node.width.span}
            elements.append({"type": "HorizontalLayout", "elements": compiled})
        return elements

    def _compile_node(self, node: FieldNode) -> dict[str, Any]:
        if node.is_container:
            element = self._compile_group(node)
        else:
            element = self._compile_control(node)
        self._apply_rules(node, element)
        return element

    def _compile_group(self, node: FieldNode) -> dict[str, Any]:
        generated = node.kind == FieldKind.PANEL or (
            node.config.variant == ContainerVariant.SECTION
        )
        return {
            "type": "Group",
            "label": node.title,
            "elements": self._compile_list(node.children or []),
            "options": {"detail": "GENERATED" if generated else "NONE"},
        }

    def _compile_control(self, node: FieldNode) -> dict[str, Any]:
        if node.name in self._properties:
            self._warnings.append(
                CompilationWarning(
                    kind=WarningKind.DUPLICATE_NAME,
                    node_id=node.id,
                    message=f"Property '{node.name}' is already defined; keeping the first",
                    reference=node.name,
                )
            )
        else:
            self._properties[node.name] = {
                "type": type_tag(node.kind),
                **node.config.to_property(),
                "title": node.title,
            }
            if node.required:
                self._required.append(node.name)

        element: dict[str, Any] = {"type": "Control", "scope": scope_for(node.name)}
        config = node.config
        if isinstance(config, StringConfig) and not config.format and not config.enum:
            element["options"] = {"multi": True}
        return element

    def _apply_rules(self, node: FieldNode, element: dict[str, Any]) -> None:
        """Attach SHOW/DISABLE rules for the node's conditions."""
        if node.visibility is not None:
            self._check_reference(node, node.visibility)
            element["rule"] = build_rule(node.visibility, RuleEffect.SHOW)

        if node.readonly is not None:
            self._check_reference(node, node.readonly)
            if "rule" not in element:
                element["rule"] = build_rule(node.readonly, RuleEffect.DISABLE)
            else:
                options = element.setdefault("options", {})
                options["readonly"] = {"condition": build_rule_condition(node.readonly)}

    def _check_reference(self, node: FieldNode, condition: Condition) -> None:
        if condition.field not in self._known_names:
            self._warnings.append(
                CompilationWarning(
                    kind=WarningKind.DANGLING_CONDITION,
                    node_id=node.id,
                    message=(
                        f"Condition on '{node.name}' references missing field "
                        f"'{condition.field}'"
                    ),
                    reference=condition.field,
                )
            )


def compile_form(nodes: list[FieldNode]) -> CompiledForm:
    """Compile a field tree with a fresh SchemaCompiler."""
    return SchemaCompiler().compile(nodes)


__all__ = [
    "TYPE_TAGS",
    "WarningKind",
    "CompilationWarning",
    "CompiledForm",
    "SchemaCompiler",
    "compile_form",
    "type_tag",
]
