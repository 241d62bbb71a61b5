"""Document to field tree parser.

Rebuilds a flat field tree from a data-shape document and its presentation
document. Each property becomes one full-width node, in property order; the
matching Control (searched through nested layouts and groups) supplies the
visibility and read-only conditions.

Saved documents may be hand-edited or produced by other tools, so parsing is
permissive: a malformed property is skipped or given defaults, logged, and
never stops the remaining properties from loading.
"""

import logging
from typing import Any

from pydantic import ValidationError

from formgrid.condition import Condition, name_from_scope, parse_rule_condition
from formgrid.layout import assign_rows
from formgrid.tree import (
    FieldConfig,
    FieldKind,
    FieldNode,
    config_model_for,
    default_config,
    new_node_id,
)

logger = logging.getLogger(__name__)

KIND_BY_TYPE: dict[str, FieldKind] = {
    "string": FieldKind.STRING,
    "number": FieldKind.NUMBER,
    "integer": FieldKind.NUMBER,
    "boolean": FieldKind.BOOLEAN,
    "array": FieldKind.ARRAY,
    "chart": FieldKind.CHART,
    "richText": FieldKind.RICH_TEXT,
    "rich_text": FieldKind.RICH_TEXT,
    "navigation": FieldKind.NAVIGATION,
    "display": FieldKind.DISPLAY,
}

# Attributes that identify a kind regardless of the type tag.
KIND_HINTS: tuple[tuple[str, FieldKind], ...] = (
    ("chartType", FieldKind.CHART),
    ("textType", FieldKind.RICH_TEXT),
    ("navItems", FieldKind.NAVIGATION),
)

# Property keys that are not configuration.
_RESERVED_KEYS = frozenset({"type", "title"})


def infer_kind(prop: dict[str, Any]) -> FieldKind:
    """Pick the field kind for a property.

    Kind hints win over the ``type`` tag; unknown tags fall back to string.
    """
    for key, kind in KIND_HINTS:
        if key in prop:
            return kind
    type_name = prop.get("type")
    kind = KIND_BY_TYPE.get(type_name) if isinstance(type_name, str) else None
    if kind is None:
        logger.warning("Unknown property type %r, reading it as string", type_name)
        return FieldKind.STRING
    return kind


class SchemaParser:
    """Parses a document pair back into a field tree.

    Example:
        >>> nodes = SchemaParser().parse(schema, ui_schema)
    """

    def parse(self, schema: Any, ui_schema: Any = None) -> list[FieldNode]:
        """Rebuild the field tree.

        Args:
            schema: Data-shape document.
            ui_schema: Presentation document, or None when there is none.

        Returns:
            Flat list of full-width nodes with rows assigned.
        """
        if not isinstance(schema, dict):
            logger.warning("Data-shape document is not an object, nothing to load")
            return []

        properties = schema.get("properties") or {}
        if not isinstance(properties, dict):
            logger.warning("'properties' is not an object, nothing to load")
            return []

        required = schema.get("required") or []
        if not isinstance(required, list):
            logger.warning("'required' is not a list, ignoring it")
            required = []

        controls = self._index_controls(ui_schema)

        nodes: list[FieldNode] = []
        for name, prop in properties.items():
            if not isinstance(prop, dict):
                logger.warning("Skipping property '%s': not an object", name)
                continue
            if not name:
                logger.warning("Skipping property with an empty name")
                continue
            node = self._parse_property(name, prop, name in required, controls.get(name))
            if node is not None:
                nodes.append(node)

        logger.debug("Parsed %d of %d properties", len(nodes), len(properties))
        return assign_rows(nodes)

    def _index_controls(self, ui_schema: Any) -> dict[str, dict[str, Any]]:
        """Map property name to its Control, searching nested elements."""
        controls: dict[str, dict[str, Any]] = {}

        def _walk(element: Any) -> None:
            if not isinstance(element, dict):
                return
            scope = element.get("scope")
            if isinstance(scope, str):
                controls.setdefault(name_from_scope(scope), element)
            children = element.get("elements")
            if isinstance(children, list):
                for child in children:
                    _walk(child)

        _walk(ui_schema)
        return controls

    def _parse_property(
        self,
        name: str,
        prop: dict[str, Any],
        required: bool,
        control: dict[str, Any] | None,
    ) -> FieldNode | None:
        kind = infer_kind(prop)
        title = prop.get("title")
        visibility, readonly = self._parse_conditions(name, control)
        try:
            return FieldNode(
                id=new_node_id(),
                name=name,
                label=title if isinstance(title, str) and title else name,
                kind=kind,
                config=self._parse_config(name, kind, prop),
                required=required,
                visibility=visibility,
                readonly=readonly,
            )
        except ValidationError as exc:
            logger.warning("Skipping property '%s': %s", name, exc)
            return None

    def _parse_config(self, name: str, kind: FieldKind, prop: dict[str, Any]) -> FieldConfig:
        data = {key: value for key, value in prop.items() if key not in _RESERVED_KEYS}
        try:
            return config_model_for(kind).model_validate({**data, "kind": kind.value})
        except ValidationError as exc:
            logger.warning(
                "Invalid %s settings on '%s', using defaults: %s", kind.value, name, exc
            )
            return default_config(kind)

    def _parse_conditions(
        self, name: str, control: dict[str, Any] | None
    ) -> tuple[Condition | None, Condition | None]:
        """Read (visibility, readonly) from a Control's rule and options."""
        if control is None:
            return None, None

        visibility = readonly = None
        rule = control.get("rule")
        if isinstance(rule, dict):
            condition = parse_rule_condition(rule.get("condition"))
            match rule.get("effect"):
                case "SHOW":
                    visibility = condition
                case "DISABLE":
                    readonly = condition
                case effect:
                    logger.warning("Ignoring rule with effect %r on '%s'", effect, name)

        options = control.get("options")
        if readonly is None and isinstance(options, dict):
            option = options.get("readonly")
            if isinstance(option, dict) and "condition" in option:
                readonly = parse_rule_condition(option["condition"])

        return self._usable(name, visibility), self._usable(name, readonly)

    def _usable(self, name: str, condition: Condition | None) -> Condition | None:
        if condition is None:
            return None
        if not condition.field:
            logger.warning("Dropping condition on '%s' without a field", name)
            return None
        if condition.field == name:
            logger.warning("Dropping condition on '%s' that references itself", name)
            return None
        return condition


def parse_form(schema: Any, ui_schema: Any = None) -> list[FieldNode]:
    """Parse a document pair with a fresh SchemaParser."""
    return SchemaParser().parse(schema, ui_schema)


__all__ = [
    "KIND_BY_TYPE",
    "KIND_HINTS",
    "SchemaParser",
    "infer_kind",
    "parse_form",
]
