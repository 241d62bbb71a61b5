"""Form builder session.

`FormSession` is the single owner of the form being edited. Every user action
goes through it; the session calls the pure layout and tree operations and
swaps in the resulting tree only when the operation succeeds. Rejected
operations are logged and reported as a failed `SessionResult`, with the tree
left exactly as it was.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from formgrid.compiler import CompiledForm, compile_form
from formgrid.condition import Condition, Operator, coerce_value
from formgrid.layout import (
    DropTarget,
    create_node,
    insert_node,
    move_node,
    remove_node,
    resize_node,
    set_width,
)
from formgrid.parser import parse_form
from formgrid.store import StoredForm
from formgrid.templates import get_template
from formgrid.tree import (
    FieldKind,
    FieldNode,
    FieldTreeError,
    NotFound,
    StringConfig,
    WidthClass,
    config_model_for,
    find_by_name,
    find_by_path,
    update_node,
)

from .drag import DragSession, DragState, ExistingFieldPayload, NewFieldPayload

logger = logging.getLogger(__name__)

CONDITION_ROLES = ("visibility", "readonly")


class ConfigEditRejected(Exception):
    """Raised when hand-edited configuration JSON is unusable.

    Attributes:
        node_id: Node whose configuration was being edited.
    """

    def __init__(self, message: str, node_id: str):
        super().__init__(message)
        self.node_id = node_id


@dataclass
class SessionResult:
    """Outcome of a session operation.

    Attributes:
        ok: Whether the tree was updated.
        error: Reason for a rejection.
        node_id: Node created or affected, when there is one.
    """

    ok: bool
    error: str | None = None
    node_id: str | None = None

    def __bool__(self) -> bool:
        return self.ok


class FormSession:
    """The form being built: metadata plus the current field tree.

    Args:
        nodes: Initial field tree (empty by default).
        name: Form name.
        description: Form description.
        form_id: Identity of the stored form this session edits, if any.
    """

    def __init__(
        self,
        nodes: list[FieldNode] | None = None,
        name: str = "",
        description: str = "",
        form_id: str | None = None,
    ):
        self.nodes: list[FieldNode] = list(nodes or [])
        self.name = name
        self.description = description
        self.form_id = form_id

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(
        self,
        action: str,
        operation: Callable[[], list[FieldNode]],
        node_id: str | None = None,
    ) -> SessionResult:
        """Run a tree operation and keep its result only if it succeeds."""
        try:
            nodes = operation()
        except (FieldTreeError, ValueError) as exc:
            logger.warning("%s rejected: %s", action, exc)
            return SessionResult(ok=False, error=str(exc), node_id=node_id)
        self.nodes = nodes
        logger.debug("%s applied", action)
        return SessionResult(ok=True, node_id=node_id)

    def get_field(self, node_id: str) -> FieldNode:
        """Look up a node by identity.

        Raises:
            NotFound: If no node has the identity.
        """
        node = find_by_path(self.nodes, node_id)
        if node is None:
            raise NotFound(f"No node with id '{node_id}'", node_id=node_id)
        return node

    # =========================================================================
    # Drag and drop
    # =========================================================================

    def drop(self, drag: DragSession) -> SessionResult:
        """Apply a completed drag gesture.

        New fields are created and inserted at the drop target; existing
        fields are moved there. Drags that were not dropped change nothing.
        """
        if drag.state != DragState.DROPPED or drag.target is None:
            return SessionResult(ok=False, error=f"Drag is {drag.state.value}, not dropped")

        match drag.payload:
            case NewFieldPayload(kind=kind, width=width):
                return self.add_field(kind, drag.target, width=width)
            case ExistingFieldPayload(node_id=node_id):
                return self.move_field(node_id, drag.target)
        return SessionResult(ok=False, error="Drag has no payload")

    def add_field(
        self,
        kind: FieldKind | str,
        target: DropTarget | None = None,
        name: str | None = None,
        label: str | None = None,
        width: WidthClass | str = WidthClass.FULL,
    ) -> SessionResult:
        """Create a field of `kind` and insert it at `target` (append by default)."""
        try:
            node = create_node(kind, self.nodes, name=name, label=label, width=width)
        except ValueError as exc:
            logger.warning("add_field rejected: %s", exc)
            return SessionResult(ok=False, error=str(exc))
        return self._apply(
            "add_field",
            lambda: insert_node(self.nodes, node, target or DropTarget.root()),
            node_id=node.id,
        )

    def move_field(self, node_id: str, target: DropTarget) -> SessionResult:
        """Move a field (with its children) to a drop target."""
        return self._apply(
            "move_field", lambda: move_node(self.nodes, node_id, target), node_id=node_id
        )

    def resize_field(self, node_id: str) -> SessionResult:
        """Cycle a field to its next width class."""
        return self._apply(
            "resize_field", lambda: resize_node(self.nodes, node_id), node_id=node_id
        )

    def set_width(self, node_id: str, width: WidthClass | str) -> SessionResult:
        """Give a field a specific width class."""
        return self._apply(
            "set_width", lambda: set_width(self.nodes, node_id, width), node_id=node_id
        )

    def remove_field(self, node_id: str) -> SessionResult:
        """Delete a field and clear conditions that referenced it."""
        return self._apply(
            "remove_field", lambda: remove_node(self.nodes, node_id), node_id=node_id
        )

    # =========================================================================
    # Settings
    # =========================================================================

    def update_field(self, node_id: str, **changes: Any) -> SessionResult:
        """Edit settings: name, label, required, config, width, conditions.

        A width change re-packs the node's row like `set_width`.
        """
        width = changes.pop("width", None)

        def _update() -> list[FieldNode]:
            nodes = update_node(self.nodes, node_id, **changes) if changes else self.nodes
            if width is not None:
                nodes = set_width(nodes, node_id, width)
            return nodes

        return self._apply("update_field", _update, node_id=node_id)

    def set_condition(
        self,
        node_id: str,
        role: str,
        field: str | None,
        operator: Operator | str = Operator.EQUALS,
        value: Any = None,
    ) -> SessionResult:
        """Set or clear a visibility/readonly condition.

        The value is typed from the referenced field: booleans for boolean
        fields, numbers for number fields, one of the options for enumerated
        strings, text otherwise.

        Args:
            node_id: Node the condition belongs to.
            role: "visibility" or "readonly".
            field: Referenced structural name; None clears the condition.
            operator: Comparison operator.
            value: Raw literal, typically as typed by the user.
        """
        if role not in CONDITION_ROLES:
            return SessionResult(ok=False, error=f"Unknown condition role '{role}'")
        if field is None:
            return self.update_field(node_id, **{role: None})

        try:
            operator = Operator(operator)
            referenced = find_by_name(self.nodes, field)
            kind = referenced.kind.value if referenced is not None else None
            options = (
                referenced.config.enum
                if referenced is not None and isinstance(referenced.config, StringConfig)
                else None
            )
            typed = coerce_value(operator, value, kind, options)
        except ValueError as exc:
            logger.warning("set_condition rejected: %s", exc)
            return SessionResult(ok=False, error=str(exc), node_id=node_id)

        condition = Condition(field=field, operator=operator, value=typed)
        return self.update_field(node_id, **{role: condition})

    def edit_config_json(
        self, node_id: str, text: str, attribute: str | None = None
    ) -> SessionResult:
        """Replace a field's configuration (or one attribute of it) from JSON.

        Args:
            node_id: Node to edit.
            text: JSON text, e.g. a chart's data series.
            attribute: Config attribute the JSON replaces; None replaces the
                whole configuration object.

        Raises:
            ConfigEditRejected: If the JSON does not parse or does not
                validate for the node's kind. The previous configuration is
                kept.
        """
        node = find_by_path(self.nodes, node_id)
        if node is None:
            return SessionResult(ok=False, error=f"No node with id '{node_id}'")

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigEditRejected(f"Invalid JSON: {exc}", node_id=node_id) from exc

        model = config_model_for(node.kind)
        if attribute is None:
            if not isinstance(parsed, dict):
                raise ConfigEditRejected("Configuration must be a JSON object", node_id=node_id)
            data = parsed
        else:
            info = model.model_fields.get(attribute)
            if info is None:
                # Accept the camelCase spelling used in the documents.
                attribute = next(
                    (name for name, f in model.model_fields.items() if f.alias == attribute),
                    attribute,
                )
                info = model.model_fields.get(attribute)
            if info is None or attribute == "kind":
                raise ConfigEditRejected(
                    f"'{node.kind.value}' fields have no setting '{attribute}'",
                    node_id=node_id,
                )
            data = {**node.config.model_dump(), attribute: parsed}

        try:
            config = model.model_validate({**data, "kind": node.kind.value})
        except ValidationError as exc:
            raise ConfigEditRejected(
                f"Invalid {node.kind.value} configuration: {exc}", node_id=node_id
            ) from exc

        return self.update_field(node_id, config=config)

    # =========================================================================
    # Whole-form operations
    # =========================================================================

    def new_form(self) -> None:
        """Start over with an empty, unsaved form."""
        self.nodes = []
        self.name = ""
        self.description = ""
        self.form_id = None

    def load_template(self, template_id: str) -> SessionResult:
        """Replace the form with a fresh copy of a built-in template."""
        try:
            template = get_template(template_id)
        except KeyError as exc:
            logger.warning("load_template rejected: %s", exc.args[0])
            return SessionResult(ok=False, error=exc.args[0])
        self.nodes = template.build()
        self.name = template.name
        self.description = template.description
        self.form_id = None
        return SessionResult(ok=True)

    def load_documents(
        self,
        schema: Any,
        ui_schema: Any = None,
        name: str = "",
        description: str = "",
        form_id: str | None = None,
    ) -> SessionResult:
        """Replace the form with the tree parsed from a document pair."""
        self.nodes = parse_form(schema, ui_schema)
        self.name = name
        self.description = description
        self.form_id = form_id
        return SessionResult(ok=True)

    def load_stored(self, form: StoredForm) -> SessionResult:
        """Replace the form with a saved one."""
        return self.load_documents(
            form.schema,
            form.ui_schema,
            name=form.name,
            description=form.description,
            form_id=form.id,
        )

    def compile(self) -> CompiledForm:
        """Compile the current tree."""
        return compile_form(self.nodes)

    def to_stored(self) -> StoredForm:
        """Package the current form for the store.

        The first call assigns the session a form identity; later calls
        reuse it so saving again updates the same stored form.

        Raises:
            ValueError: If the form has no name.
        """
        if not self.name.strip():
            raise ValueError("Please enter a form name")

        compiled = self.compile()
        form = StoredForm.create(
            name=self.name,
            description=self.description,
            schema=compiled.schema,
            ui_schema=compiled.ui_schema,
        )
        if self.form_id is not None:
            form.id = self.form_id
        self.form_id = form.id
        return form


__all__ = [
    "CONDITION_ROLES",
    "ConfigEditRejected",
    "SessionResult",
    "FormSession",
]
