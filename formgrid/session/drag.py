"""Drag-and-drop state machine.

A drag is a small immutable value owned by the UI layer:

    idle -> dragging -> hovering -> dropped
                 \\         |
                  +--------+-> cancelled

Only the terminal drop reaches the field tree (as one insert or move);
hovering and cancelling never touch it.
"""

from dataclasses import dataclass, replace
from enum import Enum

from formgrid.layout import DropTarget
from formgrid.tree import FieldKind, WidthClass


class DragState(str, Enum):
    """Phase of a drag gesture."""

    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class NewFieldPayload:
    """A palette entry being dragged onto the form.

    Attributes:
        kind: Field kind to create.
        width: Width class of the created node.
    """

    kind: FieldKind
    width: WidthClass = WidthClass.FULL


@dataclass(frozen=True)
class ExistingFieldPayload:
    """A node already on the form being dragged elsewhere.

    Attributes:
        node_id: Identity of the dragged node.
    """

    node_id: str


DragPayload = NewFieldPayload | ExistingFieldPayload


class DragStateError(Exception):
    """Raised when a transition is not allowed from the current state."""


_ACTIVE = (DragState.DRAGGING, DragState.HOVERING)


@dataclass(frozen=True)
class DragSession:
    """Current drag gesture.

    Attributes:
        state: Phase of the gesture.
        payload: What is being dragged (None while idle).
        target: Highlighted drop zone while hovering, and the final target
            once dropped.
    """

    state: DragState = DragState.IDLE
    payload: DragPayload | None = None
    target: DropTarget | None = None

    @property
    def is_active(self) -> bool:
        """Whether a drag is in progress."""
        return self.state in _ACTIVE

    def begin(self, payload: DragPayload) -> "DragSession":
        """Start dragging; allowed whenever no drag is in progress."""
        if self.is_active:
            raise DragStateError(f"Cannot begin a drag while {self.state.value}")
        return DragSession(state=DragState.DRAGGING, payload=payload)

    def hover(self, target: DropTarget) -> "DragSession":
        """Highlight a drop zone under the pointer."""
        self._require_active("hover")
        return replace(self, state=DragState.HOVERING, target=target)

    def leave(self) -> "DragSession":
        """Pointer left the highlighted drop zone."""
        self._require_active("leave")
        return replace(self, state=DragState.DRAGGING, target=None)

    def drop(self) -> "DragSession":
        """Release over the highlighted drop zone."""
        if self.state != DragState.HOVERING:
            raise DragStateError(f"Cannot drop while {self.state.value}")
        return replace(self, state=DragState.DROPPED)

    def cancel(self) -> "DragSession":
        """Abandon the drag; the form is left as it was."""
        self._require_active("cancel")
        return replace(self, state=DragState.CANCELLED, target=None)

    def _require_active(self, action: str) -> None:
        if not self.is_active:
            raise DragStateError(f"Cannot {action} while {self.state.value}")


__all__ = [
    "DragState",
    "NewFieldPayload",
    "ExistingFieldPayload",
    "DragPayload",
    "DragStateError",
    "DragSession",
]
