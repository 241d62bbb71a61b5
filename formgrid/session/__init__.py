"""Form builder session - the single owner of the form being edited.

Example usage:
    >>> from formgrid.session import FormSession
    >>> session = FormSession(name="Contact")
    >>> session.add_field("string")
    >>> compiled = session.compile()
"""

from .drag import (
    DragPayload,
    DragSession,
    DragState,
    DragStateError,
    ExistingFieldPayload,
    NewFieldPayload,
)
from .lib import CONDITION_ROLES, ConfigEditRejected, FormSession, SessionResult

__all__ = [
    # Session
    "FormSession",
    "SessionResult",
    "ConfigEditRejected",
    "CONDITION_ROLES",
    # Drag and drop
    "DragState",
    "DragSession",
    "DragStateError",
    "DragPayload",
    "NewFieldPayload",
    "ExistingFieldPayload",
]
