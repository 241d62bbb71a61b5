"""formgrid: form builder core for 12-column JSON Schema forms."""

from formgrid.compiler import CompiledForm, compile_form
from formgrid.layout import DropTarget
from formgrid.parser import parse_form
from formgrid.session import FormSession
from formgrid.tree import FieldKind, FieldNode, WidthClass
from formgrid.validation import ValidationError, is_valid, validate_tree

__all__ = [
    # Tree
    "FieldNode",
    "FieldKind",
    "WidthClass",
    "DropTarget",
    # Documents
    "compile_form",
    "CompiledForm",
    "parse_form",
    # Session
    "FormSession",
    # Validation
    "validate_tree",
    "is_valid",
    "ValidationError",
]
