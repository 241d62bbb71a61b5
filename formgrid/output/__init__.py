"""Output formatting for form visualization."""

from .lib import FormOutput, OutputGenerator, format_condition, format_field_tree

__all__ = [
    "format_condition",
    "format_field_tree",
    "FormOutput",
    "OutputGenerator",
]
