"""Parser - data-shape and presentation documents back to a field tree."""

from .lib import KIND_BY_TYPE, KIND_HINTS, SchemaParser, infer_kind, parse_form

__all__ = [
    "KIND_BY_TYPE",
    "KIND_HINTS",
    "SchemaParser",
    "infer_kind",
    "parse_form",
]
