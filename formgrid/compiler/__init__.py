"""Compiler - field tree to data-shape and presentation documents."""

from .lib import (
    TYPE_TAGS,
    CompilationWarning,
    CompiledForm,
    SchemaCompiler,
    WarningKind,
    compile_form,
    type_tag,
)

__all__ = [
    "TYPE_TAGS",
    "WarningKind",
    "CompilationWarning",
    "CompiledForm",
    "SchemaCompiler",
    "compile_form",
    "type_tag",
]
