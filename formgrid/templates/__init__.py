"""Built-in form templates."""

from .lib import TEMPLATES, FormTemplate, get_template, list_templates

__all__ = [
    "FormTemplate",
    "TEMPLATES",
    "list_templates",
    "get_template",
]
