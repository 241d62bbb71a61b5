"""Environment configuration for formgrid.

Example:
    >>> from formgrid.config import EnvVar, get_environment, get_store_path
    >>>
    >>> level = get_environment(EnvVar.FORMGRID_LOG_LEVEL)  # "INFO"
    >>> store = get_store_path()  # Path

Categories:
    store: Location of the SQLite form store
    output: CLI logging and JSON formatting
"""

from .lib import (
    ROOT_MARKERS,
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_json_indent,
    get_log_level,
    get_store_path,
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    "ROOT_MARKERS",
    # Main interface
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
    # Derived settings
    "get_store_path",
    "get_log_level",
    "get_json_indent",
]
