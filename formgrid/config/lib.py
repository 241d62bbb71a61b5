"""Environment configuration for formgrid.

Every setting is an `EnvVar` member carrying its name, default, type and
category. Values resolve in one order everywhere: an explicit override, then
the process environment, then the default. Raw environment strings are
converted with pydantic in lax mode; a value that does not convert resolves
to the default rather than failing the command that asked for it.

Example:
    >>> from formgrid.config import EnvVar, get_environment
    >>>
    >>> get_environment(EnvVar.FORMGRID_JSON_INDENT)             # 2, or $FORMGRID_JSON_INDENT
    >>> get_environment(EnvVar.FORMGRID_JSON_INDENT, override=4)  # 4
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import cache
from pathlib import Path
from typing import Any, overload

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

# Files that mark the project root when looking for the default store.
ROOT_MARKERS = ("pyproject.toml", ".gitignore")


# =============================================================================
# Variables
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Description of one environment variable.

    Attributes:
        name: Variable name, e.g. "FORMGRID_LOG_LEVEL".
        default: Value used when the variable is unset or unusable.
        var_type: Type the raw string converts to.
        description: One-line help text.
        category: Group used by `list_environment_variables`.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """Settings read from the environment.

    Categories:
        - store: where saved forms live
        - output: CLI logging and JSON formatting
    """

    FORMGRID_STORE_PATH = EnvConfig(
        name="FORMGRID_STORE_PATH",
        default=None,  # <repo root>/.formgrid/forms.db
        var_type=Path,
        description="SQLite database file holding saved forms",
        category="store",
    )
    FORMGRID_LOG_LEVEL = EnvConfig(
        name="FORMGRID_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR)",
        category="output",
    )
    FORMGRID_JSON_INDENT = EnvConfig(
        name="FORMGRID_JSON_INDENT",
        default=2,
        var_type=int,
        description="Indentation used when the CLI prints JSON documents",
        category="output",
    )


# =============================================================================
# Resolution
# =============================================================================


@cache
def _adapter(var_type: type) -> TypeAdapter:
    return TypeAdapter(var_type)


def _convert(config: EnvConfig, raw: str) -> Any:
    try:
        return _adapter(config.var_type).validate_python(raw)
    except ValidationError:
        logger.warning(
            "Ignoring %s=%r: not a valid %s, using %r",
            config.name,
            raw,
            config.var_type.__name__,
            config.default,
        )
        return config.default


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a setting: override, then environment, then default.

    Args:
        env_var: The setting to read.
        override: Value that wins over everything else when not None.

    Returns:
        The value, converted to the setting's type.
    """
    if override is not None:
        return override

    config: EnvConfig = env_var.value
    raw = os.environ.get(config.name)
    if raw is None or raw == "":
        return config.default
    return _convert(config, raw)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Metadata for a setting."""
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """Settings in declaration order, optionally limited to one category."""
    return [var for var in EnvVar if category is None or var.value.category == category]


# =============================================================================
# Derived settings
# =============================================================================


def _find_repo_root(start_path: Path | None = None) -> Path:
    """Walk up from `start_path` (default: cwd) to the first root marker.

    Raises:
        RuntimeError: If no directory up to the filesystem root has one.
    """
    start = (start_path or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in ROOT_MARKERS):
            return directory
    raise RuntimeError(
        f"No {' or '.join(ROOT_MARKERS)} found in {start} or its parents; "
        f"set FORMGRID_STORE_PATH"
    )


def get_store_path(override: Path | str | None = None) -> Path:
    """SQLite file for saved forms.

    Resolution: override > FORMGRID_STORE_PATH > <repo root>/.formgrid/forms.db
    """
    path = get_environment(EnvVar.FORMGRID_STORE_PATH, override=override)
    if path is not None:
        return Path(path)
    return _find_repo_root() / ".formgrid" / "forms.db"


def get_log_level(override: str | None = None) -> str:
    """Log level name, upper-cased."""
    return str(get_environment(EnvVar.FORMGRID_LOG_LEVEL, override=override)).upper()


def get_json_indent(override: int | None = None) -> int:
    """Indentation for JSON printed by the CLI."""
    return get_environment(EnvVar.FORMGRID_JSON_INDENT, override=override)


__all__ = [
    "EnvConfig",
    "EnvVar",
    "ROOT_MARKERS",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
    "get_store_path",
    "get_log_level",
    "get_json_indent",
]
