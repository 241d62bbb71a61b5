"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- An isolated form store location per test
- Common field trees shared by unit and integration tests
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from formgrid.condition import Condition, Operator
from formgrid.layout import assign_rows
from formgrid.store import SQLiteFormStore
from formgrid.tree import FieldKind, FieldNode

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_store_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point FORMGRID_STORE_PATH at a per-test SQLite file."""
    path = tmp_path / "forms.db"
    monkeypatch.setenv("FORMGRID_STORE_PATH", str(path))
    return path


@pytest.fixture
def form_store(isolated_store_path: Path):
    """Initialized SQLite form store, closed after the test."""
    store = SQLiteFormStore(isolated_store_path)
    store.initialize()
    yield store
    store.close()


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def flat_form() -> list[FieldNode]:
    """A flat driving-licence form with one conditional field.

    Returns:
        name (half) and age (half) sharing row 0, license shown when
        age > 18, notes (full) on the last row.
    """
    return assign_rows(
        [
            FieldNode(
                id="name",
                name="name",
                label="Name",
                kind=FieldKind.STRING,
                width="half",
                required=True,
            ),
            FieldNode(
                id="age",
                name="age",
                label="Age",
                kind=FieldKind.NUMBER,
                width="half",
                config={"minimum": 0},
            ),
            FieldNode(
                id="license",
                name="license",
                label="Has a licence",
                kind=FieldKind.BOOLEAN,
                visibility=Condition(field="age", operator=Operator.GREATER_THAN, value=18),
            ),
            FieldNode(id="notes", name="notes", label="Notes", kind=FieldKind.STRING),
        ]
    )


@pytest.fixture
def nested_form() -> list[FieldNode]:
    """A form with a section holding two quarter-width children and a panel.

    Returns:
        Root list: section(box) [street, city], panel [summary], footer.
    """
    return assign_rows(
        [
            FieldNode(
                id="box",
                name="address",
                label="Address",
                kind=FieldKind.CONTAINER,
                config={"variant": "section"},
                children=[
                    FieldNode(id="street", name="street", kind="string", width="quarter"),
                    FieldNode(id="city", name="city", kind="string", width="quarter"),
                ],
            ),
            FieldNode(
                id="panel",
                name="extras",
                kind=FieldKind.PANEL,
                children=[FieldNode(id="summary", name="summary", kind=FieldKind.RICH_TEXT)],
            ),
            FieldNode(id="footer", name="footer", kind=FieldKind.DISPLAY),
        ]
    )
