"""Data models for the form store."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


@dataclass
class StoredForm:
    """A saved form: its document pair plus metadata.

    The store treats both documents as opaque JSON values.

    Attributes:
        id: Unique form identifier.
        name: User-facing form name.
        description: Optional description.
        schema: Data-shape document.
        ui_schema: Presentation document.
        created_at: Creation timestamp.
        updated_at: Last save timestamp.
    """

    id: str
    name: str
    schema: dict[str, Any]
    ui_schema: dict[str, Any]
    description: str = ""

    # Timestamps
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        name: str,
        schema: dict[str, Any],
        ui_schema: dict[str, Any],
        description: str = "",
    ) -> "StoredForm":
        """Factory method to create a new form with generated ID."""
        return cls(
            id=str(uuid4()),
            name=name,
            description=description,
            schema=schema,
            ui_schema=ui_schema,
        )

    def touch(self) -> None:
        """Update updated_at timestamp."""
        self.updated_at = datetime.now(UTC)
