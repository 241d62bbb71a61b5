"""Storage protocol for saved forms.

Defines the interface that all form store backends must implement.
"""

from typing import Protocol

from .models import StoredForm


class FormStore(Protocol):
    """Protocol defining the key-value interface for saved forms.

    Backends store the documents as given and never interpret them.
    """

    def initialize(self) -> None:
        """Initialize storage (create tables, indexes, etc.)."""
        ...

    def close(self) -> None:
        """Close storage connections and clean up resources."""
        ...

    def save(self, form: StoredForm) -> StoredForm:
        """Insert a form, or replace the stored copy with the same ID.

        Args:
            form: Form to save; its updated_at is refreshed.

        Returns:
            The saved form.
        """
        ...

    def get(self, form_id: str) -> StoredForm | None:
        """Get a form by ID.

        Args:
            form_id: Form identifier.

        Returns:
            StoredForm if found, None otherwise.
        """
        ...

    def list_forms(self, limit: int = 50, offset: int = 0) -> list[StoredForm]:
        """List forms, most recently saved first.

        Args:
            limit: Maximum forms to return.
            offset: Number of forms to skip.

        Returns:
            List of forms.
        """
        ...

    def delete(self, form_id: str) -> bool:
        """Delete a form.

        Args:
            form_id: Form identifier.

        Returns:
            True if deleted, False if not found.
        """
        ...
