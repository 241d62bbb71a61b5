"""Form store - persistence for saved document pairs.

Available backends:
- SQLiteFormStore: File-based SQLite database
"""

from .models import StoredForm
from .protocol import FormStore
from .sqlite import SQLiteFormStore

__all__ = [
    "StoredForm",
    "FormStore",
    "SQLiteFormStore",
]
