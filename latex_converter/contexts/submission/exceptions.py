"""Exceptions raised by submission repositories."""

from typing import Optional


class RecordNotFoundError(LookupError):
    """Raised when a submission or submission file id does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class PersistenceError(Exception):
    """
    Raised when the repository fails to insert a record.

    Attributes:
        message: Error description
        original_error: The underlying driver error, if any
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error

        parts = [message]
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))
