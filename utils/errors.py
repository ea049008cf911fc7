"""
utils/errors.py
---------------
Error taxonomy shared by every layer.

The presentation layer maps each class to an HTTP status; services and
repositories only ever raise these (or let them propagate).
"""

from typing import Optional


class FinStatError(Exception):
    """Base class for every application error."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinStatError):
    """A required input is missing or malformed."""

    status_code = 400


class NotFoundError(FinStatError):
    """A referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class ExternalServiceError(FinStatError):
    """The brokerage API (or another remote service) failed or is unreachable."""

    status_code = 500


class PersistenceError(FinStatError):
    """A store read or write failed."""

    status_code = 500


class ParseError(FinStatError):
    """A statement row could not be parsed. `row_index` is zero-based."""

    status_code = 400

    def __init__(self, row_index: Optional[int], message: str):
        if row_index is None:
            super().__init__(message)
        else:
            super().__init__(f"Row {row_index + 1}: {message}")
        self.row_index = row_index
