"""
Print Desk Errors - Failure Taxonomy for the Intake Workflow

Routes translate these into user-facing behaviour:
- ValidationError: shown on the error page
- NotFoundError: swallowed, the user is redirected to a safe page
- PersistenceError: logged, then redirect or generic failure page
"""

from __future__ import annotations

from typing import Iterable, Union


class IntakeError(Exception):
    """Base class for all print desk errors."""


class ValidationError(IntakeError):
    """Submitted fields or files were rejected."""

    def __init__(self, errors: Union[str, Iterable[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: tuple[str, ...] = tuple(errors)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """All error messages joined for display."""
        return "; ".join(self.errors) or "Invalid submission"


class NotFoundError(IntakeError):
    """A record, document or blob does not exist."""


class PersistenceError(IntakeError):
    """The record store could not complete an operation."""


class BlobStoreError(PersistenceError):
    """The blob store could not store or return a file."""


class DocumentNotFoundError(NotFoundError):
    """The record exists but the referenced document does not."""
