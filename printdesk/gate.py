"""
Upload Gate - Content-Type Allow-List for Incoming Files

Every file on a request is checked before anything is written.
One disallowed file rejects the whole request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from printdesk.errors import ValidationError
from printdesk.schema import ALLOWED_MIME_TYPES, MAX_DOCUMENTS_PER_REQUEST

logger = logging.getLogger(__name__)

DISALLOWED_TYPE_MESSAGE = "Only PDF, PNG, JPG files are allowed"


@dataclass(frozen=True)
class IncomingFile:
    """A buffered upload as received from the client."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_blank(self) -> bool:
        """Empty file input submitted by a browser form."""
        return not self.filename and not self.content


def drop_blank_files(files: Optional[Iterable[IncomingFile]]) -> list[IncomingFile]:
    """Remove empty file parts that browsers send for unused inputs."""
    return [f for f in (files or []) if not f.is_blank]


class UploadGate:
    """Validates declared content types against an allow-list."""

    def __init__(self, allowed_types: Sequence[str] = ALLOWED_MIME_TYPES):
        self._allowed = frozenset(t.lower() for t in allowed_types)

    @property
    def allowed_types(self) -> frozenset[str]:
        return self._allowed

    def is_allowed(self, content_type: Optional[str]) -> bool:
        """Check a single declared content type."""
        if not content_type:
            return False
        # Ignore parameters such as "; charset=..."
        base = content_type.split(";", 1)[0].strip().lower()
        return base in self._allowed

    def admit(
        self,
        files: Sequence[IncomingFile],
        limit: int = MAX_DOCUMENTS_PER_REQUEST,
        require_one: bool = False,
    ) -> None:
        """
        Check a batch of files.

        Args:
            files: Files on the request (blank parts already dropped)
            limit: Maximum number of files accepted
            require_one: Reject an empty batch

        Raises:
            ValidationError: On the first failing condition
        """
        if require_one and not files:
            raise ValidationError("Please upload at least one document")

        if len(files) > limit:
            raise ValidationError(f"You can upload at most {limit} document(s) at once")

        for upload in files:
            if not self.is_allowed(upload.content_type):
                logger.warning(
                    "Rejected upload %r with content type %r",
                    upload.filename,
                    upload.content_type,
                )
                raise ValidationError(DISALLOWED_TYPE_MESSAGE)
