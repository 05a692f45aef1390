"""
Print Request Schema - Intake Records and Document References

Defines the single persisted entity (IntakeRecord) and the documents
embedded in it. Wire/storage keys use the camelCase names of the
original form fields (hostelNo, isConfirmed, createdAt, ...).
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Final, Optional


# =============================================================================
# Enums
# =============================================================================


class RequestStatus(Enum):
    """Print status of a request. Stored and displayed, never transitioned."""

    PENDING = "Pending"
    PRINTED = "Printed"


# =============================================================================
# Constants
# =============================================================================

# Content types accepted by the upload gate
ALLOWED_MIME_TYPES: Final[tuple[str, ...]] = (
    "application/pdf",
    "image/png",
    "image/jpeg",
)

# Maximum files on a single submission
MAX_DOCUMENTS_PER_REQUEST: Final[int] = 10

# Phone format enforced in strict mode
PHONE_REGEX: Final = re.compile(r"^[0-9]{10}$")

# Required form fields - submission rejected if any missing
REQUIRED_INTAKE_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "phone",
    "hostelNo",
    "roomNo",
)


# =============================================================================
# Helpers
# =============================================================================


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def generate_document_id() -> str:
    """Generate a stable document ID."""
    return f"DOC-{uuid.uuid4().hex[:12].upper()}"


def validate_phone(phone: str) -> bool:
    """Check phone is exactly 10 decimal digits."""
    return bool(phone) and bool(PHONE_REGEX.match(phone))


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# =============================================================================
# Document Reference
# =============================================================================


@dataclass(frozen=True)
class DocumentReference:
    """
    Reference to one uploaded file embedded in an intake record.

    The bytes live in the blob store; this holds where to find them
    and how to name them on download.
    """

    document_id: str
    locator: str  # Path or URL the blob is served from
    filename: str  # Stored blob name (file name or object key)
    originalname: str
    mimetype: str
    size_bytes: int = 0

    @classmethod
    def create(
        cls,
        locator: str,
        filename: str,
        originalname: str,
        mimetype: str,
        size_bytes: int = 0,
    ) -> "DocumentReference":
        """Create a new reference with a fresh document ID."""
        return cls(
            document_id=generate_document_id(),
            locator=locator,
            filename=filename,
            originalname=originalname,
            mimetype=mimetype,
            size_bytes=size_bytes,
        )

    def matches(self, key: str) -> bool:
        """Check whether a download key names this document."""
        if not key:
            return False
        return key in (self.document_id, self.filename) or self.filename.rsplit("/", 1)[-1] == key

    def to_dict(self) -> dict:
        """Convert to dictionary for serialisation."""
        return {
            "documentId": self.document_id,
            "locator": self.locator,
            "filename": self.filename,
            "originalname": self.originalname,
            "mimetype": self.mimetype,
            "size": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentReference":
        """Create reference from dictionary."""
        return cls(
            document_id=data.get("documentId") or generate_document_id(),
            locator=data["locator"],
            filename=data.get("filename", ""),
            originalname=data["originalname"],
            mimetype=data["mimetype"],
            size_bytes=data.get("size", 0),
        )


# =============================================================================
# Intake Record
# =============================================================================


@dataclass
class IntakeRecord:
    """
    One printing request: who asked, where they live, and what to print.

    record_id and the timestamps are assigned by the record store.
    is_confirmed only ever moves from False to True.
    """

    name: str
    phone: str
    hostel_no: str
    room_no: str
    documents: list[DocumentReference] = field(default_factory=list)
    is_confirmed: bool = False
    status: RequestStatus = RequestStatus.PENDING

    # === METADATA (set by record store) ===
    record_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def document_count(self) -> int:
        return len(self.documents)

    @property
    def has_documents(self) -> bool:
        return bool(self.documents)

    def find_document(self, key: str) -> Optional[DocumentReference]:
        """Find a document by ID or stored filename."""
        for doc in self.documents:
            if doc.matches(key):
                return doc
        return None

    def resolve_document_index(self, doc_ref: str) -> Optional[int]:
        """
        Resolve a document reference to its position.

        Stable document IDs are tried first; a decimal positional index
        is accepted when no ID matches.

        Returns:
            Index into documents, or None if nothing matches
        """
        for index, doc in enumerate(self.documents):
            if doc.document_id == doc_ref:
                return index

        if doc_ref.isascii() and doc_ref.isdigit():
            index = int(doc_ref)
            if index < len(self.documents):
                return index
        return None

    def copy(self) -> "IntakeRecord":
        """Shallow copy with an independent documents list."""
        return replace(self, documents=list(self.documents))

    def to_dict(self) -> dict:
        """Convert record to dictionary for serialisation."""
        return {
            "id": self.record_id,
            "name": self.name,
            "phone": self.phone,
            "hostelNo": self.hostel_no,
            "roomNo": self.room_no,
            "documents": [doc.to_dict() for doc in self.documents],
            "isConfirmed": self.is_confirmed,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IntakeRecord":
        """Create record from dictionary."""
        status = data.get("status") or RequestStatus.PENDING.value
        if isinstance(status, str):
            status = RequestStatus(status)

        return cls(
            name=data["name"],
            phone=data["phone"],
            hostel_no=data["hostelNo"],
            room_no=data["roomNo"],
            documents=[DocumentReference.from_dict(d) for d in data.get("documents", [])],
            is_confirmed=bool(data.get("isConfirmed", False)),
            status=status,
            record_id=data.get("id"),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )
