"""
Hostel Print Desk - Printing Request Intake

Requesters submit their details and documents, review them, and
confirm to receive a reference ID. An admin lists, edits and deletes
requests.
"""

from printdesk.errors import (
    IntakeError,
    ValidationError,
    NotFoundError,
    DocumentNotFoundError,
    PersistenceError,
    BlobStoreError,
)
from printdesk.schema import (
    IntakeRecord,
    DocumentReference,
    RequestStatus,
    ALLOWED_MIME_TYPES,
    MAX_DOCUMENTS_PER_REQUEST,
    REQUIRED_INTAKE_FIELDS,
)
from printdesk.validation import (
    IntakeValidationResult,
    validate_intake_data,
)
from printdesk.gate import (
    IncomingFile,
    UploadGate,
)
from printdesk.storage import (
    BlobStore,
    StoredBlob,
    LocalBlobStore,
    S3BlobStore,
)
from printdesk.repository import (
    RecordStore,
    JsonRecordStore,
    MongoRecordStore,
)
from printdesk.service import IntakeService

__all__ = [
    "IntakeError",
    "ValidationError",
    "NotFoundError",
    "DocumentNotFoundError",
    "PersistenceError",
    "BlobStoreError",
    "IntakeRecord",
    "DocumentReference",
    "RequestStatus",
    "ALLOWED_MIME_TYPES",
    "MAX_DOCUMENTS_PER_REQUEST",
    "REQUIRED_INTAKE_FIELDS",
    "IntakeValidationResult",
    "validate_intake_data",
    "IncomingFile",
    "UploadGate",
    "BlobStore",
    "StoredBlob",
    "LocalBlobStore",
    "S3BlobStore",
    "RecordStore",
    "JsonRecordStore",
    "MongoRecordStore",
    "IntakeService",
]
