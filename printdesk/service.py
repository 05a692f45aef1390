"""
Intake Service - Print Request Workflow

Creates requests, edits their documents, confirms them and serves
their files. Stores are injected so the service can run against any
RecordStore/BlobStore pair.

Read-modify-write sequences on one record are serialised with a
per-record lock (single process only).
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence

from printdesk.errors import DocumentNotFoundError, NotFoundError, ValidationError
from printdesk.gate import IncomingFile, UploadGate, drop_blank_files
from printdesk.repository import RecordStore
from printdesk.schema import MAX_DOCUMENTS_PER_REQUEST, DocumentReference, IntakeRecord
from printdesk.storage import BlobStore
from printdesk.validation import build_record, validate_intake_data

logger = logging.getLogger(__name__)


class IntakeService:
    """Application logic for hostel print requests."""

    def __init__(
        self,
        records: RecordStore,
        blobs: BlobStore,
        gate: Optional[UploadGate] = None,
        require_documents: bool = True,
        strict_phone: bool = True,
        gate_replacements: bool = True,
    ):
        """
        Args:
            records: Record store for intake records
            blobs: Blob store for uploaded files
            gate: Content-type gate (default allow-list if omitted)
            require_documents: Reject empty submissions and hide empty records
            strict_phone: Require 10-digit phone numbers
            gate_replacements: Type-check the replace-document upload
        """
        self.records = records
        self.blobs = blobs
        self.gate = gate or UploadGate()
        self.require_documents = require_documents
        self.strict_phone = strict_phone
        self.gate_replacements = gate_replacements
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _record_lock(self, record_id: str) -> AsyncIterator[None]:
        # Entries live only while some caller holds or waits on the lock
        lock = self._locks.setdefault(record_id, asyncio.Lock())
        self._lock_users[record_id] = self._lock_users.get(record_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[record_id] -= 1
            if self._lock_users[record_id] == 0:
                del self._lock_users[record_id]
                del self._locks[record_id]

    async def _store(self, upload: IncomingFile) -> DocumentReference:
        blob = await self.blobs.put(upload.content, upload.filename, upload.content_type)
        return DocumentReference.create(
            locator=blob.locator,
            filename=blob.filename,
            originalname=upload.filename,
            mimetype=upload.content_type,
            size_bytes=blob.size_bytes,
        )

    async def _fetch(self, record_id: str) -> IntakeRecord:
        record = await self.records.get(record_id)
        if record is None:
            raise NotFoundError(f"Record {record_id} not found")
        return record

    # =========================================================================
    # Record Lifecycle
    # =========================================================================

    async def create_record(
        self,
        form: dict[str, Any],
        files: Optional[Sequence[IncomingFile]] = None,
    ) -> IntakeRecord:
        """
        Create a new unconfirmed request.

        Fields and files are fully validated before any blob or record
        is written.

        Raises:
            ValidationError: Missing/invalid fields or disallowed files
        """
        validation = validate_intake_data(form, strict_phone=self.strict_phone)
        if validation.is_blocked:
            logger.warning("Submission rejected: %s", ", ".join(validation.errors))
            raise ValidationError(validation.errors)

        uploads = drop_blank_files(files)
        self.gate.admit(
            uploads,
            limit=MAX_DOCUMENTS_PER_REQUEST,
            require_one=self.require_documents,
        )

        record = build_record(form)
        for upload in uploads:
            record.documents.append(await self._store(upload))

        created = await self.records.create(record)
        logger.info(
            "Created request %s for %s (%d documents)",
            created.record_id,
            created.name,
            created.document_count,
        )
        return created

    async def get_record(self, record_id: str) -> IntakeRecord:
        """Fetch a record. Raises NotFoundError if absent."""
        return await self._fetch(record_id)

    async def get_viewable_record(self, record_id: str) -> IntakeRecord:
        """Fetch a record for the detail page."""
        record = await self._fetch(record_id)
        if self.require_documents and not record.has_documents:
            raise NotFoundError(f"Record {record_id} has no documents")
        return record

    async def confirm_record(self, record_id: str) -> IntakeRecord:
        """
        Mark a request as confirmed.

        Already-confirmed requests are returned untouched (no write).
        """
        async with self._record_lock(record_id):
            record = await self._fetch(record_id)
            if record.is_confirmed:
                return record

            record.is_confirmed = True
            confirmed = await self.records.update(record)

        logger.info("Confirmed request %s", record_id)
        return confirmed

    async def list_records(self) -> list[IntakeRecord]:
        """All requests, newest first."""
        return await self.records.list_all()

    async def delete_record(self, record_id: str) -> bool:
        """Delete a request. Missing IDs are not an error."""
        async with self._record_lock(record_id):
            deleted = await self.records.delete(record_id)

        if deleted:
            logger.info("Deleted request %s", record_id)
        return deleted

    # =========================================================================
    # Document Edits
    # =========================================================================

    def _resolve(self, record: IntakeRecord, doc_ref: str) -> int:
        index = record.resolve_document_index(doc_ref)
        if index is None:
            raise DocumentNotFoundError(f"Document {doc_ref} not found on {record.record_id}")
        return index

    async def replace_document(
        self,
        record_id: str,
        doc_ref: str,
        upload: Optional[IncomingFile],
    ) -> IntakeRecord:
        """
        Overwrite one document in place, keeping its position.

        Raises:
            NotFoundError: Record or document reference missing
            ValidationError: No file, or (when gated) a disallowed type
        """
        uploads = drop_blank_files([upload] if upload else [])
        if self.gate_replacements:
            self.gate.admit(uploads, limit=1, require_one=True)
        elif not uploads:
            raise ValidationError("Please choose a replacement document")

        async with self._record_lock(record_id):
            record = await self._fetch(record_id)
            index = self._resolve(record, doc_ref)
            replacement = await self._store(uploads[0])
            record.documents[index] = replacement
            updated = await self.records.update(record)

        logger.info("Replaced document %d on request %s", index, record_id)
        return updated

    async def delete_document(self, record_id: str, doc_ref: str) -> IntakeRecord:
        """Remove one document from a request."""
        async with self._record_lock(record_id):
            record = await self._fetch(record_id)
            index = self._resolve(record, doc_ref)
            del record.documents[index]
            updated = await self.records.update(record)

        logger.info("Removed document %d from request %s", index, record_id)
        return updated

    async def open_document(self, record_id: str, key: str) -> tuple[DocumentReference, bytes]:
        """
        Fetch a document's bytes for download.

        Args:
            record_id: Owning record
            key: Document ID or stored filename

        Returns:
            Tuple of (reference, content)
        """
        record = await self._fetch(record_id)
        doc = record.find_document(key)
        if doc is None:
            raise DocumentNotFoundError(f"Document {key} not found on {record_id}")
        content = await self.blobs.get(doc.filename)
        return doc, content

    async def dump_records(self) -> list[dict]:
        """Every record in wire format."""
        return [record.to_dict() for record in await self.records.list_all()]
