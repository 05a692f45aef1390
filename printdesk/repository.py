"""
Record Repository - Persistence for Intake Records

Two interchangeable record stores:
- JsonRecordStore: in-memory with JSON file persistence (development/default)
- MongoRecordStore: MongoDB collection via motor (when MONGO_URI is set)

Stores own IDs and timestamps; callers own mutation policy.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol

import aiofiles
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from printdesk.errors import PersistenceError
from printdesk.schema import IntakeRecord, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class RecordStore(Protocol):
    """Protocol for intake record persistence."""

    async def ping(self) -> None:
        """Raise PersistenceError if the store is unreachable."""
        ...

    async def create(self, record: IntakeRecord) -> IntakeRecord:
        ...

    async def get(self, record_id: str) -> Optional[IntakeRecord]:
        ...

    async def list_all(self) -> list[IntakeRecord]:
        """All records, newest first."""
        ...

    async def update(self, record: IntakeRecord) -> IntakeRecord:
        ...

    async def delete(self, record_id: str) -> bool:
        ...


# =============================================================================
# JSON File Store
# =============================================================================


class JsonRecordStore:
    """
    Record store backed by a dict, optionally persisted to a JSON file.

    Returned records are copies; mutating them has no effect until
    update() is called.
    """

    def __init__(self, persist_path: Optional[str] = None, clock: Clock = utc_now):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
            clock: Source of createdAt/updatedAt timestamps
        """
        self._records: dict[str, IntakeRecord] = {}
        self._persist_path = Path(persist_path) if persist_path else None
        self._clock = clock

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    async def _commit(self, records: dict[str, IntakeRecord]) -> None:
        """
        Persist a new record set, then make it live.

        The in-memory records are only replaced once the file write
        succeeds.
        """
        if self._persist_path:
            data = {
                "records": [record.to_dict() for record in records.values()],
                "saved_at": self._clock().isoformat(),
            }
            try:
                self._persist_path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(self._persist_path, "w") as f:
                    await f.write(json.dumps(data, indent=2))
            except OSError as e:
                raise PersistenceError(f"Could not write {self._persist_path}: {e}") from e

        self._records = records

    def _load_from_file(self) -> None:
        """Load data from file."""
        try:
            data = json.loads(self._persist_path.read_text())
            for item in data.get("records", []):
                record = IntakeRecord.from_dict(item)
                self._records[record.record_id] = record
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
            # Start fresh rather than refuse to boot on a corrupt file
            logger.warning("Could not load record data from %s: %s", self._persist_path, e)

    async def ping(self) -> None:
        if self._persist_path and self._persist_path.exists() and self._persist_path.is_dir():
            raise PersistenceError(f"{self._persist_path} is a directory")

    async def create(self, record: IntakeRecord) -> IntakeRecord:
        stored = record.copy()
        stored.record_id = uuid.uuid4().hex
        stored.created_at = stored.updated_at = self._clock()
        await self._commit({**self._records, stored.record_id: stored})
        return stored.copy()

    async def get(self, record_id: str) -> Optional[IntakeRecord]:
        record = self._records.get(record_id)
        return record.copy() if record else None

    async def list_all(self) -> list[IntakeRecord]:
        # Reversed first so equal timestamps still list newest insert first
        newest_first = sorted(
            reversed(list(self._records.values())),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return [r.copy() for r in newest_first]

    async def update(self, record: IntakeRecord) -> IntakeRecord:
        if record.record_id not in self._records:
            raise PersistenceError(f"Record {record.record_id} no longer exists")
        stored = record.copy()
        stored.updated_at = self._clock()
        await self._commit({**self._records, stored.record_id: stored})
        return stored.copy()

    async def delete(self, record_id: str) -> bool:
        if record_id in self._records:
            remaining = dict(self._records)
            del remaining[record_id]
            await self._commit(remaining)
            return True
        return False

    def count(self) -> int:
        """Get total number of records."""
        return len(self._records)


# =============================================================================
# MongoDB Store
# =============================================================================


def _to_object_id(record_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return None


class MongoRecordStore:
    """Record store on a single MongoDB collection."""

    def __init__(
        self,
        uri: str,
        database: str = "hostel_printing",
        collection: str = "hostels",
        client: Optional[AsyncIOMotorClient] = None,
        clock: Clock = utc_now,
    ):
        self._client = client or AsyncIOMotorClient(uri, tz_aware=True)
        self._collection = self._client[database][collection]
        self._clock = clock

    @staticmethod
    def _to_document(record: IntakeRecord) -> dict:
        doc = record.to_dict()
        doc.pop("id", None)
        doc["createdAt"] = record.created_at
        doc["updatedAt"] = record.updated_at
        return doc

    @staticmethod
    def _from_document(doc: dict) -> IntakeRecord:
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return IntakeRecord.from_dict(data)

    async def ping(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise PersistenceError(f"MongoDB unreachable: {e}") from e

    async def create(self, record: IntakeRecord) -> IntakeRecord:
        stored = record.copy()
        stored.created_at = stored.updated_at = self._clock()
        try:
            result = await self._collection.insert_one(self._to_document(stored))
        except PyMongoError as e:
            raise PersistenceError(f"Insert failed: {e}") from e
        stored.record_id = str(result.inserted_id)
        return stored

    async def get(self, record_id: str) -> Optional[IntakeRecord]:
        oid = _to_object_id(record_id)
        if oid is None:
            return None
        try:
            doc = await self._collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise PersistenceError(f"Lookup of {record_id} failed: {e}") from e
        return self._from_document(doc) if doc else None

    async def list_all(self) -> list[IntakeRecord]:
        try:
            cursor = self._collection.find().sort("createdAt", DESCENDING)
            return [self._from_document(doc) async for doc in cursor]
        except PyMongoError as e:
            raise PersistenceError(f"Listing records failed: {e}") from e

    async def update(self, record: IntakeRecord) -> IntakeRecord:
        oid = _to_object_id(record.record_id)
        if oid is None:
            raise PersistenceError(f"Record {record.record_id} no longer exists")
        stored = record.copy()
        stored.updated_at = self._clock()
        try:
            result = await self._collection.replace_one({"_id": oid}, self._to_document(stored))
        except PyMongoError as e:
            raise PersistenceError(f"Update of {record.record_id} failed: {e}") from e
        if result.matched_count == 0:
            raise PersistenceError(f"Record {record.record_id} no longer exists")
        return stored

    async def delete(self, record_id: str) -> bool:
        oid = _to_object_id(record_id)
        if oid is None:
            return False
        try:
            result = await self._collection.delete_one({"_id": oid})
        except PyMongoError as e:
            raise PersistenceError(f"Delete of {record_id} failed: {e}") from e
        return result.deleted_count > 0
