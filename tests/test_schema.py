"""
Tests for Intake Record Schema and Field Validation

Tests cover:
- Record/document serialisation to wire keys
- Document addressing by ID and position
- Required fields and phone strictness
"""

from datetime import datetime, timezone

import pytest

from printdesk.schema import (
    DocumentReference,
    IntakeRecord,
    RequestStatus,
    validate_phone,
)
from printdesk.validation import build_record, validate_intake_data


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def two_documents():
    return [
        DocumentReference.create(
            locator="/uploads/a1.pdf",
            filename="a1.pdf",
            originalname="notes.pdf",
            mimetype="application/pdf",
            size_bytes=10,
        ),
        DocumentReference.create(
            locator="/uploads/b2.png",
            filename="b2.png",
            originalname="diagram.png",
            mimetype="image/png",
            size_bytes=20,
        ),
    ]


@pytest.fixture
def record(two_documents):
    return IntakeRecord(
        name="A Kumar",
        phone="9876543210",
        hostel_no="3",
        room_no="12",
        documents=two_documents,
        record_id="rec-1",
        created_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        updated_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def valid_form():
    return {"name": "A Kumar", "phone": "9876543210", "hostelNo": "3", "roomNo": "12"}


# =============================================================================
# Serialisation
# =============================================================================


class TestSerialisation:
    def test_new_record_defaults(self):
        record = IntakeRecord(name="A", phone="1234567890", hostel_no="1", room_no="2")
        assert record.is_confirmed is False
        assert record.status == RequestStatus.PENDING
        assert record.documents == []
        assert record.record_id is None

    def test_to_dict_uses_wire_keys(self, record):
        data = record.to_dict()
        assert data["id"] == "rec-1"
        assert data["hostelNo"] == "3"
        assert data["roomNo"] == "12"
        assert data["isConfirmed"] is False
        assert data["status"] == "Pending"
        assert data["createdAt"] == "2024-05-01T09:30:00+00:00"
        assert data["documents"][0]["originalname"] == "notes.pdf"
        assert data["documents"][0]["documentId"].startswith("DOC-")

    def test_from_dict_restores_record(self, record):
        restored = IntakeRecord.from_dict(record.to_dict())
        assert restored == record

    def test_from_dict_defaults_status(self):
        restored = IntakeRecord.from_dict(
            {"name": "A", "phone": "1", "hostelNo": "1", "roomNo": "1"}
        )
        assert restored.status == RequestStatus.PENDING
        assert restored.is_confirmed is False

    def test_copy_has_independent_documents(self, record):
        clone = record.copy()
        clone.documents.pop()
        assert record.document_count == 2


# =============================================================================
# Document Addressing
# =============================================================================


class TestDocumentAddressing:
    def test_resolve_by_document_id(self, record):
        second = record.documents[1]
        assert record.resolve_document_index(second.document_id) == 1

    def test_resolve_by_position(self, record):
        assert record.resolve_document_index("0") == 0
        assert record.resolve_document_index("1") == 1

    def test_resolve_out_of_range(self, record):
        assert record.resolve_document_index("2") is None
        assert record.resolve_document_index("-1") is None
        assert record.resolve_document_index("DOC-MISSING") is None

    def test_resolve_non_ascii_digits(self, record):
        assert record.resolve_document_index("\u00b2") is None
        assert record.resolve_document_index("\u0661") is None

    def test_find_document_by_filename_or_id(self, record):
        first = record.documents[0]
        assert record.find_document("a1.pdf") is first
        assert record.find_document(first.document_id) is first
        assert record.find_document("nope.pdf") is None

    def test_matches_object_key_basename(self):
        doc = DocumentReference.create(
            locator="https://bucket.s3.us-east-1.amazonaws.com/printing_documents/x.pdf",
            filename="printing_documents/x.pdf",
            originalname="x.pdf",
            mimetype="application/pdf",
        )
        assert doc.matches("x.pdf")
        assert doc.matches("printing_documents/x.pdf")
        assert not doc.matches("")


# =============================================================================
# Field Validation
# =============================================================================


class TestValidation:
    def test_valid_form(self, valid_form):
        result = validate_intake_data(valid_form)
        assert result.valid
        assert not result.is_blocked
        assert result.errors == ()

    def test_missing_fields_reported(self):
        result = validate_intake_data({"name": "  ", "phone": ""})
        assert result.is_blocked
        assert result.missing_fields == ("name", "phone", "hostelNo", "roomNo")
        assert len(result.errors) == 4

    @pytest.mark.parametrize("phone", ["98765", "98765432100", "98765-4321", "abcdefghij"])
    def test_strict_phone_rejects_bad_numbers(self, valid_form, phone):
        valid_form["phone"] = phone
        result = validate_intake_data(valid_form, strict_phone=True)
        assert result.is_blocked
        assert "Phone number must be exactly 10 digits" in result.errors

    def test_lenient_phone_accepts_any_text(self, valid_form):
        valid_form["phone"] = "+91 98765 43210"
        assert validate_intake_data(valid_form, strict_phone=False).valid

    def test_validate_phone(self):
        assert validate_phone("0123456789")
        assert not validate_phone("")

    def test_build_record_trims_fields(self, valid_form):
        valid_form["name"] = "  A Kumar  "
        record = build_record(valid_form)
        assert record.name == "A Kumar"
        assert record.hostel_no == "3"
        assert record.is_confirmed is False
