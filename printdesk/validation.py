"""
Intake Validation - Field Checks for Print Request Submissions

Validates raw form data before an IntakeRecord is built.
Error messages are written for requester-facing display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from printdesk.schema import IntakeRecord, validate_phone


# =============================================================================
# Validation Result
# =============================================================================


@dataclass(frozen=True)
class IntakeValidationResult:
    """Result of intake form validation."""

    valid: bool
    missing_fields: tuple[str, ...]
    errors: tuple[str, ...]

    @property
    def is_blocked(self) -> bool:
        """Check if submission is blocked due to validation errors."""
        return not self.valid

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "is_blocked": self.is_blocked,
            "missing_fields": list(self.missing_fields),
            "errors": list(self.errors),
        }


# =============================================================================
# Validation Functions
# =============================================================================


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return str(value).strip() if value is not None else ""


def validate_intake_data(
    data: dict[str, Any],
    strict_phone: bool = True,
) -> IntakeValidationResult:
    """
    Validate raw intake form data.

    Args:
        data: Form fields keyed by wire name (name, phone, hostelNo, roomNo)
        strict_phone: Require phone to be exactly 10 digits

    Returns:
        IntakeValidationResult with validation outcome
    """
    errors: list[str] = []
    missing_fields: list[str] = []

    if not _text(data, "name"):
        missing_fields.append("name")
        errors.append("Please enter your name")

    phone = _text(data, "phone")
    if not phone:
        missing_fields.append("phone")
        errors.append("Please enter your phone number")
    elif strict_phone and not validate_phone(phone):
        errors.append("Phone number must be exactly 10 digits")

    if not _text(data, "hostelNo"):
        missing_fields.append("hostelNo")
        errors.append("Please enter your hostel number")

    if not _text(data, "roomNo"):
        missing_fields.append("roomNo")
        errors.append("Please enter your room number")

    return IntakeValidationResult(
        valid=not errors,
        missing_fields=tuple(missing_fields),
        errors=tuple(errors),
    )


def build_record(data: dict[str, Any]) -> IntakeRecord:
    """Build an unconfirmed record from validated form data."""
    return IntakeRecord(
        name=_text(data, "name"),
        phone=_text(data, "phone"),
        hostel_no=_text(data, "hostelNo"),
        room_no=_text(data, "roomNo"),
    )
