"""
Tests for the Upload Gate

Tests cover:
- Allowed content types (PDF, PNG, JPEG)
- First disallowed file rejects the batch
- File count limits and blank browser parts
"""

import pytest

from printdesk.errors import ValidationError
from printdesk.gate import (
    DISALLOWED_TYPE_MESSAGE,
    IncomingFile,
    UploadGate,
    drop_blank_files,
)


def make_file(name="doc.pdf", content_type="application/pdf", content=b"%PDF-1.4"):
    return IncomingFile(filename=name, content_type=content_type, content=content)


@pytest.fixture
def gate():
    return UploadGate()


class TestContentTypes:
    @pytest.mark.parametrize("content_type", ["application/pdf", "image/png", "image/jpeg"])
    def test_allowed_types(self, gate, content_type):
        gate.admit([make_file(content_type=content_type)])

    @pytest.mark.parametrize(
        "content_type", ["text/plain", "image/gif", "application/zip", "", "application/pdfx"]
    )
    def test_disallowed_types(self, gate, content_type):
        with pytest.raises(ValidationError) as exc:
            gate.admit([make_file(content_type=content_type)])
        assert exc.value.message == DISALLOWED_TYPE_MESSAGE

    def test_type_parameters_ignored(self, gate):
        assert gate.is_allowed("application/pdf; name=x.pdf")
        assert gate.is_allowed("IMAGE/PNG")

    def test_one_bad_file_rejects_batch(self, gate):
        files = [make_file(), make_file("notes.txt", "text/plain"), make_file("b.png", "image/png")]
        with pytest.raises(ValidationError):
            gate.admit(files)

    def test_custom_allow_list(self):
        gate = UploadGate(allowed_types=["text/plain"])
        gate.admit([make_file("a.txt", "text/plain")])
        assert not gate.is_allowed("application/pdf")


class TestLimits:
    def test_ten_files_allowed(self, gate):
        gate.admit([make_file(f"{i}.pdf") for i in range(10)])

    def test_eleven_files_rejected(self, gate):
        with pytest.raises(ValidationError):
            gate.admit([make_file(f"{i}.pdf") for i in range(11)])

    def test_single_file_limit(self, gate):
        with pytest.raises(ValidationError):
            gate.admit([make_file(), make_file()], limit=1)

    def test_require_one(self, gate):
        gate.admit([])
        with pytest.raises(ValidationError):
            gate.admit([], require_one=True)

    def test_blank_parts_dropped(self):
        blank = IncomingFile(filename="", content_type="application/octet-stream", content=b"")
        kept = drop_blank_files([blank, make_file()])
        assert len(kept) == 1
        assert drop_blank_files(None) == []
