"""
Intake Routes - Web Pages for Hostel Print Requests

Requester flow:
- GET  /                         - Intake form
- POST /submit                   - Create request with documents
- GET  /records-view/{id}        - Review submitted request
- POST /confirm-record/{id}      - Confirm request
- GET  /confirmed/{id}           - Show reference ID

Admin flow:
- GET  /requests                 - List all requests (newest first)
- POST /delete-request/{id}      - Delete request
- POST /edit-document/{id}/{doc} - Replace one document
- POST /delete-document/{id}/{doc} - Remove one document
- GET  /download/{id}/{file}     - Download with original filename

Missing records never surface as errors; the user is redirected.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from printdesk import (
    DocumentNotFoundError,
    IncomingFile,
    IntakeService,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

TEMPLATES_DIR = Path(__file__).parent / "templates"

router = APIRouter(tags=["intake"])
templates = Jinja2Templates(directory=TEMPLATES_DIR)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


def get_service(request: Request) -> IntakeService:
    """Intake service attached to the application at startup."""
    return request.app.state.service


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def render_error(request: Request, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message},
        status_code=status_code,
    )


async def read_upload(upload: UploadFile) -> IncomingFile:
    """Buffer an UploadFile for the upload gate."""
    content = await upload.read()
    return IncomingFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        content=content,
    )


# =============================================================================
# Response Models
# =============================================================================


class DocumentOut(BaseModel):
    """Embedded document as exposed by the debug dump."""
    documentId: str
    locator: str
    filename: str
    originalname: str
    mimetype: str
    size: int = 0


class RecordOut(BaseModel):
    """Intake record as exposed by the debug dump."""
    id: str
    name: str
    phone: str
    hostelNo: str
    roomNo: str
    documents: List[DocumentOut] = []
    isConfirmed: bool
    status: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


# =============================================================================
# Requester Pages
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def intake_form(request: Request):
    """Render the print request form."""
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/contact", response_class=HTMLResponse)
async def contact(request: Request):
    """Static contact page."""
    return templates.TemplateResponse(request, "contact.html", {})


@router.post("/submit")
async def submit_request(
    request: Request,
    name: str = Form(""),
    phone: str = Form(""),
    hostel_no: str = Form("", alias="hostelNo"),
    room_no: str = Form("", alias="roomNo"),
    documents: Optional[List[UploadFile]] = File(None),
    service: IntakeService = Depends(get_service),
):
    """Create a print request and show it for review."""
    form = {"name": name, "phone": phone, "hostelNo": hostel_no, "roomNo": room_no}
    files = [await read_upload(upload) for upload in documents or []]

    try:
        record = await service.create_record(form, files)
    except ValidationError as e:
        return render_error(request, e.message, status_code=400)
    except PersistenceError:
        logger.exception("Could not save print request")
        return render_error(request, GENERIC_ERROR_MESSAGE, status_code=500)

    return redirect(f"/records-view/{record.record_id}")


@router.get("/records-view/{record_id}", response_class=HTMLResponse)
async def view_record(
    request: Request,
    record_id: str,
    service: IntakeService = Depends(get_service),
):
    """Show one request with its documents."""
    try:
        record = await service.get_viewable_record(record_id)
    except NotFoundError as e:
        logger.warning("%s", e)
        return redirect("/")
    except PersistenceError:
        logger.exception("Could not load request %s", record_id)
        return redirect("/")

    return templates.TemplateResponse(request, "records.html", {"data": [record]})


@router.post("/confirm-record/{record_id}")
async def confirm_record(
    record_id: str,
    service: IntakeService = Depends(get_service),
):
    """Confirm a request (no-op if already confirmed)."""
    try:
        record = await service.confirm_record(record_id)
    except NotFoundError as e:
        logger.warning("%s", e)
        return redirect("/")
    except PersistenceError:
        logger.exception("Could not confirm request %s", record_id)
        return redirect("/")

    return redirect(f"/confirmed/{record.record_id}")


@router.get("/confirmed/{record_id}", response_class=HTMLResponse)
async def confirmation_page(
    request: Request,
    record_id: str,
    service: IntakeService = Depends(get_service),
):
    """Show the reference ID for a request."""
    try:
        record = await service.get_record(record_id)
    except NotFoundError as e:
        logger.warning("%s", e)
        return redirect("/")
    except PersistenceError:
        logger.exception("Could not load request %s", record_id)
        return redirect("/")

    return templates.TemplateResponse(
        request,
        "confirmed.html",
        {"reference": record.record_id, "record": record},
    )


# =============================================================================
# Admin Pages
# =============================================================================


@router.get("/requests", response_class=HTMLResponse)
async def all_requests(
    request: Request,
    service: IntakeService = Depends(get_service),
):
    """List every request, newest first."""
    try:
        requests = await service.list_records()
    except PersistenceError:
        logger.exception("Could not list requests")
        return redirect("/")

    return templates.TemplateResponse(request, "all-requests.html", {"requests": requests})


@router.post("/delete-request/{record_id}")
async def delete_request(
    record_id: str,
    service: IntakeService = Depends(get_service),
):
    """Delete a request; deleting a missing request is not an error."""
    try:
        await service.delete_record(record_id)
    except PersistenceError:
        logger.exception("Could not delete request %s", record_id)

    return redirect("/requests")


@router.post("/edit-document/{record_id}/{doc_ref}")
async def edit_document(
    record_id: str,
    doc_ref: str,
    document: Optional[UploadFile] = File(None),
    service: IntakeService = Depends(get_service),
):
    """Replace one document on a request."""
    upload = await read_upload(document) if document is not None else None

    try:
        await service.replace_document(record_id, doc_ref, upload)
    except DocumentNotFoundError as e:
        logger.warning("%s", e)
    except NotFoundError as e:
        logger.warning("%s", e)
        return redirect("/")
    except (ValidationError, PersistenceError) as e:
        logger.warning("Document replacement on %s failed: %s", record_id, e)

    return redirect(f"/records-view/{record_id}")


@router.post("/delete-document/{record_id}/{doc_ref}")
async def delete_document(
    record_id: str,
    doc_ref: str,
    service: IntakeService = Depends(get_service),
):
    """Remove one document from a request."""
    try:
        await service.delete_document(record_id, doc_ref)
    except DocumentNotFoundError as e:
        logger.warning("%s", e)
    except NotFoundError as e:
        logger.warning("%s", e)
        return redirect("/")
    except PersistenceError:
        logger.exception("Could not remove document %s from %s", doc_ref, record_id)

    return redirect(f"/records-view/{record_id}")


@router.get("/download/{record_id}/{file_key}")
async def download_document(
    request: Request,
    record_id: str,
    file_key: str,
    service: IntakeService = Depends(get_service),
):
    """Download a document under its original filename."""
    try:
        doc, content = await service.open_document(record_id, file_key)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except PersistenceError:
        logger.exception("Could not fetch document %s from %s", file_key, record_id)
        return render_error(request, GENERIC_ERROR_MESSAGE, status_code=500)

    return Response(
        content=content,
        media_type=doc.mimetype,
        headers={"Content-Disposition": content_disposition(doc.originalname)},
    )


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# =============================================================================
# Debug API
# =============================================================================


@router.get("/records", response_model=List[RecordOut])
async def dump_records(service: IntakeService = Depends(get_service)):
    """Raw dump of every record (debug)."""
    return await service.dump_records()
