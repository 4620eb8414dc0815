"""
FastAPI backend: REST API over the contact service, plus a live snapshot stream.
Run with uvicorn: uvicorn api.main:app --reload
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from contactbook.application import (
    READ_CONTACTS,
    ContactRepository,
    ContactService,
    PermissionGate,
    Snapshot,
    StorageError,
)
from contactbook.domain import Contact
from contactbook.domain.entities import ID_MAX, ID_MIN
from contactbook.infrastructure import Database
from contactbook.infrastructure.phone import dial_uri, display_phone

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def _granted_permissions() -> set[str]:
    raw = os.environ.get("CONTACTS_GRANTED_PERMISSIONS", "")
    return {p.strip() for p in raw.split(",") if p.strip()}


def _check_permission(permission: str) -> bool:
    return permission in _granted_permissions()


def _request_permission(permission: str) -> bool:
    # A server has nobody to prompt: an ungranted permission is a denial.
    logger.warning(
        "Permission %s is not granted. Add it to CONTACTS_GRANTED_PERMISSIONS.",
        permission,
    )
    return False


def _default_region() -> str | None:
    return os.environ.get("CONTACTS_DEFAULT_REGION", "").strip().upper() or None


def _sql_echo() -> bool:
    return os.environ.get("CONTACTS_SQL_ECHO", "false").strip().lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    gate = PermissionGate(
        READ_CONTACTS, check=_check_permission, request=_request_permission
    )
    # Denial aborts startup: the session ends before any contact is read.
    gate.require()
    database = Database(echo=_sql_echo())
    try:
        service = ContactService(ContactRepository(database.store), gate)
    except Exception:
        database.close()
        raise
    app.state.database = database
    app.state.service = service
    logger.info("Contact service ready (database %s)", database.url)
    try:
        yield
    finally:
        service.close()
        database.close()


app = FastAPI(title="Contactbook API", lifespan=lifespan)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503, content={"detail": "Contact storage unavailable"}
    )


def _get_service(request: Request) -> ContactService:
    return request.app.state.service


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


class ContactBody(BaseModel):
    id: int = Field(ge=ID_MIN, le=ID_MAX)
    name: str = Field(min_length=1)
    phone_number: str = ""
    image_reference: str | None = None


class ContactItem(BaseModel):
    id: int
    name: str
    phone_number: str
    image_reference: str | None = None
    phone_display: str = ""
    dial_uri: str | None = None


def _to_contact(body: ContactBody) -> Contact:
    try:
        return Contact(
            id=body.id,
            name=body.name,
            phone_number=body.phone_number,
            image_reference=body.image_reference,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _to_item(contact: Contact, region: str | None) -> ContactItem:
    return ContactItem(
        id=contact.id,
        name=contact.name,
        phone_number=contact.phone_number,
        image_reference=contact.image_reference,
        phone_display=display_phone(contact.phone_number, region),
        dial_uri=dial_uri(contact.phone_number, region),
    )


def _snapshot_event(snapshot: Snapshot, region: str | None) -> str:
    """Format one snapshot as a server-sent event."""
    data = [_to_item(c, region).model_dump() for c in snapshot]
    return f"event: snapshot\ndata: {json.dumps(data)}\n\n"


@app.get("/contacts")
def list_contacts(request: Request) -> list[ContactItem]:
    region = _default_region()
    return [_to_item(c, region) for c in _get_service(request).contacts()]


@app.get("/contacts/stream")
async def stream_contacts(request: Request):
    """One `snapshot` event now and one after every change, until the client leaves."""
    service = _get_service(request)
    region = _default_region()

    async def events():
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        def on_snapshot(snapshot: Snapshot) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, snapshot)

        # Subscribed only once the body is being sent, so finally always runs.
        subscription = await run_in_threadpool(
            service.all_contacts.subscribe, on_snapshot
        )
        try:
            while True:
                snapshot = await queue.get()
                yield _snapshot_event(snapshot, region)
        finally:
            subscription.cancel()

    return StreamingResponse(events(), media_type="text/event-stream")


@app.get("/contacts/{contact_id}")
def get_contact(contact_id: int, request: Request) -> ContactItem:
    contact = _get_service(request).get_contact(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return _to_item(contact, _default_region())


@app.post("/contacts")
async def create_contact(body: ContactBody, request: Request):
    service = _get_service(request)
    contact = _to_contact(body)
    inserted = await asyncio.wrap_future(service.insert(contact))
    if not inserted:
        # Insert-if-absent: the stored contact is left as it was.
        existing = await run_in_threadpool(service.get_contact, contact.id)
        contact = existing or contact
    return JSONResponse(
        content=_to_item(contact, _default_region()).model_dump(),
        status_code=201 if inserted else 200,
    )


@app.put("/contacts/{contact_id}")
async def update_contact(contact_id: int, body: ContactBody, request: Request):
    if body.id != contact_id:
        raise HTTPException(status_code=400, detail="Body id does not match path id")
    contact = _to_contact(body)
    updated = await asyncio.wrap_future(_get_service(request).update(contact))
    if not updated:
        raise HTTPException(status_code=404, detail="Contact not found")
    return _to_item(contact, _default_region())


@app.delete("/contacts/{contact_id}", status_code=204)
async def delete_contact(contact_id: int, request: Request):
    await asyncio.wrap_future(_get_service(request).delete(contact_id))
    return Response(status_code=204)
