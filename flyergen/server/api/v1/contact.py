"""
Contact Endpoints.

The public contact form and the admin inbox built on it.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from flyergen.core.database.entities.contact_messages import ContactMessage, ContactStatus
from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import ContactMessageRepository
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import (
    ContactMessageCreate,
    ContactMessageList,
    ContactMessageRead,
    ContactStatusUpdate,
)
from flyergen.server.services.deps import AdminUserDep, SessionDep
from flyergen.server.services.permissions import can_access, can_admin

logger = get_logger(__name__)

router = APIRouter()


def _require(user: User, allowed: bool) -> None:
    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


async def _get_message(repository: ContactMessageRepository, message_id: str) -> ContactMessage:
    message = await repository.get_by_id(message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


@router.post(
    "",
    response_model=ContactMessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Contact Message",
    description="Submit the public contact form.",
    responses={400: {"description": "Invalid form fields"}},
)
async def create_message(payload: ContactMessageCreate, session: SessionDep) -> ContactMessageRead:
    message = await ContactMessageRepository(session).create(ContactMessage(**payload.model_dump()))
    logger.info(f"Contact message {message.id} received from {message.email}")
    return ContactMessageRead.model_validate(message)


@router.get(
    "",
    response_model=ContactMessageList,
    summary="List Contact Messages",
    description="Admin inbox, newest first, filtered by status and a free text search.",
)
async def list_messages(
    admin: AdminUserDep,
    session: SessionDep,
    message_status: Optional[ContactStatus] = Query(default=None, alias="status"),
    search: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ContactMessageList:
    _require(admin, can_access(admin.role, "contact:view"))
    items, total = await ContactMessageRepository(session).search(
        status=message_status, search=search, limit=limit, offset=offset
    )
    return ContactMessageList(
        items=[ContactMessageRead.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.patch(
    "/{message_id}",
    response_model=ContactMessageRead,
    summary="Update Contact Message Status",
    responses={404: {"description": "Message not found"}},
)
async def update_message_status(
    message_id: str, payload: ContactStatusUpdate, admin: AdminUserDep, session: SessionDep
) -> ContactMessageRead:
    _require(admin, can_admin(admin.role, "contact:manage"))
    repository = ContactMessageRepository(session)
    message = await _get_message(repository, message_id)
    message.status = payload.status
    message = await repository.update(message)
    return ContactMessageRead.model_validate(message)


@router.delete(
    "/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Contact Message",
    responses={404: {"description": "Message not found"}},
)
async def delete_message(message_id: str, admin: AdminUserDep, session: SessionDep) -> None:
    _require(admin, can_admin(admin.role, "contact:manage"))
    repository = ContactMessageRepository(session)
    await _get_message(repository, message_id)
    await repository.delete(message_id)
    logger.info(f"Contact message {message_id} deleted by {admin.id}")
