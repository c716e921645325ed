import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from quickdesk.auth.dependencies import get_current_profile
from quickdesk.auth.models.profile import Profile
from quickdesk.core.rate_limit import limiter
from quickdesk.core.storage import StorageBackend, get_storage
from quickdesk.db.session import get_db
from quickdesk.tickets.schemas.ticket import AttachmentResponse, AttachmentUploadResponse
from quickdesk.tickets.services.attachment_service import AttachmentService
from quickdesk.tickets.services.ticket_service import TicketService

router = APIRouter()


@router.post(
    "/tickets/{ticket_id}/attachments",
    response_model=AttachmentUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("20/minute")
async def upload_ticket_attachments(
    request: Request,
    ticket_id: UUID,
    files: list[UploadFile] = File(...),
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> AttachmentUploadResponse:
    """Upload one or more files; rejected files are reported, not raised."""
    ticket = await asyncio.to_thread(TicketService(db).get_ticket, ticket_id)
    return await AttachmentService(db, storage).upload(current_profile, ticket, files)


@router.get("/tickets/{ticket_id}/attachments", response_model=list[AttachmentResponse])
def list_ticket_attachments(
    ticket_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> list[AttachmentResponse]:
    ticket = TicketService(db).get_ticket(ticket_id)
    attachments = AttachmentService(db, storage).list_for_ticket(current_profile, ticket)
    return [AttachmentResponse.model_validate(a) for a in attachments]


@router.get("/ticket-attachments/{attachment_id}/download")
def download_ticket_attachment(
    attachment_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> RedirectResponse:
    url = AttachmentService(db, storage).download_url(current_profile, attachment_id)
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.delete(
    "/ticket-attachments/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_ticket_attachment(
    attachment_id: UUID,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> None:
    AttachmentService(db, storage).delete(current_profile, attachment_id)
