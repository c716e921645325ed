"""Ticket attachments.

Files are validated one by one; a rejected file does not stop the others.
Upload is separate from ticket creation, so a failed upload leaves the ticket
without that file.
"""

import asyncio
import logging
from typing import NamedTuple
from uuid import UUID

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.core.config import settings
from quickdesk.core.constants import (
    ATTACHMENT_ALLOWED_MIME_TYPES,
    ATTACHMENT_EXTENSIONS,
    ATTACHMENTS_FOLDER,
)
from quickdesk.core.exceptions import ForbiddenError, NotFoundError
from quickdesk.core.storage import StorageBackend, generate_unique_filename
from quickdesk.tickets.models.attachment import TicketAttachment
from quickdesk.tickets.models.ticket import Ticket
from quickdesk.tickets.schemas.ticket import (
    AttachmentResponse,
    AttachmentUploadResponse,
    FailedUpload,
)
from quickdesk.tickets.services import access_guard

logger = logging.getLogger(__name__)


class ReceivedFile(NamedTuple):
    name: str
    content_type: str | None
    content: bytes


def validate_attachment(content_type: str | None, size: int) -> str | None:
    """Return why a file is rejected, or None when it is acceptable."""
    if content_type not in ATTACHMENT_ALLOWED_MIME_TYPES:
        return f"File type {content_type or 'unknown'} is not allowed"
    if size == 0:
        return "File is empty"
    if size > settings.attachment_max_size_bytes:
        return f"File exceeds the maximum size of {settings.ATTACHMENT_MAX_SIZE_MB}MB"
    return None


class AttachmentService:
    def __init__(self, db: Session, storage: StorageBackend) -> None:
        self.db = db
        self.storage = storage

    async def upload(
        self, uploader: Profile, ticket: Ticket, files: list[UploadFile]
    ) -> AttachmentUploadResponse:
        access_guard.ensure_can_view(uploader, ticket)
        received = [
            ReceivedFile(file.filename or "file", file.content_type, await file.read())
            for file in files
        ]
        return await asyncio.to_thread(self._store, uploader, ticket, received)

    def _store(
        self, uploader: Profile, ticket: Ticket, files: list[ReceivedFile]
    ) -> AttachmentUploadResponse:
        uploaded: list[TicketAttachment] = []
        failed: list[FailedUpload] = []
        folder = f"{ATTACHMENTS_FOLDER}/{ticket.id}"

        for file_name, content_type, content in files:
            reason = validate_attachment(content_type, len(content))
            if reason:
                failed.append(FailedUpload(file_name=file_name, reason=reason))
                continue

            extension = ATTACHMENT_EXTENSIONS.get(content_type or "", "")
            try:
                stored_path = self.storage.upload(
                    content,
                    folder,
                    generate_unique_filename(extension),
                    content_type=content_type,
                )
            except (OSError, ValueError, BotoCoreError, ClientError) as exc:
                logger.warning("Upload of %s for ticket %s failed: %s", file_name, ticket.id, exc)
                failed.append(FailedUpload(file_name=file_name, reason="Storage upload failed"))
                continue

            attachment = TicketAttachment(
                ticket_id=ticket.id,
                uploaded_by=uploader.id,
                file_name=file_name,
                file_path=stored_path,
                file_size=len(content),
                file_type=content_type or "application/octet-stream",
            )
            self.db.add(attachment)
            uploaded.append(attachment)

        if uploaded:
            self.db.commit()
            for attachment in uploaded:
                self.db.refresh(attachment)

        logger.info(
            "Attachments for ticket %s: uploaded=%d, failed=%d",
            ticket.id,
            len(uploaded),
            len(failed),
        )
        return AttachmentUploadResponse(
            uploaded=[AttachmentResponse.model_validate(a) for a in uploaded],
            failed=failed,
            uploaded_count=len(uploaded),
            failed_count=len(failed),
        )

    def list_for_ticket(self, viewer: Profile, ticket: Ticket) -> list[TicketAttachment]:
        access_guard.ensure_can_view(viewer, ticket)
        return (
            self.db.query(TicketAttachment)
            .filter(TicketAttachment.ticket_id == ticket.id)
            .order_by(TicketAttachment.created_at)
            .all()
        )

    def get_for_viewer(self, viewer: Profile, attachment_id: UUID) -> TicketAttachment:
        attachment = (
            self.db.query(TicketAttachment).filter(TicketAttachment.id == attachment_id).first()
        )
        if not attachment:
            raise NotFoundError("Attachment not found", resource="attachment")
        access_guard.ensure_can_view(viewer, attachment.ticket)
        return attachment

    def download_url(self, viewer: Profile, attachment_id: UUID) -> str:
        attachment = self.get_for_viewer(viewer, attachment_id)
        if not self.storage.exists(attachment.file_path):
            raise NotFoundError("File not found in storage", resource="attachment")
        return self.storage.public_url(attachment.file_path)

    def delete(self, viewer: Profile, attachment_id: UUID) -> None:
        attachment = self.get_for_viewer(viewer, attachment_id)
        if attachment.uploaded_by != viewer.id and not viewer.is_admin:
            raise ForbiddenError("Only the uploader or an admin can delete this attachment.")

        self.storage.delete(attachment.file_path)
        self.db.delete(attachment)
        self.db.commit()
        logger.info("Attachment %s deleted by %s", attachment_id, viewer.id)
