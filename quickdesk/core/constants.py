"""Fixed limits and names shared across modules.

Anything that varies per deployment belongs in ``config.Settings`` instead.
"""

# Listing
MAX_PAGE_SIZE: int = 100
RECENT_TICKETS_LIMIT: int = 5
NOTIFICATION_INBOX_LIMIT: int = 50
UNASSIGNED_FILTER: str = "unassigned"

# Text fields
TICKET_TITLE_MAX_LENGTH: int = 255
TICKET_DESCRIPTION_MAX_LENGTH: int = 10_000
COMMENT_MAX_LENGTH: int = 5_000
MESSAGE_PREVIEW_MAX_LENGTH: int = 200

# Attachments
ATTACHMENTS_FOLDER: str = "tickets"
ATTACHMENT_EXTENSIONS: dict[str, str] = {
    # images
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    # documents
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/plain": ".txt",
    # media
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/ogg": ".ogv",
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "audio/ogg": ".ogg",
}
# Stored files take their extension from the accepted type, never from the client name
ATTACHMENT_ALLOWED_MIME_TYPES: frozenset[str] = frozenset(ATTACHMENT_EXTENSIONS)

# Frontend route the client falls back to, relative to FRONTEND_URL
TICKETS_PATH: str = "/tickets"

UNREAD_COUNT_CACHE_TTL_SECONDS: int = 60
