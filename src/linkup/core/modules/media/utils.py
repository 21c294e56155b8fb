"""Utility functions for uploaded media."""

import re
from pathlib import Path, PurePosixPath
from uuid import UUID

from linkup.core.modules.media.models import ALLOWED_UPLOAD_TYPES

STORED_NAME_SEPARATOR = "__"
MAX_FILENAME_LENGTH = 100


def sanitize_filename(filename: str) -> str:
    """Sanitize an uploaded filename for storage on disk.

    Strips directory components and leading dots, replaces anything other than
    word characters, spaces, dots and hyphens, and keeps the extension when
    truncating to MAX_FILENAME_LENGTH.
    """
    filename = PurePosixPath(filename.replace("\\", "/")).name.lstrip(".")

    sanitized = re.sub(r"[^\w\s.-]", "_", filename)
    sanitized = re.sub(r"_+", "_", sanitized)
    sanitized = re.sub(r"\s+", " ", sanitized)

    if len(sanitized) > MAX_FILENAME_LENGTH:
        stem, dot, ext = sanitized.rpartition(".")
        if dot and stem:
            keep = MAX_FILENAME_LENGTH - 4 - len(ext)
            sanitized = f"{stem[:keep]}.{ext}" if keep > 0 else f"file.{ext}"
        else:
            sanitized = sanitized[:MAX_FILENAME_LENGTH]

    # Nothing meaningful left
    if not re.sub(r"[\s._-]", "", sanitized):
        sanitized = "unnamed_file"

    return sanitized


def file_extension(filename: str) -> str:
    return PurePosixPath(filename.lower()).suffix


def is_allowed_upload(filename: str, mime_type: str) -> bool:
    """Both the extension and the declared MIME type must be on the allow list and agree."""
    allowed = ALLOWED_UPLOAD_TYPES.get(file_extension(filename))
    return allowed is not None and mime_type.split(";")[0].strip().lower() in allowed


def stored_name(file_id: UUID, filename: str) -> str:
    return f"{file_id.hex}{STORED_NAME_SEPARATOR}{sanitize_filename(filename)}"


def original_name(name: str) -> str:
    """Recover the sanitized original filename from a stored name."""
    _, sep, rest = name.partition(STORED_NAME_SEPARATOR)
    return rest if sep else name


def resolve_stored_path(uploads_path: str, name: str) -> Path | None:
    """Path of a stored file inside uploads_path, or None if name escapes the directory."""
    if not name or name != PurePosixPath(name).name or "\\" in name or name.startswith("."):
        return None
    return Path(uploads_path) / name
