from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Extension -> MIME types accepted for it
ALLOWED_UPLOAD_TYPES: dict[str, frozenset[str]] = {
    ".jpeg": frozenset({"image/jpeg"}),
    ".jpg": frozenset({"image/jpeg"}),
    ".png": frozenset({"image/png"}),
    ".gif": frozenset({"image/gif"}),
    ".pdf": frozenset({"application/pdf"}),
    ".doc": frozenset({"application/msword"}),
    ".docx": frozenset({"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}),
    ".txt": frozenset({"text/plain"}),
}


class UploadedFile(BaseModel):
    """Result of a successful upload."""

    url: str = Field(..., description="Public URL of the stored file")
    filename: str = Field(..., description="Original filename")
    size: int = Field(..., description="File size in bytes")
    mime_type: str = Field(..., alias="mimeType", description="MIME type")

    model_config = ConfigDict(populate_by_name=True)


class StoredFileInfo(BaseModel):
    """Information about a stored file for download."""

    file_path: Path
    filename: str
