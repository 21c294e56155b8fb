import asyncio
from pathlib import Path
from urllib.parse import quote
from uuid import UUID, uuid4

import structlog

from linkup.core.core import Service
from linkup.core.modules.media.models import StoredFileInfo, UploadedFile
from linkup.core.modules.media.utils import is_allowed_upload, original_name, resolve_stored_path, stored_name
from linkup.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


class MediaService(Service):
    """Stores user uploads (images and documents) on local disk."""

    async def on_start(self) -> None:
        Path(self.core.config.uploads_path).mkdir(parents=True, exist_ok=True)

    def public_url(self, name: str) -> str:
        return f"{self.core.config.public_base_url.rstrip('/')}/api/v1/media/{quote(name)}"

    async def upload(self, user_id: UUID, filename: str, content: bytes, mime_type: str) -> UploadedFile:
        """Validate and store an uploaded file.

        Raises:
            ValidationError: If the file is empty, too large, or not an allowed type
        """
        if not content:
            raise ValidationError("No file uploaded")
        if not is_allowed_upload(filename, mime_type):
            raise ValidationError("Only images and documents are allowed")
        max_bytes = self.core.config.max_upload_bytes
        if len(content) > max_bytes:
            raise ValidationError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")

        name = stored_name(uuid4(), filename)
        path = resolve_stored_path(self.core.config.uploads_path, name)
        if path is None:
            raise ValidationError("Invalid filename")
        await asyncio.to_thread(_write_file, path, content)

        logger.info("media_uploaded", user_id=user_id, name=name, size=len(content), mime_type=mime_type)
        return UploadedFile(url=self.public_url(name), filename=filename, size=len(content), mime_type=mime_type)

    def get_file_info(self, name: str) -> StoredFileInfo:
        """Locate a stored file for download.

        Raises:
            NotFoundError: If the name is invalid or no such file exists
        """
        path = resolve_stored_path(self.core.config.uploads_path, name)
        if path is None or not path.is_file():
            raise NotFoundError(f"File '{name}' not found")
        return StoredFileInfo(file_path=path, filename=original_name(name))
