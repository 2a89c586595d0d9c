"""
Document File Storage for the Visa Processing System

Stores uploaded supporting documents on disk under UPLOAD_DIR:

uploads/documents/
└── YYYY/MM/
    └── {uuid}{ext}

Uploads are checked before anything is written: the declared MIME type must be
in ALLOWED_DOCUMENT_TYPES, the size must not exceed MAX_FILE_SIZE_MB, and image
uploads must decode as images.
"""

import io
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional
import logging

from PIL import Image, UnidentifiedImageError

from app.core.config import get_settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    file_name: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str


class DocumentFileManager:
    """Service for storing and deleting uploaded documents"""

    def __init__(self, base_path: Optional[Path] = None):
        self.settings = get_settings()
        self.base_path = Path(base_path) if base_path else self.settings.get_upload_path()

    def read_upload(self, stream: BinaryIO) -> bytes:
        """Read an upload stream, stopping one byte past the size limit"""
        limit = self.settings.max_file_size_bytes
        content = stream.read(limit + 1)
        if len(content) > limit:
            raise ValidationError(f"File too large. Maximum size is {self.settings.MAX_FILE_SIZE_MB}MB")
        return content

    def validate(self, content: bytes, mime_type: Optional[str]) -> None:
        if mime_type not in self.settings.allowed_document_types_list:
            raise ValidationError("Invalid file type. Only images, PDFs, and Word documents are allowed.")
        if len(content) > self.settings.max_file_size_bytes:
            raise ValidationError(f"File too large. Maximum size is {self.settings.MAX_FILE_SIZE_MB}MB")
        if not content:
            raise ValidationError("Uploaded file is empty")
        if mime_type.startswith("image/"):
            try:
                with Image.open(io.BytesIO(content)) as image:
                    image.verify()
            except (UnidentifiedImageError, OSError, SyntaxError):
                raise ValidationError("Uploaded image file is corrupted or not an image")

    def save(self, content: bytes, original_name: str, mime_type: str) -> StoredFile:
        """Validate and write an upload, returning its stored metadata"""
        self.validate(content, mime_type)

        now = datetime.now()
        directory = self.base_path / now.strftime("%Y") / now.strftime("%m")
        directory.mkdir(parents=True, exist_ok=True)

        file_name = f"{uuid.uuid4()}{Path(original_name).suffix.lower()}"
        file_path = directory / file_name
        with open(file_path, "wb") as f:
            f.write(content)

        logger.info(f"Stored document {original_name} as {file_path} ({len(content)} bytes)")
        return StoredFile(
            file_name=file_name,
            original_name=original_name,
            file_path=str(file_path),
            file_size=len(content),
            mime_type=mime_type,
        )

    def delete(self, file_path: str) -> bool:
        """Remove a stored file; returns False when it was already gone"""
        path = Path(file_path)
        if not path.exists():
            logger.warning(f"Document file already missing: {file_path}")
            return False
        path.unlink()
        return True


def get_file_manager() -> DocumentFileManager:
    return DocumentFileManager()
