"""
File Upload Utility - store signed consent signatures.

Supported formats:
- Images (.jpg, .jpeg, .png)
- PDF (.pdf)

Max file size: 2MB (configurable)
"""

import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from placement_portal.core.config import Settings, get_settings
from placement_portal.core.errors import InvalidSignature, SignatureTooLarge

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.pdf'}
ALLOWED_CONTENT_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'application/pdf'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def save_signature(file: Optional[UploadFile], user_id: str,
                         settings: Optional[Settings] = None) -> str:
    """
    Validate and store an uploaded signature.

    Args:
        file: FastAPI UploadFile (may be None when the field was omitted)
        user_id: owner, embedded in the stored filename

    Returns:
        Stored filename (the signature reference kept on the consent record)

    Raises:
        InvalidSignature / SignatureTooLarge on validation errors
    """
    settings = settings or get_settings()

    if file is None or not file.filename:
        raise InvalidSignature()

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidSignature(f"Invalid file type '{ext}' for signature. Allowed: JPG, PNG, PDF")
    if file.content_type and file.content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidSignature(f"Invalid content type '{file.content_type}' for signature")

    content = file.file.read()
    if not content:
        raise InvalidSignature("Signature file is empty")

    max_bytes = settings.signature_max_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise SignatureTooLarge(f"File too large. Maximum size: {settings.signature_max_size_mb}MB")

    upload_dir = Path(settings.signature_upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    filename = f"signature_{user_id}_{int(time.time() * 1000)}{ext}"
    (upload_dir / filename).write_bytes(content)
    return filename


def discard_signature(filename: str, settings: Optional[Settings] = None) -> None:
    """Remove a stored signature whose consent record was never saved."""
    settings = settings or get_settings()
    (Path(settings.signature_upload_dir) / filename).unlink(missing_ok=True)
