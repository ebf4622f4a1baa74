from fastapi import UploadFile

from app.models.document.models import UploadedFile


class UploadTooLargeError(ValueError):
    """Raised when an uploaded file exceeds the configured size limit"""
    pass


class UnsupportedFileTypeError(ValueError):
    """Raised when an uploaded file is neither an image nor an office/PDF document"""
    pass


async def read_upload(upload: UploadFile, max_size_bytes: int) -> UploadedFile:
    """Read an upload into memory, refusing anything over `max_size_bytes` or of an unsupported type"""
    # One byte past the limit is enough to tell an oversized file apart
    content = await upload.read(max_size_bytes + 1)
    if len(content) > max_size_bytes:
        raise UploadTooLargeError(
            f"File '{upload.filename}' exceeds the maximum upload size of {max_size_bytes} bytes"
        )

    file = UploadedFile(
        name=upload.filename or "document",
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )
    if not file.is_document():
        raise UnsupportedFileTypeError(f"Unsupported file type: {file.content_type}")

    return file
