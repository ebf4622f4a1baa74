from dataclasses import dataclass


DOCUMENT_CONTENT_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
]


@dataclass
class UploadedFile:
    """A file received from the client, held in memory for the duration of a turn"""
    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def is_document(self) -> bool:
        return self.content_type in DOCUMENT_CONTENT_TYPES or self.is_image()
