import base64
from dataclasses import dataclass
from typing import Any


@dataclass
class DocumentImage:
    """Raw file bytes sent to the extraction model as an image part"""
    content: bytes
    # Extraction accepts any document type behind a generic data URL
    type: str = "application/octet-stream"

    def to_dict(self) -> dict[str, Any]:
        encoded_content = base64.b64encode(self.content).decode('utf-8')
        return {
            "type": "image_url",
            "image_url": {
                "url": f"data:{self.type};base64,{encoded_content}"
            }
        }
