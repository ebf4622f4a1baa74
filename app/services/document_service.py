from typing import Any

import httpx

from app.models.document.models import UploadedFile
from app.models.document.responses import DocumentParseResult, OcrResult
from app.settings import Settings


DOCUMENT_PARSE_MODEL = "document-parse"
OCR_MODEL = "ocr"


class UpstageApiError(Exception):
    """Raised when an Upstage endpoint answers with a non-success status"""

    def __init__(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Upstage API error {status_code}: {self.error_message()}")

    def error_message(self) -> str:
        if isinstance(self.payload, dict):
            error = self.payload.get("error")
            if isinstance(error, str):
                return error
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(self.payload.get("message"), str):
                return self.payload["message"]
        return str(self.payload)


class DocumentService:
    """Client for Upstage document digitization (document parse and OCR)"""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport

    async def _digitize(self, file: UploadedFile, model: str) -> dict[str, Any]:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._settings.document_timeout_seconds) as client:
            response = await client.post(
                self._settings.upstage_document_url,
                headers={"Authorization": f"Bearer {self._settings.upstage_api_key}"},
                files={
                    "document": (file.name or "document", file.content, file.content_type or "application/octet-stream"),
                },
                data={"model": model},
            )

        try:
            payload = response.json()
        except ValueError:
            payload = {"error": response.text}

        if not response.is_success:
            raise UpstageApiError(response.status_code, payload)

        return payload

    async def parse_document(self, file: UploadedFile) -> DocumentParseResult:
        """Parse a document into text / HTML plus per-element metadata"""
        payload = await self._digitize(file, DOCUMENT_PARSE_MODEL)
        return DocumentParseResult.model_validate(payload)

    async def perform_ocr(self, file: UploadedFile) -> OcrResult:
        """Run OCR on a document or image"""
        payload = await self._digitize(file, OCR_MODEL)
        return OcrResult.model_validate(payload)
