"""Shared fakes for the Upstage-facing services and fixtures wiring them into the app."""

import json
from typing import Any, AsyncGenerator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_chat_service,
    get_document_service,
    get_llm_service,
    get_settings,
)
from app.models.document.models import UploadedFile
from app.models.document.responses import DocumentContent, DocumentParseResult, OcrResult
from app.services.chat_service import ChatService
from app.services.conversation_store import ConversationStore
from app.services.llm.llm_message import LlmMessage
from app.services.llm.llm_service_base import LlmLogger, LlmService
from app.settings import Settings
from main import app


class FakeLlmService(LlmService):
    """Streams preset chunks, then optionally fails; records every call"""

    def __init__(self) -> None:
        self.chunks: list[str] = ["안녕하세요", "!"]
        self.stream_error: Exception | None = None
        self.extraction_result: dict[str, Any] | None = None
        self.extraction_error: Exception | None = None
        self.stream_calls: list[list[LlmMessage]] = []
        self.extraction_calls: list[tuple[UploadedFile, dict[str, Any]]] = []

    async def stream_chat(
        self,
        messages: list[LlmMessage],
        logger: LlmLogger | None = None,
    ) -> AsyncGenerator[str, None]:
        self.stream_calls.append(list(messages))
        for chunk in self.chunks:
            yield chunk
        if self.stream_error is not None:
            raise self.stream_error

    async def extract_information(self, file: UploadedFile, schema: dict[str, Any]) -> dict[str, Any]:
        self.extraction_calls.append((file, schema))
        if self.extraction_error is not None:
            raise self.extraction_error
        return self.extraction_result or extraction_envelope({})


class FakeDocumentService:
    def __init__(self) -> None:
        self.parsed_text = "문서 본문"
        self.parse_error: Exception | None = None
        self.ocr_result = OcrResult(text="OCR text")
        self.parse_calls: list[UploadedFile] = []

    async def parse_document(self, file: UploadedFile) -> DocumentParseResult:
        self.parse_calls.append(file)
        if self.parse_error is not None:
            raise self.parse_error
        return DocumentParseResult(
            content=DocumentContent(html=f"<p>{self.parsed_text}</p>", text=self.parsed_text),
            model="document-parse",
        )

    async def perform_ocr(self, file: UploadedFile) -> OcrResult:
        if self.parse_error is not None:
            raise self.parse_error
        return self.ocr_result


def extraction_envelope(data: dict[str, Any] | str) -> dict[str, Any]:
    content = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    return {
        "id": "extraction-1",
        "choices": [
            {
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
        "model": "information-extract",
        "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
    }


def parse_sse(body: str) -> list[dict[str, Any]]:
    events = []
    for block in body.split("\n\n"):
        for line in block.splitlines():
            if line.startswith("data: "):
                events.append(json.loads(line[len("data: "):]))
    return events


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def llm_service() -> FakeLlmService:
    return FakeLlmService()


@pytest.fixture
def document_service() -> FakeDocumentService:
    return FakeDocumentService()


@pytest.fixture
def chat_service(store, llm_service, document_service) -> ChatService:
    return ChatService(
        store=store,
        llm_service=llm_service,
        document_service=document_service,
    )


@pytest.fixture
def test_settings() -> Settings:
    return Settings(upstage_api_key="test-key", max_upload_size_bytes=1024)


@pytest.fixture
def client(chat_service, llm_service, document_service, test_settings):
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    app.dependency_overrides[get_llm_service] = lambda: llm_service
    app.dependency_overrides[get_document_service] = lambda: document_service
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
