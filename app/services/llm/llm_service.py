from typing import Any, AsyncGenerator
import httpx
from openai import AsyncOpenAI

from app.models.document.models import UploadedFile
from app.models.extraction.models import ExtractionSchema
from app.services.llm.llm_service_base import LlmService, LlmLogger
from app.services.llm.llm_message import LlmMessage
from app.services.llm.llm_file import DocumentImage
from app.settings import Settings


EXTRACTION_SCHEMA_NAME = "document_schema"


class UpstageLlmService(LlmService):
    """Upstage implementation of LLM service (OpenAI-compatible API)"""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._http_client = http_client

    def _client(self, base_url: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            base_url=base_url,
            api_key=self._settings.upstage_api_key,
            http_client=self._http_client,
            max_retries=0,
        )

    async def stream_chat(
        self,
        messages: list[LlmMessage],
        logger: LlmLogger | None = None,
    ) -> AsyncGenerator[str, None]:
        """
        Stream a chat completion from Solar, yielding text deltas as they arrive.
        """
        model = self._settings.chat_model
        if logger:
            logger.log_request(model, messages)

        client = self._client(self._settings.upstage_base_url)

        stream = await client.chat.completions.create(
            model=model,
            messages=[msg.to_dict() for msg in messages],
            reasoning_effort=self._settings.chat_reasoning_effort,
            stream=True,
        )

        reply = ""
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if not delta:
                continue

            reply += delta
            yield delta

        if logger:
            logger.log_response(model, LlmMessage.assistant(reply))

    async def extract_information(
        self,
        file: UploadedFile,
        schema: ExtractionSchema,
    ) -> dict[str, Any]:
        """
        Run schema-guided information extraction on a document image.
        """
        client = self._client(self._settings.upstage_extraction_base_url)

        response = await client.chat.completions.create(
            model=self._settings.extraction_model,
            messages=[
                {
                    "role": "user",
                    "content": [DocumentImage(content=file.content).to_dict()],
                },
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": EXTRACTION_SCHEMA_NAME,
                    "schema": schema,
                },
            },
        )

        return response.model_dump()
