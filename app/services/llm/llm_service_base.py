from abc import abstractmethod, ABC
from typing import Any, AsyncGenerator

from app.models.document.models import UploadedFile
from app.models.extraction.models import ExtractionSchema
from app.services.llm.llm_message import LlmMessage


class LlmLogger(ABC):
    @abstractmethod
    def log_request(self, model: str, messages: list[LlmMessage]) -> None:
        pass

    @abstractmethod
    def log_response(self, model: str, response: LlmMessage) -> None:
        pass


class LlmService(ABC):
    """Abstract base class for LLM service implementations"""

    @abstractmethod
    def stream_chat(
        self,
        messages: list[LlmMessage],
        logger: LlmLogger | None = None,
    ) -> AsyncGenerator[str, None]:
        """
        Stream a chat completion for `messages` (system, user and assistant turns in order).
        Yields the non-empty text fragments of the reply in the order they arrive.
        Transport errors are raised from the generator at whatever point they occur.
        """
        pass

    @abstractmethod
    async def extract_information(
        self,
        file: UploadedFile,
        schema: ExtractionSchema,
    ) -> dict[str, Any]:
        """
        Ask the extraction model to fill `schema` from `file`.
        Returns the raw chat-completion envelope; the first choice's message content
        is a JSON string conforming to the schema.
        """
        pass
