from typing import Annotated

from fastapi import Depends

from app.services.chat_service import ChatService
from app.services.conversation_store import ConversationStore
from app.services.document_service import DocumentService
from app.services.llm.llm_service_base import LlmService
from app.services.llm.llm_service import UpstageLlmService
from app.services.llm_logging_service import LlmLoggingService
from app.settings import Settings, settings

# Singleton instances
_conversation_store_instance = ConversationStore()
_llm_service_instance = UpstageLlmService(settings)
_document_service_instance = DocumentService(settings)
_llm_logging_service_instance = LlmLoggingService(
    logs_dir=settings.logs_path,
    enabled=settings.llm_logging_enabled,
)
_chat_service_instance = ChatService(
    store=_conversation_store_instance,
    llm_service=_llm_service_instance,
    document_service=_document_service_instance,
    llm_logging_service=_llm_logging_service_instance,
)


def get_settings() -> Settings:
    """Get the application settings"""
    return settings


def get_llm_service() -> LlmService:
    """Get the singleton LlmService instance"""
    return _llm_service_instance


def get_document_service() -> DocumentService:
    """Get the singleton DocumentService instance"""
    return _document_service_instance


def get_chat_service() -> ChatService:
    """Get the singleton ChatService instance"""
    return _chat_service_instance


# Type annotations for dependencies
SettingsDep = Annotated[Settings, Depends(get_settings)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
LLMServiceDep = Annotated[LlmService, Depends(get_llm_service)]
