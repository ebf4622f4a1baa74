from datetime import datetime
from dataclasses import dataclass, field
from typing import Any

from app.models.chat.enums import ChatRole, TurnState
from app.models.chat.responses import (
    ChatMessageResponse,
    ChatRoomResponse,
    FileAttachmentResponse,
)


@dataclass(frozen=True)
class FileAttachment:
    """File metadata carried on a message, with whatever parsing and extraction produced"""
    name: str
    content_type: str
    size: int
    parsed_content: str | None = None
    extracted_data: dict[str, Any] | None = None

    def to_response(self) -> FileAttachmentResponse:
        return FileAttachmentResponse(
            name=self.name,
            content_type=self.content_type,
            size=self.size,
            parsed_content=self.parsed_content,
            extracted_data=self.extracted_data,
        )


@dataclass
class ChatMessage:
    id: str
    role: ChatRole
    content: str
    created_at: datetime
    attachment: FileAttachment | None = None

    def to_response(self) -> ChatMessageResponse:
        return ChatMessageResponse(
            id=self.id,
            role=self.role.value,
            content=self.content,
            created_at=self.created_at,
            attachment=self.attachment.to_response() if self.attachment else None,
        )


@dataclass
class ChatRoom:
    id: str
    title: str
    created_at: datetime
    last_message: str | None = None
    title_assigned: bool = False

    def to_response(self) -> ChatRoomResponse:
        return ChatRoomResponse(
            id=self.id,
            title=self.title,
            last_message=self.last_message,
            created_at=self.created_at,
        )


@dataclass
class RoomState:
    """Mutable per-room bookkeeping owned by the conversation store"""
    room: ChatRoom
    messages: list[ChatMessage] = field(default_factory=list)
    turn_state: TurnState = TurnState.IDLE
