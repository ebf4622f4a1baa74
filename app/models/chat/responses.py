from datetime import datetime
from typing import Any

from pydantic import BaseModel

from app.models.chat.enums import TurnState


class FileAttachmentResponse(BaseModel):
    name: str
    content_type: str
    size: int
    parsed_content: str | None
    extracted_data: dict[str, Any] | None


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    content: str
    created_at: datetime
    attachment: FileAttachmentResponse | None


class ChatRoomResponse(BaseModel):
    id: str
    title: str
    last_message: str | None
    created_at: datetime


class ChatRoomListResponse(BaseModel):
    rooms: list[ChatRoomResponse]
    current_room_id: str | None


class ChatStateResponse(BaseModel):
    current_room_id: str | None
    is_new_chat: bool
    turn_state: TurnState
    is_parsing_file: bool
    is_extracting: bool
    is_loading: bool
