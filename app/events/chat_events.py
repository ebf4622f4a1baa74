from uuid import uuid4

from app.events.sse_event import SseEvent
from app.models.chat.enums import TurnState
from app.models.chat.models import ChatMessage, ChatRoom


room_created_event_type = "room.created"
room_title_assigned_event_type = "room.title_assigned"
turn_state_changed_event_type = "turn.state_changed"
message_added_event_type = "message.added"
message_chunk_event_type = "message.chunk"
turn_finished_event_type = "turn.finished"


def _room_content(room: ChatRoom) -> dict:
    return {
        "room_id": room.id,
        "title": room.title,
        "created_at": room.created_at.isoformat(),
    }


def room_created(room: ChatRoom) -> SseEvent:
    return SseEvent(
        event_type=room_created_event_type,
        content=_room_content(room),
        metadata={"room_id": room.id},
        event_id=str(uuid4()),
    )


def room_title_assigned(room: ChatRoom) -> SseEvent:
    return SseEvent(
        event_type=room_title_assigned_event_type,
        content=_room_content(room),
        metadata={"room_id": room.id},
        event_id=str(uuid4()),
    )


def turn_state_changed(room_id: str, turn_state: TurnState) -> SseEvent:
    return SseEvent(
        event_type=turn_state_changed_event_type,
        content={"turn_state": turn_state.value},
        metadata={"room_id": room_id},
        event_id=str(uuid4()),
    )


def message_added(room_id: str, message: ChatMessage) -> SseEvent:
    return SseEvent(
        event_type=message_added_event_type,
        content=message.to_response().model_dump(mode="json"),
        metadata={
            "room_id": room_id,
            "message_id": message.id,
        },
        event_id=str(uuid4()),
    )


def message_chunk(room_id: str, message_id: str, chunk: str) -> SseEvent:
    return SseEvent(
        event_type=message_chunk_event_type,
        content={"content": chunk},
        metadata={
            "room_id": room_id,
            "message_id": message_id,
        },
        event_id=str(uuid4()),
    )


def turn_finished(room_id: str, message: ChatMessage, failed: bool) -> SseEvent:
    return SseEvent(
        event_type=turn_finished_event_type,
        content={
            "message_id": message.id,
            "content": message.content,
            "failed": failed,
        },
        metadata={
            "room_id": room_id,
            "message_id": message.id,
        },
        event_id=str(uuid4()),
    )
