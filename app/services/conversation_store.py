import time
from datetime import datetime, timezone

from app.models.chat.enums import ChatRole, TurnState
from app.models.chat.models import ChatMessage, ChatRoom, RoomState
from prompts.chat_prompts import CHAT_TITLE_ELLIPSIS, CHAT_TITLE_MAX_LENGTH, NEW_CHAT_TITLE
from utils import truncate


def truncate_title(text: str) -> str:
    return truncate(text, CHAT_TITLE_MAX_LENGTH, CHAT_TITLE_ELLIPSIS)


class TimeIdGenerator:
    """Millisecond-timestamp identifiers, bumped forward when two are requested in the same millisecond"""

    def __init__(self) -> None:
        self._last = 0

    def next_id(self) -> str:
        candidate = time.time_ns() // 1_000_000
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


class ConversationStore:
    """
    In-memory chat rooms and their message lists.
    All mutation of chat state goes through this object; nothing is persisted.
    """

    def __init__(self, id_generator: TimeIdGenerator | None = None) -> None:
        self._ids = id_generator or TimeIdGenerator()
        self._rooms: dict[str, RoomState] = {}
        # Most recently created first
        self._room_order: list[str] = []
        self._current_room_id: str | None = None

    def next_id(self) -> str:
        return self._ids.next_id()

    @property
    def current_room_id(self) -> str | None:
        return self._current_room_id

    @property
    def is_new_chat(self) -> bool:
        return self._current_room_id is None or not self.get_messages(self._current_room_id)

    def create_room(self) -> ChatRoom:
        room = ChatRoom(
            id=self._ids.next_id(),
            title=NEW_CHAT_TITLE,
            created_at=datetime.now(timezone.utc),
        )
        self._rooms[room.id] = RoomState(room=room)
        self._room_order.insert(0, room.id)
        self._current_room_id = room.id
        return room

    def select_room(self, room_id: str) -> None:
        self._current_room_id = room_id

    def list_rooms(self) -> list[ChatRoom]:
        return [self._rooms[room_id].room for room_id in self._room_order]

    def get_room(self, room_id: str) -> ChatRoom | None:
        state = self._rooms.get(room_id)
        return state.room if state else None

    def get_messages(self, room_id: str) -> list[ChatMessage]:
        state = self._rooms.get(room_id)
        if state is None:
            return []
        return list(state.messages)

    def get_message(self, room_id: str, message_id: str) -> ChatMessage | None:
        state = self._rooms.get(room_id)
        if state is None:
            return None
        for message in state.messages:
            if message.id == message_id:
                return message
        return None

    def _require_room(self, room_id: str) -> RoomState:
        state = self._rooms.get(room_id)
        if state is None:
            raise KeyError(f"Chat room {room_id} does not exist")
        return state

    def add_message(self, room_id: str, message: ChatMessage) -> None:
        state = self._require_room(room_id)
        state.messages.append(message)
        if message.content:
            state.room.last_message = message.content

    def append_to_message(self, room_id: str, message_id: str, chunk: str) -> bool:
        """
        Append a streamed fragment to the tail message of a room.
        Fragments addressed to any message other than the tail are dropped.
        """
        state = self._require_room(room_id)
        if not state.messages or state.messages[-1].id != message_id:
            return False

        message = state.messages[-1]
        message.content += chunk
        state.room.last_message = message.content
        return True

    def replace_empty_reply(self, room_id: str, message_id: str, content: str) -> bool:
        """Set the content of the tail assistant message, only if nothing has been streamed into it yet"""
        state = self._require_room(room_id)
        if not state.messages:
            return False

        message = state.messages[-1]
        if message.id != message_id or message.role != ChatRole.ASSISTANT or message.content != "":
            return False

        message.content = content
        state.room.last_message = content
        return True

    def assign_title(self, room_id: str, text: str) -> bool:
        """Title a room from its first message. Later calls leave the title unchanged."""
        state = self._require_room(room_id)
        if state.room.title_assigned:
            return False

        state.room.title = truncate_title(text)
        state.room.title_assigned = True
        return True

    def turn_state(self, room_id: str) -> TurnState:
        state = self._rooms.get(room_id)
        return state.turn_state if state else TurnState.IDLE

    def set_turn_state(self, room_id: str, turn_state: TurnState) -> None:
        self._require_room(room_id).turn_state = turn_state
