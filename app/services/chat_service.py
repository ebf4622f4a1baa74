from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from app.events.chat_events import (
    message_added,
    message_chunk,
    room_created,
    room_title_assigned,
    turn_finished,
    turn_finished_event_type,
    turn_state_changed,
)
from app.events.sse_event import SseEvent
from app.models.chat.enums import ChatRole, TurnState
from app.models.chat.models import ChatMessage, ChatRoom, FileAttachment
from app.models.document.models import UploadedFile
from app.services.conversation_store import ConversationStore
from app.services.document_service import DocumentService
from app.services.extraction_service import (
    format_extracted_data,
    generate_schema_from_query,
    parse_extraction_result,
)
from app.services.llm.llm_message import LlmMessage
from app.services.llm.llm_service_base import LlmService
from app.services.llm_logging_service import LlmLoggingService
from prompts.chat_prompts import (
    ASSISTANT_ERROR_MESSAGE,
    ATTACHMENT_CONTENT_TEMPLATE,
    ATTACHMENT_EXTRACTED_TEMPLATE,
    ATTACHMENT_HEADER_TEMPLATE,
    DOCUMENT_PARSE_FAILED_MARKER,
    FILE_ONLY_MESSAGE_TEMPLATE,
    FILE_ONLY_TITLE_TEMPLATE,
    USER_QUESTION_TEMPLATE,
)
from utils import not_none


def compose_attachment_message(
    filename: str,
    question: str,
    parsed_content: str | None = None,
    extracted_data: dict[str, Any] | None = None,
) -> str:
    """Fold an attachment's parsed text and extracted fields into the text sent to the model"""
    content = ATTACHMENT_HEADER_TEMPLATE.format(filename=filename)
    if parsed_content:
        content += ATTACHMENT_CONTENT_TEMPLATE.format(content=parsed_content)
    if extracted_data is not None:
        content += ATTACHMENT_EXTRACTED_TEMPLATE.format(extracted=format_extracted_data(extracted_data))
    content += USER_QUESTION_TEMPLATE.format(question=question)
    return content


class ChatService:
    def __init__(
        self,
        store: ConversationStore,
        llm_service: LlmService,
        document_service: DocumentService,
        llm_logging_service: LlmLoggingService | None = None,
    ) -> None:
        self._store = store
        self._llm_service = llm_service
        self._document_service = document_service
        self._llm_logging_service = llm_logging_service

    @property
    def current_room_id(self) -> str | None:
        return self._store.current_room_id

    @property
    def is_new_chat(self) -> bool:
        return self._store.is_new_chat

    def create_room(self) -> ChatRoom:
        return self._store.create_room()

    def select_room(self, room_id: str) -> None:
        self._store.select_room(room_id)

    def list_rooms(self) -> list[ChatRoom]:
        return self._store.list_rooms()

    def get_messages(self, room_id: str) -> list[ChatMessage]:
        return self._store.get_messages(room_id)

    def turn_state(self, room_id: str) -> TurnState:
        return self._store.turn_state(room_id)

    def _enter_state(self, room_id: str, turn_state: TurnState) -> SseEvent:
        self._store.set_turn_state(room_id, turn_state)
        return turn_state_changed(room_id, turn_state)

    async def _parse_attachment(self, file: UploadedFile) -> tuple[str, str | None]:
        """
        Parse an attached file.
        Returns the text to use for this turn and the text to keep on the attachment.
        A failed parse yields a marker for this turn only and nothing on the attachment.
        """
        try:
            result = await self._document_service.parse_document(file)
        except Exception as e:
            print(f"Error parsing document {file.name}: {e}")
            return DOCUMENT_PARSE_FAILED_MARKER, None

        parsed_content = result.content.text if result.content else ""
        return parsed_content, parsed_content

    async def _extract_fields(self, file: UploadedFile, query: str) -> dict[str, Any] | None:
        try:
            schema = generate_schema_from_query(query)
            result = await self._llm_service.extract_information(file, schema)
        except Exception as e:
            print(f"Error extracting information from {file.name}: {e}")
            return None

        return parse_extraction_result(result)

    def _history_content(self, message: ChatMessage) -> str:
        attachment = message.attachment
        if attachment is not None and attachment.parsed_content:
            return compose_attachment_message(
                filename=attachment.name,
                question=message.content,
                parsed_content=attachment.parsed_content,
            )
        return message.content

    def _prepare_llm_messages(
        self,
        history: list[ChatMessage],
        display_content: str,
        parsed_content: str,
        attachment: FileAttachment | None,
    ) -> list[LlmMessage]:
        messages = [
            LlmMessage(role=msg.role.value, content=self._history_content(msg))
            for msg in history
        ]

        extracted_data = attachment.extracted_data if attachment else None
        if attachment is not None and (parsed_content or extracted_data is not None):
            messages.append(LlmMessage.user(compose_attachment_message(
                filename=attachment.name,
                question=display_content,
                parsed_content=parsed_content,
                extracted_data=extracted_data,
            )))
        else:
            messages.append(LlmMessage.user(display_content))

        return messages

    async def stream_message(
        self,
        content: str,
        file: UploadedFile | None = None,
    ) -> AsyncGenerator[SseEvent, None]:
        """
        Run one chat turn in the selected room, creating a room first if none is selected.
        A selected id the store does not know is treated like no selection, so the turn gets a new room.
        The attachment (if any) is parsed, images are additionally run through field extraction,
        the user message is recorded and the assistant reply is streamed into the room.
        Yields an event for every change made to the room.
        """
        if not content and file is None:
            raise ValueError("A message needs text content or a file")

        room_id = self._store.current_room_id
        created_room = None
        if room_id is None or self._store.get_room(room_id) is None:
            created_room = self._store.create_room()
            room_id = created_room.id

        # The room is busy from here on, before anything is handed to the consumer
        self._store.set_turn_state(room_id, TurnState.PREPARING)

        # Everything already in the room is replayed to the model ahead of this turn
        history = self._store.get_messages(room_id)

        try:
            if created_room is not None:
                yield room_created(created_room)
            yield turn_state_changed(room_id, TurnState.PREPARING)

            parsed_content = ""
            attachment: FileAttachment | None = None
            if file is not None:
                yield self._enter_state(room_id, TurnState.PARSING_FILE)
                parsed_content, stored_parsed_content = await self._parse_attachment(file)

                extracted_data = None
                if file.is_image() and content:
                    yield self._enter_state(room_id, TurnState.EXTRACTING)
                    extracted_data = await self._extract_fields(file, content)

                attachment = FileAttachment(
                    name=file.name,
                    content_type=file.content_type,
                    size=file.size,
                    parsed_content=stored_parsed_content,
                    extracted_data=extracted_data,
                )

            display_content = content or FILE_ONLY_MESSAGE_TEMPLATE.format(filename=file.name)
            user_message = ChatMessage(
                id=self._store.next_id(),
                role=ChatRole.USER,
                content=display_content,
                created_at=datetime.now(timezone.utc),
                attachment=attachment,
            )
            self._store.add_message(room_id, user_message)
            yield message_added(room_id, user_message)

            title_source = content or FILE_ONLY_TITLE_TEMPLATE.format(filename=file.name)
            if self._store.assign_title(room_id, title_source):
                yield room_title_assigned(not_none(self._store.get_room(room_id), f"Room {room_id}"))

            llm_messages = self._prepare_llm_messages(history, display_content, parsed_content, attachment)

            yield self._enter_state(room_id, TurnState.STREAMING)
            assistant_message = ChatMessage(
                id=self._store.next_id(),
                role=ChatRole.ASSISTANT,
                content="",
                created_at=datetime.now(timezone.utc),
            )
            self._store.add_message(room_id, assistant_message)
            yield message_added(room_id, assistant_message)

            logger = self._llm_logging_service.create_for_room(room_id) if self._llm_logging_service else None

            failed = False
            try:
                async for chunk in self._llm_service.stream_chat(llm_messages, logger=logger):
                    self._store.append_to_message(room_id, assistant_message.id, chunk)
                    yield message_chunk(room_id, assistant_message.id, chunk)
            except Exception as e:
                print(f"Error streaming response: {e}")
                failed = True
                # A reply that already received text is kept as it is
                self._store.replace_empty_reply(room_id, assistant_message.id, ASSISTANT_ERROR_MESSAGE)
        finally:
            self._store.set_turn_state(room_id, TurnState.IDLE)

        yield turn_state_changed(room_id, TurnState.IDLE)
        yield turn_finished(room_id, assistant_message, failed)

    async def send_message(self, content: str, file: UploadedFile | None = None) -> ChatMessage:
        """Run a full turn and return the assistant's reply once streaming has ended"""
        assistant_message: ChatMessage | None = None
        async for event in self.stream_message(content, file):
            if event.event_type == turn_finished_event_type:
                assistant_message = self._store.get_message(
                    event.metadata["room_id"],
                    event.metadata["message_id"],
                )

        return not_none(assistant_message, "Assistant reply")
