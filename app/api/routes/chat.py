from typing import AsyncGenerator

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse

from app.api.dependencies import ChatServiceDep, SettingsDep
from app.api.uploads import UnsupportedFileTypeError, UploadTooLargeError, read_upload
from app.models.chat.enums import TurnState
from app.models.chat.responses import (
    ChatMessageResponse,
    ChatRoomListResponse,
    ChatRoomResponse,
    ChatStateResponse,
)
from app.services.chat_service import ChatService

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
)


def _state_response(chat_service: ChatService) -> ChatStateResponse:
    room_id = chat_service.current_room_id
    turn_state = chat_service.turn_state(room_id) if room_id is not None else TurnState.IDLE
    return ChatStateResponse(
        current_room_id=room_id,
        is_new_chat=chat_service.is_new_chat,
        turn_state=turn_state,
        is_parsing_file=turn_state == TurnState.PARSING_FILE,
        is_extracting=turn_state == TurnState.EXTRACTING,
        is_loading=turn_state == TurnState.STREAMING,
    )


@router.post("/rooms", response_model=ChatRoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(chat_service: ChatServiceDep) -> ChatRoomResponse:
    return chat_service.create_room().to_response()


@router.get("/rooms", response_model=ChatRoomListResponse)
async def list_rooms(chat_service: ChatServiceDep) -> ChatRoomListResponse:
    return ChatRoomListResponse(
        rooms=[room.to_response() for room in chat_service.list_rooms()],
        current_room_id=chat_service.current_room_id,
    )


@router.post("/rooms/{room_id}/select", response_model=ChatStateResponse)
async def select_room(room_id: str, chat_service: ChatServiceDep) -> ChatStateResponse:
    chat_service.select_room(room_id)
    return _state_response(chat_service)


@router.get("/rooms/{room_id}/messages", response_model=list[ChatMessageResponse])
async def get_messages(room_id: str, chat_service: ChatServiceDep) -> list[ChatMessageResponse]:
    # Unknown rooms read the same as rooms with no messages yet
    return [m.to_response() for m in chat_service.get_messages(room_id)]


@router.get("/state", response_model=ChatStateResponse)
async def get_state(chat_service: ChatServiceDep) -> ChatStateResponse:
    return _state_response(chat_service)


@router.post("/messages", status_code=status.HTTP_200_OK)
async def send_message(
    chat_service: ChatServiceDep,
    app_settings: SettingsDep,
    content: str = Form(""),
    file: UploadFile | None = File(None),
) -> StreamingResponse:
    """
    Send a message (and optionally a file) to the selected room.
    The turn is streamed back as Server-Sent Events.
    """
    if not content and file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message content or a file is required",
        )

    room_id = chat_service.current_room_id
    if room_id is not None and chat_service.turn_state(room_id) != TurnState.IDLE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A message is already being processed in this room",
        )

    uploaded_file = None
    if file is not None:
        try:
            uploaded_file = await read_upload(file, app_settings.max_upload_size_bytes)
        except UploadTooLargeError as e:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=str(e),
            )
        except UnsupportedFileTypeError as e:
            raise HTTPException(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                detail=str(e),
            )

    async def event_generator() -> AsyncGenerator[str, None]:
        async for event in chat_service.stream_message(content, uploaded_file):
            yield event.format_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering in nginx
        },
    )
