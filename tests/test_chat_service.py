"""Tests for the chat turn engine, driven through fake Upstage services."""

import pytest

from app.events.chat_events import (
    message_added_event_type,
    message_chunk_event_type,
    room_created_event_type,
    turn_state_changed_event_type,
)
from app.models.chat.enums import ChatRole, TurnState
from app.models.document.models import UploadedFile
from prompts.chat_prompts import ASSISTANT_ERROR_MESSAGE, DOCUMENT_PARSE_FAILED_MARKER
from conftest import extraction_envelope


def _image(name: str = "statement.png") -> UploadedFile:
    return UploadedFile(name=name, content_type="image/png", content=b"\x89PNG fake")


def _pdf(name: str = "report.pdf") -> UploadedFile:
    return UploadedFile(name=name, content_type="application/pdf", content=b"%PDF-1.4 fake")


async def _collect(chat_service, content, file=None):
    return [event async for event in chat_service.stream_message(content, file)]


@pytest.mark.asyncio
async def test_first_message_creates_selects_and_titles_one_room(chat_service, store):
    events = await _collect(chat_service, "안녕하세요")

    rooms = store.list_rooms()
    assert len(rooms) == 1
    assert store.current_room_id == rooms[0].id
    assert rooms[0].title == "안녕하세요"
    assert [e.event_type for e in events].count(room_created_event_type) == 1


@pytest.mark.asyncio
async def test_reply_is_streamed_into_assistant_message(chat_service, store, llm_service):
    llm_service.chunks = ["Hel", "lo", " there"]

    reply = await chat_service.send_message("hi")

    messages = store.get_messages(store.current_room_id)
    assert [m.role for m in messages] == [ChatRole.USER, ChatRole.ASSISTANT]
    assert messages[0].content == "hi"
    assert reply.content == "Hello there"
    assert messages[1] is reply


@pytest.mark.asyncio
async def test_chunk_events_follow_arrival_order(chat_service, llm_service):
    llm_service.chunks = ["a", "b", "c"]

    events = await _collect(chat_service, "hi")

    chunks = [e.content["content"] for e in events if e.event_type == message_chunk_event_type]
    assert chunks == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_second_message_keeps_title(chat_service, store):
    await chat_service.send_message("first question")
    await chat_service.send_message("second question")

    assert len(store.list_rooms()) == 1
    assert store.list_rooms()[0].title == "first question"
    assert len(store.get_messages(store.current_room_id)) == 4


@pytest.mark.asyncio
async def test_long_first_message_gives_truncated_title(chat_service, store):
    text = "가" * 35

    await chat_service.send_message(text)

    assert store.list_rooms()[0].title == "가" * 30 + "..."


@pytest.mark.asyncio
async def test_message_goes_to_selected_room(chat_service, store):
    first = chat_service.create_room()
    second = chat_service.create_room()
    chat_service.select_room(first.id)

    await chat_service.send_message("for the first room")

    assert len(store.get_messages(first.id)) == 2
    assert store.get_messages(second.id) == []


@pytest.mark.asyncio
async def test_unknown_selected_room_gets_a_new_room(chat_service, store):
    chat_service.select_room("stale-id")

    await chat_service.send_message("hi")

    assert len(store.list_rooms()) == 1
    assert store.current_room_id != "stale-id"


@pytest.mark.asyncio
async def test_stream_failure_before_any_chunk_yields_apology(chat_service, llm_service, store):
    llm_service.chunks = []
    llm_service.stream_error = RuntimeError("connection reset")

    events = await _collect(chat_service, "hi")

    reply = store.get_messages(store.current_room_id)[-1]
    assert reply.content == ASSISTANT_ERROR_MESSAGE
    assert events[-1].content["failed"] is True
    assert events[-1].content["content"] == ASSISTANT_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_stream_failure_after_chunks_keeps_partial_reply(chat_service, llm_service, store):
    llm_service.chunks = ["Hel", "lo"]
    llm_service.stream_error = RuntimeError("connection reset")

    reply = await chat_service.send_message("hi")

    assert reply.content == "Hello"


@pytest.mark.asyncio
async def test_turn_state_goes_through_streaming_back_to_idle(chat_service, store):
    events = await _collect(chat_service, "hi")

    states = [e.content["turn_state"] for e in events if e.event_type == turn_state_changed_event_type]
    assert states == [TurnState.PREPARING.value, TurnState.STREAMING.value, TurnState.IDLE.value]
    assert store.turn_state(store.current_room_id) == TurnState.IDLE


@pytest.mark.asyncio
async def test_turn_state_with_image_goes_through_every_phase(chat_service, llm_service):
    llm_service.extraction_result = extraction_envelope({"bank_name": "KB"})

    events = await _collect(chat_service, "은행 이름", _image())

    states = [e.content["turn_state"] for e in events if e.event_type == turn_state_changed_event_type]
    assert states == ["preparing", "parsing_file", "extracting", "streaming", "idle"]


@pytest.mark.asyncio
async def test_turn_state_resets_after_stream_failure(chat_service, llm_service, store):
    llm_service.stream_error = RuntimeError("boom")

    await chat_service.send_message("hi")

    assert store.turn_state(store.current_room_id) == TurnState.IDLE


@pytest.mark.asyncio
async def test_turn_state_resets_when_consumer_stops_early(chat_service, llm_service, store):
    llm_service.chunks = ["one", "two", "three"]

    stream = chat_service.stream_message("hi")
    async for event in stream:
        if event.event_type == message_chunk_event_type:
            break
    await stream.aclose()

    room_id = store.current_room_id
    assert store.turn_state(room_id) == TurnState.IDLE
    assert store.get_messages(room_id)[-1].content == "one"


@pytest.mark.asyncio
async def test_room_is_busy_from_the_first_event(chat_service, store):
    stream = chat_service.stream_message("hi")

    first = await stream.__anext__()

    assert first.event_type == room_created_event_type
    assert store.turn_state(store.current_room_id) == TurnState.PREPARING
    await stream.aclose()
    assert store.turn_state(store.current_room_id) == TurnState.IDLE


@pytest.mark.asyncio
async def test_room_is_busy_while_user_message_is_recorded(chat_service, store):
    stream = chat_service.stream_message("first")
    async for event in stream:
        if event.event_type == message_added_event_type:
            break

    room_id = store.current_room_id
    assert store.turn_state(room_id) != TurnState.IDLE

    async for _ in stream:
        pass

    assert store.turn_state(room_id) == TurnState.IDLE
    assert [m.role for m in store.get_messages(room_id)] == [ChatRole.USER, ChatRole.ASSISTANT]


@pytest.mark.asyncio
async def test_empty_message_without_file_is_rejected(chat_service, store):
    with pytest.raises(ValueError):
        await chat_service.send_message("")

    assert store.list_rooms() == []


@pytest.mark.asyncio
async def test_plain_message_is_sent_verbatim_after_history(chat_service, llm_service):
    llm_service.chunks = ["first reply"]
    await chat_service.send_message("first")
    llm_service.chunks = ["second reply"]
    await chat_service.send_message("second")

    payload = llm_service.stream_calls[-1]
    assert [(m.role, m.content) for m in payload] == [
        ("user", "first"),
        ("assistant", "first reply"),
        ("user", "second"),
    ]


@pytest.mark.asyncio
async def test_pdf_attachment_text_is_folded_into_request(chat_service, llm_service, document_service, store):
    document_service.parsed_text = "매출 100억"

    await chat_service.send_message("요약해줘", _pdf())

    payload = llm_service.stream_calls[-1]
    assert payload[-1].content == "[첨부 파일: report.pdf]\n\n파일 내용:\n매출 100억\n\n사용자 질문: 요약해줘"

    user_message = store.get_messages(store.current_room_id)[0]
    assert user_message.content == "요약해줘"
    assert user_message.attachment.name == "report.pdf"
    assert user_message.attachment.content_type == "application/pdf"
    assert user_message.attachment.size == len(b"%PDF-1.4 fake")
    assert user_message.attachment.parsed_content == "매출 100억"
    # Only images go through extraction
    assert llm_service.extraction_calls == []


@pytest.mark.asyncio
async def test_attachment_is_replayed_with_its_text_in_later_turns(chat_service, llm_service, document_service):
    document_service.parsed_text = "본문"
    llm_service.chunks = ["요약입니다"]
    await chat_service.send_message("요약해줘", _pdf())
    await chat_service.send_message("더 자세히")

    payload = llm_service.stream_calls[-1]
    assert payload[0].content == "[첨부 파일: report.pdf]\n\n파일 내용:\n본문\n\n사용자 질문: 요약해줘"
    assert payload[1].content == "요약입니다"
    assert payload[2].content == "더 자세히"


@pytest.mark.asyncio
async def test_parse_failure_sends_marker_and_still_records_message(chat_service, llm_service, document_service, store):
    document_service.parse_error = RuntimeError("upstream down")

    reply = await chat_service.send_message("이거 뭐야?", _pdf())

    user_message = store.get_messages(store.current_room_id)[0]
    assert user_message.content == "이거 뭐야?"
    assert user_message.attachment.parsed_content is None
    assert DOCUMENT_PARSE_FAILED_MARKER in llm_service.stream_calls[-1][-1].content
    assert reply.content == "안녕하세요!"
    assert store.turn_state(store.current_room_id) == TurnState.IDLE


@pytest.mark.asyncio
async def test_parse_failure_marker_is_not_replayed(chat_service, llm_service, document_service):
    document_service.parse_error = RuntimeError("upstream down")
    await chat_service.send_message("이거 뭐야?", _pdf())
    await chat_service.send_message("다시")

    payload = llm_service.stream_calls[-1]
    assert payload[0].content == "이거 뭐야?"


@pytest.mark.asyncio
async def test_image_with_question_is_run_through_extraction(chat_service, llm_service, document_service, store):
    document_service.parsed_text = ""
    llm_service.extraction_result = extraction_envelope({"bank_name": "KB", "balance": ""})

    await chat_service.send_message("은행 잔액 알려줘", _image())

    _, schema = llm_service.extraction_calls[0]
    assert set(schema["properties"]) == {"bank_name", "balance"}

    attachment = store.get_messages(store.current_room_id)[0].attachment
    assert attachment.extracted_data == {"bank_name": "KB", "balance": ""}

    sent = llm_service.stream_calls[-1][-1].content
    assert sent == (
        "[첨부 파일: statement.png]\n\n"
        "추출된 정보:\n📋 **추출된 정보:**\n\n🏦 은행명: KB\n\n"
        "사용자 질문: 은행 잔액 알려줘"
    )


@pytest.mark.asyncio
async def test_image_without_question_skips_extraction(chat_service, llm_service, store):
    await chat_service.send_message("", _image("scan.png"))

    assert llm_service.extraction_calls == []
    room = store.list_rooms()[0]
    assert room.title == "📎 scan.png"
    assert store.get_messages(room.id)[0].content == "scan.png 파일을 분석해주세요."


@pytest.mark.asyncio
async def test_file_only_message_without_parsed_text_is_sent_verbatim(chat_service, llm_service, document_service):
    document_service.parsed_text = ""

    await chat_service.send_message("", _pdf("empty.pdf"))

    assert llm_service.stream_calls[-1][-1].content == "empty.pdf 파일을 분석해주세요."


@pytest.mark.asyncio
async def test_extraction_failure_leaves_fields_unset(chat_service, llm_service, store):
    llm_service.extraction_error = RuntimeError("extraction down")

    reply = await chat_service.send_message("계좌 번호", _image())

    attachment = store.get_messages(store.current_room_id)[0].attachment
    assert attachment.extracted_data is None
    assert attachment.parsed_content == "문서 본문"
    assert reply.content == "안녕하세요!"


@pytest.mark.asyncio
async def test_malformed_extraction_result_is_treated_as_no_data(chat_service, llm_service, store):
    llm_service.extraction_result = extraction_envelope("{invalid json")

    await chat_service.send_message("계좌 번호", _image())

    attachment = store.get_messages(store.current_room_id)[0].attachment
    assert attachment.extracted_data is None
    assert "추출된 정보" not in llm_service.stream_calls[-1][-1].content
