"""
Fixed strings used when building chat turns.
"""

# Title of a room before its first message arrives
NEW_CHAT_TITLE = "새 채팅"

# Rooms keep at most this many characters of the first message as a title
CHAT_TITLE_MAX_LENGTH = 30
CHAT_TITLE_ELLIPSIS = "..."

# Stand-in for the parsed text of an attachment that could not be parsed
DOCUMENT_PARSE_FAILED_MARKER = "[문서 파싱 실패]"

# Shown in place of an assistant reply that failed before any text arrived
ASSISTANT_ERROR_MESSAGE = "죄송합니다. 응답을 생성하는 중 오류가 발생했습니다. 다시 시도해 주세요."

# Template variables: {filename}
FILE_ONLY_MESSAGE_TEMPLATE = "{filename} 파일을 분석해주세요."

# Template variables: {filename}
FILE_ONLY_TITLE_TEMPLATE = "📎 {filename}"

# Context sent to the model for a message with an attachment.
# Template variables: {filename}
ATTACHMENT_HEADER_TEMPLATE = "[첨부 파일: {filename}]\n\n"

# Template variables: {content}
ATTACHMENT_CONTENT_TEMPLATE = "파일 내용:\n{content}\n\n"

# Template variables: {extracted}
ATTACHMENT_EXTRACTED_TEMPLATE = "추출된 정보:\n{extracted}\n\n"

# Template variables: {question}
USER_QUESTION_TEMPLATE = "사용자 질문: {question}"
