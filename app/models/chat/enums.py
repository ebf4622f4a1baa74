from enum import Enum


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    PARSING_FILE = "parsing_file"
    EXTRACTING = "extracting"
    STREAMING = "streaming"
