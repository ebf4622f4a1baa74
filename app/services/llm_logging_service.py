import os
from datetime import datetime, timezone

from app.services.llm.llm_service_base import LlmLogger
from app.services.llm.llm_message import LlmMessage


class RoomLlmLogger(LlmLogger):
    """Logger for the LLM traffic of a single chat room"""

    def __init__(self, room_id: str, logs_dir: str = "logs") -> None:
        self.room_id = room_id
        self.logs_dir = logs_dir
        self.log_file_path = os.path.join(logs_dir, f"room-{room_id}.log")

    def log_request(self, model: str, messages: list[LlmMessage]) -> None:
        """Log an outbound chat request"""
        os.makedirs(self.logs_dir, exist_ok=True)

        with open(self.log_file_path, "a", encoding="utf-8") as f:
            timestamp = datetime.now(timezone.utc).isoformat()

            f.write(f"REQUEST [{timestamp}]\n")
            f.write(f"Model: {model}\n")

            f.write(f"\nMessages:\n")
            for i, msg in enumerate(messages, 1):
                f.write(f"--- Message {i} (Role: {msg.role}) ---\n")
                f.write(msg.content)
                f.write("\n")

            f.write("\n")

    def log_response(self, model: str, response: LlmMessage) -> None:
        """Log a completed streamed reply"""
        os.makedirs(self.logs_dir, exist_ok=True)

        with open(self.log_file_path, "a", encoding="utf-8") as f:
            timestamp = datetime.now(timezone.utc).isoformat()

            f.write(f"RESPONSE [{timestamp}]\n")
            f.write(f"Model: {model}\n")
            f.write(f"\nRole: {response.role}\n")
            f.write(f"{response.content}\n")
            f.write("\n")


class LlmLoggingService:
    """Service for creating LLM loggers"""

    def __init__(self, logs_dir: str = "logs", enabled: bool = True) -> None:
        self.logs_dir = logs_dir
        self.enabled = enabled

    def create_for_room(self, room_id: str) -> RoomLlmLogger | None:
        """Create a logger for a specific chat room, or None when logging is disabled"""
        if not self.enabled:
            return None
        return RoomLlmLogger(room_id, self.logs_dir)
