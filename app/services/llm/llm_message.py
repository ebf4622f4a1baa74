from dataclasses import dataclass
from typing import Any


@dataclass
class LlmMessage:
    role: str
    content: str

    @staticmethod
    def user(content: str) -> "LlmMessage":
        return LlmMessage(role="user", content=content)

    @staticmethod
    def assistant(content: str) -> "LlmMessage":
        return LlmMessage(role="assistant", content=content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
        }
