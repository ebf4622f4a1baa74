from dataclasses import dataclass
from typing import Any


@dataclass
class FieldDefinition:
    """A field the extraction endpoint can be asked to fill, and the query keywords that request it"""
    name: str
    keywords: list[str]
    type: str
    description: str

    def to_property(self) -> dict[str, str]:
        return {
            "type": self.type,
            "description": self.description,
        }


# JSON-schema-like object sent to the extraction endpoint:
# {"type": "object", "properties": {field_name: {"type": ..., "description": ...}}}
ExtractionSchema = dict[str, Any]
