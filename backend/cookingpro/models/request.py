"""
Outbound model request, shaped after the Gemini generateContent contract.
"""
from typing import List, Literal, Optional

from pydantic import model_validator

from cookingpro.models.schema import CamelModel


class InlineData(CamelModel):
    """Base64 encoded binary content sent next to a text part."""
    mime_type: str
    data: str


class Part(CamelModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.text is None) == (self.inline_data is None):
            raise ValueError("A part carries either text or inline data")
        return self


class Turn(CamelModel):
    role: Literal["user", "model"]
    parts: List[Part]


class ModelRequest(CamelModel):
    """Everything the gateway sends for one turn."""
    model: str
    system_instruction: str
    contents: List[Turn]
    temperature: float

    def to_payload(self) -> dict:
        """generateContent request body."""
        return {
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
            "contents": [
                turn.model_dump(by_alias=True, exclude_none=True) for turn in self.contents
            ],
            "generationConfig": {"temperature": self.temperature},
        }
