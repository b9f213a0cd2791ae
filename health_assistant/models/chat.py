from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from health_assistant.models.extraction import ExtractedRecord


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


_SPEAKER_PREFIXES = {
    "user:": Speaker.USER,
    "assistant:": Speaker.ASSISTANT,
}


class HistoryTurn(BaseModel):
    speaker: Speaker
    text: str

    @classmethod
    def from_line(cls, line: str) -> HistoryTurn:
        """Build a turn from a plain "Speaker: text" string."""
        stripped = line.strip()
        lower = stripped.lower()
        for prefix, speaker in _SPEAKER_PREFIXES.items():
            if lower.startswith(prefix):
                return cls(speaker=speaker, text=stripped[len(prefix):].strip())
        return cls(speaker=Speaker.USER, text=stripped)


class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_input: str
    history: list[HistoryTurn] = Field(default_factory=list)

    @field_validator("history", mode="before")
    @classmethod
    def _accept_plain_lines(cls, value):
        if value is None:
            return []
        if isinstance(value, list):
            return [HistoryTurn.from_line(v) if isinstance(v, str) else v for v in value]
        return value


class ChatResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    extracted_data: ExtractedRecord
    clinical_trials: list[dict[str, Any]] = Field(default_factory=list)
    health_advice: str


class ErrorResponse(BaseModel):
    error: str


class ChatTurn(BaseModel):
    """One entry of the client-side transcript."""

    model_config = ConfigDict(frozen=True)

    role: Speaker
    content: str | ChatResponse

    def to_history(self) -> HistoryTurn:
        if isinstance(self.content, ChatResponse):
            return HistoryTurn(speaker=self.role, text=self.content.health_advice)
        return HistoryTurn(speaker=self.role, text=self.content)
