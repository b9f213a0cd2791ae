from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ExtractedRecord(BaseModel):
    """Structured health facts pulled out of one user turn."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    age: int | None = None
    location: str | None = None
    condition: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    is_follow_up: bool = False
    follow_up_topic: str | None = None

    @field_validator("location", "condition", "follow_up_topic", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("symptoms", mode="before")
    @classmethod
    def _symptoms_never_null(cls, value):
        if value is None:
            return []
        return value

    @field_validator("symptoms")
    @classmethod
    def _drop_blank_symptoms(cls, value: list[str]) -> list[str]:
        return [s.strip() for s in value if s.strip()]

    @model_validator(mode="after")
    def _topic_only_for_follow_up(self) -> ExtractedRecord:
        if not self.is_follow_up:
            self.follow_up_topic = None
        return self
