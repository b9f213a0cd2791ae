"""Field extraction: free text plus history to an ExtractedRecord.

The model is asked for JSON. When its reply cannot be parsed (or the model
cannot be reached) the heuristic extractor in ``fallback`` takes over, so
``FieldExtractor.extract`` always returns a record.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from health_assistant.agents.fallback import heuristic_extract
from health_assistant.agents.llm import LLMClient, LLMError
from health_assistant.agents.prompts import build_extraction_prompt
from health_assistant.models.chat import HistoryTurn
from health_assistant.models.extraction import ExtractedRecord

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^```[\w-]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


class ExtractionParseError(ValueError):
    """The model reply is not a JSON object matching the record schema."""


def strip_code_fences(raw: str) -> str:
    stripped = raw.strip()
    stripped = _FENCE_OPEN_RE.sub("", stripped)
    stripped = _FENCE_CLOSE_RE.sub("", stripped)
    return stripped.strip()


def _load_json(text: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Models sometimes wrap the object in a sentence of prose.
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                pass
    raise ExtractionParseError(f"Model reply is not JSON: {text[:200]!r}")


def parse_extraction(raw: str) -> ExtractedRecord:
    data = _load_json(strip_code_fences(raw))
    if not isinstance(data, dict):
        raise ExtractionParseError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return ExtractedRecord.model_validate(data)
    except ValidationError as exc:
        raise ExtractionParseError(f"Model reply does not match the schema: {exc}") from exc


class FieldExtractor:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def extract(self, user_input: str, history: list[HistoryTurn]) -> ExtractedRecord:
        prompt = build_extraction_prompt(user_input, history)

        try:
            raw = await self.llm.generate(prompt)
        except LLMError as exc:
            logger.warning("Extraction model call failed, using heuristic fallback: %s", exc)
            return heuristic_extract(user_input)

        try:
            record = parse_extraction(raw)
        except ExtractionParseError as exc:
            logger.warning(
                "Could not parse extraction reply (%s); raw output: %r", exc, raw
            )
            return heuristic_extract(user_input)

        logger.info(
            "Extracted age=%s location=%r condition=%r symptoms=%d follow_up=%s",
            record.age,
            record.location,
            record.condition,
            len(record.symptoms),
            record.is_follow_up,
        )
        return record
