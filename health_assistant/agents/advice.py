from __future__ import annotations

import logging

from health_assistant.agents.llm import LLMClient
from health_assistant.agents.prompts import build_advice_prompt
from health_assistant.models.chat import HistoryTurn
from health_assistant.models.extraction import ExtractedRecord

logger = logging.getLogger(__name__)


class AdviceGenerationError(Exception):
    """The model returned no usable advice."""


class AdviceGenerator:
    """Asks the model for plain-language advice in fresh-issue or follow-up mode."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def generate_advice(self, record: ExtractedRecord, history: list[HistoryTurn]) -> str:
        mode = "follow-up" if record.is_follow_up else "fresh-issue"
        logger.info("Generating %s advice", mode)

        advice = await self.llm.generate(build_advice_prompt(record, history))
        if not advice.strip():
            raise AdviceGenerationError("The model returned an empty health advice response")
        return advice.strip()
