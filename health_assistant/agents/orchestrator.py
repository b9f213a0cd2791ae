"""Turn orchestrator: extraction, then trials and advice in parallel."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from health_assistant.agents.advice import AdviceGenerator
from health_assistant.agents.extractor import FieldExtractor
from health_assistant.agents.llm import create_llm_client
from health_assistant.config import Settings
from health_assistant.models.chat import ChatResponse, HistoryTurn, Speaker
from health_assistant.services.clinical_trials import TrialFinder

logger = logging.getLogger(__name__)


class TurnPhase(str, Enum):
    RECEIVED = "received"
    EXTRACTING = "extracting"
    ENRICHING = "enriching"
    AGGREGATED = "aggregated"
    RESPONDED = "responded"
    FAILED = "failed"


class TurnFailedError(Exception):
    """A turn could not produce a response bundle. The message is user-facing."""


class TurnOrchestrator:
    """Runs one request/response cycle per user turn.

    Trial search failures are absorbed as an empty list. Extraction and
    advice failures fail the whole turn; nothing is retried.
    """

    def __init__(
        self,
        extractor: FieldExtractor,
        advice_generator: AdviceGenerator,
        trial_finder: TrialFinder,
    ):
        self.extractor = extractor
        self.advice_generator = advice_generator
        self.trial_finder = trial_finder

    def _enter(self, phase: TurnPhase) -> None:
        logger.debug("Turn phase: %s", phase.value)

    async def run_turn(self, user_input: str, history: list[HistoryTurn]) -> ChatResponse:
        self._enter(TurnPhase.RECEIVED)
        try:
            return await self._run(user_input, history)
        except Exception as exc:
            self._enter(TurnPhase.FAILED)
            logger.exception("Turn failed")
            raise TurnFailedError(str(exc) or type(exc).__name__) from exc

    async def _run(self, user_input: str, history: list[HistoryTurn]) -> ChatResponse:
        self._enter(TurnPhase.EXTRACTING)
        record = await self.extractor.extract(user_input, history)

        self._enter(TurnPhase.ENRICHING)
        advice_history = [*history, HistoryTurn(speaker=Speaker.USER, text=user_input)]
        trials_result, advice_result = await asyncio.gather(
            self.trial_finder.find_trials(record.symptoms, record.location, record.condition),
            self.advice_generator.generate_advice(record, advice_history),
            return_exceptions=True,
        )

        if isinstance(trials_result, BaseException):
            logger.error("Trial search raised, continuing without trials: %s", trials_result)
            trials_result = []
        if isinstance(advice_result, BaseException):
            raise advice_result

        self._enter(TurnPhase.AGGREGATED)
        response = ChatResponse(
            extracted_data=record,
            clinical_trials=trials_result,
            health_advice=advice_result,
        )
        self._enter(TurnPhase.RESPONDED)
        return response


def build_orchestrator(settings: Settings) -> TurnOrchestrator:
    llm = create_llm_client(settings)
    return TurnOrchestrator(
        extractor=FieldExtractor(llm),
        advice_generator=AdviceGenerator(llm),
        trial_finder=TrialFinder.from_settings(settings),
    )
