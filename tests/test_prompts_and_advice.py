"""Tests for prompt construction and the two advice modes."""

from __future__ import annotations

import pytest

from health_assistant.agents.advice import AdviceGenerationError, AdviceGenerator
from health_assistant.agents.llm import LLMError
from health_assistant.agents.prompts import (
    build_advice_prompt,
    build_extraction_prompt,
    describe_patient,
    format_history,
)
from health_assistant.models.extraction import ExtractedRecord
from tests.fakes import FakeLLM


def _fresh_record(**overrides) -> ExtractedRecord:
    data = {
        "age": 43,
        "location": "Congo",
        "condition": "diabetes",
        "symptoms": ["stomach pain", "vomiting blood"],
    }
    data.update(overrides)
    return ExtractedRecord(**data)


class TestHistoryFormatting:
    def test_empty_history(self):
        assert format_history([]) == "(no previous conversation)"

    def test_speaker_labels(self, prior_history):
        lines = format_history(prior_history).splitlines()
        assert lines[0].startswith("User: I am 30 in Kenya")
        assert lines[1].startswith("Assistant: General Advice")


class TestDescribePatient:
    def test_full_record(self):
        assert describe_patient(_fresh_record()) == (
            "a 43-year-old in Congo experiencing stomach pain, vomiting blood"
        )

    def test_sparse_record(self):
        assert describe_patient(ExtractedRecord()) == "a patient"


class TestExtractionPrompt:
    def test_is_deterministic(self, prior_history):
        first = build_extraction_prompt("my head hurts", prior_history)
        second = build_extraction_prompt("my head hurts", prior_history)
        assert first == second

    def test_lists_every_schema_field(self):
        prompt = build_extraction_prompt("my head hurts", [])
        for field in ("age", "location", "condition", "symptoms", "isFollowUp", "followUpTopic"):
            assert f'"{field}"' in prompt
        assert "(no previous conversation)" in prompt


class TestAdvicePrompt:
    def test_fresh_issue_has_per_symptom_lines_and_care_guidance(self):
        prompt = build_advice_prompt(_fresh_record(), [])
        assert "General Advice:" in prompt
        assert "- stomach pain:" in prompt
        assert "- vomiting blood:" in prompt
        assert "When to Seek Medical Care:" in prompt
        assert "Answer:" not in prompt

    def test_condition_interaction_requested(self):
        prompt = build_advice_prompt(_fresh_record(), [])
        assert "pre-existing condition: diabetes" in prompt
        assert "interact with the symptoms" in prompt

    def test_no_condition_no_interaction_text(self):
        prompt = build_advice_prompt(_fresh_record(condition=None), [])
        assert "pre-existing condition" not in prompt

    def test_no_symptoms_omits_symptom_section(self):
        prompt = build_advice_prompt(_fresh_record(symptoms=[]), [])
        assert "Symptom-specific Advice:" not in prompt
        assert "When to Seek Medical Care:" in prompt

    def test_follow_up_mode_single_answer_section(self, prior_history):
        record = _fresh_record(is_follow_up=True, follow_up_topic="the cough")
        prompt = build_advice_prompt(record, prior_history)
        assert "Answer:" in prompt
        assert "follow-up question about: the cough" in prompt
        assert "Symptom-specific Advice:" not in prompt
        assert "User: I am 30 in Kenya" in prompt

    def test_follow_up_without_topic(self, prior_history):
        record = _fresh_record(is_follow_up=True)
        prompt = build_advice_prompt(record, prior_history)
        assert "latest message" in prompt
        assert "Answer:" in prompt


class TestAdviceGenerator:
    async def test_returns_model_text(self):
        llm = FakeLLM(advice="  General Advice:\nRest.  ")
        advice = await AdviceGenerator(llm).generate_advice(_fresh_record(), [])
        assert advice == "General Advice:\nRest."
        assert "General Advice:" in llm.advice_prompts[0]

    async def test_follow_up_mode_prompt_sent(self, prior_history):
        llm = FakeLLM(advice="Answer:\nIt usually clears in a week.")
        record = _fresh_record(is_follow_up=True, follow_up_topic="the cough")
        advice = await AdviceGenerator(llm).generate_advice(record, prior_history)
        assert advice.startswith("Answer:")
        assert "Symptom-specific Advice:" not in llm.advice_prompts[0]

    async def test_empty_reply_raises(self):
        with pytest.raises(AdviceGenerationError):
            await AdviceGenerator(FakeLLM(advice="   ")).generate_advice(_fresh_record(), [])

    async def test_model_error_propagates(self, llm_error):
        with pytest.raises(LLMError):
            await AdviceGenerator(FakeLLM(advice=llm_error)).generate_advice(_fresh_record(), [])
