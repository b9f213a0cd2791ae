"""Shared fixtures. Every test runs offline."""

from __future__ import annotations

import json

import pytest

from health_assistant.agents.llm import LLMError
from health_assistant.models.chat import HistoryTurn, Speaker
from tests.fakes import make_study


@pytest.fixture
def congo_input() -> str:
    return "I am 43 at Congo. I have diabetes, and my stomach hurts. I am also vomiting blood."


@pytest.fixture
def congo_extraction() -> str:
    return json.dumps({
        "age": 43,
        "location": "Congo",
        "condition": "diabetes",
        "symptoms": ["stomach hurts", "vomiting blood"],
        "isFollowUp": False,
        "followUpTopic": None,
    })


@pytest.fixture
def prior_history() -> list[HistoryTurn]:
    return [
        HistoryTurn(speaker=Speaker.USER, text="I am 30 in Kenya and I have a persistent cough."),
        HistoryTurn(
            speaker=Speaker.ASSISTANT,
            text="General Advice: rest and stay hydrated. Cough: try warm fluids.",
        ),
    ]


@pytest.fixture
def studies() -> list[dict]:
    return [make_study(f"NCT0000000{i}", f"Study {i}") for i in range(1, 4)]


@pytest.fixture
def llm_error() -> LLMError:
    return LLMError("Generative model call failed: connection reset")
