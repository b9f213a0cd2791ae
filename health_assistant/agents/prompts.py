"""Prompt builders for the extraction and advice calls.

Every builder is a pure function of its arguments: templates are rendered
from the package's templates directory and nothing else is read or written.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from health_assistant.models.chat import HistoryTurn
from health_assistant.models.extraction import ExtractedRecord

PROMPTS_DIR = Path(__file__).parent / "templates"

_NO_HISTORY = "(no previous conversation)"


@lru_cache(maxsize=None)
def _template(name: str) -> Template:
    env = Environment(
        loader=FileSystemLoader(str(PROMPTS_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    return env.get_template(f"{name}.md")


def format_history(history: list[HistoryTurn]) -> str:
    if not history:
        return _NO_HISTORY
    return "\n".join(f"{turn.speaker.value.capitalize()}: {turn.text}" for turn in history)


def describe_patient(record: ExtractedRecord) -> str:
    """e.g. "a 43-year-old in Congo experiencing stomach pain, nausea"."""
    subject = f"a {record.age}-year-old" if record.age is not None else "a patient"
    if record.location:
        subject += f" in {record.location}"
    if record.symptoms:
        subject += f" experiencing {', '.join(record.symptoms)}"
    return subject


def build_extraction_prompt(user_input: str, history: list[HistoryTurn]) -> str:
    return _template("extraction").render(
        history=format_history(history),
        user_input=user_input,
    )


def build_advice_prompt(record: ExtractedRecord, history: list[HistoryTurn]) -> str:
    name = "follow_up_advice" if record.is_follow_up else "advice"
    return _template(name).render(
        record=record,
        subject=describe_patient(record),
        history=format_history(history),
    )
