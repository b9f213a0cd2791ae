"""Heuristic extraction used when the model reply cannot be parsed.

Deliberately conservative: every field prefers absent/empty over a wrong
guess, except ``is_follow_up``, which is read liberally from surface cues.
"""

from __future__ import annotations

import re

from health_assistant.models.extraction import ExtractedRecord

_AGE_RE = re.compile(r"\d+")
_LOCATION_RE = re.compile(r"\b(?:at|in)\s+([^.!?\n]+)", re.IGNORECASE)
_CONDITION_RE = re.compile(r"\b(?:with|have)\s+(\w+)(?:\s+condition\b)?", re.IGNORECASE)
_SYMPTOMS_RE = re.compile(r"\bsymptoms?\s*:\s*([^.!?\n]+)", re.IGNORECASE)
_SYMPTOM_SPLIT_RE = re.compile(r",|\band\b", re.IGNORECASE)

_FOLLOW_UP_CUES = ("previous", "earlier")


def _first_group(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def heuristic_extract(text: str) -> ExtractedRecord:
    age_match = _AGE_RE.search(text)
    age = int(age_match.group()) if age_match else None

    symptoms: list[str] = []
    symptom_text = _first_group(_SYMPTOMS_RE, text)
    if symptom_text:
        symptoms = [s.strip() for s in _SYMPTOM_SPLIT_RE.split(symptom_text) if s.strip()]

    lower = text.lower()
    is_follow_up = any(cue in lower for cue in _FOLLOW_UP_CUES) or text.strip().endswith("?")

    return ExtractedRecord(
        age=age,
        location=_first_group(_LOCATION_RE, text),
        condition=_first_group(_CONDITION_RE, text),
        symptoms=symptoms,
        is_follow_up=is_follow_up,
        follow_up_topic=None,
    )
