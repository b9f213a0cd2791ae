"""Console chat client for the health assistant API.

Keeps the transcript locally and sends the accumulated history with every
message, the same way the browser UI does.

Usage:
    python -m health_assistant.cli [--url http://localhost:8100] [--typing]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import httpx

from health_assistant.config import settings
from health_assistant.models.chat import ChatResponse, ChatTurn, Speaker
from health_assistant.models.trial import TrialSummary

ENDPOINT = "/api/process-health-input"


def _or_unknown(value) -> str:
    return "Unknown" if value is None or value == "" else str(value)


def format_assistant_turn(response: ChatResponse) -> str:
    data = response.extracted_data
    lines = [
        "Extracted Information:",
        f"Age: {_or_unknown(data.age)}",
        f"Location: {_or_unknown(data.location)}",
        f"Condition: {_or_unknown(data.condition)}",
        f"Symptoms: {', '.join(data.symptoms) if data.symptoms else 'None reported'}",
    ]
    if data.is_follow_up:
        lines.append(f"Follow-up on: {_or_unknown(data.follow_up_topic)}")
    lines += ["", "Health Advice:", response.health_advice, "", "Relevant Clinical Trials:"]
    if response.clinical_trials:
        for study in response.clinical_trials:
            trial = TrialSummary.from_study(study)
            details = ", ".join(p for p in (trial.nct_id, trial.overall_status) if p)
            lines.append(f"- {trial.brief_title} [{details}]" if details else f"- {trial.brief_title}")
    else:
        lines.append("No matching trials found.")
    return "\n".join(lines)


def type_out(text: str, delay: float = 0.03, out=sys.stdout) -> None:
    """Reveal text word by word, keeping line breaks."""
    for line in text.split("\n"):
        for word in line.split(" "):
            out.write(word + " ")
            out.flush()
            time.sleep(delay)
        out.write("\n")


class ChatSession:
    def __init__(self, client: httpx.Client):
        self.client = client
        self.transcript: list[ChatTurn] = []

    def send(self, user_input: str) -> ChatResponse:
        """Post one turn. Raises RuntimeError with the server's message on failure."""
        history = [turn.to_history().model_dump(mode="json") for turn in self.transcript]
        self.transcript.append(ChatTurn(role=Speaker.USER, content=user_input))

        resp = self.client.post(ENDPOINT, json={"userInput": user_input, "history": history})
        body = resp.json()
        if resp.status_code != 200 or "error" in body:
            raise RuntimeError(body.get("error") or f"HTTP {resp.status_code}")

        response = ChatResponse.model_validate(body)
        self.transcript.append(ChatTurn(role=Speaker.ASSISTANT, content=response))
        return response


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the health assistant API")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{settings.port}",
        help="Base URL of the running API",
    )
    parser.add_argument("--typing", action="store_true", help="Reveal answers word by word")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    print("What's going on? (type 'exit' to quit)")
    with httpx.Client(base_url=args.url, timeout=None) as client:
        session = ChatSession(client)
        while True:
            try:
                user_input = input("\nYou: ").strip()
            except EOFError:
                break
            if user_input.lower() in ("exit", "quit"):
                break
            if not user_input:
                continue

            try:
                response = session.send(user_input)
            except (RuntimeError, httpx.HTTPError, ValueError) as exc:
                print(f"An error occurred: {exc}")
                continue

            text = format_assistant_turn(response)
            if args.typing:
                type_out(text)
            else:
                print(text)


if __name__ == "__main__":
    main()
