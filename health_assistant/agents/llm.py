"""Thin async wrapper around the Anthropic Messages API.

Each call sends one natural-language instruction and returns one text blob.
Conversation continuity is carried inside the instruction, not by the API.
"""

from __future__ import annotations

import logging
import time

import anthropic

from health_assistant.config import Settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the generative text service cannot produce a reply."""


class LLMClient:
    def __init__(self, client: anthropic.AsyncAnthropic, model: str, max_tokens: int = 2048):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> str:
        if not (self.client.api_key or self.client.auth_token):
            raise LLMError("No Anthropic API key configured")

        start = time.monotonic()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            logger.error("Model call failed after %.1fs: %s", time.monotonic() - start, exc)
            raise LLMError(f"Generative model call failed: {exc}") from exc

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if response.usage:
            logger.info(
                "Model call completed in %.1fs (input_tokens=%s, output_tokens=%s)",
                time.monotonic() - start,
                response.usage.input_tokens,
                response.usage.output_tokens,
            )
        return text


def create_llm_client(settings: Settings) -> LLMClient:
    client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return LLMClient(client, settings.model, settings.llm_max_tokens)
