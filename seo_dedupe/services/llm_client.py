from __future__ import annotations

import logging
from typing import Protocol

from openai import AsyncOpenAI

from ..models.config_models import LLMConfig

"""Text-generation client.

The pipeline only needs one operation: send a prompt to a model and get the
reply text back. The default client talks to any OpenAI-compatible chat
endpoint; out of the box that is a local Ollama server.

Single-shot: no retries, no streaming. The only timeout is the HTTP client's.
"""

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def complete(self, model: str, prompt: str) -> str: ...


class OpenAIChatClient:
    """TextGenerator backed by openai.AsyncOpenAI chat completions."""

    def __init__(self, config: LLMConfig, client: AsyncOpenAI | None = None) -> None:
        self.config = config
        self._client = client or AsyncOpenAI(
            base_url=config.base_url,
            api_key=config.api_key or "unused",
            timeout=config.timeout_seconds,
            max_retries=0,
        )

    async def complete(self, model: str, prompt: str) -> str:
        logger.debug(f"Calling {self.config.base_url} with {model} model...")
        response = await self._client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()

    async def close(self) -> None:
        await self._client.close()
