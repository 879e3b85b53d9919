"""LLM completion collaborator.

Agents depend on the small ``LLMCompletion`` protocol, not on a provider
SDK. ``LiteLLMCompletion`` implements it on top of ``litellm.acompletion``.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import litellm

from agentrelay.llm.config import LLMConfig

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when a completion fails, times out or comes back empty."""


@runtime_checkable
class LLMCompletion(Protocol):
    """Anything that can answer a system/user prompt pair with text."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return the completion text for the prompts.

        Raises:
            LLMError: If no usable completion could be produced
        """
        ...


class LiteLLMCompletion:
    """LLMCompletion backed by LiteLLM.

    Attributes:
        config: Model, sampling and timeout settings

    Example:
        >>> llm = LiteLLMCompletion(LLMConfig(model="gpt-4o-mini"))
        >>> await llm.complete("You are a router.", "Pick one: A or B")
        'A'
    """

    def __init__(self, config: Optional[LLMConfig] = None) -> None:
        self.config = config or LLMConfig()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run one chat completion.

        Args:
            system_prompt: System message
            user_prompt: User message
            temperature: Overrides the configured temperature
            max_tokens: Overrides the configured token limit

        Returns:
            The stripped completion text

        Raises:
            LLMError: On timeout, provider error or empty content
        """
        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
        }
        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base

        try:
            response = await asyncio.wait_for(
                litellm.acompletion(**kwargs), timeout=self.config.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("LLM completion timed out after %ss", self.config.timeout)
            raise LLMError(f"LLM completion timed out after {self.config.timeout}s") from e
        except Exception as e:
            logger.error("LLM completion failed: %s", e)
            raise LLMError(f"LLM completion failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise LLMError("LLM returned a malformed response") from e

        if not content or not content.strip():
            raise LLMError("LLM returned empty content")
        return str(content).strip()
