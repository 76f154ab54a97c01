"""OpenAI LLM client implementation."""

import logging
import time
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from .base import BaseLLMClient, LLMProvider, LLMResponse
from src.shared.exceptions.llm import (
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """OpenAI client for GPT chat models."""

    def __init__(self, api_key: str, timeout: float = 120.0):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            timeout: Per-request timeout in seconds
        """
        super().__init__(LLMProvider.OPENAI)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        system: Optional[str] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion using OpenAI."""
        start_time = time.time()

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs
            )
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(
                message="OpenAI API request timed out",
                provider="openai",
                model=model,
                original=e,
            ) from e
        except openai.RateLimitError as e:
            raise LLMRateLimitError(
                message="OpenAI API rate limit exceeded",
                provider="openai",
                model=model,
                original=e,
            ) from e
        except openai.APIError as e:
            raise LLMProviderError(
                message=f"OpenAI completion failed: {str(e)}",
                provider="openai",
                model=model,
                original=e,
            ) from e

        content = response.choices[0].message.content if response.choices else None
        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content or "",
            model=model,
            provider=self.provider,
            usage=usage,
            latency=time.time() - start_time,
        )

    async def health_check(self) -> bool:
        """Check if OpenAI API is reachable."""
        try:
            await self.client.models.list()
            return True
        except openai.APIError as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.close()
