"""Anthropic (Claude) LLM client implementation."""

import logging
import time
from typing import Any, Optional

import anthropic
from anthropic import AsyncAnthropic

from .base import BaseLLMClient, LLMProvider, LLMResponse
from src.shared.exceptions.llm import (
    LLMError,
    LLMTimeoutError,
    LLMRateLimitError,
    LLMProviderError,
)

logger = logging.getLogger(__name__)


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client."""

    def __init__(self, api_key: str, timeout: float = 120.0):
        """
        Initialize Anthropic client.

        Args:
            api_key: Anthropic API key
            timeout: Per-request timeout in seconds
        """
        super().__init__(LLMProvider.ANTHROPIC)
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = 4096,
        system: Optional[str] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion using Claude."""
        start_time = time.time()

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens or 4096,
                temperature=temperature,
                system=system or "",
                messages=[{"role": "user", "content": prompt}],
                **kwargs
            )
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(
                message="Anthropic API request timed out",
                provider="anthropic",
                model=model,
                original=e,
            ) from e
        except anthropic.RateLimitError as e:
            raise LLMRateLimitError(
                message="Anthropic API rate limit exceeded",
                provider="anthropic",
                model=model,
                original=e,
            ) from e
        except anthropic.APIStatusError as e:
            raise LLMProviderError(
                message=f"Anthropic API error: {e.message}",
                provider="anthropic",
                model=model,
                provider_code=str(e.status_code),
                original=e,
            ) from e
        except anthropic.APIError as e:
            raise LLMProviderError(
                message=f"Anthropic API error: {str(e)}",
                provider="anthropic",
                model=model,
                original=e,
            ) from e

        text_blocks = [
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        ]
        if response.content and not text_blocks:
            raise LLMError(
                message="Anthropic response contained no text blocks",
                provider="anthropic",
                model=model,
            )

        usage = {
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
            "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
        }

        return LLMResponse(
            content="".join(text_blocks),
            model=model,
            provider=self.provider,
            usage=usage,
            latency=time.time() - start_time,
        )

    async def health_check(self) -> bool:
        """Check that the Anthropic API accepts our key.

        Lists models instead of creating a completion so no tokens are spent.
        """
        try:
            page = await self.client.models.list(limit=1)
            return len(page.data) > 0
        except anthropic.APIError as e:
            logger.warning(f"Anthropic health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.close()
