"""Schema-constrained generation on top of a plain completion client.

The service layer treats the LLM as a capability that, given a prompt,
returns a value of a requested type or nothing at all. ``StructuredLLM``
implements that contract: it asks the model for JSON, validates the reply
with pydantic and collapses every "model answered but not usefully" case
into ``None``. Provider failures (network, auth, rate limits) still raise
``LLMError`` so callers can tell an outage from an empty answer.
"""

import json
import logging
import re
from typing import Any, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from src.shared.llm.base import BaseLLMClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)

JSON_INSTRUCTIONS = (
    "Respond with a single JSON value and nothing else. "
    "No prose, no markdown fences. The value must conform to this JSON schema:\n"
)


def extract_json_payload(text: str) -> Optional[str]:
    """Strip code fences and surrounding prose from a model reply.

    Returns:
        The JSON-looking part of ``text`` or None when there is nothing usable.
    """
    if not text:
        return None

    stripped = text.strip()
    if not stripped:
        return None

    fenced = _FENCE_RE.match(stripped)
    if fenced:
        stripped = fenced.group(1).strip()

    if stripped[:1] in ("{", "["):
        return stripped

    # Models sometimes prefix the JSON with a sentence
    starts = [i for i in (stripped.find("{"), stripped.find("[")) if i >= 0]
    if not starts:
        return None
    start = min(starts)
    closing = "}" if stripped[start] == "{" else "]"
    end = stripped.rfind(closing)
    if end <= start:
        return None
    return stripped[start:end + 1]


class StructuredLLM:
    """Generate values of a given type from a completion client.

    Example:
        llm = StructuredLLM(AnthropicClient(api_key), model="claude-sonnet-4-5")
        result = await llm.generate(prompt, SummaryOutput)
        if result is None:
            ...  # model produced no usable output
    """

    def __init__(
        self,
        client: BaseLLMClient,
        model: str,
        temperature: float = 0.2,
        max_tokens: Optional[int] = 8192,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(
        self,
        prompt: str,
        output_type: Type[T],
        system: Optional[str] = None,
    ) -> Optional[T]:
        """Ask the model for a value of ``output_type``.

        Args:
            prompt: Task prompt
            output_type: pydantic model or any type ``TypeAdapter`` accepts
            system: Optional system instructions

        Returns:
            The validated value, or None if the reply was empty, not JSON,
            or did not match the schema.

        Raises:
            LLMError: If the provider call itself fails
        """
        adapter = TypeAdapter(output_type)
        schema = json.dumps(adapter.json_schema())
        full_prompt = f"{prompt}\n\n{JSON_INSTRUCTIONS}{schema}"

        response = await self.client.complete(
            prompt=full_prompt,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            system=system,
        )

        payload = extract_json_payload(response.content)
        if payload is None:
            logger.warning(
                "LLM returned no JSON payload",
                extra={"model": self.model, "content_length": len(response.content or "")},
            )
            return None

        try:
            return adapter.validate_python(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                f"LLM output did not match {getattr(output_type, '__name__', output_type)}: {e}",
                extra={"model": self.model},
            )
            return None

    async def health_check(self) -> bool:
        return await self.client.health_check()

    async def close(self) -> None:
        await self.client.close()

    def __repr__(self) -> str:
        return f"StructuredLLM(provider={self.client.provider.value}, model={self.model})"


def create_llm_client(provider: str, api_key: str, timeout: float = 120.0) -> BaseLLMClient:
    """Build a completion client for the named provider.

    Raises:
        ValueError: If the provider is not supported
    """
    from src.shared.llm.anthropic_client import AnthropicClient
    from src.shared.llm.openai_client import OpenAIClient

    clients: dict[str, Any] = {
        "anthropic": AnthropicClient,
        "openai": OpenAIClient,
    }
    try:
        client_cls = clients[provider]
    except KeyError:
        raise ValueError(f"Unsupported LLM provider: {provider}") from None
    return client_cls(api_key=api_key, timeout=timeout)
