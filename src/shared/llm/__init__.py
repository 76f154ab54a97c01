"""LLM client library for multi-provider support."""

from .base import BaseLLMClient, LLMProvider, LLMResponse
from .anthropic_client import AnthropicClient
from .openai_client import OpenAIClient
from .structured import StructuredLLM, create_llm_client, extract_json_payload

__all__ = [
    "BaseLLMClient",
    "LLMProvider",
    "LLMResponse",
    "AnthropicClient",
    "OpenAIClient",
    "StructuredLLM",
    "create_llm_client",
    "extract_json_payload",
]
