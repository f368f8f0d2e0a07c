"""
LLM Provider Module

Chat-completion provider abstraction backed by OpenRouter.

Usage:
    from text2sql.llm import LLMProviderFactory, LLMRequest, LLMMessage
    from text2sql.config import get_settings

    provider = LLMProviderFactory.create_provider(get_settings().llm, purpose="sql")

    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="Hello!")])
    )
    print(response.content)
"""

from text2sql.llm.base import BaseLLMProvider
from text2sql.llm.factory import LLMProviderFactory
from text2sql.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMUsage,
    OtherSegment,
    TextSegment,
    assemble_content,
)
from text2sql.llm.openrouter import OpenRouterProvider, describe_provider_error

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "TextSegment",
    "OtherSegment",
    "assemble_content",
    "LLMProviderFactory",
    "OpenRouterProvider",
    "describe_provider_error",
]
