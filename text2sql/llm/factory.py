"""
LLM Provider Factory

Creates configured OpenRouter providers for the two model call sites: SQL
generation (near-deterministic, short output, longer timeout) and insight
generation (warmer, longer output, shorter timeout).
"""

import logging
from typing import Literal

import httpx

from text2sql.config import LLMSettings
from text2sql.llm.openrouter import OpenRouterProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM provider instances from settings."""

    @staticmethod
    def create_provider(
        config: LLMSettings,
        purpose: Literal["sql", "insight"] = "sql",
        client: httpx.AsyncClient | None = None,
    ) -> OpenRouterProvider:
        """
        Create an OpenRouter provider for a call site.

        Args:
            config: LLM configuration settings
            purpose: "sql" or "insight"
            client: Optional shared httpx client

        Returns:
            Configured provider instance

        Raises:
            ValueError: If the API key is not configured
        """
        if not config.openrouter_api_key:
            raise ValueError(
                "OpenRouter API key is required but not configured. Set LLM_OPENROUTER_API_KEY"
            )

        if purpose == "sql":
            temperature, max_tokens, timeout = config.temperature, config.max_tokens, config.timeout
        else:
            temperature = config.insight_temperature
            max_tokens = config.insight_max_tokens
            timeout = config.insight_timeout

        logger.info(
            f"Creating OpenRouter provider for {purpose} generation",
            extra={"purpose": purpose, "model": config.openrouter_model},
        )

        return OpenRouterProvider(
            api_key=config.openrouter_api_key,
            model=config.openrouter_model,
            api_url=config.openrouter_api_url,
            site_url=config.openrouter_site_url,
            app_name=config.openrouter_app_name,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            client=client,
        )
