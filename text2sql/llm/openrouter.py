"""
OpenRouter LLM Provider

Implementation of BaseLLMProvider for the OpenRouter chat-completions API
(OpenAI-compatible request/response shape) using httpx.
"""

import logging
from typing import Any

import httpx

from text2sql.llm.base import BaseLLMProvider
from text2sql.llm.models import LLMRequest, LLMResponse, LLMUsage, assemble_content
from text2sql.models.errors import EmptyCompletionError, LLMProviderError

logger = logging.getLogger(__name__)


def describe_provider_error(status_code: int | None, body: Any) -> str:
    """
    Render a provider failure as one human-readable line.

    Understands ``{"error": "..."}``, ``{"error": {"message", "code"}}`` and
    ``{"message": "..."}`` bodies; anything else becomes "Unknown error".
    """
    detail = "Unknown error"

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            detail = error
        elif isinstance(error, dict):
            if error.get("message"):
                detail = str(error["message"])
            elif error.get("code") is not None:
                detail = f"{error['code']}: Provider returned error"
        elif body.get("message"):
            detail = str(body["message"])
    elif isinstance(body, str) and body.strip():
        detail = body.strip()[:200]

    detail = " ".join(detail.split())
    if status_code:
        return f"OpenRouter request failed ({status_code}): {detail}"
    return f"OpenRouter request failed: {detail}"


class OpenRouterProvider(BaseLLMProvider):
    """
    OpenRouter provider.

    Posts a system+user message exchange to the configured chat-completions
    endpoint and returns the concatenated text of ``choices[0].message``.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        api_url: str = "https://openrouter.ai/api/v1/chat/completions",
        site_url: str | None = None,
        app_name: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 256,
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key
            model: Model identifier (e.g. "openai/gpt-4o-mini")
            api_url: Chat-completions endpoint
            site_url: Optional HTTP-Referer header
            app_name: Optional X-Title header
            temperature: Default temperature
            max_tokens: Default max tokens
            timeout: Default request timeout in seconds
            client: Optional preconfigured httpx client (tests inject a mock transport)
        """
        super().__init__(
            provider_name="openrouter",
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.model = model
        self.api_url = api_url

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if site_url:
            headers["HTTP-Referer"] = site_url
        if app_name:
            headers["X-Title"] = app_name
        self.headers = headers

        self.client = client or httpx.AsyncClient(timeout=float(timeout))

        logger.info(f"OpenRouter provider initialized with model: {model}", extra={"model": model})

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using the OpenRouter API.

        Raises:
            LLMProviderError: Timeout, connection failure, HTTP error status,
                non-JSON body, or an error payload in a 200 response
            EmptyCompletionError: No choices/message in the response
        """
        request = self._apply_defaults(request)
        self._log_request(request)

        payload = {
            "model": request.model or self.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

        try:
            response = await self.client.post(
                self.api_url,
                json=payload,
                headers=self.headers,
                timeout=request.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            body = _safe_json(e.response)
            message = describe_provider_error(e.response.status_code, body)
            logger.error(message, extra={"status": e.response.status_code, "body": body})
            raise LLMProviderError(message, status_code=e.response.status_code) from e
        except httpx.TimeoutException as e:
            logger.error(f"OpenRouter request timed out after {request.timeout}s")
            raise LLMProviderError(
                f"OpenRouter request failed: timed out after {request.timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"OpenRouter transport error: {e}")
            raise LLMProviderError(describe_provider_error(None, str(e) or type(e).__name__)) from e
        except ValueError as e:
            raise LLMProviderError(
                describe_provider_error(response.status_code, "Response body is not valid JSON")
            ) from e

        if not isinstance(data, dict):
            raise EmptyCompletionError("OpenRouter returned an unexpected response shape")

        choices = data.get("choices")
        if not choices and data.get("error"):
            # upstream provider failures can arrive with a 200 status
            code = data["error"].get("code") if isinstance(data["error"], dict) else None
            status = code if isinstance(code, int) else None
            raise LLMProviderError(describe_provider_error(status, data), status_code=status)

        message = None
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
        if not isinstance(message, dict):
            logger.error("OpenRouter response carried no completion", extra={"response": data})
            raise EmptyCompletionError(
                "OpenRouter returned no completion. The model may have failed to generate SQL."
            )

        usage = data.get("usage") or {}
        llm_response = LLMResponse(
            content=assemble_content(message.get("content")),
            model=data.get("model") or payload["model"],
            usage=LLMUsage(
                prompt_tokens=usage.get("prompt_tokens") or 0,
                completion_tokens=usage.get("completion_tokens") or 0,
                total_tokens=usage.get("total_tokens") or 0,
            ),
            finish_reason=self._map_finish_reason(choices[0].get("finish_reason")),
            provider="openrouter",
            metadata={"id": data.get("id")},
        )

        self._log_response(llm_response)
        return llm_response

    async def close(self) -> None:
        await self.client.aclose()

    def _map_finish_reason(self, reason: str | None) -> str:
        """Map provider finish reason to our standard format."""
        if reason in ("stop", "length", "content_filter", "error"):
            return reason
        return "stop"


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
