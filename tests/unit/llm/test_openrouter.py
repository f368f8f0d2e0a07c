"""
Tests for the OpenRouter provider.

HTTP is served by httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest

from text2sql.llm.models import LLMMessage, LLMRequest
from text2sql.llm.openrouter import OpenRouterProvider, describe_provider_error
from text2sql.models.errors import EmptyCompletionError, LLMProviderError


def make_provider(handler, **kwargs) -> OpenRouterProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouterProvider(
        api_key="sk-or-test",
        model="openai/gpt-4o-mini",
        client=client,
        **kwargs,
    )


def completion(content, **extra) -> dict:
    return {
        "id": "gen-123",
        "model": "openai/gpt-4o-mini",
        "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        **extra,
    }


@pytest.fixture
def request_payload():
    return LLMRequest(
        messages=[
            LLMMessage(role="system", content="You write SQL."),
            LLMMessage(role="user", content="Question: How many orders?\nSQL:"),
        ]
    )


class TestRequestShape:
    """Test what is sent to OpenRouter."""

    @pytest.mark.asyncio
    async def test_posts_model_messages_and_defaults(self, request_payload):
        """Test payload fields and default sampling parameters."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            captured["headers"] = request.headers
            captured["url"] = str(request.url)
            return httpx.Response(200, json=completion("SELECT 1"))

        provider = make_provider(handler, site_url="https://example.com", app_name="Text2SQL")
        await provider.generate(request_payload)

        body = captured["body"]
        assert captured["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert body["model"] == "openai/gpt-4o-mini"
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 256
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert captured["headers"]["Authorization"] == "Bearer sk-or-test"
        assert captured["headers"]["HTTP-Referer"] == "https://example.com"
        assert captured["headers"]["X-Title"] == "Text2SQL"

    @pytest.mark.asyncio
    async def test_optional_headers_omitted(self, request_payload):
        """Test that referer/title headers are only sent when configured."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["headers"] = request.headers
            return httpx.Response(200, json=completion("SELECT 1"))

        await make_provider(handler).generate(request_payload)

        assert "HTTP-Referer" not in captured["headers"]
        assert "X-Title" not in captured["headers"]


class TestResponseExtraction:
    """Test completion text extraction."""

    @pytest.mark.asyncio
    async def test_string_content(self, request_payload):
        """Test plain string content and usage mapping."""
        provider = make_provider(lambda r: httpx.Response(200, json=completion("SELECT 1")))

        response = await provider.generate(request_payload)

        assert response.content == "SELECT 1"
        assert response.provider == "openrouter"
        assert response.usage.total_tokens == 15
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_segment_list_content(self, request_payload):
        """Test that text segments and bare strings are concatenated in order."""
        content = [
            {"type": "text", "text": "SELECT "},
            {"type": "image_url", "image_url": {"url": "https://example.com/x.png"}},
            "COUNT(*)",
            {"type": "text", "text": " FROM sale.orders"},
        ]
        provider = make_provider(lambda r: httpx.Response(200, json=completion(content)))

        response = await provider.generate(request_payload)

        assert response.content == "SELECT COUNT(*) FROM sale.orders"

    @pytest.mark.asyncio
    async def test_unexpected_content_shape_is_empty(self, request_payload):
        """Test that a non-string, non-list content yields empty text."""
        provider = make_provider(lambda r: httpx.Response(200, json=completion({"weird": True})))

        response = await provider.generate(request_payload)

        assert response.content == ""

    @pytest.mark.asyncio
    async def test_missing_choices_is_empty_completion(self, request_payload):
        """Test that a body without choices raises EmptyCompletionError."""
        provider = make_provider(lambda r: httpx.Response(200, json={"id": "gen-1"}))

        with pytest.raises(EmptyCompletionError) as exc_info:
            await provider.generate(request_payload)

        assert "no completion" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_message_is_empty_completion(self, request_payload):
        """Test that a choice without a message raises EmptyCompletionError."""
        body = {"choices": [{"finish_reason": "stop"}]}
        provider = make_provider(lambda r: httpx.Response(200, json=body))

        with pytest.raises(EmptyCompletionError):
            await provider.generate(request_payload)


class TestErrors:
    """Test provider error mapping."""

    @pytest.mark.asyncio
    async def test_http_error_includes_status_and_message(self, request_payload):
        """Test that error.message and the status code reach the exception."""
        body = {"error": {"message": "Invalid API key\n  provided", "code": 401}}
        provider = make_provider(lambda r: httpx.Response(401, json=body))

        with pytest.raises(LLMProviderError) as exc_info:
            await provider.generate(request_payload)

        assert exc_info.value.message == "OpenRouter request failed (401): Invalid API key provided"
        assert exc_info.value.status_code == 401
        assert exc_info.value.error_type == "api_error"
        assert not isinstance(exc_info.value, EmptyCompletionError)

    @pytest.mark.asyncio
    async def test_error_payload_with_200_status(self, request_payload):
        """Test that an error body without choices is a provider error."""
        body = {"error": {"message": "Upstream overloaded", "code": 503}}
        provider = make_provider(lambda r: httpx.Response(200, json=body))

        with pytest.raises(LLMProviderError) as exc_info:
            await provider.generate(request_payload)

        assert exc_info.value.message == "OpenRouter request failed (503): Upstream overloaded"
        assert not isinstance(exc_info.value, EmptyCompletionError)

    @pytest.mark.asyncio
    async def test_timeout(self, request_payload):
        """Test that a timeout becomes a provider error naming the timeout."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        provider = make_provider(handler, timeout=5)

        with pytest.raises(LLMProviderError) as exc_info:
            await provider.generate(request_payload)

        assert exc_info.value.message == "OpenRouter request failed: timed out after 5s"

    @pytest.mark.asyncio
    async def test_connection_error(self, request_payload):
        """Test that transport failures become provider errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LLMProviderError) as exc_info:
            await make_provider(handler).generate(request_payload)

        assert exc_info.value.message == "OpenRouter request failed: connection refused"

    @pytest.mark.asyncio
    async def test_non_json_body(self, request_payload):
        """Test that an unparseable 200 body is a provider error."""
        provider = make_provider(lambda r: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(LLMProviderError):
            await provider.generate(request_payload)


class TestDescribeProviderError:
    """Test error message rendering."""

    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"error": "Rate limited"}, "Rate limited"),
            ({"error": {"message": "No credits"}}, "No credits"),
            ({"error": {"code": 429}}, "429: Provider returned error"),
            ({"message": "Bad gateway"}, "Bad gateway"),
            ({}, "Unknown error"),
            (None, "Unknown error"),
            ("plain text failure", "plain text failure"),
        ],
    )
    def test_detail_sources(self, body, expected):
        """Test each supported error body shape."""
        assert describe_provider_error(500, body) == f"OpenRouter request failed (500): {expected}"

    def test_without_status(self):
        """Test the message without a status code."""
        assert describe_provider_error(None, {"error": "boom"}) == "OpenRouter request failed: boom"
