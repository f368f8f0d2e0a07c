"""
LLM Request and Response Models

Pydantic models for chat-completion provider interactions, plus the tagged
union used to read ``choices[0].message.content`` when a provider returns a
list of typed segments instead of a plain string.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, model_validator


class LLMMessage(BaseModel):
    """Single message in an LLM conversation."""

    role: Literal["system", "user", "assistant"] = Field(
        ...,
        description="Message role"
    )
    content: str = Field(
        ...,
        description="Message content",
        min_length=1
    )


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    messages: List[LLMMessage] = Field(
        ...,
        description="Conversation messages",
        min_length=1
    )
    temperature: Optional[float] = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (overrides default)"
    )
    max_tokens: Optional[int] = Field(
        None,
        gt=0,
        description="Maximum tokens to generate (overrides default)"
    )
    model: Optional[str] = Field(
        None,
        description="Specific model to use (overrides default)"
    )
    timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Request timeout in seconds (overrides default)"
    )


class LLMUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(
        ...,
        description="Concatenated text content (may be empty)"
    )
    model: str = Field(
        ...,
        description="Model that generated the response"
    )
    usage: LLMUsage = Field(
        default_factory=LLMUsage,
        description="Token usage information"
    )
    finish_reason: Literal["stop", "length", "content_filter", "error"] = Field(
        default="stop",
        description="Reason the generation stopped"
    )
    provider: str = Field(
        ...,
        description="Provider that handled the request"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific response data"
    )


# ============================================================================
# Message content segments
# ============================================================================


class TextSegment(BaseModel):
    """A text part of a multi-part message. Bare strings are text parts too."""

    type: Literal["text"] = "text"
    text: str = ""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def from_bare_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"type": "text", "text": value}
        if isinstance(value, dict):
            value = {**value, "type": "text"}
            text = value.get("text")
            if not isinstance(text, str):
                value["text"] = "" if text is None else str(text)
        return value


class OtherSegment(BaseModel):
    """Any non-text part (images, tool calls, reasoning traces, ...)."""

    type: Any = "other"

    model_config = ConfigDict(extra="allow")


def _segment_tag(value: Any) -> str:
    if isinstance(value, str):
        return "text"
    if isinstance(value, dict):
        kind = value.get("type")
        if kind == "text" or (kind is None and "text" in value):
            return "text"
        return "other"
    if isinstance(value, TextSegment):
        return "text"
    return "other"


ContentSegment = Annotated[
    Union[Annotated[TextSegment, Tag("text")], Annotated[OtherSegment, Tag("other")]],
    Discriminator(_segment_tag),
]

_SEGMENTS = TypeAdapter(List[ContentSegment])


def assemble_content(content: Any) -> str:
    """
    Flatten provider message content into text.

    Strings pass through; lists contribute their text segments in order;
    any other shape yields an empty string.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    # non-dict, non-str items cannot be validated; treat them as empty
    items = [item if isinstance(item, (str, dict)) else {"type": "other"} for item in content]
    segments = _SEGMENTS.validate_python(items)
    return "".join(segment.text for segment in segments if isinstance(segment, TextSegment))
