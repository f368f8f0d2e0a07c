"""
SQLGenerator: natural-language question to raw SQL text.

Builds the system/user prompt pair, calls the chat-completion provider,
cleans the completion (fences, stray backticks, control tokens) and decides
whether the model declined the question. The returned text is still
untrusted; it must go through the sanitizer before execution.
"""

import logging

from text2sql.llm.base import BaseLLMProvider
from text2sql.llm.models import LLMMessage, LLMRequest
from text2sql.models.errors import EmptyCompletionError, OutOfScopeError
from text2sql.models.query import ModelCompletion, PromptInput
from text2sql.prompts.builder import DEFAULT_ROW_LIMIT, build_prompt
from text2sql.prompts.messages import OUT_OF_SCOPE_MARKER, OUT_OF_SCOPE_MESSAGE
from text2sql.prompts.scope import ScopePolicy
from text2sql.utils.completion_text import clean_completion

logger = logging.getLogger(__name__)


def is_refusal(text: str) -> bool:
    """True when cleaned completion text is the out-of-scope sentence."""
    if not text:
        return False
    if text == OUT_OF_SCOPE_MESSAGE or OUT_OF_SCOPE_MESSAGE in text:
        return True
    return OUT_OF_SCOPE_MARKER in text.lower()


class SQLGenerator:
    """
    Generates SQL for a question against a formatted schema.

    Usage:
        generator = SQLGenerator(provider)
        sql = await generator.generate_sql(
            PromptInput(question="Top 5 stores by revenue", schema_text=schema_text)
        )
    """

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        scope: ScopePolicy | None = None,
        row_limit: int = DEFAULT_ROW_LIMIT,
    ):
        self.llm = llm_provider
        self.scope = scope
        self.row_limit = row_limit

    async def complete(self, prompt_input: PromptInput) -> ModelCompletion:
        """
        Request a completion and classify it.

        Raises:
            LLMProviderError: Transport or provider failure
            EmptyCompletionError: Nothing left after cleanup
        """
        prompts = build_prompt(prompt_input, scope=self.scope, row_limit=self.row_limit)
        request = LLMRequest(
            messages=[
                LLMMessage(role="system", content=prompts.system_prompt),
                LLMMessage(role="user", content=prompts.user_prompt),
            ]
        )

        response = await self.llm.generate(request)
        text = clean_completion(response.content)

        if not text:
            logger.error(
                "Model returned an empty completion",
                extra={"finish_reason": response.finish_reason, "model": response.model},
            )
            raise EmptyCompletionError(
                "OpenRouter returned an empty completion. The model may have failed to generate SQL."
            )

        refusal = is_refusal(text)
        logger.debug(
            f"Completion received ({len(text)} chars, refusal={refusal})",
            extra={"model": response.model, "refusal": refusal},
        )
        return ModelCompletion(raw_text=text, is_refusal=refusal)

    async def generate_sql(self, prompt_input: PromptInput) -> str:
        """
        Return cleaned SQL text for the question.

        Raises:
            OutOfScopeError: The model declined the question
            LLMProviderError: Transport or provider failure (incl. empty completion)
        """
        completion = await self.complete(prompt_input)
        if completion.is_refusal:
            logger.info(
                "Question judged out of scope",
                extra={"question_preview": prompt_input.question[:100]},
            )
            raise OutOfScopeError(OUT_OF_SCOPE_MESSAGE, raw_text=completion.raw_text)
        return completion.raw_text
