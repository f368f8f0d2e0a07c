"""
SQL prompt construction.

Builds the system/user prompt pair for SQL generation. Pure formatting: no
network, no settings lookups, so the output can be asserted substring by
substring in tests.

The system prompt carries the rules and the verbatim refusal sentence; the
schema goes in the user prompt, followed by the optional transcript, the
question, and a trailing ``SQL:`` cue for completion-style models.
"""

from text2sql.models.query import PromptInput, PromptOutput
from text2sql.prompts.messages import OUT_OF_SCOPE_MESSAGE
from text2sql.prompts.scope import ScopePolicy

DEFAULT_ROW_LIMIT = 50


def _rules(row_limit: int) -> list[str]:
    return [
        "Output only SQL with no prose, EXCEPT when the question is outside the scope "
        "of the provided database schema.",
        "If the question cannot be answered using the provided schema, respond with ONLY "
        f"this exact message (no SQL): '{OUT_OF_SCOPE_MESSAGE}'",
        "Use fully qualified table names (schema.table).",
        "Only generate SELECT queries.",
        "Avoid cartesian products; always join on explicit key conditions.",
        f"Include LIMIT {row_limit} unless aggregation makes it unnecessary.",
        "If the question requests a time range or filter (e.g. 'last month', 'this year'), "
        "translate it explicitly into date conditions.",
    ]


def build_system_prompt(scope: ScopePolicy | None = None, row_limit: int = DEFAULT_ROW_LIMIT) -> str:
    scope = scope or ScopePolicy()
    lines = [
        "You are an assistant that writes safe, syntactically correct PostgreSQL queries.",
        "Given the database schema and optional conversation history, respond with a single "
        "SQL statement that best answers the question.",
        "",
        "Scope and Boundaries:",
        "You must ONLY answer questions related to the database schema provided. This system "
        "is designed to query the specific analytics database described in the schema.",
        "If a question is outside the scope of this database, respond with exactly:",
        f"'{OUT_OF_SCOPE_MESSAGE}'",
        "Reproduce that sentence character for character and add nothing else.",
        "Questions that can be answered from the schema are in scope even when phrased "
        "loosely; do not decline them.",
        "",
        "In scope (examples, not exhaustive):",
        *[f"- {topic}" for topic in scope.in_scope],
        "",
        "Out of scope (examples, not exhaustive):",
        *[f"- {topic}" for topic in scope.out_of_scope],
        "",
        "Rules:",
        *[f"{idx}. {rule}" for idx, rule in enumerate(_rules(row_limit), start=1)],
    ]
    return "\n".join(lines)


def render_history(conversation: list[str] | None) -> list[str]:
    if not conversation:
        return []
    return [f"Turn {idx}: {turn}" for idx, turn in enumerate(conversation, start=1)]


def build_user_prompt(question: str, schema_text: str, conversation: list[str] | None = None) -> str:
    parts = ["Schema overview:", schema_text.strip(), ""]

    history = render_history(conversation)
    if history:
        parts.extend(["Conversation history:", *history, ""])

    parts.extend([f"Question: {question.strip()}", "SQL:"])
    return "\n".join(parts)


def build_prompt(
    prompt_input: PromptInput,
    scope: ScopePolicy | None = None,
    row_limit: int = DEFAULT_ROW_LIMIT,
) -> PromptOutput:
    """
    Build the system and user prompts for one question.

    Args:
        prompt_input: Question, formatted schema and optional transcript
        scope: Topic examples (defaults to the built-in lists)
        row_limit: Row cap the model is asked to apply

    Returns:
        PromptOutput with system_prompt and user_prompt
    """
    return PromptOutput(
        system_prompt=build_system_prompt(scope, row_limit),
        user_prompt=build_user_prompt(
            prompt_input.question,
            prompt_input.schema_text,
            prompt_input.conversation,
        ),
    )
