"""
Fixed user-facing messages shared between prompt construction and
completion parsing.

OUT_OF_SCOPE_MESSAGE is the sentence the model is told to reproduce verbatim
when a question cannot be answered from the schema, and the sentence the SQL
generator looks for in completions. Import it; never restate it.
"""

OUT_OF_SCOPE_MESSAGE = (
    "I can only help with questions about the data in this database. "
    "Could you please rephrase your question to focus on the available data?"
)

# Paraphrase accepted case-insensitively when the model does not echo the
# full sentence.
OUT_OF_SCOPE_MARKER = "can only help with questions about the data"
