"""Text2SQL: natural-language questions answered with read-only SQL."""

__version__ = "0.1.0"
