"""Question-to-answer pipeline."""

from text2sql.pipeline.orchestrator import NLQueryPipeline

__all__ = ["NLQueryPipeline"]
