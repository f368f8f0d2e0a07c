"""
Scope policy: example topics the model should answer or decline.

Without a worked list the model over-refuses borderline analytics questions.
The lists are domain content, so they live in YAML (config/scope.yaml) and
are loaded here; a missing file falls back to the defaults below.

File format:

    in_scope:
      - Revenue, sales totals and trends over time
    out_of_scope:
      - General knowledge or trivia
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_IN_SCOPE = [
    "Revenue, sales totals and trends over time (daily, monthly, yearly)",
    "Orders, order items, refunds and average order value",
    "Customers, loyalty and repeat purchase behaviour",
    "Stores, channels and regional performance comparisons",
    "Menu items, categories and product popularity",
    "Rankings such as top or bottom N by any metric in the schema",
]

DEFAULT_OUT_OF_SCOPE = [
    "General knowledge, trivia or current events",
    "Weather, news, sports or other external data not present in the schema",
    "Writing code, essays or anything other than a SQL query",
    "Requests to modify, delete or insert data",
    "Personal advice or opinions unrelated to the data",
]


class ScopePolicy(BaseModel):
    """Topic examples rendered into the system prompt."""

    in_scope: list[str] = Field(default_factory=lambda: list(DEFAULT_IN_SCOPE))
    out_of_scope: list[str] = Field(default_factory=lambda: list(DEFAULT_OUT_OF_SCOPE))


def load_scope_policy(path: str | Path | None = None) -> ScopePolicy:
    """
    Load topic lists from YAML.

    Relative paths resolve against the project root. Keys missing from the
    file keep their defaults.
    """
    if path is None:
        return ScopePolicy()

    scope_path = Path(path)
    if not scope_path.is_absolute():
        scope_path = Path(__file__).resolve().parents[2] / scope_path
    if not scope_path.exists():
        logger.warning(f"Scope policy file not found, using defaults: {scope_path}")
        return ScopePolicy()

    data = yaml.safe_load(scope_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Scope policy must be a mapping: {scope_path}")

    policy = ScopePolicy(**{key: data[key] for key in ("in_scope", "out_of_scope") if key in data})
    logger.info(
        f"Loaded scope policy from {scope_path}",
        extra={"in_scope": len(policy.in_scope), "out_of_scope": len(policy.out_of_scope)},
    )
    return policy
