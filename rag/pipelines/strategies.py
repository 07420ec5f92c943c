"""
Strategy presets for the retrieval-fusion orchestrator.

Each preset combines an expansion strategy, an execution mode and a fusion
method. Presets can be overridden from YAML (configs/strategies.yaml).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from rag.fusion.rank_fusion import DEFAULT_RRF_K


class StrategySpec(BaseModel):
    """
    Configuration of one strategy.

    - fused: expand, retrieve every variant concurrently, fuse, answer once
    - sequential: one retrieve -> generate pass per variant, context carried forward
    """
    name: str
    expansion: Literal["multi_query", "parallel_query", "hypothetical_document", "step_back"]
    mode: Literal["fused", "sequential"] = "fused"
    num_queries: int = Field(default=3, ge=1)
    fusion: Literal["rrf", "dedup"] = "rrf"
    rrf_k: float = Field(default=DEFAULT_RRF_K, ge=0)
    top_n: Optional[int] = Field(default=4, ge=1)
    default_k: int = Field(default=2, ge=1)
    abstract_k: int = Field(default=4, ge=1)
    # Which question the answer step sees: the user's, or the pass's variant
    answer_question: Literal["original", "variant"] = "original"
    collection: str = "wikisense"
    description: str = ""


BUILTIN_STRATEGIES: Dict[str, StrategySpec] = {
    "rrf": StrategySpec(
        name="rrf",
        expansion="multi_query",
        mode="fused",
        fusion="rrf",
        top_n=4,
        collection="reciprocal-rank-fusion",
        description="Multi-query expansion with reciprocal rank fusion"
    ),
    "parallel_query": StrategySpec(
        name="parallel_query",
        expansion="parallel_query",
        mode="fused",
        fusion="dedup",
        top_n=None,
        collection="parallel-query-retrieval",
        description="Parallel reformulations, deduplicated in arrival order"
    ),
    "hyde": StrategySpec(
        name="hyde",
        expansion="hypothetical_document",
        mode="fused",
        num_queries=1,
        fusion="rrf",
        top_n=None,
        collection="hypothetical-document-embedding",
        description="Retrieve with a hypothetical answer passage"
    ),
    "step_back": StrategySpec(
        name="step_back",
        expansion="step_back",
        mode="sequential",
        answer_question="variant",
        collection="step-back-prompting",
        description="Step-back abstractions answered in turn, original question last"
    ),
    "chain_of_thought": StrategySpec(
        name="chain_of_thought",
        expansion="multi_query",
        mode="sequential",
        answer_question="variant",
        collection="chain-of-thought",
        description="Sub-queries answered in sequence with accumulated context"
    ),
}


def load_strategies(config_path: str | Path | None = None) -> Dict[str, StrategySpec]:
    """
    Load strategy presets, overlaying YAML entries on the built-ins.

    YAML layout:
        strategies:
          rrf:
            top_n: 6
          my_strategy:
            expansion: multi_query
            mode: fused

    Args:
        config_path: YAML file (missing file = built-ins only)

    Returns:
        Mapping of strategy name to spec
    """
    strategies = dict(BUILTIN_STRATEGIES)
    if config_path is None or not Path(config_path).exists():
        return strategies

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    for name, overrides in (data.get("strategies") or {}).items():
        base = strategies.get(name)
        merged = base.model_dump() if base else {}
        merged.update(overrides or {})
        merged["name"] = name
        strategies[name] = StrategySpec.model_validate(merged)

    return strategies
