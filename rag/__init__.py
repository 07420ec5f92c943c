"""
WikiSense: multi-query retrieval-fusion question answering over web pages.

This package provides:
- LLM query expansion (multi-query, parallel, HyDE, step-back)
- Concurrent passage retrieval with a depth policy
- Reciprocal rank fusion
- Answer synthesis
- An orchestrator running fused and sequential strategies
"""

from rag.contracts import TextGenerator, SimilaritySearch, Retriever, Synthesizer, Pipeline
from rag.errors import (
    WikiSenseError,
    ExpansionParseError,
    RetrievalError,
    GenerationError,
    IngestionError
)
from rag.pipelines import Orchestrator, StrategySpec, BUILTIN_STRATEGIES, load_strategies

__version__ = "1.0.0"

__all__ = [
    # Contracts
    'TextGenerator',
    'SimilaritySearch',
    'Retriever',
    'Synthesizer',
    'Pipeline',

    # Errors
    'WikiSenseError',
    'ExpansionParseError',
    'RetrievalError',
    'GenerationError',
    'IngestionError',

    # Pipelines
    'Orchestrator',
    'StrategySpec',
    'BUILTIN_STRATEGIES',
    'load_strategies',
]
