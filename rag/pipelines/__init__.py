"""
Retrieval-fusion pipelines.
"""
from rag.pipelines.orchestrator import Orchestrator, Stage
from rag.pipelines.strategies import StrategySpec, BUILTIN_STRATEGIES, load_strategies

__all__ = [
    'Orchestrator',
    'Stage',
    'StrategySpec',
    'BUILTIN_STRATEGIES',
    'load_strategies'
]
