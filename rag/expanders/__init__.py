"""
Query expanders.
"""
from rag.expanders.query_expander import QueryExpander, parse_query_list, EXPANSION_STRATEGIES

__all__ = [
    'QueryExpander',
    'parse_query_list',
    'EXPANSION_STRATEGIES'
]
