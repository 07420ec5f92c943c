"""
Retrievers for retrieval-fusion pipelines.
"""
from rag.retrievers.passage_retriever import DepthPolicy, PassageRetriever

__all__ = [
    'DepthPolicy',
    'PassageRetriever'
]
