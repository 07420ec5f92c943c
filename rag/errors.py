"""
Error taxonomy for the retrieval-fusion pipeline.

Each error names the stage it was raised in so failures can be reported
with enough context to diagnose (which stage, which query variant).
"""
from typing import Optional


class WikiSenseError(Exception):
    """Base error for all pipeline stages."""

    stage = "pipeline"


class ExpansionParseError(WikiSenseError, ValueError):
    """Query expansion output is not a JSON array of strings.

    Always recovered inside the expander; never surfaced to callers.
    """

    stage = "expansion"


class RetrievalError(WikiSenseError):
    """Similarity search failed for one query variant."""

    stage = "retrieval"

    def __init__(self, message: str, query: str = "", variant_tag: Optional[str] = None):
        super().__init__(message)
        self.query = query
        self.variant_tag = variant_tag


class GenerationError(WikiSenseError):
    """Answer synthesis failed; fatal to the pipeline pass."""

    stage = "generation"

    def __init__(self, message: str, question: str = "", variant_tag: Optional[str] = None):
        super().__init__(message)
        self.question = question
        self.variant_tag = variant_tag


class IngestionError(WikiSenseError):
    """Fetching or chunking the source page failed; fatal before retrieval starts."""

    stage = "ingestion"

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url
