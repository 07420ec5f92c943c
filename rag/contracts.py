"""
Contracts (protocols) for pipeline components.

The orchestrator depends only on these interfaces, so remote collaborators
(language model, vector collection) can be swapped or faked in tests.
"""
from typing import Protocol, List, Optional, Sequence, runtime_checkable

from knowledge.models import Passage, QueryVariant, RetrievalOutcome


@runtime_checkable
class TextGenerator(Protocol):
    """Text-in/text-out language model capability."""

    def generate(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> str:
        """
        Generate a completion.

        Args:
            user_prompt: User message
            system_prompt: Optional system message
            **kwargs: Generation parameters (temperature, max_tokens, etc.)

        Returns:
            Generated text
        """
        ...


@runtime_checkable
class SimilaritySearch(Protocol):
    """Nearest-neighbour passage search over a populated collection."""

    def similarity_search(self, query: str, k: int = 4) -> List[Passage]:
        """
        Return the k passages most similar to the query, best first.
        """
        ...


@runtime_checkable
class Expander(Protocol):
    """Protocol for query expanders."""

    def expand(self, question: str, strategy: str = "multi_query", n: int = 3) -> List[QueryVariant]:
        """
        Expand a question into query variants.

        Returns:
            Variants; never empty (falls back to the original question)
        """
        ...


@runtime_checkable
class Retriever(Protocol):
    """Protocol for passage retrievers."""

    def retrieve(self, query: str, k: int) -> List[Passage]:
        """
        Retrieve a ranked list for one query.

        Args:
            query: Query text
            k: Number of passages to retrieve

        Returns:
            Ranked passages, index 0 best
        """
        ...

    def retrieve_variants(self, variants: Sequence[QueryVariant]) -> List[RetrievalOutcome]:
        """
        Retrieve for several variants concurrently.

        Args:
            variants: Query variants

        Returns:
            One outcome per variant, in input order
        """
        ...


@runtime_checkable
class Synthesizer(Protocol):
    """Protocol for answer synthesizers."""

    def synthesize(
        self,
        question: str,
        context: Sequence[Passage],
        variant_tag: Optional[str] = None
    ) -> str:
        """
        Produce an answer to the question from the ordered context.
        """
        ...


@runtime_checkable
class Pipeline(Protocol):
    """Protocol for complete retrieval-fusion pipelines."""

    def run(self, question: str):
        """
        Run the pipeline for one question.

        Returns:
            RunSummary with one result per pass
        """
        ...

    @property
    def name(self) -> str:
        """Pipeline name for identification."""
        ...
