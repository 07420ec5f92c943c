"""
Passage retriever over a similarity-search capability.

Retrieval depth is a policy: abstract (step-back) variants need broader
coverage than concrete ones. Several variants are retrieved concurrently
and each result is paired with the variant that produced it.
"""
import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FuturesTimeout
from dataclasses import dataclass
from typing import List, Optional, Sequence

from knowledge.models import Passage, QueryVariant, RetrievalOutcome
from rag.contracts import SimilaritySearch
from rag.errors import RetrievalError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepthPolicy:
    default_k: int = 2
    abstract_k: int = 4

    def k_for(self, variant: QueryVariant) -> int:
        return self.abstract_k if variant.is_abstract else self.default_k


class PassageRetriever:
    """
    Wraps a similarity search with a depth policy and concurrent fan-out.
    """

    def __init__(
        self,
        search: SimilaritySearch,
        depth_policy: Optional[DepthPolicy] = None,
        max_workers: int = 8,
        timeout_s: Optional[float] = 30.0
    ):
        """
        Initialize passage retriever.

        Args:
            search: Similarity-search capability (e.g. FaissVectorStore)
            depth_policy: Policy mapping a variant to its k
            max_workers: Maximum concurrent retrievals
            timeout_s: Time budget for one concurrent fan-out (None = no limit)
        """
        self.search = search
        self.depth_policy = depth_policy or DepthPolicy()
        self.max_workers = max_workers
        self.timeout_s = timeout_s

    def retrieve(self, query: str, k: int, variant_tag: Optional[str] = None) -> List[Passage]:
        """
        Retrieve a ranked list for one query.

        Raises:
            RetrievalError: If the underlying search fails
        """
        try:
            return list(self.search.similarity_search(query, k))
        except Exception as e:
            raise RetrievalError(
                f"Similarity search failed for variant '{variant_tag or 'original'}': {e}",
                query=query,
                variant_tag=variant_tag
            ) from e

    def retrieve_variant(self, variant: QueryVariant) -> RetrievalOutcome:
        """Retrieve for one variant, reporting failure in the outcome."""
        try:
            passages = self.retrieve(variant.text, self.depth_policy.k_for(variant), variant.tag)
        except RetrievalError as e:
            logger.warning(f"Retrieval failed for [{variant.tag}] '{variant.text}': {e}")
            return RetrievalOutcome(variant=variant, error=str(e))
        return RetrievalOutcome(variant=variant, passages=passages)

    def _submit(self, variant: QueryVariant, slots: threading.BoundedSemaphore) -> Future:
        """Run one variant on a daemon worker; at most max_workers search at once."""
        future: Future = Future()

        def work():
            with slots:
                if not future.set_running_or_notify_cancel():
                    return
                try:
                    future.set_result(self.retrieve_variant(variant))
                except Exception as e:
                    future.set_exception(e)

        threading.Thread(target=work, name=f"passage-retrieval-{variant.tag}", daemon=True).start()
        return future

    def retrieve_variants(self, variants: Sequence[QueryVariant]) -> List[RetrievalOutcome]:
        """
        Retrieve for all variants concurrently and join before returning.

        Every variant, including a lone one, runs under the `timeout_s`
        budget. Workers are daemon threads: a search that outlives its
        budget is abandoned and never delays interpreter exit.

        Args:
            variants: Query variants

        Returns:
            One outcome per variant, in input order; failed or timed-out
            variants carry an error instead of passages
        """
        if not variants:
            return []

        start = time.time()
        slots = threading.BoundedSemaphore(max(1, self.max_workers))
        futures = [self._submit(v, slots) for v in variants]

        outcomes = []
        for variant, future in zip(variants, futures):
            remaining = None
            if self.timeout_s is not None:
                remaining = max(0.0, self.timeout_s - (time.time() - start))
            try:
                outcomes.append(future.result(timeout=remaining))
            except FuturesTimeout:
                future.cancel()
                logger.warning(f"Retrieval timed out for [{variant.tag}] '{variant.text}'")
                outcomes.append(RetrievalOutcome(
                    variant=variant,
                    error=f"Similarity search timed out after {self.timeout_s}s"
                ))

        elapsed = (time.time() - start) * 1000
        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(f"Retrieved {len(variants)} variants in {elapsed:.1f}ms ({failed} failed)")
        return outcomes
