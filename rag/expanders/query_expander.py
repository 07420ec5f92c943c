"""
LLM-driven query expansion.

Turns one question into query variants: sub-queries, parallel
reformulations, a hypothetical answer passage (HyDE), or step-back
abstractions followed by the original question. Malformed model output
degrades to the original question; expansion never raises.
"""
import json
import logging
import re
from typing import List, Literal

from knowledge.models import QueryVariant, ORIGINAL_TAG
from rag.contracts import TextGenerator
from rag.errors import ExpansionParseError
from rag.generators import prompts


logger = logging.getLogger(__name__)


ExpansionStrategy = Literal["multi_query", "parallel_query", "hypothetical_document", "step_back"]

EXPANSION_STRATEGIES = ("multi_query", "parallel_query", "hypothetical_document", "step_back")

_RE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def parse_query_list(raw: str) -> List[str]:
    """
    Parse model output into a list of query strings.

    Trims whitespace, strips code-fence markers when the text is fenced,
    then requires a non-empty JSON array of strings.

    Raises:
        ExpansionParseError: If the output is not a usable JSON array
    """
    cleaned = (raw or "").strip()
    if cleaned.startswith("```"):
        cleaned = _RE_FENCE.sub("", cleaned).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExpansionParseError(f"Expansion output is not JSON: {e}") from e

    if not isinstance(parsed, list):
        raise ExpansionParseError(f"Expansion output is not an array: {type(parsed).__name__}")
    if not all(isinstance(item, str) for item in parsed):
        raise ExpansionParseError("Expansion array contains non-string items")

    queries = [item.strip() for item in parsed if item.strip()]
    if not queries:
        raise ExpansionParseError("Expansion array is empty")
    return queries


class QueryExpander:
    """
    Query expander backed by a text generator.

    Strategies:
    - multi_query: N sub-queries covering sub-problems
    - parallel_query: N reformulations of the same question
    - hypothetical_document: one synthetic answer passage used as the query
    - step_back: abstractions (tagged by level), original question last
    """

    def __init__(
        self,
        generator: TextGenerator,
        temperature: float = 0.0,
        max_tokens: int = 512
    ):
        """
        Initialize query expander.

        Args:
            generator: Text generation capability
            temperature: Sampling temperature for expansion calls
            max_tokens: Maximum output tokens for expansion calls
        """
        self.generator = generator
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _fallback(self, question: str) -> List[QueryVariant]:
        return [QueryVariant(text=question, tag=ORIGINAL_TAG)]

    def _generate_queries(self, strategy: str, question: str, n: int) -> List[str]:
        prompt = prompts.build_expansion_prompt(strategy, question, n)
        raw = self.generator.generate(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )
        return parse_query_list(raw)

    def expand(
        self,
        question: str,
        strategy: ExpansionStrategy = "multi_query",
        n: int = 3
    ) -> List[QueryVariant]:
        """
        Expand a question into query variants.

        Args:
            question: Original question
            strategy: Expansion strategy
            n: Number of variants to ask for (caps the result)

        Returns:
            Query variants; [original question] on any parse or call failure
        """
        if strategy not in EXPANSION_STRATEGIES:
            raise ValueError(f"Unknown expansion strategy: {strategy}")

        try:
            queries = self._generate_queries(strategy, question, n)
        except ExpansionParseError as e:
            logger.info(f"Falling back to original question ({strategy}): {e}")
            return self._fallback(question)
        except Exception as e:
            logger.warning(f"Expansion call failed ({strategy}), using original question: {e}")
            return self._fallback(question)

        if strategy == "hypothetical_document":
            variants = [QueryVariant(text=queries[0], tag="hypothetical-document")]
        elif strategy == "step_back":
            variants = [
                QueryVariant(text=q, tag=f"abstract-level-{i}")
                for i, q in enumerate(queries[:n], start=1)
            ]
            variants.append(QueryVariant(text=question, tag=ORIGINAL_TAG))
        elif strategy == "parallel_query":
            variants = [
                QueryVariant(text=q, tag=f"reformulation-{i}")
                for i, q in enumerate(queries[:n], start=1)
            ]
        else:
            variants = [
                QueryVariant(text=q, tag=f"sub-query-{i}")
                for i, q in enumerate(queries[:n], start=1)
            ]

        logger.info(f"Expanded question into {len(variants)} variants ({strategy})")
        logger.debug(f"Variants: {[v.text for v in variants]}")
        return variants
