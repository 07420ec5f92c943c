"""
Retrieval-fusion orchestrator.

Every pass is a two-stage machine, RETRIEVING -> GENERATING, with no
branches or cycles:

1. Retrieving: retrieve for the pass's variants (concurrently when there
   are several) and fuse them into the pass context
2. Generating: synthesize the answer from the context

Fused strategies (rrf, hyde, parallel_query) run a single pass over all
variants starting from an empty context. Sequential strategies
(step_back, chain_of_thought) run one pass per variant and carry the
accumulated context forward: each pass appends its new retrieval to
everything retrieved before (no dedup), so context never shrinks.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from knowledge.models import (
    LogRecord, Passage, PipelineResult, QueryVariant, RetrievalTrace, RunSummary
)
from rag.contracts import Expander, Retriever, Synthesizer
from rag.fusion.rank_fusion import fuse
from rag.pipelines.strategies import StrategySpec
from rag.run_log import JsonlRunLog


logger = logging.getLogger(__name__)


class Stage(str, Enum):
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    DONE = "done"


@dataclass
class PassState:
    """State threaded from the retrieving stage to the generating stage."""
    question: str
    variants: List[QueryVariant]
    answer_variant: QueryVariant
    prior_context: List[Passage] = field(default_factory=list)
    context: List[Passage] = field(default_factory=list)
    retrieved_counts: Dict[str, int] = field(default_factory=dict)
    failed_variants: Dict[str, str] = field(default_factory=dict)
    answer: Optional[str] = None
    stage: Stage = Stage.RETRIEVING
    retrieval_time_ms: float = 0.0
    generation_time_ms: float = 0.0


class Orchestrator:
    """
    Runs expand -> retrieve(xN) -> fuse -> generate for one question.
    """

    def __init__(
        self,
        expander: Expander,
        retriever: Retriever,
        synthesizer: Synthesizer,
        strategy: StrategySpec,
        run_log: Optional[JsonlRunLog] = None,
        source_url: str = ""
    ):
        """
        Initialize orchestrator.

        Args:
            expander: Query expander
            retriever: Passage retriever (carries the depth policy)
            synthesizer: Answer synthesizer
            strategy: Strategy preset
            run_log: Optional append-only log sink
            source_url: Source page the collection was built from (logged)
        """
        self.expander = expander
        self.retriever = retriever
        self.synthesizer = synthesizer
        self.strategy = strategy
        self.run_log = run_log
        self.source_url = source_url

    @property
    def name(self) -> str:
        return f"WikiSense_{self.strategy.name}"

    def _retrieve_stage(self, state: PassState) -> None:
        start = time.time()
        outcomes = self.retriever.retrieve_variants(state.variants)

        ranked_lists = []
        for outcome in outcomes:
            if outcome.ok:
                ranked_lists.append(outcome.passages)
                state.retrieved_counts[outcome.variant.tag] = len(outcome.passages)
            else:
                state.failed_variants[outcome.variant.tag] = outcome.error

        if self.strategy.mode == "sequential":
            new_passages = [p for ranked in ranked_lists for p in ranked]
            state.context = state.prior_context + new_passages
        else:
            state.context = fuse(
                ranked_lists,
                k_damping=self.strategy.rrf_k,
                top_n=self.strategy.top_n,
                method=self.strategy.fusion
            )

        state.retrieval_time_ms = (time.time() - start) * 1000
        state.stage = Stage.GENERATING
        logger.info(
            f"[{self.strategy.name}] retrieved {len(state.context)} context passages "
            f"for [{state.answer_variant.tag}] in {state.retrieval_time_ms:.1f}ms"
        )

    def _generate_stage(self, state: PassState) -> None:
        start = time.time()
        state.answer = self.synthesizer.synthesize(
            state.question,
            state.context,
            variant_tag=state.answer_variant.tag
        )
        state.generation_time_ms = (time.time() - start) * 1000
        state.stage = Stage.DONE
        logger.info(f"[{self.strategy.name}] generated answer in {state.generation_time_ms:.1f}ms")

    def _run_pass(self, state: PassState) -> PassState:
        while state.stage is not Stage.DONE:
            if state.stage is Stage.RETRIEVING:
                self._retrieve_stage(state)
            elif state.stage is Stage.GENERATING:
                self._generate_stage(state)
        return state

    def _emit(self, original_question: str, state: PassState) -> PipelineResult:
        result = PipelineResult(
            question=state.question,
            variant=state.answer_variant,
            context=state.context,
            answer=state.answer,
            trace=RetrievalTrace(
                question=state.question,
                strategy=self.strategy.name,
                variants=state.variants,
                retrieved_counts=state.retrieved_counts,
                failed_variants=state.failed_variants,
                context_count=len(state.context),
                retrieval_time_ms=state.retrieval_time_ms,
                generation_time_ms=state.generation_time_ms
            )
        )
        if self.run_log is not None:
            self.run_log.append(LogRecord(
                source_url=self.source_url,
                original_question=original_question,
                variant=state.answer_variant.text,
                variant_tag=state.answer_variant.tag,
                strategy=self.strategy.name,
                answer=state.answer
            ))
        return result

    def run(self, question: str) -> RunSummary:
        """
        Run the strategy for one question.

        Args:
            question: User question

        Returns:
            RunSummary; its answer is the final pass's answer

        Raises:
            GenerationError: If answer synthesis fails (no result or log
                record is emitted for the failed pass)
        """
        variants = self.expander.expand(
            question,
            strategy=self.strategy.expansion,
            n=self.strategy.num_queries
        )
        summary = RunSummary(question=question, strategy=self.strategy.name)

        if self.strategy.mode == "sequential":
            accumulated: List[Passage] = []
            for variant in variants:
                answer_question = variant.text if self.strategy.answer_question == "variant" else question
                state = self._run_pass(PassState(
                    question=answer_question,
                    variants=[variant],
                    answer_variant=variant,
                    prior_context=accumulated
                ))
                accumulated = state.context
                summary.results.append(self._emit(question, state))
        else:
            # A lone variant (e.g. a hypothetical document) represents the pass
            answer_variant = variants[0] if len(variants) == 1 else QueryVariant(text=question)
            answer_question = answer_variant.text if self.strategy.answer_question == "variant" else question
            state = self._run_pass(PassState(
                question=answer_question,
                variants=variants,
                answer_variant=answer_variant
            ))
            summary.results.append(self._emit(question, state))

        logger.info(f"[{self.strategy.name}] completed {len(summary.results)} passes")
        return summary
