"""
Pipeline factory for creating strategy orchestrators on demand.

Owns the shared remote clients (LLM, vector collections) and injects them
into each orchestrator explicitly.
"""
import logging
from typing import Dict, Optional

from llm.llm_client import LLMClient

from rag.expanders.query_expander import QueryExpander
from rag.generators.answer_synthesizer import AnswerSynthesizer
from rag.pipelines.orchestrator import Orchestrator
from rag.pipelines.strategies import StrategySpec, load_strategies
from rag.retrievers.passage_retriever import DepthPolicy, PassageRetriever
from rag.retrievers.vector_store import FaissVectorStore
from rag.run_log import JsonlRunLog

from apps.cli.config import CliConfig


logger = logging.getLogger(__name__)


class PipelineFactory:
    """
    Factory for creating orchestrators.

    Manages shared resources (LLM client, one vector store per collection)
    and creates orchestrators from strategy presets.
    """

    def __init__(self, strategy_config: Optional[str] = None):
        """
        Initialize factory.

        Args:
            strategy_config: YAML file with strategy overrides
        """
        self.strategies: Dict[str, StrategySpec] = load_strategies(strategy_config or CliConfig.STRATEGY_CONFIG)

        # Initialize shared resources lazily
        self._llm_client: Optional[LLMClient] = None
        self._stores: Dict[str, FaissVectorStore] = {}
        self._encoder = None

        logger.info(f"PipelineFactory initialized with strategies: {sorted(self.strategies)}")

    def get_strategy(self, name: str) -> StrategySpec:
        if name not in self.strategies:
            raise ValueError(f"Unknown strategy '{name}'. Available: {', '.join(sorted(self.strategies))}")
        return self.strategies[name]

    def get_llm_client(self) -> LLMClient:
        """Get or create LLM client."""
        if self._llm_client is None:
            self._llm_client = LLMClient(
                api_key=CliConfig.LLM_API_KEY,
                base_url=CliConfig.LLM_BASE_URL,
                model=CliConfig.LLM_MODEL,
                timeout=CliConfig.LLM_TIMEOUT_S,
                cache_enabled=CliConfig.LLM_CACHE_ENABLED,
                cache_path=CliConfig.CACHE_PATH
            )
            logger.info(f"Created LLM client: {CliConfig.LLM_MODEL}")
        return self._llm_client

    def get_vector_store(self, collection: str) -> FaissVectorStore:
        """Get or create the vector store for a collection (embedding model shared)."""
        if collection not in self._stores:
            store = FaissVectorStore(
                collection=collection,
                root_dir=CliConfig.COLLECTIONS_DIR,
                encoder=self._encoder,
                model_name=CliConfig.EMBEDDING_MODEL,
                device=CliConfig.EMBEDDING_DEVICE
            )
            self._encoder = store.encoder
            self._stores[collection] = store
            logger.info(f"Opened collection '{collection}' ({store.count()} passages)")
        return self._stores[collection]

    def create_orchestrator(
        self,
        strategy_name: str,
        source_url: str = "",
        run_log_path: Optional[str] = None
    ) -> Orchestrator:
        """
        Create an orchestrator for a strategy.

        Args:
            strategy_name: Strategy preset name
            source_url: Page the collection was built from (logged)
            run_log_path: JSONL run log (default: CliConfig.RUN_LOG_PATH)

        Returns:
            Configured orchestrator
        """
        spec = self.get_strategy(strategy_name)
        llm = self.get_llm_client()

        retriever = PassageRetriever(
            self.get_vector_store(spec.collection),
            depth_policy=DepthPolicy(default_k=spec.default_k, abstract_k=spec.abstract_k),
            max_workers=CliConfig.RETRIEVAL_MAX_WORKERS,
            timeout_s=CliConfig.RETRIEVAL_TIMEOUT_S
        )

        return Orchestrator(
            expander=QueryExpander(llm),
            retriever=retriever,
            synthesizer=AnswerSynthesizer(llm),
            strategy=spec,
            run_log=JsonlRunLog(run_log_path or CliConfig.RUN_LOG_PATH),
            source_url=source_url
        )
