"""
CLI configuration and constants.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class CliConfig:
    """Configuration for the WikiSense CLI."""

    # LLM settings (any OpenAI-compatible endpoint)
    LLM_API_KEY: str = os.getenv("LLM_API_KEY") or os.getenv("GEMINI_API_KEY", "")
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gemini-2.0-flash")
    LLM_TIMEOUT_S: float = float(os.getenv("LLM_TIMEOUT_S", "60"))
    LLM_CACHE_ENABLED: bool = os.getenv("LLM_CACHE_ENABLED", "0") == "1"

    # Embeddings
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "intfloat/e5-small-v2")
    EMBEDDING_DEVICE: str = os.getenv("EMBEDDING_DEVICE", "cpu")

    # Retrieval
    RETRIEVAL_TIMEOUT_S: float = float(os.getenv("RETRIEVAL_TIMEOUT_S", "30"))
    RETRIEVAL_MAX_WORKERS: int = int(os.getenv("RETRIEVAL_MAX_WORKERS", "8"))

    # Strategies
    DEFAULT_STRATEGY: str = os.getenv("DEFAULT_STRATEGY", "rrf")
    STRATEGY_CONFIG: str = os.getenv("STRATEGY_CONFIG", "configs/strategies.yaml")

    # Data paths
    DATA_DIR: str = os.getenv("DATA_DIR", "data")
    COLLECTIONS_DIR: str = os.path.join(DATA_DIR, "collections")
    CACHE_PATH: str = os.path.join(DATA_DIR, "cache", "llm_cache.db")
    RUN_LOG_PATH: str = os.getenv("RUN_LOG_PATH", "rag_logs.jsonl")
    FORMATTED_LOG_PATH: str = os.getenv("FORMATTED_LOG_PATH", "rag_logs.txt")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if not cls.LLM_API_KEY:
            raise ValueError("LLM_API_KEY (or GEMINI_API_KEY) not set in environment")

        if cls.LLM_TIMEOUT_S <= 0 or cls.RETRIEVAL_TIMEOUT_S <= 0:
            raise ValueError("Timeouts must be positive")
