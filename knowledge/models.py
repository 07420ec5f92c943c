"""
Core data models for the WikiSense retrieval-fusion engine.
"""
import hashlib
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


# Leading characters of a passage used to fingerprint it when no source ref exists
FINGERPRINT_PREFIX_CHARS = 100

ORIGINAL_TAG = "original"


def fingerprint_text(text: str, prefix_chars: int = FINGERPRINT_PREFIX_CHARS) -> str:
    """Stable, non-cryptographic identity for a passage without a source ref."""
    digest = hashlib.sha1(text[:prefix_chars].encode("utf-8")).hexdigest()[:16]
    return f"fp_{digest}"


class Passage(BaseModel):
    """
    A retrievable unit of text.

    `id` is derived from `source_ref` when present, otherwise from a
    fingerprint of the leading characters of `text`.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "https://en.wikipedia.org/wiki/Alan_Turing#chunk-3",
                "text": "Turing was highly influential in the development of theoretical computer science...",
                "source_ref": "https://en.wikipedia.org/wiki/Alan_Turing#chunk-3"
            }
        }
    )

    id: str = ""
    text: str
    source_ref: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = dict(data)
            source_ref = data.get("source_ref") or ""
            data["id"] = source_ref if source_ref else fingerprint_text(data.get("text", ""))
        return data


class QueryVariant(BaseModel):
    """A query produced by expansion; `tag` labels its role (never used for scoring)."""
    model_config = ConfigDict(frozen=True)

    text: str
    tag: str = ORIGINAL_TAG

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.tag


class RetrievalOutcome(BaseModel):
    """Retrieval result for one query variant, paired with the variant."""
    variant: QueryVariant
    passages: List[Passage] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RetrievalTrace(BaseModel):
    """
    Trace of one pipeline pass for debugging and transparency.
    """
    question: str
    strategy: str
    variants: List[QueryVariant] = Field(default_factory=list)
    retrieved_counts: Dict[str, int] = Field(default_factory=dict)
    failed_variants: Dict[str, str] = Field(default_factory=dict)
    context_count: int = 0
    retrieval_time_ms: Optional[float] = None
    generation_time_ms: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    """Outcome of one retrieve -> generate pass."""
    question: str
    variant: QueryVariant
    context: List[Passage] = Field(default_factory=list)
    answer: str
    trace: Optional[RetrievalTrace] = None


class RunSummary(BaseModel):
    """
    All passes of one run. The overall answer is the final pass's answer.
    """
    question: str
    strategy: str
    results: List[PipelineResult] = Field(default_factory=list)

    @property
    def answer(self) -> str:
        return self.results[-1].answer if self.results else ""

    @property
    def context(self) -> List[Passage]:
        return self.results[-1].context if self.results else []


class LogRecord(BaseModel):
    """Append-only run log entry. Written once, never mutated."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_url: str = ""
    original_question: str
    variant: str
    variant_tag: str = ORIGINAL_TAG
    strategy: str = ""
    answer: str
