"""
Ingest pipeline: web page -> paragraphs -> normalized text -> chunks -> collection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol

from knowledge.models import Passage
from rag.errors import IngestionError

from ingest.sources.web_loader import load_paragraphs
from ingest.normalization.text_normalizer import (
    BoilerplateConfig,
    drop_boilerplate_paragraphs,
    normalize_paragraph_text,
)
from ingest.chunking.fixed import chunk_text_fixed, FixedChunkerConfig


logger = logging.getLogger(__name__)


class PassageSink(Protocol):
    def add_passages(self, passages: List[Passage]) -> int:
        ...


@dataclass(frozen=True)
class IngestConfig:
    chunking: FixedChunkerConfig = field(default_factory=FixedChunkerConfig)
    boilerplate: BoilerplateConfig = field(default_factory=BoilerplateConfig)
    fetch_timeout: int = 30


@dataclass(frozen=True)
class IngestReport:
    url: str
    paragraph_count: int
    chunk_count: int
    added_count: int


def page_to_passages(
    paragraphs: List[str],
    *,
    source_url: str,
    cfg: IngestConfig | None = None,
) -> List[Passage]:
    if cfg is None:
        cfg = IngestConfig()

    normalized = [normalize_paragraph_text(p) for p in paragraphs]
    kept = drop_boilerplate_paragraphs([p for p in normalized if p], cfg=cfg.boilerplate)
    text = "\n\n".join(kept)
    return list(chunk_text_fixed(text, source_url=source_url, cfg=cfg.chunking))


def ingest_url(
    url: str,
    store: PassageSink,
    *,
    cfg: IngestConfig | None = None,
) -> IngestReport:
    """
    Populate a collection from one web page.

    Raises:
        IngestionError: If the page cannot be fetched or yields no text
    """
    if cfg is None:
        cfg = IngestConfig()

    paragraphs = load_paragraphs(url, timeout=cfg.fetch_timeout)
    passages = page_to_passages(paragraphs, source_url=url, cfg=cfg)
    if not passages:
        raise IngestionError(f"No paragraph text found at {url}", url=url)

    added = store.add_passages(passages)
    report = IngestReport(
        url=url,
        paragraph_count=len(paragraphs),
        chunk_count=len(passages),
        added_count=added,
    )
    logger.info(f"Ingested {url}: {report.chunk_count} chunks ({report.added_count} new)")
    return report
