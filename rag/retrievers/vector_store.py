"""
Named passage collection backed by FAISS and sentence transformers.

A collection lives in its own directory:
  <root_dir>/<collection>/
    - faiss.index
    - passages.jsonl
"""
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

import numpy as np
from sentence_transformers import SentenceTransformer

from knowledge.models import Passage
from ingest.indexing.passage_store import PASSAGES_FILENAME, load_passage_store, write_passage_store
from ingest.indexing.vector_index import INDEX_FILENAME, build_faiss_ip, load_faiss, save_faiss


logger = logging.getLogger(__name__)


DEFAULT_EMBEDDING_MODEL = "intfloat/e5-small-v2"


class Encoder(Protocol):
    """Anything with a SentenceTransformer-style encode()."""

    def encode(self, sentences: List[str], **kwargs) -> np.ndarray:
        ...


class FaissVectorStore:
    """
    Persistent vector collection using sentence transformers + FAISS.

    Uses intfloat/e5-small-v2 by default (local CPU embedding) with the e5
    "query: " / "passage: " prefixes.
    """

    def __init__(
        self,
        collection: str,
        root_dir: str = "data/collections",
        encoder: Optional[Encoder] = None,
        model_name: str = DEFAULT_EMBEDDING_MODEL,
        device: str = "cpu"
    ):
        """
        Initialize vector store, loading the collection if it already exists.

        Args:
            collection: Collection name (directory under root_dir)
            root_dir: Root directory of all collections
            encoder: Embedding model (default: SentenceTransformer(model_name))
            model_name: Sentence transformer model
            device: Device for embeddings ('cpu' or 'cuda')
        """
        self.collection = collection
        self.collection_dir = Path(root_dir) / collection
        self.model_name = model_name

        if encoder is None:
            logger.info(f"Loading embedding model: {model_name}")
            encoder = SentenceTransformer(model_name, device=device)
        self.encoder = encoder

        self._lock = threading.Lock()
        self.index = None
        self.passages: List[Passage] = []
        self._ids = set()
        self._load()

    def _load(self) -> None:
        index_path = self.collection_dir / INDEX_FILENAME
        passages_path = self.collection_dir / PASSAGES_FILENAME
        if not index_path.exists() or not passages_path.exists():
            return

        self.index = load_faiss(self.collection_dir)
        self.passages = load_passage_store(passages_path)
        self._ids = {p.id for p in self.passages}

        if self.index.ntotal != len(self.passages):
            raise ValueError(
                f"Collection '{self.collection}' is inconsistent: "
                f"{self.index.ntotal} vectors vs {len(self.passages)} passages"
            )
        logger.info(f"Loaded collection '{self.collection}': {len(self.passages)} passages")

    def _embed(self, texts: List[str], prefix: str) -> np.ndarray:
        with self._lock:
            embeddings = self.encoder.encode(
                [f"{prefix}{t}" for t in texts],
                normalize_embeddings=True,
                show_progress_bar=False
            )
        return np.asarray(embeddings, dtype=np.float32)

    def count(self) -> int:
        return len(self.passages)

    def add_passages(self, passages: Iterable[Passage]) -> int:
        """
        Embed and store passages.

        A passage whose id is already stored is skipped when its text is
        unchanged and replaced in place (vector and text) when it differs.

        Returns:
            Number of passages added or replaced
        """
        positions = {p.id: i for i, p in enumerate(self.passages)}
        new_passages: List[Passage] = []
        changed: Dict[int, Passage] = {}
        seen = set(self._ids)
        for passage in passages:
            if passage.id in positions:
                pos = positions[passage.id]
                if self.passages[pos].text != passage.text:
                    changed[pos] = passage
                continue
            if passage.id in seen:
                continue
            seen.add(passage.id)
            new_passages.append(passage)

        if not new_passages and not changed:
            logger.info(f"No new passages for collection '{self.collection}'")
            return 0

        if changed:
            vectors = self.index.reconstruct_n(0, self.index.ntotal)
            rows = sorted(changed)
            vectors[rows] = self._embed([changed[r].text for r in rows], prefix="passage: ")
            self.index = build_faiss_ip(vectors)
            for row in rows:
                self.passages[row] = changed[row]
            logger.info(f"Replaced {len(rows)} changed passages in collection '{self.collection}'")

        if new_passages:
            embeddings = self._embed([p.text for p in new_passages], prefix="passage: ")
            if self.index is None:
                self.index = build_faiss_ip(embeddings)
            else:
                self.index.add(embeddings)
            self.passages.extend(new_passages)
            self._ids = seen
            logger.info(f"Added {len(new_passages)} passages to collection '{self.collection}'")

        self.save()
        return len(new_passages) + len(changed)

    def save(self) -> None:
        """Persist index and passages."""
        if self.index is None:
            return
        save_faiss(self.collection_dir, index=self.index)
        write_passage_store(self.collection_dir / PASSAGES_FILENAME, self.passages)

    def similarity_search(self, query: str, k: int = 4) -> List[Passage]:
        """
        Return the k nearest passages, best first.

        Args:
            query: Query text
            k: Number of passages

        Returns:
            Ranked passages
        """
        if self.index is None or self.index.ntotal == 0 or k <= 0:
            return []

        query_embedding = self._embed([query], prefix="query: ")
        _, indices = self.index.search(query_embedding, min(k, self.index.ntotal))

        results = []
        for idx in indices[0]:
            if idx == -1:  # FAISS returns -1 for empty results
                break
            results.append(self.passages[idx])
        return results
