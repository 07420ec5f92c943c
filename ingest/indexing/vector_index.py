"""
FAISS vector index build/save/load utilities.
"""

from __future__ import annotations

from pathlib import Path

import faiss
import numpy as np


INDEX_FILENAME = "faiss.index"


def build_faiss_ip(embeddings: np.ndarray) -> faiss.Index:
    """
    Build IndexFlatIP for cosine similarity (requires normalized embeddings).
    """
    if embeddings.ndim != 2:
        raise ValueError("embeddings must be 2D [N, D]")
    n, d = embeddings.shape
    index = faiss.IndexFlatIP(d)
    if n:
        index.add(np.asarray(embeddings, dtype=np.float32))
    return index


def save_faiss(out_dir: str | Path, *, index: faiss.Index) -> Path:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    index_path = out / INDEX_FILENAME
    faiss.write_index(index, str(index_path))
    return index_path


def load_faiss(index_dir: str | Path) -> faiss.Index:
    index_path = Path(index_dir) / INDEX_FILENAME
    if not index_path.exists():
        raise FileNotFoundError(f"FAISS index not found: {index_path}")
    return faiss.read_index(str(index_path))
