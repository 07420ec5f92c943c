#!/usr/bin/env python3
"""
Populate a named collection from one or more web pages.

Output layout:
  data/collections/<collection>/
    - faiss.index
    - passages.jsonl
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from apps.cli.config import CliConfig  # noqa: E402
from ingest.chunking.fixed import FixedChunkerConfig  # noqa: E402
from ingest.pipeline import IngestConfig, ingest_url  # noqa: E402
from rag.errors import IngestionError  # noqa: E402
from rag.retrievers.vector_store import FaissVectorStore  # noqa: E402


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("urls", nargs="+")
    ap.add_argument("--collection", default="wikisense")
    ap.add_argument("--root-dir", default=CliConfig.COLLECTIONS_DIR)
    ap.add_argument("--embedding-model", default=CliConfig.EMBEDDING_MODEL)
    ap.add_argument("--chunk-size", type=int, default=1000)
    ap.add_argument("--chunk-overlap", type=int, default=200)
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = IngestConfig(chunking=FixedChunkerConfig(max_chars=args.chunk_size, overlap_chars=args.chunk_overlap))
    store = FaissVectorStore(args.collection, root_dir=args.root_dir, model_name=args.embedding_model)

    failures = 0
    for url in args.urls:
        try:
            report = ingest_url(url, store, cfg=cfg)
        except IngestionError as e:
            print(f"✗ {url}: {e}")
            failures += 1
            continue
        print(f"✓ {url}: {report.chunk_count} chunks ({report.added_count} new)")

    print(f"\nCollection '{args.collection}': {store.count()} passages in {store.collection_dir}")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
