"""
Reading and writing the JSONL passage store of a collection.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from knowledge.models import Passage


PASSAGES_FILENAME = "passages.jsonl"


def load_passage_store(path: str | Path) -> List[Passage]:
    passages: List[Passage] = []
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            if not line.strip():
                continue
            passages.append(Passage.model_validate(json.loads(line)))
    return passages


def write_passage_store(out_path: str | Path, passages: Iterable[Passage]) -> None:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        for passage in passages:
            f.write(json.dumps(passage.model_dump(mode="json"), ensure_ascii=False) + "\n")
