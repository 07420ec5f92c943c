"""
Fixed-size chunking with character overlap.

Chunks are addressable: each gets a source ref "<url>#chunk-<n>", so
passage identity is stable across runs and unique within a page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from knowledge.models import Passage


@dataclass(frozen=True)
class FixedChunkerConfig:
    max_chars: int = 1000
    overlap_chars: int = 200
    min_chars: int = 50


def _snap_end_to_whitespace(text: str, end: int, *, window: int = 80) -> int:
    """Try to end chunk on a whitespace boundary for nicer snippets."""
    if end >= len(text):
        return len(text)
    lo = max(0, end - window)
    hi = min(len(text), end + window)
    # Prefer searching forward a little, else back.
    forward = text[end:hi]
    fpos = forward.find(" ")
    if fpos != -1:
        return end + fpos
    backward = text[lo:end]
    bpos = backward.rfind(" ")
    if bpos != -1:
        return lo + bpos
    return end


def chunk_ref(source_url: str, index: int) -> str:
    return f"{source_url}#chunk-{index}"


def chunk_text_fixed(
    text: str,
    *,
    source_url: str,
    cfg: FixedChunkerConfig | None = None,
) -> Iterable[Passage]:
    if cfg is None:
        cfg = FixedChunkerConfig()
    if cfg.overlap_chars >= cfg.max_chars:
        raise ValueError("overlap_chars must be smaller than max_chars")

    text = (text or "").strip()
    step = max(1, cfg.max_chars - cfg.overlap_chars)

    n = 0
    i = 0
    while i < len(text):
        j = min(len(text), i + cfg.max_chars)
        j = _snap_end_to_whitespace(text, j)
        chunk = text[i:j].strip()
        if len(chunk) >= cfg.min_chars:
            yield Passage(text=chunk, source_ref=chunk_ref(source_url, n))
            n += 1
        if j == len(text):
            break
        i += step
