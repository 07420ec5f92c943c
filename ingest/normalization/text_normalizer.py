"""
Text normalization for paragraphs extracted from web pages.

Conservative: normalize unicode, drop inline citation markers such as
"[12]" or "[citation needed]", collapse whitespace, and drop empty or
repeated boilerplate paragraphs.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional


_RE_CITATION_MARKER = re.compile(r"\[(?:\d+|[a-z]|citation needed|note \d+)\]", re.IGNORECASE)
_RE_SPACES = re.compile(r"[ \t\u00a0]+")
_RE_MANY_NEWLINES = re.compile(r"\n{3,}")


def normalize_paragraph_text(text: str) -> str:
    if not text:
        return ""

    # Unicode normalize, strip soft hyphens
    t = unicodedata.normalize("NFKC", text).replace("\u00ad", "")

    t = _RE_CITATION_MARKER.sub("", t)

    # Normalize whitespace
    t = t.replace("\r\n", "\n").replace("\r", "\n")
    t = _RE_SPACES.sub(" ", t)

    # Trim line edges, keep line breaks
    t = "\n".join(line.strip() for line in t.split("\n"))

    t = _RE_MANY_NEWLINES.sub("\n\n", t).strip()

    return t


@dataclass(frozen=True)
class BoilerplateConfig:
    min_chars: int = 20       # shorter paragraphs are navigation/UI text
    max_repeats: int = 2      # identical paragraphs seen more often are boilerplate


def drop_boilerplate_paragraphs(
    paragraphs: List[str],
    *,
    cfg: Optional[BoilerplateConfig] = None,
) -> List[str]:
    """
    Heuristic boilerplate filter.

    Drops very short paragraphs and paragraphs repeated more than
    `max_repeats` times (casefolded); keeps the first copy of allowed repeats
    only once.
    """
    if cfg is None:
        cfg = BoilerplateConfig()

    counts = Counter(p.casefold() for p in paragraphs)
    seen: set[str] = set()
    kept: List[str] = []
    for p in paragraphs:
        key = p.casefold()
        if len(p) < cfg.min_chars or counts[key] > cfg.max_repeats or key in seen:
            continue
        seen.add(key)
        kept.append(p)
    return kept
