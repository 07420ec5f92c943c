"""
Append-only run log (one JSON object per line) and its offline reformatter.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from knowledge.models import LogRecord


logger = logging.getLogger(__name__)


LOG_SEPARATOR = "--------LOG SEPARATOR--------"


class JsonlRunLog:
    """Append-only JSONL sink for LogRecords."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: LogRecord) -> None:
        line = record.model_dump_json()
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    def read(self) -> list[LogRecord]:
        if not self.path.exists():
            return []
        records = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    records.append(LogRecord.model_validate_json(line))
        return records


def format_run_log(src: str | Path, dst: str | Path) -> int:
    """
    Rewrite a JSONL run log into flattened key:value blocks.

    Blocks end with a separator line and are separated by a blank line. The
    formatted text is appended to `dst` and `src` is deleted.

    Returns:
        Number of records formatted
    """
    src_path = Path(src)
    dst_path = Path(dst)

    with open(src_path, "r", encoding="utf-8") as f:
        entries = [json.loads(line) for line in f if line.strip()]

    blocks = []
    for entry in entries:
        lines = "\n".join(f"{key}:{value}" for key, value in entry.items())
        blocks.append(f"{lines}\n{LOG_SEPARATOR}")

    dst_path.parent.mkdir(parents=True, exist_ok=True)
    with open(dst_path, "a", encoding="utf-8") as f:
        if blocks:
            if dst_path.stat().st_size > 0:
                f.write("\n\n")
            f.write("\n\n".join(blocks))

    src_path.unlink()
    logger.info(f"Formatted {len(entries)} log records into {dst_path}")
    return len(entries)
