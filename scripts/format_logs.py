#!/usr/bin/env python3
"""
Rewrite the JSONL run log into key:value blocks and delete the original.

Usage:
    python scripts/format_logs.py [--src rag_logs.jsonl] [--dst rag_logs.txt]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from apps.cli.config import CliConfig  # noqa: E402
from rag.run_log import format_run_log  # noqa: E402


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--src", default=CliConfig.RUN_LOG_PATH)
    ap.add_argument("--dst", default=CliConfig.FORMATTED_LOG_PATH)
    args = ap.parse_args(argv)

    if not Path(args.src).exists():
        print(f"❌ Run log not found: {args.src}")
        return 1

    count = format_run_log(args.src, args.dst)
    print(f"✅ {count} log records saved to {args.dst}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
