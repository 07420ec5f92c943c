"""
Interactive WikiSense CLI.

Usage:
    python scripts/ask.py                          # prompts for URL and question
    python scripts/ask.py --strategy step_back
    python scripts/ask.py --url https://en.wikipedia.org/wiki/Alan_Turing --question "..."
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional

from ingest.pipeline import ingest_url
from rag.errors import WikiSenseError
from rag.run_log import format_run_log

from apps.cli.config import CliConfig
from apps.cli.formatter import format_summary
from apps.cli.pipeline_factory import PipelineFactory


logger = logging.getLogger(__name__)


def _ask(prompt: str, value: Optional[str], input_fn: Callable[[str], str]) -> str:
    if value:
        return value.strip()
    return input_fn(prompt).strip()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Ask questions about a web page with retrieval fusion.")
    ap.add_argument("--strategy", default=CliConfig.DEFAULT_STRATEGY)
    ap.add_argument("--url", default=None)
    ap.add_argument("--question", default=None)
    ap.add_argument("--no-ingest", action="store_true", help="Query the existing collection only")
    ap.add_argument("--format-logs", action="store_true", help="Reformat the run log after answering")
    ap.add_argument("--debug", action="store_true", help="Show context and timings")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(
    argv: Optional[list[str]] = None,
    *,
    factory: Optional[PipelineFactory] = None,
    input_fn: Callable[[str], str] = input,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        url = _ask("\nEnter the URL of the website: ", args.url, input_fn)
        question = _ask("\nEnter your question: ", args.question, input_fn)
    except (EOFError, KeyboardInterrupt):
        print("\nAborted.", file=sys.stderr)
        return 1
    if not question:
        print("A question is required.", file=sys.stderr)
        return 1

    try:
        if factory is None:
            CliConfig.validate()
            factory = PipelineFactory()
        spec = factory.get_strategy(args.strategy)
    except ValueError as e:
        print(f"\nConfiguration error: {e}", file=sys.stderr)
        return 1

    if not args.no_ingest and not url:
        print("A URL is required unless --no-ingest is given.", file=sys.stderr)
        return 1

    try:
        if not args.no_ingest:
            ingest_url(url, factory.get_vector_store(spec.collection))

        orchestrator = factory.create_orchestrator(args.strategy, source_url=url)
        summary = orchestrator.run(question)
    except WikiSenseError as e:
        logger.error(f"{e.stage} failed: {e}")
        print(f"\n{e.stage} failed: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error(f"Run failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    print("\n" + format_summary(summary, show_debug=args.debug))

    if args.format_logs:
        format_run_log(CliConfig.RUN_LOG_PATH, CliConfig.FORMATTED_LOG_PATH)
        print(f"\nLogs saved to {CliConfig.FORMATTED_LOG_PATH}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
