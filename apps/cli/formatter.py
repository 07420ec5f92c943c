"""
Formatters for run summaries and debug information in the terminal.
"""
from typing import List

from knowledge.models import Passage, PipelineResult, RunSummary


def truncate_text(text: str, max_length: int = 500) -> str:
    """
    Truncate text with an ellipsis if needed.
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - 3].rstrip() + "..."


def format_context(passages: List[Passage], max_chars: int = 300) -> str:
    lines = []
    for i, passage in enumerate(passages, start=1):
        lines.append(f"  --- Chunk #{i} ({passage.id}) ---")
        lines.append(f"  {truncate_text(passage.text, max_chars)}")
    return "\n".join(lines)


def format_result(result: PipelineResult, show_debug: bool = False) -> str:
    """Format one pass: level, query and answer."""
    parts = [
        f"Level: {result.variant.tag}",
        f"Query: {result.variant.text}",
        f"Answer: {result.answer}",
    ]
    if show_debug and result.trace:
        trace = result.trace
        parts.append(
            f"Context: {trace.context_count} passages | "
            f"retrieval {trace.retrieval_time_ms or 0:.0f}ms | "
            f"generation {trace.generation_time_ms or 0:.0f}ms"
        )
        for tag, error in trace.failed_variants.items():
            parts.append(f"Retrieval failed [{tag}]: {error}")
        if result.context:
            parts.append(format_context(result.context))
    return "\n".join(parts)


def format_summary(summary: RunSummary, show_debug: bool = False) -> str:
    """Format every pass followed by the final response."""
    blocks = [format_result(r, show_debug) for r in summary.results]
    blocks.append(f"Final Response ({summary.strategy}): {summary.answer}")
    return "\n\n".join(blocks)
