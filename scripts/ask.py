#!/usr/bin/env python3
"""
Ask a question about a web page.

Usage:
    python scripts/ask.py [--strategy rrf|parallel_query|hyde|step_back|chain_of_thought]

Environment variables:
    LLM_API_KEY (or GEMINI_API_KEY): API key for the OpenAI-compatible endpoint
    LLM_BASE_URL / LLM_MODEL: Endpoint and model (default: Gemini)
    DATA_DIR: Path to data directory (default: ./data)
"""
import sys
import os

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from apps.cli.main import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
