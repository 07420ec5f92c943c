"""
Web page loader: fetch a page and keep the text of its <p> elements.
"""
from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import List

import requests

from rag.errors import IngestionError


logger = logging.getLogger(__name__)


USER_AGENT = "WikiSense/1.0"

# Text inside these elements is never paragraph content
_SKIP_TAGS = {"script", "style", "noscript", "template"}


class ParagraphExtractor(HTMLParser):
    """Collects the text of every <p> element, in document order."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.paragraphs: List[str] = []
        self._depth = 0
        self._skip_depth = 0
        self._buffer: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
        elif tag == "p":
            if self._depth == 0:
                self._buffer = []
            self._depth += 1
        elif tag == "br" and self._depth:
            self._buffer.append("\n")

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag == "p" and self._depth:
            self._depth -= 1
            if self._depth == 0:
                self._flush()

    def handle_data(self, data):
        if self._depth and not self._skip_depth:
            self._buffer.append(data)

    def _flush(self):
        text = "".join(self._buffer).strip()
        if text:
            self.paragraphs.append(text)
        self._buffer = []

    def close(self):
        super().close()
        # Unclosed trailing <p>
        if self._depth:
            self._depth = 0
            self._flush()


def extract_paragraphs(html: str) -> List[str]:
    parser = ParagraphExtractor()
    parser.feed(html)
    parser.close()
    return parser.paragraphs


def fetch_page(url: str, timeout: int = 30) -> str:
    """
    Download a web page.

    Raises:
        IngestionError: On network errors or non-2xx responses
    """
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        raise IngestionError(f"Failed to fetch {url}: {e}", url=url) from e
    return response.text


def load_paragraphs(url: str, timeout: int = 30) -> List[str]:
    """Fetch a page and return its paragraph texts."""
    html = fetch_page(url, timeout=timeout)
    paragraphs = extract_paragraphs(html)
    logger.info(f"Fetched {url}: {len(paragraphs)} paragraphs")
    return paragraphs
