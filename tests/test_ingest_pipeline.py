"""
Tests for web page ingestion: extraction, normalization, chunking.
"""
import unittest
from unittest.mock import MagicMock, patch

import requests

from ingest.chunking.fixed import FixedChunkerConfig, chunk_ref, chunk_text_fixed
from ingest.normalization.text_normalizer import (
    BoilerplateConfig,
    drop_boilerplate_paragraphs,
    normalize_paragraph_text,
)
from ingest.pipeline import IngestConfig, ingest_url, page_to_passages
from ingest.sources.web_loader import USER_AGENT, extract_paragraphs
from rag.errors import IngestionError


URL = "https://en.wikipedia.org/wiki/Alan_Turing"

PAGE = """<html><head><title>Alan Turing</title><style>p { color: red; }</style></head>
<body>
<div class="nav">Main page</div>
<p>Alan Mathison Turing was an English mathematician, computer scientist and logician.[1]</p>
<script>var s = "<p>not a paragraph</p>";</script>
<p>Turing was highly influential in the development of theoretical <b>computer science</b>.</p>
<p>Edit</p>
<p>During the Second World War, Turing worked for the Government Code and Cypher School at Bletchley Park.[citation needed]</p>
</body></html>"""


class RecordingSink:
    def __init__(self):
        self.added = []

    def add_passages(self, passages):
        self.added.extend(passages)
        return len(passages)


class TestExtraction(unittest.TestCase):

    def test_extract_paragraphs(self):
        paragraphs = extract_paragraphs(PAGE)
        self.assertEqual(len(paragraphs), 4)
        self.assertEqual(
            paragraphs[1],
            "Turing was highly influential in the development of theoretical computer science."
        )
        self.assertFalse(any("not a paragraph" in p for p in paragraphs))
        self.assertFalse(any("Main page" in p for p in paragraphs))

    def test_empty_paragraphs_skipped(self):
        self.assertEqual(extract_paragraphs("<p> </p><p>Text</p>"), ["Text"])

    def test_unclosed_paragraph(self):
        self.assertEqual(extract_paragraphs("<p>Trailing text"), ["Trailing text"])


class TestNormalization(unittest.TestCase):

    def test_citation_markers_and_whitespace(self):
        text = "Turing[1] was  born in London.[citation needed]"
        self.assertEqual(normalize_paragraph_text(text), "Turing was born in London.")

    def test_soft_hyphen_removed(self):
        self.assertEqual(normalize_paragraph_text("compu\u00adter"), "computer")

    def test_empty(self):
        self.assertEqual(normalize_paragraph_text(""), "")

    def test_boilerplate_filter(self):
        long_a = "A paragraph that is long enough to keep."
        long_b = "Another paragraph that is long enough."
        repeated = "Retrieved from the web archive, repeated."
        paragraphs = [long_a, "Edit", repeated, long_b, repeated, repeated, long_a]

        kept = drop_boilerplate_paragraphs(paragraphs, cfg=BoilerplateConfig(min_chars=20, max_repeats=2))

        self.assertEqual(kept, [long_a, long_b])


class TestFixedChunking(unittest.TestCase):

    def setUp(self):
        self.text = " ".join(f"word{i}" for i in range(500))

    def test_refs_are_unique_and_addressable(self):
        passages = list(chunk_text_fixed(self.text, source_url=URL))
        self.assertGreater(len(passages), 1)
        self.assertEqual([p.id for p in passages], [chunk_ref(URL, i) for i in range(len(passages))])
        self.assertEqual(passages[0].source_ref, f"{URL}#chunk-0")

    def test_chunks_overlap(self):
        cfg = FixedChunkerConfig(max_chars=500, overlap_chars=100, min_chars=10)
        passages = list(chunk_text_fixed(self.text, source_url=URL, cfg=cfg))
        for earlier, later in zip(passages, passages[1:]):
            self.assertIn(later.text[:40], earlier.text)

    def test_short_text_below_minimum(self):
        self.assertEqual(list(chunk_text_fixed("tiny", source_url=URL)), [])

    def test_invalid_overlap(self):
        cfg = FixedChunkerConfig(max_chars=100, overlap_chars=100)
        with self.assertRaises(ValueError):
            list(chunk_text_fixed(self.text, source_url=URL, cfg=cfg))


class TestIngestUrl(unittest.TestCase):

    def _response(self, html):
        response = MagicMock()
        response.text = html
        response.raise_for_status.return_value = None
        return response

    def test_page_to_passages(self):
        passages = page_to_passages(extract_paragraphs(PAGE), source_url=URL)
        self.assertEqual(len(passages), 1)
        self.assertNotIn("[1]", passages[0].text)
        self.assertNotIn("Edit", passages[0].text.split())
        self.assertEqual(passages[0].id, f"{URL}#chunk-0")

    @patch("ingest.sources.web_loader.requests.get")
    def test_ingest_url(self, mock_get):
        mock_get.return_value = self._response(PAGE)
        sink = RecordingSink()

        report = ingest_url(URL, sink, cfg=IngestConfig(fetch_timeout=5))

        self.assertEqual(report.paragraph_count, 4)
        self.assertEqual(report.chunk_count, 1)
        self.assertEqual(report.added_count, 1)
        self.assertIn("Bletchley Park", sink.added[0].text)
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(kwargs["headers"]["User-Agent"], USER_AGENT)

    @patch("ingest.sources.web_loader.requests.get")
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(IngestionError) as ctx:
            ingest_url(URL, RecordingSink())
        self.assertEqual(ctx.exception.url, URL)
        self.assertEqual(ctx.exception.stage, "ingestion")

    @patch("ingest.sources.web_loader.requests.get")
    def test_http_error(self, mock_get):
        response = self._response("")
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        mock_get.return_value = response
        with self.assertRaises(IngestionError):
            ingest_url(URL, RecordingSink())

    @patch("ingest.sources.web_loader.requests.get")
    def test_page_without_paragraphs(self, mock_get):
        mock_get.return_value = self._response("<html><body><div>No paragraphs</div></body></html>")
        sink = RecordingSink()
        with self.assertRaises(IngestionError):
            ingest_url(URL, sink)
        self.assertEqual(sink.added, [])


if __name__ == "__main__":
    unittest.main()
