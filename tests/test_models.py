"""
Unit tests for core data models.
"""
import unittest

from pydantic import ValidationError

from knowledge.models import (
    FINGERPRINT_PREFIX_CHARS,
    LogRecord,
    Passage,
    PipelineResult,
    QueryVariant,
    RetrievalOutcome,
    RunSummary,
    fingerprint_text,
)


class TestPassage(unittest.TestCase):
    """Test passage identity."""

    def test_id_from_source_ref(self):
        passage = Passage(text="Some text", source_ref="https://example.com/a#chunk-0")
        self.assertEqual(passage.id, "https://example.com/a#chunk-0")

    def test_id_from_fingerprint(self):
        passage = Passage(text="Some text without a source")
        self.assertEqual(passage.id, fingerprint_text("Some text without a source"))
        self.assertTrue(passage.id.startswith("fp_"))

    def test_fingerprint_uses_leading_characters(self):
        prefix = "x" * FINGERPRINT_PREFIX_CHARS
        self.assertEqual(Passage(text=prefix + "tail one").id, Passage(text=prefix + "tail two").id)
        self.assertNotEqual(Passage(text="alpha").id, Passage(text="beta").id)

    def test_explicit_id_kept(self):
        self.assertEqual(Passage(id="p1", text="t", source_ref="ref").id, "p1")

    def test_frozen(self):
        passage = Passage(text="t", source_ref="ref")
        with self.assertRaises(ValidationError):
            passage.text = "changed"

    def test_roundtrip_keeps_id(self):
        passage = Passage(text="t", source_ref="ref")
        self.assertEqual(Passage.model_validate(passage.model_dump()), passage)


class TestQueryVariant(unittest.TestCase):

    def test_default_tag(self):
        self.assertEqual(QueryVariant(text="q").tag, "original")

    def test_is_abstract(self):
        self.assertTrue(QueryVariant(text="q", tag="abstract-level-2").is_abstract)
        self.assertFalse(QueryVariant(text="q", tag="reformulation-1").is_abstract)


class TestResults(unittest.TestCase):

    def test_outcome_ok(self):
        variant = QueryVariant(text="q")
        self.assertTrue(RetrievalOutcome(variant=variant).ok)
        self.assertFalse(RetrievalOutcome(variant=variant, error="boom").ok)

    def test_summary_answer_is_last_pass(self):
        summary = RunSummary(question="q", strategy="step_back")
        self.assertEqual(summary.answer, "")
        self.assertEqual(summary.context, [])

        first_ctx = [Passage(text="a", source_ref="a")]
        last_ctx = first_ctx + [Passage(text="b", source_ref="b")]
        summary.results.append(PipelineResult(
            question="abstract", variant=QueryVariant(text="abstract", tag="abstract-level-1"),
            context=first_ctx, answer="first"
        ))
        summary.results.append(PipelineResult(
            question="q", variant=QueryVariant(text="q"), context=last_ctx, answer="last"
        ))
        self.assertEqual(summary.answer, "last")
        self.assertEqual(summary.context, last_ctx)


class TestLogRecord(unittest.TestCase):

    def test_defaults_and_frozen(self):
        record = LogRecord(original_question="q", variant="v", answer="a")
        self.assertEqual(record.variant_tag, "original")
        self.assertIsNotNone(record.timestamp.tzinfo)
        with self.assertRaises(ValidationError):
            record.answer = "changed"


if __name__ == "__main__":
    unittest.main()
