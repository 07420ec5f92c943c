"""
Unit tests for the passage retriever (depth policy, concurrent fan-out, failures).
"""
import threading
import time
import unittest

from knowledge.models import QueryVariant
from rag.errors import RetrievalError
from rag.retrievers.passage_retriever import DepthPolicy, PassageRetriever
from tests.fakes import FakeSearch, make_passage


class TestDepthPolicy(unittest.TestCase):

    def test_abstract_variants_go_deeper(self):
        policy = DepthPolicy(default_k=2, abstract_k=4)
        self.assertEqual(policy.k_for(QueryVariant(text="q", tag="abstract-level-1")), 4)
        self.assertEqual(policy.k_for(QueryVariant(text="q", tag="original")), 2)
        self.assertEqual(policy.k_for(QueryVariant(text="q", tag="sub-query-1")), 2)


class TestPassageRetriever(unittest.TestCase):

    def setUp(self):
        self.p = [make_passage(str(i)) for i in range(6)]
        self.search = FakeSearch(results={
            "alpha": self.p[:4],
            "beta": self.p[2:6],
            "gamma": self.p[1:3],
        })

    def test_retrieve_respects_k(self):
        retriever = PassageRetriever(self.search)
        self.assertEqual(retriever.retrieve("alpha", 2), self.p[:2])

    def test_retrieve_wraps_backend_errors(self):
        retriever = PassageRetriever(FakeSearch(failing={"alpha"}))
        with self.assertRaises(RetrievalError) as ctx:
            retriever.retrieve("alpha", 2, variant_tag="sub-query-1")
        self.assertEqual(ctx.exception.query, "alpha")
        self.assertEqual(ctx.exception.variant_tag, "sub-query-1")
        self.assertEqual(ctx.exception.stage, "retrieval")

    def test_variants_paired_in_input_order(self):
        retriever = PassageRetriever(self.search)
        variants = [
            QueryVariant(text="beta", tag="sub-query-1"),
            QueryVariant(text="alpha", tag="abstract-level-1"),
        ]
        outcomes = retriever.retrieve_variants(variants)
        self.assertEqual([o.variant for o in outcomes], variants)
        self.assertEqual(outcomes[0].passages, self.p[2:4])
        self.assertEqual(outcomes[1].passages, self.p[:4])

    def test_variants_run_concurrently(self):
        search = FakeSearch(
            results={"a": self.p[:1], "b": self.p[1:2], "c": self.p[2:3]},
            delays={"a": 0.2, "b": 0.2, "c": 0.2}
        )
        retriever = PassageRetriever(search)
        retriever.retrieve_variants([QueryVariant(text=q) for q in ("a", "b", "c")])
        self.assertGreater(search.max_active, 1)

    def test_one_failure_does_not_abort_siblings(self):
        search = FakeSearch(results={"alpha": self.p[:2], "gamma": self.p[1:3]}, failing={"beta"})
        retriever = PassageRetriever(search)
        outcomes = retriever.retrieve_variants([
            QueryVariant(text="alpha", tag="sub-query-1"),
            QueryVariant(text="beta", tag="sub-query-2"),
            QueryVariant(text="gamma", tag="sub-query-3"),
        ])
        self.assertEqual([o.ok for o in outcomes], [True, False, True])
        self.assertIn("sub-query-2", outcomes[1].error)
        self.assertEqual(outcomes[2].passages, self.p[1:3])

    def test_timeout_reported_per_variant(self):
        search = FakeSearch(results={"fast": self.p[:1], "slow": self.p[1:2]}, delays={"slow": 1.0})
        retriever = PassageRetriever(search, timeout_s=0.2)
        outcomes = retriever.retrieve_variants([QueryVariant(text="fast"), QueryVariant(text="slow")])
        self.assertTrue(outcomes[0].ok)
        self.assertFalse(outcomes[1].ok)
        self.assertIn("timed out", outcomes[1].error)

    def test_single_variant_respects_timeout(self):
        search = FakeSearch(results={"slow": self.p[:1]}, delays={"slow": 1.0})
        retriever = PassageRetriever(search, timeout_s=0.2)

        start = time.time()
        outcomes = retriever.retrieve_variants([QueryVariant(text="slow", tag="hypothetical-document")])

        self.assertLess(time.time() - start, 0.8)
        self.assertEqual(len(outcomes), 1)
        self.assertFalse(outcomes[0].ok)
        self.assertIn("timed out", outcomes[0].error)

    def test_abandoned_search_runs_on_daemon_worker(self):
        search = FakeSearch(delays={"stuck": 1.0})
        PassageRetriever(search, timeout_s=0.1).retrieve_variants([QueryVariant(text="stuck", tag="stuck-query")])

        workers = [t for t in threading.enumerate() if t.name == "passage-retrieval-stuck-query"]
        self.assertEqual(len(workers), 1)
        self.assertTrue(workers[0].daemon)

    def test_max_workers_bounds_concurrency(self):
        search = FakeSearch(delays={q: 0.1 for q in ("a", "b", "c", "d")})
        PassageRetriever(search, max_workers=2).retrieve_variants(
            [QueryVariant(text=q) for q in ("a", "b", "c", "d")]
        )
        self.assertLessEqual(search.max_active, 2)
        self.assertEqual(len(search.calls), 4)

    def test_empty_variants(self):
        self.assertEqual(PassageRetriever(self.search).retrieve_variants([]), [])


if __name__ == "__main__":
    unittest.main()
