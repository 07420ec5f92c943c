#!/usr/bin/env python3
"""
Unified test runner for WikiSense.

Usage:
    python scripts/run_tests.py                    # Run all tests
    python scripts/run_tests.py --unit             # Run only unit tests
    python scripts/run_tests.py --integration      # Run only integration tests
    python scripts/run_tests.py --client           # Run only LLM client tests
"""
import sys
import argparse
import unittest
from pathlib import Path
import time

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


class TestSuites:
    """Test suite definitions."""

    UNIT_TESTS = [
        "tests.test_models",
        "tests.test_contracts",
        "tests.test_rank_fusion",
        "tests.test_query_expander",
        "tests.test_passage_retriever",
        "tests.test_answer_synthesizer",
        "tests.test_run_log",
        "tests.test_strategies",
    ]

    INTEGRATION_TESTS = [
        "tests.test_orchestrator",
        "tests.test_ingest_pipeline",
        "tests.test_vector_store",
        "tests.test_cli",
    ]

    CLIENT_TESTS = [
        "tests.test_llm_client",
    ]

    @classmethod
    def get_all_tests(cls):
        """Get all test modules."""
        return cls.UNIT_TESTS + cls.INTEGRATION_TESTS + cls.CLIENT_TESTS


def load_test_suite(module_names):
    """Load test suite from module names."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for module_name in module_names:
        try:
            module = __import__(module_name, fromlist=[''])
            suite.addTests(loader.loadTestsFromModule(module))
        except ImportError as e:
            print(f"Warning: Could not load {module_name}: {e}")

    return suite


def print_summary(results, elapsed_time):
    """Print test summary."""
    print("\n" + "="*80)
    print("TEST SUMMARY")
    print("="*80)
    print(f"Tests run: {results.testsRun}")
    print(f"Failures: {len(results.failures)}")
    print(f"Errors: {len(results.errors)}")
    print(f"Skipped: {len(results.skipped)}")
    print(f"Time: {elapsed_time:.2f}s")
    print("="*80)

    if results.wasSuccessful():
        print("✅ ALL TESTS PASSED!")
    else:
        print("❌ SOME TESTS FAILED")
        for test, _ in results.failures + results.errors:
            print(f"  - {test}")

    print("="*80 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Run WikiSense tests")
    parser.add_argument("--unit", action="store_true", help="Run only unit tests")
    parser.add_argument("--integration", action="store_true", help="Run only integration tests")
    parser.add_argument("--client", action="store_true", help="Run only LLM client tests")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    args = parser.parse_args()

    if args.unit:
        test_modules = TestSuites.UNIT_TESTS
    elif args.integration:
        test_modules = TestSuites.INTEGRATION_TESTS
    elif args.client:
        test_modules = TestSuites.CLIENT_TESTS
    else:
        test_modules = TestSuites.get_all_tests()

    start_time = time.time()
    suite = load_test_suite(test_modules)
    results = unittest.TextTestRunner(verbosity=0 if args.quiet else 2).run(suite)
    print_summary(results, time.time() - start_time)

    sys.exit(0 if results.wasSuccessful() else 1)


if __name__ == "__main__":
    main()
