from __future__ import annotations

from site_qa.reporting.adapters import AssertionResultsAdapter, SuiteResultsAdapter
from site_qa.reporting.models import TestRecord, normalize_status


def test_assertion_results_legacy_counts() -> None:
    raw = {
        "numTotalTests": 3,
        "numPassedTests": 2,
        "numFailedTests": 1,
        "numSkippedTests": 0,
        "testResults": [
            {
                "name": "/repo/tests/api.test.ts",
                "assertionResults": [
                    {
                        "ancestorTitles": ["Halo Website API Tests", "Homepage Content"],
                        "title": "should load homepage",
                        "fullName": "Halo Website API Tests Homepage Content should load homepage",
                        "status": "passed",
                        "duration": 120.4,
                        "failureMessages": [],
                    },
                    {
                        "ancestorTitles": ["Halo Website API Tests", "Contact Information"],
                        "title": "should have valid email",
                        "status": "failed",
                        "duration": 5,
                        "failureMessages": ["expected false to be true"],
                    },
                ],
            }
        ],
    }

    summary = AssertionResultsAdapter().to_summary(raw)

    assert (summary.total, summary.passed, summary.failed, summary.skipped) == (3, 2, 1, 0)
    assert len(summary.records) == 2
    first, second = summary.records
    assert first.file == "/repo/tests/api.test.ts"
    assert first.ancestors == ("Halo Website API Tests", "Homepage Content")
    assert first.error is None
    assert second.status == "failed"
    assert second.full_name == "should have valid email"
    assert second.error == "expected false to be true"


def test_assertion_results_summary_object_wins_over_legacy_counts() -> None:
    raw = {
        "numTotalTests": 99,
        "summary": {"total": 4, "passed": 4, "failed": 0, "skipped": 0},
    }

    summary = AssertionResultsAdapter().to_summary(raw)

    assert (summary.total, summary.passed, summary.failed, summary.skipped) == (4, 4, 0, 0)
    assert summary.records == ()


def test_assertion_results_tolerates_missing_fields() -> None:
    raw = {"testResults": [{"assertionResults": [{"title": "bare"}]}, "junk", {"name": "x"}]}

    summary = AssertionResultsAdapter().to_summary(raw)

    assert (summary.total, summary.passed, summary.failed, summary.skipped) == (0, 0, 0, 0)
    assert len(summary.records) == 1
    record = summary.records[0]
    assert record.file == "Unknown file"
    assert record.status == "skipped"
    assert record.duration_ms == 0.0


def test_adapters_accept_non_mapping_input() -> None:
    assert AssertionResultsAdapter().to_summary([]).total == 0
    assert SuiteResultsAdapter().to_summary(None).total == 0


def test_suite_results_counts_and_errors() -> None:
    raw = {
        "specs": ["/repo/features/homepage.feature"],
        "state": {"passed": 1, "failed": 1, "skipped": 1},
        "suites": [
            {
                "name": "Halo homepage",
                "tests": [
                    {"name": "Homepage loads", "state": "passed", "duration": 812.5},
                    {"name": "CTA works", "state": "failed", "duration": 100, "error": {"message": "CTA not found"}},
                    {"name": "Menu", "state": "pending"},
                ],
            }
        ],
    }

    summary = SuiteResultsAdapter().to_summary(raw)

    assert (summary.total, summary.passed, summary.failed, summary.skipped) == (3, 1, 1, 1)
    names = [r.name for r in summary.records]
    assert names == ["Homepage loads", "CTA works", "Menu"]
    assert all(r.file == "/repo/features/homepage.feature" for r in summary.records)
    assert summary.records[1].error == "CTA not found"
    assert summary.records[1].ancestors == ("Halo homepage",)
    assert summary.records[2].status == "skipped"


def test_suite_results_string_and_standard_error() -> None:
    raw = {
        "suites": [
            {
                "name": "s",
                "file": "C:\\repo\\features\\x.feature",
                "tests": [
                    {"name": "a", "state": "failed", "error": "plain message"},
                    {"name": "b", "state": "failed", "standardError": "stderr text"},
                ],
            }
        ],
    }

    summary = SuiteResultsAdapter().to_summary(raw)

    assert [r.error for r in summary.records] == ["plain message", "stderr text"]
    assert summary.records[0].file_name == "x.feature"


def test_normalize_status_aliases() -> None:
    assert normalize_status("PASSED") == "passed"
    assert normalize_status("todo") == "skipped"
    assert normalize_status("broken") == "error"
    assert normalize_status(None) == "skipped"


def test_record_rounding_and_category() -> None:
    record = TestRecord(name="n", full_name="n", status="passed", duration_ms=2.5, ancestors=("A", "B", "C"))
    assert record.rounded_duration == 3
    assert record.category() == "A > B"
    assert TestRecord(name="n", full_name="n", status="passed", duration_ms=float("nan")).rounded_duration == 0


def test_non_finite_and_oversized_numbers_fall_back_to_zero() -> None:
    raw = {
        "numTotalTests": float("inf"),
        "numPassedTests": float("nan"),
        "numFailedTests": 10**400,
        "numSkippedTests": "2",
        "testResults": [{"assertionResults": [{"title": "t", "duration": float("-inf")}]}],
    }

    summary = AssertionResultsAdapter().to_summary(raw)

    assert (summary.total, summary.passed, summary.failed, summary.skipped) == (0, 0, 0, 2)
    assert summary.records[0].duration_ms == 0.0
    assert SuiteResultsAdapter().to_summary({"state": {"passed": float("inf"), "failed": 1}}).total == 1
