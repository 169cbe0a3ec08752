"""Input-shape adapters: raw results JSON in, ``RunSummary`` out.

Two shapes are understood:

* assertion results, as written by jest/vitest JSON reporters and by
  ``site_qa.content_checks``: ``testResults[].assertionResults[]`` plus either a
  ``summary`` object or the legacy ``numTotalTests``/``numPassedTests``/... counts.
* suite results, as written by wdio-json-reporter and by ``site_qa.ui_testing``:
  ``suites[].tests[]`` plus a ``state`` object of counts.

Adapters never raise on missing fields; anything absent falls back to zero or a
neutral default.
"""

from __future__ import annotations

import math
from typing import Any, Protocol

from .models import RunSummary, TestRecord, normalize_status


class ResultsAdapter(Protocol):
    name: str

    def to_summary(self, raw: Any) -> RunSummary:
        ...


def _as_float(value: Any) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def _as_int(value: Any) -> int:
    return int(_as_float(value))


def _first_present(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


def _error_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("message") or value.get("stack")
    elif isinstance(value, list):
        value = "\n".join(str(_error_text(v) or "") for v in value).strip()
    s = str(value or "").strip()
    return s or None


class AssertionResultsAdapter:
    """jest/vitest style ``testResults[].assertionResults[]``."""

    name = "assertion-results"

    def to_summary(self, raw: Any) -> RunSummary:
        data = raw if isinstance(raw, dict) else {}
        summary = data.get("summary") if isinstance(data.get("summary"), dict) else {}

        total = _as_int(_first_present(summary.get("total"), data.get("numTotalTests")))
        passed = _as_int(_first_present(summary.get("passed"), data.get("numPassedTests")))
        failed = _as_int(_first_present(summary.get("failed"), data.get("numFailedTests")))
        skipped = _as_int(_first_present(summary.get("skipped"), data.get("numSkippedTests")))

        records: list[TestRecord] = []
        files = data.get("testResults")
        if isinstance(files, list):
            for file_result in files:
                if not isinstance(file_result, dict):
                    continue
                assertions = file_result.get("assertionResults")
                if not isinstance(assertions, list):
                    continue
                file_name = str(file_result.get("name") or "Unknown file")
                for test in assertions:
                    if not isinstance(test, dict):
                        continue
                    ancestors = test.get("ancestorTitles") or []
                    records.append(
                        TestRecord(
                            name=str(test.get("title") or ""),
                            full_name=str(test.get("fullName") or test.get("title") or ""),
                            status=normalize_status(test.get("status")),
                            duration_ms=_as_float(test.get("duration")),
                            file=file_name,
                            ancestors=tuple(str(a) for a in ancestors) if isinstance(ancestors, list) else (),
                            error=_error_text(test.get("failureMessages")),
                        )
                    )

        return RunSummary(total=total, passed=passed, failed=failed, skipped=skipped, records=tuple(records))


class SuiteResultsAdapter:
    """wdio-json-reporter style ``suites[].tests[]`` with a ``state`` count object."""

    name = "suite-results"

    def to_summary(self, raw: Any) -> RunSummary:
        data = raw if isinstance(raw, dict) else {}
        state = data.get("state") if isinstance(data.get("state"), dict) else {}

        passed = _as_int(state.get("passed"))
        failed = _as_int(state.get("failed"))
        skipped = _as_int(state.get("skipped"))
        total = _as_int(_first_present(state.get("total"), passed + failed + skipped))

        records: list[TestRecord] = []
        specs = data.get("specs") if isinstance(data.get("specs"), list) else []
        default_file = str(specs[0]) if specs else "Unknown file"
        suites = data.get("suites")
        if isinstance(suites, list):
            for suite in suites:
                if not isinstance(suite, dict):
                    continue
                tests = suite.get("tests")
                if not isinstance(tests, list):
                    continue
                suite_name = str(suite.get("name") or "")
                file_name = str(suite.get("file") or default_file)
                for test in tests:
                    if not isinstance(test, dict):
                        continue
                    name = str(test.get("name") or "")
                    records.append(
                        TestRecord(
                            name=name,
                            full_name=f"{suite_name} {name}".strip(),
                            status=normalize_status(test.get("state")),
                            duration_ms=_as_float(test.get("duration")),
                            file=file_name,
                            ancestors=(suite_name,) if suite_name else (),
                            error=_error_text(_first_present(test.get("error"), test.get("standardError"))),
                        )
                    )

        return RunSummary(total=total, passed=passed, failed=failed, skipped=skipped, records=tuple(records))
