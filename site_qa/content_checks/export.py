"""Serialise content check results in the jest/vitest JSON reporter shape."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .runner import ContentCheckResult


def to_assertion_results(
    results: list[ContentCheckResult],
    *,
    source: str,
    start_time_ms: int,
) -> dict[str, Any]:
    passed = sum(1 for r in results if r.ok)
    failed = len(results) - passed

    assertions = [
        {
            "ancestorTitles": list(r.category),
            "title": r.name,
            "fullName": " ".join([*r.category, r.name]),
            "status": "passed" if r.ok else "failed",
            "duration": r.elapsed_ms or 0,
            "failureMessages": [r.error] if r.error else [],
            "meta": {"url": r.url, "status_code": r.status_code, **r.details},
        }
        for r in results
    ]

    return {
        "numTotalTests": len(results),
        "numPassedTests": passed,
        "numFailedTests": failed,
        "numPendingTests": 0,
        "numSkippedTests": 0,
        "startTime": start_time_ms,
        "success": failed == 0,
        "summary": {"total": len(results), "passed": passed, "failed": failed, "skipped": 0},
        "testResults": [
            {
                "name": source,
                "status": "passed" if failed == 0 else "failed",
                "assertionResults": assertions,
            }
        ],
    }


def write_results(path: str | Path, payload: dict[str, Any]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return p
