"""Best-effort report generation: results JSON in, HTML file out.

A missing or unreadable results file is logged and reported through the return
value. It is never raised to the caller, so a broken results file cannot take
down the pipeline that asked for the report.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

import structlog

from .adapters import AssertionResultsAdapter, ResultsAdapter, SuiteResultsAdapter
from .io import FileSystemIO, ReportIO
from .models import RunSummary
from .renderer import ReportRenderer

logger = structlog.get_logger(__name__)


API_RESULTS_FILE = "vitest-results.json"
API_REPORT_FILE = "vitest-report.html"
E2E_RESULTS_GLOB = "wdio-results-*.json"
E2E_REPORT_FILE = "wdio-report.html"


class ReportInputError(Exception):
    """The results file could not be located, read or parsed."""


@dataclass(frozen=True)
class ReportJob:
    name: str
    title: str
    adapter: ResultsAdapter
    output_path: Path
    input_path: Path | None = None
    input_dir: Path | None = None
    input_glob: str | None = None
    subtitle: str | None = None
    embed_errors: bool = False
    render_when_missing: bool = False
    verify_totals: bool = False


def api_report_job(reports_dir: str | Path = "report", *, verify_totals: bool = False) -> ReportJob:
    """HTTP content checks: fixed input path, static failure marker."""
    d = Path(reports_dir)
    return ReportJob(
        name="api",
        title="API & Content Check Report",
        adapter=AssertionResultsAdapter(),
        input_path=d / API_RESULTS_FILE,
        output_path=d / API_REPORT_FILE,
        embed_errors=False,
        verify_totals=verify_totals,
    )


def e2e_report_job(reports_dir: str | Path = "report", *, verify_totals: bool = False) -> ReportJob:
    """Browser scenarios: newest results file, embedded error messages."""
    d = Path(reports_dir)
    return ReportJob(
        name="e2e",
        title="Browser Scenario Report",
        subtitle="UI end-to-end scenarios run against the Halo Powered website",
        adapter=SuiteResultsAdapter(),
        input_dir=d,
        input_glob=E2E_RESULTS_GLOB,
        output_path=d / E2E_REPORT_FILE,
        embed_errors=True,
        render_when_missing=True,
        verify_totals=verify_totals,
    )


def resolve_input(job: ReportJob, io: ReportIO) -> Path | None:
    """Fixed input path, or the lexicographically last file matching the glob."""
    if job.input_path is not None:
        return job.input_path
    if job.input_dir is not None and job.input_glob:
        matches = sorted(io.glob(job.input_dir, job.input_glob), key=lambda p: p.name)
        return matches[-1] if matches else None
    return None


def load_summary(job: ReportJob, io: ReportIO) -> RunSummary:
    path = resolve_input(job, io)
    if path is None:
        if job.render_when_missing:
            logger.info("No results file found, rendering empty report", job=job.name, pattern=job.input_glob)
            return RunSummary()
        raise ReportInputError(f"no results file matches {job.input_glob!r} in {job.input_dir}")

    try:
        raw = json.loads(io.read_text(path))
    except OSError as exc:
        raise ReportInputError(f"cannot read {path}: {exc}") from exc
    except ValueError as exc:
        raise ReportInputError(f"invalid JSON in {path}: {exc}") from exc

    logger.debug("Loaded results", job=job.name, path=str(path), adapter=job.adapter.name)
    try:
        return job.adapter.to_summary(raw)
    except Exception as exc:
        raise ReportInputError(f"cannot adapt {path} as {job.adapter.name}: {type(exc).__name__}: {exc}") from exc


def generate_report(
    job: ReportJob,
    *,
    io: ReportIO | None = None,
    renderer: ReportRenderer | None = None,
    clock: Callable[[], datetime] | None = None,
) -> bool:
    """Render ``job`` to its output path. Returns False instead of raising on bad input."""
    io = io or FileSystemIO()
    renderer = renderer or ReportRenderer()
    clock = clock or datetime.now

    try:
        io.ensure_dir(job.output_path.parent)
        summary = load_summary(job, io)
    except (ReportInputError, OSError) as exc:
        logger.error("Error generating report", job=job.name, error=str(exc))
        return False

    html = renderer.render(
        summary,
        title=job.title,
        subtitle=job.subtitle,
        generated_at=clock().strftime("%Y-%m-%d %H:%M:%S"),
        embed_errors=job.embed_errors,
        verify_totals=job.verify_totals,
    )

    try:
        io.write_text(job.output_path, html)
    except OSError as exc:
        logger.error("Error writing report", job=job.name, path=str(job.output_path), error=str(exc))
        return False

    logger.info(
        "HTML report generated",
        job=job.name,
        path=str(job.output_path),
        total=summary.total,
        passed=summary.passed,
        failed=summary.failed,
    )
    return True
