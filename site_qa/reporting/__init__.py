"""Reporting module for rendering results JSON into HTML."""

from .adapters import AssertionResultsAdapter, SuiteResultsAdapter
from .generator import ReportJob, api_report_job, e2e_report_job, generate_report
from .models import RunSummary, TestRecord
from .renderer import ReportRenderer

__all__ = [
    "AssertionResultsAdapter",
    "ReportJob",
    "ReportRenderer",
    "RunSummary",
    "SuiteResultsAdapter",
    "TestRecord",
    "api_report_job",
    "e2e_report_job",
    "generate_report",
]
