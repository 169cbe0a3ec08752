#!/usr/bin/env python3
"""Render report/vitest-results.json into report/vitest-report.html."""

import sys
from pathlib import Path

# Add parent directory to path to import site_qa modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from site_qa.reporting.cli import run_api_report


if __name__ == "__main__":
    run_api_report()
