"""Run the browser scenarios and write a results JSON for the scenario report.

Usage:
    python -m site_qa.ui_testing                  # every features/**/*.feature
    python -m site_qa.ui_testing features/x.feature
    BROWSER_HEADLESS=1 python -m site_qa.ui_testing
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ..config import get_config
from ..log import configure_logging
from .gherkin import FeatureParseError, parse_feature
from .runner import ScenarioRunner, to_suite_results
from .session import BrowserSession
from .steps import registry

logger = structlog.get_logger(__name__)


def discover_features(features_directory: str) -> list[Path]:
    return sorted(Path(features_directory).glob("**/*.feature"))


def results_path(reports_directory: str, now: datetime) -> Path:
    # Lexicographic order of these names is chronological order.
    return Path(reports_directory) / f"wdio-results-{now.strftime('%Y%m%d-%H%M%S')}.json"


async def run(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run Given/When/Then browser scenarios")
    parser.add_argument("features", nargs="*", help="Feature files (defaults to the features directory)")
    args = parser.parse_args(argv)

    config = get_config()
    configure_logging(config.log_level)

    paths = [Path(p) for p in args.features] or discover_features(config.features_directory)
    if not paths:
        logger.warning("No feature files found", directory=config.features_directory)
        return 1

    try:
        features = [parse_feature(p.read_text(encoding="utf-8"), str(p)) for p in paths]
    except FeatureParseError as e:
        logger.error("Invalid feature file", error=str(e))
        return 1

    runner = ScenarioRunner(registry, step_timeout_seconds=config.step_timeout_seconds)
    started_at = datetime.now(timezone.utc)

    async with BrowserSession(config) as session:
        feature_results = [await runner.run_feature(f, session.new_page) for f in features]

    payload = to_suite_results(
        feature_results,
        started_at=started_at.isoformat(),
        ended_at=datetime.now(timezone.utc).isoformat(),
        capabilities={"browserName": "chromium", "headless": config.browser_headless, "baseUrl": config.base_url},
    )
    out = results_path(config.reports_directory, started_at)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    state = payload["state"]
    logger.info("Scenarios completed", results=str(out), **state)
    return 0 if state["failed"] == 0 else 1


def main() -> None:
    sys.exit(asyncio.run(run(sys.argv[1:])))
