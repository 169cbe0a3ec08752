"""Run the content check catalog against the live site.

Usage:
    python -m site_qa.content_checks                 # catalog against base_url
    python -m site_qa.content_checks --only Header   # names containing "Header"
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

import httpx
import structlog

from ..config import get_config
from ..log import configure_logging
from .catalog import load_catalog
from .export import to_assertion_results, write_results
from .runner import run_content_checks

logger = structlog.get_logger(__name__)

RESULTS_FILE = "vitest-results.json"


async def run(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run HTTP content checks against the site")
    parser.add_argument("--catalog", default=None, help="Catalog YAML (defaults to the bundled one)")
    parser.add_argument("--base-url", default=None, help="Override the configured base URL")
    parser.add_argument("--only", default=None, help="Run checks whose name contains this text")
    args = parser.parse_args(argv)

    config = get_config()
    configure_logging(config.log_level)

    checks = load_catalog(args.catalog)
    if args.only:
        needle = args.only.lower()
        checks = [c for c in checks if needle in str(c.get("name", "")).lower()]

    base_url = args.base_url or config.base_url
    logger.info("Running content checks", base_url=base_url, count=len(checks))

    start_time_ms = int(time.time() * 1000)
    async with httpx.AsyncClient(headers={"User-Agent": config.user_agent}) as client:
        results = await run_content_checks(
            http_client=client,
            base_url=base_url,
            checks=checks,
            timeout_seconds=config.http_timeout_seconds,
        )

    payload = to_assertion_results(results, source=str(args.catalog or "site_qa/content_checks/catalog.yaml"), start_time_ms=start_time_ms)
    out = write_results(Path(config.reports_directory) / RESULTS_FILE, payload)

    failed = [r for r in results if not r.ok]
    logger.info("Content checks completed", total=len(results), passed=len(results) - len(failed), failed=len(failed), results=str(out))
    for r in failed:
        logger.error("Failed check", check=r.name, url=r.url, error=r.error)

    return 0 if not failed else 1


def main() -> None:
    sys.exit(asyncio.run(run(sys.argv[1:])))
