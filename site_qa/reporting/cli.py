"""Entry points for the two report generators."""

import sys

import structlog
import yaml

from ..config import QAConfig, get_config
from ..log import configure_logging
from .generator import api_report_job, e2e_report_job, generate_report

logger = structlog.get_logger(__name__)


def _load_config() -> QAConfig:
    """Configured settings, or the defaults when the configuration cannot be loaded."""
    try:
        config = get_config()
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        configure_logging()
        logger.error("Invalid configuration, using defaults", error=f"{type(e).__name__}: {e}")
        return QAConfig()
    configure_logging(config.log_level)
    return config


def api_report_main() -> int:
    """Render the content check report. Always exits 0."""
    config = _load_config()
    generate_report(api_report_job(config.reports_directory, verify_totals=config.report.verify_totals))
    return 0


def e2e_report_main() -> int:
    """Render the browser scenario report. Exits 1 when nothing was written."""
    config = _load_config()
    ok = generate_report(e2e_report_job(config.reports_directory, verify_totals=config.report.verify_totals))
    return 0 if ok else 1


def run_api_report() -> None:
    sys.exit(api_report_main())


def run_e2e_report() -> None:
    sys.exit(e2e_report_main())
