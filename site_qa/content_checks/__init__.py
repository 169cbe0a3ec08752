"""HTTP-level content and contract checks for the live site."""

from .catalog import load_catalog
from .runner import ContentCheckResult, run_content_checks

__all__ = ["ContentCheckResult", "load_catalog", "run_content_checks"]
