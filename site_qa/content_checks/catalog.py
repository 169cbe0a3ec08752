"""Loading of the declarative content check catalog."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CATALOG_PATH = Path(__file__).with_name("catalog.yaml")

PREDICATE_KEYS = (
    "expected_status_codes",
    "expected_content_type_contains",
    "headers_present_any",
    "body_contains_all",
    "body_contains_any",
    "body_matches_all",
    "title_min_length",
    "extract_valid",
    "allowed_content_encodings",
    "consistent_headers",
    "consistent_body",
    "max_elapsed_ms",
)


class CatalogError(ValueError):
    pass


def load_catalog(path: str | Path | None = None) -> list[dict[str, Any]]:
    p = Path(path) if path is not None else CATALOG_PATH
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    checks = data.get("checks") if isinstance(data, dict) else None
    if not isinstance(checks, list):
        raise CatalogError(f"{p}: 'checks' must be a list")

    seen: set[str] = set()
    for idx, check in enumerate(checks):
        if not isinstance(check, dict):
            raise CatalogError(f"{p}: check[{idx}] must be a mapping")
        name = str(check.get("name") or "").strip()
        if not name:
            raise CatalogError(f"{p}: check[{idx}] has no name")
        if name in seen:
            raise CatalogError(f"{p}: duplicate check name {name!r}")
        seen.add(name)
        if not any(key in check for key in PREDICATE_KEYS):
            raise CatalogError(f"{p}: check {name!r} asserts nothing")
        if not (check.get("path") or check.get("paths") or check.get("url")):
            raise CatalogError(f"{p}: check {name!r} has no path, paths or url")
    return checks
