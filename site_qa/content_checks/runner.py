from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import httpx
import structlog

from site_qa.validation import VALIDATORS

logger = structlog.get_logger(__name__)

_TITLE_RE = re.compile(r"(?is)<title[^>]*>(.*?)</title>")


@dataclass(frozen=True)
class ContentCheckResult:
    name: str
    category: tuple[str, ...]
    ok: bool
    url: str
    status_code: int | None
    elapsed_ms: float | None
    error: str | None
    details: dict[str, Any]


@dataclass(frozen=True)
class _Fetched:
    url: str
    status_code: int
    headers: httpx.Headers
    text: str


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _resolve_url(base: str, raw: dict[str, Any], path: str | None) -> str:
    url = str(raw.get("url") or "").strip()
    if url:
        return url
    p = str(path or "").strip()
    return urljoin(base.rstrip("/") + "/", p.lstrip("/"))


def _check_response(raw: dict[str, Any], resp: _Fetched) -> str | None:
    """First failing per-response predicate, or None."""
    expected_statuses = [int(x) for x in _as_list(raw.get("expected_status_codes") or [200])]
    if resp.status_code not in expected_statuses:
        return f"unexpected_status: {resp.status_code} not in {expected_statuses} ({resp.url})"

    expected_ct = str(raw.get("expected_content_type_contains") or "").strip()
    if expected_ct:
        ct = (resp.headers.get("content-type") or "").lower()
        if expected_ct.lower() not in ct:
            return f"unexpected_content_type: {ct!r} missing {expected_ct!r}"

    any_headers = [str(h) for h in _as_list(raw.get("headers_present_any"))]
    if any_headers and not any(resp.headers.get(h) is not None for h in any_headers):
        return f"missing_headers: none of {any_headers}"

    allowed_enc = [str(e).lower() for e in _as_list(raw.get("allowed_content_encodings"))]
    if allowed_enc:
        enc = (resp.headers.get("content-encoding") or "").strip().lower()
        if enc and enc not in allowed_enc:
            return f"unexpected_content_encoding: {enc!r} not in {allowed_enc}"

    ignore_case = bool(raw.get("ignore_case"))
    body = resp.text.lower() if ignore_case else resp.text

    def _norm(s: Any) -> str:
        return str(s).lower() if ignore_case else str(s)

    contains_all = [str(s) for s in _as_list(raw.get("body_contains_all"))]
    missing = [s for s in contains_all if _norm(s) not in body]
    if missing:
        return f"body_missing: {missing}"

    contains_any = [str(s) for s in _as_list(raw.get("body_contains_any"))]
    if contains_any and not any(_norm(s) in body for s in contains_any):
        return f"body_missing_any: {contains_any}"

    patterns = [str(p) for p in _as_list(raw.get("body_matches_all"))]
    unmatched = [p for p in patterns if not re.search(p, resp.text)]
    if unmatched:
        return f"body_unmatched: {unmatched}"

    min_title = raw.get("title_min_length")
    if min_title is not None:
        m = _TITLE_RE.search(resp.text)
        if not m:
            return "missing_title"
        title = m.group(1).strip()
        if len(title) <= int(min_title):
            return f"title_too_short: {title!r}"

    for rule in _as_list(raw.get("extract_valid")):
        if not isinstance(rule, dict):
            continue
        validator_name = str(rule.get("validator") or "")
        validator = VALIDATORS.get(validator_name)
        if validator is None:
            return f"unknown_validator: {validator_name!r}"
        found = re.findall(str(rule.get("pattern") or ""), resp.text)
        if not found:
            return f"nothing_extracted: {rule.get('pattern')!r}"
        invalid = sorted({v for v in found if not validator(v)})
        if invalid:
            return f"invalid_{validator_name}: {invalid[:10]}"

    return None


def _check_group(raw: dict[str, Any], group: list[_Fetched]) -> str | None:
    """Predicates comparing repeated fetches of the same resource."""
    for header in [str(h) for h in _as_list(raw.get("consistent_headers"))]:
        values = [r.headers.get(header) for r in group]
        # Only comparable when every response carries the header.
        if all(v is not None for v in values) and len(set(values)) > 1:
            return f"inconsistent_header: {header} {values}"

    if raw.get("consistent_body") and len({r.text for r in group}) > 1:
        return "inconsistent_body"

    return None


async def _fetch(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    timeout_seconds: float,
    follow_redirects: bool,
) -> _Fetched:
    resp = await http_client.request(
        method,
        url,
        headers=headers,
        timeout=float(timeout_seconds),
        follow_redirects=follow_redirects,
    )
    return _Fetched(url=str(resp.url), status_code=int(resp.status_code), headers=resp.headers, text=resp.text or "")


async def run_content_checks(
    *,
    http_client: httpx.AsyncClient,
    base_url: str,
    checks: list[dict[str, Any]],
    timeout_seconds: float = 15.0,
) -> list[ContentCheckResult]:
    """Run every check in order. Each one fetches fresh and never retries."""
    results: list[ContentCheckResult] = []
    base = str(base_url or "").strip()

    for raw in checks:
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("name") or raw.get("path") or raw.get("url") or "content_check").strip()[:200]
        category = tuple(str(c) for c in _as_list(raw.get("category")))
        method = str(raw.get("method") or "GET").strip().upper()
        paths = [str(p) for p in _as_list(raw.get("paths"))] or [str(raw.get("path") or "")]
        accept_values = [str(a) for a in _as_list(raw.get("accept_headers"))] or [None]
        fetch_count = max(1, int(raw.get("fetch_count") or 1))
        concurrent = bool(raw.get("concurrent"))
        follow_redirects = bool(raw.get("follow_redirects", True))
        base_headers = raw.get("headers") if isinstance(raw.get("headers"), dict) else {}
        max_elapsed_ms = raw.get("max_elapsed_ms")

        url = _resolve_url(base, raw, paths[0])
        started = time.perf_counter()
        status_code = None
        err = None
        details: dict[str, Any] = {}
        if raw.get("reason"):
            details["reason"] = str(raw["reason"])

        try:
            statuses: list[int] = []
            slowest_group_ms = 0.0
            for path in paths:
                url = _resolve_url(base, raw, path)
                for accept in accept_values:
                    headers = {str(k): str(v) for k, v in base_headers.items()}
                    if accept is not None:
                        headers["Accept"] = accept

                    def _call(target: str = url, hdrs: dict[str, str] = headers):
                        return _fetch(
                            http_client,
                            method,
                            target,
                            headers=hdrs,
                            timeout_seconds=timeout_seconds,
                            follow_redirects=follow_redirects,
                        )

                    group_started = time.perf_counter()
                    if concurrent:
                        outcomes = await asyncio.gather(*(_call() for _ in range(fetch_count)), return_exceptions=True)
                        # Every fetch has settled; report the first failure.
                        for outcome in outcomes:
                            if isinstance(outcome, BaseException):
                                raise outcome
                        group = list(outcomes)
                    else:
                        group = [await _call() for _ in range(fetch_count)]
                    group_ms = (time.perf_counter() - group_started) * 1000.0
                    slowest_group_ms = max(slowest_group_ms, group_ms)

                    statuses.extend(r.status_code for r in group)
                    status_code = group[-1].status_code

                    for resp in group:
                        err = err or _check_response(raw, resp)
                    err = err or _check_group(raw, group)

                    if err is None and max_elapsed_ms is not None and group_ms > float(max_elapsed_ms):
                        err = f"slow_response: elapsed_ms={group_ms:.1f} > {float(max_elapsed_ms):.1f}"
                    if err is not None:
                        break
                if err is not None:
                    break

            details["status_codes"] = statuses
            details["slowest_group_ms"] = round(slowest_group_ms, 3)
        except Exception as exc:
            err = f"{type(exc).__name__}: {exc}"

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        ok = err is None
        if ok:
            logger.debug("Content check passed", check=name, url=url)
        else:
            logger.warning("Content check failed", check=name, url=url, error=err)

        results.append(
            ContentCheckResult(
                name=name,
                category=category,
                ok=ok,
                url=url,
                status_code=status_code,
                elapsed_ms=round(elapsed_ms, 3),
                error=err,
                details=details,
            )
        )

    return results
