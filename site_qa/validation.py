"""Validation helpers for contact data and business metrics shown on the site."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
# Characters a host may not contain.
_FORBIDDEN_HOST_RE = re.compile(r"[\x00-\x20\x7f<>\\^|%\"{}`]")
_ANGLE_RE = re.compile(r"[<>]")

# Schemes that are meaningless without a host.
_HOST_SCHEMES = {"http", "https", "ws", "wss", "ftp"}

MAX_PROJECTS_PER_YEAR = 50


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BusinessStats:
    years_in_business: float
    projects_delivered: float
    referral_percentage: float


def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(str(email or "")))


def validate_phone(phone: str) -> bool:
    """US style ``(503) 221-8500``; nothing else is accepted."""
    return bool(_PHONE_RE.match(str(phone or "")))


def validate_url(url: str) -> bool:
    try:
        parts = urlsplit(str(url or "").strip())
        # Accessing the port validates it.
        _ = parts.port
    except ValueError:
        return False

    scheme = (parts.scheme or "").lower()
    if not scheme or not _SCHEME_RE.match(scheme):
        return False
    if scheme in _HOST_SCHEMES and not parts.hostname:
        return False
    if parts.hostname and _FORBIDDEN_HOST_RE.search(parts.hostname):
        return False
    if scheme not in _HOST_SCHEMES and not (parts.netloc or parts.path):
        return False
    return True


def sanitize_input(value: str) -> str:
    """Trim whitespace and drop angle brackets. This is not HTML escaping."""
    return _ANGLE_RE.sub("", str(value or "").strip())


def validate_business_metrics(stats: BusinessStats) -> ValidationResult:
    warnings: list[str] = []

    if stats.years_in_business < 0:
        warnings.append("Years in business cannot be negative")

    if stats.projects_delivered < 0:
        warnings.append("Projects delivered cannot be negative")

    if stats.referral_percentage < 0 or stats.referral_percentage > 100:
        warnings.append("Referral percentage must be between 0 and 100")

    if stats.years_in_business > 0 and stats.projects_delivered / stats.years_in_business > MAX_PROJECTS_PER_YEAR:
        warnings.append("Projects per year seems unusually high")

    return ValidationResult(is_valid=not warnings, warnings=warnings)


VALIDATORS = {
    "email": validate_email,
    "phone": validate_phone,
    "url": validate_url,
}
