"""Browser scenario testing for production pages."""

from .gherkin import StepRegistry, parse_feature
from .resolver import ElementResolver, LocatorStrategy, TargetNotFoundError, first_match
from .runner import ScenarioRunner

__all__ = [
    "ElementResolver",
    "LocatorStrategy",
    "ScenarioRunner",
    "StepRegistry",
    "TargetNotFoundError",
    "first_match",
    "parse_feature",
]
