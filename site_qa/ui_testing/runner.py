"""Scenario runner: executes parsed features step by step against browser pages."""

import asyncio
import time
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import structlog
from playwright.async_api import Page

from .gherkin import AmbiguousStepError, Feature, Scenario, StepRegistry, UndefinedStepError
from .resolver import ElementResolver

logger = structlog.get_logger(__name__)

PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"

PageFactory = Callable[[], AbstractAsyncContextManager[Page]]


@dataclass
class ScenarioContext:
    """What a step definition receives as its first argument."""
    page: Page
    resolver: ElementResolver
    state: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepResult:
    keyword: str
    text: str
    status: str
    duration_ms: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    status: str
    duration_ms: float
    started_at: str
    ended_at: str
    steps: tuple[StepResult, ...]
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == PASSED

    def to_dict(self) -> dict[str, Any]:
        """wdio-json-reporter test entry."""
        out: dict[str, Any] = {
            "name": self.name,
            "start": self.started_at,
            "end": self.ended_at,
            "duration": round(self.duration_ms, 3),
            "state": self.status,
            "steps": [
                {"keyword": s.keyword, "text": s.text, "state": s.status, "duration": round(s.duration_ms, 3)}
                for s in self.steps
            ],
        }
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class FeatureResult:
    name: str
    path: str
    started_at: str
    ended_at: str
    duration_ms: float
    scenarios: tuple[ScenarioResult, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file": self.path,
            "start": self.started_at,
            "end": self.ended_at,
            "duration": round(self.duration_ms, 3),
            "tests": [s.to_dict() for s in self.scenarios],
            "hooks": [],
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _describe(exc: BaseException) -> str:
    if isinstance(exc, AssertionError):
        return str(exc) or "Assertion failed"
    return f"{type(exc).__name__}: {exc}"


class ScenarioRunner:
    """Runs scenarios with strict step matching and a per-step timeout."""

    def __init__(self, registry: StepRegistry, *, step_timeout_seconds: float = 60.0):
        self.registry = registry
        self.step_timeout_seconds = step_timeout_seconds

    async def run_scenario(self, scenario: Scenario, new_page: PageFactory) -> ScenarioResult:
        started_at = _now()
        started = time.perf_counter()
        step_results: list[StepResult] = []
        error: str | None = None

        logger.info("Running scenario", scenario=scenario.name)

        async with new_page() as page:
            context = ScenarioContext(page=page, resolver=ElementResolver(page))
            for step in scenario.steps:
                if error is not None:
                    step_results.append(StepResult(step.keyword, step.text, SKIPPED))
                    continue

                step_started = time.perf_counter()
                try:
                    definition, args = self.registry.match(step.text)
                    await asyncio.wait_for(definition.func(context, *args), timeout=self.step_timeout_seconds)
                except (UndefinedStepError, AmbiguousStepError) as exc:
                    error = str(exc)
                except asyncio.TimeoutError:
                    error = f"Step timed out after {self.step_timeout_seconds:g}s: {step.keyword} {step.text}"
                except Exception as exc:
                    error = _describe(exc)

                step_ms = (time.perf_counter() - step_started) * 1000.0
                status = PASSED if error is None else FAILED
                step_results.append(StepResult(step.keyword, step.text, status, step_ms, error))
                if error is not None:
                    logger.error("Step failed", scenario=scenario.name, step=f"{step.keyword} {step.text}", error=error)

        duration_ms = (time.perf_counter() - started) * 1000.0
        if not scenario.steps:
            status = SKIPPED
        else:
            status = PASSED if error is None else FAILED

        logger.info("Scenario finished", scenario=scenario.name, status=status, duration_ms=round(duration_ms, 1))
        return ScenarioResult(
            name=scenario.name,
            status=status,
            duration_ms=duration_ms,
            started_at=started_at,
            ended_at=_now(),
            steps=tuple(step_results),
            error=error,
        )

    async def run_feature(self, feature: Feature, new_page: PageFactory) -> FeatureResult:
        started_at = _now()
        started = time.perf_counter()
        results = [await self.run_scenario(sc, new_page) for sc in feature.scenarios]
        return FeatureResult(
            name=feature.name,
            path=feature.path,
            started_at=started_at,
            ended_at=_now(),
            duration_ms=(time.perf_counter() - started) * 1000.0,
            scenarios=tuple(results),
        )


def to_suite_results(
    features: list[FeatureResult],
    *,
    started_at: str,
    ended_at: str,
    capabilities: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Serialise in the wdio-json-reporter shape read by the scenario report."""
    scenarios = [s for f in features for s in f.scenarios]
    return {
        "start": started_at,
        "end": ended_at,
        "capabilities": capabilities or {},
        "framework": "site_qa",
        "suites": [f.to_dict() for f in features],
        "specs": [f.path for f in features],
        "state": {
            "passed": sum(1 for s in scenarios if s.status == PASSED),
            "failed": sum(1 for s in scenarios if s.status == FAILED),
            "skipped": sum(1 for s in scenarios if s.status == SKIPPED),
        },
    }
