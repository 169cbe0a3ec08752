"""Resolution of semantic UI targets through ordered locator fallbacks.

Marketing pages are rebuilt often and rarely carry test ids, so a target such as
"the Explore Our Work CTA" is described by several candidate locators tried in
declaration order. The first candidate that yields an attached element passing
its text/href filter wins. There is no scoring: declaration order is the
priority.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Iterable, Sequence, TypeVar

import structlog
from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"

HEADER_SCOPE = 'header, nav, [role="navigation"]'


class TargetNotFoundError(AssertionError):
    """No locator candidate produced a usable element."""

    def __init__(self, target: str, tried: Sequence["LocatorStrategy"] = ()):
        self.target = target
        self.tried = tuple(tried)
        super().__init__(f"{target} not found (tried {len(self.tried)} locator strategies)")


@dataclass(frozen=True)
class LocatorStrategy:
    """One candidate locator plus the filter its matches must pass.

    ``text_any`` and ``href_contains`` are alternatives: an element is accepted
    when its visible text contains any of ``text_any`` or its href contains
    ``href_contains``. Without either, every attached match is accepted.
    """

    selector: str
    language: str = "css"
    text_any: tuple[str, ...] = ()
    href_contains: str | None = None
    scope: str | None = None

    @property
    def query(self) -> str:
        return f"{self.language}={self.selector}"

    @property
    def filtered(self) -> bool:
        return bool(self.text_any or self.href_contains)


def css(selector: str, **kwargs: Any) -> LocatorStrategy:
    return LocatorStrategy(selector=selector, language="css", **kwargs)


def xpath(selector: str, **kwargs: Any) -> LocatorStrategy:
    return LocatorStrategy(selector=selector, language="xpath", **kwargs)


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def _lowered(expr: str) -> str:
    return f"translate({expr}, '{_UPPER}', '{_LOWER}')"


def text_xpath(needle: str, *, tags: Sequence[str] = ("a",), attributes: Sequence[str] = ()) -> str:
    """Elements among ``tags`` whose normalised text (or one of ``attributes``)
    contains ``needle``, compared in lowercase."""
    lit = xpath_literal(needle.lower())
    conditions = [f"contains({_lowered('normalize-space(.)')}, {lit})"]
    conditions += [f"contains({_lowered('@' + attr)}, {lit})" for attr in attributes]
    predicate = " or ".join(conditions)
    if len(tags) == 1:
        return f"//{tags[0]}[{predicate}]"
    axis = " or ".join(f"self::{t}" for t in tags)
    return f"//*[{axis}][{predicate}]"


async def first_match(attempts: Iterable[Callable[[], Awaitable[T | None]]]) -> T | None:
    """Run ``attempts`` in order and return the first non-None result."""
    for attempt in attempts:
        result = await attempt()
        if result is not None:
            return result
    return None


class ElementResolver:
    """Finds and acts on elements of one page."""

    def __init__(self, page: Page):
        self.page = page

    async def _query(self, strategy: LocatorStrategy) -> list[ElementHandle]:
        if not strategy.scope:
            return await self.page.query_selector_all(strategy.query)
        found: list[ElementHandle] = []
        for container in await self.page.query_selector_all(strategy.scope):
            found.extend(await container.query_selector_all(strategy.query))
        return found

    async def _accepts(self, strategy: LocatorStrategy, element: ElementHandle) -> bool:
        if not await element.evaluate("el => el.isConnected"):
            return False
        if not strategy.filtered:
            return True
        if strategy.text_any:
            text = (await element.inner_text() or "").lower()
            if any(t.lower() in text for t in strategy.text_any):
                return True
        if strategy.href_contains:
            href = await element.get_attribute("href") or ""
            if strategy.href_contains.lower() in href.lower():
                return True
        return False

    async def _attempt(self, target: str, strategy: LocatorStrategy) -> ElementHandle | None:
        try:
            elements = await self._query(strategy)
        except PlaywrightError as exc:
            logger.debug("Locator query failed", target=target, query=strategy.query, error=str(exc))
            return None

        for element in elements:
            try:
                if await self._accepts(strategy, element):
                    logger.debug("Resolved target", target=target, query=strategy.query)
                    return element
            except PlaywrightError as exc:
                logger.debug("Skipping element", target=target, query=strategy.query, error=str(exc))
        return None

    async def find(self, target: str, strategies: Sequence[LocatorStrategy]) -> ElementHandle | None:
        return await first_match(partial(self._attempt, target, s) for s in strategies)

    async def resolve(self, target: str, strategies: Sequence[LocatorStrategy]) -> ElementHandle:
        element = await self.find(target, strategies)
        if element is None:
            raise TargetNotFoundError(target, strategies)
        return element

    async def count(self, strategy: LocatorStrategy) -> int:
        try:
            return len(await self._query(strategy))
        except PlaywrightError:
            return 0

    async def click(self, target: str, strategies: Sequence[LocatorStrategy]) -> ElementHandle:
        element = await self.resolve(target, strategies)
        await element.scroll_into_view_if_needed()
        await element.click()
        return element

    async def read_text(self, target: str, strategies: Sequence[LocatorStrategy]) -> str:
        element = await self.resolve(target, strategies)
        return await element.inner_text()

    async def read_attribute(self, target: str, strategies: Sequence[LocatorStrategy], name: str) -> str | None:
        element = await self.resolve(target, strategies)
        return await element.get_attribute(name)


def section_strategies(keyword: str) -> list[LocatorStrategy]:
    return [xpath(text_xpath(keyword, tags=("h1", "h2", "h3", "a")))]


async def assert_section_reached(
    page: Page,
    keyword: str,
    strategies: Sequence[LocatorStrategy] | None = None,
) -> None:
    """Pass when the URL mentions ``keyword`` or the section content is on the page."""
    url = page.url or ""
    if keyword.lower() in url.lower():
        return
    found = await ElementResolver(page).find(f"{keyword} section", strategies or section_strategies(keyword))
    if found is None:
        raise AssertionError(f'Expected URL to include "{keyword}" or section present, but got {url}')
