from __future__ import annotations

import pytest
from playwright.async_api import Error as PlaywrightError

from site_qa.ui_testing.resolver import (
    ElementResolver,
    TargetNotFoundError,
    assert_section_reached,
    css,
    first_match,
    text_xpath,
    xpath,
    xpath_literal,
)


class FakeElement:
    def __init__(self, text: str = "", href: str | None = None, connected: bool = True, children=None):
        self.text = text
        self.href = href
        self.connected = connected
        self.children = children or {}
        self.clicked = False
        self.scrolled = False

    async def evaluate(self, expression: str):
        return self.connected

    async def inner_text(self) -> str:
        return self.text

    async def get_attribute(self, name: str):
        return self.href if name == "href" else None

    async def scroll_into_view_if_needed(self) -> None:
        self.scrolled = True

    async def click(self) -> None:
        self.clicked = True

    async def query_selector_all(self, query: str):
        return list(self.children.get(query, []))


class FakePage:
    def __init__(self, elements: dict[str, list], url: str = "https://halopowered.com/", broken: set[str] | None = None):
        self.elements = elements
        self.url = url
        self.broken = broken or set()
        self.queries: list[str] = []

    async def query_selector_all(self, query: str):
        self.queries.append(query)
        if query in self.broken:
            raise PlaywrightError("invalid selector")
        return list(self.elements.get(query, []))


@pytest.mark.asyncio
async def test_first_match_returns_first_non_none_in_order() -> None:
    calls: list[str] = []

    def attempt(label: str, value):
        async def _run():
            calls.append(label)
            return value
        return _run

    result = await first_match([attempt("a", None), attempt("b", "found"), attempt("c", "later")])

    assert result == "found"
    assert calls == ["a", "b"]
    assert await first_match([attempt("x", None)]) is None


@pytest.mark.asyncio
async def test_falls_back_to_second_strategy_when_first_has_no_matches() -> None:
    cta = FakeElement(text="Explore Our Work", href="/work")
    page = FakePage({"css=a.cta": [cta]})
    resolver = ElementResolver(page)

    element = await resolver.find("cta", [css("a.primary"), css("a.cta")])

    assert element is cta
    assert page.queries == ["css=a.primary", "css=a.cta"]


@pytest.mark.asyncio
async def test_declaration_order_wins_over_later_matches() -> None:
    first = FakeElement(text="one")
    second = FakeElement(text="two")
    page = FakePage({"css=h1": [first], "css=.hero h1": [second]})

    element = await ElementResolver(page).find("hero", [css("h1"), css(".hero h1")])

    assert element is first


@pytest.mark.asyncio
async def test_text_and_href_filters_are_alternatives() -> None:
    detached = FakeElement(text="Explore", href="/work", connected=False)
    wrong = FakeElement(text="Contact", href="/contact")
    by_href = FakeElement(text="See more", href="/WORK#top")
    page = FakePage({"css=a": [detached, wrong, by_href]})

    element = await ElementResolver(page).find("cta", [css("a", text_any=("explore",), href_contains="work")])

    assert element is by_href


@pytest.mark.asyncio
async def test_text_filter_is_case_insensitive() -> None:
    hero = FakeElement(text="TRANSFORMING YOUR VISION")
    page = FakePage({"css=h1": [hero]})

    element = await ElementResolver(page).find("hero", [css("h1", text_any=("Transforming your vision",))])

    assert element is hero


@pytest.mark.asyncio
async def test_invalid_query_is_skipped() -> None:
    ok = FakeElement(text="x")
    page = FakePage({"css=good": [ok]}, broken={"xpath=//bad["})

    element = await ElementResolver(page).find("t", [xpath("//bad["), css("good")])

    assert element is ok


@pytest.mark.asyncio
async def test_resolve_raises_when_every_strategy_misses() -> None:
    strategies = [css("a"), css("button")]
    resolver = ElementResolver(FakePage({}))

    with pytest.raises(TargetNotFoundError) as info:
        await resolver.resolve("Explore CTA", strategies)

    assert info.value.target == "Explore CTA"
    assert info.value.tried == tuple(strategies)
    assert "Explore CTA not found" in str(info.value)
    assert isinstance(info.value, AssertionError)


@pytest.mark.asyncio
async def test_scoped_strategy_only_searches_inside_containers() -> None:
    inside = FakeElement(text="About")
    outside = FakeElement(text="About")
    header = FakeElement(children={"xpath=//a": [inside]})
    page = FakePage({"header": [header], "xpath=//a": [outside]})

    element = await ElementResolver(page).find("about", [xpath("//a", scope="header")])

    assert element is inside


@pytest.mark.asyncio
async def test_click_scrolls_then_clicks() -> None:
    link = FakeElement(text="Work")
    resolver = ElementResolver(FakePage({"css=a": [link]}))

    await resolver.click("work link", [css("a")])

    assert link.scrolled and link.clicked


@pytest.mark.asyncio
async def test_count_and_read_helpers() -> None:
    page = FakePage({"css=a": [FakeElement(text="A", href="/a"), FakeElement(text="B")]}, broken={"css=["})
    resolver = ElementResolver(page)

    assert await resolver.count(css("a")) == 2
    assert await resolver.count(css("[")) == 0
    assert await resolver.read_text("first link", [css("a")]) == "A"
    assert await resolver.read_attribute("first link", [css("a")], "href") == "/a"


def test_xpath_literal_quoting() -> None:
    assert xpath_literal("work") == "'work'"
    assert xpath_literal("it's") == '"it\'s"'
    assert xpath_literal("""a'b"c""") == """concat('a', "'", 'b"c')"""


def test_text_xpath_shapes() -> None:
    single = text_xpath("About", tags=("a",))
    assert single.startswith("//a[")
    assert "'about'" in single
    assert "translate(normalize-space(.)" in single

    multi = text_xpath("work", tags=("h1", "h2"), attributes=("href",))
    assert multi.startswith("//*[self::h1 or self::h2][")
    assert "translate(@href" in multi


@pytest.mark.asyncio
async def test_section_reached_by_url() -> None:
    page = FakePage({}, url="https://halopowered.com/Work")

    await assert_section_reached(page, "work")

    assert page.queries == []


@pytest.mark.asyncio
async def test_section_reached_by_content() -> None:
    heading = FakeElement(text="Our Work")
    page = FakePage({"css=h2": [heading]}, url="https://halopowered.com/")

    await assert_section_reached(page, "work", [css("h2", text_any=("work",))])


@pytest.mark.asyncio
async def test_section_not_reached() -> None:
    page = FakePage({}, url="https://halopowered.com/")

    with pytest.raises(AssertionError, match='Expected URL to include "about" or section present'):
        await assert_section_reached(page, "about")
