"""Step definitions for the Halo Powered homepage scenarios."""

from playwright.async_api import Error as PlaywrightError

from .gherkin import StepRegistry
from .resolver import (
    HEADER_SCOPE,
    TargetNotFoundError,
    assert_section_reached,
    css,
    text_xpath,
    xpath,
)
from .runner import ScenarioContext

registry = StepRegistry()

NAV_ITEMS = ["about", "services", "work", "industries", "technology"]
HERO_PHRASES = ("transforming your vision", "products that matter")

HERO_STRATEGIES = [
    css("h1", text_any=HERO_PHRASES),
    css(".hero h1", text_any=HERO_PHRASES),
    css(".hero-headline", text_any=HERO_PHRASES),
    css('[data-testid="hero"] h1', text_any=HERO_PHRASES),
]

# CSS has no :contains, so text matching goes through lowercased XPath.
EXPLORE_CTA_STRATEGIES = [
    css('a[href*="work"]', text_any=("explore our work", "explore"), href_contains="work"),
    xpath(text_xpath("explore", tags=("a",)), text_any=("explore",), href_contains="work"),
    xpath(text_xpath("explore", tags=("button",)), text_any=("explore",), href_contains="work"),
    css(".cta", text_any=("explore",), href_contains="work"),
    css(".button", text_any=("explore",), href_contains="work"),
]

WORK_SECTION_STRATEGIES = [
    css('*[class*="work"]', text_any=("work", "portfolio", "projects")),
    css('*[id*="work"]', text_any=("work", "portfolio", "projects")),
    css("h2", text_any=("work", "portfolio", "projects")),
    css("h3", text_any=("work", "portfolio", "projects")),
]


def header_menu_strategies(label: str, slug: str):
    needle = label.lower()
    link = text_xpath(needle, tags=("a",), attributes=("href", "aria-label"))
    button = text_xpath(needle, tags=("button",))
    return [
        xpath(link, scope=HEADER_SCOPE),
        xpath(button, scope=HEADER_SCOPE),
        xpath(link),
        xpath(button),
        css(f"a[href*='/{slug}']"),
        css(f"a[href*='./{slug}']"),
        css(f"a[href*='{slug}']"),
    ]


@registry.given("I am on the Halo homepage")
async def on_homepage(ctx: ScenarioContext) -> None:
    await ctx.page.goto("/")
    await ctx.page.wait_for_timeout(250)


@registry.then("I should see the main navigation items")
async def see_navigation(ctx: ScenarioContext) -> None:
    found = 0
    for item in NAV_ITEMS:
        if await ctx.resolver.count(xpath(text_xpath(item, tags=("a",)))) > 0:
            found += 1
    assert found >= 2, "Navigation not found or missing expected items"


@registry.then("I should see the hero headline")
async def see_hero(ctx: ScenarioContext) -> None:
    hero = await ctx.resolver.find("hero headline", HERO_STRATEGIES)
    assert hero is not None, "Hero headline not found with expected text"


@registry.when("I click the Explore Our Work CTA")
async def click_explore_cta(ctx: ScenarioContext) -> None:
    await ctx.resolver.click("Explore Our Work CTA", EXPLORE_CTA_STRATEGIES)


@registry.then("I should be navigated to the Work section")
async def on_work_section(ctx: ScenarioContext) -> None:
    await ctx.page.wait_for_timeout(1000)
    try:
        await assert_section_reached(ctx.page, "work", WORK_SECTION_STRATEGIES)
    except AssertionError:
        raise AssertionError("Not navigated to Work section") from None


@registry.when("I click the header menu {string}")
async def click_header_menu(ctx: ScenarioContext, menu_text: str) -> None:
    slug = menu_text.strip().lower()
    try:
        await ctx.resolver.click(f'Header menu "{menu_text}"', header_menu_strategies(menu_text, slug))
        return
    except TargetNotFoundError:
        pass

    # Client-side routed sites may render the menu late or not at all.
    try:
        await ctx.page.goto(f"/{slug}")
    except PlaywrightError as exc:
        raise AssertionError(f'Header menu "{menu_text}" not found') from exc


@registry.then("the URL should include {string}")
async def url_includes(ctx: ScenarioContext, expected: str) -> None:
    await ctx.page.wait_for_timeout(800)
    await assert_section_reached(ctx.page, expected)
