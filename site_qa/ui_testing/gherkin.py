"""Feature file parsing and step definition matching.

Covers the Gherkin subset the site scenarios use: ``Feature``, ``Background``,
``Scenario``, ``Scenario Outline`` with ``Examples`` tables, and the step
keywords ``Given/When/Then/And/But``. Tags and ``#`` comments are skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

STEP_KEYWORDS = ("Given", "When", "Then", "And", "But")

_PARAM_TYPES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "{string}": (r'"([^"]*)"', str),
    "{int}": (r"(-?\d+)", int),
    "{word}": (r"([^\s]+)", str),
}
_PARAM_RE = re.compile("|".join(re.escape(k) for k in _PARAM_TYPES))
_OUTLINE_RE = re.compile(r"<([^<>]+)>")


class FeatureParseError(ValueError):
    def __init__(self, message: str, path: str, line: int):
        self.path = path
        self.line = line
        super().__init__(f"{path}:{line}: {message}")


class UndefinedStepError(LookupError):
    pass


class AmbiguousStepError(LookupError):
    pass


@dataclass(frozen=True)
class Step:
    keyword: str
    text: str
    line: int


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: tuple[Step, ...]
    line: int
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Feature:
    name: str
    path: str
    scenarios: tuple[Scenario, ...]
    tags: tuple[str, ...] = ()


@dataclass
class _Block:
    kind: str  # background|scenario|outline
    name: str
    line: int
    tags: tuple[str, ...]
    steps: list[Step] = field(default_factory=list)
    examples: list[list[str]] = field(default_factory=list)
    in_examples: bool = False


def _split_row(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def _expand_outline(block: _Block, path: str) -> list[Scenario]:
    if len(block.examples) < 2:
        raise FeatureParseError("Scenario Outline needs an Examples table with a header row", path, block.line)
    header, *rows = block.examples
    scenarios: list[Scenario] = []
    for idx, row in enumerate(rows, start=1):
        if len(row) != len(header):
            raise FeatureParseError("Examples row width does not match header", path, block.line)
        values = dict(zip(header, row))

        def _sub(text: str) -> str:
            return _OUTLINE_RE.sub(lambda m: values.get(m.group(1), m.group(0)), text)

        name = _sub(block.name)
        if name == block.name:
            name = f"{name} (example {idx})"
        scenarios.append(
            Scenario(
                name=name,
                steps=tuple(Step(s.keyword, _sub(s.text), s.line) for s in block.steps),
                line=block.line,
                tags=block.tags,
            )
        )
    return scenarios


def parse_feature(text: str, path: str = "<string>") -> Feature:
    feature_name: str | None = None
    feature_tags: tuple[str, ...] = ()
    pending_tags: list[str] = []
    background: list[Step] = []
    blocks: list[_Block] = []
    current: _Block | None = None
    last_keyword: str | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("@"):
            pending_tags.extend(t for t in line.split() if t.startswith("@"))
            continue

        if line.startswith("Feature:"):
            if feature_name is not None:
                raise FeatureParseError("only one Feature per file", path, lineno)
            feature_name = line[len("Feature:"):].strip()
            feature_tags = tuple(pending_tags)
            pending_tags = []
            continue

        header = None
        for prefix, kind in (("Scenario Outline:", "outline"), ("Scenario Template:", "outline"),
                             ("Scenario:", "scenario"), ("Example:", "scenario"), ("Background:", "background")):
            if line.startswith(prefix):
                header = (kind, line[len(prefix):].strip())
                break
        if header is not None:
            if feature_name is None:
                raise FeatureParseError("scenario before Feature", path, lineno)
            current = _Block(kind=header[0], name=header[1], line=lineno, tags=tuple(pending_tags))
            pending_tags = []
            last_keyword = None
            if current.kind == "background":
                if background or any(b.kind != "background" for b in blocks):
                    raise FeatureParseError("Background must come first and only once", path, lineno)
            blocks.append(current)
            continue

        if line.startswith(("Examples:", "Scenarios:")):
            if current is None or current.kind != "outline":
                raise FeatureParseError("Examples outside a Scenario Outline", path, lineno)
            current.in_examples = True
            continue

        if line.startswith("|"):
            if current is None or not current.in_examples:
                raise FeatureParseError("table rows are only supported in Examples", path, lineno)
            current.examples.append(_split_row(line))
            continue

        keyword = line.split(" ", 1)[0]
        if keyword in STEP_KEYWORDS:
            if current is None:
                raise FeatureParseError("step outside a scenario", path, lineno)
            step_text = line[len(keyword):].strip()
            if keyword in ("And", "But"):
                if last_keyword is None:
                    raise FeatureParseError(f"{keyword} cannot start a scenario", path, lineno)
                keyword = last_keyword
            last_keyword = keyword
            step = Step(keyword=keyword, text=step_text, line=lineno)
            if current.kind == "background":
                background.append(step)
            current.steps.append(step)
            continue

        if current is None:
            # Free-form feature description.
            continue
        raise FeatureParseError(f"unexpected line: {line!r}", path, lineno)

    if feature_name is None:
        raise FeatureParseError("missing Feature", path, 1)

    scenarios: list[Scenario] = []
    for block in blocks:
        if block.kind == "background":
            continue
        if block.kind == "outline":
            expanded = _expand_outline(block, path)
        else:
            expanded = [Scenario(name=block.name, steps=tuple(block.steps), line=block.line, tags=block.tags)]
        for sc in expanded:
            scenarios.append(
                Scenario(name=sc.name, steps=tuple(background) + sc.steps, line=sc.line, tags=feature_tags + sc.tags)
            )

    return Feature(name=feature_name, path=path, scenarios=tuple(scenarios), tags=feature_tags)


StepFunc = Callable[..., Awaitable[None]]


@dataclass(frozen=True)
class StepDefinition:
    keyword: str
    pattern: str
    regex: re.Pattern[str]
    converters: tuple[Callable[[str], Any], ...]
    func: StepFunc


def compile_pattern(pattern: str) -> tuple[re.Pattern[str], tuple[Callable[[str], Any], ...]]:
    parts: list[str] = []
    converters: list[Callable[[str], Any]] = []
    pos = 0
    for m in _PARAM_RE.finditer(pattern):
        parts.append(re.escape(pattern[pos:m.start()]))
        regex, conv = _PARAM_TYPES[m.group(0)]
        parts.append(regex)
        converters.append(conv)
        pos = m.end()
    parts.append(re.escape(pattern[pos:]))
    return re.compile("^" + "".join(parts) + "$"), tuple(converters)


class StepRegistry:
    """Step definitions. Keywords are informational; matching uses the text only."""

    def __init__(self):
        self._definitions: list[StepDefinition] = []

    def __len__(self) -> int:
        return len(self._definitions)

    def register(self, keyword: str, pattern: str, func: StepFunc) -> StepFunc:
        if any(d.pattern == pattern for d in self._definitions):
            raise AmbiguousStepError(f"step already defined: {pattern!r}")
        regex, converters = compile_pattern(pattern)
        self._definitions.append(StepDefinition(keyword, pattern, regex, converters, func))
        return func

    def _decorator(self, keyword: str, pattern: str) -> Callable[[StepFunc], StepFunc]:
        def decorator(func: StepFunc) -> StepFunc:
            return self.register(keyword, pattern, func)
        return decorator

    def given(self, pattern: str) -> Callable[[StepFunc], StepFunc]:
        return self._decorator("Given", pattern)

    def when(self, pattern: str) -> Callable[[StepFunc], StepFunc]:
        return self._decorator("When", pattern)

    def then(self, pattern: str) -> Callable[[StepFunc], StepFunc]:
        return self._decorator("Then", pattern)

    def match(self, text: str) -> tuple[StepDefinition, list[Any]]:
        hits = []
        for d in self._definitions:
            m = d.regex.match(text)
            if m:
                hits.append((d, [conv(v) for conv, v in zip(d.converters, m.groups())]))
        if not hits:
            raise UndefinedStepError(f"Undefined step: {text!r}")
        if len(hits) > 1:
            raise AmbiguousStepError(f"Ambiguous step {text!r}: {[d.pattern for d, _ in hits]}")
        return hits[0]
