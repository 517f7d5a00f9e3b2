"""Line-oriented Gherkin parser for bddgen.

Turns the text of a ``.feature`` file into a ``Feature`` model in a single
forward pass.  The parser is deliberately tolerant: it never raises on
malformed content and simply drops lines it cannot place.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path

from .models import (
    Background,
    Feature,
    ParseMode,
    Scenario,
    ScenarioOutline,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STEP_KEYWORDS: tuple[str, ...] = ("Given", "When", "Then", "And", "But")
DOC_STRING_DELIMITER = '"""'
TAG_PREFIX = "@"
TABLE_PREFIX = "|"
_FEATURE_SUFFIXES = (".feature", ".txt", "")
_BOM = "\ufeff"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_step_line(line: str) -> bool:
    """Return True if *line* starts with a step keyword.

    This is a raw prefix check, so ``Whenever ...`` also counts as a step.
    """
    return any(line.startswith(keyword) for keyword in STEP_KEYWORDS)


def split_table_row(line: str) -> list[str]:
    """Split ``| a | b |`` into ``["a", "b"]``.

    The fields outside the first and last pipe are discarded.
    """
    return [cell.strip() for cell in line.split(TABLE_PREFIX)[1:-1]]


# ---------------------------------------------------------------------------
# Parse context
# ---------------------------------------------------------------------------

class ParseContext:
    """Mutable state for one parse pass.

    Every transition is a method so that it can be exercised on its own;
    ``feed`` dispatches a single trimmed line to the right transition.

    Attributes:
        feature: The model being built.
        mode: Section currently open.
        step_collector: List receiving step lines (background, scenario or
            outline steps; a detached list before any section is opened).
        current_scenario: Active scenario or outline, for table rows.
        headers: Header row of the current examples table.
        pending_tags: Tags waiting for the next scenario.
        in_doc_string: Whether a ``\"\"\"`` block is open.
    """

    def __init__(self) -> None:
        self.feature = Feature()
        self.mode = ParseMode.NONE
        self.step_collector: list[str] = []
        self.current_scenario: Scenario | ScenarioOutline | None = None
        self.headers: list[str] = []
        self.pending_tags: list[str] = []
        self.in_doc_string = False
        self._previous_was_tag = False

    # -- Doc strings & steps -----------------------------------------------

    def toggle_doc_string(self, line: str) -> None:
        """Open or close a doc string; the fence itself is kept as a step line."""
        self.in_doc_string = not self.in_doc_string
        self.step_collector.append(line)

    def collect(self, line: str) -> None:
        self.step_collector.append(line)

    # -- Tags --------------------------------------------------------------

    def buffer_tags(self, line: str, *, extend: bool = False) -> None:
        """Store the tokens of a tag line as pending tags.

        With *extend* the tokens are appended to the buffer (a run of adjacent
        tag lines); otherwise they replace whatever was left unflushed.
        """
        tags = line.split()
        if extend:
            self.pending_tags.extend(tags)
        else:
            self.pending_tags = tags

    def flush_tags(self) -> list[str]:
        """Hand the pending tags over and clear the buffer."""
        tags = self.pending_tags
        self.pending_tags = []
        return tags

    # -- Section handlers --------------------------------------------------

    def set_feature_name(self, name: str) -> None:
        self.feature.name = name

    def start_background(self) -> None:
        background = Background()
        self.feature.background = background
        self.step_collector = background.steps
        self.mode = ParseMode.BACKGROUND

    def start_scenario(self, name: str) -> Scenario:
        scenario = Scenario(name=name, tags=self.flush_tags())
        self._activate(scenario, ParseMode.SCENARIO)
        return scenario

    def start_outline(self, name: str) -> ScenarioOutline:
        outline = ScenarioOutline(name=name, tags=self.flush_tags())
        self._activate(outline, ParseMode.OUTLINE)
        return outline

    def reset_table(self) -> None:
        """Start a new examples table; the next row becomes its header."""
        self.headers = []

    def start_rule(self, name: str) -> None:
        self.feature.description.append(f"Rule: {name}")
        self.mode = ParseMode.RULE

    def _activate(self, scenario: Scenario | ScenarioOutline, mode: ParseMode) -> None:
        self.feature.scenarios.append(scenario)
        self.current_scenario = scenario
        self.step_collector = scenario.steps
        self.mode = mode

    # -- Tables & free text ------------------------------------------------

    def add_table_row(self, cells: list[str]) -> None:
        """Store a header row, or zip a data row into the active outline."""
        if not self.headers:
            self.headers = cells
            return
        if self.current_scenario is None or self.current_scenario.kind != "outline":
            return
        row = {
            header: cells[index] if index < len(cells) else ""
            for index, header in enumerate(self.headers)
        }
        self.current_scenario.examples.append(row)

    def add_description(self, line: str) -> None:
        if line and self.mode == ParseMode.NONE:
            self.feature.description.append(line)

    # -- Dispatch ----------------------------------------------------------

    def feed(self, line: str) -> None:
        """Dispatch one trimmed line; the first matching rule wins."""
        previous_was_tag, self._previous_was_tag = self._previous_was_tag, False

        if line.startswith(DOC_STRING_DELIMITER):
            self.toggle_doc_string(line)
            return

        if self.in_doc_string:
            self.collect(line)
            return

        if line.startswith(TAG_PREFIX):
            self.buffer_tags(line, extend=previous_was_tag)
            self._previous_was_tag = True
            return

        keyword = classify_keyword(line)
        if keyword is not None:
            _KEYWORD_HANDLERS[keyword](self, line[len(keyword):].strip())
            return

        if line.startswith(TABLE_PREFIX):
            self.add_table_row(split_table_row(line))
            return

        if is_step_line(line):
            self.collect(line)
            return

        self.add_description(line)


# ---------------------------------------------------------------------------
# Keyword table
# ---------------------------------------------------------------------------

# Ordered most specific first: "Scenario Outline:" must be tried before
# "Scenario:".
_KEYWORD_TABLE: tuple[tuple[str, Callable[[ParseContext, str], object]], ...] = (
    ("Feature:", lambda ctx, rest: ctx.set_feature_name(rest)),
    ("Background:", lambda ctx, rest: ctx.start_background()),
    ("Scenario Outline:", lambda ctx, rest: ctx.start_outline(rest)),
    ("Scenario:", lambda ctx, rest: ctx.start_scenario(rest)),
    ("Examples:", lambda ctx, rest: ctx.reset_table()),
    ("Rule:", lambda ctx, rest: ctx.start_rule(rest)),
)

SECTION_KEYWORDS: tuple[str, ...] = tuple(prefix for prefix, _ in _KEYWORD_TABLE)
_KEYWORD_HANDLERS = dict(_KEYWORD_TABLE)


def classify_keyword(line: str) -> str | None:
    """Return the section prefix *line* starts with, or None."""
    for prefix in SECTION_KEYWORDS:
        if line.startswith(prefix):
            return prefix
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_lines(lines: Iterable[str]) -> Feature:
    """Parse feature-file lines into a ``Feature``.

    Each line is stripped before dispatch.  Every call uses a fresh
    ``ParseContext``, so parsing the same input twice yields equal models.
    """
    ctx = ParseContext()
    for line in lines:
        ctx.feed(line.strip())
    return ctx.feature


def parse_text(text: str) -> Feature:
    """Parse the full text of a feature file.

    Lines are split on ``\\n`` only; a trailing ``\\r`` is removed by the
    per-line strip.  A leading byte order mark is dropped.
    """
    return parse_lines(text.removeprefix(_BOM).split("\n"))


async def _read_file(path: str | Path) -> str:
    """Read a feature file asynchronously using asyncio.to_thread."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Feature file not found: {path}")
    if file_path.suffix.lower() not in _FEATURE_SUFFIXES:
        raise ValueError(f"Expected a .feature file, got: {file_path.suffix}")
    return await asyncio.to_thread(file_path.read_text, "utf-8-sig")


async def parse_feature_file(path: str | Path) -> Feature:
    """Read and parse a ``.feature`` file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not look like a feature file.
    """
    text = await _read_file(path)
    return parse_text(text)
