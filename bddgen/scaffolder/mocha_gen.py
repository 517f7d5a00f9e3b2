"""Mocha test skeleton generation.

Generates:
- ``<feature-slug>.test.js`` per parsed feature, one ``it`` block per
  background and scenario with the steps as comments and a ``data`` literal
- ``.mocharc.json`` runner configuration for the output directory
"""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from bddgen.parser.models import Feature, Scenario, ScenarioOutline
from bddgen.utils import unique_file_stems

from .templates import TemplateRenderer, write_file


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PREAMBLE: tuple[str, ...] = (
    "const { mocha } = require('mocha');",
    "const { expect } = require('chai');",
)
DEFAULT_DATA_INDENT = 6

_QUOTED_PATTERN = re.compile(r'"([^"]+)"')
_NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b", re.ASCII)

Variables = dict[str, str | int | float]


# ---------------------------------------------------------------------------
# Variable extraction
# ---------------------------------------------------------------------------

def extract_variables(step: str) -> Variables:
    """Pull quoted literals and numerals out of a step.

    The n-th quoted string is stored as ``keyN`` and the n-th numeral as
    ``numN`` (both 1-indexed).  Values are not deduplicated and are not tied
    to any placeholder name.

    Examples::

        extract_variables('Given a user "bob" aged 42')
        -> {"key1": "bob", "num1": 42}
    """
    variables: Variables = {}
    for index, match in enumerate(_QUOTED_PATTERN.finditer(step), start=1):
        variables[f"key{index}"] = match.group(1)
    for index, match in enumerate(_NUMBER_PATTERN.finditer(step), start=1):
        variables[f"num{index}"] = _to_number(match.group(0))
    return variables


def merge_step_variables(steps: Iterable[str]) -> Variables:
    """Shallow-merge the variables of each step; later steps win on collision."""
    merged: Variables = {}
    for step in steps:
        merged.update(extract_variables(step))
    return merged


def _to_number(text: str) -> int | float:
    if "." in text:
        return float(text)
    try:
        return int(text)
    except ValueError:
        # Past the int string-conversion digit limit.
        return float(text)


# ---------------------------------------------------------------------------
# Test content builders
# ---------------------------------------------------------------------------

def generate_mocha_tests(feature: Feature, *, data_indent: int = DEFAULT_DATA_INDENT) -> str:
    """Build the Mocha test file for a parsed feature.

    Pure function: no I/O.  An empty ``Feature`` produces the preamble and an
    empty ``describe`` block.
    """
    lines: list[str] = [*PREAMBLE, ""]
    lines.append(f"describe({_js_string('Feature: ' + feature.name)}, function () {{")

    background = feature.background
    if background is not None and background.steps:
        # The title carries the first background step, not a fixed label.
        lines.extend(_build_test_case(
            f"Background: {background.steps[0]}",
            background.steps,
            _data_lines(merge_step_variables(background.steps), data_indent),
        ))

    for scenario in feature.scenarios:
        lines.extend(_build_scenario(scenario, data_indent))

    lines.append("});")
    return "\n".join(lines)


def _build_scenario(
    scenario: Scenario | ScenarioOutline,
    data_indent: int,
) -> list[str]:
    if scenario.kind == "outline":
        title = f"Scenario Outline: {scenario.name}"
        data = ["    const data = ["]
        data.extend(f"      {_to_json(row, data_indent)}," for row in scenario.examples)
        data.append("    ];")
    elif scenario.kind == "scenario":
        title = scenario.name
        data = _data_lines(merge_step_variables(scenario.steps), data_indent)
    else:
        raise ValueError(f"Unknown scenario kind: {scenario.kind!r}")
    return _build_test_case(title, scenario.steps, data)


def _build_test_case(title: str, steps: list[str], data: list[str]) -> list[str]:
    lines = [f"  it({_js_string(title)}, async () => {{"]
    lines.extend(f"    // {step}" for step in steps)
    lines.append("")
    lines.extend(data)
    lines.append("  });")
    lines.append("")
    return lines


def _data_lines(data: Variables, indent: int) -> list[str]:
    return [f"    const data = {_to_json(data, indent)};"]


def _to_json(value: Any, indent: int) -> str:
    return json.dumps(value, indent=indent or None, ensure_ascii=False)


def _js_string(text: str) -> str:
    """Quote *text* as a single-quoted JavaScript string literal."""
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ---------------------------------------------------------------------------
# File generation
# ---------------------------------------------------------------------------

class MochaGenerator:
    """Writes Mocha test files and runner config for parsed features.

    Attributes:
        renderer: Template renderer used for ``.mocharc.json``.
        rendered: Test file contents of the last ``generate`` call, keyed
            by output path.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer
        self.rendered: dict[Path, str] = {}

    async def generate(
        self,
        output_dir: Path,
        features: list[Feature],
        context: dict[str, Any],
    ) -> list[Path]:
        """Write one test file per feature plus ``.mocharc.json``.

        Features that slug to the same file stem get ``-2``, ``-3``, ...
        appended in input order, so no test file overwrites another.

        Args:
            output_dir: Directory receiving the generated files.
            features: Parsed features.
            context: Rendering options: ``test_suffix``, ``data_indent``,
                ``write_mocharc``, ``timeout`` and ``reporter``.

        Returns:
            List of all written file paths.
        """
        written: list[Path] = []
        self.rendered = {}
        suffix = context.get("test_suffix", ".test.js")
        indent = context.get("data_indent", DEFAULT_DATA_INDENT)
        stems = unique_file_stems(feature.name for feature in features)

        for feature, stem in zip(features, stems):
            out = output_dir / f"{stem}{suffix}"
            content = generate_mocha_tests(feature, data_indent=indent)
            await asyncio.to_thread(write_file, out, content + "\n")
            self.rendered[out] = content
            written.append(out)

        if context.get("write_mocharc", True):
            mocharc = await self.renderer.render_to_file(
                "mocharc.json.j2",
                output_dir / ".mocharc.json",
                {
                    "spec_glob": f"*{suffix}",
                    "timeout": context.get("timeout", 2000),
                    "reporter": context.get("reporter", "spec"),
                },
            )
            written.append(mocharc)

        return written
