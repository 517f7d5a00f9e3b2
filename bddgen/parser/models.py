"""Pydantic v2 models for the bddgen feature-file parser.

Defines the document model produced by the Gherkin parser and consumed by the
Mocha test generator.  The models are passive records: all behaviour lives in
``bddgen.parser.gherkin`` and ``bddgen.scaffolder.mocha_gen``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ParseMode(str, Enum):
    """Section the parser is currently inside."""
    NONE = "none"
    BACKGROUND = "background"
    SCENARIO = "scenario"
    OUTLINE = "outline"
    RULE = "rule"


# ---------------------------------------------------------------------------
# Step containers
# ---------------------------------------------------------------------------

class Background(BaseModel):
    """Steps shared by every scenario of a feature."""
    steps: list[str] = Field(default_factory=list, description="Ordered step lines")


class Scenario(BaseModel):
    """A single concrete scenario."""
    kind: Literal["scenario"] = "scenario"
    name: str = Field(default="", description="Scenario title")
    steps: list[str] = Field(default_factory=list, description="Ordered step lines")
    tags: list[str] = Field(default_factory=list, description="Tags declared above the scenario")


class ScenarioOutline(BaseModel):
    """A parameterised scenario with an examples table."""
    kind: Literal["outline"] = "outline"
    name: str = Field(default="", description="Outline title")
    steps: list[str] = Field(default_factory=list, description="Ordered step lines")
    tags: list[str] = Field(default_factory=list, description="Tags declared above the outline")
    examples: list[dict[str, str]] = Field(
        default_factory=list,
        description="Example rows keyed by column header, in header order",
    )


ScenarioLike = Annotated[Union[Scenario, ScenarioOutline], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Top-level Feature
# ---------------------------------------------------------------------------

class Feature(BaseModel):
    """A parsed feature file."""
    name: str = Field(default="", description="Feature title")
    description: list[str] = Field(
        default_factory=list,
        description="Free-text lines and synthesised 'Rule: ...' lines",
    )
    background: Optional[Background] = Field(default=None, description="Shared background steps")
    scenarios: list[ScenarioLike] = Field(
        default_factory=list, description="Scenarios and outlines in declaration order"
    )
