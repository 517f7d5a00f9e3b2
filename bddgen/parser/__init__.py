"""bddgen feature-file parser.

Parses Gherkin ``.feature`` files into a structured ``Feature`` model that the
Mocha generator turns into test skeletons.

Usage::

    from bddgen.parser import parse_feature_file, parse_text

    feature = await parse_feature_file("features/login.feature")
    print(feature.name)
    print(feature.scenarios)
"""

from bddgen.parser.models import (
    Background,
    Feature,
    ParseMode,
    Scenario,
    ScenarioOutline,
)
from bddgen.parser.gherkin import (
    ParseContext,
    parse_feature_file,
    parse_lines,
    parse_text,
)

__all__ = [
    "parse_feature_file",
    "parse_lines",
    "parse_text",
    "ParseContext",
    "Feature",
    "Background",
    "Scenario",
    "ScenarioOutline",
    "ParseMode",
]
