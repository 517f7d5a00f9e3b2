"""bddgen scaffolder -- turns parsed features into Mocha test skeletons.

Quick usage::

    from bddgen.parser import parse_text
    from bddgen.scaffolder import generate_mocha_tests

    feature = parse_text(open("login.feature").read())
    print(generate_mocha_tests(feature))
"""

from bddgen.scaffolder.mocha_gen import (
    MochaGenerator,
    extract_variables,
    generate_mocha_tests,
    merge_step_variables,
)
from bddgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "MochaGenerator",
    "TemplateRenderer",
    "extract_variables",
    "generate_mocha_tests",
    "merge_step_variables",
]
