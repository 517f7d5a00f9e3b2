"""Shared pytest fixtures for the bddgen test suite.

Provides reusable fixtures for:
- Sample feature files and their raw text
- Pre-parsed Feature models
- Output directories and configuration
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from bddgen.config import Config
from bddgen.parser import Feature, parse_text


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the sample ``.feature`` files."""
    return FIXTURES_DIR


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary output directory for generated tests (auto-cleanup)."""
    out = tmp_path / "generated"
    yield out


@pytest.fixture
def config(tmp_output_dir: Path) -> Config:
    """Config writing into a temporary directory."""
    return Config(output_dir=tmp_output_dir)


# ---------------------------------------------------------------------------
# Sample feature text
# ---------------------------------------------------------------------------

@pytest.fixture
def login_feature_path() -> Path:
    """Path to the login feature fixture file."""
    path = FIXTURES_DIR / "login.feature"
    assert path.exists(), f"Login feature fixture not found at {path}"
    return path


@pytest.fixture
def login_feature_text(login_feature_path: Path) -> str:
    """Raw text of the login feature fixture."""
    return login_feature_path.read_text(encoding="utf-8")


@pytest.fixture
def outline_feature_path() -> Path:
    """Path to the scenario-outline feature fixture file."""
    return FIXTURES_DIR / "outline.feature"


@pytest.fixture
def doc_string_feature_text() -> str:
    """Feature whose first step carries a doc string containing keywords."""
    return textwrap.dedent('''\
        Feature: Publishing

          Scenario: Post with body
            Given a blog post with body:
              """
              Scenario: not a real scenario
              @not-a-tag
              | not | a | row |
              """
            When the post is published
    ''')


# ---------------------------------------------------------------------------
# Parsed models
# ---------------------------------------------------------------------------

@pytest.fixture
def login_feature(login_feature_text: str) -> Feature:
    """The login fixture parsed into a Feature."""
    return parse_text(login_feature_text)


@pytest.fixture
def outline_feature(outline_feature_path: Path) -> Feature:
    """The outline fixture parsed into a Feature."""
    return parse_text(outline_feature_path.read_text(encoding="utf-8"))
