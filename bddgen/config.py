"""bddgen configuration.

Typed configuration for the feature-to-Mocha pipeline.  All settings use
Pydantic v2 models so they are validated at construction time and can be
serialised to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class MochaConfig(BaseModel):
    """Settings written into the generated ``.mocharc.json``."""

    timeout: int = Field(default=2000, ge=0, description="Per-test timeout in milliseconds")
    reporter: str = Field(default="spec", description="Mocha reporter name")


class Config(BaseModel):
    """Global bddgen configuration.

    Created once by the CLI entry point (or by ``from_env``) and passed to
    ``Pipeline``.
    """

    output_dir: Path = Field(default=Path("./generated-tests"))
    test_suffix: str = Field(default=".test.js", description="Suffix of generated test files")
    data_indent: int = Field(default=6, ge=0, description="JSON indent of emitted data literals")
    write_mocharc: bool = Field(default=True, description="Render .mocharc.json next to the tests")
    dump_model: bool = Field(default=False, description="Also write the parsed model as JSON")
    mocha: MochaConfig = Field(default_factory=MochaConfig)

    @field_validator("test_suffix")
    @classmethod
    def _suffix_is_javascript(cls, value: str) -> str:
        if not value.endswith(".js"):
            raise ValueError(f"test_suffix must end with '.js', got {value!r}")
        return value

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def mocharc_path(self) -> Path:
        """Path to the generated Mocha runner config."""
        return self.output_dir / ".mocharc.json"

    def test_path_for(self, stem: str) -> Path:
        """Path of the test file for a stem from ``unique_file_stems``."""
        return self.output_dir / f"{stem}{self.test_suffix}"

    def model_path_for(self, stem: str) -> Path:
        """Path of the JSON model dump for a stem from ``unique_file_stems``."""
        return self.output_dir / f"{stem}.feature.json"

    def render_context(self) -> dict[str, Any]:
        """Options handed to ``MochaGenerator.generate``."""
        return {
            "test_suffix": self.test_suffix,
            "data_indent": self.data_indent,
            "write_mocharc": self.write_mocharc,
            "timeout": self.mocha.timeout,
            "reporter": self.mocha.reporter,
        }

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/bddgen.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_dir / "bddgen.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BDDGEN_OUTPUT_DIR, BDDGEN_TEST_SUFFIX, BDDGEN_DATA_INDENT,
            BDDGEN_WRITE_MOCHARC, BDDGEN_DUMP_MODEL, BDDGEN_MOCHA_TIMEOUT,
            BDDGEN_MOCHA_REPORTER.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("BDDGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["BDDGEN_OUTPUT_DIR"])
        if os.environ.get("BDDGEN_TEST_SUFFIX"):
            kwargs["test_suffix"] = os.environ["BDDGEN_TEST_SUFFIX"]
        if os.environ.get("BDDGEN_DATA_INDENT"):
            kwargs["data_indent"] = int(os.environ["BDDGEN_DATA_INDENT"])
        if os.environ.get("BDDGEN_WRITE_MOCHARC"):
            kwargs["write_mocharc"] = _env_flag(os.environ["BDDGEN_WRITE_MOCHARC"])
        if os.environ.get("BDDGEN_DUMP_MODEL"):
            kwargs["dump_model"] = _env_flag(os.environ["BDDGEN_DUMP_MODEL"])

        mocha_kwargs: dict[str, Any] = {}
        if os.environ.get("BDDGEN_MOCHA_TIMEOUT"):
            mocha_kwargs["timeout"] = int(os.environ["BDDGEN_MOCHA_TIMEOUT"])
        if os.environ.get("BDDGEN_MOCHA_REPORTER"):
            mocha_kwargs["reporter"] = os.environ["BDDGEN_MOCHA_REPORTER"]

        return cls(mocha=MochaConfig(**mocha_kwargs), **kwargs)

    def ensure_directories(self) -> None:
        """Create the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
