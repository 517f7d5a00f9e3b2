"""bddgen pipeline orchestrator.

Runs the two steps that turn feature files into Mocha test skeletons:

Step 1: PARSE    -- Read every ``.feature`` file and build its ``Feature`` model.
Step 2: GENERATE -- Write ``<feature>.test.js`` files and ``.mocharc.json``.

Usage::

    python -m bddgen.pipeline features/ --output ./test
    python -m bddgen.pipeline features/login.feature --stdout
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.panel import Panel
from rich.syntax import Syntax

from bddgen.config import Config
from bddgen.parser import Feature, parse_feature_file
from bddgen.scaffolder import MochaGenerator, TemplateRenderer
from bddgen.utils import (
    console,
    feature_file_stem,
    find_feature_files,
    format_duration,
    print_error,
    print_header,
    print_success,
    print_summary_table,
    print_warning,
    save_json,
    unique_file_stems,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Raised when a feature file cannot be turned into a model."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Parses feature files and writes Mocha skeletons for them.

    Each file is parsed independently, so one unreadable file does not stop
    the others from being generated.

    Attributes:
        config: Pipeline configuration.
        generator: Writer for test files and runner config.
        state: Result dictionary filled in by ``run``.
    """

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.generator = MochaGenerator(renderer or TemplateRenderer())
        self.state: dict[str, Any] = {
            "features": [],
            "written": [],
            "errors": [],
            "success": False,
        }

    async def run(self, paths: Sequence[str | Path], *, echo: bool = False) -> dict[str, Any]:
        """Parse *paths* (files or directories) and generate tests.

        Args:
            paths: Feature files, or directories searched for ``*.feature``.
            echo: Also print each generated test file to the console.

        Returns:
            The state dictionary with ``features``, ``written``, ``errors``
            and a top-level ``success`` boolean.
        """
        started = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]bddgen[/bold bright_cyan]\n"
                f"Inputs : {', '.join(str(p) for p in paths)}\n"
                f"Output : {self.config.output_dir.resolve()}",
                title="[bold]Feature -> Mocha[/bold]",
                border_style="bright_cyan",
            )
        )

        files = find_feature_files(paths)
        if not files:
            print_warning("No feature files found.")
            return self.state

        print_header("Step 1: PARSE")
        features = await self.parse_all(files)

        if features:
            print_header("Step 2: GENERATE", color="bright_green")
            await self.generate_all(features, echo=echo)
        else:
            print_warning("Nothing to generate.")

        self.state["success"] = bool(features) and not self.state["errors"]
        self.state["duration"] = format_duration(time.monotonic() - started)
        print_summary_table(
            {
                "Feature files": str(len(files)),
                "Parsed": str(len(features)),
                "Files written": str(len(self.state["written"])),
                "Errors": str(len(self.state["errors"])),
                "Duration": self.state["duration"],
            },
            title="bddgen",
        )
        return self.state

    async def parse_all(self, files: Sequence[Path]) -> list[Feature]:
        """Parse every file concurrently; failures are recorded, not raised."""
        results = await asyncio.gather(
            *(self._parse_one(path) for path in files), return_exceptions=True
        )
        features: list[Feature] = []
        for path, result in zip(files, results):
            if isinstance(result, PipelineError):
                self.state["errors"].append(str(result))
                print_error(f"  {result}")
            elif isinstance(result, BaseException):
                raise result
            else:
                features.append(result)
                self.state["features"].append(result.name)
                console.print(
                    f"  [green]+[/green] {path}: [bold]{result.name or '(unnamed)'}[/bold] "
                    f"({len(result.scenarios)} scenario(s))"
                )
        return features

    async def generate_all(self, features: list[Feature], *, echo: bool = False) -> list[Path]:
        """Write test files (and optional model dumps) for *features*."""
        self.config.ensure_directories()
        stems = unique_file_stems(feature.name for feature in features)
        for feature, stem in zip(features, stems):
            if stem != feature_file_stem(feature.name):
                print_warning(
                    f"  Duplicate output name for '{feature.name or '(unnamed)'}', writing as '{stem}'"
                )

        written = await self.generator.generate(
            self.config.output_dir, features, self.config.render_context()
        )

        if self.config.dump_model:
            for feature, stem in zip(features, stems):
                target = self.config.model_path_for(stem)
                await save_json(feature.model_dump(mode="json"), target)
                written.append(target)

        for path in written:
            console.print(f"  [green]+[/green] {path}")
        self.state["written"].extend(str(p) for p in written)

        if echo:
            for path, code in self.generator.rendered.items():
                print_header(path.name, color="bright_blue")
                console.print(Syntax(code, "javascript", line_numbers=False))

        print_success(f"Generated tests for {len(features)} feature(s)")
        return written

    async def _parse_one(self, path: Path) -> Feature:
        try:
            return await parse_feature_file(path)
        except (FileNotFoundError, ValueError, UnicodeDecodeError) as exc:
            raise PipelineError(path, str(exc)) from exc


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="bddgen -- generate Mocha test skeletons from Gherkin feature files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m bddgen.pipeline features/\n"
            "  python -m bddgen.pipeline login.feature -o ./test --dump-model\n"
            "  python -m bddgen.pipeline login.feature --stdout\n"
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Feature files or directories containing *.feature files",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: $BDDGEN_OUTPUT_DIR or ./generated-tests)",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help="Suffix of generated test files (default: .test.js)",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="JSON indent of generated data literals (default: 6)",
    )
    parser.add_argument(
        "--no-mocharc",
        action="store_true",
        help="Do not write .mocharc.json",
    )
    parser.add_argument(
        "--dump-model",
        action="store_true",
        help="Also write the parsed model of each feature as JSON",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print generated tests to the console",
    )

    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.output:
        overrides["output_dir"] = Path(args.output)
    if args.suffix:
        overrides["test_suffix"] = args.suffix
    if args.indent is not None:
        overrides["data_indent"] = args.indent
    if args.no_mocharc:
        overrides["write_mocharc"] = False
    if args.dump_model:
        overrides["dump_model"] = True

    try:
        config = Config.from_env()
        config = Config.model_validate({**config.model_dump(), **overrides})
    except (ValidationError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {exc}")
        sys.exit(1)

    pipeline = Pipeline(config)
    result = asyncio.run(pipeline.run(args.paths, echo=args.stdout))

    if result.get("success"):
        console.print("[bold green]Done.[/bold green]")
    else:
        console.print("[bold red]Generation failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
