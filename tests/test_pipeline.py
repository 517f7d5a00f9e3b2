"""Tests for the bddgen pipeline orchestrator and CLI.

Covers:
- PipelineError formatting
- Pipeline.run over files and directories
- Per-file error isolation
- Model dumps and console echo
- main() argument handling and exit codes
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from bddgen.config import Config
from bddgen.parser import parse_text
from bddgen.pipeline import Pipeline, PipelineError, main
from bddgen.scaffolder import generate_mocha_tests


_ENV_VARS = (
    "BDDGEN_OUTPUT_DIR",
    "BDDGEN_TEST_SUFFIX",
    "BDDGEN_DATA_INDENT",
    "BDDGEN_WRITE_MOCHARC",
    "BDDGEN_DUMP_MODEL",
    "BDDGEN_MOCHA_TIMEOUT",
    "BDDGEN_MOCHA_REPORTER",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every BDDGEN_* variable for the duration of a test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# PipelineError
# ---------------------------------------------------------------------------


class TestPipelineError:
    @pytest.mark.unit
    def test_message_includes_path(self):
        err = PipelineError("features/a.feature", "boom")
        assert err.path == Path("features/a.feature")
        assert str(err) == f"{Path('features/a.feature')}: boom"


# ---------------------------------------------------------------------------
# Pipeline.run
# ---------------------------------------------------------------------------


class TestPipelineRun:
    @pytest.mark.unit
    async def test_directory_of_features(self, config, fixtures_dir, tmp_output_dir):
        result = await Pipeline(config).run([fixtures_dir])
        assert result["success"] is True
        assert result["errors"] == []
        assert sorted(result["features"]) == ["Login Attempts", "User Login"]
        assert (tmp_output_dir / "user-login.test.js").exists()
        assert (tmp_output_dir / "login-attempts.test.js").exists()
        assert (tmp_output_dir / ".mocharc.json").exists()
        assert len(result["written"]) == 3

    @pytest.mark.unit
    async def test_written_file_matches_generator(self, config, login_feature_path, tmp_output_dir):
        await Pipeline(config).run([login_feature_path])
        expected = generate_mocha_tests(parse_text(login_feature_path.read_text(encoding="utf-8")))
        written = (tmp_output_dir / "user-login.test.js").read_text(encoding="utf-8")
        assert written == expected + "\n"

    @pytest.mark.unit
    async def test_missing_file_is_reported_not_raised(self, config, login_feature_path, tmp_path, tmp_output_dir):
        missing = tmp_path / "missing.feature"
        result = await Pipeline(config).run([missing, login_feature_path])
        assert result["success"] is False
        assert len(result["errors"]) == 1
        assert "missing.feature" in result["errors"][0]
        assert result["features"] == ["User Login"]
        assert (tmp_output_dir / "user-login.test.js").exists()

    @pytest.mark.unit
    async def test_wrong_suffix_is_reported(self, config, tmp_path):
        notes = tmp_path / "notes.md"
        notes.write_text("Feature: Nope", encoding="utf-8")
        result = await Pipeline(config).run([notes])
        assert result["success"] is False
        assert "Expected a .feature file" in result["errors"][0]
        assert result["written"] == []

    @pytest.mark.unit
    async def test_no_feature_files(self, config, tmp_path, tmp_output_dir):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = await Pipeline(config).run([empty])
        assert result["success"] is False
        assert result["written"] == []
        assert not tmp_output_dir.exists()

    @pytest.mark.unit
    async def test_dump_model(self, tmp_output_dir, login_feature_path, login_feature):
        config = Config(output_dir=tmp_output_dir, dump_model=True, write_mocharc=False)
        result = await Pipeline(config).run([login_feature_path])
        dump = tmp_output_dir / "user-login.feature.json"
        assert str(dump) in result["written"]
        data = json.loads(dump.read_text(encoding="utf-8"))
        assert data["name"] == "User Login"
        assert data["scenarios"][0]["tags"] == ["@smoke"]
        assert data["scenarios"][0]["kind"] == "scenario"

    @pytest.mark.unit
    async def test_echo_prints_generated_code(self, config, login_feature_path):
        result = await Pipeline(config).run([login_feature_path], echo=True)
        assert result["success"] is True

    @pytest.mark.unit
    async def test_same_feature_name_in_two_files_keeps_both(self, tmp_path, tmp_output_dir):
        inputs = tmp_path / "inputs"
        inputs.mkdir()
        (inputs / "a.feature").write_text("Feature: Login\nScenario: from A\n", encoding="utf-8")
        (inputs / "b.feature").write_text("Feature: Login\nScenario: from B\n", encoding="utf-8")
        config = Config(output_dir=tmp_output_dir, dump_model=True, write_mocharc=False)

        result = await Pipeline(config).run([inputs])

        assert result["success"] is True
        assert len(result["written"]) == len(set(result["written"])) == 4
        assert "from A" in (tmp_output_dir / "login.test.js").read_text(encoding="utf-8")
        assert "from B" in (tmp_output_dir / "login-2.test.js").read_text(encoding="utf-8")
        dump = json.loads((tmp_output_dir / "login-2.feature.json").read_text(encoding="utf-8"))
        assert dump["scenarios"][0]["name"] == "from B"

    @pytest.mark.unit
    async def test_echo_reuses_written_content(self, config, login_feature_path, tmp_output_dir):
        pipeline = Pipeline(config)
        with patch(
            "bddgen.scaffolder.mocha_gen.generate_mocha_tests", wraps=generate_mocha_tests
        ) as build:
            await pipeline.run([login_feature_path], echo=True)
        assert build.call_count == 1
        written = (tmp_output_dir / "user-login.test.js").read_text(encoding="utf-8")
        assert pipeline.generator.rendered == {tmp_output_dir / "user-login.test.js": written[:-1]}

    @pytest.mark.unit
    async def test_same_file_twice_is_parsed_once(self, config, login_feature_path):
        result = await Pipeline(config).run([login_feature_path, login_feature_path])
        assert result["features"] == ["User Login"]


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.mark.integration
    def test_generates_into_output_dir(self, clean_env, fixtures_dir, tmp_output_dir):
        main([str(fixtures_dir), "-o", str(tmp_output_dir)])
        assert (tmp_output_dir / "user-login.test.js").exists()
        assert (tmp_output_dir / ".mocharc.json").exists()

    @pytest.mark.integration
    def test_cli_options(self, clean_env, login_feature_path, tmp_output_dir):
        main([
            str(login_feature_path),
            "--output", str(tmp_output_dir),
            "--suffix", ".spec.js",
            "--indent", "2",
            "--no-mocharc",
            "--dump-model",
        ])
        assert (tmp_output_dir / "user-login.spec.js").exists()
        assert (tmp_output_dir / "user-login.feature.json").exists()
        assert not (tmp_output_dir / ".mocharc.json").exists()

    @pytest.mark.integration
    def test_env_supplies_defaults(self, clean_env, monkeypatch, login_feature_path, tmp_output_dir):
        monkeypatch.setenv("BDDGEN_OUTPUT_DIR", str(tmp_output_dir))
        main([str(login_feature_path)])
        assert (tmp_output_dir / "user-login.test.js").exists()

    @pytest.mark.integration
    def test_invalid_suffix_exits(self, clean_env, login_feature_path, tmp_output_dir):
        with pytest.raises(SystemExit) as exc_info:
            main([str(login_feature_path), "-o", str(tmp_output_dir), "--suffix", ".ts"])
        assert exc_info.value.code == 1

    @pytest.mark.integration
    def test_missing_file_exits(self, clean_env, tmp_path, tmp_output_dir):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.feature"), "-o", str(tmp_output_dir)])
        assert exc_info.value.code == 1
