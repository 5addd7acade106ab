"""
Tests for the command-line interface.
"""
import importlib
import json
import logging

import pytest
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_logging(monkeypatch):
    """Bind log handlers to the session streams, not the runner's."""
    from observability.logging import setup_logging

    # the package re-exports main(), shadowing the submodule attribute
    cli_main = importlib.import_module("cli.main")
    setup_logging()
    monkeypatch.setattr(cli_main, "setup_observability", lambda settings=None: None)

    root = logging.getLogger()
    levels = (root.level, [(handler, handler.level) for handler in root.handlers])
    yield
    root.setLevel(levels[0])
    for handler, level in levels[1]:
        handler.setLevel(level)


@pytest.fixture
def offline(monkeypatch, study_config, upstream):
    """Route the CLI's orchestrator through the fake upstream."""
    from study.orchestrator import StudyOrchestrator

    real_create = StudyOrchestrator.create
    monkeypatch.setattr(
        StudyOrchestrator,
        "create",
        classmethod(lambda cls, config=None, **kwargs: real_create(study_config, transport=upstream.transport)),
    )
    return upstream


class TestStudyCommand:
    """Tests for `scripture-study study`."""

    def test_json_output(self, offline, john_3_16_upstream):
        from cli.main import app

        result = runner.invoke(app, ["study", "John 3:16", "--output", "json"])

        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["reference"] == "John 3:16"
        assert set(body["verses"]) == {"kjv", "asv", "web"}
        assert body["sources"]["cross_references"] == "success"

    def test_markdown_output(self, offline, john_3_16_upstream):
        from cli.main import app

        result = runner.invoke(app, ["study", "John 3:16", "-o", "markdown"])

        assert result.exit_code == 0
        assert "John 3:16" in result.output
        assert "Study Questions" in result.output

    def test_table_output(self, offline, john_3_16_upstream):
        from cli.main import app

        result = runner.invoke(app, ["study", "John 3:16"])

        assert result.exit_code == 0
        assert "What is the main theme of John 3:16?" in result.output
        assert "verses:kjv" in result.output

    def test_invalid_reference_exits_1(self, offline):
        from cli.main import app

        result = runner.invoke(app, ["study", "Hezekiah 1:1"])

        assert result.exit_code == 1
        assert "Invalid reference format" in result.output
        assert offline.requests == []

    def test_invalid_reference_json(self, offline):
        from cli.main import app

        result = runner.invoke(app, ["study", "John 3", "-o", "json"])

        assert result.exit_code == 1
        assert json.loads(result.output)["error"].startswith("Invalid reference format.")

    def test_bracketed_text_printed_literally(self, offline):
        from cli.main import app
        from tests.conftest import passage_payload

        offline.passages["kjv"] = passage_payload("John 3:16", "[b]x[/b] [/i]", "kjv")

        result = runner.invoke(app, ["study", "John 3:16"])

        assert result.exit_code == 0
        assert "[b]x[/b] [/i]" in result.output


class TestRenderMarkdown:
    """Tests for render_markdown()."""

    @pytest.mark.asyncio
    async def test_sections(self, orchestrator, john_3_16_upstream):
        from cli.main import render_markdown

        rendered = render_markdown(await orchestrator.study("John 3:16"))

        assert rendered.startswith("# John 3:16")
        assert "**King James Version** (KJV)" in rendered
        assert "## Cross References\n\n- Romans 5:8" in rendered
        assert "8. How does John 3 connect to the gospel message?" in rendered
        assert "- [Bible Hub](https://biblehub.com/john/3-16.htm)" in rendered

    @pytest.mark.asyncio
    async def test_no_verses_note(self, orchestrator, upstream):
        from cli.main import render_markdown

        upstream.fail_everything()
        rendered = render_markdown(await orchestrator.study("Jude 1:3"))

        assert "_No translation could be retrieved._" in rendered
        assert "## Cross References" not in rendered


class TestBooksCommand:
    """Tests for `scripture-study books`."""

    def test_lists_books(self):
        from cli.main import app

        result = runner.invoke(app, ["books"])

        assert result.exit_code == 0
        for name in ("Genesis", "Psalms", "1 Corinthians", "Revelation"):
            assert name in result.output


class TestVerboseOption:
    """Tests for the global --verbose flag."""

    def test_lowers_root_level_to_debug(self):
        from cli.main import app

        logging.getLogger().setLevel(logging.INFO)

        result = runner.invoke(app, ["--verbose", "books"])

        assert result.exit_code == 0
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in root.handlers)

    def test_default_leaves_level_alone(self):
        from cli.main import app

        logging.getLogger().setLevel(logging.INFO)

        result = runner.invoke(app, ["books"])

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.INFO
