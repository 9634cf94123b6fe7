"""
Unit tests for PromptLoader.

Tests front matter handling, rendering and the packaged templates.
"""

import pytest
from jinja2 import UndefinedError

from querybot.prompts.loader import PromptLoader


class TestPromptLoader:
    """Test PromptLoader against a temporary prompts directory."""

    @pytest.fixture
    def loader(self, tmp_path):
        prompt_dir = tmp_path / "agents"
        prompt_dir.mkdir()
        (prompt_dir / "greeting.md").write_text(
            "---\nname: greeting\nversion: 2\nvariables: [name]\n---\nHello {{ name }}!\n",
            encoding="utf-8",
        )
        (prompt_dir / "plain.md").write_text("Hi {{ who }}", encoding="utf-8")
        return PromptLoader(tmp_path)

    def test_render_substitutes_variables(self, loader):
        assert loader.render("agents/greeting.md", name="Ada") == "Hello Ada!"

    def test_front_matter_is_not_rendered(self, loader):
        assert "version" not in loader.render("agents/greeting.md", name="Ada")

    def test_metadata(self, loader):
        assert loader.metadata("agents/greeting.md") == {
            "name": "greeting",
            "version": 2,
            "variables": ["name"],
        }

    def test_undeclared_variable_is_rejected(self, loader):
        with pytest.raises(ValueError, match="greeting.md does not declare variables: \\['nmae'\\]"):
            loader.render("agents/greeting.md", name="Ada", nmae="Ada")

    def test_template_without_front_matter_accepts_any_variables(self, loader):
        assert loader.metadata("agents/plain.md") == {}
        assert loader.render("agents/plain.md", who="Ada", extra=1) == "Hi Ada"

    def test_missing_variable_raises(self, loader):
        with pytest.raises(UndefinedError):
            loader.render("agents/greeting.md")

    def test_missing_prompt_raises(self, loader):
        with pytest.raises(FileNotFoundError):
            loader.render("agents/missing.md")
        with pytest.raises(FileNotFoundError):
            loader.metadata("agents/missing.md")


class TestPackagedTemplates:
    """Test the templates shipped with the package."""

    @pytest.fixture
    def loader(self):
        return PromptLoader()

    def test_correction_prompt(self, loader):
        prompt = loader.render(
            "agents/sql_correction.md",
            query="SELECT nme FROM users",
            error='column "nme" does not exist',
        )

        assert prompt == (
            "There was an error running the following query:\n"
            "SELECT nme FROM users\n"
            'The error message is: column "nme" does not exist\n'
            "Please correct it and send it again."
        )

    def test_question_prompt(self, loader):
        prompt = loader.render("datasource/question.md", dialect="PostgreSQL", question="top users")

        assert prompt.startswith("Write one PostgreSQL SELECT query")
        assert prompt.endswith("Question: top users")

    @pytest.mark.parametrize(
        "prompt_path",
        ["agents/sql_correction.md", "datasource/context.md", "datasource/question.md"],
    )
    def test_templates_declare_metadata(self, loader, prompt_path):
        metadata = loader.metadata(prompt_path)
        assert metadata["name"]
        assert metadata["variables"]
