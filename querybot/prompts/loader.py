"""Prompt loading and rendering utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _split_front_matter(source: str) -> tuple[str, str | None]:
    if source.startswith("---"):
        parts = source.split("---", 2)
        if len(parts) == 3:
            return parts[2].lstrip(), parts[1]
    return source, None


class FrontMatterLoader(FileSystemLoader):
    """Jinja2 loader that strips YAML front matter."""

    def get_source(self, environment: Environment, template: str):  # type: ignore[override]
        source, filename, uptodate = super().get_source(environment, template)
        body, _ = _split_front_matter(source)
        return body, filename, uptodate


class PromptLoader:
    """
    Render Markdown prompt templates.

    A template may declare ``variables: [...]`` in its front matter; render
    calls passing any other name are rejected.
    """

    def __init__(self, prompts_dir: str | Path | None = None) -> None:
        self.prompts_dir = Path(prompts_dir) if prompts_dir else TEMPLATES_DIR
        self._metadata: dict[str, dict[str, Any]] = {}
        self._env = Environment(
            loader=FrontMatterLoader(str(self.prompts_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

    def metadata(self, prompt_path: str) -> dict[str, Any]:
        """Front matter of a prompt, parsed once and cached."""
        if prompt_path not in self._metadata:
            file_path = self.prompts_dir / prompt_path
            if not file_path.exists():
                raise FileNotFoundError(f"Prompt not found: {file_path}")
            _, front_matter = _split_front_matter(file_path.read_text(encoding="utf-8"))
            self._metadata[prompt_path] = (
                (yaml.safe_load(front_matter) or {}) if front_matter else {}
            )
        return self._metadata[prompt_path]

    def render(self, prompt_path: str, **variables: Any) -> str:
        """
        Substitute variables into a prompt using Jinja2.

        Example:
            prompt = loader.render(
                "agents/sql_correction.md",
                query=failed_sql,
                error=error_message,
            )

        Raises:
            FileNotFoundError: If the prompt does not exist
            ValueError: If a variable is not declared in the front matter
            jinja2.UndefinedError: If the template uses a variable not passed
        """
        declared = self.metadata(prompt_path).get("variables")
        if declared is not None:
            unknown = sorted(set(variables) - set(declared))
            if unknown:
                raise ValueError(f"{prompt_path} does not declare variables: {unknown}")

        try:
            template = self._env.get_template(prompt_path)
        except TemplateNotFound as exc:
            raise FileNotFoundError(f"Prompt not found: {prompt_path}") from exc
        return template.render(**variables).strip()
