"""Prompt templates and loader."""

from querybot.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]
