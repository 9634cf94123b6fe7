"""Result rendering for chat display."""

from querybot.rendering.table import (
    MAX_OUTPUT_LENGTH,
    Column,
    RenderedResult,
    TableRenderer,
    render,
)

__all__ = ["Column", "MAX_OUTPUT_LENGTH", "RenderedResult", "TableRenderer", "render"]
