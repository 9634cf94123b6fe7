"""
Bounded Table Renderer

Turns a row set into a fixed-width text table that never exceeds a character
budget, plus a CSV mirror that always holds every row.

Layout:
    - header titles are left-aligned (right-padded) to the column width
    - a dash divider spans all columns and separators
    - cells are right-aligned (left-padded) to the column width
    - columns are joined by two spaces

Rows are appended in order while the table stays within the budget; the
first row that would cross it and every row after it are left out.
"""

from dataclasses import dataclass
from typing import Any

from querybot.models.agent import Row

MAX_OUTPUT_LENGTH = 2600
COLUMN_SEPARATOR = "  "


@dataclass
class Column:
    width: int
    title: str
    data_index: str
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class RenderedResult:
    table_text: str
    truncated_row_count: int
    csv_text: str

    def to_display(self) -> dict[str, Any]:
        """Display payload without the CSV body."""
        return {
            "table_text": self.table_text,
            "truncated_row_count": self.truncated_row_count,
        }


def stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class TableRenderer:
    """Renders row sets within a fixed character budget."""

    def __init__(self, max_length: int = MAX_OUTPUT_LENGTH):
        self.max_length = max_length

    def build_from_rows(self, rows: list[Row]) -> RenderedResult:
        """Derive columns from the first row's keys and render ``rows``."""
        if not rows:
            return RenderedResult("", 0, "")

        column_names = list(rows[0].keys())
        widths = {name: len(name) for name in column_names}
        for row in rows:
            for name in column_names:
                widths[name] = max(widths[name], len(stringify(row.get(name))))

        columns = [
            Column(width=widths[name], title=name, data_index=name) for name in column_names
        ]
        return self.build(columns, rows)

    def build(self, columns: list[Column], rows: list[Row]) -> RenderedResult:
        """Render ``rows`` with explicit ``columns`` (prefix/suffix honored)."""
        if not rows:
            return RenderedResult("", 0, "")

        head = "\n".join([header_line(columns), divider_line(columns)])
        if len(head) > self.max_length:
            return RenderedResult(head[: self.max_length], len(rows), csv_text(columns, rows))

        lines = [head]
        total_length = len(head)
        included = 0
        for row in rows:
            line = data_line(columns, row)
            # each appended row costs its newline plus its text
            if total_length + len(line) + 1 > self.max_length:
                break
            lines.append(line)
            total_length += len(line) + 1
            included += 1

        return RenderedResult("\n".join(lines), len(rows) - included, csv_text(columns, rows))


def header_line(columns: list[Column]) -> str:
    return COLUMN_SEPARATOR.join(column.title.ljust(column.width) for column in columns)


def divider_line(columns: list[Column]) -> str:
    width = sum(column.width for column in columns) + len(COLUMN_SEPARATOR) * (len(columns) - 1)
    return "-" * width


def data_line(columns: list[Column], row: Row) -> str:
    return COLUMN_SEPARATOR.join(
        f"{column.prefix}{stringify(row.get(column.data_index))}{column.suffix}".rjust(column.width)
        for column in columns
    )


def csv_text(columns: list[Column], rows: list[Row]) -> str:
    """
    Titles and every row, comma-joined without quoting.

    Values that contain commas or line breaks are written as-is, so such
    output does not parse back column for column.
    """
    lines = [",".join(column.title for column in columns)]
    for row in rows:
        lines.append(",".join(stringify(row.get(column.data_index)) for column in columns))
    return "\n".join(lines)


def render(rows: list[Row], max_length: int = MAX_OUTPUT_LENGTH) -> RenderedResult:
    """Shortcut for ``TableRenderer(max_length).build_from_rows(rows)``."""
    return TableRenderer(max_length).build_from_rows(rows)
