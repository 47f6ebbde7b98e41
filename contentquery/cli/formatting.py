"""Output formatting utilities for CLI with Rich integration."""

import json
from io import StringIO
from typing import Any, Dict, List, Optional, Union

from rich.console import Console
from rich.table import Table

# Columns shown first when present, in this order
PREFERRED_COLUMNS = ["slug", "title", "description", "dir", "path"]

MAX_CELL_WIDTH = 40
EMPTY_SLOT = "—"

Result = Union[Dict[str, Any], List[Optional[Dict[str, Any]]]]


def _as_rows(result: Result) -> List[Optional[Dict[str, Any]]]:
    if isinstance(result, dict):
        return [result]
    return list(result)


def _columns(rows: List[Optional[Dict[str, Any]]]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in rows:
        if row:
            seen.update(dict.fromkeys(row))
    preferred = [column for column in PREFERRED_COLUMNS if column in seen]
    return preferred + [column for column in seen if column not in preferred]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        text = json.dumps(value, default=str)
    else:
        text = str(value)
    if len(text) > MAX_CELL_WIDTH:
        text = text[:MAX_CELL_WIDTH - 1] + "…"
    return text


def format_documents_json(result: Result) -> str:
    """Format fetched documents as JSON.

    Args:
        result: A document list (window slots may be None) or a single document

    Returns:
        JSON string representation
    """
    return json.dumps(result, indent=2, default=str, ensure_ascii=False)


def format_documents_table(result: Result, title: str = "Documents") -> str:
    """Format fetched documents as a rich ASCII table.

    Args:
        result: A document list (window slots may be None) or a single document
        title: Table title

    Returns:
        Formatted table string
    """
    rows = _as_rows(result)
    if not rows:
        return "No documents found"

    columns = _columns(rows)
    if not columns:
        return "No documents found"

    table = Table(title=title, show_header=True, header_style="bold magenta")
    for column in columns:
        style = "cyan" if column == "slug" else None
        table.add_column(column, style=style, overflow="fold")

    for row in rows:
        if row is None:
            table.add_row(*([EMPTY_SLOT] * len(columns)), style="dim")
        else:
            table.add_row(*(_cell(row.get(column)) for column in columns))

    # Render to string using StringIO
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=True, width=120)
    console.print(table)
    return buffer.getvalue().rstrip()


def format_documents(result: Result, format: str = "table") -> str:
    """Format fetched documents in the specified format ('table' or 'json')."""
    if format == "json":
        return format_documents_json(result)
    else:
        return format_documents_table(result)
