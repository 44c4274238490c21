import os
import json
from typing import List, Any
from rich.console import Console
from rich.table import Table

# Environment variable controlling CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode
    # Invalid values are ignored; the current default stays


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _status(book: Any) -> str:
    if getattr(book, "available", True):
        return "available"
    borrower = getattr(book, "borrowed_by", None)
    return f"borrowed by {borrower}" if borrower else "borrowed"


def print_list_result(books: List[Any]) -> None:
    """Print books in the current output mode.
    - plain: 'ISBN - Title by Author [status]' lines, or 'No books in library.'
    - json: JSON array of book records
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Status", style="green")
        for b in books:
            table.add_row(b.isbn, b.title, b.author, _status(b))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.isbn} - {b.title} by {b.author} [{_status(b)}]")
