"""Console output shared by CLI commands."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def _print(style: str, msg: str) -> None:
    # Messages carry OS errors like "[Errno 13]" that rich would read as markup
    console.print(escape(msg), style=style)


def error(msg: str) -> None:
    """Print an error message in red."""
    _print("red", msg)


def warning(msg: str) -> None:
    _print("yellow", msg)


def success(msg: str) -> None:
    _print("green", msg)


def dim(msg: str) -> None:
    _print("dim", msg)


def create_table(title: str, columns: list[tuple[str, str | dict]]) -> Table:
    """Build a table from (name, style) or (name, column kwargs) pairs."""
    table = Table(title=title)
    for name, spec in columns:
        kwargs = spec if isinstance(spec, dict) else {"style": spec}
        table.add_column(name, **kwargs)
    return table
