"""
Console rendering of package size reports
"""
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from package_info import CSV_HEADER, PackageInfo


def build_table(infos: Iterable[PackageInfo]) -> Table:
    name_header, bytes_header, pretty_header = CSV_HEADER
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column(name_header, overflow="fold")
    table.add_column(bytes_header, justify="right", no_wrap=True, min_width=len(bytes_header))
    table.add_column(pretty_header, justify="right", no_wrap=True, min_width=len(pretty_header))
    for info in infos:
        table.add_row(*info.as_row())
    return table


def print_table(infos: Iterable[PackageInfo], console: Optional[Console] = None) -> None:
    """Render package sizes as a table on stdout (or the given console)."""
    console = console or Console()
    console.print(build_table(infos))
