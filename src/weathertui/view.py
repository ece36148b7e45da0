# render(view_state) -> str
# a pure function of the ViewState; tables are laid out with rich and
# captured as plain text so curses can draw them line by line

from __future__ import annotations
from rich import box
from rich.console import Console
from rich.table import Table
from .models import Loading, PromptingForCity, ShowingTable, ViewState

HELP_LINE = "Press ctrl+c to quit, ctrl+r to refresh, ctrl+i to change city"
SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")
CURSOR_MARK = ">"
DEFAULT_WIDTH = 80
TABLE_HEIGHT = 9  # table rows visible at once
TABLE_CHROME = 9  # lines around the rows: title, borders, header, help
PLACEHOLDER = "Enter city name"

def visible_rows(count: int, cursor: int, height: int) -> range:
    # the window scrolls just far enough to keep the cursor row in it
    height = max(height, 1)
    start = min(max(cursor - height + 1, 0), max(count - height, 0))
    return range(start, min(start + height, count))

def _render_table(view: ShowingTable, width: int, height: int) -> str:
    table = Table(box=box.SQUARE, show_edge=True, header_style="", expand=False)
    table.add_column("", width=1, no_wrap=True)
    table.add_column("Time", width=10, no_wrap=True)
    table.add_column("Temperature", width=15, no_wrap=True)
    table.add_column("Humidity", width=10, no_wrap=True)
    for i in visible_rows(len(view.rows), view.cursor, height):
        row = view.rows[i]
        mark = CURSOR_MARK if i == view.cursor else ""
        table.add_row(mark, row.time, row.temperature, row.humidity)

    # color_system=None strips every style, only the characters are kept
    console = Console(width=width, color_system=None, force_terminal=False, highlight=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get().rstrip("\n")

def render(view: ViewState, width: int = DEFAULT_WIDTH, table_height: int = TABLE_HEIGHT) -> str:
    if isinstance(view, Loading):
        spinner = SPINNER_FRAMES[view.frame % len(SPINNER_FRAMES)]
        body = f"\n\n   {spinner} Loading weather data..."
        if not view.waiting:
            body += "\n\n   Could not load weather data, press ctrl+r to retry."
    elif isinstance(view, PromptingForCity):
        body = f"Enter a city to see weather info:\n\n> {view.buffer or PLACEHOLDER}\n"
    elif isinstance(view, ShowingTable):
        body = f"\nShowing weather data for {view.city}\n" + _render_table(view, width, table_height)
    else:
        raise TypeError(f"unknown view state: {view!r}")
    return f"{body}\n\n\n{HELP_LINE}"
