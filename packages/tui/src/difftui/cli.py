"""
CLI entry point.

    difftui show  [PATH|-]   print the rendered diff
    difftui stats [PATH|-]   per-file change table
    difftui view  [PATH]     interactive pager
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .components.diff_view import DiffView, DiffViewOptions, DiffViewTheme, default_diff_theme
from .config import APP_NAME, DiffViewSettings, SettingsManager, get_debug_log_path
from .diff_model import Document, total_additions, total_deletions
from .diff_parser import DiffParseError, parse
from .diff_state import collapse_all, total_rows
from .keybindings import DiffKeybindingsManager

app = typer.Typer(
    name=APP_NAME,
    help="Terminal viewer for unified diffs.",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(debug: bool) -> None:
    if not debug:
        return
    path = get_debug_log_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    root = logging.getLogger("difftui")
    if any(getattr(h, "baseFilename", None) == os.path.abspath(path) for h in root.handlers):
        return
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    p = Path(path)
    if not p.is_file():
        console.print(f"[red]File not found: {escape(path)}[/red]")
        raise typer.Exit(1)
    return p.read_text(encoding="utf-8", errors="replace")


def _load_settings(overrides: dict[str, Any]) -> DiffViewSettings:
    manager = SettingsManager.create()
    for err in manager.drain_errors():
        console.print(f"[yellow]Warning: {err['scope']} settings ignored: {escape(err['error'])}[/yellow]")
    manager.apply_overrides(overrides)
    return manager.get()


def _parse(text: str, strict: bool) -> Document:
    try:
        return parse(text, strict=strict)
    except DiffParseError as e:
        console.print(f"[red]Invalid diff: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def build_view(settings: DiffViewSettings, max_visible: int) -> DiffView:
    """Create a DiffView configured from *settings*."""
    theme = default_diff_theme() if settings.theme == "default" else DiffViewTheme()
    options = DiffViewOptions(
        show_line_numbers=settings.show_line_numbers,
        line_number_width=settings.line_number_width,
        show_scrollbar=settings.show_scrollbar,
    )
    keybindings = DiffKeybindingsManager(settings.keybindings) if settings.keybindings else None
    return DiffView(max_visible, theme, options, keybindings)


@app.command()
def show(
    path: Optional[str] = typer.Argument(None, help="Diff file, or - for stdin"),
    width: Optional[int] = typer.Option(None, "--width", "-w", help="Output width in columns"),
    collapsed: bool = typer.Option(False, "--collapsed", help="Only show file headers"),
    no_line_numbers: bool = typer.Option(False, "--no-line-numbers", help="Hide the line number gutter"),
    plain: bool = typer.Option(False, "--plain", help="Disable colours"),
    strict: bool = typer.Option(False, "--strict", help="Fail on malformed diff input"),
    debug: bool = typer.Option(False, "--debug", help="Write a debug log"),
) -> None:
    """Print a diff rendered with the diff view."""
    _setup_logging(debug)
    overrides: dict[str, Any] = {"showScrollbar": False}
    if no_line_numbers:
        overrides["showLineNumbers"] = False
    if plain:
        overrides["theme"] = "plain"
    if strict:
        overrides["strictParse"] = True
    settings = _load_settings(overrides)

    files = _parse(_read_input(path), settings.strict_parse)
    if collapsed:
        collapse_all(files)

    view = build_view(settings, max(1, total_rows(files)))
    view.focused = False
    view.set_files(files)
    for line in view.render(width or console.width):
        typer.echo(line)


@app.command()
def stats(
    path: Optional[str] = typer.Argument(None, help="Diff file, or - for stdin"),
    strict: bool = typer.Option(False, "--strict", help="Fail on malformed diff input"),
    debug: bool = typer.Option(False, "--debug", help="Write a debug log"),
) -> None:
    """Show per-file addition/deletion counts."""
    _setup_logging(debug)
    settings = _load_settings({"strictParse": True} if strict else {})
    files = _parse(_read_input(path), settings.strict_parse)

    if not files:
        console.print("[dim]No changes.[/dim]")
        return

    table = Table(title="Diff statistics")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")

    for f in files:
        table.add_row(escape(f.display_path), f.status, str(f.additions), str(f.deletions))
    table.add_section()
    noun = "file" if len(files) == 1 else "files"
    table.add_row(
        f"{len(files)} {noun}",
        "",
        str(total_additions(files)),
        str(total_deletions(files)),
    )
    console.print(table)


@app.command()
def view(
    path: Optional[str] = typer.Argument(None, help="Diff file, or - for stdin"),
    strict: bool = typer.Option(False, "--strict", help="Fail on malformed diff input"),
    debug: bool = typer.Option(False, "--debug", help="Write a debug log"),
) -> None:
    """Browse a diff interactively (q to quit)."""
    _setup_logging(debug)
    reads_stdin = path is None or path == "-"
    if reads_stdin or not sys.stdin.isatty() or not sys.stdout.isatty():
        logger.debug("Not an interactive terminal, printing instead")
        show(path, strict=strict, debug=False, width=None, collapsed=False,
             no_line_numbers=False, plain=False)
        return

    from .pager import DiffPager
    from .terminal import ProcessTerminal

    settings = _load_settings({"strictParse": True} if strict else {})
    files = _parse(_read_input(path), settings.strict_parse)
    terminal = ProcessTerminal(mouse=settings.mouse)
    diff_view = build_view(settings, terminal.rows - 1)
    diff_view.set_files(files)
    pager = DiffPager(
        terminal,
        diff_view,
        title=f"{APP_NAME}: {path}",
        keybindings=diff_view.keybindings,
    )
    pager.run()


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
