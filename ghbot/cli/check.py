"""CLI command inspecting a local .travis.yml."""

import difflib
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..ci.travis import (
    TravisConfigError,
    check_valid_go_version,
    contains_import,
    fix_import_path,
    parse_travis_config,
    parse_version_tolerant,
)
from ..config import NEW_IMPORT_PATH, OLD_IMPORT_PATH
from .options import MIN_GO_VERSION_OPTION

console = Console()


def check(
    path: Path = typer.Argument(..., help="Path to a .travis.yml file"),
    min_go_version: str = MIN_GO_VERSION_OPTION,
    show_diff: bool = typer.Option(
        True, "--show-diff/--no-show-diff", help="Print the rewrite as a diff"
    ),
) -> None:
    """Check whether a local .travis.yml would get a pull request.

    Examples:
        ghbot check .travis.yml
        ghbot check ci/.travis.yml --min-go-version 1.11 --no-show-diff
    """
    if not path.is_file():
        console.print(f"❌ Error: {path} is not a file")
        raise typer.Exit(1)

    try:
        parse_version_tolerant(min_go_version)
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.print(f"❌ Error: Cannot read {path} as UTF-8: {e}")
        raise typer.Exit(1)

    try:
        config = parse_travis_config(content)
    except TravisConfigError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    uses_old_import = contains_import(content, OLD_IMPORT_PATH)
    versions_ok = check_valid_go_version(content, min_go_version)
    qualifies = uses_old_import and versions_ok

    table = Table(title=f"Check: {path}")
    table.add_column("Check", style="cyan")
    table.add_column("Result", style="green")
    table.add_row("Go versions", ", ".join(config.go_versions) or "(default)")
    table.add_row(f"Uses {OLD_IMPORT_PATH}", "yes" if uses_old_import else "no")
    table.add_row(f"All Go versions >= {min_go_version}", "yes" if versions_ok else "no")
    table.add_row("Qualifies", "✅ yes" if qualifies else "❌ no")
    console.print(table)

    if qualifies and show_diff:
        fixed = fix_import_path(content, OLD_IMPORT_PATH, NEW_IMPORT_PATH)
        diff = difflib.unified_diff(
            content.splitlines(keepends=True),
            fixed.splitlines(keepends=True),
            fromfile=f"a/{path.name}",
            tofile=f"b/{path.name}",
        )
        console.print("".join(diff), markup=False, highlight=False)
