"""sprout list - Show available templates."""

from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from sprout.config import SproutConfig, load_config
from sprout.core.registry import TemplateRegistry
from sprout.ui.theme import THEME

console = Console(theme=THEME)


@click.command()
@click.option("--paths", is_flag=True, help="Show where each template lives")
@click.pass_obj
def list_cmd(config: Optional[SproutConfig], paths: bool):
    """List templates found in the configured search roots."""
    config = config or load_config()
    registry = TemplateRegistry(config.roots)
    catalog = registry.list_templates()

    if not any(catalog.values()):
        console.print("[yellow]No templates found.[/]")
        console.print("\n[bold]Searched:[/]")
        for root in registry.search_roots:
            console.print(f"  [dim]{root}[/]")
        return

    table = Table(title="Available Templates")
    table.add_column("Template", style="cyan")
    if paths:
        table.add_column("Path", style="dim")

    for category, entries in catalog.items():
        for name, path in entries:
            row = [f"{category}/{name}"]
            if paths:
                row.append(str(path))
            table.add_row(*row)

    console.print(table)
    console.print("\n[bold]Usage:[/]")
    console.print("  sprout new <category>/<name> [target]")
