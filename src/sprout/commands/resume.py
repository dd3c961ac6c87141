"""sprout resume - Continue a paused snippet chain."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from sprout.config import SproutConfig, load_config
from sprout.core.errors import ChainRecordError, TemplateError
from sprout.core.expander import reopen
from sprout.core.registry import TemplateRegistry
from sprout.core.store import ChainStore
from sprout.ui.session import ChainDriver
from sprout.ui.theme import THEME

console = Console(theme=THEME)


@click.command()
@click.argument("chain_id", required=False)
@click.option("--drop", is_flag=True, help="Forget the chain instead of resuming it")
@click.pass_obj
def resume_cmd(config: Optional[SproutConfig], chain_id: Optional[str], drop: bool):
    """Resume a chain paused with `quit`.

    Without CHAIN_ID, lists the paused chains. Files already written stay
    where they are either way.
    """
    config = config or load_config()
    store = ChainStore(config.state_path)

    if chain_id is None:
        _show_chains(store)
        return

    try:
        record = store.load(chain_id)
    except ChainRecordError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)
    if record is None:
        console.print(f"[red]Error:[/] No paused chain '{chain_id}'")
        raise SystemExit(1)

    if drop:
        store.remove(chain_id)
        console.print(f"[green]✓[/] Dropped chain {chain_id}")
        return

    try:
        expansion = reopen(
            Path(record.template),
            Path(record.target),
            record.chain_items(),
            variables=record.variables,
            metadata=record.metadata,
            registry=TemplateRegistry(config.roots),
        )
        driver = ChainDriver(
            expansion,
            console=console,
            store=store,
            record_id=record.id,
            editor=config.editor,
        )
        driver.run()
    except (TemplateError, ChainRecordError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)


def _show_chains(store: ChainStore) -> None:
    records = store.list()
    if not records:
        console.print("[dim]No paused chains.[/]")
        return

    table = Table(title="Paused Chains")
    table.add_column("ID", style="cyan")
    table.add_column("Target")
    table.add_column("Left", justify="right")
    table.add_column("Paused", style="dim")
    for record in records:
        table.add_row(record.id, record.target, str(len(record.items)), record.updated_at[:19])
    console.print(table)
    console.print("\n  sprout resume <id>")
