"""sprout new - Create a new project from a template."""

from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from tqdm import tqdm

from sprout.config import SproutConfig, load_config
from sprout.core.errors import TargetExists, TemplateError
from sprout.core.expander import expand
from sprout.core.registry import TemplateRegistry
from sprout.core.store import ChainStore
from sprout.ui.session import ChainDriver
from sprout.ui.theme import THEME

console = Console(theme=THEME)


def parse_variables(ctx, param, values: Tuple[str, ...]) -> Dict[str, str]:
    """Turn repeated KEY=VALUE options into a dict."""
    variables = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}")
        variables[key.strip()] = value
    return variables


def resolve_template(registry: TemplateRegistry, template: str) -> Optional[Path]:
    """Look a template up by category/name, or accept a directory path."""
    found = registry.find_template(template)
    if found is not None:
        return found
    path = Path(template).expanduser()
    return path if path.is_dir() else None


@click.command()
@click.argument("template")
@click.argument("target", required=False, type=click.Path(path_type=Path))
@click.option(
    "--set",
    "-s",
    "variables",
    multiple=True,
    callback=parse_variables,
    metavar="KEY=VALUE",
    help="Template variable (repeatable)",
)
@click.option(
    "--no-input",
    is_flag=True,
    help="Accept every snippet with its defaults",
)
@click.pass_obj
def new_cmd(
    config: Optional[SproutConfig],
    template: str,
    target: Optional[Path],
    variables: Dict[str, str],
    no_input: bool,
):
    """Create a new project from TEMPLATE.

    TEMPLATE is "category/name" (see `sprout list`) or a template directory.
    TARGET defaults to the category's workspace directory plus the
    template name.

    \b
    Interactive snippets are then shown one at a time:
      c  commit     write the file and move on
      d  defer      come back to it after the others
      e  edit       open it in $EDITOR
      f  fields     fill in the fields again
      q  quit       save the rest for `sprout resume`
    """
    config = config or load_config()
    registry = TemplateRegistry(config.roots)

    template_dir = resolve_template(registry, template)
    if template_dir is None:
        console.print(f"[red]Error:[/] Template '{template}' not found")
        console.print("  [dim]Run `sprout list` to see available templates[/]")
        raise SystemExit(1)

    if target is None:
        category = template.split("/")[0] if "/" in template else ""
        default = config.default_target(category, template_dir.name)
        if no_input:
            target = default
        else:
            target = click.prompt("Target directory", default=str(default), type=click.Path(path_type=Path))
    target = Path(target).expanduser()

    console.print(Panel.fit(
        f"[bold blue]sprout new[/] - [cyan]{template_dir.name}[/] → [cyan]{target}[/]",
        border_style="blue"
    ))

    try:
        with tqdm(desc="Copying", unit="file", leave=False) as pbar:
            expansion = expand(
                template_dir,
                target,
                variables=variables,
                registry=registry,
                on_file=lambda rel, kind: pbar.update(1),
            )
    except TargetExists:
        console.print(f"[red]Error:[/] Target already exists: {target}")
        raise SystemExit(1)
    except TemplateError as e:
        console.print(f"[red]Template error:[/] {e}")
        raise SystemExit(1)

    console.print(
        f"  [dim]{len(expansion.copied)} copied, {len(expansion.rendered)} rendered, "
        f"{len(expansion.chain)} to fill in[/]"
    )

    if expansion.chain.finalized:
        console.print(f"\n[green]✓[/] Project created at [cyan]{target}[/]")
        return

    driver = ChainDriver(
        expansion,
        console=console,
        store=ChainStore(config.state_path),
        editor=config.editor,
        interactive=not no_input,
    )
    try:
        driver.run()
    except TemplateError as e:
        console.print(f"[red]Template error:[/] {e}")
        raise SystemExit(1)
