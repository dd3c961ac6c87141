"""Interactive driver for a snippet chain.

Shows the focused document, asks for its fields, then lets the user
commit it, defer it, edit it in $EDITOR, or quit. Quitting saves the
rest of the chain so ``sprout resume`` can pick it up.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from sprout.core.chain import DeferredDocument, Document
from sprout.core.errors import TemplateError
from sprout.core.expander import Expansion
from sprout.core.store import ChainRecord, ChainStore
from sprout.ui.theme import THEME, Symbols

ACTIONS = {
    "c": "commit",
    "d": "defer",
    "e": "edit",
    "f": "fields",
    "q": "quit",
}

FINISHED = "finished"
SAVED = "saved"


class ChainDriver:
    """Walks the user through one expansion's snippet chain.

    Args:
        expansion: Expansion whose chain has been started
        console: Console to render to
        store: Where to save the chain on quit; quitting without one
            simply abandons the chain
        record_id: Id of the saved record this chain was resumed from
        editor: Editor command for the edit action
        interactive: If False, every document is committed with its defaults
    """

    def __init__(
        self,
        expansion: Expansion,
        console: Optional[Console] = None,
        store: Optional[ChainStore] = None,
        record_id: Optional[str] = None,
        editor: Optional[str] = None,
        interactive: bool = True,
    ):
        self.expansion = expansion
        self.chain = expansion.chain
        self.console = console or Console(theme=THEME)
        self.store = store
        self.record_id = record_id
        self.editor = editor
        self.interactive = interactive
        self.saved_record: Optional[ChainRecord] = None

    def run(self) -> str:
        """Drive the chain until it is exhausted or the user quits.

        A snippet that fails to render saves the chain, failing entry
        included, before the error propagates.
        """
        try:
            return self._loop()
        except TemplateError:
            self._save()
            raise

    def _loop(self) -> str:
        while self.chain.focused is not None:
            document = self.chain.focused
            if not self.interactive:
                self._commit(document)
                continue

            self._prompt_fields(document)
            self._show(document)
            action = self._ask_action()

            if action == "commit":
                self._commit(document)
            elif action == "defer":
                self.chain.defer()
                self.console.print(
                    f"  [snippet.deferred]{Symbols.DEFERRED}[/] Deferred [path]{self._rel(document)}[/]"
                )
            elif action == "edit":
                self._edit(document)
            elif action == "fields":
                self._prompt_fields(document, force=True)
            elif action == "quit":
                self._save()
                return SAVED

        self._finish()
        return FINISHED

    def _commit(self, document: Document) -> None:
        self.chain.commit_and_advance()
        self.console.print(f"  [snippet.done]{Symbols.DONE}[/] Wrote [path]{self._rel(document)}[/]")

    def _rel(self, document: Document) -> Path:
        try:
            return document.target.relative_to(self.expansion.target)
        except ValueError:
            return document.target

    def _show(self, document: Document) -> None:
        remaining = len(self.chain.pending)
        deferred = sum(1 for i in self.chain.pending if isinstance(i, DeferredDocument))
        subtitle = f"{remaining} more"
        if deferred:
            subtitle += f", {deferred} deferred"
        lexer = Syntax.guess_lexer(str(document.target), code=document.content())
        self.console.print(Panel(
            Syntax(document.content(), lexer, line_numbers=True, word_wrap=True),
            title=f"[snippet.focused]{Symbols.FOCUSED} {self._rel(document)}[/]",
            subtitle=f"[text.dim]{subtitle}[/]",
            border_style="path",
        ))

    def _prompt_fields(self, document: Document, force: bool = False) -> None:
        for field in document.fields:
            if field.name in document.values and not force:
                continue
            current = document.values.get(field.name, field.default)
            document.set_field(field.name, click.prompt(
                click.style(field.name, fg="yellow", bold=True),
                default=current,
                show_default=bool(current),
            ))

    def _ask_action(self) -> str:
        key = click.prompt(
            "[c]ommit, [d]efer, [e]dit, [f]ields, [q]uit",
            type=click.Choice(list(ACTIONS)),
            default="c",
            show_choices=False,
        )
        return ACTIONS[key]

    def _edit(self, document: Document) -> None:
        edited = click.edit(
            document.editable_text(),
            editor=self.editor,
            extension=document.target.suffix or ".txt",
            require_save=True,
        )
        if edited is None:
            self.console.print("  [text.dim]No changes[/]")
            return
        document.replace_text(edited)

    def _save(self) -> None:
        if self.store is None:
            self.console.print("[status.warning]Chain abandoned.[/] Remaining snippets were not written.")
            return
        ctx = self.expansion.context
        record = ChainRecord.new(
            template=ctx.template,
            target=ctx.target,
            items=self.chain.snapshot(),
            variables=ctx.variables,
            metadata=ctx.metadata,
        )
        if self.record_id:
            record.id = self.record_id
        self.store.save(record)
        self.saved_record = record
        self.console.print(
            f"[status.warning]Paused.[/] {len(record.items)} snippet(s) left. "
            f"Resume with [title]sprout resume {record.id}[/]"
        )

    def _finish(self) -> None:
        if self.store is not None and self.record_id:
            self.store.remove(self.record_id)
        self.console.print(f"\n[status.ok]{Symbols.DONE}[/] All snippets done in [path]{self.expansion.target}[/]")
