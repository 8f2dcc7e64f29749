"""Terminal interaction for the interactive flows."""

from __future__ import annotations

import click


class Console:
    """Thin wrapper around click so flows can be driven by a fake in tests."""

    def line(self, message: str = "") -> None:
        click.echo(message)

    def success(self, message: str) -> None:
        click.secho(message, fg="green")

    def error(self, message: str) -> None:
        click.secho(message, fg="red", err=True)

    def note(self, message: str) -> None:
        click.secho(message, dim=True)

    def heading(self, message: str) -> None:
        click.secho(message, bold=True)

    def confirm(self, question: str, *, default: bool) -> bool:
        return click.confirm(question, default=default)

    def ask(self, question: str) -> str:
        value: str = click.prompt(question, type=str)
        return value.strip()

    def ask_hidden(self, question: str) -> str:
        value: str = click.prompt(question, type=str, hide_input=True)
        return value.strip()
