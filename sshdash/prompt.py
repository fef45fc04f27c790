"""Interactive prompts."""

from __future__ import annotations

from typing import Protocol

import typer


class Prompter(Protocol):
    def ask_yes_no(self, prompt: str, default: bool = False) -> bool: ...

    def ask_text(self, prompt: str, default: str | None = None) -> str: ...

    def ask_secret(self, prompt: str) -> str: ...


class TyperPrompter:
    """Prompts on the controlling terminal through typer/click."""

    def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
        return typer.confirm(prompt, default=default, err=True)

    def ask_text(self, prompt: str, default: str | None = None) -> str:
        answer = typer.prompt(prompt, default=default, err=True)
        return str(answer).strip()

    def ask_secret(self, prompt: str) -> str:
        return str(typer.prompt(prompt, hide_input=True, err=True))
