"""Confirmation Gate: blocking operator checkpoints.

A gate waits, with no timeout, until the operator acknowledges (Enter,
any input) or cancels (Ctrl+C / Ctrl+D). Cancelling is not an error to
recover from; the orchestrator stops where it is.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

import typer

from reltag.core.result import Err, Ok, Result
from reltag.output.console import ConsoleProtocol
from reltag.release.errors import Cancelled

__all__ = [
    "CONFIRMED",
    "Confirmed",
    "Confirmer",
    "ScriptedConfirmer",
    "TerminalConfirmer",
]

ACK_PROMPT = "Press Enter to continue, or press Control+C to cancel"


@dataclass(frozen=True, slots=True)
class Confirmed:
    pass


CONFIRMED = Confirmed()


class Confirmer(Protocol):
    def confirm(self, prompt: str) -> Result[Confirmed, Cancelled]: ...


class TerminalConfirmer:
    """Gate backed by the controlling terminal."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def confirm(self, prompt: str) -> Result[Confirmed, Cancelled]:
        self._console.print(prompt)
        try:
            typer.prompt(ACK_PROMPT, default="", show_default=False, prompt_suffix=" ")
        except typer.Abort:
            self._console.newline()
            return Err(Cancelled(f"cancelled at: {prompt}"))
        return Ok(CONFIRMED)


@dataclass
class ScriptedConfirmer:
    """Answers gates from a fixed script; True confirms, False cancels.

    Records every prompt it was asked, so tests can assert which gates
    were reached. Running out of answers cancels.
    """

    answers: list[bool] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    @classmethod
    def always(cls, answer: bool, times: int = 2) -> ScriptedConfirmer:
        return cls(answers=[answer] * times)

    @classmethod
    def of(cls, answers: Iterable[bool]) -> ScriptedConfirmer:
        return cls(answers=list(answers))

    def confirm(self, prompt: str) -> Result[Confirmed, Cancelled]:
        self.prompts.append(prompt)
        if self.answers and self.answers.pop(0):
            return Ok(CONFIRMED)
        return Err(Cancelled(f"cancelled at: {prompt}"))
