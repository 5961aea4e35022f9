from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from reltag.core.result import Err, Ok, Result
from reltag.release.errors import ReleaseError

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance(Generic[S]):
    state: S


@dataclass(frozen=True, slots=True)
class StepFinish:
    pass


@dataclass(frozen=True, slots=True)
class Halted(Generic[S]):
    """A handler failed: the last good state and the error it returned."""

    state: S
    error: ReleaseError


StepOutcome = StepAdvance[S] | StepFinish
StepHandler = Callable[[S], Result[StepOutcome[S], ReleaseError]]
OnAdvance = Callable[[S, S], None]
GetStep = Callable[[S], str]


FINISH = StepFinish()


def advance(state: S) -> StepAdvance[S]:
    return StepAdvance(state=state)


def run_state_machine(
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S]],
    order: tuple[str, ...],
    on_advance: OnAdvance[S] | None = None,
) -> Result[S, Halted[S]]:
    """Drive ``handlers`` from ``initial_state`` until one finishes or fails.

    ``order`` lists the steps in their only legal sequence; a handler that
    advances to a step not strictly after the current one is a bug and
    raises. The machine never revisits a step.
    """
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            raise KeyError(f"no handler for release step: {step}")

        outcome = handler(current)
        if isinstance(outcome, Err):
            return Err(Halted(state=current, error=outcome.error))

        if isinstance(outcome.value, StepFinish):
            return Ok(current)

        nxt = outcome.value.state
        if order.index(get_step(nxt)) <= order.index(step):
            raise RuntimeError(f"release step {step} tried to move back to {get_step(nxt)}")

        if on_advance is not None:
            on_advance(current, nxt)
        current = nxt
