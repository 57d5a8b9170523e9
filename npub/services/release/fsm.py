from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TypeVar

from npub.core.result import Err, Ok, Result
from npub.services.release.errors import ReleaseError

S = TypeVar("S")


StageHandler = Callable[[S], Result[S, ReleaseError]]
EnterStage = Callable[[str], None]


def _ignore_enter(stage: str) -> None:
    del stage


def run_stages(
    *,
    initial_state: S,
    stages: Sequence[str],
    handlers: Mapping[str, StageHandler[S]],
    on_enter: EnterStage = _ignore_enter,
) -> Result[S, ReleaseError]:
    """Thread state through the handlers of ``stages``, in order.

    The first Err stops the run; stages not listed are never invoked.
    """
    current = initial_state

    for stage in stages:
        handler = handlers.get(stage)
        if handler is None:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"unknown release stage: {stage}",
                )
            )

        on_enter(stage)
        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome
        current = outcome.value

    return Ok(current)
