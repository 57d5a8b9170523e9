from __future__ import annotations

from typing import cast

from npub.core.result import Err, Ok, Result
from npub.services.release.errors import ReleaseError
from npub.services.release.model import FORWARD_STAGES, StageName, TaskConfig


TASK_SEPARATOR = "-"


def parse_task(task: str) -> Result[TaskConfig, ReleaseError]:
    """Parse a dash-joined stage list such as ``selectVersion-commitTag``.

    Only membership matters; stages always run in pipeline order. A single
    unknown (or empty) token rejects the whole string.
    """
    enabled: set[StageName] = set()
    for token in task.split(TASK_SEPARATOR):
        if token not in FORWARD_STAGES:
            shown = token if token else "(empty)"
            return Err(
                ReleaseError(
                    kind="task_parse",
                    message=f"unknown task stage: {shown}",
                    hint="Valid stages: " + ", ".join(FORWARD_STAGES),
                )
            )
        enabled.add(cast(StageName, token))

    return Ok(TaskConfig(enabled=frozenset(enabled)))
