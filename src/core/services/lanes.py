"""Lane execution.

A lane that runs and fails is a normal outcome: it comes back as a
`LaneRunResult` with `status=failed`. Only "fastlane could not be started at
all" is an error.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from adapters.process import SubprocessRunner
from core.config import AppSettings
from core.domain.lanes import KnownLane
from core.domain.models import LaneRunResult, LaneStatus
from core.errors import InvocationError, ValidationError
from core.interfaces.runner import CommandRunner
from core.services.scanner import resolve_project_root

logger = logging.getLogger(__name__)

_OPERATION = "run lane"


def lane_command(lane: str, settings: AppSettings) -> list[str]:
    """`bundle exec fastlane ios <lane>` (prefix and platform from settings)."""

    argv = list(settings.fastlane_command)
    if settings.fastlane_platform:
        argv.append(settings.fastlane_platform)
    argv.append(lane)
    return argv


def run_lane(
    project_path: str | Path,
    lane: str,
    *,
    settings: AppSettings | None = None,
    runner: CommandRunner | None = None,
    timeout: float | None = None,
    on_output: Callable[[str], None] | None = None,
) -> LaneRunResult:
    """Run one lane in the project directory and capture its combined output.

    `timeout` (or `settings.lane_timeout_seconds`) is optional; when it expires
    the lane is killed and reported as failed with `timed_out=True`.
    `on_output` receives each output line as it is produced.
    """

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(settings)
    root = resolve_project_root(project_path, operation=_OPERATION)

    if not lane.strip():
        raise ValidationError("lane name is empty", operation=_OPERATION)
    if not KnownLane.is_known(lane):
        logger.info("running custom lane %r", lane)

    effective_timeout = timeout if timeout is not None else settings.lane_timeout_seconds
    try:
        result = runner.run(
            lane_command(lane, settings),
            cwd=root,
            timeout=effective_timeout,
            merge_stderr=True,
            on_line=on_output,
        )
    except InvocationError as exc:
        raise InvocationError(exc.message, operation=_OPERATION) from exc

    status = LaneStatus.SUCCESS if result.ok else LaneStatus.FAILED
    logger.info("lane %s finished: %s (exit=%s)", lane, status.value, result.exit_code)
    return LaneRunResult(
        lane=lane,
        status=status,
        exit_code=result.exit_code,
        output=result.output,
        timed_out=result.timed_out,
    )
