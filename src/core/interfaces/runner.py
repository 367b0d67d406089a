"""Subprocess execution contract.

Why Protocol:
- Defines a structural contract (duck typing) without rigid inheritance.
- Lets services (scanner, resolver, lanes, doctor) run against the real
  subprocess adapter or against a recorded fake in tests, without coupling
  the Core to `subprocess`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class CommandResult:
    """What a finished command left behind.

    `output` holds stdout, or stdout and stderr interleaved when the command
    was run with `merge_stderr=True` (then `error_output` is empty).
    """

    argv: tuple[str, ...]
    exit_code: int
    output: str = ""
    error_output: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    @property
    def combined(self) -> str:
        if not self.error_output:
            return self.output
        if not self.output:
            return self.error_output
        return f"{self.output.rstrip()}\n{self.error_output}"


@runtime_checkable
class CommandRunner(Protocol):
    """Minimal contract for running an external command.

    Design rules:
    - Blocking: returns only after the child exited and its output is drained.
    - The child never outlives the call.
    - Raises `InvocationError` only when the command could not be started;
      a non-zero exit is reported through `CommandResult.exit_code`.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
        on_line: Callable[[str], None] | None = None,
    ) -> CommandResult:
        ...
