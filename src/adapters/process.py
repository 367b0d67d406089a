"""Subprocess adapter.

Why a wrapper:
- Standardizes login-shell wrapping, timeouts, output decoding and process
  reaping for every external tool (xcodebuild, fastlane, ruby, pod...).
- Makes testing easy: services depend on `CommandRunner`, which can be
  replaced by a recorded fake.
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
from pathlib import Path
from typing import Callable, Sequence

from core.config import AppSettings
from core.errors import InvocationError
from core.interfaces.runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"

# POSIX shell exit codes for "command not found" and "found but not executable".
_SHELL_CANNOT_RUN = frozenset({126, 127})


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill(proc: subprocess.Popen) -> None:
    """Kill the child and, on POSIX, everything it spawned."""

    if _POSIX:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except (ProcessLookupError, PermissionError):
            pass
    try:
        proc.kill()
    except ProcessLookupError:
        pass


class SubprocessRunner(CommandRunner):
    """Runs commands with `subprocess.Popen`.

    Rules:
    - stdin is closed (`DEVNULL`): lanes must never wait on a prompt.
    - With `merge_stderr=True` both streams share one pipe, so the buffer keeps
      the order in which the child produced bytes.
    - The child runs in its own session on POSIX so a timeout can kill the
      whole tree (login shell -> bundler -> fastlane -> xcodebuild).
    - Behind a login shell, exit 126/127 means the shell could not run the
      command, which is reported as `InvocationError` like a failed `Popen`.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def build_argv(self, argv: Sequence[str]) -> list[str]:
        shell = self._settings.login_shell
        if shell:
            return [shell, "-lc", shlex.join(argv)]
        return list(argv)

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
        on_line: Callable[[str], None] | None = None,
    ) -> CommandResult:
        if not argv:
            raise InvocationError("empty command", operation="run command")

        full_argv = self.build_argv(argv)
        logger.debug("exec %s (cwd=%s)", shlex.join(full_argv), cwd)

        try:
            proc = subprocess.Popen(
                full_argv,
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except OSError as exc:
            raise InvocationError(
                f"cannot start {full_argv[0]!r}: {exc.strerror or exc}",
                operation="run command",
            ) from exc

        expired = threading.Event()
        timer: threading.Timer | None = None
        if timeout is not None:

            def _expire() -> None:
                expired.set()
                _kill(proc)

            timer = threading.Timer(timeout, _expire)
            timer.daemon = True
            timer.start()

        output = ""
        error_output = ""
        try:
            if merge_stderr:
                chunks: list[str] = []
                assert proc.stdout is not None
                for raw in iter(proc.stdout.readline, b""):
                    line = _decode(raw)
                    chunks.append(line)
                    if on_line is not None:
                        on_line(line.rstrip("\r\n"))
                output = "".join(chunks)
                proc.wait()
            else:
                out, err = proc.communicate()
                output, error_output = _decode(out), _decode(err)
                if on_line is not None:
                    for line in output.splitlines():
                        on_line(line)
        finally:
            if timer is not None:
                timer.cancel()
            if proc.poll() is None:
                _kill(proc)
            proc.wait()
            for stream in (proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()

        if expired.is_set():
            logger.warning("command timed out after %ss: %s", timeout, shlex.join(argv))
        elif full_argv != list(argv) and proc.returncode in _SHELL_CANNOT_RUN:
            lines = (error_output or output).strip().splitlines()
            reason = lines[-1] if lines else f"exit code {proc.returncode}"
            raise InvocationError(f"cannot start {argv[0]!r}: {reason}", operation="run command")

        return CommandResult(
            argv=tuple(full_argv),
            exit_code=proc.returncode,
            output=output,
            error_output=error_output,
            timed_out=expired.is_set(),
        )
