from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Sequence

import pytest

from core.config import AppSettings
from core.errors import InvocationError
from core.interfaces.runner import CommandResult


class FakeRunner:
    """Records argv and answers with canned results.

    Responses are matched in registration order: the first one whose tokens
    all appear in argv wins. Unmatched commands behave like a missing tool.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._responses: list[tuple[tuple[str, ...], CommandResult | Exception]] = []

    def add(
        self,
        *tokens: str,
        exit_code: int = 0,
        output: str = "",
        error_output: str = "",
        timed_out: bool = False,
        raises: Exception | None = None,
    ) -> "FakeRunner":
        response: CommandResult | Exception
        if raises is not None:
            response = raises
        else:
            response = CommandResult(
                argv=tokens,
                exit_code=exit_code,
                output=output,
                error_output=error_output,
                timed_out=timed_out,
            )
        self._responses.append((tokens, response))
        return self

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
        on_line: Callable[[str], None] | None = None,
    ) -> CommandResult:
        self.calls.append(
            {"argv": list(argv), "cwd": cwd, "timeout": timeout, "merge_stderr": merge_stderr}
        )
        for tokens, response in self._responses:
            if all(token in argv for token in tokens):
                if isinstance(response, Exception):
                    raise response
                if on_line is not None:
                    for line in response.output.splitlines():
                        on_line(line)
                return CommandResult(
                    argv=tuple(argv),
                    exit_code=response.exit_code,
                    output=response.output,
                    error_output=response.error_output,
                    timed_out=response.timed_out,
                )
        raise InvocationError(f"cannot start {argv[0]!r}: not found", operation="run command")

    def argvs(self) -> list[list[str]]:
        return [call["argv"] for call in self.calls]


def list_json(schemes: list[str], *, kind: str = "project", name: str = "MyApp") -> str:
    return json.dumps({kind: {"name": name, "schemes": schemes, "targets": [name]}}, indent=2)


def settings_json(**values: str) -> str:
    return json.dumps([{"action": "build", "target": "MyApp", "buildSettings": values}], indent=2)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, login_shell=None)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A bare project: MyApp.xcodeproj (with its embedded workspace), no Pods."""

    root = tmp_path / "MyApp"
    (root / "MyApp.xcodeproj" / "project.xcworkspace").mkdir(parents=True)
    (root / "MyApp").mkdir()
    return root


@pytest.fixture
def pods_project_dir(project_dir: Path) -> Path:
    """Same project after `pod install`."""

    (project_dir / "MyApp.xcworkspace").mkdir()
    (project_dir / "Pods" / "Pods.xcodeproj").mkdir(parents=True)
    return project_dir
