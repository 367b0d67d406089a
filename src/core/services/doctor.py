"""Local toolchain diagnostics.

Architecture:
- Each check is a small function returning exactly one `CheckResult`.
- `doctor_check` runs them in a fixed order; an exception inside one check
  becomes a `fail` entry and the next check still runs.
- Rendering and exit codes are the CLI's business.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable

from adapters.process import SubprocessRunner
from adapters.xcode import locate_containers
from core.config import AppSettings
from core.domain.models import CheckResult, CheckStatus, DoctorReport
from core.errors import InvocationError
from core.interfaces.runner import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCheck:
    """A check that passes when a command exits 0."""

    name: str
    argv: tuple[str, ...]
    suggestion: str
    # Status when the tool is missing or broken.
    missing_status: CheckStatus = CheckStatus.FAIL


TOOL_CHECKS: tuple[ToolCheck, ...] = (
    ToolCheck(
        "Ruby",
        ("ruby", "-v"),
        "Install Ruby (rbenv or Homebrew) and ensure it is in PATH.",
    ),
    ToolCheck(
        "Bundler",
        ("bundle", "-v"),
        "Run `gem install bundler` or ensure Bundler is available.",
    ),
    ToolCheck(
        "Fastlane",
        ("fastlane", "--version"),
        "Run `bundle install` or install fastlane.",
    ),
    ToolCheck(
        "CocoaPods",
        ("pod", "--version"),
        "Install CocoaPods if your project depends on Pods.",
        CheckStatus.WARN,
    ),
    ToolCheck(
        "Xcode CLI",
        ("xcode-select", "-p"),
        "Run `xcode-select --install` or point xcode-select at Xcode.app.",
    ),
    ToolCheck(
        "Xcode Build",
        ("xcodebuild", "-version"),
        "Install Xcode and accept its license with `sudo xcodebuild -license accept`.",
    ),
)


def _first_meaningful_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


def _version_line(name: str, output: str) -> str:
    """Pick the line that carries the version.

    `fastlane --version` prints a banner and the executable path before
    `fastlane 2.x.y`; other tools print the version first.
    """

    if name == "Fastlane":
        for line in output.splitlines():
            stripped = line.strip()
            if stripped.lower().startswith("fastlane ") and any(ch.isdigit() for ch in stripped):
                return stripped
    return _first_meaningful_line(output)


def run_tool_check(check: ToolCheck, *, runner: CommandRunner, settings: AppSettings) -> CheckResult:
    try:
        result = runner.run(check.argv, timeout=settings.doctor_timeout_seconds)
    except InvocationError as exc:
        return CheckResult(
            name=check.name,
            status=check.missing_status,
            detail=f"failed to execute: {exc.message}",
            suggestion=check.suggestion,
        )

    if result.ok:
        detail = _version_line(check.name, result.output) or _first_meaningful_line(result.error_output)
        return CheckResult(name=check.name, status=CheckStatus.PASS, detail=detail or "ok")

    if result.timed_out:
        detail = f"timed out after {settings.doctor_timeout_seconds:g}s"
    else:
        detail = _first_meaningful_line(result.error_output) or _first_meaningful_line(result.output)
        detail = detail or f"command failed (exit {result.exit_code})"
    return CheckResult(
        name=check.name,
        status=check.missing_status,
        detail=detail,
        suggestion=check.suggestion,
    )


def check_project(root: Path, *, settings: AppSettings) -> CheckResult:
    if not root.is_dir():
        return CheckResult(
            name="Project",
            status=CheckStatus.FAIL,
            detail=f"not a directory: {root}",
            suggestion="Pick the folder that contains your .xcodeproj or .xcworkspace.",
        )
    workspace, xcodeproj = locate_containers(root, max_depth=settings.scan_max_depth)
    if not workspace and not xcodeproj:
        return CheckResult(
            name="Project",
            status=CheckStatus.FAIL,
            detail=f"no .xcworkspace or .xcodeproj under {root}",
            suggestion="Pick the folder that contains your .xcodeproj or .xcworkspace.",
        )
    return CheckResult(name="Project", status=CheckStatus.PASS, detail=workspace or xcodeproj or "")


def check_gemfile(root: Path) -> CheckResult:
    if (root / "Gemfile").is_file():
        return CheckResult(name="Gemfile", status=CheckStatus.PASS, detail="ok")
    return CheckResult(
        name="Gemfile",
        status=CheckStatus.WARN,
        detail=f"no Gemfile in {root}",
        suggestion="Create a Gemfile to manage fastlane gems consistently.",
    )


def _isolated(name: str, check: Callable[[], CheckResult]) -> CheckResult:
    try:
        return check()
    except Exception as exc:
        logger.exception("doctor check %s crashed", name)
        return CheckResult(
            name=name,
            status=CheckStatus.FAIL,
            detail=f"check crashed: {exc}",
            suggestion="Re-run with --verbose and report the traceback.",
        )


def doctor_check(
    project_path: str | Path | None = None,
    *,
    settings: AppSettings | None = None,
    runner: CommandRunner | None = None,
) -> DoctorReport:
    """Run the full battery; never raises for a single bad check."""

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(settings)

    checks: list[CheckResult] = []
    for tool in TOOL_CHECKS:
        if tool.argv[0] == "xcodebuild":
            tool = replace(tool, argv=(settings.xcodebuild_path, *tool.argv[1:]))
        checks.append(
            _isolated(tool.name, lambda tool=tool: run_tool_check(tool, runner=runner, settings=settings))
        )

    raw = str(project_path or "").strip()
    if raw:
        root = Path(raw).expanduser()
        checks.append(_isolated("Project", lambda: check_project(root, settings=settings)))
        if root.is_dir():
            checks.append(_isolated("Gemfile", lambda: check_gemfile(root)))

    report = DoctorReport(checks=checks)
    logger.info("doctor: %d/%d checks passed", report.passed, len(checks))
    return report
