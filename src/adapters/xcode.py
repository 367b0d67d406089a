"""Xcode project adapter (filesystem layout + xcodebuild).

Responsibility:
- Locate the `.xcworkspace` / `.xcodeproj` containers of a project tree.
- Build `xcodebuild -list` / `-showBuildSettings` invocations.
- Parse their output (JSON first, the classic text layout as fallback) into
  plain Python values.

Why in adapters:
- xcodebuild's output format is an infrastructure detail; services only see
  scheme lists and build-setting dicts.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.config import AppSettings
from core.errors import InvocationError, ParseError, SchemeNotFoundError, ToolchainError
from core.interfaces.runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

WORKSPACE_SUFFIX = ".xcworkspace"
PROJECT_SUFFIX = ".xcodeproj"

BUNDLE_ID_KEY = "PRODUCT_BUNDLE_IDENTIFIER"
TEAM_KEY = "DEVELOPMENT_TEAM"

# Directories that never hold the app's own container.
_SKIP_DIRS: frozenset[str] = frozenset(
    {
        "Pods",
        "Carthage",
        "DerivedData",
        "build",
        "node_modules",
        "fastlane",
    }
)

_MISSING_SCHEME_MARKER = "does not contain a scheme named"


def _find_first(root: Path, suffix: str, max_depth: int) -> str | None:
    """Breadth-first search for a directory ending in `suffix`.

    The shallowest match wins; ties are broken by name. Bundles
    (`.xcodeproj`, `.xcworkspace`) are never entered, so the
    `project.xcworkspace` every project embeds is not picked up.
    """

    queue: deque[tuple[Path, int]] = deque([(root, 0)])
    found: list[Path] = []
    found_depth: int | None = None

    while queue:
        current, depth = queue.popleft()
        if found_depth is not None and depth >= found_depth:
            break
        try:
            entries = sorted(p for p in current.iterdir() if p.is_dir())
        except OSError as exc:
            logger.debug("skip unreadable dir %s: %s", current, exc)
            continue
        for entry in entries:
            if entry.suffix == suffix:
                found.append(entry)
                found_depth = depth + 1
                continue
            if entry.suffix in (WORKSPACE_SUFFIX, PROJECT_SUFFIX):
                continue
            if entry.name.startswith(".") or entry.name in _SKIP_DIRS:
                continue
            if depth + 1 < max_depth:
                queue.append((entry, depth + 1))

    if not found:
        return None
    if len(found) > 1:
        logger.warning(
            "several %s found under %s, using %s",
            suffix,
            root,
            found[0].relative_to(root),
        )
    return found[0].relative_to(root).as_posix()


def locate_containers(root: Path, *, max_depth: int = 4) -> tuple[str | None, str | None]:
    """Return `(workspace, xcodeproj)` relative to `root`, either may be None."""

    return (
        _find_first(root, WORKSPACE_SUFFIX, max_depth),
        _find_first(root, PROJECT_SUFFIX, max_depth),
    )


def container_args(workspace: str | None, xcodeproj: str | None) -> list[str]:
    """`-workspace` wins over `-project`: a workspace implies Pods integration."""

    if workspace:
        return ["-workspace", workspace]
    if xcodeproj:
        return ["-project", xcodeproj]
    return []


def _load_json(text: str) -> Any | None:
    stripped = text.strip()
    if not stripped or stripped[0] not in "[{":
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        return None


def _schemes_from_text(text: str) -> list[str] | None:
    in_schemes = False
    seen_header = False
    schemes: list[str] = []

    for line in text.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("Information about"):
            seen_header = True
        if trimmed.lower() == "schemes:":
            in_schemes = True
            continue
        if not in_schemes:
            continue
        if not trimmed:
            if schemes:
                break
            continue
        # A non-indented line starts another top-level section.
        if not line.startswith((" ", "\t")):
            break
        schemes.append(trimmed)

    if in_schemes or seen_header:
        return schemes
    return None


def parse_scheme_list(text: str) -> list[str]:
    """Parse `xcodebuild -list [-json]` output into scheme names, in order."""

    data = _load_json(text)
    if isinstance(data, dict):
        for key in ("workspace", "project"):
            block = data.get(key)
            if isinstance(block, dict):
                schemes = block.get("schemes", [])
                if not isinstance(schemes, list) or not all(isinstance(s, str) for s in schemes):
                    raise ParseError("`schemes` is not a list of names", operation="scan")
                return list(schemes)

    schemes = _schemes_from_text(text)
    if schemes is None:
        raise ParseError("unrecognized `xcodebuild -list` output", operation="scan")
    return schemes


def _settings_from_text(text: str) -> dict[str, str] | None:
    settings: dict[str, str] = {}
    seen_header = False
    for line in text.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("Build settings for"):
            seen_header = True
            continue
        key, sep, value = trimmed.partition(" = ")
        if not sep or not key or " " in key:
            continue
        value = value.strip()
        if value and key not in settings:
            settings[key] = value
    if not settings and not seen_header:
        return None
    return settings


def parse_build_settings(text: str) -> dict[str, str]:
    """Parse `xcodebuild -showBuildSettings [-json]` output.

    Several targets may be listed; the first non-empty value of each key wins,
    matching the order xcodebuild prints the scheme's targets in.
    """

    data = _load_json(text)
    if isinstance(data, list):
        merged: dict[str, str] = {}
        for entry in data:
            block = entry.get("buildSettings") if isinstance(entry, dict) else None
            if not isinstance(block, dict):
                raise ParseError("build settings entry without `buildSettings`", operation="read build settings")
            for key, value in block.items():
                if isinstance(value, str) and value.strip() and key not in merged:
                    merged[key] = value.strip()
        return merged

    settings = _settings_from_text(text)
    if settings is None:
        raise ParseError("unrecognized `xcodebuild -showBuildSettings` output", operation="read build settings")
    return settings


def _mentions_missing_scheme(result: CommandResult) -> bool:
    return _MISSING_SCHEME_MARKER in result.combined.lower()


@dataclass
class XcodeProject:
    """One project directory plus the container xcodebuild should target."""

    root: Path
    workspace: str | None
    xcodeproj: str | None
    runner: CommandRunner
    settings: AppSettings

    def _argv(self, *extra: str) -> list[str]:
        return [self.settings.xcodebuild_path, *extra, *container_args(self.workspace, self.xcodeproj)]

    def list_schemes(self) -> CommandResult:
        """Run `xcodebuild -list -json`; callers decide how to treat a failure."""

        return self.runner.run(
            self._argv("-list", "-json"),
            cwd=self.root,
            timeout=self.settings.introspection_timeout_seconds,
        )

    def build_settings(self, scheme: str, *, operation: str = "read build settings") -> dict[str, str]:
        """Read the build settings of one scheme.

        Raises:
        - SchemeNotFoundError when xcodebuild says the scheme does not exist.
        - ToolchainError on any other failure or unusable output.
        """

        try:
            result = self.runner.run(
                self._argv("-showBuildSettings", "-json", "-scheme", scheme),
                cwd=self.root,
                timeout=self.settings.introspection_timeout_seconds,
            )
        except InvocationError as exc:
            raise InvocationError(exc.message, operation=operation) from exc
        if result.timed_out:
            raise ToolchainError(f"xcodebuild timed out reading scheme {scheme!r}", operation=operation)
        if result.exit_code != 0:
            if _mentions_missing_scheme(result):
                raise SchemeNotFoundError(scheme, operation=operation)
            detail = (result.error_output or result.output).strip().splitlines()
            reason = detail[-1] if detail else f"exit code {result.exit_code}"
            raise ToolchainError(f"xcodebuild failed for scheme {scheme!r}: {reason}", operation=operation)
        try:
            return parse_build_settings(result.output)
        except ParseError as exc:
            raise ToolchainError(f"{exc.message} (scheme {scheme!r})", operation=operation) from exc
