"""Project scanning.

Turns a project directory into a `ScanResult`: which container to build
against, which schemes exist, and a first guess at bundle identifier and
signing team. The guess comes from a single "primary" scheme probe; per-scheme
resolution is the identity resolver's job and is deliberately not done here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.process import SubprocessRunner
from adapters.xcode import (
    BUNDLE_ID_KEY,
    TEAM_KEY,
    XcodeProject,
    locate_containers,
    parse_scheme_list,
)
from core.config import AppSettings
from core.domain.models import ScanResult
from core.errors import FastlaneDeskError, InvocationError, NotFoundError
from core.interfaces.runner import CommandRunner
from core.services.classifier import suggest_main

logger = logging.getLogger(__name__)

_OPERATION = "scan"


def resolve_project_root(project_path: str | Path, *, operation: str) -> Path:
    """Expand and check a project path, raising `NotFoundError` if unusable."""

    raw = str(project_path).strip()
    if not raw:
        raise NotFoundError("project path is empty", operation=operation)
    root = Path(raw).expanduser()
    if not root.exists():
        raise NotFoundError(f"project path not found: {root}", operation=operation)
    if not root.is_dir():
        raise NotFoundError(f"project path is not a directory: {root}", operation=operation)
    return root.resolve()


def _project_name(root: Path, workspace: str | None, xcodeproj: str | None) -> str:
    container = workspace or xcodeproj
    if container:
        return Path(container).stem
    return root.name or "iOSProject"


def scan_project(
    project_path: str | Path,
    *,
    settings: AppSettings | None = None,
    runner: CommandRunner | None = None,
) -> ScanResult:
    """Scan a project directory.

    Raises:
    - NotFoundError: the path is missing or holds no workspace/project.
    - ParseError: `xcodebuild -list` succeeded but its output is unreadable.

    A project whose schemes cannot be listed still scans successfully with an
    empty scheme list, so the user can fill schemes in by hand.
    """

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(settings)
    root = resolve_project_root(project_path, operation=_OPERATION)

    workspace, xcodeproj = locate_containers(root, max_depth=settings.scan_max_depth)
    if not workspace and not xcodeproj:
        raise NotFoundError(f"no .xcworkspace or .xcodeproj under {root}", operation=_OPERATION)

    project_name = _project_name(root, workspace, xcodeproj)
    project = XcodeProject(
        root=root,
        workspace=workspace,
        xcodeproj=xcodeproj,
        runner=runner,
        settings=settings,
    )

    schemes: list[str] = []
    try:
        listing = project.list_schemes()
    except InvocationError as exc:
        logger.warning("xcodebuild unavailable (%s); continuing without schemes", exc.message)
    else:
        if listing.ok:
            schemes = parse_scheme_list(listing.output)
        else:
            logger.warning(
                "xcodebuild -list failed for %s (exit %s); continuing without schemes",
                project_name,
                listing.exit_code,
            )

    bundle_id: str | None = None
    team_id: str | None = None
    primary = suggest_main(schemes, project_name)
    if primary:
        try:
            build_settings = project.build_settings(primary, operation=_OPERATION)
        except FastlaneDeskError as exc:
            logger.warning("could not read build settings of %s: %s", primary, exc.message)
        else:
            bundle_id = build_settings.get(BUNDLE_ID_KEY)
            team_id = build_settings.get(TEAM_KEY)

    logger.info("scanned %s: %d schemes, primary=%s", project_name, len(schemes), primary or "-")
    return ScanResult(
        project_name=project_name,
        workspace=workspace,
        xcodeproj=xcodeproj,
        schemes=schemes,
        bundle_id_dev=bundle_id,
        bundle_id_dis=bundle_id,
        team_id=team_id,
    )
