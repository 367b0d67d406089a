"""Signing identity resolution for a (dev, dis) scheme pair."""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.process import SubprocessRunner
from adapters.xcode import BUNDLE_ID_KEY, TEAM_KEY, XcodeProject, locate_containers
from core.config import AppSettings
from core.domain.models import IdentityResult
from core.errors import NotFoundError, ValidationError
from core.interfaces.runner import CommandRunner
from core.services.scanner import resolve_project_root

logger = logging.getLogger(__name__)

_OPERATION = "resolve identity"


def resolve_identity(
    project_path: str | Path,
    workspace: str | None,
    xcodeproj: str | None,
    scheme_dev: str,
    scheme_dis: str,
    *,
    settings: AppSettings | None = None,
    runner: CommandRunner | None = None,
) -> IdentityResult:
    """Read bundle identifiers and team for both schemes independently.

    The team of the distribution scheme wins when both define one; a project
    whose schemes disagree on the team is accepted as-is.

    Raises:
    - NotFoundError: project path or containers missing.
    - ValidationError: a scheme name is blank.
    - SchemeNotFoundError: xcodebuild does not know one of the schemes.
    - ToolchainError: xcodebuild failed or printed something unusable.
    """

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(settings)
    root = resolve_project_root(project_path, operation=_OPERATION)

    if not scheme_dev.strip() or not scheme_dis.strip():
        raise ValidationError("schemeDev and schemeDis must both be set", operation=_OPERATION)

    workspace = (workspace or "").strip() or None
    xcodeproj = (xcodeproj or "").strip() or None
    if workspace is None and xcodeproj is None:
        workspace, xcodeproj = locate_containers(root, max_depth=settings.scan_max_depth)
    if workspace is None and xcodeproj is None:
        raise NotFoundError(f"no .xcworkspace or .xcodeproj under {root}", operation=_OPERATION)

    project = XcodeProject(
        root=root,
        workspace=workspace,
        xcodeproj=xcodeproj,
        runner=runner,
        settings=settings,
    )

    dev_settings = project.build_settings(scheme_dev, operation=_OPERATION)
    if scheme_dis == scheme_dev:
        dis_settings = dev_settings
    else:
        dis_settings = project.build_settings(scheme_dis, operation=_OPERATION)

    dev_team = dev_settings.get(TEAM_KEY)
    dis_team = dis_settings.get(TEAM_KEY)
    if dev_team and dis_team and dev_team != dis_team:
        logger.warning(
            "schemes disagree on DEVELOPMENT_TEAM (%s=%s, %s=%s); using %s",
            scheme_dev,
            dev_team,
            scheme_dis,
            dis_team,
            dis_team,
        )

    return IdentityResult(
        bundle_id_dev=dev_settings.get(BUNDLE_ID_KEY),
        bundle_id_dis=dis_settings.get(BUNDLE_ID_KEY),
        team_id=dis_team or dev_team,
    )
