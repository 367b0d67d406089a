"""Generation of fastlane configuration files from a `ProjectConfig`."""

from __future__ import annotations

import logging
from pathlib import Path

from adapters.atomic_write import write_files_atomically
from adapters.fastlane_files import render_env, render_note
from core.config import AppSettings
from core.domain.models import GeneratedSummary, ProjectConfig
from core.errors import ValidationError

logger = logging.getLogger(__name__)

_OPERATION = "generate"

TEAM_ID_LENGTH = 10


def validate_for_generation(config: ProjectConfig) -> Path:
    """Check everything generation needs; return the project root.

    All problems are reported together in one `ValidationError`.
    """

    problems: list[str] = []
    root: Path | None = None

    raw_path = config.project_path.strip()
    if not raw_path:
        problems.append("projectPath is required")
    else:
        candidate = Path(raw_path).expanduser()
        if not candidate.is_dir():
            problems.append(f"projectPath does not exist: {raw_path}")
        else:
            root = candidate.resolve()

    if not config.workspace.strip() and not config.xcodeproj.strip():
        problems.append("workspace or xcodeproj is required (nothing to build against)")
    if not config.scheme_dev.strip():
        problems.append("schemeDev is required")
    if not config.scheme_dis.strip():
        problems.append("schemeDis is required")

    team = config.team_id
    if team and (len(team) != TEAM_ID_LENGTH or not team.isalnum() or not team.isascii()):
        problems.append(f"teamId must be {TEAM_ID_LENGTH} alphanumeric characters: {team!r}")

    for name in ProjectConfig.model_fields:
        value = getattr(config, name)
        if isinstance(value, str) and ("\n" in value or "\r" in value):
            problems.append(f"{name} must be a single line")

    if problems or root is None:
        raise ValidationError("; ".join(problems), operation=_OPERATION)
    return root


def generate_files(config: ProjectConfig, *, settings: AppSettings | None = None) -> GeneratedSummary:
    """Write `<project>/fastlane/.env.fastlane` and the generated note.

    Raises:
    - ValidationError: required fields missing or invalid; nothing is written.
    - FilesystemError: a write failed; previous files are left as they were.
    """

    settings = settings or AppSettings()
    root = validate_for_generation(config)

    fastlane_dir = root / settings.fastlane_dir
    env_path = fastlane_dir / settings.env_file_name
    note_path = fastlane_dir / settings.note_file_name
    project_name = Path(config.workspace or config.xcodeproj).stem

    env_text = render_env(config)
    note_text = render_note(
        config=config,
        project_name=project_name,
        env_file=f"{settings.fastlane_dir}/{settings.env_file_name}",
    )

    unchanged = write_files_atomically(
        {env_path: env_text, note_path: note_text},
        operation=_OPERATION,
    )
    logger.info("generated fastlane files in %s (%d unchanged)", fastlane_dir, len(unchanged))

    return GeneratedSummary(
        files=[env_path, note_path],
        env_file=env_path,
        keys=len(ProjectConfig.model_fields),
        unchanged=unchanged,
    )
