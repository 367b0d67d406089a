"""Per-project profile persistence (JSON).

Why JSON:
- The profile mirrors `ProjectConfig` one-to-one with camelCase keys, so
  other tools (and the desktop front end) can read it without this package.
- A stable format (sorted keys, indent, trailing newline) keeps diffs small
  when the profile is committed.
"""

from __future__ import annotations

import json
from pathlib import Path

import pydantic

from adapters.atomic_write import write_files_atomically
from core.config import AppSettings
from core.domain.models import ProjectConfig
from core.errors import NotFoundError, ParseError


def profile_path(project_root: Path, settings: AppSettings) -> Path:
    return project_root / settings.profile_dir / settings.profile_file_name


def dump_profile(config: ProjectConfig) -> str:
    payload = config.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def save_profile(config: ProjectConfig, *, settings: AppSettings | None = None) -> str:
    """Write the profile under the project and return a summary line."""

    settings = settings or AppSettings()
    raw = config.project_path.strip()
    if not raw:
        raise NotFoundError("projectPath is empty", operation="save profile")
    root = Path(raw).expanduser()
    if not root.is_dir():
        raise NotFoundError(f"projectPath does not exist: {raw}", operation="save profile")

    path = profile_path(root, settings)
    write_files_atomically({path: dump_profile(config)}, operation="save profile")
    return f"Profile saved: {path}"


def load_profile(project_path: str | Path, *, settings: AppSettings | None = None) -> ProjectConfig:
    """Read the profile of a project back into a `ProjectConfig`."""

    settings = settings or AppSettings()
    root = Path(str(project_path).strip()).expanduser()
    path = profile_path(root, settings)
    if not path.is_file():
        raise NotFoundError(f"profile not found: {path}", operation="load profile")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"cannot read {path}: {exc}", operation="load profile") from exc
    if not isinstance(data, dict):
        raise ParseError(f"{path} does not hold a JSON object", operation="load profile")

    try:
        return ProjectConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ParseError(f"invalid profile {path}: {exc.error_count()} error(s)", operation="load profile") from exc
