"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without polluting the
  CLI.
- Lets services and adapters (xcodebuild, fastlane, profile store) read tool
  paths and file locations consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "fastlane-desk"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "fastlane-desk"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "fastlane-desk"
    return Path.home() / ".config" / "fastlane-desk"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _default_login_shell() -> str | None:
    # rbenv/rvm/Homebrew put ruby and fastlane on PATH only in login shells.
    return "/bin/zsh" if sys.platform == "darwin" else None


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without leaking that logic
      into the Core.
    - One configuration contract for CLI, services and adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="FASTLANE_DESK_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    xcodebuild_path: str = Field(
        default="xcodebuild",
        min_length=1,
        description="xcodebuild executable used for project introspection.",
    )
    fastlane_command: list[str] = Field(
        default_factory=lambda: ["bundle", "exec", "fastlane"],
        min_length=1,
        description="Command prefix that launches fastlane (JSON list in env vars).",
    )
    fastlane_platform: str = Field(
        default="ios",
        description="Fastlane platform block; empty to call lanes without a platform.",
    )
    login_shell: str | None = Field(
        default_factory=_default_login_shell,
        description="Shell used as `<shell> -lc <command>`; None runs commands directly.",
    )

    scan_max_depth: int = Field(
        default=4,
        ge=1,
        le=10,
        description="How deep the scanner looks for .xcworkspace/.xcodeproj.",
    )
    fastlane_dir: str = Field(default="fastlane", min_length=1)
    env_file_name: str = Field(default=".env.fastlane", min_length=1)
    note_file_name: str = Field(default="DESKTOP_GENERATED_NOTE.md", min_length=1)
    profile_dir: str = Field(default=".fastlane-desktop", min_length=1)
    profile_file_name: str = Field(default="profile.json", min_length=1)

    lane_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Kill a lane after this many seconds. None waits forever.",
    )
    doctor_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each doctor command (seconds).",
    )
    introspection_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for xcodebuild -list / -showBuildSettings (seconds).",
    )

    log_level: str = Field(default="WARNING", description="Root log level for the CLI.")
