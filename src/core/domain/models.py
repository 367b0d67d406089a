"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  Core to subprocess or filesystem details.
- `ProjectConfig` must round-trip through the profile file exactly; aliases and
  `model_dump(by_alias=True)` give us that for free.

Note:
- These models describe *what* we know about a project, not *how* it was
  discovered.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


class SigningStyle(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class CheckStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class LaneStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class ProjectConfig(BaseModel):
    """Merged, user-editable configuration of one project.

    Why every field has a default:
    - The object is always fully populated, so merges from scan/identity
      results are field-by-field overwrites and never deletions.
    - Field order is part of the contract: the generator writes keys in this
      order.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    project_path: str = Field(
        default="",
        description="Absolute path to the iOS project directory.",
    )
    workspace: str = Field(
        default="",
        description="`.xcworkspace` path relative to project_path.",
    )
    xcodeproj: str = Field(
        default="",
        description="`.xcodeproj` path relative to project_path.",
    )
    scheme_dev: str = Field(default="", description="Scheme used for development builds.")
    scheme_dis: str = Field(default="", description="Scheme used for distribution builds.")
    bundle_id_dev: str = Field(default="", description="Bundle identifier of the dev scheme.")
    bundle_id_dis: str = Field(default="", description="Bundle identifier of the dis scheme.")
    team_id: str = Field(
        default="",
        description="Apple developer team (10 alphanumeric characters) or empty.",
    )
    signing_style: SigningStyle = Field(
        default=SigningStyle.AUTOMATIC,
        description="Code signing mode passed through to fastlane.",
    )
    match_git_url: str = Field(default="", description="Certificates repository for match.")
    match_git_branch: str = Field(default="main", description="Branch of the match repository.")
    pgyer_api_key: str = Field(default="", description="Pgyer upload key (opaque).")
    app_store_connect_api_key_path: str = Field(
        default="",
        description="Path to the App Store Connect API key JSON (opaque).",
    )
    enable_quality_gate: bool = Field(default=True, description="Run the quality gate lane steps.")
    enable_tests: bool = Field(default=True, description="Run unit/UI tests in lanes.")
    enable_swiftlint: bool = Field(default=False, description="Run SwiftLint in lanes.")
    enable_snapshot: bool = Field(default=False, description="Capture screenshots with snapshot.")
    metadata_path: str = Field(
        default="fastlane/metadata",
        description="App Store metadata directory, relative to project_path.",
    )

    @classmethod
    def field_for(cls, name: str) -> str:
        """Resolve a snake_case or camelCase name to the model field name."""

        if name in cls.model_fields:
            return name
        for field_name, info in cls.model_fields.items():
            if info.alias == name:
                return field_name
        raise KeyError(name)


class ScanResult(BaseModel):
    """Snapshot produced by one scan. Superseded, never merged, by the next one."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., min_length=1)
    workspace: str | None = None
    xcodeproj: str | None = None
    schemes: list[str] = Field(
        default_factory=list,
        description="Scheme names in discovery order (not re-sorted).",
    )
    bundle_id_dev: str | None = None
    bundle_id_dis: str | None = None
    team_id: str | None = None


class IdentityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    bundle_id_dev: str | None = None
    bundle_id_dis: str | None = None
    team_id: str | None = None


class SchemePair(BaseModel):
    model_config = ConfigDict(frozen=True)

    dev: str = ""
    dis: str = ""


class CheckResult(BaseModel):
    """One doctor check.

    A failing check must tell the user what to do next.
    """

    name: str = Field(..., min_length=1)
    status: CheckStatus
    detail: str = Field(default="")
    suggestion: str | None = None

    @model_validator(mode="after")
    def _fail_needs_suggestion(self) -> "CheckResult":
        if self.status is CheckStatus.FAIL and not self.suggestion:
            raise ValueError(f"failing check {self.name!r} must carry a suggestion")
        return self


class DoctorReport(BaseModel):
    checks: list[CheckResult] = Field(default_factory=list)

    @property
    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in CheckStatus}
        for check in self.checks:
            counts[check.status.value] += 1
        return counts

    @property
    def passed(self) -> int:
        return self.summary[CheckStatus.PASS.value]

    @property
    def overall_status(self) -> CheckStatus:
        counts = self.summary
        if counts[CheckStatus.FAIL.value]:
            return CheckStatus.FAIL
        if counts[CheckStatus.WARN.value]:
            return CheckStatus.WARN
        return CheckStatus.PASS

    @property
    def exit_code(self) -> int:
        return {CheckStatus.PASS: 0, CheckStatus.WARN: 1, CheckStatus.FAIL: 2}[self.overall_status]


class LaneRunResult(BaseModel):
    """Outcome of one lane execution. A failed lane is data, not an error."""

    lane: str
    status: LaneStatus
    exit_code: int
    output: str = Field(default="", description="Combined stdout/stderr in production order.")
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is LaneStatus.SUCCESS


class GeneratedSummary(BaseModel):
    files: list[Path] = Field(default_factory=list)
    env_file: Path
    keys: int = Field(..., ge=0)
    unchanged: list[Path] = Field(default_factory=list)

    def __str__(self) -> str:
        lines = ["Generated files:"]
        for path in self.files:
            suffix = " (unchanged)" if path in self.unchanged else ""
            lines.append(f"- {path}{suffix}")
        lines.append(f"{self.keys} keys written to {self.env_file.name}")
        return "\n".join(lines)
