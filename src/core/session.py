"""Orchestration session.

One `ProjectSession` owns the live `ProjectConfig` of one open project. Core
operations stay pure functions of their inputs; the session is where their
results are merged back, field by field, with last-writer-wins semantics.
"""

from __future__ import annotations

from typing import Any

import pydantic

from core.domain.models import IdentityResult, ProjectConfig, ScanResult, SchemePair
from core.errors import ValidationError
from core.services.classifier import filter_schemes, lock_main_scheme, suggest_main, suggest_pair


def diff_identity(config: ProjectConfig, identity: IdentityResult) -> list[str]:
    """Describe what applying `identity` would change, one line per field.

    A resolved team of None keeps the configured team, so it is not a change.
    """

    def show(value: str | None) -> str:
        return value or "-"

    diff: list[str] = []
    new_dev = identity.bundle_id_dev or ""
    if new_dev != config.bundle_id_dev:
        diff.append(f"bundleIdDev: {show(config.bundle_id_dev)} -> {show(new_dev)}")
    new_dis = identity.bundle_id_dis or ""
    if new_dis != config.bundle_id_dis:
        diff.append(f"bundleIdDis: {show(config.bundle_id_dis)} -> {show(new_dis)}")
    if identity.team_id and identity.team_id != config.team_id:
        diff.append(f"teamId: {show(config.team_id)} -> {show(identity.team_id)}")
    return diff


class ProjectSession:
    """Holder of the mutable config plus the last scan."""

    def __init__(self, config: ProjectConfig | None = None) -> None:
        self.config = config or ProjectConfig()
        self.scan: ScanResult | None = None
        self.main_scheme = ""

    def patch(self, field: str, value: Any) -> None:
        """Overwrite one field; on a bad name or value nothing changes."""

        try:
            name = ProjectConfig.field_for(field)
        except KeyError:
            raise ValidationError(f"unknown config field: {field}", operation="patch") from None
        try:
            setattr(self.config, name, value)
        except pydantic.ValidationError as exc:
            first = exc.errors()[0]["msg"] if exc.errors() else str(exc)
            raise ValidationError(f"invalid value for {field}: {first}", operation="patch") from exc

    def patch_many(self, values: dict[str, Any]) -> None:
        """Apply several patches as a unit."""

        staged = self.config.model_copy()
        previous, self.config = self.config, staged
        try:
            for field, value in values.items():
                self.patch(field, value)
        except ValidationError:
            self.config = previous
            raise

    def remember_scan(self, scan: ScanResult) -> None:
        """Keep the scan for scheme listings without touching the config."""

        self.scan = scan
        self.main_scheme = suggest_main(scan.schemes, scan.project_name)

    def apply_scan(self, scan: ScanResult) -> SchemePair:
        """Merge scan suggestions into the config and remember the scan."""

        self.remember_scan(scan)
        pair = suggest_pair(self.available_schemes())
        self.patch_many(
            {
                "workspace": scan.workspace or "",
                "xcodeproj": scan.xcodeproj or "",
                "scheme_dev": pair.dev,
                "scheme_dis": pair.dis,
                "bundle_id_dev": scan.bundle_id_dev or "",
                "bundle_id_dis": scan.bundle_id_dis or "",
                "team_id": scan.team_id or "",
            }
        )
        return pair

    def available_schemes(self, *, hide_third_party: bool = True) -> list[str]:
        if self.scan is None:
            return []
        return filter_schemes(
            self.scan.schemes,
            self.scan.project_name,
            hide_third_party=hide_third_party,
        )

    def apply_identity(self, identity: IdentityResult) -> list[str]:
        """Patch bundle ids (and the team when resolved); return the diff."""

        diff = diff_identity(self.config, identity)
        values: dict[str, Any] = {
            "bundle_id_dev": identity.bundle_id_dev or "",
            "bundle_id_dis": identity.bundle_id_dis or "",
        }
        if identity.team_id:
            values["team_id"] = identity.team_id
        self.patch_many(values)
        return diff

    def lock_main_scheme(self, main: str | None = None) -> SchemePair:
        main = main if main is not None else self.main_scheme
        pair = lock_main_scheme(self.available_schemes(), main)
        self.patch_many({"scheme_dev": pair.dev, "scheme_dis": pair.dis})
        self.main_scheme = main
        return pair
