from __future__ import annotations

import pytest

from core.domain.models import IdentityResult, ProjectConfig, ScanResult, SigningStyle
from core.errors import ValidationError
from core.session import ProjectSession, diff_identity


def _scan(**overrides) -> ScanResult:
    values = {
        "project_name": "MyApp",
        "workspace": "MyApp.xcworkspace",
        "xcodeproj": "MyApp.xcodeproj",
        "schemes": ["MyApp", "MyApp-Dev", "Pods-MyApp"],
        "bundle_id_dev": "com.example.myapp",
        "bundle_id_dis": "com.example.myapp",
        "team_id": "ABCD123456",
    }
    values.update(overrides)
    return ScanResult(**values)


def test_patch_accepts_both_spellings():
    session = ProjectSession()
    session.patch("teamId", "ABCD123456")
    session.patch("scheme_dev", "MyApp-Dev")
    session.patch("enableSwiftlint", "true")
    session.patch("signingStyle", "manual")

    assert session.config.team_id == "ABCD123456"
    assert session.config.scheme_dev == "MyApp-Dev"
    assert session.config.enable_swiftlint is True
    assert session.config.signing_style is SigningStyle.MANUAL


def test_patch_rejects_unknown_field():
    session = ProjectSession()
    with pytest.raises(ValidationError, match="unknown config field"):
        session.patch("favouriteColor", "blue")


def test_patch_many_is_all_or_nothing():
    session = ProjectSession(ProjectConfig(scheme_dev="Old"))
    with pytest.raises(ValidationError):
        session.patch_many({"scheme_dev": "New", "enable_tests": "not-a-bool"})
    assert session.config.scheme_dev == "Old"
    assert session.config.enable_tests is True


def test_apply_scan_merges_suggestions():
    session = ProjectSession(ProjectConfig(project_path="/work/MyApp", pgyer_api_key="secret"))

    pair = session.apply_scan(_scan())

    config = session.config
    assert (pair.dev, pair.dis) == ("MyApp-Dev", "MyApp")
    assert config.workspace == "MyApp.xcworkspace"
    assert config.scheme_dev == "MyApp-Dev"
    assert config.scheme_dis == "MyApp"
    assert config.team_id == "ABCD123456"
    # Fields the scan knows nothing about are left alone.
    assert config.project_path == "/work/MyApp"
    assert config.pgyer_api_key == "secret"
    assert session.main_scheme == "MyApp"
    assert session.available_schemes() == ["MyApp", "MyApp-Dev"]
    assert session.available_schemes(hide_third_party=False) == ["MyApp", "MyApp-Dev", "Pods-MyApp"]


def test_apply_scan_without_schemes_clears_absent_values():
    session = ProjectSession(ProjectConfig(workspace="Old.xcworkspace", scheme_dev="Old"))
    session.apply_scan(_scan(workspace=None, schemes=[], bundle_id_dev=None, bundle_id_dis=None, team_id=None))
    assert session.config.workspace == ""
    assert session.config.scheme_dev == ""
    assert session.main_scheme == ""


def test_apply_identity_reports_diff():
    session = ProjectSession(
        ProjectConfig(bundle_id_dev="com.example.old", bundle_id_dis="com.example.myapp", team_id="ABCD123456")
    )
    identity = IdentityResult(
        bundle_id_dev="com.example.myapp.dev",
        bundle_id_dis="com.example.myapp",
        team_id="WXYZ987654",
    )

    diff = session.apply_identity(identity)

    assert diff == [
        "bundleIdDev: com.example.old -> com.example.myapp.dev",
        "teamId: ABCD123456 -> WXYZ987654",
    ]
    assert session.config.team_id == "WXYZ987654"
    assert session.apply_identity(identity) == []


def test_unresolved_team_keeps_configured_team():
    config = ProjectConfig(team_id="ABCD123456")
    identity = IdentityResult(bundle_id_dev="a.b", bundle_id_dis="a.b")

    assert diff_identity(config, identity) == ["bundleIdDev: - -> a.b", "bundleIdDis: - -> a.b"]

    session = ProjectSession(config)
    session.apply_identity(identity)
    assert session.config.team_id == "ABCD123456"


def test_lock_main_scheme_uses_suggested_main():
    session = ProjectSession()
    session.remember_scan(_scan())

    pair = session.lock_main_scheme()

    assert (pair.dev, pair.dis) == ("MyApp-Dev", "MyApp")
    assert session.config.scheme_dis == "MyApp"
    assert session.config.workspace == ""


def test_lock_main_scheme_without_scan():
    with pytest.raises(ValidationError):
        ProjectSession().lock_main_scheme()
