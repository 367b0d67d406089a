from __future__ import annotations

import pytest

from conftest import settings_json
from core.errors import NotFoundError, SchemeNotFoundError, ToolchainError, ValidationError
from core.services.identity import resolve_identity


def _add_scheme(runner, scheme: str, *, bundle_id: str, team: str = "") -> None:
    runner.add(
        "-showBuildSettings",
        scheme,
        output=settings_json(PRODUCT_BUNDLE_IDENTIFIER=bundle_id, DEVELOPMENT_TEAM=team),
    )


def test_distribution_team_wins(project_dir, runner, settings):
    _add_scheme(runner, "MyApp-Dev", bundle_id="com.example.myapp.dev", team="ABCD123456")
    _add_scheme(runner, "MyApp", bundle_id="com.example.myapp", team="WXYZ987654")

    result = resolve_identity(
        project_dir, None, "MyApp.xcodeproj", "MyApp-Dev", "MyApp", settings=settings, runner=runner
    )

    assert result.bundle_id_dev == "com.example.myapp.dev"
    assert result.bundle_id_dis == "com.example.myapp"
    assert result.team_id == "WXYZ987654"


def test_dev_team_used_when_distribution_has_none(project_dir, runner, settings):
    _add_scheme(runner, "MyApp-Dev", bundle_id="com.example.myapp.dev", team="ABCD123456")
    _add_scheme(runner, "MyApp", bundle_id="com.example.myapp")

    result = resolve_identity(
        project_dir, None, "MyApp.xcodeproj", "MyApp-Dev", "MyApp", settings=settings, runner=runner
    )

    assert result.team_id == "ABCD123456"


def test_same_scheme_is_probed_once(project_dir, runner, settings):
    _add_scheme(runner, "MyApp", bundle_id="com.example.myapp", team="ABCD123456")

    result = resolve_identity(project_dir, "", "", "MyApp", "MyApp", settings=settings, runner=runner)

    assert result.bundle_id_dev == result.bundle_id_dis == "com.example.myapp"
    assert len(runner.calls) == 1
    # Containers were rediscovered from disk.
    assert runner.calls[0]["argv"][-2:] == ["-project", "MyApp.xcodeproj"]


def test_unknown_scheme(project_dir, runner, settings):
    _add_scheme(runner, "MyApp", bundle_id="com.example.myapp")
    runner.add(
        "-showBuildSettings",
        "Ghost",
        exit_code=65,
        error_output='xcodebuild: error: The project named "MyApp" does not contain a scheme named "Ghost".',
    )

    with pytest.raises(SchemeNotFoundError) as info:
        resolve_identity(
            project_dir, None, "MyApp.xcodeproj", "Ghost", "MyApp", settings=settings, runner=runner
        )
    assert info.value.operation == "resolve identity"
    assert "Ghost" in str(info.value)


def test_xcodebuild_failure(project_dir, runner, settings):
    runner.add("-showBuildSettings", exit_code=74, error_output="xcodebuild: error: unable to read project")
    with pytest.raises(ToolchainError):
        resolve_identity(
            project_dir, None, "MyApp.xcodeproj", "MyApp", "MyApp", settings=settings, runner=runner
        )


def test_blank_scheme_is_rejected(project_dir, runner, settings):
    with pytest.raises(ValidationError):
        resolve_identity(project_dir, None, "MyApp.xcodeproj", " ", "MyApp", settings=settings, runner=runner)
    assert runner.calls == []


def test_missing_containers(tmp_path, runner, settings):
    with pytest.raises(NotFoundError):
        resolve_identity(tmp_path, None, None, "MyApp", "MyApp", settings=settings, runner=runner)
