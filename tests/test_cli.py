from __future__ import annotations

import json
import sys

import pytest
from typer.testing import CliRunner

from cli.main import app

cli = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # Keep a developer's .env and per-user settings out of the commands.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("FASTLANE_DESK_LOGIN_SHELL", "")
    for name in ("FASTLANE_DESK_FASTLANE_COMMAND", "FASTLANE_DESK_FASTLANE_PLATFORM"):
        monkeypatch.delenv(name, raising=False)


def test_lanes_lists_known_lanes():
    result = cli.invoke(app, ["lanes"])
    assert result.exit_code == 0
    assert "release_testflight" in result.output
    assert "validate_config" in result.output


def test_profile_set_then_show(project_dir):
    result = cli.invoke(
        app,
        ["profile", "set", str(project_dir), "teamId=ABCD123456", "enableSwiftlint=true", "scheme_dev=MyApp"],
    )
    assert result.exit_code == 0, result.output
    assert "Profile saved" in result.output

    data = json.loads((project_dir / ".fastlane-desktop" / "profile.json").read_text(encoding="utf-8"))
    assert data["teamId"] == "ABCD123456"
    assert data["enableSwiftlint"] is True
    assert data["schemeDev"] == "MyApp"
    assert data["projectPath"] == str(project_dir.resolve())

    shown = cli.invoke(app, ["profile", "show", str(project_dir)])
    assert shown.exit_code == 0
    assert "ABCD123456" in shown.output


def test_profile_set_rejects_bad_assignment(project_dir):
    result = cli.invoke(app, ["profile", "set", str(project_dir), "teamId"])
    assert result.exit_code == 1
    assert "patch failed" in result.output
    assert not (project_dir / ".fastlane-desktop").exists()


def test_profile_set_rejects_unknown_field(project_dir):
    result = cli.invoke(app, ["profile", "set", str(project_dir), "color=blue"])
    assert result.exit_code == 1
    assert "unknown config field" in result.output


def test_generate_without_profile(project_dir):
    result = cli.invoke(app, ["generate", str(project_dir)])
    assert result.exit_code == 1
    assert "load profile failed" in result.output


def test_generate_with_incomplete_profile(project_dir):
    cli.invoke(app, ["profile", "set", str(project_dir), "teamId=ABCD123456"])

    result = cli.invoke(app, ["generate", str(project_dir)])

    assert result.exit_code == 1
    assert "generate failed" in result.output
    assert not (project_dir / "fastlane").exists()


def test_generate_writes_env_file(project_dir):
    cli.invoke(
        app,
        ["profile", "set", str(project_dir), "xcodeproj=MyApp.xcodeproj", "schemeDev=MyApp", "schemeDis=MyApp"],
    )

    result = cli.invoke(app, ["generate", str(project_dir)])

    assert result.exit_code == 0, result.output
    assert "Generated files:" in result.output
    env_text = (project_dir / "fastlane" / ".env.fastlane").read_text(encoding="utf-8")
    assert "SCHEME_DIS=MyApp\n" in env_text


def test_lane_exit_code_mirrors_fastlane(project_dir, monkeypatch):
    script = "import sys\nprint('Build failed: code signing error')\nsys.exit(2)\n"
    monkeypatch.setenv("FASTLANE_DESK_FASTLANE_COMMAND", json.dumps([sys.executable, "-c", script]))
    monkeypatch.setenv("FASTLANE_DESK_FASTLANE_PLATFORM", "")

    result = cli.invoke(app, ["lane", str(project_dir), "beta"])

    assert result.exit_code == 2
    assert "code signing error" in result.output


def test_lane_in_missing_project(tmp_path):
    result = cli.invoke(app, ["lane", str(tmp_path / "missing"), "beta"])
    assert result.exit_code == 1
    assert "run lane failed" in result.output
