from __future__ import annotations

import sys

import pytest

from adapters.process import SubprocessRunner
from core.config import AppSettings
from core.domain.lanes import KnownLane
from core.domain.models import LaneStatus
from core.errors import InvocationError, NotFoundError, ValidationError
from core.services.lanes import lane_command, run_lane


def test_default_lane_command(settings):
    assert lane_command("beta", settings) == ["bundle", "exec", "fastlane", "ios", "beta"]


def test_lane_command_without_platform():
    settings = AppSettings(_env_file=None, login_shell=None, fastlane_platform="")
    assert lane_command("beta", settings) == ["bundle", "exec", "fastlane", "beta"]


def test_failed_lane_is_a_result(project_dir, runner, settings):
    runner.add("fastlane", "beta", exit_code=2, output="[12:00:00]: Build failed: code signing error\n")

    result = run_lane(project_dir, "beta", settings=settings, runner=runner)

    assert result.status is LaneStatus.FAILED
    assert not result.succeeded
    assert result.exit_code == 2
    assert "code signing error" in result.output
    call = runner.calls[0]
    assert call["cwd"] == project_dir.resolve()
    assert call["merge_stderr"] is True


def test_successful_lane_streams_output(project_dir, runner, settings):
    runner.add("fastlane", "validate_config", output="step 1\nstep 2\n")
    seen: list[str] = []

    result = run_lane(project_dir, "validate_config", settings=settings, runner=runner, on_output=seen.append)

    assert result.succeeded
    assert result.exit_code == 0
    assert seen == ["step 1", "step 2"]


def test_custom_lane_names_are_accepted(project_dir, runner, settings):
    runner.add("fastlane", "my_custom_lane")
    assert not KnownLane.is_known("my_custom_lane")
    assert run_lane(project_dir, "my_custom_lane", settings=settings, runner=runner).succeeded


def test_timeout_falls_back_to_settings(project_dir, runner):
    settings = AppSettings(_env_file=None, login_shell=None, lane_timeout_seconds=90)
    runner.add("fastlane", "beta")

    run_lane(project_dir, "beta", settings=settings, runner=runner)
    run_lane(project_dir, "beta", settings=settings, runner=runner, timeout=5)

    assert [call["timeout"] for call in runner.calls] == [90, 5]


def test_timed_out_lane_is_failed(project_dir, runner, settings):
    runner.add("fastlane", "release", exit_code=-9, timed_out=True)
    result = run_lane(project_dir, "release", settings=settings, runner=runner)
    assert result.status is LaneStatus.FAILED
    assert result.timed_out


def test_fastlane_missing(project_dir, runner, settings):
    with pytest.raises(InvocationError) as info:
        run_lane(project_dir, "beta", settings=settings, runner=runner)
    assert str(info.value).startswith("run lane failed:")


def test_blank_lane_name(project_dir, runner, settings):
    with pytest.raises(ValidationError):
        run_lane(project_dir, "  ", settings=settings, runner=runner)


def test_missing_project(tmp_path, runner, settings):
    with pytest.raises(NotFoundError):
        run_lane(tmp_path / "missing", "beta", settings=settings, runner=runner)


def test_real_process_exit_code_and_order(project_dir):
    script = (
        "import sys\n"
        "lane = sys.argv[1]\n"
        "print('running ' + lane, flush=True)\n"
        "print('Build failed: code signing error', file=sys.stderr, flush=True)\n"
        "print('done', flush=True)\n"
        "sys.exit(2)\n"
    )
    settings = AppSettings(
        _env_file=None,
        login_shell=None,
        fastlane_command=[sys.executable, "-c", script],
        fastlane_platform="",
    )

    result = run_lane(project_dir, "beta", settings=settings, runner=SubprocessRunner(settings))

    assert result.status is LaneStatus.FAILED
    assert result.exit_code == 2
    assert result.output.splitlines() == ["running beta", "Build failed: code signing error", "done"]


def test_real_process_missing_fastlane(project_dir):
    settings = AppSettings(
        _env_file=None,
        login_shell=None,
        fastlane_command=["fastlane-desk-no-such-bundle"],
    )
    with pytest.raises(InvocationError):
        run_lane(project_dir, "beta", settings=settings, runner=SubprocessRunner(settings))


def test_missing_fastlane_behind_login_shell(project_dir):
    settings = AppSettings(
        _env_file=None,
        login_shell="/bin/sh",
        fastlane_command=["fastlane-desk-no-such-bundle"],
    )
    with pytest.raises(InvocationError) as info:
        run_lane(project_dir, "dev", settings=settings, runner=SubprocessRunner(settings))
    assert info.value.operation == "run lane"
    assert "fastlane-desk-no-such-bundle" in info.value.message
