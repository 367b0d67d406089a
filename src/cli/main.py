"""fastlane-desk command line.

Every command follows the same shape: open the project session (saved
profile or defaults), call one core operation, merge/render the result.
Failures of core operations print a single `<operation> failed: <reason>`
line and exit with code 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.text import Text

from cli import doctor
from cli.ui_components import (
    build_config_table,
    build_identity_panel,
    build_lane_panel,
    build_lanes_table,
    build_scan_panel,
    build_scan_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import ProjectConfig
from core.errors import FastlaneDeskError, NotFoundError, ValidationError
from core.logging_setup import configure_logging
from core.services import (
    generate_files,
    load_profile,
    resolve_identity,
    run_lane,
    save_profile,
    scan_project,
)
from core.session import ProjectSession

app = typer.Typer(
    no_args_is_help=True,
    help="Scan iOS projects, generate fastlane config and run lanes.",
)
profile_app = typer.Typer(no_args_is_help=True, help="Inspect and edit the saved project profile.")
app.add_typer(doctor.app, name="doctor")
app.add_typer(profile_app, name="profile")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr."),
    banner: bool = typer.Option(False, "--banner", help="Print the banner first."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    if banner:
        print_banner(_console)


def _fail(exc: FastlaneDeskError) -> typer.Exit:
    _err_console.print(Text(str(exc), style="red"))
    return typer.Exit(code=1)


def _open_session(project_path: Path, settings: AppSettings) -> ProjectSession:
    """Saved profile if there is one, defaults otherwise; path always current."""

    root = project_path.expanduser().resolve()
    try:
        config = load_profile(root, settings=settings)
    except NotFoundError:
        config = ProjectConfig(project_path=str(root))
    session = ProjectSession(config)
    session.patch("project_path", str(root))
    return session


@app.command()
def scan(
    project_path: Path = typer.Argument(..., help="iOS project folder."),
    all_schemes: bool = typer.Option(False, "--all-schemes", help="Show third-party schemes too."),
    save: bool = typer.Option(False, "--save", help="Merge suggestions into the saved profile."),
) -> None:
    """Discover workspace/project, schemes, bundle id and team."""

    settings = AppSettings()
    try:
        session = _open_session(project_path, settings)
        result = scan_project(session.config.project_path, settings=settings)
        pair = session.apply_scan(result)
    except FastlaneDeskError as exc:
        raise _fail(exc)

    _console.print(build_scan_panel(result))
    if result.schemes:
        schemes = session.available_schemes(hide_third_party=not all_schemes)
        _console.print(
            build_scan_table(result, schemes, dev=pair.dev, dis=pair.dis, main=session.main_scheme)
        )
        _console.print(f"Suggested: dev=[cyan]{pair.dev}[/cyan] dis=[cyan]{pair.dis}[/cyan]")

    if save:
        try:
            _console.print(save_profile(session.config, settings=settings))
        except FastlaneDeskError as exc:
            raise _fail(exc)


@app.command()
def identity(
    project_path: Path = typer.Argument(..., help="iOS project folder."),
    dev: Optional[str] = typer.Option(None, "--dev", help="Development scheme (default: profile)."),
    dis: Optional[str] = typer.Option(None, "--dis", help="Distribution scheme (default: profile)."),
    save: bool = typer.Option(False, "--save", help="Write the resolved identity to the profile."),
) -> None:
    """Resolve bundle ids and team for the dev/dis schemes and show the diff."""

    settings = AppSettings()
    try:
        session = _open_session(project_path, settings)
        if dev:
            session.patch("scheme_dev", dev)
        if dis:
            session.patch("scheme_dis", dis)
        config = session.config
        resolved = resolve_identity(
            config.project_path,
            config.workspace,
            config.xcodeproj,
            config.scheme_dev,
            config.scheme_dis,
            settings=settings,
        )
        diff = session.apply_identity(resolved)
        _console.print(build_identity_panel(diff))
        if save:
            _console.print(save_profile(session.config, settings=settings))
    except FastlaneDeskError as exc:
        raise _fail(exc)


@app.command()
def generate(project_path: Path = typer.Argument(..., help="iOS project folder.")) -> None:
    """Write fastlane/.env.fastlane from the saved profile."""

    settings = AppSettings()
    try:
        config = load_profile(project_path.expanduser().resolve(), settings=settings)
        summary = generate_files(config, settings=settings)
    except FastlaneDeskError as exc:
        raise _fail(exc)
    _console.print(str(summary), markup=False, highlight=False)


@app.command()
def lane(
    project_path: Path = typer.Argument(..., help="iOS project folder."),
    name: str = typer.Argument(..., help="Lane to run (any name, see `lanes`)."),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Kill the lane after N seconds."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not stream lane output."),
) -> None:
    """Run `bundle exec fastlane ios <lane>` in the project folder.

    The exit code mirrors the lane's.
    """

    settings = AppSettings()

    def echo(line: str) -> None:
        _console.print(line, markup=False, highlight=False)

    try:
        result = run_lane(
            project_path,
            name,
            settings=settings,
            timeout=timeout,
            on_output=None if quiet else echo,
        )
    except FastlaneDeskError as exc:
        raise _fail(exc)

    _console.print(build_lane_panel(result))
    if not result.succeeded:
        raise typer.Exit(code=result.exit_code if result.exit_code > 0 else 1)


@app.command()
def lanes() -> None:
    """List the known lanes (custom names are accepted too)."""

    _console.print(build_lanes_table())


@profile_app.command("show")
def profile_show(project_path: Path = typer.Argument(..., help="iOS project folder.")) -> None:
    """Print the saved profile."""

    settings = AppSettings()
    try:
        config = load_profile(project_path.expanduser().resolve(), settings=settings)
    except FastlaneDeskError as exc:
        raise _fail(exc)
    _console.print(build_config_table(config))


@profile_app.command("set")
def profile_set(
    project_path: Path = typer.Argument(..., help="iOS project folder."),
    assignments: List[str] = typer.Argument(..., help="field=value pairs (camelCase or snake_case)."),
) -> None:
    """Patch profile fields, e.g. `teamId=ABCD123456 enableSwiftlint=true`."""

    settings = AppSettings()
    try:
        session = _open_session(project_path, settings)
        values: dict[str, str] = {}
        for item in assignments:
            field, sep, value = item.partition("=")
            if not sep or not field.strip():
                raise ValidationError(f"expected field=value, got {item!r}", operation="patch")
            values[field.strip()] = value
        session.patch_many(values)
        _console.print(save_profile(session.config, settings=settings))
    except FastlaneDeskError as exc:
        raise _fail(exc)


@profile_app.command("lock-main")
def profile_lock_main(
    project_path: Path = typer.Argument(..., help="iOS project folder."),
    scheme: Optional[str] = typer.Argument(None, help="Main scheme (default: suggested)."),
) -> None:
    """Use the main scheme for distribution and a dev-looking sibling for dev."""

    settings = AppSettings()
    try:
        session = _open_session(project_path, settings)
        session.remember_scan(scan_project(session.config.project_path, settings=settings))
        pair = session.lock_main_scheme(scheme)
        _console.print(f"Main scheme locked: dev=[cyan]{pair.dev}[/cyan] dis=[cyan]{pair.dis}[/cyan]")
        _console.print(save_profile(session.config, settings=settings))
    except FastlaneDeskError as exc:
        raise _fail(exc)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
