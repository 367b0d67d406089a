"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli.ui_components import build_doctor_table
from core.config import AppSettings
from core.services import doctor_check

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and toolchain checks.")

_console = Console()


@app.command()
def run(
    project_path: Optional[Path] = typer.Argument(
        None,
        help="Project folder to check as well (optional).",
    ),
) -> None:
    """Run the toolchain checks and show recommended fixes.

    Exit code: 0 when everything passes, 1 with warnings, 2 with failures.
    """

    settings = AppSettings()
    report = doctor_check(project_path, settings=settings)

    _console.print(build_doctor_table(report))
    _console.print(f"\n{report.passed}/{len(report.checks)} checks passed.")

    if any(check.name == "CocoaPods" and check.status.value != "pass" for check in report.checks):
        _console.print(
            "\n[yellow]Note:[/yellow] CocoaPods is only needed when the project has a Podfile."
        )
    raise typer.Exit(code=report.exit_code)
