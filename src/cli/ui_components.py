"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets several commands reuse the same tables and panels.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.lanes import KnownLane
from core.domain.models import (
    CheckStatus,
    DoctorReport,
    LaneRunResult,
    ProjectConfig,
    ScanResult,
)
from core.services.classifier import is_third_party

_STATUS_STYLE: dict[CheckStatus, str] = {
    CheckStatus.PASS: "green",
    CheckStatus.WARN: "yellow",
    CheckStatus.FAIL: "red",
}


def print_banner(console: Console) -> None:
    """Print the welcome banner.

    Why here:
    - Avoids circular imports (main <-> doctor).
    - Non-interactive modes can skip it.
    """

    title = Text("fastlane-desk", style="bold cyan")
    subtitle = Text("Scan • Configure • Run lanes", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_scan_table(
    scan: ScanResult,
    schemes: list[str],
    *,
    dev: str,
    dis: str,
    main: str,
) -> Table:
    hidden = len(scan.schemes) - len(schemes)
    caption = f"{hidden} third-party scheme(s) hidden" if hidden else None
    table = Table(title=f"Schemes of {scan.project_name}", caption=caption)
    table.add_column("Scheme", style="cyan", no_wrap=True)
    table.add_column("Role", style="white")
    table.add_column("Third-party", style="dim")
    for scheme in schemes:
        roles = [label for label, value in (("main", main), ("dev", dev), ("dis", dis)) if value == scheme]
        table.add_row(
            scheme,
            ", ".join(roles),
            "yes" if is_third_party(scheme, scan.project_name) else "",
        )
    return table


def build_scan_panel(scan: ScanResult) -> Panel:
    body = Text()
    body.append(f"workspace: {scan.workspace or '-'}\n")
    body.append(f"xcodeproj: {scan.xcodeproj or '-'}\n")
    body.append(f"bundle id: {scan.bundle_id_dev or '-'}\n")
    body.append(f"team:      {scan.team_id or '-'}")
    if not scan.schemes:
        body.append("\n\nNo schemes found; set schemeDev/schemeDis by hand.", style="yellow")
    return Panel(body, title=Text(scan.project_name, style="bold"), border_style="cyan")


def build_config_table(config: ProjectConfig) -> Table:
    table = Table(title="Project profile")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, info in ProjectConfig.model_fields.items():
        value = getattr(config, name)
        if isinstance(value, bool):
            shown = "true" if value else "false"
        elif hasattr(value, "value"):
            shown = str(value.value)
        else:
            shown = str(value)
        table.add_row(info.alias or name, shown)
    return table


def build_identity_panel(diff: list[str]) -> Panel:
    if not diff:
        return Panel(Text("No changes.", style="dim"), title="Identity", border_style="green")
    body = Text("\n".join(diff))
    return Panel(body, title="Identity changes", border_style="yellow")


def build_doctor_table(report: DoctorReport) -> Table:
    table = Table(title="fastlane-desk Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    table.add_column("Suggestion", style="yellow")
    for check in report.checks:
        style = _STATUS_STYLE[check.status]
        table.add_row(
            check.name,
            Text(check.status.value.upper(), style=style),
            check.detail,
            check.suggestion or "",
        )
    return table


def build_lane_panel(result: LaneRunResult) -> Panel:
    style = "green" if result.succeeded else "red"
    title = Text(f"[{result.status.value}] {result.lane} (exit={result.exit_code})", style=f"bold {style}")
    body = Text()
    if result.timed_out:
        body.append("Lane was killed after the timeout.\n", style="red")
    tail = result.output.rstrip().splitlines()[-20:]
    body.append("\n".join(tail) if tail else "(no output)")
    return Panel(body, title=title, border_style=style)


def build_lanes_table() -> Table:
    table = Table(title="Known lanes")
    table.add_column("Lane", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")
    for lane in KnownLane:
        table.add_row(lane.value, lane.description())
    return table
