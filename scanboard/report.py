"""Page rendering - rich terminal views and JSON output."""

from __future__ import annotations

import json
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scanboard.aggregation import (
    BADGE_SEVERITIES,
    count_by_severity,
    severity_badges,
    severity_count,
    sort_by_severity,
)
from scanboard.models import ProjectSummary, Severity, SeverityCounts
from scanboard.navigation import Page, ViewState

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.UNKNOWN: "dim",
}


def _when(ts: datetime | None) -> str:
    return ts.strftime("%Y-%m-%d %H:%M") if ts else "-"


def _badges(counts: SeverityCounts) -> str:
    parts = [
        f"[{SEVERITY_COLORS[sev]}]{sev.value[0]}:{n}[/]" for sev, n in severity_badges(counts)
    ]
    return " ".join(parts)


def _project_table(title: str, projects) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Project", width=30)
    table.add_column("Scans", justify="right", width=6)
    table.add_column("Last scan", width=17)
    table.add_column("Total", justify="right", width=7)
    table.add_column("Severities", width=30)

    for idx, p in enumerate(projects, start=1):
        table.add_row(
            str(idx),
            escape(p.project_name),
            str(p.total_scans),
            _when(p.last_scan),
            str(p.total_vulnerabilities),
            _badges(p.severity_counts),
        )
    return table


def render_dashboard(state: ViewState, api_base: str | None = None, console: Console | None = None) -> None:
    console = console or Console()
    stats = state.fleet_stats

    console.print("\n[bold]Fleet overview[/]")
    console.print(
        f"Projects: {stats.total_projects} | Scans: {stats.total_scans} | "
        f"Vulnerabilities: {stats.total_vulnerabilities}"
    )

    parts = []
    for sev in BADGE_SEVERITIES:
        marker = "*" if state.nav.selected_severity is sev else ""
        parts.append(
            f"[{SEVERITY_COLORS[sev]}]{marker}{sev.value}: {severity_count(stats.severity_counts, sev)}[/]"
        )
    console.print(" | ".join(parts))
    console.print(f"API: {escape(api_base or 'not configured')} | Status: {escape(state.status)}")

    severity = state.nav.selected_severity
    if severity is not None:
        panel = state.severity_panel
        if panel:
            console.print()
            console.print(_project_table(f"Projects with {severity.value} findings ({len(panel)})", panel))
        else:
            console.print(f"\nNo projects with {severity.value} findings.")
    console.print()


def render_projects(state: ViewState, console: Console | None = None) -> None:
    console = console or Console()
    shown = state.filtered_projects

    console.print(f"\n[bold]Projects[/] {len(shown)} / {len(state.projects)}")
    if state.error:
        console.print(f"[bold red]Error:[/] {escape(state.error)}")

    if not shown:
        if state.loading_projects or state.error:
            return
        if state.nav.search_query.strip():
            console.print(f"No projects match '{escape(state.nav.search_query)}'.\n")
        else:
            console.print("No projects yet.\n")
        return

    console.print(_project_table("Projects", shown))
    console.print()


def render_project_detail(state: ViewState, console: Console | None = None) -> None:
    console = console or Console()

    if state.loading_project:
        console.print(f"\nLoading {escape(state.nav.selected_project or '')}...\n")
        return
    details = state.project_details
    if details is None:
        console.print(f"\n[bold red]Project not found:[/] {escape(state.nav.selected_project or '')}\n")
        return

    console.print(f"\n[bold]{escape(details.project_name)}[/] project details")
    console.print(
        f"Scans: {details.total_scans} | Vulnerabilities: {details.total_vulnerabilities} | "
        f"[{SEVERITY_COLORS[Severity.CRITICAL]}]CRITICAL: "
        f"{severity_count(details.severity_counts, Severity.CRITICAL)}[/] | "
        f"[{SEVERITY_COLORS[Severity.HIGH]}]HIGH: "
        f"{severity_count(details.severity_counts, Severity.HIGH)}[/]"
    )

    if not details.images:
        console.print("No scans found yet.\n")
    else:
        table = Table(title="Images and scans", show_lines=False)
        table.add_column("#", justify="right", width=4)
        table.add_column("Image", width=36)
        table.add_column("Report", width=30)
        table.add_column("Scanned", width=17)
        table.add_column("Total", justify="right", width=7)
        table.add_column("Severities", width=24)
        for idx, image in enumerate(details.images, start=1):
            table.add_row(
                str(idx),
                escape(image.image_name),
                escape(image.report_filename),
                _when(image.last_modified),
                str(image.total_vulnerabilities),
                _badges(image.severity_counts),
            )
        console.print(table)

    if state.scan_panel_open:
        _render_scan_panel(state, console)
    console.print()


def _render_scan_panel(state: ViewState, console: Console) -> None:
    console.print(f"\n[bold]Vulnerabilities:[/] {escape(state.nav.selected_filename or '')}")
    if state.loading_scan:
        console.print("Loading...")
        return
    if not state.vulnerabilities:
        console.print("No vulnerabilities found.")
        return

    table = Table(show_lines=True)
    table.add_column("Severity", width=10)
    table.add_column("ID", width=20)
    table.add_column("Package", width=24)
    table.add_column("Version", width=20)
    table.add_column("Title", width=40)

    for v in sort_by_severity(state.vulnerabilities):
        color = SEVERITY_COLORS[v.severity]
        version = escape(v.installed_version)
        if v.fixed_version:
            version += f" -> {escape(v.fixed_version)}"
        title = escape(v.display_title)
        if v.reference_url:
            title += f"\n[dim]{escape(v.reference_url)}[/]"
        table.add_row(
            f"[{color}]{v.severity.value}[/]", escape(v.id), escape(v.package_name), version, title
        )
    console.print(table)

    counts = count_by_severity(state.vulnerabilities)
    parts = [f"[{SEVERITY_COLORS[s]}]{s.value}: {counts[s]}[/]" for s in Severity if s in counts]
    console.print(f"[bold]Summary:[/] {len(state.vulnerabilities)} finding(s) | {' | '.join(parts)}")


def render_page(state: ViewState, api_base: str | None = None, console: Console | None = None) -> None:
    if state.nav.page is Page.DASHBOARD:
        render_dashboard(state, api_base, console)
    elif state.nav.page is Page.PROJECTS:
        render_projects(state, console)
    else:
        render_project_detail(state, console)


def _project_brief(p: ProjectSummary) -> dict:
    data = p.to_dict()
    data.pop("images")
    return data


def render_json(state: ViewState) -> str:
    """Serialize what the current page shows."""
    nav = state.nav
    output: dict = {
        "$schema": "scanboard-v1",
        "generated_at": datetime.now().isoformat(),
        "page": nav.page.value,
        "status": state.status,
    }

    if nav.page is Page.DASHBOARD:
        output["fleet"] = state.fleet_stats.to_dict()
        if nav.selected_severity is not None:
            output["severity_filter"] = {
                "severity": nav.selected_severity.value,
                "projects": [_project_brief(p) for p in state.severity_panel],
            }
    elif nav.page is Page.PROJECTS:
        output["search"] = nav.search_query
        output["total"] = len(state.projects)
        output["projects"] = [_project_brief(p) for p in state.filtered_projects]
    else:
        output["project"] = state.project_details.to_dict() if state.detail_ready else None
        if state.scan_panel_open:
            output["scan"] = {
                "report_filename": nav.selected_filename,
                "vulnerabilities": [v.to_dict() for v in state.vulnerabilities],
            }

    return json.dumps(output, indent=2)
