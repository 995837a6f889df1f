"""Click-based CLI interface for ScanBoard."""

import sys

import click
import structlog

from scanboard.client import ScanboardClient
from scanboard.config import LOG_LEVELS, load_config
from scanboard.dashboard import Dashboard
from scanboard.errors import ConfigError
from scanboard.loader import RemoteDataLoader
from scanboard.logging import setup_logging
from scanboard.models import Severity
from scanboard.navigation import (
    Back,
    CloseScan,
    Mounted,
    Page,
    Search,
    SelectProject,
    SelectScan,
    ShowDashboard,
    ShowProjects,
    ToggleSeverity,
)
from scanboard.report import render_json, render_page

log = structlog.get_logger("scanboard.cli")

SEVERITY_CHOICES = [s.value for s in Severity]
SEVERITY_KEYS = {"c": Severity.CRITICAL, "h": Severity.HIGH, "m": Severity.MEDIUM, "l": Severity.LOW}


def _build_dashboard(ctx, mount: bool = True) -> Dashboard:
    """Create the dashboard; ``mount`` also fetches the project list."""
    config = ctx.obj["config"]
    client = None
    if config.api_base:
        client = ScanboardClient(config.api_base, timeout=config.timeout)
    dash = Dashboard(RemoteDataLoader(client))
    if mount:
        dash.start()
    return dash


def _emit(ctx, dash: Dashboard, fmt: str) -> None:
    if fmt == "json":
        click.echo(render_json(dash.state))
    else:
        render_page(dash.state, api_base=ctx.obj["config"].api_base)


@click.group()
@click.version_option(package_name="scanboard")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .scanboard.yml config file.")
@click.option("--api-base", type=str, default=None,
              help="Backend base URL (overrides config and SCANBOARD_API_BASE).")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None)
@click.pass_context
def cli(ctx, config_path, api_base, log_level):
    """ScanBoard - vulnerability scan results by project and image."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path=config_path, project_root=".")
    except (FileNotFoundError, ConfigError) as exc:
        raise click.UsageError(str(exc)) from exc

    if api_base:
        config.api_base = api_base.rstrip("/") or None
    if log_level:
        config.log_level = log_level.upper()

    setup_logging(config.log_level, config.log_format)
    ctx.obj["config"] = config


@cli.command()
@click.option("--severity", type=click.Choice(SEVERITY_CHOICES, case_sensitive=False), default=None,
              help="List the projects that have findings at this severity.")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def dashboard(ctx, severity, fmt):
    """Show fleet-wide totals and the severity histogram."""
    dash = _build_dashboard(ctx)
    if severity:
        dash.dispatch(ToggleSeverity(Severity.parse(severity)))
    _emit(ctx, dash, fmt)
    if dash.state.error:
        sys.exit(1)


@cli.command()
@click.option("--search", type=str, default="", help="Case-insensitive project name filter.")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def projects(ctx, search, fmt):
    """List projects, optionally filtered by name."""
    dash = _build_dashboard(ctx)
    dash.dispatch(ShowProjects())
    dash.dispatch(Search(search))
    _emit(ctx, dash, fmt)
    if dash.state.error:
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.option("--scan", "report_filename", type=str, default=None,
              help="Report filename to open in the vulnerability panel.")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def project(ctx, name, report_filename, fmt):
    """Show one project's images, optionally drilling into a scan."""
    dash = _build_dashboard(ctx, mount=False)
    if not dash.loader.enabled:
        raise click.UsageError("No API base configured. Use --api-base or SCANBOARD_API_BASE.")

    dash.dispatch(ShowProjects())
    dash.dispatch(SelectProject(name))
    if report_filename and dash.state.detail_ready:
        dash.dispatch(SelectScan(report_filename))
    _emit(ctx, dash, fmt)
    if not dash.state.detail_ready:
        sys.exit(1)


@cli.command()
@click.pass_context
def browse(ctx):
    """Walk through the dashboard interactively."""
    dash = _build_dashboard(ctx)
    api_base = ctx.obj["config"].api_base
    while True:
        render_page(dash.state, api_base=api_base)
        command = click.prompt(_prompt_for(dash.state.nav.page), default="q", show_default=False)
        if not browse_step(dash, command.strip()):
            break


def _prompt_for(page: Page) -> str:
    if page is Page.DASHBOARD:
        return "[p]rojects, severity [c/h/m/l], <n> open, [r]eload, [q]uit"
    if page is Page.PROJECTS:
        return "/<text> search, <n> open, [b]ack, [q]uit"
    return "<n> scan, [x] close scan, [b]ack, [q]uit"


def browse_step(dash: Dashboard, command: str) -> bool:
    """Apply one interactive command; False means quit."""
    state = dash.state
    page = state.nav.page

    if command == "q":
        return False
    if page is Page.DASHBOARD:
        if command == "p":
            dash.dispatch(ShowProjects())
        elif command == "r":
            dash.dispatch(Mounted())
        elif command.lower() in SEVERITY_KEYS:
            dash.dispatch(ToggleSeverity(SEVERITY_KEYS[command.lower()]))
        elif command.isdigit():
            _open_project(dash, state.severity_panel, int(command))
    elif page is Page.PROJECTS:
        if command == "b":
            dash.dispatch(ShowDashboard())
        elif command.startswith("/"):
            dash.dispatch(Search(command[1:]))
        elif command.isdigit():
            _open_project(dash, state.filtered_projects, int(command))
    else:
        if command == "b":
            dash.dispatch(Back())
        elif command == "x":
            dash.dispatch(CloseScan())
        elif command.isdigit() and state.detail_ready:
            images = state.project_details.images
            idx = int(command)
            if 1 <= idx <= len(images):
                dash.dispatch(SelectScan(images[idx - 1].report_filename))
    return True


def _open_project(dash: Dashboard, listed, idx: int) -> None:
    if 1 <= idx <= len(listed):
        dash.dispatch(SelectProject(listed[idx - 1].project_name))
    else:
        log.debug("cli.selection_out_of_range", index=idx, available=len(listed))
