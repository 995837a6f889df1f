"""Page navigation as a pure state machine.

Every user action and every fetch completion is an event. ``transition``
maps ``(state, event)`` to a new state plus the fetches (effects) that the
new state needs. Fetch completions carry the request id and key they were
issued for; anything not matching the latest request of its role is
dropped, so a slow response can never overwrite a newer selection.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable

import structlog

from scanboard.aggregation import compute_fleet_stats, filter_by_name, filter_by_severity
from scanboard.models import FleetStats, ProjectSummary, Severity, Vulnerability

log = structlog.get_logger("scanboard.navigation")


class Page(Enum):
    DASHBOARD = "dashboard"
    PROJECTS = "projects"
    PROJECT_DETAIL = "project-detail"


@dataclass(frozen=True)
class NavigationState:
    page: Page = Page.DASHBOARD
    selected_project: str | None = None
    selected_filename: str | None = None
    selected_severity: Severity | None = None
    search_query: str = ""


@dataclass(frozen=True)
class ViewState:
    nav: NavigationState = field(default_factory=NavigationState)
    fetch_enabled: bool = False

    projects: tuple[ProjectSummary, ...] = ()
    error: str | None = None
    loading_projects: bool = False

    project_details: ProjectSummary | None = None
    loading_project: bool = False

    vulnerabilities: tuple[Vulnerability, ...] = ()
    loading_scan: bool = False

    # latest request id issued per loader role; None when nothing is pending
    projects_request: int | None = None
    project_request: int | None = None
    scan_request: int | None = None
    last_request_id: int = 0

    @property
    def fleet_stats(self) -> FleetStats:
        return compute_fleet_stats(self.projects)

    @property
    def filtered_projects(self):
        return filter_by_name(self.projects, self.nav.search_query)

    @property
    def severity_panel(self) -> list[ProjectSummary]:
        return filter_by_severity(self.projects, self.nav.selected_severity)

    @property
    def detail_ready(self) -> bool:
        """True once details for the current selection have loaded."""
        return (
            self.nav.page is Page.PROJECT_DETAIL
            and not self.loading_project
            and self.project_details is not None
        )

    @property
    def scan_panel_open(self) -> bool:
        return self.nav.page is Page.PROJECT_DETAIL and self.nav.selected_filename is not None

    @property
    def status(self) -> str:
        if self.loading_projects:
            return "loading"
        if self.error:
            return f"error: {self.error}"
        return "ready"


def initial_state(fetch_enabled: bool) -> ViewState:
    return ViewState(fetch_enabled=fetch_enabled)


# --- events ---------------------------------------------------------------


@dataclass(frozen=True)
class Mounted:
    pass


@dataclass(frozen=True)
class ShowProjects:
    pass


@dataclass(frozen=True)
class ShowDashboard:
    pass


@dataclass(frozen=True)
class SelectProject:
    project_name: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class SelectScan:
    report_filename: str


@dataclass(frozen=True)
class CloseScan:
    pass


@dataclass(frozen=True)
class ToggleSeverity:
    severity: Severity


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class ProjectsLoaded:
    request_id: int
    projects: tuple[ProjectSummary, ...]


@dataclass(frozen=True)
class ProjectsFailed:
    request_id: int
    message: str


@dataclass(frozen=True)
class ProjectDetailLoaded:
    project_name: str
    request_id: int
    details: ProjectSummary | None


@dataclass(frozen=True)
class ScanDetailLoaded:
    report_filename: str
    request_id: int
    vulnerabilities: tuple[Vulnerability, ...]


# --- effects --------------------------------------------------------------


@dataclass(frozen=True)
class LoadProjectList:
    request_id: int


@dataclass(frozen=True)
class LoadProjectDetail:
    project_name: str
    request_id: int


@dataclass(frozen=True)
class LoadScanDetail:
    report_filename: str
    request_id: int


@dataclass(frozen=True)
class Transition:
    state: ViewState
    effects: tuple = ()


def transition(state: ViewState, event) -> Transition:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown navigation event: {event!r}")
    return handler(state, event)


def _nav(state: ViewState, **changes) -> ViewState:
    return replace(state, nav=replace(state.nav, **changes))


def _unchanged(state: ViewState) -> Transition:
    return Transition(state)


def _on_mounted(state: ViewState, event: Mounted) -> Transition:
    if not state.fetch_enabled:
        return _unchanged(state)
    request_id = state.last_request_id + 1
    state = replace(
        state,
        loading_projects=True,
        projects_request=request_id,
        last_request_id=request_id,
    )
    return Transition(state, (LoadProjectList(request_id),))


def _on_show_projects(state: ViewState, event: ShowProjects) -> Transition:
    if state.nav.page is not Page.DASHBOARD:
        return _unchanged(state)
    return Transition(_nav(state, page=Page.PROJECTS))


def _on_show_dashboard(state: ViewState, event: ShowDashboard) -> Transition:
    if state.nav.page is not Page.PROJECTS:
        return _unchanged(state)
    return Transition(_nav(state, page=Page.DASHBOARD))


def _on_select_project(state: ViewState, event: SelectProject) -> Transition:
    if not event.project_name or state.nav.page is Page.PROJECT_DETAIL:
        return _unchanged(state)

    # Nothing from a previously viewed project may survive into this one.
    state = replace(
        _nav(
            state,
            page=Page.PROJECT_DETAIL,
            selected_project=event.project_name,
            selected_filename=None,
        ),
        project_details=None,
        vulnerabilities=(),
        loading_scan=False,
        scan_request=None,
    )
    if not state.fetch_enabled:
        return Transition(replace(state, loading_project=False, project_request=None))

    request_id = state.last_request_id + 1
    state = replace(
        state,
        loading_project=True,
        project_request=request_id,
        last_request_id=request_id,
    )
    return Transition(state, (LoadProjectDetail(event.project_name, request_id),))


def _on_back(state: ViewState, event: Back) -> Transition:
    if state.nav.page is not Page.PROJECT_DETAIL:
        return _unchanged(state)
    state = replace(
        _nav(state, page=Page.PROJECTS, selected_project=None, selected_filename=None),
        project_details=None,
        loading_project=False,
        project_request=None,
        vulnerabilities=(),
        loading_scan=False,
        scan_request=None,
    )
    return Transition(state)


def _on_select_scan(state: ViewState, event: SelectScan) -> Transition:
    if state.nav.page is not Page.PROJECT_DETAIL or not event.report_filename:
        return _unchanged(state)
    if event.report_filename == state.nav.selected_filename:
        return _unchanged(state)

    state = replace(
        _nav(state, selected_filename=event.report_filename),
        vulnerabilities=(),
    )
    if not state.fetch_enabled:
        return Transition(replace(state, loading_scan=False, scan_request=None))

    request_id = state.last_request_id + 1
    state = replace(
        state,
        loading_scan=True,
        scan_request=request_id,
        last_request_id=request_id,
    )
    return Transition(state, (LoadScanDetail(event.report_filename, request_id),))


def _on_close_scan(state: ViewState, event: CloseScan) -> Transition:
    if state.nav.selected_filename is None:
        return _unchanged(state)
    state = replace(
        _nav(state, selected_filename=None),
        vulnerabilities=(),
        loading_scan=False,
        scan_request=None,
    )
    return Transition(state)


def _on_toggle_severity(state: ViewState, event: ToggleSeverity) -> Transition:
    if state.nav.page is not Page.DASHBOARD:
        return _unchanged(state)
    if state.nav.selected_severity is event.severity:
        return Transition(_nav(state, selected_severity=None))
    return Transition(_nav(state, selected_severity=event.severity))


def _on_search(state: ViewState, event: Search) -> Transition:
    return Transition(_nav(state, search_query=event.query))


def _on_projects_loaded(state: ViewState, event: ProjectsLoaded) -> Transition:
    if event.request_id != state.projects_request:
        log.debug("navigation.stale_response", role="projects", request_id=event.request_id)
        return _unchanged(state)
    state = replace(
        state,
        projects=tuple(event.projects),
        error=None,
        loading_projects=False,
        projects_request=None,
    )
    return Transition(state)


def _on_projects_failed(state: ViewState, event: ProjectsFailed) -> Transition:
    if event.request_id != state.projects_request:
        log.debug("navigation.stale_response", role="projects", request_id=event.request_id)
        return _unchanged(state)
    state = replace(
        state,
        projects=(),
        error=event.message,
        loading_projects=False,
        projects_request=None,
    )
    return Transition(state)


def _on_project_detail_loaded(state: ViewState, event: ProjectDetailLoaded) -> Transition:
    if (
        event.request_id != state.project_request
        or event.project_name != state.nav.selected_project
    ):
        log.debug(
            "navigation.stale_response",
            role="project_detail",
            project=event.project_name,
            request_id=event.request_id,
        )
        return _unchanged(state)
    state = replace(
        state,
        project_details=event.details,
        loading_project=False,
        project_request=None,
    )
    return Transition(state)


def _on_scan_detail_loaded(state: ViewState, event: ScanDetailLoaded) -> Transition:
    if (
        event.request_id != state.scan_request
        or event.report_filename != state.nav.selected_filename
    ):
        log.debug(
            "navigation.stale_response",
            role="scan_detail",
            report=event.report_filename,
            request_id=event.request_id,
        )
        return _unchanged(state)
    state = replace(
        state,
        vulnerabilities=tuple(event.vulnerabilities),
        loading_scan=False,
        scan_request=None,
    )
    return Transition(state)


_HANDLERS: dict[type, Callable[[ViewState, object], Transition]] = {
    Mounted: _on_mounted,
    ShowProjects: _on_show_projects,
    ShowDashboard: _on_show_dashboard,
    SelectProject: _on_select_project,
    Back: _on_back,
    SelectScan: _on_select_scan,
    CloseScan: _on_close_scan,
    ToggleSeverity: _on_toggle_severity,
    Search: _on_search,
    ProjectsLoaded: _on_projects_loaded,
    ProjectsFailed: _on_projects_failed,
    ProjectDetailLoaded: _on_project_detail_loaded,
    ScanDetailLoaded: _on_scan_detail_loaded,
}
