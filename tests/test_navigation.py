"""Tests for the page state machine."""

import pytest

from scanboard.models import ProjectSummary, Severity, Vulnerability
from scanboard.navigation import (
    Back,
    CloseScan,
    LoadProjectDetail,
    LoadProjectList,
    LoadScanDetail,
    Mounted,
    Page,
    ProjectDetailLoaded,
    ProjectsFailed,
    ProjectsLoaded,
    ScanDetailLoaded,
    Search,
    SelectProject,
    SelectScan,
    ShowDashboard,
    ShowProjects,
    ToggleSeverity,
    initial_state,
    transition,
)

PROJECTS = (
    ProjectSummary("acme-web", 1, 1, {Severity.CRITICAL: 1}),
    ProjectSummary("billing", 2, 2, {Severity.HIGH: 2}),
    ProjectSummary("acme-api", 1, 2, {Severity.CRITICAL: 1, Severity.HIGH: 1}),
)


def _run(state, *events):
    """Apply events in order, returning the final state and all effects."""
    effects = []
    for event in events:
        result = transition(state, event)
        state = result.state
        effects.extend(result.effects)
    return state, effects


def _loaded():
    state, effects = _run(initial_state(fetch_enabled=True), Mounted())
    state, _ = _run(state, ProjectsLoaded(effects[0].request_id, PROJECTS))
    return state


def _in_detail(name="acme-web"):
    state, effects = _run(_loaded(), ShowProjects(), SelectProject(name))
    details = next(p for p in PROJECTS if p.project_name == name)
    state, _ = _run(state, ProjectDetailLoaded(name, effects[0].request_id, details))
    return state


class TestMount:
    def test_mount_requests_project_list(self):
        state, effects = _run(initial_state(fetch_enabled=True), Mounted())
        assert effects == [LoadProjectList(1)]
        assert state.loading_projects
        assert state.status == "loading"

    def test_mount_without_backend_does_nothing(self):
        state, effects = _run(initial_state(fetch_enabled=False), Mounted())
        assert effects == []
        assert not state.loading_projects
        assert state.projects == ()

    def test_projects_loaded(self):
        state = _loaded()
        assert state.projects == PROJECTS
        assert state.status == "ready"
        assert state.fleet_stats.severity_counts == {Severity.CRITICAL: 2, Severity.HIGH: 3}

    def test_projects_failed(self):
        state, effects = _run(initial_state(fetch_enabled=True), Mounted())
        state, _ = _run(state, ProjectsFailed(effects[0].request_id, "API error: 502"))
        assert state.projects == ()
        assert state.error == "API error: 502"
        assert state.status == "error: API error: 502"

    def test_reload_clears_error(self):
        state, effects = _run(initial_state(fetch_enabled=True), Mounted())
        state, _ = _run(state, ProjectsFailed(effects[0].request_id, "boom"))
        state, effects = _run(state, Mounted())
        state, _ = _run(state, ProjectsLoaded(effects[0].request_id, PROJECTS))
        assert state.error is None

    def test_stale_project_list_ignored(self):
        state, first = _run(initial_state(fetch_enabled=True), Mounted())
        state, second = _run(state, Mounted())
        state, _ = _run(state, ProjectsLoaded(second[0].request_id, PROJECTS))
        state, _ = _run(state, ProjectsFailed(first[0].request_id, "late failure"))
        assert state.projects == PROJECTS
        assert state.error is None


class TestPageTransitions:
    def test_dashboard_to_projects_and_back(self):
        state, effects = _run(_loaded(), ShowProjects())
        assert state.nav.page is Page.PROJECTS
        assert effects == []
        state, _ = _run(state, ShowDashboard())
        assert state.nav.page is Page.DASHBOARD

    def test_select_project_is_entry_action(self):
        state, effects = _run(_loaded(), ShowProjects(), SelectProject("billing"))
        assert state.nav.page is Page.PROJECT_DETAIL
        assert state.nav.selected_project == "billing"
        assert effects == [LoadProjectDetail("billing", 2)]
        assert state.loading_project
        assert not state.detail_ready

    def test_detail_ready_after_load(self):
        state = _in_detail("billing")
        assert state.detail_ready
        assert state.project_details.project_name == "billing"

    def test_failed_detail_is_not_found(self):
        state, effects = _run(_loaded(), ShowProjects(), SelectProject("gone"))
        state, _ = _run(state, ProjectDetailLoaded("gone", effects[0].request_id, None))
        assert not state.loading_project
        assert state.project_details is None
        assert not state.detail_ready

    def test_back_tears_down_detail_state(self):
        state = _in_detail()
        state, effects = _run(state, SelectScan("acme-web-1.json"))
        vulns = (Vulnerability("CVE-1", "openssl", "1.0", Severity.HIGH),)
        state, _ = _run(state, ScanDetailLoaded("acme-web-1.json", effects[0].request_id, vulns))
        assert state.vulnerabilities == vulns

        state, _ = _run(state, Back())
        assert state.nav.page is Page.PROJECTS
        assert state.nav.selected_project is None
        assert state.project_details is None
        assert state.nav.selected_filename is None
        assert state.vulnerabilities == ()
        assert not state.loading_project
        assert not state.loading_scan

    def test_reentering_other_project_shows_nothing_stale(self):
        state, _ = _run(_in_detail("acme-web"), Back(), SelectProject("billing"))
        assert state.project_details is None
        assert state.loading_project
        assert not state.detail_ready

    def test_select_project_from_severity_panel(self):
        state, effects = _run(_loaded(), ToggleSeverity(Severity.HIGH))
        assert [p.project_name for p in state.severity_panel] == ["billing", "acme-api"]
        state, effects = _run(state, SelectProject("acme-api"))
        assert state.nav.page is Page.PROJECT_DETAIL
        assert effects == [LoadProjectDetail("acme-api", 2)]

    def test_select_project_without_backend(self):
        state, effects = _run(initial_state(fetch_enabled=False), ShowProjects(), SelectProject("acme"))
        assert effects == []
        assert state.nav.page is Page.PROJECT_DETAIL
        assert not state.loading_project
        assert not state.detail_ready

    def test_invalid_actions_ignored(self):
        state = _loaded()
        assert transition(state, Back()).state == state
        assert transition(state, SelectScan("x.json")).state == state
        assert transition(state, ShowDashboard()).state == state
        assert transition(state, SelectProject("")).state == state

    def test_unknown_event(self):
        with pytest.raises(TypeError):
            transition(_loaded(), object())


class TestStaleResponses:
    def test_superseded_project_detail_dropped(self):
        state, first = _run(_loaded(), ShowProjects(), SelectProject("B"))
        state, _ = _run(state, Back())
        state, second = _run(state, SelectProject("C"))

        b_details = ProjectSummary("B", 1, 0)
        state, _ = _run(state, ProjectDetailLoaded("B", first[0].request_id, b_details))
        assert state.project_details is None
        assert state.loading_project

        c_details = ProjectSummary("C", 1, 0)
        state, _ = _run(state, ProjectDetailLoaded("C", second[0].request_id, c_details))
        assert state.project_details == c_details

    def test_same_key_older_request_dropped(self):
        state, first = _run(_loaded(), ShowProjects(), SelectProject("B"))
        state, _ = _run(state, Back())
        state, second = _run(state, SelectProject("B"))
        old = ProjectSummary("B", 1, 0)
        state, _ = _run(state, ProjectDetailLoaded("B", first[0].request_id, old))
        assert state.project_details is None
        assert first[0].request_id != second[0].request_id

    def test_superseded_scan_dropped(self):
        state, first = _run(_in_detail(), SelectScan("a.json"))
        state, second = _run(state, SelectScan("b.json"))
        a_vulns = (Vulnerability("CVE-A", "pkg", "1", Severity.LOW),)
        state, _ = _run(state, ScanDetailLoaded("a.json", first[0].request_id, a_vulns))
        assert state.vulnerabilities == ()
        assert state.loading_scan

    def test_scan_response_after_close_dropped(self):
        state, effects = _run(_in_detail(), SelectScan("a.json"))
        state, _ = _run(state, CloseScan())
        vulns = (Vulnerability("CVE-A", "pkg", "1", Severity.LOW),)
        state, _ = _run(state, ScanDetailLoaded("a.json", effects[0].request_id, vulns))
        assert state.vulnerabilities == ()
        assert not state.scan_panel_open


class TestScanPanel:
    def test_open_and_close(self):
        state, effects = _run(_in_detail(), SelectScan("acme-web-1.json"))
        assert effects == [LoadScanDetail("acme-web-1.json", 3)]
        assert state.scan_panel_open
        assert state.nav.page is Page.PROJECT_DETAIL

        state, _ = _run(state, CloseScan())
        assert not state.scan_panel_open
        assert state.vulnerabilities == ()

    def test_reselecting_same_report_does_not_refetch(self):
        state, _ = _run(_in_detail(), SelectScan("a.json"))
        state, effects = _run(state, SelectScan("a.json"))
        assert effects == []


class TestDashboardFilters:
    def test_toggle_same_severity_twice_closes(self):
        state = _loaded()
        opened, _ = _run(state, ToggleSeverity(Severity.CRITICAL))
        assert opened.nav.selected_severity is Severity.CRITICAL
        closed, _ = _run(opened, ToggleSeverity(Severity.CRITICAL))
        assert closed.nav.selected_severity is None
        assert closed.severity_panel == []

    def test_toggle_switches_severity(self):
        state, _ = _run(_loaded(), ToggleSeverity(Severity.CRITICAL), ToggleSeverity(Severity.HIGH))
        assert state.nav.selected_severity is Severity.HIGH

    def test_toggle_outside_dashboard_ignored(self):
        state, _ = _run(_loaded(), ShowProjects(), ToggleSeverity(Severity.HIGH))
        assert state.nav.selected_severity is None

    def test_search(self):
        state, _ = _run(_loaded(), ShowProjects(), Search("ACME"))
        assert [p.project_name for p in state.filtered_projects] == ["acme-web", "acme-api"]
        state, _ = _run(state, Search(" "))
        assert state.filtered_projects == PROJECTS
