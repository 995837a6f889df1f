"""Remote data loader: runs fetch effects and turns outcomes into events."""

import structlog

from scanboard.client import ScanboardClient
from scanboard.errors import ApiError
from scanboard.navigation import (
    LoadProjectDetail,
    LoadProjectList,
    LoadScanDetail,
    ProjectDetailLoaded,
    ProjectsFailed,
    ProjectsLoaded,
    ScanDetailLoaded,
)

log = structlog.get_logger("scanboard.loader")


class RemoteDataLoader:
    """Fetch policy per loader role.

    A failed project list is reported back as an error message. Failed
    project or scan details degrade to empty data and are only logged.
    """

    def __init__(self, client: ScanboardClient | None):
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def run(self, effect):
        if isinstance(effect, LoadProjectList):
            return self.load_project_list(effect.request_id)
        if isinstance(effect, LoadProjectDetail):
            return self.load_project_detail(effect.project_name, effect.request_id)
        if isinstance(effect, LoadScanDetail):
            return self.load_scan_detail(effect.report_filename, effect.request_id)
        raise TypeError(f"Unknown load effect: {effect!r}")

    def load_project_list(self, request_id: int):
        self._require_client()
        try:
            projects = self.client.get_projects()
        except ApiError as exc:
            log.error("loader.project_list_failed", error=str(exc))
            return ProjectsFailed(request_id, str(exc))
        log.info("loader.project_list_loaded", count=len(projects))
        return ProjectsLoaded(request_id, tuple(projects))

    def load_project_detail(self, project_name: str, request_id: int) -> ProjectDetailLoaded:
        self._require_client()
        try:
            details = self.client.get_project(project_name)
        except ApiError as exc:
            log.warning("loader.project_detail_failed", project=project_name, error=str(exc))
            details = None
        return ProjectDetailLoaded(project_name, request_id, details)

    def load_scan_detail(self, report_filename: str, request_id: int) -> ScanDetailLoaded:
        self._require_client()
        try:
            vulns = self.client.get_scan(report_filename)
        except ApiError as exc:
            log.warning("loader.scan_detail_failed", report=report_filename, error=str(exc))
            vulns = []
        return ScanDetailLoaded(report_filename, request_id, tuple(vulns))

    def _require_client(self) -> None:
        if self.client is None:
            raise RuntimeError("No API base configured; fetching is disabled")
