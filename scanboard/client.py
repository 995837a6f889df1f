"""HTTP client for the scan-report backend."""

from urllib.parse import quote

import requests
import structlog

from scanboard.errors import ApiError
from scanboard.models import ProjectSummary, Vulnerability

log = structlog.get_logger("scanboard.client")

DEFAULT_TIMEOUT = 10.0


class ScanboardClient:
    """Read-only access to ``/api/projects`` and ``/api/scans``.

    Only the status code of a failed response is consumed; error bodies
    are ignored.
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_projects(self) -> list[ProjectSummary]:
        data = self._get_json("/api/projects")
        if not isinstance(data, list):
            raise ApiError("API error: expected a list of projects")
        return [ProjectSummary.from_dict(p) for p in data if isinstance(p, dict)]

    def get_project(self, project_name: str) -> ProjectSummary:
        data = self._get_json(f"/api/projects/{quote(project_name, safe='')}")
        if not isinstance(data, dict):
            raise ApiError("API error: expected a project object")
        return ProjectSummary.from_dict(data)

    def get_scan(self, report_filename: str) -> list[Vulnerability]:
        data = self._get_json(f"/api/scans/{quote(report_filename, safe='')}")
        if not isinstance(data, dict):
            raise ApiError("API error: expected a scan object")
        vulns = data.get("vulnerabilities") or []
        if not isinstance(vulns, list):
            raise ApiError("API error: vulnerabilities must be a list")
        return [Vulnerability.from_dict(v) for v in vulns if isinstance(v, dict)]

    def _get_json(self, path: str):
        url = f"{self.base_url}{path}"
        log.debug("client.request", url=url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"API error: {exc}") from exc

        if not resp.ok:
            raise ApiError(f"API error: {resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError("API error: response is not valid JSON") from exc
