"""Tests for the backend HTTP client."""

import pytest
import requests
from conftest import project_dict, vuln_dict

from scanboard.client import ScanboardClient
from scanboard.errors import ApiError
from scanboard.models import Severity


class TestScanboardClient:
    def test_get_projects(self, mock_session):
        session = mock_session({"/api/projects": (200, [project_dict("acme"), project_dict("billing")])})
        client = ScanboardClient("http://scan.local:8180/", session=session)
        projects = client.get_projects()
        assert [p.project_name for p in projects] == ["acme", "billing"]
        session.get.assert_called_once_with("http://scan.local:8180/api/projects", timeout=10.0)

    def test_get_project_quotes_name(self, mock_session):
        session = mock_session({"/api/projects/team%2Fweb": (200, project_dict("team/web"))})
        client = ScanboardClient("http://scan.local", session=session)
        assert client.get_project("team/web").project_name == "team/web"

    def test_get_scan(self, mock_session):
        body = {"vulnerabilities": [vuln_dict("CVE-1", "CRITICAL"), vuln_dict("CVE-2", "odd")]}
        session = mock_session({"/api/scans/web-1.json": (200, body)})
        client = ScanboardClient("http://scan.local", session=session)
        vulns = client.get_scan("web-1.json")
        assert [v.severity for v in vulns] == [Severity.CRITICAL, Severity.UNKNOWN]

    def test_get_scan_missing_field(self, mock_session):
        session = mock_session({"/api/scans/web-1.json": (200, {"vulnerabilities": None})})
        client = ScanboardClient("http://scan.local", session=session)
        assert client.get_scan("web-1.json") == []

    def test_status_error(self, mock_session):
        session = mock_session({"/api/projects": (503, {"detail": "down"})})
        client = ScanboardClient("http://scan.local", session=session)
        with pytest.raises(ApiError, match="503") as excinfo:
            client.get_projects()
        assert excinfo.value.status_code == 503

    def test_transport_error(self, mock_session):
        session = mock_session({"/api/projects": requests.ConnectionError("refused")})
        client = ScanboardClient("http://scan.local", session=session)
        with pytest.raises(ApiError, match="refused"):
            client.get_projects()

    def test_invalid_json(self, mock_session):
        session = mock_session({"/api/projects": (200, ValueError("bad json"))})
        client = ScanboardClient("http://scan.local", session=session)
        with pytest.raises(ApiError, match="not valid JSON"):
            client.get_projects()

    def test_wrong_shape(self, mock_session):
        session = mock_session({"/api/projects": (200, {"projects": []})})
        client = ScanboardClient("http://scan.local", session=session)
        with pytest.raises(ApiError, match="expected a list"):
            client.get_projects()
