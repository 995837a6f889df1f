"""Shared fixtures for ScanBoard tests."""

import logging
from unittest.mock import MagicMock

import pytest
import requests
import structlog


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch):
    """Keep SCANBOARD_* environment and logging handlers from leaking between tests."""
    for name in ("SCANBOARD_API_BASE", "SCANBOARD_LOG_LEVEL", "SCANBOARD_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def project_dict(name, counts=None, total=None, scans=1, images=None, last_scan="2024-05-01T10:00:00Z"):
    """Wire-format project summary as the backend returns it."""
    counts = counts or {}
    return {
        "projectName": name,
        "totalScans": scans,
        "totalVulns": sum(counts.values()) if total is None else total,
        "severityCount": counts,
        "images": images or [],
        "lastScan": last_scan,
    }


def image_dict(name, filename, counts=None):
    counts = counts or {}
    return {
        "imageName": name,
        "filename": filename,
        "totalVulns": sum(counts.values()),
        "severityCount": counts,
        "modifiedAt": "2024-05-01T09:30:00Z",
    }


def vuln_dict(vuln_id, severity="HIGH", pkg="openssl", **extra):
    data = {
        "VulnerabilityID": vuln_id,
        "PkgName": pkg,
        "InstalledVersion": "1.1.1k",
        "FixedVersion": "1.1.1w",
        "Severity": severity,
        "Title": f"{vuln_id} in {pkg}",
        "Description": "Buffer overflow.",
        "PrimaryURL": f"https://avd.aquasec.com/nvd/{vuln_id.lower()}",
    }
    data.update(extra)
    return data


@pytest.fixture
def mock_session():
    """Build a mock requests.Session serving ``{path: (status, json_body)}``.

    Paths are matched against the end of the requested URL. A value that is
    an exception instance is raised instead.
    """

    def _create(routes: dict) -> requests.Session:
        session = MagicMock(spec=requests.Session)

        def get_side_effect(url, timeout=None):
            for path, outcome in routes.items():
                if url.endswith(path):
                    break
            else:
                outcome = (404, {"detail": "not found"})

            if isinstance(outcome, Exception):
                raise outcome

            status, body = outcome
            resp = MagicMock()
            resp.status_code = status
            resp.ok = 200 <= status < 300
            if isinstance(body, Exception):
                resp.json.side_effect = body
            else:
                resp.json.return_value = body
            return resp

        session.get.side_effect = get_side_effect
        return session

    return _create
