"""Data models for scan summaries and vulnerability findings."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Severity(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"

    @property
    def rank(self) -> int:
        return {
            Severity.CRITICAL: 4,
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
            Severity.UNKNOWN: 0,
        }[self]

    @classmethod
    def parse(cls, value) -> "Severity":
        """Map a scanner severity string onto the enum, falling back to UNKNOWN."""
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN

    def __ge__(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "Severity") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "Severity") -> bool:
        return self.rank <= other.rank

    def __lt__(self, other: "Severity") -> bool:
        return self.rank < other.rank


SeverityCounts = dict[Severity, int]


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _optional_text(value) -> str | None:
    return value if isinstance(value, str) and value else None


def _count(value) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(value), 0)
        except ValueError:
            return 0
    return 0


def _timestamp(value) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        # fromisoformat() only accepts a trailing "Z" from 3.11 on
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_severity_counts(raw) -> SeverityCounts:
    """Parse a wire ``severityCount`` object.

    Unknown keys collapse into UNKNOWN, bad counts read as 0.
    """
    counts: SeverityCounts = {}
    if not isinstance(raw, dict):
        return counts
    for key, value in raw.items():
        sev = Severity.parse(key)
        counts[sev] = counts.get(sev, 0) + _count(value)
    return counts


def _counts_to_dict(counts: SeverityCounts) -> dict[str, int]:
    return {sev.value: n for sev, n in counts.items()}


@dataclass(frozen=True)
class Vulnerability:
    id: str
    package_name: str
    installed_version: str
    severity: Severity
    title: str = ""
    description: str = ""
    fixed_version: str | None = None
    reference_url: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.id

    @classmethod
    def from_dict(cls, data: dict) -> "Vulnerability":
        return cls(
            id=_text(data.get("VulnerabilityID")),
            package_name=_text(data.get("PkgName")),
            installed_version=_text(data.get("InstalledVersion")),
            severity=Severity.parse(data.get("Severity")),
            title=_text(data.get("Title")),
            description=_text(data.get("Description")),
            fixed_version=_optional_text(data.get("FixedVersion")),
            reference_url=_optional_text(data.get("PrimaryURL")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "package_name": self.package_name,
            "installed_version": self.installed_version,
            "fixed_version": self.fixed_version,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "reference_url": self.reference_url,
        }


@dataclass(frozen=True)
class ImageSummary:
    image_name: str
    report_filename: str
    total_vulnerabilities: int = 0
    severity_counts: SeverityCounts = field(default_factory=dict)
    last_modified: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ImageSummary":
        return cls(
            image_name=_text(data.get("imageName")),
            report_filename=_text(data.get("filename")),
            total_vulnerabilities=_count(data.get("totalVulns")),
            severity_counts=parse_severity_counts(data.get("severityCount")),
            last_modified=_timestamp(data.get("modifiedAt")),
        )

    def to_dict(self) -> dict:
        return {
            "image_name": self.image_name,
            "report_filename": self.report_filename,
            "total_vulnerabilities": self.total_vulnerabilities,
            "severity_counts": _counts_to_dict(self.severity_counts),
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
        }


@dataclass(frozen=True)
class ProjectSummary:
    project_name: str
    total_scans: int = 0
    total_vulnerabilities: int = 0
    severity_counts: SeverityCounts = field(default_factory=dict)
    images: tuple[ImageSummary, ...] = ()
    last_scan: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectSummary":
        images = data.get("images")
        return cls(
            project_name=_text(data.get("projectName")),
            total_scans=_count(data.get("totalScans")),
            total_vulnerabilities=_count(data.get("totalVulns")),
            severity_counts=parse_severity_counts(data.get("severityCount")),
            images=tuple(
                ImageSummary.from_dict(i) for i in images if isinstance(i, dict)
            ) if isinstance(images, list) else (),
            last_scan=_timestamp(data.get("lastScan")),
        )

    def to_dict(self) -> dict:
        return {
            "project_name": self.project_name,
            "total_scans": self.total_scans,
            "total_vulnerabilities": self.total_vulnerabilities,
            "severity_counts": _counts_to_dict(self.severity_counts),
            "images": [i.to_dict() for i in self.images],
            "last_scan": self.last_scan.isoformat() if self.last_scan else None,
        }


@dataclass(frozen=True)
class FleetStats:
    total_projects: int = 0
    total_scans: int = 0
    total_vulnerabilities: int = 0
    severity_counts: SeverityCounts = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_projects": self.total_projects,
            "total_scans": self.total_scans,
            "total_vulnerabilities": self.total_vulnerabilities,
            "severity_counts": _counts_to_dict(self.severity_counts),
        }
