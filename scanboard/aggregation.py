"""Fleet-wide rollups and project filters over loaded scan summaries."""

from collections.abc import Sequence

from scanboard.models import FleetStats, ProjectSummary, Severity, SeverityCounts, Vulnerability

BADGE_SEVERITIES = (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)


def severity_count(counts: SeverityCounts, severity: Severity) -> int:
    return counts.get(severity, 0)


def compute_fleet_stats(projects: Sequence[ProjectSummary]) -> FleetStats:
    """Roll project summaries up into fleet totals and a severity histogram.

    Only severities present in at least one project appear in the histogram.
    Project-level totals are taken as reported by the backend.
    """
    histogram: SeverityCounts = {}
    for p in projects:
        for sev, n in p.severity_counts.items():
            histogram[sev] = histogram.get(sev, 0) + n

    return FleetStats(
        total_projects=len(projects),
        total_scans=sum(p.total_scans for p in projects),
        total_vulnerabilities=sum(p.total_vulnerabilities for p in projects),
        severity_counts=histogram,
    )


def filter_by_name(projects: Sequence[ProjectSummary], query: str) -> Sequence[ProjectSummary]:
    """Case-insensitive substring match on the project name.

    A blank query returns ``projects`` itself, not a copy.
    """
    if not query or not query.strip():
        return projects
    needle = query.lower()
    return [p for p in projects if needle in p.project_name.lower()]


def filter_by_severity(
    projects: Sequence[ProjectSummary], severity: Severity | None
) -> list[ProjectSummary]:
    """Projects with at least one finding at ``severity``; nothing when unset."""
    if severity is None:
        return []
    return [p for p in projects if severity_count(p.severity_counts, severity) > 0]


def severity_badges(counts: SeverityCounts) -> list[tuple[Severity, int]]:
    return [
        (sev, counts[sev]) for sev in BADGE_SEVERITIES if severity_count(counts, sev) > 0
    ]


def count_by_severity(vulnerabilities: Sequence[Vulnerability]) -> SeverityCounts:
    counts: SeverityCounts = {}
    for v in vulnerabilities:
        counts[v.severity] = counts.get(v.severity, 0) + 1
    return counts


def sort_by_severity(vulnerabilities: Sequence[Vulnerability]) -> list[Vulnerability]:
    return sorted(vulnerabilities, key=lambda v: v.severity.rank, reverse=True)
