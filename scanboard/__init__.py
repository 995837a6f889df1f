"""ScanBoard - vulnerability scan results dashboard."""
