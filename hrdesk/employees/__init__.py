"""Employees module — profiles, directory and confidential records."""

from hrdesk.employees.models import ConfidentialRecord, Profile

__all__ = ["Profile", "ConfidentialRecord"]
