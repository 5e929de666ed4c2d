"""Service module exports."""

from . import export_csv, reports

__all__ = ["export_csv", "reports"]
