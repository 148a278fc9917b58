# =============================================================================
# ADS-STATUS-TRACKER Store
# =============================================================================
"""
Tabular store backends plus the snapshot and status log built on them.

Backends:
- SheetsWorkbook: Google Sheets v4 REST
- CsvWorkbook: directory of CSV files
"""

from status_tracker.store.sheets import SheetsWorkbook, open_workbook
from status_tracker.store.snapshot import SnapshotStore
from status_tracker.store.status_log import StatusLogWriter
from status_tracker.store.workbook import CsvWorkbook, StoreError, Workbook

__all__ = [
    "CsvWorkbook",
    "SheetsWorkbook",
    "SnapshotStore",
    "StatusLogWriter",
    "StoreError",
    "Workbook",
    "open_workbook",
]
