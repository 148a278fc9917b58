#!/usr/bin/env python3
"""
Tabular Store

A Workbook is a set of named sheets. Row 1 of every sheet is its header;
data rows start at row 2. Two backends:

    SheetsWorkbook  Google Sheets v4 (status_tracker/store/sheets.py)
    CsvWorkbook     one <sheet>.csv per sheet in a local directory

Store failures are fatal to a run and are raised, never returned.
"""

import csv
from pathlib import Path
from typing import Optional


class StoreError(Exception):
    """Raised when the tabular store cannot be read or written."""


def to_cell(value) -> str:
    return "" if value is None else str(value)


class Workbook:
    """Interface shared by the store backends."""

    url = ""

    def get_sheet(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def create_sheet(self, name: str, header: list) -> str:
        raise NotImplementedError

    def read_rows(self, sheet: str) -> list:
        """Return every row after the header."""
        raise NotImplementedError

    def append_rows(self, sheet: str, rows: list):
        raise NotImplementedError

    def clear_data_rows(self, sheet: str):
        """Remove every row after the header."""
        raise NotImplementedError

    def write_rows(self, sheet: str, start_row: int, rows: list):
        """Overwrite rows beginning at 1-based start_row (header is row 1)."""
        raise NotImplementedError


def get_or_create_sheet(workbook: Workbook, name: str, header: list) -> str:
    """Get a sheet by name, creating it with header if it does not exist."""
    sheet = workbook.get_sheet(name)
    if sheet is None:
        sheet = workbook.create_sheet(name, header)
        print(f"  Created new sheet: {name}")
    return sheet


# =============================================================================
# CSV BACKEND
# =============================================================================


class CsvWorkbook(Workbook):
    """Workbook backed by a directory of CSV files."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.url = str(self.directory)

    def _path(self, sheet: str) -> Path:
        return self.directory / f"{sheet}.csv"

    def _read_all(self, sheet: str) -> list:
        with open(self._path(sheet), newline="", encoding="utf-8") as f:
            return [row for row in csv.reader(f)]

    def _write_all(self, sheet: str, rows: list):
        with open(self._path(sheet), "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(rows)

    def get_sheet(self, name: str) -> Optional[str]:
        return name if self._path(name).exists() else None

    def create_sheet(self, name: str, header: list) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._write_all(name, [[to_cell(v) for v in header]])
        return name

    def read_rows(self, sheet: str) -> list:
        return self._read_all(sheet)[1:]

    def append_rows(self, sheet: str, rows: list):
        with open(self._path(sheet), "a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows([[to_cell(v) for v in row] for row in rows])

    def clear_data_rows(self, sheet: str):
        self._write_all(sheet, self._read_all(sheet)[:1])

    def write_rows(self, sheet: str, start_row: int, rows: list):
        existing = self._read_all(sheet)
        start = start_row - 1
        while len(existing) < start:
            existing.append([])
        new_rows = [[to_cell(v) for v in row] for row in rows]
        existing[start:start + len(new_rows)] = new_rows
        self._write_all(sheet, existing)
