#!/usr/bin/env python3
"""
Google Sheets Store

Workbook backend over the Google Sheets v4 REST API. Values are written
with valueInputOption=RAW so entity ids are never reinterpreted as numbers.
"""

import re
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import requests

from status_tracker.store.workbook import CsvWorkbook, StoreError, Workbook, to_cell

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
HTTP_TIMEOUT_SECONDS = 60

# Widest column any tracker sheet uses is well inside this
LAST_COLUMN = "ZZ"

SPREADSHEET_URL_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")


def _a1(sheet: str, cells: str) -> str:
    """Quoted A1 range: "'Ad Snapshot'!A2:ZZ"."""
    return "'{}'!{}".format(sheet.replace("'", "''"), cells)


class SheetsWorkbook(Workbook):
    """Workbook backed by one Google Sheets spreadsheet."""

    def __init__(self, spreadsheet_id: str, access_token: str):
        self.spreadsheet_id = spreadsheet_id
        self.access_token = access_token
        self.base_url = f"{SHEETS_API_BASE}/{spreadsheet_id}"
        self.url = f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit"

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = requests.request(
                method, url, headers=self._headers(), timeout=HTTP_TIMEOUT_SECONDS, **kwargs
            )
        except requests.RequestException as e:
            raise StoreError(f"Sheets request failed: {e}") from e

        if response.status_code != 200:
            raise StoreError(f"Sheets API error {response.status_code}: {response.text}")
        return response.json()

    def _values_url(self, sheet: str, cells: str) -> str:
        return f"{self.base_url}/values/{quote(_a1(sheet, cells), safe='')}"

    def _sheet_properties(self) -> list:
        data = self._request(
            "GET", self.base_url, params={"fields": "sheets.properties(sheetId,title)"}
        )
        return [s.get("properties", {}) for s in data.get("sheets", [])]

    def get_sheet(self, name: str) -> Optional[str]:
        for props in self._sheet_properties():
            if props.get("title") == name:
                return name
        return None

    def create_sheet(self, name: str, header: list) -> str:
        reply = self._request(
            "POST",
            f"{self.base_url}:batchUpdate",
            json={"requests": [{"addSheet": {"properties": {"title": name}}}]},
        )
        sheet_id = reply["replies"][0]["addSheet"]["properties"]["sheetId"]

        self.write_rows(name, 1, [header])
        self._request(
            "POST",
            f"{self.base_url}:batchUpdate",
            json={"requests": [{
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": 0,
                        "endRowIndex": 1,
                        "startColumnIndex": 0,
                        "endColumnIndex": len(header),
                    },
                    "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                    "fields": "userEnteredFormat.textFormat.bold",
                }
            }]},
        )
        return name

    def read_rows(self, sheet: str) -> list:
        data = self._request("GET", self._values_url(sheet, f"A2:{LAST_COLUMN}"))
        return data.get("values", [])

    def append_rows(self, sheet: str, rows: list):
        self._request(
            "POST",
            f"{self._values_url(sheet, 'A1')}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [[to_cell(v) for v in row] for row in rows]},
        )

    def clear_data_rows(self, sheet: str):
        self._request("POST", f"{self._values_url(sheet, f'A2:{LAST_COLUMN}')}:clear", json={})

    def write_rows(self, sheet: str, start_row: int, rows: list):
        self._request(
            "PUT",
            self._values_url(sheet, f"A{start_row}"),
            params={"valueInputOption": "RAW"},
            json={"majorDimension": "ROWS", "values": [[to_cell(v) for v in row] for row in rows]},
        )


# =============================================================================
# LOCATOR
# =============================================================================


def spreadsheet_id_from_url(locator: str) -> str:
    """Extract the id from a docs.google.com URL; bare ids pass through."""
    match = SPREADSHEET_URL_PATTERN.search(locator)
    if match:
        return match.group(1)
    if locator.startswith("http"):
        raise StoreError(f"Not a Google Sheets URL: {locator}")
    return locator


def is_local_path(locator: str) -> bool:
    return locator.startswith((".", "/", "~")) or Path(locator).is_dir()


def open_workbook(locator: str, access_token: str = None) -> Workbook:
    """
    Open a workbook from a spreadsheet URL, a bare spreadsheet id, or a
    local directory path (CSV backend).
    """
    if is_local_path(locator):
        return CsvWorkbook(Path(locator).expanduser())
    return SheetsWorkbook(spreadsheet_id_from_url(locator), access_token)
