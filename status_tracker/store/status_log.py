#!/usr/bin/env python3
"""
Status Log Writer

Append-only log of detected changes. Rows are added below the last
existing row in detector order; earlier rows are never touched.
"""

from status_tracker.entities import ChangeRecord, EntityType
from status_tracker.store.workbook import Workbook, get_or_create_sheet


class StatusLogWriter:
    def __init__(self, workbook: Workbook, sheet_name: str, entity_type: EntityType):
        self.workbook = workbook
        self.entity_type = entity_type
        self.sheet = get_or_create_sheet(workbook, sheet_name, entity_type.log_header)

    def to_row(self, change: ChangeRecord) -> list:
        row = [
            change.timestamp,
            change.account_name,
            change.account_id,
            *change.parent_names,
            change.entity_id,
            *change.attributes,
            change.previous_status,
            change.new_status,
        ]
        if self.entity_type.secondary:
            row += [change.previous_secondary_status, change.new_secondary_status]
        row.append(change.change_type)
        return row

    def write(self, changes: list) -> int:
        """Append one row per change. Returns the number of rows written."""
        if not changes:
            return 0
        self.workbook.append_rows(self.sheet, [self.to_row(c) for c in changes])
        return len(changes)
