#!/usr/bin/env python3
"""
Snapshot Store

Last known state of every tracked entity, one sheet per entity type.
The sheet is fully replaced on each save; no history is kept here.
The status log is the only durable history.
"""

from status_tracker.entities import EntitySnapshotRecord, EntityType
from status_tracker.store.workbook import Workbook, get_or_create_sheet


class SnapshotStore:
    """load()/save() of {id: EntitySnapshotRecord} over one snapshot sheet."""

    def __init__(self, workbook: Workbook, sheet_name: str, entity_type: EntityType):
        self.workbook = workbook
        self.entity_type = entity_type
        self.header = entity_type.snapshot_header
        self.sheet = get_or_create_sheet(workbook, sheet_name, self.header)

    def _to_record(self, row: list) -> EntitySnapshotRecord:
        # Sheets drops trailing blank cells
        row = [str(v) for v in row] + [""] * (len(self.header) - len(row))

        n_parents = len(self.entity_type.parent_headers)
        n_attrs = len(self.entity_type.attribute_headers)
        pos = 1
        parent_names = tuple(row[pos:pos + n_parents])
        pos += n_parents
        attributes = tuple(row[pos:pos + n_attrs])
        pos += n_attrs
        status = row[pos]
        pos += 1

        secondary_status = None
        if self.entity_type.secondary:
            secondary_status = row[pos]
            pos += 1

        return EntitySnapshotRecord(
            id=row[0].strip(),
            parent_names=parent_names,
            attributes=attributes,
            status=status,
            secondary_status=secondary_status,
            last_updated=row[pos] or None,
        )

    def _to_row(self, record: EntitySnapshotRecord, timestamp: str) -> list:
        row = [record.id, *record.parent_names, *record.attributes, record.status]
        if self.entity_type.secondary:
            row.append(record.secondary_status)
        row.append(timestamp)
        return row

    def load(self) -> dict:
        """
        Read the persisted snapshot.

        Returns:
            {id: EntitySnapshotRecord} in sheet order; {} for a header-only
            sheet, which marks a first run
        """
        snapshot = {}
        for row in self.workbook.read_rows(self.sheet):
            if not row or not str(row[0]).strip():
                continue
            record = self._to_record(row)
            snapshot[record.id] = record
        return snapshot

    def save(self, entities: dict, timestamp: str) -> int:
        """
        Replace the snapshot with the current entities.

        Returns:
            Number of rows written
        """
        self.workbook.clear_data_rows(self.sheet)

        rows = [self._to_row(record, timestamp) for record in entities.values()]
        if rows:
            self.workbook.write_rows(self.sheet, 2, rows)
        return len(rows)
