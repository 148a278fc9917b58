#!/usr/bin/env python3
"""
Change Detector

Compares the previous snapshot with the current fetch and classifies every
difference as a ChangeRecord.

Output order:
    1. ids in current, in fetch order (new or changed entities)
    2. ids only in previous, in snapshot order (removed entities)

A first run (empty previous snapshot) produces no records at all, so the
initial baseline is not reported as a flood of new entities.
"""

from status_tracker.entities import (
    CHANGE_TYPE_SEPARATOR,
    NOT_APPLICABLE,
    STATUS_CHANGED,
    AccountIdentity,
    ChangeRecord,
    EntitySnapshotRecord,
    EntityStatus,
    EntityType,
    known_value,
)


def change_type_for(
    entity_type: EntityType,
    status_changed: bool,
    secondary_changed: bool,
    new_status: str,
    new_secondary: str = None,
) -> str:
    """
    Build the change-type label for an entity present in both snapshots.

    Status fragment first, secondary fragment second, joined with " + ".
    Values outside the closed enumerations collapse to the axis fallback.
    """
    fragments = []

    if status_changed:
        fragments.append(known_value(new_status, EntityStatus) or STATUS_CHANGED)

    if secondary_changed and entity_type.secondary:
        axis = entity_type.secondary
        fragments.append(known_value(new_secondary, axis.values) or axis.fallback)

    return CHANGE_TYPE_SEPARATOR.join(fragments)


def detect_changes(
    entity_type: EntityType,
    previous: dict,
    current: dict,
    account: AccountIdentity,
    timestamp: str,
) -> list:
    """
    Diff two {id: EntitySnapshotRecord} mappings.

    Args:
        entity_type: Descriptor of the tracked entity
        previous: Last persisted snapshot (empty on first run)
        current: Freshly fetched state
        account: Account the rows are attributed to
        timestamp: Run timestamp stamped on every record

    Returns:
        List of ChangeRecord in output order
    """
    has_secondary = entity_type.secondary is not None
    first_run = len(previous) == 0
    changes = []

    def record(entity: EntitySnapshotRecord, **fields) -> ChangeRecord:
        return ChangeRecord(
            timestamp=timestamp,
            account_name=account.name,
            account_id=account.customer_id,
            parent_names=entity.parent_names,
            entity_id=entity.id,
            attributes=entity.attributes,
            **fields,
        )

    for entity_id, now in current.items():
        before = previous.get(entity_id)

        if before is None:
            if first_run:
                continue
            changes.append(record(
                now,
                previous_status=NOT_APPLICABLE,
                new_status=now.status,
                previous_secondary_status=NOT_APPLICABLE if has_secondary else None,
                new_secondary_status=now.secondary_status if has_secondary else None,
                change_type=entity_type.new_change,
            ))
            continue

        status_changed = before.status != now.status
        secondary_changed = has_secondary and before.secondary_status != now.secondary_status
        if not (status_changed or secondary_changed):
            continue

        changes.append(record(
            now,
            previous_status=before.status,
            new_status=now.status,
            previous_secondary_status=before.secondary_status if has_secondary else None,
            new_secondary_status=now.secondary_status if has_secondary else None,
            change_type=change_type_for(
                entity_type, status_changed, secondary_changed,
                now.status, now.secondary_status,
            ),
        ))

    for entity_id, before in previous.items():
        if entity_id in current:
            continue
        changes.append(record(
            before,
            previous_status=before.status,
            new_status=EntityStatus.REMOVED.value,
            previous_secondary_status=before.secondary_status if has_secondary else None,
            new_secondary_status=NOT_APPLICABLE if has_secondary else None,
            change_type=entity_type.removed_change,
        ))

    return changes
