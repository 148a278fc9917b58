#!/usr/bin/env python3
"""
Status Tracker Run

Scheduled entry point. For each configured entity type:

    1. load previous snapshot   (store failure aborts the run)
    2. fetch current state      (fetch failure degrades to partial/empty)
    3. detect changes
    4. append changes to the status log, send Slack alert (best-effort)
    5. overwrite the snapshot with current state

Usage:
    python -m status_tracker.run.run_tracker                   # all configured types
    python -m status_tracker.run.run_tracker --entity keyword  # one type
"""

import sys
import time
from dataclasses import replace
from datetime import datetime, timezone

from status_tracker.config import ConfigError, TrackerConfig, load_config, load_env
from status_tracker.detect.change_detector import detect_changes
from status_tracker.dump.fetch_entities import (
    GoogleAdsClient,
    fetch_account_identity,
    fetch_current_entities,
    get_access_token,
)
from status_tracker.entities import ENTITY_TYPES, AccountIdentity, EntityType
from status_tracker.notify.slack_alert import SKIPPED, NotificationResult, send_slack_alert
from status_tracker.store.sheets import open_workbook
from status_tracker.store.snapshot import SnapshotStore
from status_tracker.store.status_log import StatusLogWriter
from status_tracker.store.workbook import Workbook


def run_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def run_entity_type(
    entity_type: EntityType,
    config: TrackerConfig,
    client,
    account: AccountIdentity,
    workbook: Workbook,
    access_token: str = None,
    opener=open_workbook,
    timestamp: str = None,
) -> dict:
    """
    Run one fetch-diff-log-notify-save cycle for one entity type.

    Returns:
        Dict with counts, fetch error (if any) and notification status
    """
    timestamp = timestamp or run_timestamp()
    plural = entity_type.plural.lower()

    print(f"{entity_type.label} Status Tracker")

    status_log = StatusLogWriter(workbook, config.log_sheet(entity_type), entity_type)
    snapshot_store = SnapshotStore(workbook, config.snapshot_sheet(entity_type), entity_type)

    previous = snapshot_store.load()
    print(f"  Loaded {len(previous)} {plural} from previous snapshot.")

    fetched = fetch_current_entities(client, entity_type)
    current = fetched.entities
    print(f"  Found {len(current)} {plural} in current account.")

    changes = detect_changes(entity_type, previous, current, account, timestamp)
    print(f"  Detected {len(changes)} status changes.")

    notification = NotificationResult(SKIPPED, "no changes")
    if changes:
        written = status_log.write(changes)
        print(f"  Logged {written} status changes to {status_log.sheet}.")
        notification = send_slack_alert(
            entity_type,
            account,
            changes,
            workbook.url,
            config.slack_helper_spreadsheet,
            config.slack_helper_sheet_name,
            access_token,
            opener,
        )
    else:
        print(f"  No {entity_type.label.lower()} status changes detected.")

    saved = snapshot_store.save(current, timestamp)
    print(f"  Updated {entity_type.label.lower()} snapshot with {saved} {plural}.")
    print()

    return {
        "entity_type": entity_type.key,
        "previous_count": len(previous),
        "current_count": len(current),
        "change_count": len(changes),
        "fetch_error": fetched.error,
        "notification": notification.status,
    }


def run(config: TrackerConfig, client, account: AccountIdentity, workbook: Workbook,
        access_token: str = None, opener=open_workbook) -> list:
    """Run every configured entity type against one workbook."""
    timestamp = run_timestamp()
    return [
        run_entity_type(
            ENTITY_TYPES[key], config, client, account, workbook,
            access_token, opener, timestamp,
        )
        for key in config.entity_types
    ]


def main():
    start_time = time.time()

    print("=" * 60)
    print("GOOGLE ADS STATUS TRACKER")
    print("=" * 60)
    print()

    # Parse args
    only_entity = None
    for i, arg in enumerate(sys.argv):
        if arg == "--entity" and i + 1 < len(sys.argv):
            only_entity = sys.argv[i + 1]

    # Host environments may inject variables directly; .env is optional
    load_env()

    try:
        config = load_config()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if only_entity:
        if only_entity not in ENTITY_TYPES:
            print(f"ERROR: Unknown entity type {only_entity}. Must be one of: {list(ENTITY_TYPES)}")
            sys.exit(1)
        config = replace(config, entity_types=(only_entity,))

    if not config.customer_id:
        print("ERROR: GOOGLE_ADS_CUSTOMER_ID not set")
        sys.exit(1)

    print(f"Google Ads Customer ID: {config.customer_id}")
    print(f"Google Ads Login Customer ID: {config.login_customer_id or '(none)'}")
    print(f"Entity types: {', '.join(config.entity_types)}")
    print(f"Slack alerts: {'on' if config.notifications_configured else 'off'}")
    print()

    print("Authenticating...")
    access_token = get_access_token()
    client = GoogleAdsClient(config.customer_id, access_token, config.login_customer_id)
    account = fetch_account_identity(client)
    print(f"OK ({account.name or '(unnamed)'} {account.customer_id})")
    print()

    workbook = open_workbook(config.spreadsheet, access_token)
    results = run(config, client, account, workbook, access_token)

    print("=" * 60)
    print("TRACKER COMPLETE")
    print("=" * 60)
    for result in results:
        line = (
            f"  {result['entity_type']}: {result['change_count']} changes "
            f"({result['previous_count']} -> {result['current_count']}), "
            f"alert {result['notification']}"
        )
        if result["fetch_error"]:
            line += " [fetch error]"
        print(line)
    print(f"Duration: {time.time() - start_time:.1f}s")


if __name__ == "__main__":
    main()
