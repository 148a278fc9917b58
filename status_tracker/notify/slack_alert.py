#!/usr/bin/env python3
"""
Slack Alert

Summarises a run's change records into one Slack message and posts it to
the account's incoming webhook.

Alerting is best-effort: nothing in this module raises. An unconfigured
or unmatched webhook is SKIPPED; a failed post is FAILED. Either way the
caller carries on and still saves the snapshot.

Webhook lookup: a helper sheet maps account ids (column A) to webhook URLs
(column B). First exact match on the account id wins.
"""

from dataclasses import dataclass

import requests

from status_tracker.entities import (
    CHANGE_TYPE_SEPARATOR,
    AccountIdentity,
    EntityStatus,
    EntityType,
)
from status_tracker.store.sheets import open_workbook
from status_tracker.store.workbook import StoreError

HTTP_TIMEOUT_SECONDS = 30

SENT = "SENT"
SKIPPED = "SKIPPED"
FAILED = "FAILED"


@dataclass(frozen=True)
class NotificationResult:
    status: str
    detail: str = ""


# =============================================================================
# SUMMARY
# =============================================================================


def summary_categories(entity_type: EntityType) -> list:
    """Category keys in alert display order."""
    keys = ["enabled", "paused", "removed"]
    if entity_type.secondary:
        keys += [value.lower() for value in entity_type.secondary.labels]
    keys += ["new", "other"]
    return keys


def categorize_change(entity_type: EntityType, change_type: str) -> str:
    """Return the single summary category a change type counts towards."""
    if change_type == entity_type.new_change:
        return "new"

    fragments = set(change_type.split(CHANGE_TYPE_SEPARATOR))

    if EntityStatus.ENABLED.value in fragments:
        return "enabled"
    if EntityStatus.PAUSED.value in fragments:
        return "paused"
    if change_type == entity_type.removed_change or EntityStatus.REMOVED.value in fragments:
        return "removed"

    if entity_type.secondary:
        for value in entity_type.secondary.priority:
            if value in fragments:
                return value.lower()

    return "other"


def categorize_changes(entity_type: EntityType, changes: list) -> dict:
    """Count changes per category; counts always sum to len(changes)."""
    summary = {key: 0 for key in summary_categories(entity_type)}
    for change in changes:
        summary[categorize_change(entity_type, change.change_type)] += 1
    return summary


def _category_label(entity_type: EntityType, key: str) -> str:
    plural = entity_type.plural
    if key == "new":
        return f"New {plural} Added"
    if key == "other":
        return "Other Changes"
    if key in ("enabled", "paused", "removed"):
        return f"{plural} {key.capitalize()}"
    return f"{plural} {entity_type.secondary.labels[key.upper()]}"


def format_alert_message(
    entity_type: EntityType,
    account: AccountIdentity,
    changes: list,
    report_url: str,
) -> str:
    """Build the Slack message text (Slack mrkdwn)."""
    summary = categorize_changes(entity_type, changes)

    lines = [
        f"*[Google Ads Alert] - {entity_type.label} Status Changes Detected*",
        "",
        f"Account: *{account.name}* ({account.customer_id})",
        "",
        "*Summary of Changes:*",
    ]
    for key, count in summary.items():
        if count > 0:
            lines.append(f"• {_category_label(entity_type, key)}: {count}")

    lines += [
        "",
        f"*Total Changes: {len(changes)}*",
        "",
        "See the full report for details:",
        f"<{report_url}>",
    ]
    return "\n".join(lines)


# =============================================================================
# DELIVERY
# =============================================================================


def resolve_webhook_url(
    helper_locator: str,
    sheet_name: str,
    account_id: str,
    access_token: str = None,
    opener=open_workbook,
):
    """
    Look up the webhook URL for an account in the helper sheet.

    Returns:
        The URL, or None if unconfigured, unmatched, or unreadable
    """
    if not helper_locator:
        print("  Slack helper spreadsheet is not configured. Skipping Slack notification.")
        return None

    try:
        workbook = opener(helper_locator, access_token)
        sheet = workbook.get_sheet(sheet_name)
        if sheet is None:
            print(f'  Could not find sheet "{sheet_name}" in the Slack helper spreadsheet.')
            return None

        rows = workbook.read_rows(sheet)
    except (StoreError, OSError) as e:
        print(f"  ERROR accessing Slack helper spreadsheet: {e}")
        return None

    if not rows:
        print("  Slack helper sheet is empty.")
        return None

    for row in rows:
        if len(row) >= 2 and str(row[0]).strip() == account_id:
            print(f"  Found webhook URL for account {account_id}.")
            return str(row[1]).strip() or None

    print(f"  No matching webhook URL found for account ID {account_id}.")
    return None


def send_slack_notification(webhook_url: str, message: str) -> NotificationResult:
    """POST {"text": message} to a Slack incoming webhook."""
    if not webhook_url:
        return NotificationResult(SKIPPED, "no webhook URL")

    try:
        response = requests.post(
            webhook_url, json={"text": message}, timeout=HTTP_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        print(f"  ERROR: Failed to send Slack notification: {e}")
        return NotificationResult(FAILED, str(e))

    if not 200 <= response.status_code < 300:
        detail = f"Slack webhook error {response.status_code}: {response.text}"
        print(f"  ERROR: {detail}")
        return NotificationResult(FAILED, detail)

    print("  Slack notification sent.")
    return NotificationResult(SENT)


def send_slack_alert(
    entity_type: EntityType,
    account: AccountIdentity,
    changes: list,
    report_url: str,
    helper_locator: str,
    helper_sheet_name: str,
    access_token: str = None,
    opener=open_workbook,
) -> NotificationResult:
    """Resolve the account's webhook, format the summary and send it."""
    webhook_url = resolve_webhook_url(
        helper_locator, helper_sheet_name, account.customer_id, access_token, opener
    )
    if not webhook_url:
        return NotificationResult(SKIPPED, "no webhook configured for account")

    message = format_alert_message(entity_type, account, changes, report_url)
    return send_slack_notification(webhook_url, message)
