"""End-to-end runs against a CSV workbook and a fake Ads client."""

import csv

from conftest import FakeAdsClient, ad_row, keyword_row

from status_tracker.config import TrackerConfig
from status_tracker.entities import AD, KEYWORD
from status_tracker.notify import slack_alert
from status_tracker.notify.slack_alert import FAILED, SENT, SKIPPED
from status_tracker.run.run_tracker import run, run_entity_type
from status_tracker.store.snapshot import SnapshotStore
from status_tracker.store.workbook import CsvWorkbook


def _rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def _run(workbook, config, rows, account, fail_after=None, timestamp="2026-01-15 06:00:00"):
    client = FakeAdsClient(rows, fail_after=fail_after)
    return run_entity_type(AD, config, client, account, workbook, timestamp=timestamp)


class FakeResponse:
    status_code = 200
    text = "ok"


def test_first_run_writes_snapshot_only(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path))

    result = _run(workbook, config, [ad_row("A")], account)

    assert result["change_count"] == 0
    assert result["notification"] == SKIPPED
    assert _rows(tmp_path / "Ad Status Log.csv") == [AD.log_header]
    snapshot = SnapshotStore(workbook, "Ad Snapshot", AD).load()
    assert list(snapshot) == ["A"]
    assert snapshot["A"].status == "ENABLED"


def test_status_change_logged_then_idempotent(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path))

    _run(workbook, config, [ad_row("A")], account)
    second = _run(workbook, config, [ad_row("A", status="PAUSED", approval="DISAPPROVED")], account)
    third = _run(workbook, config, [ad_row("A", status="PAUSED", approval="DISAPPROVED")], account)

    assert second["change_count"] == 1
    assert third["change_count"] == 0
    log = _rows(tmp_path / "Ad Status Log.csv")
    assert len(log) == 2
    assert log[1][-1] == "PAUSED + DISAPPROVED"


def test_vanished_entity_logged_as_removed(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path))

    _run(workbook, config, [ad_row("A", status="PAUSED")], account)
    result = _run(workbook, config, [], account)

    assert result["change_count"] == 1
    row = _rows(tmp_path / "Ad Status Log.csv")[1]
    assert row[AD.log_header.index("New Status")] == "REMOVED"
    assert row[-1] == "AD_REMOVED"
    assert SnapshotStore(workbook, "Ad Snapshot", AD).load() == {}


def test_fetch_failure_does_not_abort(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path))

    _run(workbook, config, [ad_row("A"), ad_row("B")], account)
    result = _run(workbook, config, [ad_row("A"), ad_row("B")], account, fail_after=1)

    assert result["fetch_error"]
    assert result["current_count"] == 1
    assert list(SnapshotStore(workbook, "Ad Snapshot", AD).load()) == ["A"]


def test_slack_failure_still_saves_snapshot(tmp_path, monkeypatch, account):
    helper = CsvWorkbook(tmp_path / "helper")
    helper.create_sheet("Sheet1", ["Account ID", "Webhook URL"])
    helper.append_rows("Sheet1", [["123-456-7890", "https://hooks.slack.com/acme"]])

    def fake_post(url, json=None, timeout=None):
        raise slack_alert.requests.ConnectionError("slack down")

    monkeypatch.setattr(slack_alert.requests, "post", fake_post)

    workbook = CsvWorkbook(tmp_path / "tracker")
    config = TrackerConfig(
        spreadsheet=str(tmp_path / "tracker"),
        slack_helper_spreadsheet=str(tmp_path / "helper"),
    )

    _run(workbook, config, [ad_row("A")], account)
    result = _run(workbook, config, [ad_row("A", status="PAUSED")], account)

    assert result["notification"] == FAILED
    assert SnapshotStore(workbook, "Ad Snapshot", AD).load()["A"].status == "PAUSED"


def test_slack_alert_sent_with_report_link(tmp_path, monkeypatch, account):
    helper = CsvWorkbook(tmp_path / "helper")
    helper.create_sheet("Sheet1", ["Account ID", "Webhook URL"])
    helper.append_rows("Sheet1", [["123-456-7890", "https://hooks.slack.com/acme"]])
    posted = []

    def fake_post(url, json=None, timeout=None):
        posted.append(json["text"])
        return FakeResponse()

    monkeypatch.setattr(slack_alert.requests, "post", fake_post)

    workbook = CsvWorkbook(tmp_path / "tracker")
    config = TrackerConfig(
        spreadsheet=str(tmp_path / "tracker"),
        slack_helper_spreadsheet=str(tmp_path / "helper"),
    )

    _run(workbook, config, [ad_row("A")], account)
    result = _run(workbook, config, [ad_row("A"), ad_row("B")], account)

    assert result["notification"] == SENT
    assert len(posted) == 1
    assert "• New Ads Added: 1" in posted[0]
    assert posted[0].endswith(f"<{workbook.url}>")


def test_run_covers_configured_types(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path), entity_types=("ad", "ad_group"))

    results = run(config, FakeAdsClient([]), account, workbook)

    assert [r["entity_type"] for r in results] == ["ad", "ad_group"]
    assert (tmp_path / "AdGroup Snapshot.csv").exists()
    assert not (tmp_path / "Keyword Snapshot.csv").exists()


def test_keyword_tracker_logs_approval_and_removal(tmp_path, account):
    workbook = CsvWorkbook(tmp_path)
    config = TrackerConfig(spreadsheet=str(tmp_path))

    def run_keywords(rows, timestamp):
        client = FakeAdsClient(rows)
        return run_entity_type(KEYWORD, config, client, account, workbook, timestamp=timestamp)

    first = run_keywords([keyword_row("10", "1"), keyword_row("10", "2")], "2026-01-15 06:00:00")
    second = run_keywords(
        [keyword_row("10", "1", status="PAUSED", approval="DISAPPROVED"), keyword_row("20", "1")],
        "2026-01-16 06:00:00",
    )

    assert first["change_count"] == 0
    assert second["change_count"] == 3

    log = _rows(tmp_path / "Keyword Status Log.csv")
    assert log[0] == KEYWORD.log_header
    assert all(len(row) == 13 for row in log)
    assert [(row[5], row[-1]) for row in log[1:]] == [
        ("10~1", "PAUSED + DISAPPROVED"),
        ("20~1", "NEW_KEYWORD"),
        ("10~2", "KEYWORD_REMOVED"),
    ]
    new_row, removed_row = log[2], log[3]
    assert new_row[KEYWORD.log_header.index("Previous Status")] == "N/A"
    assert new_row[KEYWORD.log_header.index("Previous Approval Status")] == "N/A"
    assert removed_row[KEYWORD.log_header.index("New Status")] == "REMOVED"
    assert removed_row[KEYWORD.log_header.index("New Approval Status")] == "N/A"

    snapshot = SnapshotStore(workbook, "Keyword Snapshot", KEYWORD).load()
    assert list(snapshot) == ["10~1", "20~1"]
    assert snapshot["10~1"].attributes == ("heat pump", "PHRASE")
    assert snapshot["10~1"].secondary_status == "DISAPPROVED"
