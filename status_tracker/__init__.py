# =============================================================================
# ADS-STATUS-TRACKER
# Snapshot-diff status monitoring for Google Ads entities
# =============================================================================
"""
Google Ads status tracker.

Polls an account for the status of ads, ad groups and keywords, diffs it
against the last saved snapshot, logs changes to a sheet and sends a Slack
summary.
"""
