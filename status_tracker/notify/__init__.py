"""Best-effort Slack alerting."""
