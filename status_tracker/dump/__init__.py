"""Read-only Google Ads state fetchers."""
