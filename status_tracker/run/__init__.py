"""Scheduled tracker entry point."""
