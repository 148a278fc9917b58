"""Snapshot comparison and change classification."""

from status_tracker.detect.change_detector import change_type_for, detect_changes

__all__ = ["change_type_for", "detect_changes"]
