#!/usr/bin/env python3
"""
Tracker Configuration

Everything the run needs is read from the environment once, at startup,
into a frozen TrackerConfig that is passed down explicitly.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from status_tracker.entities import ENTITY_TYPES, EntityType

# =============================================================================
# CONFIGURATION
# =============================================================================

PACKAGE_DIR = Path(__file__).parent
PROJECT_ROOT = PACKAGE_DIR.parent

DEFAULT_SLACK_HELPER_SHEET_NAME = "Sheet1"

# Template values shipped in example .env files; treated as unset
PLACEHOLDER_VALUES = {
    "YOUR_SPREADSHEET_URL_HERE",
    "YOUR_SLACK_HELPER_SPREADSHEET_URL_HERE",
}


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


# =============================================================================
# CREDENTIAL LOADING
# =============================================================================


def load_env():
    """Load environment variables from .env file."""
    env_paths = [
        PROJECT_ROOT / ".env",
        Path.home() / "ads-status-tracker" / ".env",
    ]
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path)
            return True
    return False


def _configured(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip() or value.strip() in PLACEHOLDER_VALUES:
        return None
    return value.strip()


# =============================================================================
# TRACKER CONFIG
# =============================================================================


@dataclass(frozen=True)
class TrackerConfig:
    spreadsheet: str
    customer_id: str = ""
    login_customer_id: Optional[str] = None
    slack_helper_spreadsheet: Optional[str] = None
    slack_helper_sheet_name: str = DEFAULT_SLACK_HELPER_SHEET_NAME
    entity_types: tuple = tuple(ENTITY_TYPES)
    log_sheet_names: dict = field(default_factory=dict)
    snapshot_sheet_names: dict = field(default_factory=dict)

    def log_sheet(self, entity_type: EntityType) -> str:
        return self.log_sheet_names.get(entity_type.key, entity_type.default_log_sheet)

    def snapshot_sheet(self, entity_type: EntityType) -> str:
        return self.snapshot_sheet_names.get(entity_type.key, entity_type.default_snapshot_sheet)

    @property
    def notifications_configured(self) -> bool:
        return _configured(self.slack_helper_spreadsheet) is not None


def parse_entity_types(raw: Optional[str]) -> tuple:
    """Parse a comma list like 'ad,keyword' into validated entity keys."""
    if not raw or not raw.strip():
        return tuple(ENTITY_TYPES)

    keys = tuple(k.strip().lower() for k in raw.split(",") if k.strip())
    unknown = [k for k in keys if k not in ENTITY_TYPES]
    if unknown:
        raise ConfigError(
            f"Unknown entity type(s): {unknown}. Must be one of: {list(ENTITY_TYPES)}"
        )
    return keys


def load_config(environ=None) -> TrackerConfig:
    """
    Build a TrackerConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        TrackerConfig

    Raises:
        ConfigError: TRACKER_SPREADSHEET is missing or still a placeholder
    """
    env = os.environ if environ is None else environ

    spreadsheet = _configured(env.get("TRACKER_SPREADSHEET"))
    if not spreadsheet:
        raise ConfigError("TRACKER_SPREADSHEET is not configured")

    log_sheet_names = {}
    snapshot_sheet_names = {}
    for key in ENTITY_TYPES:
        log_name = _configured(env.get(f"TRACKER_{key.upper()}_LOG_SHEET"))
        snapshot_name = _configured(env.get(f"TRACKER_{key.upper()}_SNAPSHOT_SHEET"))
        if log_name:
            log_sheet_names[key] = log_name
        if snapshot_name:
            snapshot_sheet_names[key] = snapshot_name

    return TrackerConfig(
        spreadsheet=spreadsheet,
        customer_id=env.get("GOOGLE_ADS_CUSTOMER_ID", "").strip(),
        login_customer_id=_configured(env.get("GOOGLE_ADS_LOGIN_CUSTOMER_ID")),
        slack_helper_spreadsheet=_configured(env.get("SLACK_HELPER_SPREADSHEET")),
        slack_helper_sheet_name=(
            _configured(env.get("SLACK_HELPER_SHEET_NAME")) or DEFAULT_SLACK_HELPER_SHEET_NAME
        ),
        entity_types=parse_entity_types(env.get("TRACKER_ENTITY_TYPES")),
        log_sheet_names=log_sheet_names,
        snapshot_sheet_names=snapshot_sheet_names,
    )
