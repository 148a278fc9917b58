#!/usr/bin/env python3
"""
Entity Type Descriptors

One descriptor per tracked Google Ads entity (ad, ad group, keyword).
The detector, snapshot store, log writer and Slack summary are written once
and read everything type-specific from here: GAQL query, row parser, sheet
headers, status enumerations and change-type labels.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

# Placeholder for "no value" cells in the status log
NOT_APPLICABLE = "N/A"
UNKNOWN = "UNKNOWN"

STATUS_CHANGED = "STATUS_CHANGED"
APPROVAL_CHANGED = "APPROVAL_CHANGED"
CHANGE_TYPE_SEPARATOR = " + "


# =============================================================================
# STATUS ENUMERATIONS
# =============================================================================


class EntityStatus(str, Enum):
    ENABLED = "ENABLED"
    PAUSED = "PAUSED"
    REMOVED = "REMOVED"


class AdApprovalStatus(str, Enum):
    APPROVED = "APPROVED"
    APPROVED_LIMITED = "APPROVED_LIMITED"
    AREA_OF_INTEREST_ONLY = "AREA_OF_INTEREST_ONLY"
    DISAPPROVED = "DISAPPROVED"
    UNDER_REVIEW = "UNDER_REVIEW"


class KeywordApprovalStatus(str, Enum):
    APPROVED = "APPROVED"
    DISAPPROVED = "DISAPPROVED"
    PENDING_REVIEW = "PENDING_REVIEW"
    UNDER_REVIEW = "UNDER_REVIEW"


def known_value(value, enum_cls) -> Optional[str]:
    """Return value if it is a member of enum_cls, else None."""
    try:
        return enum_cls(value).value
    except ValueError:
        return None


# =============================================================================
# RECORDS
# =============================================================================


@dataclass
class EntitySnapshotRecord:
    id: str
    parent_names: tuple
    attributes: tuple
    status: str
    secondary_status: Optional[str] = None
    last_updated: Optional[str] = None


@dataclass
class ChangeRecord:
    timestamp: str
    account_name: str
    account_id: str
    parent_names: tuple
    entity_id: str
    attributes: tuple
    previous_status: str
    new_status: str
    previous_secondary_status: Optional[str]
    new_secondary_status: Optional[str]
    change_type: str


@dataclass(frozen=True)
class AccountIdentity:
    name: str
    customer_id: str


# =============================================================================
# DESCRIPTORS
# =============================================================================


@dataclass(frozen=True)
class SecondaryAxis:
    """An optional second status column (approval status)."""

    header: str
    values: type
    fallback: str
    # Summary category test order; first match wins
    priority: tuple
    # Summary line labels, in the order they appear in the alert
    labels: dict = field(default_factory=dict)


@dataclass(frozen=True)
class EntityType:
    key: str
    label: str
    plural: str
    new_change: str
    removed_change: str
    query: str
    parse_row: Callable[[dict], EntitySnapshotRecord]
    id_header: str
    parent_headers: tuple
    attribute_headers: tuple
    secondary: Optional[SecondaryAxis] = None

    @property
    def default_log_sheet(self) -> str:
        return f"{self.label.replace(' ', '')} Status Log"

    @property
    def default_snapshot_sheet(self) -> str:
        return f"{self.label.replace(' ', '')} Snapshot"

    @property
    def snapshot_header(self) -> list:
        header = [self.id_header, *self.parent_headers, *self.attribute_headers, "Status"]
        if self.secondary:
            header.append(self.secondary.header)
        header.append("Last Updated")
        return header

    @property
    def log_header(self) -> list:
        header = [
            "Timestamp",
            "Account Name",
            "Account ID",
            *self.parent_headers,
            self.id_header,
            *self.attribute_headers,
            "Previous Status",
            "New Status",
        ]
        if self.secondary:
            header += [f"Previous {self.secondary.header}", f"New {self.secondary.header}"]
        header.append("Change Type")
        return header


def _secondary_or_unknown(value) -> str:
    return value or UNKNOWN


def parse_ad_row(row: dict) -> EntitySnapshotRecord:
    ad_group_ad = row["adGroupAd"]
    return EntitySnapshotRecord(
        id=str(ad_group_ad["ad"]["id"]),
        parent_names=(row["campaign"]["name"], row["adGroup"]["name"]),
        attributes=(ad_group_ad["ad"].get("type", ""),),
        status=ad_group_ad["status"],
        secondary_status=_secondary_or_unknown(
            ad_group_ad.get("policySummary", {}).get("approvalStatus")
        ),
    )


def parse_ad_group_row(row: dict) -> EntitySnapshotRecord:
    ad_group = row["adGroup"]
    return EntitySnapshotRecord(
        id=str(ad_group["id"]),
        parent_names=(row["campaign"]["name"],),
        attributes=(ad_group["name"],),
        status=ad_group["status"],
    )


def parse_keyword_row(row: dict) -> EntitySnapshotRecord:
    criterion = row["adGroupCriterion"]
    keyword = criterion.get("keyword", {})
    # criterion ids are only unique within their ad group
    keyword_id = f"{row['adGroup']['id']}~{criterion['criterionId']}"
    return EntitySnapshotRecord(
        id=keyword_id,
        parent_names=(row["campaign"]["name"], row["adGroup"]["name"]),
        attributes=(keyword.get("text", ""), keyword.get("matchType", "")),
        status=criterion["status"],
        secondary_status=_secondary_or_unknown(criterion.get("approvalStatus")),
    )


AD = EntityType(
    key="ad",
    label="Ad",
    plural="Ads",
    new_change="NEW_AD",
    removed_change="AD_REMOVED",
    query="""
        SELECT
            campaign.name,
            ad_group.name,
            ad_group_ad.ad.id,
            ad_group_ad.ad.type,
            ad_group_ad.status,
            ad_group_ad.policy_summary.approval_status
        FROM ad_group_ad
        WHERE campaign.status != 'REMOVED'
            AND ad_group.status != 'REMOVED'
    """,
    parse_row=parse_ad_row,
    id_header="Ad ID",
    parent_headers=("Campaign Name", "AdGroup Name"),
    attribute_headers=("Ad Type",),
    secondary=SecondaryAxis(
        header="Approval Status",
        values=AdApprovalStatus,
        fallback=APPROVAL_CHANGED,
        priority=(
            "DISAPPROVED",
            "APPROVED_LIMITED",
            "AREA_OF_INTEREST_ONLY",
            "APPROVED",
            "UNDER_REVIEW",
        ),
        labels={
            "DISAPPROVED": "Disapproved",
            "APPROVED": "Approved",
            "APPROVED_LIMITED": "Approved (Limited)",
            "AREA_OF_INTEREST_ONLY": "Area of Interest Only",
            "UNDER_REVIEW": "Under Review",
        },
    ),
)

AD_GROUP = EntityType(
    key="ad_group",
    label="Ad Group",
    plural="Ad Groups",
    new_change="NEW_ADGROUP",
    removed_change="ADGROUP_REMOVED",
    query="""
        SELECT
            campaign.name,
            ad_group.id,
            ad_group.name,
            ad_group.status
        FROM ad_group
        WHERE campaign.status != 'REMOVED'
    """,
    parse_row=parse_ad_group_row,
    id_header="AdGroup ID",
    parent_headers=("Campaign Name",),
    attribute_headers=("AdGroup Name",),
)

KEYWORD = EntityType(
    key="keyword",
    label="Keyword",
    plural="Keywords",
    new_change="NEW_KEYWORD",
    removed_change="KEYWORD_REMOVED",
    query="""
        SELECT
            campaign.name,
            ad_group.id,
            ad_group.name,
            ad_group_criterion.criterion_id,
            ad_group_criterion.keyword.text,
            ad_group_criterion.keyword.match_type,
            ad_group_criterion.status,
            ad_group_criterion.approval_status
        FROM ad_group_criterion
        WHERE ad_group_criterion.type = 'KEYWORD'
            AND ad_group_criterion.negative = FALSE
            AND campaign.status != 'REMOVED'
            AND ad_group.status != 'REMOVED'
    """,
    parse_row=parse_keyword_row,
    id_header="Keyword ID",
    parent_headers=("Campaign Name", "AdGroup Name"),
    attribute_headers=("Keyword Text", "Match Type"),
    secondary=SecondaryAxis(
        header="Approval Status",
        values=KeywordApprovalStatus,
        fallback=APPROVAL_CHANGED,
        priority=("DISAPPROVED", "PENDING_REVIEW", "UNDER_REVIEW", "APPROVED"),
        labels={
            "DISAPPROVED": "Disapproved",
            "APPROVED": "Approved",
            "PENDING_REVIEW": "Pending Review",
            "UNDER_REVIEW": "Under Review",
        },
    ),
)

ENTITY_TYPES = {t.key: t for t in (AD, AD_GROUP, KEYWORD)}
