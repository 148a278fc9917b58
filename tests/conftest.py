import pytest

from status_tracker.dump.fetch_entities import GoogleAdsApiError
from status_tracker.entities import AccountIdentity, EntitySnapshotRecord

TIMESTAMP = "2026-01-15 06:00:00"


def ad(ad_id, status="ENABLED", approval="APPROVED", campaign="Brand", ad_group="Exact"):
    return EntitySnapshotRecord(
        id=ad_id,
        parent_names=(campaign, ad_group),
        attributes=("RESPONSIVE_SEARCH_AD",),
        status=status,
        secondary_status=approval,
    )


def ad_group(ad_group_id, status="ENABLED", name="Exact", campaign="Brand"):
    return EntitySnapshotRecord(
        id=ad_group_id,
        parent_names=(campaign,),
        attributes=(name,),
        status=status,
    )


def keyword(keyword_id, status="ENABLED", approval="APPROVED", text="heat pump", match="PHRASE"):
    return EntitySnapshotRecord(
        id=keyword_id,
        parent_names=("Generic", "Heat Pumps"),
        attributes=(text, match),
        status=status,
        secondary_status=approval,
    )


def keyword_row(ad_group_id, criterion_id, status="ENABLED", approval="APPROVED"):
    """GAQL REST row for an ad_group_criterion query."""
    return {
        "campaign": {"name": "Generic"},
        "adGroup": {"id": ad_group_id, "name": "Heat Pumps"},
        "adGroupCriterion": {
            "criterionId": criterion_id,
            "keyword": {"text": "heat pump", "matchType": "PHRASE"},
            "status": status,
            "approvalStatus": approval,
        },
    }


def ad_row(ad_id, status="ENABLED", approval="APPROVED"):
    """GAQL REST row for an ad_group_ad query."""
    return {
        "campaign": {"name": "Brand"},
        "adGroup": {"name": "Exact"},
        "adGroupAd": {
            "ad": {"id": ad_id, "type": "RESPONSIVE_SEARCH_AD"},
            "status": status,
            "policySummary": {"approvalStatus": approval},
        },
    }


class FakeAdsClient:
    """Yields canned rows; optionally raises after `fail_after` rows."""

    def __init__(self, rows=None, fail_after=None, error=None, customer_id="1234567890"):
        self.rows = rows or []
        self.fail_after = fail_after
        self.error = error or GoogleAdsApiError("API error 500: backend")
        self.customer_id = customer_id
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        for i, row in enumerate(self.rows):
            if self.fail_after is not None and i >= self.fail_after:
                raise self.error
            yield row
        if self.fail_after is not None and self.fail_after >= len(self.rows):
            raise self.error


@pytest.fixture
def account():
    return AccountIdentity(name="Acme HVAC", customer_id="123-456-7890")
