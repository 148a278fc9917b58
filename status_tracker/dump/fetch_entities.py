#!/usr/bin/env python3
"""
Entity Fetcher - Google Ads

Read-only. Runs one GAQL query per entity type and returns the current
state of every tracked entity keyed by id, in fetch order.

Transport failures (HTTP errors, API errors) are reported and degrade to a
partial or empty result. Row parsing errors are not caught.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

import requests

from status_tracker.entities import AccountIdentity, EntityType

# =============================================================================
# CONFIGURATION
# =============================================================================

GOOGLE_ADS_API_VERSION = "v19"
OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
HTTP_TIMEOUT_SECONDS = 60

ACCOUNT_QUERY = """
    SELECT
        customer.id,
        customer.descriptive_name
    FROM customer
    LIMIT 1
"""


class GoogleAdsApiError(Exception):
    """Raised on a non-200 response from the Google Ads or OAuth endpoints."""


def format_customer_id(customer_id) -> str:
    """'1234567890' -> '123-456-7890' (Ads UI format). Other shapes pass through."""
    digits = str(customer_id).replace("-", "").strip()
    if len(digits) != 10 or not digits.isdigit():
        return str(customer_id).strip()
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


# =============================================================================
# CREDENTIAL LOADING
# =============================================================================


def get_access_token():
    """Get OAuth access token via refresh token."""
    response = requests.post(
        OAUTH_TOKEN_URL,
        data={
            "client_id": os.getenv("GOOGLE_ADS_CLIENT_ID"),
            "client_secret": os.getenv("GOOGLE_ADS_CLIENT_SECRET"),
            "refresh_token": os.getenv("GOOGLE_ADS_REFRESH_TOKEN"),
            "grant_type": "refresh_token",
        },
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    if response.status_code != 200:
        raise GoogleAdsApiError(f"Token refresh failed: {response.text}")
    return response.json()["access_token"]


# =============================================================================
# GOOGLE ADS API CLIENT
# =============================================================================


class GoogleAdsClient:
    """Minimal Google Ads API client for read-only operations."""

    def __init__(self, customer_id: str, access_token: str, login_customer_id: str = None):
        self.customer_id = customer_id.replace("-", "")
        self.access_token = access_token
        self.login_customer_id = login_customer_id.replace("-", "") if login_customer_id else None
        self.base_url = f"https://googleads.googleapis.com/{GOOGLE_ADS_API_VERSION}"

    def _headers(self):
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "developer-token": os.getenv("GOOGLE_ADS_DEVELOPER_TOKEN"),
            "Content-Type": "application/json",
        }
        if self.login_customer_id:
            headers["login-customer-id"] = self.login_customer_id
        return headers

    def search(self, query: str):
        """Execute GAQL query and yield result rows page by page."""
        url = f"{self.base_url}/customers/{self.customer_id}/googleAds:search"
        page_token = None

        while True:
            payload = {"query": query}
            if page_token:
                payload["pageToken"] = page_token

            response = requests.post(
                url, headers=self._headers(), json=payload, timeout=HTTP_TIMEOUT_SECONDS
            )

            if response.status_code != 200:
                raise GoogleAdsApiError(f"API error {response.status_code}: {response.text}")

            data = response.json()
            yield from data.get("results", [])

            page_token = data.get("nextPageToken")
            if not page_token:
                break

    def get_account_identity(self) -> AccountIdentity:
        """Look up the account's display name and customer id."""
        for row in self.search(ACCOUNT_QUERY):
            customer = row.get("customer", {})
            return AccountIdentity(
                name=customer.get("descriptiveName", ""),
                customer_id=format_customer_id(customer.get("id", self.customer_id)),
            )
        return AccountIdentity(name="", customer_id=format_customer_id(self.customer_id))


# =============================================================================
# FETCHERS
# =============================================================================


@dataclass
class FetchResult:
    entities: dict = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fetch_current_entities(client: GoogleAdsClient, entity_type: EntityType) -> FetchResult:
    """
    Fetch current state of every entity of one type.

    Args:
        client: Google Ads client (anything with a search(query) generator)
        entity_type: Descriptor supplying the query and row parser

    Returns:
        FetchResult; on transport failure, entities holds the rows gathered
        before the failure and error holds the message
    """
    result = FetchResult()

    try:
        for row in client.search(entity_type.query):
            record = entity_type.parse_row(row)
            result.entities[record.id] = record
    except (GoogleAdsApiError, requests.RequestException) as e:
        result.error = str(e)
        print(f"  ERROR querying {entity_type.plural.lower()}: {e}")

    return result


def fetch_account_identity(client: GoogleAdsClient) -> AccountIdentity:
    """Account identity with the same fail-open policy as the entity fetch."""
    try:
        return client.get_account_identity()
    except (GoogleAdsApiError, requests.RequestException) as e:
        print(f"  ERROR querying account identity: {e}")
        return AccountIdentity(name="", customer_id=format_customer_id(client.customer_id))
