"""SOQL query runner.

Fetches exactly one page per call. Following nextRecordsUrl is left to the
caller, which decides how many pages it needs.
"""

from __future__ import annotations

import logging
from typing import Any, Dict
from urllib.parse import quote_plus

from crm_bridge.integrations.salesforce.client import SalesforceClient

logger = logging.getLogger(__name__)


def encode_soql(query: str) -> str:
    """
    Percent-encode a SOQL statement for the query endpoint.

    Commas and single quotes are put back as literals; some Salesforce
    deployments reject %2C and %27 in the q parameter.
    """
    encoded = quote_plus(query, safe="")
    return encoded.replace("%2C", ",").replace("%27", "'")


def soql_quote(value: Any) -> str:
    """Render a value as a quoted SOQL string literal."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


class QueryRunner:
    def __init__(self, client: SalesforceClient) -> None:
        self.client = client

    def run_query(self, query: str) -> Dict[str, Any]:
        """Run a SOQL query and return the first page ({} on failure)."""
        logger.debug("Running SOQL: %s", query)
        return self.client.get_data(f"/query/?q={encode_soql(query)}")

    def get_next_page(self, cursor: str) -> Dict[str, Any]:
        """Fetch the page behind an opaque nextRecordsUrl cursor."""
        return self.client.get_cursor(cursor)
