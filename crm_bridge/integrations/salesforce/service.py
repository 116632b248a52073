"""
Salesforce adapter facade.

Owns one authenticated session (fetched eagerly on construction), the HTTP
envelope, the SOQL runner and read-through caching of reference data.

Public methods never raise for remote failures. They log and return an empty
value ({} or []) so CRM sync never blocks the main loan workflow. Callers
treat "empty" as the single failure signal.

Cache keys are shared with anything else that reads the cache directly and
must not change:

    sf_fields_<resource>       sf_picklist_<resource>    sf.sources
    sf.account.<id[:-3]>       sf.account.<id>.owner     sf.contact.<id>
    sf.lead.<id>               sf.users                  sf.bdos
    sf.campaigns
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from crm_bridge.integrations.contracts.salesforce import (
    NamedRecord,
    UserRecord,
    parse_query_page,
)
from crm_bridge.integrations.salesforce.client import SalesforceClient
from crm_bridge.integrations.salesforce.mapping import snake_case_field
from crm_bridge.integrations.salesforce.query import QueryRunner, soql_quote
from crm_bridge.integrations.salesforce.session import TokenManager
from crm_bridge.utils.config_loader import SalesforceConfig

logger = logging.getLogger(__name__)

BOOLEAN_PICKLIST_VALUES = {"Yes", "No"}

# None is a legitimate cached value, so misses need their own marker
MISSING = object()


def _by_name(item: Dict[str, Any]) -> str:
    return item.get("name") or ""


class SalesforceService:
    def __init__(
        self,
        config: SalesforceConfig,
        cache,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            config: Connection settings.
            cache: Cache backend (crm_bridge.database.redis or redis_real RedisCache).
            http: requests.Session to send calls through. A new one is created if omitted.
            clock: Time source for token bookkeeping.
        """
        self.config = config
        self.cache = cache
        self.cache_time = config.cache_ttl_seconds
        self.http = http or requests.Session()
        self.tokens = TokenManager(config, self.http, clock=clock)
        self.client = SalesforceClient(config, self.tokens, self.http)
        self.queries = QueryRunner(self.client)

        if self.tokens.acquire_token() is None:
            logger.error("Salesforce adapter started without a token; all calls will return empty results")

    # ------------------------------------------------------------------ #
    # Session / cache
    # ------------------------------------------------------------------ #
    def token_exists(self) -> bool:
        return self.tokens.token_exists()

    def set_cache_time(self, seconds: int) -> None:
        self.cache_time = seconds

    def clear_cache(self) -> None:
        """Flush the WHOLE cache store, including keys written by other components."""
        logger.warning("Flushing all cached entries")
        self.cache.flush_all()

    def _cache(self, key: str, value: Any) -> None:
        self.cache.put(key, value, self.cache_time)

    def _from_cache(self, key: str) -> Any:
        """Cached value, or MISSING on a miss."""
        return self.cache.get(key, MISSING)

    def _cached_get(self, key: str, endpoint: str) -> Dict[str, Any]:
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached
        record = self.client.get_data(endpoint)
        if record:
            self._cache(key, record)
        return record

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def run_query(self, query: str) -> Dict[str, Any]:
        return self.queries.run_query(query)

    def get_next_page(self, cursor: str) -> Dict[str, Any]:
        return self.queries.get_next_page(cursor)

    def query_all(self, query: str) -> List[Dict[str, Any]]:
        """Run a query and follow nextRecordsUrl until the last page."""
        page = parse_query_page(self.run_query(query))
        if page is None:
            return []
        records = list(page.records)
        while page.next_records_url:
            page = parse_query_page(self.get_next_page(page.next_records_url))
            if page is None:
                logger.error("Salesforce pagination stopped early for query: %s", query)
                break
            records.extend(page.records)
        return records

    def first_record(self, query: str) -> Optional[Dict[str, Any]]:
        page = parse_query_page(self.run_query(query))
        if page is None or not page.records:
            return None
        return page.records[0]

    def find_id_by_email(self, sobject: str, email: str, field: str = "Id") -> Optional[str]:
        record = self.first_record(f"SELECT {field} FROM {sobject} WHERE Email = {soql_quote(email)}")
        return record.get(field) if record else None

    # ------------------------------------------------------------------ #
    # Describe
    # ------------------------------------------------------------------ #
    def describe_resource(self, name: str) -> Dict[str, Any]:
        # Not cached: describe payloads are very large.
        return self.client.get_data(f"/sobjects/{name}/describe")

    def get_fields(self, resource: str) -> List[Dict[str, Any]]:
        key = f"sf_fields_{resource.lower()}"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        result = self.describe_resource(resource)
        if not result:
            return []

        fields = sorted(result.get("fields", []), key=_by_name)
        if not fields:
            return []
        self._cache(key, fields)
        return fields

    def get_picklists(self, resource: str, snakecase: bool = True) -> Dict[str, Any]:
        """
        Picklist values per field, plus record type name -> id under "record_types".

        Plain Yes/No values are skipped; those fields are handled as booleans.
        """
        key = f"sf_picklist_{resource.lower()}"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        result = self.describe_resource(resource)
        if not result:
            return {}

        picklists: Dict[str, Any] = {}
        for field in result.get("fields", []):
            values = field.get("picklistValues") or []
            if not values:
                continue
            name = snake_case_field(field["name"]) if snakecase else field["name"]
            for item in values:
                if item.get("value") in BOOLEAN_PICKLIST_VALUES:
                    continue
                picklists.setdefault(name, []).append(item.get("value"))

        record_types = result.get("recordTypeInfos") or []
        if record_types:
            picklists["record_types"] = {rt["name"]: rt["recordTypeId"] for rt in record_types}

        if picklists:
            self._cache(key, picklists)
        return picklists

    # ------------------------------------------------------------------ #
    # Reference lists
    # ------------------------------------------------------------------ #
    def get_sources(self) -> List[Dict[str, Any]]:
        """Referral source accounts (every page of the query)."""
        key = "sf.sources"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        records = self.query_all(
            "SELECT Id,Name FROM Account WHERE Account.Type <> 'Small Business Account' "
            "AND Status__c NOT IN ('Open', '') ORDER BY Name ASC"
        )
        if not records:
            return []

        sources = [NamedRecord(id=r["Id"], name=r.get("Name")).model_dump() for r in records]
        self._cache(key, sources)
        return sources

    def get_users(self) -> List[Dict[str, Any]]:
        """Active users and queues, sorted by name."""
        key = "sf.users"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        users: List[Dict[str, Any]] = []
        complete = True
        for query in (
            "SELECT Id,Name,Email FROM User ORDER BY Name ASC",
            "SELECT Id,Name,Email FROM Group WHERE Type = 'Queue' ORDER BY Name ASC",
        ):
            page = parse_query_page(self.run_query(query))
            if page is None:
                complete = False
                continue
            users.extend(
                UserRecord(id=r["Id"], name=r.get("Name"), email=r.get("Email")).model_dump()
                for r in page.records
            )

        if not users:
            return []
        users.sort(key=_by_name)
        # a partial list is returned but not cached
        if complete:
            self._cache(key, users)
        return users

    def get_bdos(self) -> List[Dict[str, Any]]:
        """Business development officers (users in the BDO profiles)."""
        key = "sf.bdos"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        profile_ids = ", ".join(soql_quote(p) for p in self.config.org.bdo_profile_ids)
        page = parse_query_page(
            self.run_query(f"SELECT Id,Name,Email FROM User WHERE ProfileId IN({profile_ids}) ORDER BY Name ASC")
        )
        if page is None or not page.records:
            return []

        self._cache(key, page.records)
        return page.records

    def get_campaigns(self) -> List[Dict[str, Any]]:
        key = "sf.campaigns"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        page = parse_query_page(self.run_query("SELECT Id,Name FROM Campaign ORDER BY Name ASC"))
        if page is None or not page.records:
            return []

        campaigns = [NamedRecord(id=r["Id"], name=r.get("Name")).model_dump() for r in page.records]
        self._cache(key, campaigns)
        return campaigns

    # ------------------------------------------------------------------ #
    # Single records
    # ------------------------------------------------------------------ #
    def get_account(self, sf_id: str) -> Dict[str, Any]:
        # 18-char ids share a cache entry with their 15-char form
        return self._cached_get(f"sf.account.{sf_id[:-3]}", f"/sobjects/Account/{sf_id}")

    def get_account_owner(self, account_id: str) -> Dict[str, Any]:
        return self._cached_get(f"sf.account.{account_id}.owner", f"/sobjects/Account/{account_id}/owner")

    def get_contact(self, sf_id: str) -> Dict[str, Any]:
        return self._cached_get(f"sf.contact.{sf_id}", f"/sobjects/Contact/{sf_id}")

    def get_lead(self, sf_id: str) -> Dict[str, Any]:
        return self._cached_get(f"sf.lead.{sf_id}", f"/sobjects/Lead/{sf_id}")

    def get_opportunity(self, sf_id: str) -> Dict[str, Any]:
        """Opportunity record with the owner's name added as OwnerName."""
        # Shares the sf.lead.* namespace; lead and opportunity ids never collide.
        key = f"sf.lead.{sf_id}"
        cached = self._from_cache(key)
        if cached is not MISSING:
            return cached

        opportunity = self.client.get_data(f"/sobjects/Opportunity/{sf_id}")
        if not opportunity:
            return {}

        record = self.first_record(f"SELECT Owner.Name FROM Opportunity WHERE Id={soql_quote(sf_id)}")
        if record and record.get("Owner"):
            opportunity["OwnerName"] = record["Owner"].get("Name")

        self._cache(key, opportunity)
        return opportunity
