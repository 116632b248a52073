"""
Salesforce REST HTTP envelope.

Every call to the Salesforce data API goes through SalesforceClient.request().
It attaches the bearer token, classifies the response and decodes the JSON
body. Public helpers (get_data, post_data, ...) never raise: anything other
than a successful decoded body comes back as {}.

Classification:
- no token yet           -> empty, no network call
- 204                    -> synthesized "no content" success object
- 404                    -> empty, not logged (missing records are expected)
- any other status >=300 -> empty, logged at ERROR with endpoint and code
- timeout / connection   -> empty, logged at ERROR, no retry
- malformed JSON         -> empty, logged at ERROR
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

from crm_bridge.integrations.salesforce.errors import ErrorKind, Result, SalesforceError
from crm_bridge.integrations.salesforce.session import Session, TokenManager
from crm_bridge.utils.config_loader import SalesforceConfig

logger = logging.getLogger(__name__)


class Base(str, Enum):
    DATA = "data"          # {instance}/services/data/<version><endpoint>
    INSTANCE = "instance"  # {instance}<endpoint>, e.g. Apex REST
    CURSOR = "cursor"      # opaque cursor resolved against the instance URL


class SalesforceClient:
    def __init__(self, config: SalesforceConfig, tokens: TokenManager, http: requests.Session) -> None:
        self.config = config
        self.tokens = tokens
        self.http = http

    def _headers(self, session: Session) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
        }

    def _url(self, session: Session, endpoint: str, base: Base) -> str:
        if base is Base.CURSOR:
            return urljoin(session.base_url + "/", endpoint)
        if base is Base.INSTANCE:
            return f"{session.base_url}{endpoint}"
        return f"{session.base_url}{self.config.data_endpoint}{endpoint}"

    def request(self, method: str, endpoint: str, body: Optional[Any] = None, *, base: Base = Base.DATA) -> Result:
        method = method.upper()
        session = self.tokens.session
        if session is None or not self.tokens.token_exists():
            return Result.empty(ErrorKind.NO_TOKEN)

        url = self._url(session, endpoint, base)
        if self.config.debug and body is not None:
            logger.debug("Salesforce %s %s payload: %s", method, url, body)

        try:
            return self._send(method, url, endpoint, body, session)
        except SalesforceError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                return Result.empty(ErrorKind.NOT_FOUND, status_code=e.status_code)
            logger.error("%s", e)
            return Result.err(e)

    def _send(self, method: str, url: str, endpoint: str, body: Optional[Any], session: Session) -> Result:
        try:
            response = self.http.request(
                method,
                url,
                json=body,
                headers=self._headers(session),
                timeout=self.config.token_ttl_minutes,
                verify=self.config.ssl_verify,
            )
        except requests.RequestException as e:
            raise SalesforceError(
                ErrorKind.TRANSPORT_FAILURE,
                f"Salesforce {method} failed! URL: {url} ({e})",
            ) from e

        code = response.status_code
        if code >= 300:
            if code == 404:
                raise SalesforceError(ErrorKind.NOT_FOUND, f"Not found: {endpoint}", status_code=code)
            if self.config.debug:
                logger.debug("Salesforce %s %s response body: %s", method, url, response.text)
            raise SalesforceError(
                ErrorKind.REMOTE_REJECTED,
                f"Salesforce {method} request rejected! Code: {code} at endpoint: {endpoint}",
                status_code=code,
            )

        if code == 204:
            return Result.ok(
                {
                    "endpoint": endpoint,
                    "code": 204,
                    "method": method,
                    "result": "Success! (no content)",
                },
                status_code=code,
            )

        if not response.content:
            return Result.ok({}, status_code=code)

        try:
            payload = response.json()
        except ValueError as e:
            raise SalesforceError(
                ErrorKind.DECODE_FAILURE,
                f"Salesforce {method} response from {endpoint} could not be decoded: {e}",
                status_code=code,
            ) from e

        if self.config.debug:
            logger.debug("Salesforce %s %s response: %s", method, url, payload)
        return Result.ok(payload, status_code=code)

    # ------------------------------------------------------------------ #
    # Public helpers: decoded body or {}
    # ------------------------------------------------------------------ #
    def get_data(self, endpoint: str) -> Any:
        return self.request("GET", endpoint).unwrap_or_empty()

    def post_data(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("POST", endpoint, data).unwrap_or_empty()

    def patch_data(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("PATCH", endpoint, data).unwrap_or_empty()

    def put_data(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("PUT", endpoint, data).unwrap_or_empty()

    def post_apex(self, endpoint: str, data: Dict[str, Any]) -> Any:
        result = self.request("POST", endpoint, data, base=Base.INSTANCE)
        if result.is_ok:
            logger.info("Salesforce Apex call %s succeeded: %s", endpoint, result.payload)
        return result.unwrap_or_empty()

    def get_cursor(self, cursor: str) -> Any:
        return self.request("GET", cursor, base=Base.CURSOR).unwrap_or_empty()
