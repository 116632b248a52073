"""
Salesforce OAuth token manager.

Uses the OAuth 2.0 username-password flow. The instance_url returned by the
auth server replaces the configured login URL for every later data call, since
Salesforce may redirect an org to a different pod.

Tokens are never refreshed automatically. Session.is_expired() reports the
nominal lifetime only; a caller that needs a fresh token calls refresh().
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from pydantic import ValidationError

from crm_bridge.integrations.contracts.salesforce import TokenResponse
from crm_bridge.integrations.salesforce.errors import ErrorKind, SalesforceError
from crm_bridge.utils.config_loader import TOKEN_ENDPOINT, SalesforceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    base_url: str
    access_token: str
    token_acquired_at: float
    token_ttl: int  # seconds

    def is_expired(self, now: float) -> bool:
        return now - self.token_acquired_at >= self.token_ttl


class TokenManager:
    def __init__(
        self,
        config: SalesforceConfig,
        http: requests.Session,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.http = http
        self._clock = clock
        self._session: Optional[Session] = None
        self._lock = threading.Lock()
        self._attempts = 0
        self.last_error: Optional[SalesforceError] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def token_exists(self) -> bool:
        return self._session is not None and bool(self._session.access_token)

    def acquire_token(self) -> Optional[Session]:
        """
        Fetch a token if none has been acquired yet.

        Only one fetch runs at a time. A caller that waited on an in-flight
        fetch reuses its outcome instead of posting credentials again.
        """
        seen = self._attempts
        with self._lock:
            if self._attempts != seen or self.token_exists():
                return self._session
            return self._fetch_locked()

    def refresh(self) -> Optional[Session]:
        """Force a new token fetch. Keeps the previous session if the fetch fails."""
        seen = self._attempts
        with self._lock:
            if self._attempts != seen:
                return self._session
            return self._fetch_locked()

    def _fetch_locked(self) -> Optional[Session]:
        self._attempts += 1
        try:
            session = self._request_token()
        except SalesforceError as e:
            logger.error("%s", e)
            self.last_error = e
            return None
        self.last_error = None
        self._session = session
        return session

    def _request_token(self) -> Session:
        login_url = self.config.resolved_base_url
        url = f"{login_url}{TOKEN_ENDPOINT}"
        form = {
            "grant_type": "password",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "username": self.config.resolved_username,
            "password": self.config.password,
        }

        try:
            response = self.http.post(
                url,
                data=form,
                timeout=self.config.token_ttl_minutes,
                verify=self.config.ssl_verify,
            )
        except requests.RequestException as e:
            raise SalesforceError(
                ErrorKind.AUTH_FAILURE, f"Salesforce token request failed! URL: {url} ({e})"
            ) from e

        code = response.status_code
        if code >= 300:
            if self.config.debug:
                logger.debug("Salesforce token response body: %s", response.text)
            raise SalesforceError(
                ErrorKind.AUTH_FAILURE, f"Salesforce token request rejected! Code: {code}", status_code=code
            )

        try:
            token = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SalesforceError(
                ErrorKind.AUTH_FAILURE, f"Salesforce token response could not be decoded: {e}", status_code=code
            ) from e

        logger.info("Salesforce token acquired for instance %s", token.instance_url)
        return Session(
            base_url=token.instance_url.rstrip("/"),
            access_token=token.access_token,
            token_acquired_at=self._clock(),
            token_ttl=self.config.token_ttl_minutes * 60,
        )
