"""Pytest fixtures and fakes for the Salesforce adapter tests."""

import json

import pytest

from crm_bridge.database.redis import RedisCache
from crm_bridge.integrations.salesforce.service import SalesforceService
from crm_bridge.utils.config_loader import SalesforceConfig

INSTANCE_URL = "https://na99.salesforce.com"
DATA_URL = f"{INSTANCE_URL}/services/data/v50.0"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        return json.loads(self.text)


def token_ok(instance_url=INSTANCE_URL, token="tok-1"):
    return FakeResponse(200, {"access_token": token, "instance_url": instance_url, "token_type": "Bearer"})


class FakeHttp:
    """
    Stand-in for requests.Session.

    post() serves the OAuth token endpoint; request() serves data calls from a
    queue of responses (or exceptions) in order.
    """

    def __init__(self, token_response=None):
        self.token_response = token_response if token_response is not None else token_ok()
        self.token_calls = []
        self.calls = []
        self._queue = []

    def queue(self, *responses):
        self._queue.extend(responses)
        return self

    def post(self, url, data=None, **kwargs):
        self.token_calls.append({"url": url, "data": data, **kwargs})
        if isinstance(self.token_response, Exception):
            raise self.token_response
        return self.token_response

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self._queue.pop(0) if self._queue else FakeResponse(200, {})
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def config():
    return SalesforceConfig(
        base_url="https://login.salesforce.com",
        sandbox_url="https://test.salesforce.com",
        environment="testing",
        client_id="cid",
        client_secret="secret",
        username="sync@example.com",
        password="pw",
        api_version="v50.0",
    )


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def cache():
    return RedisCache()


@pytest.fixture
def service(config, cache, http):
    return SalesforceService(config, cache, http=http)
