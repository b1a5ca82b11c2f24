"""Shared fixtures for newrelic_export tests."""

import json
import threading

import pytest


class FakeGraphQLClient:
    """Stand-in for RetryingClient answering from a handler function.

    The handler receives the decoded request payload and returns either a
    dict (serialized to JSON) or raw bytes.
    """

    def __init__(self, handler):
        self.handler = handler
        self.payloads = []
        self.closed = False
        self._lock = threading.Lock()

    def request(self, method, url, data=None, headers=None):
        payload = json.loads(data)
        with self._lock:
            self.payloads.append(payload)
        result = self.handler(payload)
        if isinstance(result, bytes):
            return result
        return json.dumps(result).encode()

    def close(self):
        self.closed = True


@pytest.fixture
def make_client():
    """Factory for FakeGraphQLClient instances."""
    return FakeGraphQLClient


@pytest.fixture
def api_client():
    return {
        "endpoint": "https://api.example.test/graphql",
        "account_id": 1234567,
        "headers": {"Content-Type": "application/json", "API-Key": "NRAK-TEST"},
        "timeout": 5,
    }
