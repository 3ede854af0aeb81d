# -*- coding: utf-8 -*-
"""
Shared fixtures and utilities for testing the CLOB execution client.
"""

import base64
import json
import pytest
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from clob_exec.auth import ApiCredentials
from clob_exec.models import ConnectionConfig, InstrumentMetadata, LoopConfig


TEST_HOST = "https://test-clob.example.com"
TEST_TOKEN_ID = 123456
TEST_SECRET_BYTES = b"super-secret-hmac-key-material!!"


class FakeResponse:
    """Minimal stand-in for an aiohttp response used as a context manager."""

    def __init__(self, status: int, body: Union[str, bytes]):
        self.status = status
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Records requests and answers them from a route table.

    Routes map (method, path) to a (status, body) tuple, a list of such
    tuples consumed in order, or an exception instance to raise.
    """

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None):
        self.routes = routes or {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _respond(self, method: str, url: str, **kwargs) -> FakeResponse:
        path = url[len(TEST_HOST):] if url.startswith(TEST_HOST) else url
        self.calls.append({"method": method, "url": url, "path": path, **kwargs})
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404, json.dumps({"error": "not found"}))
        if isinstance(route, list):
            route = route.pop(0)
        if isinstance(route, BaseException):
            raise route
        status, body = route
        if not isinstance(body, (str, bytes)):
            body = json.dumps(body)
        return FakeResponse(status, body)

    def get(self, url, params=None, **kwargs):
        return self._respond("GET", url, params=params, **kwargs)

    def post(self, url, data=None, headers=None, **kwargs):
        return self._respond("POST", url, data=data, headers=headers, **kwargs)

    def calls_for(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    async def close(self):
        self.closed = True


class StubCredentialSource:
    """Credential handshake stub that counts calls."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls = 0

    def create_or_derive(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.response


class StubOrderSigner:
    """Signing capability stub returning a deterministic payload."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls = []

    def sign_order(self, unsigned):
        self.calls.append(unsigned)
        if self.error is not None:
            raise self.error
        request = unsigned.request
        return {
            "salt": 1700000000 + len(self.calls),
            "maker": "0x0000000000000000000000000000000000000001",
            "tokenId": str(request.token_id),
            "makerAmount": "50000000",
            "takerAmount": "100000000",
            "side": request.side.value,
            "feeRateBps": str(unsigned.metadata.fee_rate_bps),
            "signatureType": 2,
            "signature": "0x" + "ab" * 65,
        }


def metadata_routes(tick_size="0.01", neg_risk=False, base_fee=0) -> Dict[Tuple[str, str], Any]:
    """Success routes for the three metadata endpoints."""
    return {
        ("GET", "/tick-size"): (200, {"minimum_tick_size": tick_size}),
        ("GET", "/neg-risk"): (200, {"neg_risk": neg_risk}),
        ("GET", "/fee-rate"): (200, {"base_fee": base_fee}),
    }


@pytest.fixture
def api_secret() -> str:
    """URL-safe base64 secret without padding."""
    return base64.urlsafe_b64encode(TEST_SECRET_BYTES).decode().rstrip("=")


@pytest.fixture
def api_credentials(api_secret) -> ApiCredentials:
    return ApiCredentials(
        api_key="a1b2c3d4-0000-1111-2222-333344445555",
        api_secret=api_secret,
        passphrase="correct-horse-battery",
    )


@pytest.fixture
def credential_response(api_secret) -> Dict[str, str]:
    """Credential endpoint payload."""
    return {
        "apiKey": "a1b2c3d4-0000-1111-2222-333344445555",
        "secret": api_secret,
        "passphrase": "correct-horse-battery",
    }


@pytest.fixture
def connection_config() -> ConnectionConfig:
    return ConnectionConfig(host=TEST_HOST, timeout=5.0)


@pytest.fixture
def loop_config() -> LoopConfig:
    return LoopConfig(iterations=3, delay=0.0)


@pytest.fixture
def sample_metadata() -> InstrumentMetadata:
    return InstrumentMetadata(
        token_id=TEST_TOKEN_ID,
        tick_size=Decimal("0.01"),
        neg_risk=False,
        fee_rate_bps=0,
    )


@pytest.fixture
def fake_session():
    """Session answering the metadata endpoints successfully."""
    return FakeSession(metadata_routes())


@pytest.fixture
def stub_signer() -> StubOrderSigner:
    return StubOrderSigner()


@pytest.fixture
def stub_credential_source(credential_response) -> StubCredentialSource:
    return StubCredentialSource(response=credential_response)
