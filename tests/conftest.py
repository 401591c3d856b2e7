"""Shared pytest fixtures for the site pairing test suite."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from site_pairing.core.config import PairingConfig
from site_pairing.operations.context import PairingContext
from tests.fakes import SITE_A, SITE_B, FakeSiteApi, site_urn

# ---------------------------------------------------------------------------
# Fake API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def api() -> FakeSiteApi:
    """An empty fake API; tests add the sites they need."""
    return FakeSiteApi()


@pytest.fixture()
def two_sites(api: FakeSiteApi) -> FakeSiteApi:
    """Alpha (site 1) and Beta (site 2), both named and unpaired."""
    api.add_site(SITE_A, site_urn(1), "Alpha")
    api.add_site(SITE_B, site_urn(2), "Beta")
    return api


@pytest.fixture()
def config() -> PairingConfig:
    """Configuration with no wait between polls and a small budget."""
    return PairingConfig(poll_interval_s=0.0, task_timeout_s=5)


@pytest.fixture()
def ctx(api: FakeSiteApi, config: PairingConfig) -> Iterator[PairingContext]:
    """Operation context wired to the fake API."""
    client = httpx.Client(transport=api.transport())
    context = PairingContext.create(api.sessions, config, client=client)
    yield context
    context.close()
    client.close()
