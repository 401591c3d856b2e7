"""Tests for shared constants and helper functions."""

from __future__ import annotations

import unittest

from site_pairing.core.constants import ASSOCIATIONS_PATH, SITE_URN_PREFIX
from site_pairing.utils.helpers import (
    associations_url,
    host_of,
    local_association_data_url,
    normalize_site_id,
    site_base_url,
)

# ---------------------------------------------------------------------------
# Tests — core.constants
# ---------------------------------------------------------------------------


class TestConstants(unittest.TestCase):
    def test_associations_path(self) -> None:
        assert ASSOCIATIONS_PATH == "/api/site/associations"

    def test_urn_prefix(self) -> None:
        assert SITE_URN_PREFIX == "urn:vcloud:site:"


# ---------------------------------------------------------------------------
# Tests — utils.helpers.normalize_site_id
# ---------------------------------------------------------------------------


class TestNormalizeSiteId(unittest.TestCase):
    def test_bare_id_gains_prefix(self) -> None:
        assert normalize_site_id("abc-123") == "urn:vcloud:site:abc-123"

    def test_urn_unchanged(self) -> None:
        assert normalize_site_id("urn:vcloud:site:abc-123") == "urn:vcloud:site:abc-123"

    def test_whitespace_stripped(self) -> None:
        assert normalize_site_id("  urn:vcloud:site:x\n") == "urn:vcloud:site:x"

    def test_empty_stays_empty(self) -> None:
        assert normalize_site_id("  ") == ""


# ---------------------------------------------------------------------------
# Tests — utils.helpers URL builders
# ---------------------------------------------------------------------------


class TestSiteUrls(unittest.TestCase):
    def test_bare_domain(self) -> None:
        assert site_base_url("site-a.example.com") == "https://site-a.example.com"

    def test_url_with_path_and_trailing_slash(self) -> None:
        assert site_base_url("https://site-a.example.com/api/") == "https://site-a.example.com"

    def test_explicit_port_kept(self) -> None:
        assert site_base_url("https://site-a.example.com:8443") == "https://site-a.example.com:8443"

    def test_http_scheme_kept(self) -> None:
        assert site_base_url("http://lab.local") == "http://lab.local"

    def test_associations_url(self) -> None:
        assert associations_url("site-a.example.com") == "https://site-a.example.com/api/site/associations"

    def test_local_association_data_url(self) -> None:
        assert (
            local_association_data_url("https://site-a.example.com/")
            == "https://site-a.example.com/api/site/associations/localAssociationData"
        )

    def test_host_of(self) -> None:
        assert host_of("https://Site-A.example.com:8443/api/task/1") == "site-a.example.com"
