"""Shared helper functions used across the operation modules."""

from __future__ import annotations

import httpx

from site_pairing.core.constants import (
    ASSOCIATIONS_PATH,
    LOCAL_ASSOCIATION_DATA_PATH,
    SITE_URN_PREFIX,
)


def normalize_site_id(site_id: str) -> str:
    """Return *site_id* in its fully qualified URN form.

    Bare ids (``"1b2c..."``) gain the ``urn:vcloud:site:`` prefix; ids
    already carrying it are returned stripped of surrounding whitespace.
    """
    site_id = site_id.strip()
    if not site_id or site_id.startswith(SITE_URN_PREFIX):
        return site_id
    return f"{SITE_URN_PREFIX}{site_id}"


def site_base_url(site: str) -> str:
    """Turn a site domain or URL into an ``https://host[:port]`` base URL.

    ``"site-a.example.com"``, ``"https://site-a.example.com/"`` and
    ``"https://site-a.example.com/api"`` all map to
    ``"https://site-a.example.com"``.
    """
    site = site.strip().rstrip("/")
    if "://" not in site:
        site = f"https://{site}"
    url = httpx.URL(site)
    netloc = f"{url.host}:{url.port}" if url.port else url.host
    return f"{url.scheme}://{netloc}"


def host_of(uri: str) -> str:
    return httpx.URL(uri).host


def associations_url(site: str) -> str:
    return f"{site_base_url(site)}{ASSOCIATIONS_PATH}"


def local_association_data_url(site: str) -> str:
    return f"{site_base_url(site)}{LOCAL_ASSOCIATION_DATA_PATH}"
