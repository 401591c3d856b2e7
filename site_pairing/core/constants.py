"""Shared constants — single source of truth.

Centralises API paths, media types, header names and defaults used by
the dispatcher, the codec and the operations.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# API paths (relative to the site base URL)
# ---------------------------------------------------------------------------

ASSOCIATIONS_PATH: str = "/api/site/associations"
"""Association collection resource (GET, POST single member, PUT full document)."""

LOCAL_ASSOCIATION_DATA_PATH: str = "/api/site/associations/localAssociationData"
"""Identity document a site exposes about itself."""

# ---------------------------------------------------------------------------
# Media types
# ---------------------------------------------------------------------------

SITE_ASSOCIATION_MEDIA_TYPE: str = "application/vnd.vmware.admin.siteAssociation+xml"
"""Single association member / local identity payload."""

SITE_ASSOCIATIONS_MEDIA_TYPE: str = "application/vnd.vmware.admin.siteAssociations+xml"
"""Full association collection payload."""

ACCEPT_TEMPLATE: str = "application/*+xml;version={version}"

# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

VCLOUD_AUTH_HEADER: str = "x-vcloud-authorization"
BEARER_AUTH_HEADER: str = "Authorization"

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

SITE_URN_PREFIX: str = "urn:vcloud:site:"

EDIT_LINK_REL: str = "edit"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_API_VERSION: str = "31.0"
DEFAULT_REQUEST_TIMEOUT_S: float = 30.0
DEFAULT_TASK_TIMEOUT_S: int = 300
"""Task polling budget; one unit is consumed per non-terminal poll."""
DEFAULT_POLL_INTERVAL_S: float = 1.0
