"""Shared constants for the XML codec."""

from __future__ import annotations

# vCloud API namespace used by association and task documents
VCLOUD_NAMESPACE = "http://www.vmware.com/vcloud/v1.5"

NSMAP = {"v": VCLOUD_NAMESPACE}

# Root element local names
SITE_ASSOCIATION_MEMBER = "SiteAssociationMember"
SITE_ASSOCIATIONS = "SiteAssociations"
TASK = "Task"

# Child element local names, in schema order for a member
LINK = "Link"
REST_ENDPOINT = "RestEndpoint"
SITE_ID = "SiteId"
SITE_NAME = "SiteName"
ERROR = "Error"
