"""Encoding of typed models back into request bodies.

Members decoded from the API are re-emitted from their ``source`` bytes
so fields this package does not model (certificates, public keys,
endpoints) survive a read-modify-write untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import etree

from site_pairing.codec._constants import (
    LINK,
    REST_ENDPOINT,
    SITE_ASSOCIATION_MEMBER,
    SITE_ASSOCIATIONS,
    SITE_ID,
    SITE_NAME,
    VCLOUD_NAMESPACE,
)
from site_pairing.codec._decode import parse_xml
from site_pairing.core.constants import SITE_ASSOCIATIONS_MEDIA_TYPE

if TYPE_CHECKING:
    from lxml.etree import _Element

    from site_pairing.models.site import AssociationDocument, Link, SiteIdentity


def encode_site_identity(identity: SiteIdentity) -> bytes:
    """Serialize *identity* as a ``SiteAssociationMember`` request body."""
    return _to_document(_member_element(identity))


def encode_site_identity_with_name(identity: SiteIdentity, site_name: str) -> bytes:
    """Serialize *identity* with ``SiteName`` replaced by *site_name*.

    When the element is missing it is inserted directly after ``SiteId``,
    in the namespace of the member element.
    """
    element = _member_element(identity)
    name_elem = _find_child(element, SITE_NAME)
    if name_elem is None:
        namespace = etree.QName(element).namespace
        name_elem = etree.Element(etree.QName(namespace, SITE_NAME) if namespace else SITE_NAME)
        id_elem = _find_child(element, SITE_ID)
        if id_elem is not None:
            id_elem.addnext(name_elem)
        else:
            element.append(name_elem)
    name_elem.text = site_name
    return _to_document(element)


def encode_association_document(document: AssociationDocument) -> bytes:
    """Serialize *document* as a full ``SiteAssociations`` replacement body."""
    root = etree.Element(_q(SITE_ASSOCIATIONS), nsmap={None: VCLOUD_NAMESPACE})
    if document.href:
        root.set("href", document.href)
    root.set("type", SITE_ASSOCIATIONS_MEDIA_TYPE)
    _append_links(root, document.links)
    for member in document.members:
        root.append(_member_element(member))
    return _to_document(root)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _q(name: str) -> str:
    return f"{{{VCLOUD_NAMESPACE}}}{name}"


def _find_child(element: _Element, name: str) -> _Element | None:
    """First direct child named *name*, namespaced or not."""
    found = element.find(_q(name))
    if found is None:
        found = element.find(name)
    return found


def _to_document(element: _Element) -> bytes:
    return etree.tostring(element, xml_declaration=True, encoding="UTF-8")


def _member_element(identity: SiteIdentity) -> _Element:
    if identity.source:
        return parse_xml(identity.source)

    element = etree.Element(_q(SITE_ASSOCIATION_MEMBER), nsmap={None: VCLOUD_NAMESPACE})
    _append_links(element, identity.links)
    if identity.rest_endpoint:
        etree.SubElement(element, _q(REST_ENDPOINT)).text = identity.rest_endpoint
    etree.SubElement(element, _q(SITE_ID)).text = identity.site_id
    if identity.site_name:
        etree.SubElement(element, _q(SITE_NAME)).text = identity.site_name
    return element


def _append_links(parent: _Element, links: tuple[Link, ...]) -> None:
    for link in links:
        etree.SubElement(
            parent,
            _q(LINK),
            rel=link.rel,
            type=link.media_type,
            href=link.href,
        )
