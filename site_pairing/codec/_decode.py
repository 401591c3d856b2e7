"""lxml-based decoding of API documents into typed models.

Every decoder checks the root element first and raises
``DocumentDecodeError`` when the document is not what the endpoint is
documented to return, instead of handing back a half-populated model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import etree

from site_pairing.codec._constants import (
    ERROR,
    LINK,
    REST_ENDPOINT,
    SITE_ASSOCIATION_MEMBER,
    SITE_ASSOCIATIONS,
    SITE_ID,
    SITE_NAME,
    TASK,
    VCLOUD_NAMESPACE,
)
from site_pairing.core.exceptions import ContractError
from site_pairing.models.site import (
    AssociationDocument,
    AssociationMember,
    Link,
    ModelValidationError,
    SiteIdentity,
)
from site_pairing.models.task import Task, TaskStatus

if TYPE_CHECKING:
    from lxml.etree import _Element


class DocumentDecodeError(ContractError):
    """Response body is not well-formed XML or does not match the expected schema."""

    default_stage = "decode"
    default_code = "DOCUMENT_DECODE_FAILED"


def parse_xml(content: bytes) -> _Element:
    """Parse *content* with entity resolution and network access disabled."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        return etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Malformed XML response: {exc}"
        raise DocumentDecodeError(msg) from exc


def local_name(element: _Element) -> str:
    return etree.QName(element).localname


def is_task(element: _Element) -> bool:
    return local_name(element) == TASK


def decode_site_identity(element: _Element) -> SiteIdentity:
    """Decode a ``SiteAssociationMember`` root into a ``SiteIdentity``."""
    _expect_root(element, SITE_ASSOCIATION_MEMBER)
    return _decode_member(element, SiteIdentity)


def decode_association_document(element: _Element) -> AssociationDocument:
    """Decode a ``SiteAssociations`` root into an ``AssociationDocument``."""
    _expect_root(element, SITE_ASSOCIATIONS)
    members = tuple(
        _decode_member(child, AssociationMember)
        for child in _children(element, SITE_ASSOCIATION_MEMBER)
    )
    try:
        return AssociationDocument(
            href=element.get("href", ""),
            links=_decode_links(element),
            members=members,
        )
    except ModelValidationError as exc:
        raise DocumentDecodeError(f"Invalid association document: {exc.message}") from exc


def decode_task(element: _Element) -> Task:
    """Decode a ``Task`` root; the status lives in the ``status`` attribute."""
    _expect_root(element, TASK)
    raw_status = element.get("status", "")
    try:
        status = TaskStatus(raw_status)
    except ValueError as exc:
        msg = f"Unknown task status {raw_status!r}"
        raise DocumentDecodeError(msg) from exc

    href = element.get("href", "")
    if not href:
        raise DocumentDecodeError("Task document has no href")

    error_message = ""
    errors = _children(element, ERROR)
    if errors:
        error_message = errors[0].get("message", "")

    return Task(
        href=href,
        status=status,
        operation=element.get("operation", ""),
        error_message=error_message,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _expect_root(element: _Element, expected: str) -> None:
    actual = local_name(element)
    if actual != expected:
        msg = f"Expected <{expected}> document, got <{actual}>"
        raise DocumentDecodeError(msg)


def _children(element: _Element, name: str) -> list[_Element]:
    """Direct children named *name*, namespaced or not."""
    found = element.findall(f"{{{VCLOUD_NAMESPACE}}}{name}")
    return found or element.findall(name)


def _child_text(element: _Element, name: str) -> str:
    children = _children(element, name)
    if not children:
        return ""
    return (children[0].text or "").strip()


def _decode_links(element: _Element) -> tuple[Link, ...]:
    return tuple(
        Link(
            rel=link.get("rel", ""),
            media_type=link.get("type", ""),
            href=link.get("href", ""),
        )
        for link in _children(element, LINK)
    )


def _decode_member(element: _Element, model: type[SiteIdentity]) -> SiteIdentity:
    site_id = _child_text(element, SITE_ID)
    if not site_id:
        raise DocumentDecodeError(f"<{local_name(element)}> has no SiteId")

    return model(
        site_id=site_id,
        site_name=_child_text(element, SITE_NAME),
        rest_endpoint=_child_text(element, REST_ENDPOINT),
        links=_decode_links(element),
        source=etree.tostring(element, with_tail=False),
    )
