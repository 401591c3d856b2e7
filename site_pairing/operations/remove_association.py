"""Removal orchestrator — drop one member from one site's association document.

The API has no partial update for the collection: the whole document is
read, the member is removed in memory, and the whole document is PUT
back as a replacement.  Another client writing the same document in
between will have its change overwritten.

Only the one document is touched.  Dissolving a pairing needs the
removal on both sites; ``dissolve_pairing`` runs the two independently.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from site_pairing.codec import encode_association_document
from site_pairing.core.constants import SITE_ASSOCIATIONS_MEDIA_TYPE
from site_pairing.core.exceptions import PairingError, ValidationError
from site_pairing.models.results import RemovalResult, RemovalStatus
from site_pairing.utils.helpers import associations_url, normalize_site_id

if TYPE_CHECKING:
    from site_pairing.operations.context import PairingContext

logger = logging.getLogger("site_pairing.operations.remove_association")


class AssociationNotFoundError(ValidationError):
    """The target site id is not a member of the site's association document."""

    default_stage = "remove_association"
    default_code = "ASSOCIATION_NOT_FOUND"

    def __init__(self, site: str, target_site_id: str) -> None:
        self.target_site_id = target_site_id
        super().__init__(f"no association with {target_site_id} found on {site}", site=site)


def remove_association(ctx: PairingContext, site: str, target_site_id: str) -> RemovalResult:
    """Remove *target_site_id* from the association document of *site*.

    Args:
        ctx: Operation context.
        site: Domain or base URL of the site whose document is modified.
        target_site_id: Member to remove; a bare id is normalised to its URN.

    Returns:
        A ``RemovalResult``.  ``NOT_FOUND`` and ``NO_ASSOCIATIONS``
        mean no request beyond the read was made.
    """
    target = normalize_site_id(target_site_id)
    logger.info("remove_association started | site=%s | target=%s", site, target)

    try:
        document = ctx.accessor.get_associations(site)
    except PairingError as exc:
        logger.warning("remove_association failed reading | site=%s | error=%s", site, exc)
        return RemovalResult(site, target, RemovalStatus.FAILED, error=exc)

    if document is None:
        logger.info("remove_association | site=%s | no associations found", site)
        return RemovalResult(
            site,
            target,
            RemovalStatus.NO_ASSOCIATIONS,
            error=AssociationNotFoundError(site, target),
        )

    before = len(document)
    if document.find(target) is None:
        logger.info("remove_association | site=%s | target=%s | not found", site, target)
        return RemovalResult(
            site,
            target,
            RemovalStatus.NOT_FOUND,
            members_before=before,
            members_after=before,
            error=AssociationNotFoundError(site, target),
        )

    updated = document.without(target)
    try:
        root = ctx.dispatcher.request(
            "PUT",
            associations_url(site),
            body=encode_association_document(updated),
            content_type=SITE_ASSOCIATIONS_MEDIA_TYPE,
        )
        outcome = ctx.poller.await_response(root, ctx.config.task_timeout_s)
    except PairingError as exc:
        logger.warning("remove_association failed submitting | site=%s | error=%s", site, exc)
        return RemovalResult(
            site,
            target,
            RemovalStatus.FAILED,
            members_before=before,
            members_after=len(updated),
            error=exc,
        )

    status = RemovalStatus.REMOVED if outcome.succeeded else RemovalStatus.FAILED
    logger.info(
        "remove_association completed | site=%s | target=%s | status=%s | members=%d->%d",
        site,
        target,
        status.value,
        before,
        len(updated),
    )
    return RemovalResult(
        site,
        target,
        status,
        members_before=before,
        members_after=len(updated),
        outcome=outcome,
        error=outcome.error,
    )


def dissolve_pairing(
    ctx: PairingContext,
    site_a: str,
    site_b: str,
) -> tuple[RemovalResult, RemovalResult]:
    """Remove B from A's document and A from B's document, independently.

    Returns:
        ``(removal on site_a, removal on site_b)``.  One side failing
        does not stop the other.
    """
    try:
        site_id_a = ctx.accessor.get_local_identity(site_a).site_id
        site_id_b = ctx.accessor.get_local_identity(site_b).site_id
    except PairingError as exc:
        logger.warning("dissolve_pairing failed reading identities | error=%s", exc)
        return (
            RemovalResult(site_a, "", RemovalStatus.FAILED, error=exc),
            RemovalResult(site_b, "", RemovalStatus.FAILED, error=exc),
        )

    return (
        remove_association(ctx, site_a, site_id_b),
        remove_association(ctx, site_b, site_id_a),
    )
