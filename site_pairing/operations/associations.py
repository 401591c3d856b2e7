"""Association accessor — read a site's identity and association documents.

Every call reads fresh state from the API; nothing is cached between
operations.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from site_pairing.codec import (
    DocumentDecodeError,
    decode_association_document,
    decode_site_identity,
    encode_site_identity_with_name,
)
from site_pairing.core.constants import DEFAULT_TASK_TIMEOUT_S, SITE_ASSOCIATION_MEDIA_TYPE
from site_pairing.core.exceptions import ValidationError
from site_pairing.operations.poll_task import TaskPoller
from site_pairing.utils.helpers import (
    associations_url,
    local_association_data_url,
    normalize_site_id,
)

if TYPE_CHECKING:
    from site_pairing.api.dispatcher import RequestDispatcher
    from site_pairing.models.site import AssociationDocument, AssociationMember, SiteIdentity

logger = logging.getLogger("site_pairing.operations.associations")


class AssociationAccessor:
    """Typed access to the association resources of any site.

    Args:
        dispatcher: Dispatcher used for all requests.
        poller: Poller for the site-name update task; defaults to a
            ``TaskPoller`` over the same dispatcher.
        task_timeout_s: Polling budget for the site-name update task.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        poller: TaskPoller | None = None,
        *,
        task_timeout_s: int = DEFAULT_TASK_TIMEOUT_S,
    ) -> None:
        self._dispatcher = dispatcher
        self._poller = poller or TaskPoller(dispatcher)
        self._task_timeout_s = task_timeout_s

    def get_local_identity(self, site: str) -> SiteIdentity:
        """Fetch and decode ``localAssociationData`` for *site*.

        Raises:
            AuthenticationMissing: No session for the site host.
            TransportError: The request failed.
            DocumentDecodeError: The response is empty or not an identity document.
        """
        url = local_association_data_url(site)
        root = self._dispatcher.get(url)
        if root is None:
            raise DocumentDecodeError(f"Empty local association data from {url}", site=site)
        identity = decode_site_identity(root)
        logger.debug(
            "local identity | site=%s | site_id=%s | site_name=%s",
            site,
            identity.site_id,
            identity.site_name,
        )
        return identity

    def get_associations(self, site: str) -> AssociationDocument | None:
        """Fetch and decode the association collection of *site*.

        Returns:
            ``None`` when the API returned no collection at all; an
            ``AssociationDocument`` with zero members when the site has
            no associations.
        """
        url = associations_url(site)
        root = self._dispatcher.get(url)
        if root is None:
            logger.info("associations absent | site=%s", site)
            return None
        document = decode_association_document(root)
        logger.debug("associations | site=%s | members=%d", site, len(document))
        return document

    def find_member(self, site: str, site_id: str) -> AssociationMember | None:
        """Look up *site_id* (bare id or URN) in the association collection of *site*."""
        document = self.get_associations(site)
        if document is None:
            return None
        return document.find(normalize_site_id(site_id))

    def set_site_name(self, site: str, site_name: str) -> SiteIdentity:
        """Rename *site* and return its identity as read back afterwards.

        The identity document is re-submitted with the new ``SiteName``
        to the href of its ``edit`` link.  When the API answers with a
        task, it is awaited before the identity is read back.

        Raises:
            ValidationError: *site_name* is blank.
            DocumentDecodeError: The identity has no ``edit`` link.
            TaskFailure / TaskTimeout / TransportError: The update did not complete.
        """
        site_name = site_name.strip()
        if not site_name:
            raise ValidationError(
                "site name must not be empty",
                stage="set_site_name",
                code="SITE_NAME_MISSING",
                site=site,
            )

        identity = self.get_local_identity(site)
        if not identity.edit_href:
            msg = f"Local association data of {site} has no edit link"
            raise DocumentDecodeError(msg, site=site)

        logger.info(
            "set_site_name started | site=%s | old=%s | new=%s",
            site,
            identity.site_name,
            site_name,
        )
        root = self._dispatcher.request(
            "PUT",
            identity.edit_href,
            body=encode_site_identity_with_name(identity, site_name),
            content_type=SITE_ASSOCIATION_MEDIA_TYPE,
        )
        outcome = self._poller.await_response(root, self._task_timeout_s)
        if outcome.error is not None:
            raise outcome.error

        updated = self.get_local_identity(site)
        logger.info("set_site_name completed | site=%s | site_name=%s", site, updated.site_name)
        return updated
