"""Pairing orchestrator — establish and verify a two-sided site association.

A pairing is two independent directed associations: site B holds A as a
member, and site A holds B as a member.  Each direction is one ``POST``
of a site's identity document to the partner's association collection,
followed by a wait on the returned task.  The API has no two-sided
transaction and nothing is rolled back, so a run can end half paired;
that state is reported as ``PairingStatus.HALF_PAIRED``, never folded
into ``FAILED``.

Preconditions, checked before any mutation:
    - both sites have a non-empty site name;
    - the two site ids differ.

Failures are returned in the ``PairingResult``; nothing is raised for
expected errors and nothing is retried.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from site_pairing.codec import encode_site_identity
from site_pairing.core.constants import SITE_ASSOCIATION_MEDIA_TYPE
from site_pairing.core.exceptions import PairingError, ValidationError
from site_pairing.models.results import (
    PairingCheck,
    PairingResult,
    PairingState,
    PairingStatus,
    PlannedAssociation,
)
from site_pairing.utils.helpers import associations_url, site_base_url

if TYPE_CHECKING:
    from site_pairing.models.site import SiteIdentity
    from site_pairing.models.task import TaskOutcome
    from site_pairing.operations.context import PairingContext

logger = logging.getLogger("site_pairing.operations.pair_sites")


class MissingSiteNameError(ValidationError):
    """One or both sites have no site name set."""

    default_stage = "pair_sites"
    default_code = "SITE_NAME_MISSING"

    def __init__(self, *sites: str) -> None:
        self.sites = sites
        super().__init__(f"missing site name: {', '.join(sites)}", site=sites[0] if sites else "")


class IdenticalSiteIdError(ValidationError):
    """Both endpoints report the same site id."""

    default_stage = "pair_sites"
    default_code = "SITE_ID_IDENTICAL"

    def __init__(self, site_id: str) -> None:
        self.site_id = site_id
        super().__init__(f"identical site ids: {site_id}")


def pair_sites(
    ctx: PairingContext,
    site_a: str,
    site_b: str,
    *,
    dry_run: bool | None = None,
) -> PairingResult:
    """Pair *site_a* with *site_b*.

    Args:
        ctx: Operation context.
        site_a: Domain or base URL of the first site.
        site_b: Domain or base URL of the second site.
        dry_run: Plan only; defaults to ``ctx.config.dry_run``.

    Returns:
        A ``PairingResult``.  ``status`` is ``PAIRED`` only when both
        tasks succeeded; ``forward``/``reverse`` hold the per-direction
        task outcomes.
    """
    if dry_run is None:
        dry_run = ctx.config.dry_run

    logger.info("pair_sites started | site_a=%s | site_b=%s | dry_run=%s", site_a, site_b, dry_run)

    try:
        identity_a = ctx.accessor.get_local_identity(site_a)
        identity_b = ctx.accessor.get_local_identity(site_b)
    except PairingError as exc:
        logger.warning("pair_sites failed reading identities | error=%s", exc)
        return PairingResult(site_a, site_b, PairingStatus.FAILED, error=exc)

    try:
        validate_pairing(site_a, identity_a, site_b, identity_b)
    except ValidationError as exc:
        logger.warning("pair_sites rejected | site_a=%s | site_b=%s | reason=%s", site_a, site_b, exc)
        return PairingResult(
            site_a,
            site_b,
            PairingStatus.REJECTED,
            identity_a=identity_a,
            identity_b=identity_b,
            error=exc,
        )

    planned = (
        PlannedAssociation(identity_a.site_id, identity_a.site_name, site_base_url(site_b)),
        PlannedAssociation(identity_b.site_id, identity_b.site_name, site_base_url(site_a)),
    )

    if dry_run:
        for action in planned:
            logger.info("pair_sites dry run | planned=%s", action.describe())
        return PairingResult(
            site_a,
            site_b,
            PairingStatus.DRY_RUN,
            identity_a=identity_a,
            identity_b=identity_b,
            planned=planned,
        )

    forward: TaskOutcome | None = None
    reverse: TaskOutcome | None = None
    error: PairingError | None = None
    try:
        forward = _submit_association(ctx, identity_a, site_b)
        reverse = _submit_association(ctx, identity_b, site_a)
    except PairingError as exc:
        # Submission itself failed; the remaining direction is not attempted.
        error = exc

    status = _pairing_status(forward, reverse)
    if error is None:
        error = _first_error(forward, reverse)

    log = logger.info if status is PairingStatus.PAIRED else logger.warning
    log(
        "pair_sites completed | site_a=%s | site_b=%s | status=%s | a_in_b=%s | b_in_a=%s",
        site_a,
        site_b,
        status.value,
        forward is not None and forward.succeeded,
        reverse is not None and reverse.succeeded,
    )

    return PairingResult(
        site_a,
        site_b,
        status,
        identity_a=identity_a,
        identity_b=identity_b,
        planned=planned,
        forward=forward,
        reverse=reverse,
        error=error,
    )


def validate_pairing(
    site_a: str,
    identity_a: SiteIdentity,
    site_b: str,
    identity_b: SiteIdentity,
) -> None:
    """Check pairing preconditions.

    Raises:
        MissingSiteNameError: Either site has an empty name.
        IdenticalSiteIdError: Both sites report the same id.
    """
    unnamed = [
        site
        for site, identity in ((site_a, identity_a), (site_b, identity_b))
        if not identity.has_name
    ]
    if unnamed:
        raise MissingSiteNameError(*unnamed)
    if identity_a.site_id == identity_b.site_id:
        raise IdenticalSiteIdError(identity_a.site_id)


def verify_pairing(ctx: PairingContext, site_a: str, site_b: str) -> PairingCheck:
    """Report which directions of the *site_a* / *site_b* pairing exist."""
    try:
        identity_a = ctx.accessor.get_local_identity(site_a)
        identity_b = ctx.accessor.get_local_identity(site_b)
        document_a = ctx.accessor.get_associations(site_a)
        document_b = ctx.accessor.get_associations(site_b)
    except PairingError as exc:
        logger.warning("verify_pairing failed | site_a=%s | site_b=%s | error=%s", site_a, site_b, exc)
        return PairingCheck(site_a, site_b, error=exc)

    a_holds_b = document_a is not None and document_a.find(identity_b.site_id) is not None
    b_holds_a = document_b is not None and document_b.find(identity_a.site_id) is not None

    if a_holds_b and b_holds_a:
        state = PairingState.PAIRED
    elif a_holds_b:
        state = PairingState.A_HOLDS_B
    elif b_holds_a:
        state = PairingState.B_HOLDS_A
    else:
        state = PairingState.UNPAIRED

    logger.info("verify_pairing | site_a=%s | site_b=%s | state=%s", site_a, site_b, state.value)
    return PairingCheck(
        site_a,
        site_b,
        state=state,
        site_id_a=identity_a.site_id,
        site_id_b=identity_b.site_id,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _submit_association(
    ctx: PairingContext,
    identity: SiteIdentity,
    target_site: str,
) -> TaskOutcome:
    """POST *identity* to the association collection of *target_site* and await the answer."""
    url = associations_url(target_site)
    logger.info(
        "submitting association | source=%s (%s) | target=%s",
        identity.site_name,
        identity.site_id,
        url,
    )
    root = ctx.dispatcher.request(
        "POST",
        url,
        body=encode_site_identity(identity),
        content_type=SITE_ASSOCIATION_MEDIA_TYPE,
    )
    return ctx.poller.await_response(root, ctx.config.task_timeout_s)


def _pairing_status(forward: TaskOutcome | None, reverse: TaskOutcome | None) -> PairingStatus:
    established = sum(1 for o in (forward, reverse) if o is not None and o.succeeded)
    if established == 2:
        return PairingStatus.PAIRED
    if established == 1:
        return PairingStatus.HALF_PAIRED
    return PairingStatus.FAILED


def _first_error(*outcomes: TaskOutcome | None) -> PairingError | None:
    for outcome in outcomes:
        if outcome is not None and outcome.error is not None:
            return outcome.error
    return None
