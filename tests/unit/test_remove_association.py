"""Tests for the removal orchestrator and two-sided dissolution."""

from __future__ import annotations

from lxml import etree

from site_pairing.api.dispatcher import TransportError
from site_pairing.codec import decode_association_document, parse_xml
from site_pairing.models.results import RemovalStatus
from site_pairing.operations.context import PairingContext
from site_pairing.operations.pair_sites import pair_sites
from site_pairing.operations.poll_task import TaskFailure
from site_pairing.operations.remove_association import (
    AssociationNotFoundError,
    dissolve_pairing,
    remove_association,
)
from tests.fakes import SITE_A, SITE_B, FakeSiteApi, identity_xml, site_urn


def _c14n(source: bytes) -> bytes:
    return etree.tostring(etree.fromstring(source), method="c14n")


def _seed(api: FakeSiteApi, *ns: int) -> None:
    api.sites[SITE_A].members.extend(
        identity_xml(site_urn(n), f"Site {n}", f"s{n}.example.com") for n in ns
    )


class TestRemoveAssociation:
    def test_absent_member_makes_no_submission(
        self, two_sites: FakeSiteApi, ctx: PairingContext
    ) -> None:
        _seed(two_sites, 3, 4)
        before = list(two_sites.sites[SITE_A].members)

        result = remove_association(ctx, SITE_A, site_urn(9))

        assert result.status is RemovalStatus.NOT_FOUND
        assert isinstance(result.error, AssociationNotFoundError)
        assert (result.members_before, result.members_after) == (2, 2)
        assert two_sites.mutations == []
        assert two_sites.sites[SITE_A].members == before

    def test_no_associations(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        two_sites.sites[SITE_A].collection_absent = True

        result = remove_association(ctx, SITE_A, site_urn(2))

        assert result.status is RemovalStatus.NO_ASSOCIATIONS
        assert two_sites.mutations == []

    def test_present_member_removed(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        _seed(two_sites, 3, 4, 5)
        original = ctx.accessor.get_associations(SITE_A)
        assert original is not None

        result = remove_association(ctx, SITE_A, site_urn(4))

        assert result.status is RemovalStatus.REMOVED
        assert result.succeeded is True
        assert (result.members_before, result.members_after) == (3, 2)
        assert two_sites.member_ids(SITE_A) == [site_urn(3), site_urn(5)]

        (put,) = two_sites.mutations
        submitted = decode_association_document(parse_xml(put.content))
        kept = [m for m in original.members if m.site_id != site_urn(4)]
        assert len(submitted) == len(original) - 1
        assert [_c14n(m.source) for m in submitted.members] == [_c14n(m.source) for m in kept]

    def test_full_document_put(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        _seed(two_sites, 3)
        remove_association(ctx, SITE_A, site_urn(3))
        (put,) = two_sites.mutations

        assert put.method == "PUT"
        assert str(put.url) == f"https://{SITE_A}/api/site/associations"
        assert put.headers["Content-Type"] == "application/vnd.vmware.admin.siteAssociations+xml"

    def test_removing_last_member_submits_empty_document(
        self, two_sites: FakeSiteApi, ctx: PairingContext
    ) -> None:
        _seed(two_sites, 3)
        result = remove_association(ctx, SITE_A, site_urn(3))

        assert result.members_after == 0
        assert two_sites.member_ids(SITE_A) == []
        document = ctx.accessor.get_associations(SITE_A)
        assert document is not None and len(document) == 0

    def test_bare_id_is_normalised(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        _seed(two_sites, 3)
        bare = site_urn(3).removeprefix("urn:vcloud:site:")

        result = remove_association(ctx, SITE_A, bare)

        assert result.target_site_id == site_urn(3)
        assert result.status is RemovalStatus.REMOVED

    def test_task_failure(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        _seed(two_sites, 3)
        two_sites.script_tasks(["running", "error"])

        result = remove_association(ctx, SITE_A, site_urn(3))

        assert result.status is RemovalStatus.FAILED
        assert isinstance(result.error, TaskFailure)
        assert result.outcome is not None and result.outcome.polls == 2
        assert two_sites.member_ids(SITE_A) == [site_urn(3)]

    def test_synchronous_commit(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        _seed(two_sites, 3, 4)
        two_sites.synchronous_hosts.add(SITE_A)

        result = remove_association(ctx, SITE_A, site_urn(3))

        assert result.status is RemovalStatus.REMOVED
        assert result.outcome is not None and result.outcome.polls == 0
        assert two_sites.task_polls() == []
        assert two_sites.member_ids(SITE_A) == [site_urn(4)]

    def test_submission_transport_failure(
        self, two_sites: FakeSiteApi, ctx: PairingContext
    ) -> None:
        _seed(two_sites, 3)
        two_sites.fail_mutation_hosts.add(SITE_A)

        result = remove_association(ctx, SITE_A, site_urn(3))

        assert result.status is RemovalStatus.FAILED
        assert isinstance(result.error, TransportError)
        assert result.outcome is None

    def test_read_failure(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        two_sites.fail_hosts.add(SITE_A)
        result = remove_association(ctx, SITE_A, site_urn(2))
        assert result.status is RemovalStatus.FAILED
        assert two_sites.mutations == []

    def test_only_touches_one_site(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        pair_sites(ctx, SITE_A, SITE_B)

        remove_association(ctx, SITE_A, site_urn(2))

        assert two_sites.member_ids(SITE_A) == []
        assert two_sites.member_ids(SITE_B) == [site_urn(1)]

    def test_report(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        payload = remove_association(ctx, SITE_A, site_urn(9)).to_report().model_dump(mode="json")
        assert payload["operation"] == "remove_association"
        assert payload["status"] == "not_found"
        assert payload["error"]["category"] == "validation"
        assert payload["steps"][0]["status"] == "skipped"


class TestDissolvePairing:
    def test_removes_both_directions(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        pair_sites(ctx, SITE_A, SITE_B)

        on_a, on_b = dissolve_pairing(ctx, SITE_A, SITE_B)

        assert on_a.status is RemovalStatus.REMOVED
        assert on_b.status is RemovalStatus.REMOVED
        assert two_sites.member_ids(SITE_A) == []
        assert two_sites.member_ids(SITE_B) == []

    def test_half_pairing_dissolves_remaining_side(
        self, two_sites: FakeSiteApi, ctx: PairingContext
    ) -> None:
        two_sites.script_tasks(["success"], ["error"])
        pair_sites(ctx, SITE_A, SITE_B)

        on_a, on_b = dissolve_pairing(ctx, SITE_A, SITE_B)

        assert on_a.status is RemovalStatus.NOT_FOUND
        assert on_b.status is RemovalStatus.REMOVED

    def test_identity_read_failure(self, two_sites: FakeSiteApi, ctx: PairingContext) -> None:
        two_sites.fail_hosts.add(SITE_B)
        on_a, on_b = dissolve_pairing(ctx, SITE_A, SITE_B)
        assert on_a.status is RemovalStatus.FAILED
        assert on_b.status is RemovalStatus.FAILED
        assert two_sites.mutations == []
