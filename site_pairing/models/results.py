"""Typed results returned by the pairing, removal and verification operations.

Operations never raise for expected failures; they return one of these
results with the typed error attached, so callers can tell a validation
rejection from a transport failure from a task failure by type.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from site_pairing.models.report import OperationReport, StepReport

if TYPE_CHECKING:
    from site_pairing.core.exceptions import PairingError
    from site_pairing.models.site import SiteIdentity
    from site_pairing.models.task import TaskOutcome


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------


class PairingStatus(enum.Enum):
    """Overall outcome of a pairing attempt.

    Values:
        PAIRED:      Both directed associations committed.
        HALF_PAIRED: Exactly one direction committed; nothing was rolled back.
        FAILED:      Neither direction committed.
        REJECTED:    Preconditions failed; no mutation was submitted.
        DRY_RUN:     Preconditions passed; actions were planned only.
    """

    PAIRED = "paired"
    HALF_PAIRED = "half_paired"
    FAILED = "failed"
    REJECTED = "rejected"
    DRY_RUN = "dry_run"


@dataclass(frozen=True, slots=True)
class PlannedAssociation:
    """A directed association that would be submitted.

    Attributes:
        source_site_id: Site whose identity document is submitted.
        source_site_name: Display name of that site.
        target_endpoint: Site whose association collection receives it.
    """

    source_site_id: str
    source_site_name: str
    target_endpoint: str

    def describe(self) -> str:
        return (
            f"associate {self.source_site_name} ({self.source_site_id}) "
            f"with {self.target_endpoint}"
        )


@dataclass(frozen=True, slots=True)
class PairingResult:
    """Outcome of ``pair_sites``.

    ``forward`` is the submission of A's identity to B; ``reverse`` is
    the submission of B's identity to A.  Either is ``None`` when that
    step never ran.
    """

    site_a: str
    site_b: str
    status: PairingStatus
    identity_a: SiteIdentity | None = None
    identity_b: SiteIdentity | None = None
    planned: tuple[PlannedAssociation, ...] = ()
    forward: TaskOutcome | None = None
    reverse: TaskOutcome | None = None
    error: PairingError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (PairingStatus.PAIRED, PairingStatus.DRY_RUN)

    @property
    def forward_established(self) -> bool:
        """B holds A as a member."""
        return self.forward is not None and self.forward.succeeded

    @property
    def reverse_established(self) -> bool:
        """A holds B as a member."""
        return self.reverse is not None and self.reverse.succeeded

    def to_report(self) -> OperationReport:
        steps: list[StepReport] = [
            StepReport(name="plan", target=p.target_endpoint, status="planned", detail=p.describe())
            for p in self.planned
        ]
        steps.append(_outcome_step("associate_a_with_b", self.site_b, self.forward))
        steps.append(_outcome_step("associate_b_with_a", self.site_a, self.reverse))
        return OperationReport(
            operation="pair_sites",
            status=self.status.value,
            succeeded=self.succeeded,
            sites=[self.site_a, self.site_b],
            steps=steps,
            error=self.error.to_error_dict() if self.error else None,
        )


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------


class RemovalStatus(enum.Enum):
    """Outcome of removing one member from one site's association document."""

    REMOVED = "removed"
    NOT_FOUND = "not_found"
    NO_ASSOCIATIONS = "no_associations"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Outcome of ``remove_association`` against a single site.

    Attributes:
        site: Endpoint whose document was (or would have been) modified.
        target_site_id: Member that was looked up, in URN form.
        status: Removal outcome.
        members_before: Member count as read (0 when the collection is absent).
        members_after: Member count as submitted (equal to before when
            nothing was submitted).
        outcome: Task outcome of the submission, if one was made.
        error: Typed error for any status other than ``REMOVED``.
    """

    site: str
    target_site_id: str
    status: RemovalStatus
    members_before: int = 0
    members_after: int = 0
    outcome: TaskOutcome | None = None
    error: PairingError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RemovalStatus.REMOVED

    def to_report(self) -> OperationReport:
        step = _outcome_step("replace_associations", self.site, self.outcome)
        if self.outcome is None:
            step.detail = f"{self.target_site_id}: {self.status.value}"
        return OperationReport(
            operation="remove_association",
            status=self.status.value,
            succeeded=self.succeeded,
            sites=[self.site],
            steps=[step],
            error=self.error.to_error_dict() if self.error else None,
        )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class PairingState(enum.Enum):
    """Observed association state between two sites."""

    PAIRED = "paired"
    A_HOLDS_B = "a_holds_b"
    B_HOLDS_A = "b_holds_a"
    UNPAIRED = "unpaired"


@dataclass(frozen=True, slots=True)
class PairingCheck:
    """Outcome of ``verify_pairing``; ``state`` is ``None`` when reading failed."""

    site_a: str
    site_b: str
    state: PairingState | None = None
    site_id_a: str = ""
    site_id_b: str = ""
    error: PairingError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PairingState.PAIRED

    def to_report(self) -> OperationReport:
        return OperationReport(
            operation="verify_pairing",
            status=self.state.value if self.state else "unknown",
            succeeded=self.succeeded,
            sites=[self.site_a, self.site_b],
            error=self.error.to_error_dict() if self.error else None,
        )


def _outcome_step(name: str, target: str, outcome: TaskOutcome | None) -> StepReport:
    if outcome is None:
        return StepReport(name=name, target=target, status="skipped")
    return StepReport(
        name=name,
        target=target,
        status="succeeded" if outcome.succeeded else "failed",
        task_href=outcome.task_href,
        task_status=outcome.last_status.value if outcome.last_status else "",
        polls=outcome.polls,
        outcome_unknown=outcome.outcome_unknown,
        detail=outcome.error.message if outcome.error else "",
    )
