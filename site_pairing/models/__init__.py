"""Data models and schemas.

Defines the data structures used throughout the package:
- SiteIdentity / AssociationMember / AssociationDocument: association state
- Task / TaskOutcome: asynchronous API tasks
- PairingResult / RemovalResult / PairingCheck: operation results
- OperationReport: JSON report schema
"""

from site_pairing.models.report import OperationReport, StepReport
from site_pairing.models.results import (
    PairingCheck,
    PairingResult,
    PairingState,
    PairingStatus,
    PlannedAssociation,
    RemovalResult,
    RemovalStatus,
)
from site_pairing.models.site import (
    AssociationDocument,
    AssociationMember,
    Link,
    ModelValidationError,
    SiteIdentity,
)
from site_pairing.models.task import Task, TaskOutcome, TaskStatus

__all__ = [
    "AssociationDocument",
    "AssociationMember",
    "Link",
    "ModelValidationError",
    "OperationReport",
    "PairingCheck",
    "PairingResult",
    "PairingState",
    "PairingStatus",
    "PlannedAssociation",
    "RemovalResult",
    "RemovalStatus",
    "SiteIdentity",
    "StepReport",
    "Task",
    "TaskOutcome",
    "TaskStatus",
]
