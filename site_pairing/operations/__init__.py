"""Site pairing operations.

- TaskPoller: wait for asynchronous API tasks
- AssociationAccessor: read identity / association documents, rename a site
- pair_sites / verify_pairing: establish and check a two-sided pairing
- remove_association / dissolve_pairing: drop association members
"""

from site_pairing.operations.associations import AssociationAccessor
from site_pairing.operations.context import PairingContext
from site_pairing.operations.pair_sites import (
    IdenticalSiteIdError,
    MissingSiteNameError,
    pair_sites,
    validate_pairing,
    verify_pairing,
)
from site_pairing.operations.poll_task import TaskFailure, TaskPoller, TaskTimeout
from site_pairing.operations.remove_association import (
    AssociationNotFoundError,
    dissolve_pairing,
    remove_association,
)

__all__ = [
    "AssociationAccessor",
    "AssociationNotFoundError",
    "IdenticalSiteIdError",
    "MissingSiteNameError",
    "PairingContext",
    "TaskFailure",
    "TaskPoller",
    "TaskTimeout",
    "dissolve_pairing",
    "pair_sites",
    "remove_association",
    "validate_pairing",
    "verify_pairing",
]
