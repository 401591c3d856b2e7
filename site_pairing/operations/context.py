"""Wiring for the pairing operations.

``PairingContext`` bundles the dispatcher, accessor, poller and
configuration every operation needs, built from one ``PairingConfig``
and the caller's ``SessionRegistry``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from site_pairing.api.dispatcher import RequestDispatcher
from site_pairing.core.config import PairingConfig
from site_pairing.operations.associations import AssociationAccessor
from site_pairing.operations.poll_task import TaskPoller

if TYPE_CHECKING:
    import threading
    from types import TracebackType

    import httpx

    from site_pairing.api.session import SessionRegistry


@dataclass(frozen=True, slots=True)
class PairingContext:
    """Collaborators shared by ``pair_sites``, ``remove_association`` and friends."""

    dispatcher: RequestDispatcher
    accessor: AssociationAccessor
    poller: TaskPoller
    config: PairingConfig

    @classmethod
    def create(
        cls,
        sessions: SessionRegistry,
        config: PairingConfig | None = None,
        *,
        client: httpx.Client | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PairingContext:
        """Build a context; ``config`` defaults to ``PairingConfig.from_env()``."""
        config = config or PairingConfig.from_env()
        dispatcher = RequestDispatcher.from_config(config, sessions, client=client)
        poller = TaskPoller(
            dispatcher,
            interval_s=config.poll_interval_s,
            cancel_event=cancel_event,
        )
        accessor = AssociationAccessor(dispatcher, poller, task_timeout_s=config.task_timeout_s)
        return cls(dispatcher=dispatcher, accessor=accessor, poller=poller, config=config)

    def close(self) -> None:
        self.dispatcher.close()

    def __enter__(self) -> PairingContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
