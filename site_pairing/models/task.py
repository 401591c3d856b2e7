"""Typed models for asynchronous API tasks.

Any mutating call the API executes in the background answers with a
``Task`` document; ``TaskPoller`` turns it into a ``TaskOutcome``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from site_pairing.core.exceptions import PairingError


class TaskStatus(enum.Enum):
    """Lifecycle state of a remote task.

    ``queued → preRunning → running → {success | error | canceled | aborted}``
    """

    QUEUED = "queued"
    PRE_RUNNING = "preRunning"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    CANCELED = "canceled"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_failure(self) -> bool:
        """Terminal state other than ``success``."""
        return self in _TERMINAL and self is not TaskStatus.SUCCESS


_TERMINAL = frozenset(
    {TaskStatus.SUCCESS, TaskStatus.ERROR, TaskStatus.CANCELED, TaskStatus.ABORTED}
)


@dataclass(frozen=True, slots=True)
class Task:
    """A remote task handle.

    Attributes:
        href: URI to poll for the task's current state.
        status: Status at the time the document was read.
        operation: Human-readable operation description, if provided.
        error_message: Error detail reported by the API for failed tasks.
    """

    href: str
    status: TaskStatus
    operation: str = ""
    error_message: str = ""


@dataclass(frozen=True, slots=True)
class TaskOutcome:
    """Result of waiting for a task to finish.

    Attributes:
        task_href: The task that was polled.
        last_status: Last status observed (``None`` if no poll succeeded).
        polls: Number of task polls issued.
        error: ``None`` on success; otherwise ``TaskFailure``,
            ``TaskTimeout`` or the ``TransportError`` that stopped polling.
    """

    task_href: str
    last_status: TaskStatus | None = None
    polls: int = 0
    error: PairingError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.last_status is TaskStatus.SUCCESS

    @property
    def outcome_unknown(self) -> bool:
        """True when polling stopped before the task reached a terminal state.

        The remote operation may still complete after the caller gave up.
        """
        if self.error is None:
            return False
        return not (self.last_status is not None and self.last_status.is_terminal)
