"""Task poller — wait for an asynchronous API task to finish.

Mutating association calls return a ``Task`` the API executes in the
background.  ``TaskPoller.wait`` drives the task state machine::

    queued → preRunning → running → {success | error | canceled | aborted}

by fetching the task resource once per interval until it reaches a
terminal state or the budget runs out.

Outcomes:
    - ``success``                      → ``TaskOutcome.succeeded``.
    - ``error`` / ``canceled`` / ``aborted`` → ``TaskFailure``.
    - budget exhausted while non-terminal → ``TaskTimeout`` (the remote
      operation may still complete; never reported as ``TaskFailure``).
    - transport failure while polling → the ``TransportError``; polling
      stops at once without retrying, the remote task may still run.
    - no task in a 2xx answer → success with zero polls
      (``await_response``; the change was committed synchronously).

The wait between polls is a ``threading.Event`` wait, so another thread
can cut the loop short through ``cancel()``.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from site_pairing.api.dispatcher import TransportError
from site_pairing.codec import DocumentDecodeError, decode_task, is_task
from site_pairing.core.constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_TASK_TIMEOUT_S
from site_pairing.core.exceptions import PermanentError, TransientError
from site_pairing.models.task import Task, TaskOutcome, TaskStatus

if TYPE_CHECKING:
    from lxml.etree import _Element

    from site_pairing.api.dispatcher import RequestDispatcher

logger = logging.getLogger("site_pairing.operations.poll_task")


class TaskFailure(PermanentError):
    """The task reached a terminal failure state.

    Attributes:
        task_href: The failed task.
        status: ``ERROR``, ``CANCELED`` or ``ABORTED``.
    """

    default_stage = "poll_task"
    default_code = "TASK_FAILED"

    def __init__(self, task_href: str, status: TaskStatus, detail: str = "") -> None:
        self.task_href = task_href
        self.status = status
        msg = f"Task {task_href} ended with status {status.value}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class TaskTimeout(TransientError):
    """Polling stopped before the task reached a terminal state.

    The remote outcome is unknown: the task may still succeed after the
    caller gave up.

    Attributes:
        task_href: The task being polled.
        budget: Polling budget that was available.
        last_status: Last non-terminal status observed.
        cancelled: Polling was cut short through ``TaskPoller.cancel()``.
    """

    default_stage = "poll_task"
    default_code = "TASK_TIMEOUT"

    def __init__(
        self,
        task_href: str,
        *,
        budget: int,
        last_status: TaskStatus | None,
        cancelled: bool = False,
    ) -> None:
        self.task_href = task_href
        self.budget = budget
        self.last_status = last_status
        self.cancelled = cancelled
        reason = "polling cancelled" if cancelled else f"timeout after budget {budget}"
        status = last_status.value if last_status else "unknown"
        super().__init__(
            f"Task {task_href} {reason} (last status {status}); outcome unknown",
            retryable=False,
        )


class TaskPoller:
    """Polls task resources until they finish, fail or run out of budget.

    Args:
        dispatcher: Dispatcher used for the task ``GET`` requests.
        interval_s: Seconds to wait between polls.
        cancel_event: Optional shared event; setting it stops any wait
            in progress with a cancelled ``TaskTimeout``.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._interval_s = interval_s
        self._cancel = cancel_event or threading.Event()

    def cancel(self) -> None:
        self._cancel.set()

    def await_response(
        self,
        root: _Element | None,
        budget: int = DEFAULT_TASK_TIMEOUT_S,
    ) -> TaskOutcome:
        """Wait on the answer to a mutating request.

        A ``Task`` answer is polled with ``wait``.  An empty body or any
        other document in a 2xx answer means the API committed the change
        synchronously: the outcome is a success with zero polls.
        """
        if root is None or not is_task(root):
            logger.info("mutation committed synchronously | no task to poll")
            return TaskOutcome(task_href="", last_status=TaskStatus.SUCCESS, polls=0)
        return self.wait(decode_task(root), budget)

    def wait(self, task: Task | str, budget: int = DEFAULT_TASK_TIMEOUT_S) -> TaskOutcome:
        """Poll *task* until it is terminal or *budget* is exhausted.

        Args:
            task: The task (or its href) returned by a mutating call.
            budget: Countdown budget; one unit is consumed per
                non-terminal poll.

        Returns:
            A ``TaskOutcome``; ``error`` is ``None`` only on success.

        Raises:
            AuthenticationMissing: No session for the task's host.
        """
        href = task.href if isinstance(task, Task) else task
        remaining = budget
        polls = 0
        last_status: TaskStatus | None = None

        logger.info("poll_task started | task=%s | budget=%d", href, budget)

        while remaining > 0:
            if self._cancel.is_set():
                return self._timed_out(href, budget, last_status, polls, cancelled=True)

            polls += 1
            try:
                current = decode_task(self._fetch(href))
            except (TransportError, DocumentDecodeError) as exc:
                logger.warning(
                    "poll_task aborted | task=%s | polls=%d | error=%s | "
                    "remote task may still be executing",
                    href,
                    polls,
                    exc,
                )
                return TaskOutcome(task_href=href, last_status=last_status, polls=polls, error=exc)

            last_status = current.status
            logger.debug("poll_task | task=%s | poll=%d | status=%s", href, polls, last_status.value)

            if last_status is TaskStatus.SUCCESS:
                logger.info("poll_task completed | task=%s | polls=%d | status=success", href, polls)
                return TaskOutcome(task_href=href, last_status=last_status, polls=polls)

            if last_status.is_failure:
                failure = TaskFailure(href, last_status, current.error_message)
                logger.warning(
                    "poll_task failed | task=%s | polls=%d | status=%s",
                    href,
                    polls,
                    last_status.value,
                )
                return TaskOutcome(
                    task_href=href, last_status=last_status, polls=polls, error=failure
                )

            remaining -= 1
            if remaining > 0 and self._cancel.wait(self._interval_s):
                return self._timed_out(href, budget, last_status, polls, cancelled=True)

        return self._timed_out(href, budget, last_status, polls)

    def _fetch(self, href: str) -> _Element:
        root = self._dispatcher.get(href)
        if root is None:
            raise DocumentDecodeError(f"Empty task document from {href}")
        return root

    @staticmethod
    def _timed_out(
        href: str,
        budget: int,
        last_status: TaskStatus | None,
        polls: int,
        *,
        cancelled: bool = False,
    ) -> TaskOutcome:
        timeout = TaskTimeout(href, budget=budget, last_status=last_status, cancelled=cancelled)
        logger.warning(
            "poll_task timed out | task=%s | polls=%d | cancelled=%s | outcome unknown",
            href,
            polls,
            cancelled,
        )
        return TaskOutcome(task_href=href, last_status=last_status, polls=polls, error=timeout)
