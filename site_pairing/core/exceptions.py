"""Unified exception taxonomy for site pairing.

Every domain exception inherits from ``PairingError`` and carries
structured context fields so callers can tell a validation rejection
from a transport failure from a task failure without parsing messages.

Taxonomy categories
-------------------
- ``ValidationError``   — precondition/input violations, never retryable.
- ``TransientError``    — temporary failures (network, timeouts).
- ``PermanentError``    — unrecoverable failures (missing session, task error).
- ``ContractError``     — response documents that do not match the schema.

Nothing in this package retries automatically; ``retryable`` is advice
for the caller only.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for reports and logging.
"""

from __future__ import annotations


class PairingError(Exception):
    """Base exception for all site-pairing errors.

    Attributes:
        message: Human-readable error description.
        stage: Operation stage where the error occurred
            (e.g. ``"dispatch"``, ``"poll_task"``, ``"pair_sites"``).
        code: Machine-readable error code (e.g. ``"TASK_FAILED"``).
        retryable: Whether a caller could reasonably try again.
        site: Site endpoint or host the error relates to, if any.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        site: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.site = site
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "site": self.site,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PairingError):
    """Precondition or input validation failure. Never retryable."""

    default_code = "VALIDATION_FAILED"

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(PairingError):
    """Temporary failure that may succeed if the caller tries again."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PairingError):
    """Unrecoverable failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PairingError):
    """Response document does not match the expected schema. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
