"""Site pairing configuration loaded from environment variables.

All configuration values have defaults suitable for interactive use
against a current API version with strict certificate validation.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so a bad setting surfaces before the first
    request is issued.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from site_pairing.core.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_TASK_TIMEOUT_S,
)
from site_pairing.core.exceptions import ValidationError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class PairingConfig:
    """Immutable site pairing configuration.

    Attributes:
        api_version: API version pinned in every ``Accept`` header.
        request_timeout_s: Per-request HTTP timeout in seconds.
        task_timeout_s: Polling budget for asynchronous tasks (one unit
            per non-terminal poll, polls are ``poll_interval_s`` apart).
        poll_interval_s: Seconds to wait between task polls.
        insecure_tls: Relax certificate validation on the transport.
        dry_run: Report planned pairing actions without submitting them.
    """

    api_version: str = DEFAULT_API_VERSION
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    task_timeout_s: int = DEFAULT_TASK_TIMEOUT_S
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    insecure_tls: bool = False
    dry_run: bool = False

    @property
    def verify_tls(self) -> bool:
        """Whether the transport validates server certificates."""
        return not self.insecure_tls

    @classmethod
    def from_env(cls) -> PairingConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, a boolean
                flag is unrecognised, or the API version is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``SITE_PAIRING_TASK_TIMEOUT_S=abc``).
        """
        config = cls(
            api_version=os.getenv("SITE_PAIRING_API_VERSION", DEFAULT_API_VERSION).strip(),
            request_timeout_s=float(
                os.getenv("SITE_PAIRING_REQUEST_TIMEOUT_S", str(DEFAULT_REQUEST_TIMEOUT_S))
            ),
            task_timeout_s=int(
                os.getenv("SITE_PAIRING_TASK_TIMEOUT_S", str(DEFAULT_TASK_TIMEOUT_S))
            ),
            poll_interval_s=float(
                os.getenv("SITE_PAIRING_POLL_INTERVAL_S", str(DEFAULT_POLL_INTERVAL_S))
            ),
            insecure_tls=_env_flag("SITE_PAIRING_INSECURE_TLS"),
            dry_run=_env_flag("SITE_PAIRING_DRY_RUN"),
        )
        _validate(config)
        return config


def _env_flag(key: str) -> bool:
    raw = os.getenv(key, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigValidationError(key, raw, "must be a boolean (true/false, 1/0, yes/no)")


def _validate(config: PairingConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.api_version:
        raise ConfigValidationError(
            "SITE_PAIRING_API_VERSION",
            config.api_version,
            "must not be empty",
        )

    if config.request_timeout_s <= 0:
        raise ConfigValidationError(
            "SITE_PAIRING_REQUEST_TIMEOUT_S",
            config.request_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.task_timeout_s <= 0:
        raise ConfigValidationError(
            "SITE_PAIRING_TASK_TIMEOUT_S",
            config.task_timeout_s,
            "must be > 0 (polls)",
        )

    if config.poll_interval_s < 0:
        raise ConfigValidationError(
            "SITE_PAIRING_POLL_INTERVAL_S",
            config.poll_interval_s,
            "must be >= 0 (seconds)",
        )
