"""Pydantic operation report model.

A structured, JSON-serialisable summary of a pairing, removal or
verification run: which sites were involved, which remote steps ran,
how each ended and which error (if any) stopped the operation.  Results
build their report via ``to_report()``; callers dump it with
``model_dump(mode="json")`` for logs or console output.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

# Schema version for forward compatibility
SCHEMA_VERSION = "site-pairing-report-v1"


class StepReport(BaseModel):
    """One remote step of an operation (submission, poll, lookup).

    Attributes:
        name: Step identifier (e.g. ``"associate_a_with_b"``).
        target: Endpoint the step was issued against.
        status: ``"succeeded"``, ``"failed"``, ``"skipped"`` or ``"planned"``.
        task_href: Task polled for this step, if any.
        task_status: Last task status observed.
        polls: Number of task polls issued.
        outcome_unknown: The remote task may still be running.
        detail: Free-form message.
    """

    name: str
    target: str = ""
    status: str = "skipped"
    task_href: str = ""
    task_status: str = ""
    polls: int = 0
    outcome_unknown: bool = False
    detail: str = ""


class OperationReport(BaseModel):
    """Top-level report for one operation.

    Attributes:
        schema_version: Report schema identifier.
        operation: ``"pair_sites"``, ``"remove_association"`` or ``"verify_pairing"``.
        status: Operation status value from the result enum.
        succeeded: Overall success flag.
        sites: Endpoints involved, in argument order.
        steps: Remote steps in execution order.
        error: ``PairingError.to_error_dict()`` of the stopping error.
        generated_at: UTC timestamp of report creation.
    """

    schema_version: str = SCHEMA_VERSION
    operation: str
    status: str
    succeeded: bool = False
    sites: list[str] = Field(default_factory=list)
    steps: list[StepReport] = Field(default_factory=list)
    error: dict[str, Any] | None = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
