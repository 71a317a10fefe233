"""
Validation issue and result records.

A ValidationIssue is created at the moment a check fails and is never
mutated afterwards. It is either collected into a ValidationResult
(verbose mode) or carried by the raised SchemaValidationError.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mycoassert.domain.enums import IssueKind


class ValidationIssue(BaseModel):
    """A single failed check for one property."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: IssueKind
    property: str
    rule: str
    message: str
    value: Any = None
    index: int | None = None
    cause: ValidationIssue | None = None

    def root_cause(self) -> ValidationIssue:
        """Follow wrapped array/nested issues down to the failing check."""
        issue = self
        while issue.cause is not None:
            issue = issue.cause
        return issue


class ValidationResult(BaseModel):
    """
    Outcome of a verbose evaluation.

    `value` holds the sanitized data; for invalid input it only contains the
    properties that passed.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_valid: bool
    value: Any = None
    errors: list[ValidationIssue] = Field(default_factory=list)
