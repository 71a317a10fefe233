"""
Issue construction shared by the interpreter and generated validators.

Both execution strategies build every ValidationIssue through these helpers,
so paths, messages and issue shapes are identical by construction. Nothing
here dispatches on rule or transform names: rule messages arrive as a
ready-made detail string.
"""

from typing import Any

from mycoassert.core.errors import error_for_issue
from mycoassert.domain.enums import (
    CAPABILITY_RULE,
    REQUIRED_RULE,
    TRANSFORM_RULE,
    TYPE_RULE,
    IssueKind,
)
from mycoassert.domain.issues import ValidationIssue, ValidationResult
from mycoassert.rules.types import type_name


def join_path(path: str, key: str) -> str:
    """Dotted path of a property below `path` ("" is the root)."""
    return f"{path}.{key}" if path else key


def item_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def _subject(path: str) -> str:
    return f"Property '{path}'" if path else "Data"


def required_issue(path: str) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.REQUIRED_FIELD_MISSING,
        property=path,
        rule=REQUIRED_RULE,
        message=f"{_subject(path)} is required.",
    )


def type_issue(path: str, expected: str, value: Any) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.TYPE_MISMATCH,
        property=path,
        rule=TYPE_RULE,
        message=(
            f"{_subject(path)} must be of type '{expected}', "
            f"but received '{type_name(value)}'."
        ),
        value=value,
    )


def rule_issue(path: str, rule: str, detail: str, value: Any) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.RULE_VIOLATION,
        property=path,
        rule=rule,
        message=f"{_subject(path)} {detail}.",
        value=value,
    )


def transform_issue(path: str, transform: str, value: Any) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.TRANSFORM_FAILED,
        property=path,
        rule=TRANSFORM_RULE,
        message=f"{_subject(path)} could not be transformed by '{transform}'.",
        value=value,
    )


def missing_capability_issue(path: str) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.MISSING_CAPABILITY,
        property=path,
        rule=CAPABILITY_RULE,
        message=f"Capability '{path}' is missing.",
    )


def capability_issue(path: str, value: Any) -> ValidationIssue:
    """A capability member is present but cannot be invoked."""
    return ValidationIssue(
        kind=IssueKind.MISSING_CAPABILITY,
        property=path,
        rule=CAPABILITY_RULE,
        message=f"Capability '{path}' must be callable, but received '{type_name(value)}'.",
        value=value,
    )


def item_issue(path: str, index: int, inner: ValidationIssue) -> ValidationIssue:
    """Report the first invalid item of an array property."""
    return ValidationIssue(
        kind=IssueKind.ARRAY_ITEM_INVALID,
        property=path,
        rule=inner.rule,
        message=f"{_subject(path)} item at index {index} is invalid: {inner.message}",
        value=inner.value,
        index=index,
        cause=inner,
    )


def nested_issue(inner: ValidationIssue) -> ValidationIssue:
    """Wrap an issue raised inside a nested schema; path and rule carry through."""
    return ValidationIssue(
        kind=IssueKind.NESTED_SCHEMA_INVALID,
        property=inner.property,
        rule=inner.rule,
        message=inner.message,
        value=inner.value,
        cause=inner,
    )


def finish(value: Any, issues: list[ValidationIssue], verbose: bool) -> ValidationResult:
    """
    Turn a completed walk into a result.

    Raises:
        SchemaValidationError: In non-verbose mode when any issue was found
    """
    if issues and not verbose:
        raise error_for_issue(issues[0])
    return ValidationResult(is_valid=not issues, value=value, errors=issues)
