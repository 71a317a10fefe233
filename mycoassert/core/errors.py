"""
Domain-specific exceptions for mycoassert.

Two families:
- Definition errors: the schema itself is broken (unknown rule, bad
  argument, unresolved reference). Raised at load or compile time.
- Validation errors: the data does not satisfy a valid schema. Raised by
  non-verbose evaluation, one per call, carrying the first issue found.
"""

from typing import Any

from mycoassert.domain.enums import IssueKind
from mycoassert.domain.issues import ValidationIssue


class MycoAssertError(Exception):
    """Base exception for all mycoassert errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class SchemaDefinitionError(MycoAssertError):
    """
    Raised when a schema document cannot be loaded.

    Examples:
    - Unknown rule or transform name
    - Rule argument of the wrong type
    - Pattern that does not compile
    - Property key that is empty after stripping the optional marker
    """

    pass


class UnresolvedSchemaReference(SchemaDefinitionError):
    """
    Raised when a property references a schema name missing from the registry.

    This is a configuration defect, never a data defect.
    """

    def __init__(self, schema_name: str, property_name: str, reference: str):
        self.schema_name = schema_name
        self.property_name = property_name
        self.reference = reference
        super().__init__(
            f"Schema '{schema_name}' property '{property_name}' references "
            f"unknown schema '{reference}'",
            details={
                "schema": schema_name,
                "property": property_name,
                "reference": reference,
            },
        )


class CompilationError(MycoAssertError):
    """
    Raised when validator source cannot be generated or loaded.

    Examples:
    - Requested schema name not present in the registry
    - Generated source failed to execute
    """

    pass


class SchemaValidationError(MycoAssertError):
    """
    Raised when data fails validation in non-verbose mode.

    Exposes the fields of the first issue found so callers can display it
    directly or bind it to a form field.
    """

    def __init__(self, issue: ValidationIssue):
        self.issue = issue
        self.property = issue.property
        self.rule = issue.rule
        self.value = issue.value
        super().__init__(
            issue.message,
            details={"property": issue.property, "rule": issue.rule, "kind": issue.kind.value},
        )


class RequiredFieldMissing(SchemaValidationError):
    """A required property is absent."""

    pass


class TypeMismatch(SchemaValidationError):
    """A property value does not have the declared type."""

    pass


class RuleViolation(SchemaValidationError):
    """A property value fails one of its declared rules."""

    pass


class TransformFailed(SchemaValidationError):
    """A transform could not convert the property value."""

    pass


class MissingCapability(SchemaValidationError):
    """A contract capability is absent or not callable."""

    pass


# Issue kind -> exception class for the root cause of a failure
ERROR_KIND_MAP: dict[IssueKind, type[SchemaValidationError]] = {
    IssueKind.REQUIRED_FIELD_MISSING: RequiredFieldMissing,
    IssueKind.TYPE_MISMATCH: TypeMismatch,
    IssueKind.RULE_VIOLATION: RuleViolation,
    IssueKind.TRANSFORM_FAILED: TransformFailed,
    IssueKind.MISSING_CAPABILITY: MissingCapability,
}


def error_for_issue(issue: ValidationIssue) -> SchemaValidationError:
    """
    Build the exception to raise for an issue.

    The class follows the root cause so that, for example, a missing
    capability three namespaces deep still raises MissingCapability. The
    exception keeps the outer issue, whose property and message describe the
    full path.

    Args:
        issue: The (possibly wrapping) issue

    Returns:
        Exception instance, not raised
    """
    error_cls = ERROR_KIND_MAP.get(issue.root_cause().kind, SchemaValidationError)
    return error_cls(issue)
