"""
Domain enums for schema definitions and validation issues.

Every name that can appear in a schema document resolves to one of these
enums at load time. The rule, transform and type tables are keyed by them,
so dispatch is closed: an unknown name never reaches evaluation.
"""

from enum import Enum


class PrimitiveType(str, Enum):
    """Value types a property can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    FUNCTION = "function"
    ANY = "any"


class RuleName(str, Enum):
    """Named predicates available to property schemas."""

    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    ENUM = "enum"
    IS_INTEGER = "isInteger"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"


class TransformName(str, Enum):
    """Named value rewrites applied before type and rule checks."""

    TRIM = "trim"
    TO_LOWER_CASE = "toLowerCase"
    TO_UPPER_CASE = "toUpperCase"
    TO_INT = "toInt"
    TO_FLOAT = "toFloat"


class IssueKind(str, Enum):
    """
    Kinds of validation issues.

    ARRAY_ITEM_INVALID and NESTED_SCHEMA_INVALID wrap an inner issue;
    the others are root causes.
    """

    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    RULE_VIOLATION = "RULE_VIOLATION"
    TRANSFORM_FAILED = "TRANSFORM_FAILED"
    ARRAY_ITEM_INVALID = "ARRAY_ITEM_INVALID"
    NESTED_SCHEMA_INVALID = "NESTED_SCHEMA_INVALID"
    MISSING_CAPABILITY = "MISSING_CAPABILITY"


# Rule identifiers reported for issues that are not rule-table violations
REQUIRED_RULE = "required"
TYPE_RULE = "type"
TRANSFORM_RULE = "transform"
CAPABILITY_RULE = "missing-capability"
