"""
mycoassert: schema validation, sanitization and contract verification.

Schemas run two ways with identical results: interpreted at call time
(`validate`, `assert_valid`, `evaluate`) or compiled ahead of time into
standalone Python validators (`compile_registry`, `load_compiled`).
`verify_contract` checks that a context object offers the namespaces and
callable capabilities a contract requires.
"""

from mycoassert.compiler import compile_registry, compile_type_stubs, load_compiled
from mycoassert.core.errors import (
    CompilationError,
    MissingCapability,
    MycoAssertError,
    RequiredFieldMissing,
    RuleViolation,
    SchemaDefinitionError,
    SchemaValidationError,
    TransformFailed,
    TypeMismatch,
    UnresolvedSchemaReference,
)
from mycoassert.domain.issues import ValidationIssue, ValidationResult
from mycoassert.engine import assert_valid, evaluate, validate, verify_contract
from mycoassert.schema import (
    Schema,
    SchemaRegistry,
    load_contract,
    load_registry,
    load_registry_json,
    load_schema,
)

__version__ = "1.0.0"

__all__ = [
    "CompilationError",
    "MissingCapability",
    "MycoAssertError",
    "RequiredFieldMissing",
    "RuleViolation",
    "Schema",
    "SchemaDefinitionError",
    "SchemaRegistry",
    "SchemaValidationError",
    "TransformFailed",
    "TypeMismatch",
    "UnresolvedSchemaReference",
    "ValidationIssue",
    "ValidationResult",
    "assert_valid",
    "compile_registry",
    "compile_type_stubs",
    "evaluate",
    "load_compiled",
    "load_contract",
    "load_registry",
    "load_registry_json",
    "load_schema",
    "validate",
    "verify_contract",
]
