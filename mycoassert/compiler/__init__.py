"""
Static compiler for mycoassert schema registries.

This package turns a loaded SchemaRegistry into standalone Python validator
source that behaves exactly like the interpreter.

Key Components:
- compiler: compile_registry / load_compiled entry points, metrics
- emitter: per-schema and per-property function emission
- stubs: TypedDict declarations for sanitized output shapes
- canonicalizer: deterministic schema digests

Design Principles:
- Equivalence: same ordering, messages and issue shapes as the interpreter
- Determinism: same registry produces byte-for-byte identical source
- Early failure: unresolved references abort compilation
"""

from mycoassert.compiler.canonicalizer import canonicalize_json, schema_digest
from mycoassert.compiler.compiler import compile_registry, load_compiled
from mycoassert.compiler.stubs import compile_type_stubs

__all__ = [
    "canonicalize_json",
    "compile_registry",
    "compile_type_stubs",
    "load_compiled",
    "schema_digest",
]
