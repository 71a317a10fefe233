"""
Rule, transform and type tables.

All three are closed mappings keyed by the enums in mycoassert.domain.enums.
The interpreter dispatches through them at call time; the compiler reads
their `emit` source once and inlines it.
"""

from mycoassert.rules.rules import RULES, RuleDefinition
from mycoassert.rules.transforms import TRANSFORM_ERRORS, TRANSFORMS, TransformDefinition
from mycoassert.rules.types import TYPE_CHECKS, TypeCheck, is_number, type_name

__all__ = [
    "RULES",
    "RuleDefinition",
    "TRANSFORMS",
    "TRANSFORM_ERRORS",
    "TransformDefinition",
    "TYPE_CHECKS",
    "TypeCheck",
    "is_number",
    "type_name",
]
