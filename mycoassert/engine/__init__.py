"""
Evaluation engine: the schema interpreter and the contract verifier.

Key Components:
- interpreter: evaluate/validate/assert_valid, table-driven walk
- contract: verify_contract, structural and capability checks
- runtime: issue construction shared with generated validators
"""

from mycoassert.engine.contract import verify_contract
from mycoassert.engine.interpreter import Evaluator, assert_valid, evaluate, validate

__all__ = [
    "Evaluator",
    "assert_valid",
    "evaluate",
    "validate",
    "verify_contract",
]
