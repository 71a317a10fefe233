"""
Contract verification.

A contract is a schema describing what a context object must offer:
nested namespaces (`data.users`) and capabilities (`data.users.get` must be
callable). Verification reuses the interpreter's traversal in contract mode
and is always pass/fail: the first issue raises.
"""

import logging
from collections.abc import Mapping
from typing import Any

from mycoassert.core.config import settings
from mycoassert.core.errors import SchemaValidationError
from mycoassert.core.observability import metrics
from mycoassert.engine import runtime
from mycoassert.engine.interpreter import Evaluator
from mycoassert.schema.loader import load_contract
from mycoassert.schema.models import Schema, SchemaRegistry

logger = logging.getLogger(__name__)


def verify_contract(
    ctx: Any,
    contract: Schema | Mapping[str, Any],
    registry: SchemaRegistry | None = None,
) -> bool:
    """
    Verify that a context object satisfies a contract.

    Members are looked up by key on mappings and by attribute on any other
    object, so a context can be a dict, a module, a class or an instance.

    Args:
        ctx: Context object to inspect
        contract: A contract Schema or a raw contract mapping
        registry: Registry for contract properties that reference named schemas

    Returns:
        True when the contract is satisfied

    Raises:
        MissingCapability: If a capability is absent or not callable
        SchemaValidationError: For any other structural mismatch
        UnresolvedSchemaReference: If the contract references an unknown schema

    Example:
        >>> ctx = {"data": {"users": {"get": lambda user_id: None}}}
        >>> verify_contract(ctx, {"data": {"users": {"get": "function"}}})
        True
    """
    schema = contract if isinstance(contract, Schema) else load_contract(contract)
    (registry if registry is not None else SchemaRegistry()).check_schema(schema)

    evaluator = Evaluator(registry=registry, verbose=False, contract_mode=True)
    _, issues = evaluator.run(schema, ctx)

    try:
        runtime.finish(None, issues, verbose=False)
    except SchemaValidationError as e:
        logger.info(
            "Contract %s not satisfied: %s",
            schema.name,
            e.message,
            extra={"property": e.property, "rule": e.rule},
        )
        _record_verification("failed")
        raise

    logger.debug("Contract %s satisfied", schema.name)
    _record_verification("passed")
    return True


def _record_verification(status: str) -> None:
    if settings.metrics_enabled:
        metrics.contract_verifications_total.labels(status=status).inc()
