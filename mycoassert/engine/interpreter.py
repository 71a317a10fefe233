"""
Schema interpreter.

Walks a schema against data at call time, dispatching through the rule,
transform and type tables. Per property, in schema order:

1. absent + optional   -> skipped
2. absent + required   -> `required` issue
3. transforms          -> in declared order, each consuming the previous output
4. type check          -> `type` issue, rest of the property skipped
5. rules               -> first failing rule is the only issue for the property
6. array items         -> first invalid item reported, wrapped with its index
7. nested schema       -> nested issues wrapped with the dotted path
8. success             -> candidate written to the sanitized output

Non-verbose evaluation stops at the first issue and raises. Verbose
evaluation continues with the next property and returns every issue.
"""

import logging
from collections.abc import Mapping
from typing import Any

from mycoassert.core.errors import UnresolvedSchemaReference
from mycoassert.domain.enums import PrimitiveType
from mycoassert.domain.issues import ValidationIssue, ValidationResult
from mycoassert.engine import runtime
from mycoassert.rules.rules import RULES
from mycoassert.rules.transforms import TRANSFORM_ERRORS, TRANSFORMS
from mycoassert.rules.types import TYPE_CHECKS
from mycoassert.schema.loader import load_registry, load_schema
from mycoassert.schema.models import PropertySchema, Schema, SchemaRegistry

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


class Evaluator:
    """
    One evaluation pass.

    Holds only the per-call options; schemas and tables are read, never
    written, so separate Evaluator instances can run concurrently.

    Args:
        registry: Registry used to resolve `nested_schema_ref`
        verbose: Collect every issue instead of stopping at the first
        contract_mode: Look members up by attribute as well as by key,
            accept any non-scalar object as a namespace, and report absent
            capabilities as `missing-capability`
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        verbose: bool = False,
        contract_mode: bool = False,
    ) -> None:
        self.registry = registry
        self.verbose = verbose
        self.contract_mode = contract_mode

    def run(self, schema: Schema, data: Any) -> tuple[Any, list[ValidationIssue]]:
        """Evaluate `data` against `schema` from the root."""
        if not self._is_object(data):
            return None, [runtime.type_issue("", PrimitiveType.OBJECT.value, data)]
        return self.walk_schema(schema, data, "")

    def walk_schema(
        self, schema: Schema, container: Any, path: str
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        """Evaluate every declared property of `schema` against `container`."""
        output: dict[str, Any] = {}
        issues: list[ValidationIssue] = []

        for key, prop in schema.properties.items():
            property_path = runtime.join_path(path, key)
            present, raw_value = self._lookup(container, key)

            if not present:
                if prop.optional:
                    continue
                if prop.capability:
                    issues.append(runtime.missing_capability_issue(property_path))
                else:
                    issues.append(runtime.required_issue(property_path))
                if not self.verbose:
                    break
                continue

            value, property_issues = self.check_property(
                schema.name, prop, raw_value, property_path
            )
            if property_issues:
                issues.extend(property_issues)
                if not self.verbose:
                    break
                continue

            output[key] = value

        return output, issues

    def check_property(
        self, schema_name: str, prop: PropertySchema, value: Any, path: str
    ) -> tuple[Any, list[ValidationIssue]]:
        """
        Run the transform/type/rule/recursion pipeline for one present value.

        Returns:
            (sanitized value, []) on success, (None, issues) on failure
        """
        for transform in prop.transforms:
            before = value
            try:
                value = TRANSFORMS[transform.name].apply(value)
            except TRANSFORM_ERRORS:
                return None, [runtime.transform_issue(path, transform.name.value, before)]

        if not self._type_ok(prop.type, value):
            if prop.capability:
                return None, [runtime.capability_issue(path, value)]
            return None, [runtime.type_issue(path, prop.type.value, value)]

        for rule in prop.rules:
            definition = RULES[rule.name]
            if not definition.predicate(value, rule.argument):
                detail = definition.detail(rule.argument)
                return None, [runtime.rule_issue(path, rule.name.value, detail, value)]

        if prop.type is PrimitiveType.ARRAY and prop.item_schema is not None:
            items = []
            for index, item in enumerate(value):
                item_value, item_issues = self.check_property(
                    schema_name, prop.item_schema, item, runtime.item_path(path, index)
                )
                if item_issues:
                    return None, [runtime.item_issue(path, index, item_issues[0])]
                items.append(item_value)
            value = items

        nested = self._nested_schema(schema_name, prop)
        if nested is not None:
            nested_value, nested_issues = self.walk_schema(nested, value, path)
            if nested_issues:
                return None, [runtime.nested_issue(issue) for issue in nested_issues]
            value = nested_value

        return value, []

    def _nested_schema(self, schema_name: str, prop: PropertySchema) -> Schema | None:
        if prop.properties is not None:
            return Schema(name=f"{schema_name}.{prop.key}", properties=prop.properties)
        if prop.nested_schema_ref is None:
            return None
        if self.registry is None:
            raise UnresolvedSchemaReference(schema_name, prop.key, prop.nested_schema_ref)
        return self.registry.resolve(prop.nested_schema_ref, schema_name, prop.key)

    def _type_ok(self, prop_type: PrimitiveType, value: Any) -> bool:
        if prop_type is PrimitiveType.OBJECT:
            return self._is_object(value)
        return TYPE_CHECKS[prop_type].predicate(value)

    def _is_object(self, value: Any) -> bool:
        if self.contract_mode:
            # Namespaces may be modules, classes or plain instances
            return value is not None and not isinstance(value, _SCALARS)
        return TYPE_CHECKS[PrimitiveType.OBJECT].predicate(value)

    def _lookup(self, container: Any, key: str) -> tuple[bool, Any]:
        if isinstance(container, Mapping):
            if key in container:
                return True, container[key]
            return False, None
        if self.contract_mode and hasattr(container, key):
            return True, getattr(container, key)
        return False, None


def evaluate(
    schema: Schema,
    data: Any,
    registry: SchemaRegistry | None = None,
    verbose: bool = False,
) -> ValidationResult:
    """
    Evaluate data against a schema.

    Args:
        schema: Schema to apply
        data: Data to validate (a mapping at the root)
        registry: Registry for nested schema references
        verbose: Collect all per-property issues instead of raising on the first

    Returns:
        ValidationResult. In verbose mode `value` is the partial sanitized
        object when invalid.

    Raises:
        SchemaValidationError: In non-verbose mode, for the first issue found
        UnresolvedSchemaReference: If any reference reachable from the schema
            cannot be resolved, whether or not the data reaches it
    """
    (registry if registry is not None else SchemaRegistry()).check_schema(schema)
    value, issues = Evaluator(registry=registry, verbose=verbose).run(schema, data)
    if issues:
        logger.debug(
            "Schema %s rejected data: %d issue(s), first on '%s' (%s)",
            schema.name,
            len(issues),
            issues[0].property,
            issues[0].rule,
        )
    return runtime.finish(value, issues, verbose)


def validate(
    data: Any,
    schema: Schema | Mapping[str, Any] | str,
    registry: SchemaRegistry | Mapping[str, Any] | None = None,
    verbose: bool = False,
) -> Any:
    """
    Validate and sanitize data.

    Mirrors the signature of generated validators: non-verbose calls return
    the sanitized data or raise, verbose calls return a ValidationResult.

    Args:
        data: Data to validate
        schema: A Schema, a raw schema mapping, or the name of a registry schema
        registry: A SchemaRegistry or a raw registry mapping
        verbose: Return a ValidationResult instead of raising

    Example:
        >>> validate({"id": 1}, {"id": {"type": "number", "isInteger": True}})
        {'id': 1}
    """
    resolved_registry = _coerce_registry(registry)
    resolved_schema = _coerce_schema(schema, resolved_registry)
    result = evaluate(resolved_schema, data, resolved_registry, verbose=verbose)
    return result if verbose else result.value


def assert_valid(
    data: Any,
    schema: Schema | Mapping[str, Any] | str,
    registry: SchemaRegistry | Mapping[str, Any] | None = None,
) -> Any:
    """
    Return sanitized data or raise on the first issue.

    Raises:
        SchemaValidationError: If the data is invalid
    """
    return validate(data, schema, registry, verbose=False)


def _coerce_registry(registry: SchemaRegistry | Mapping[str, Any] | None) -> SchemaRegistry | None:
    if registry is None or isinstance(registry, SchemaRegistry):
        return registry
    return load_registry(registry)


def _coerce_schema(
    schema: Schema | Mapping[str, Any] | str, registry: SchemaRegistry | None
) -> Schema:
    if isinstance(schema, Schema):
        return schema
    if isinstance(schema, str):
        if registry is None:
            raise UnresolvedSchemaReference("", "", schema)
        return registry.resolve(schema)
    return load_schema("schema", schema)
