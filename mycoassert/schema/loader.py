"""
Schema loader: raw schema documents -> typed schema model.

A raw registry is a JSON-compatible mapping of schema name -> property
definitions:

    {
        "User": {
            "id": {"type": "number", "isInteger": true},
            "username": {"type": "string", "transform": ["trim", "toLowerCase"]},
            "nickname?": "string"
        },
        "Product": {
            "seller": {"type": "Seller"},
            "tags": {"type": "array", "minLength": 1, "items": {"type": "string"}}
        },
        "Seller": {"sellerId": {"type": "number", "transform": ["trim", "toInt"]}}
    }

All normalization happens here, once:
- the optional marker is stripped from keys and becomes `optional`
- rule and transform names resolve to enum members
- rule arguments are checked
- non-primitive type names become `nested_schema_ref`

Anything that cannot be normalized raises SchemaDefinitionError.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from mycoassert.core.config import settings
from mycoassert.core.errors import SchemaDefinitionError
from mycoassert.domain.enums import PrimitiveType, RuleName, TransformName
from mycoassert.rules.rules import RULES
from mycoassert.schema.models import (
    PropertySchema,
    RuleRef,
    Schema,
    SchemaRegistry,
    TransformRef,
)

logger = logging.getLogger(__name__)

# Keys of a property definition that are not rule names
RESERVED_KEYS = frozenset(
    {"type", "transform", "items", "schema", "properties", "capability", "optional"}
)

_PRIMITIVE_TYPES = {t.value: t for t in PrimitiveType}


def load_registry(
    raw: Mapping[str, Any], optional_marker: str | None = None, check_references: bool = True
) -> SchemaRegistry:
    """
    Load a full schema registry.

    Args:
        raw: Mapping of schema name -> property definitions
        optional_marker: Key suffix marking optional properties (default from settings)
        check_references: Verify that every nested reference resolves

    Returns:
        SchemaRegistry with schemas in document order

    Raises:
        SchemaDefinitionError: If any definition is malformed
        UnresolvedSchemaReference: If a nested reference does not resolve
    """
    if not isinstance(raw, Mapping):
        raise SchemaDefinitionError(
            "Schema registry must be a mapping of schema name to definition",
            details={"type": type(raw).__name__},
        )

    schemas = {
        name: load_schema(name, definition, optional_marker) for name, definition in raw.items()
    }
    registry = SchemaRegistry(schemas=schemas)

    if check_references:
        registry.check_references()

    logger.info("Loaded schema registry with %d schemas", len(schemas))
    return registry


def load_registry_json(text: str, optional_marker: str | None = None) -> SchemaRegistry:
    """
    Load a schema registry from its JSON text.

    Raises:
        SchemaDefinitionError: If the text is not valid JSON or the registry is malformed
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaDefinitionError(
            f"Schema registry is not valid JSON: {e.msg}",
            details={"line": e.lineno, "column": e.colno},
        ) from e
    return load_registry(raw, optional_marker)


def load_schema(name: str, raw: Mapping[str, Any], optional_marker: str | None = None) -> Schema:
    """
    Load one data schema.

    References to other schemas are recorded but not resolved; resolution
    needs a registry (see load_registry / SchemaRegistry.check_references).

    Example:
        >>> schema = load_schema("Tag", {"label?": {"type": "string", "minLength": 2}})
        >>> schema.properties["label"].optional
        True
    """
    return _load_properties(name, raw, _marker(optional_marker), allow_namespaces=False)


def load_contract(
    raw: Mapping[str, Any], name: str = "contract", optional_marker: str | None = None
) -> Schema:
    """
    Load a contract schema.

    Contracts differ from data schemas in two ways:
    - a mapping without a `type` key describes a required sub-namespace
    - type `function` marks a capability

    A namespace whose members include `type`, `items` or a rule name must use
    the explicit form `{"type": "object", "properties": {...}}`; otherwise the
    mapping is read as a property definition.

    Example:
        >>> contract = load_contract({"data": {"users": {"get": "function"}}})
        >>> contract.properties["data"].properties["users"].properties["get"].capability
        True
    """
    return _load_properties(name, raw, _marker(optional_marker), allow_namespaces=True)


def _marker(optional_marker: str | None) -> str:
    return optional_marker if optional_marker is not None else settings.optional_marker


def _load_properties(
    schema_name: str, raw: Any, marker: str, allow_namespaces: bool
) -> Schema:
    if not isinstance(raw, Mapping):
        raise SchemaDefinitionError(
            f"Schema '{schema_name}' must be a mapping of property definitions",
            details={"schema": schema_name, "type": type(raw).__name__},
        )

    properties: dict[str, PropertySchema] = {}
    for raw_key, definition in raw.items():
        prop = _load_property(schema_name, raw_key, definition, marker, allow_namespaces)
        if prop.key in properties:
            raise SchemaDefinitionError(
                f"Schema '{schema_name}' declares property '{prop.key}' twice",
                details={"schema": schema_name, "property": prop.key},
            )
        properties[prop.key] = prop

    logger.debug("Loaded schema %s with %d properties", schema_name, len(properties))
    return Schema(name=schema_name, properties=properties)


def _split_key(schema_name: str, raw_key: Any, marker: str) -> tuple[str, bool]:
    if not isinstance(raw_key, str):
        raise SchemaDefinitionError(
            f"Schema '{schema_name}' has a non-string property key",
            details={"schema": schema_name, "key": raw_key},
        )
    optional = raw_key.endswith(marker)
    key = raw_key[: -len(marker)] if optional else raw_key
    if not key:
        raise SchemaDefinitionError(
            f"Schema '{schema_name}' has an empty property key",
            details={"schema": schema_name, "key": raw_key},
        )
    return key, optional


def _load_property(
    schema_name: str, raw_key: Any, definition: Any, marker: str, allow_namespaces: bool
) -> PropertySchema:
    key, optional = _split_key(schema_name, raw_key, marker)
    return _build_property(schema_name, key, optional, definition, marker, allow_namespaces)


def _build_property(
    schema_name: str,
    key: str,
    optional: bool,
    definition: Any,
    marker: str,
    allow_namespaces: bool,
) -> PropertySchema:
    context = {"schema": schema_name, "property": key}

    if isinstance(definition, str):
        definition = {"type": definition}

    if not isinstance(definition, Mapping):
        raise SchemaDefinitionError(
            f"Property '{key}' of schema '{schema_name}' must be a type name or a mapping",
            details={**context, "type": type(definition).__name__},
        )

    if "type" not in definition:
        if not allow_namespaces:
            raise SchemaDefinitionError(
                f"Property '{key}' of schema '{schema_name}' is missing 'type'", details=context
            )
        # Contract sub-namespace: every key is a member definition
        namespace = _load_properties(f"{schema_name}.{key}", definition, marker, allow_namespaces)
        return PropertySchema(
            key=key,
            type=PrimitiveType.OBJECT,
            optional=optional,
            properties=namespace.properties,
        )

    prop_type, nested_ref = _resolve_type(definition["type"], context)

    if "schema" in definition:
        if prop_type is not PrimitiveType.OBJECT or nested_ref is not None:
            raise SchemaDefinitionError(
                f"Property '{key}' of schema '{schema_name}' uses 'schema' with a non-object type",
                details=context,
            )
        nested_ref = definition["schema"]
        if not isinstance(nested_ref, str) or not nested_ref:
            raise SchemaDefinitionError(
                f"Property '{key}' of schema '{schema_name}' has an invalid 'schema' reference",
                details={**context, "schema_ref": nested_ref},
            )

    inline = None
    if "properties" in definition:
        if prop_type is not PrimitiveType.OBJECT or nested_ref is not None:
            raise SchemaDefinitionError(
                f"Property '{key}' of schema '{schema_name}' uses 'properties' "
                "with a non-object type or a schema reference",
                details=context,
            )
        inline = _load_properties(
            f"{schema_name}.{key}", definition["properties"], marker, allow_namespaces
        ).properties

    item_schema = None
    if "items" in definition:
        if prop_type is not PrimitiveType.ARRAY:
            raise SchemaDefinitionError(
                f"Property '{key}' of schema '{schema_name}' uses 'items' with a non-array type",
                details=context,
            )
        item_schema = _build_property(
            schema_name, key, False, definition["items"], marker, allow_namespaces
        )

    capability = definition.get("capability", False)
    if not isinstance(capability, bool):
        raise SchemaDefinitionError(
            f"Property '{key}' of schema '{schema_name}' has a non-boolean 'capability'",
            details=context,
        )
    if allow_namespaces and prop_type is PrimitiveType.FUNCTION:
        capability = True
    if capability:
        if prop_type not in (PrimitiveType.FUNCTION, PrimitiveType.ANY):
            raise SchemaDefinitionError(
                f"Capability '{key}' of schema '{schema_name}' must have type 'function'",
                details={**context, "type": prop_type.value},
            )
        prop_type = PrimitiveType.FUNCTION

    explicit_optional = definition.get("optional", False)
    if not isinstance(explicit_optional, bool):
        raise SchemaDefinitionError(
            f"Property '{key}' of schema '{schema_name}' has a non-boolean 'optional'",
            details=context,
        )

    return PropertySchema(
        key=key,
        type=prop_type,
        optional=optional or explicit_optional,
        transforms=_load_transforms(definition.get("transform", []), context),
        rules=_load_rules(definition, context),
        item_schema=item_schema,
        nested_schema_ref=nested_ref,
        properties=inline,
        capability=capability,
    )


def _resolve_type(raw_type: Any, context: dict[str, str]) -> tuple[PrimitiveType, str | None]:
    if not isinstance(raw_type, str) or not raw_type:
        raise SchemaDefinitionError(
            f"Property '{context['property']}' of schema '{context['schema']}' "
            "has an invalid 'type'",
            details={**context, "type": raw_type},
        )
    primitive = _PRIMITIVE_TYPES.get(raw_type)
    if primitive is not None:
        return primitive, None
    # Any other name refers to a schema in the registry
    return PrimitiveType.OBJECT, raw_type


def _load_transforms(raw: Any, context: dict[str, str]) -> list[TransformRef]:
    names = [raw] if isinstance(raw, str) else raw
    if not isinstance(names, (list, tuple)):
        raise SchemaDefinitionError(
            f"Property '{context['property']}' of schema '{context['schema']}' "
            "must list transforms by name",
            details={**context, "transform": raw},
        )

    transforms = []
    for name in names:
        try:
            transforms.append(TransformRef(name=TransformName(name)))
        except ValueError as e:
            raise SchemaDefinitionError(
                f"Unknown transform '{name}' on property '{context['property']}' "
                f"of schema '{context['schema']}'",
                details={**context, "transform": name, "known": [t.value for t in TransformName]},
            ) from e
    return transforms


def _load_rules(definition: Mapping[str, Any], context: dict[str, str]) -> list[RuleRef]:
    rules = []
    # Declaration order of rule keys is evaluation order
    for name, argument in definition.items():
        if name in RESERVED_KEYS:
            continue
        try:
            rule_name = RuleName(name)
        except ValueError as e:
            raise SchemaDefinitionError(
                f"Unknown rule '{name}' on property '{context['property']}' "
                f"of schema '{context['schema']}'",
                details={**context, "rule": name, "known": [r.value for r in RuleName]},
            ) from e

        try:
            RULES[rule_name].check_argument(argument)
        except ValueError as e:
            raise SchemaDefinitionError(
                f"Invalid argument for rule '{name}' on property '{context['property']}' "
                f"of schema '{context['schema']}': {e}",
                details={**context, "rule": name, "argument": argument},
            ) from e

        rules.append(RuleRef(name=rule_name, argument=argument))
    return rules
