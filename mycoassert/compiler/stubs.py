"""
TypedDict declarations for sanitized output shapes.

`compile_type_stubs` describes what a successful validator returns: one
TypedDict per schema, optional properties as NotRequired, nested schema
references as the referenced TypedDict.
"""

import logging
from collections.abc import Iterable

from mycoassert.compiler.emitter import SourceBuilder
from mycoassert.core.errors import CompilationError
from mycoassert.domain.enums import PrimitiveType
from mycoassert.schema.models import PropertySchema, Schema, SchemaRegistry

logger = logging.getLogger(__name__)

_PRIMITIVE_ANNOTATIONS = {
    PrimitiveType.STRING: "str",
    PrimitiveType.NUMBER: "int | float",
    PrimitiveType.BOOLEAN: "bool",
    PrimitiveType.OBJECT: "dict[str, Any]",
    PrimitiveType.FUNCTION: "Callable[..., Any]",
    PrimitiveType.ANY: "Any",
}


def class_identifier(name: str) -> str:
    """
    Turn a schema name into a class name.

    Example:
        >>> class_identifier("order-line")
        'OrderLine'
    """
    parts = [part for part in "".join(c if c.isalnum() else " " for c in name).split() if part]
    identifier = "".join(part[0].upper() + part[1:] for part in parts)
    if not identifier or identifier[0].isdigit():
        identifier = "Schema" + identifier
    return identifier


def compile_type_stubs(registry: SchemaRegistry, schema_names: Iterable[str] | None = None) -> str:
    """
    Emit TypedDict declarations for schemas in a registry.

    Args:
        registry: Loaded schema registry
        schema_names: Schemas to describe (default: all)

    Returns:
        Python source text

    Raises:
        CompilationError: If a requested schema is unknown
    """
    names = list(schema_names) if schema_names is not None else registry.names()
    unknown = [name for name in names if name not in registry]
    if unknown:
        raise CompilationError(
            "Cannot describe unknown schema(s): " + ", ".join(unknown),
            details={"unknown": unknown},
        )

    classes: dict[str, list[str]] = {}
    for name in names:
        _describe_schema(registry, registry.schemas[name], class_identifier(name), classes)

    out = SourceBuilder()
    out.line('"""Output types generated by mycoassert. Do not edit."""')
    out.line()
    out.line("from __future__ import annotations")
    out.line()
    out.line("from collections.abc import Callable")
    out.line("from typing import Any, NotRequired, TypedDict")
    for lines in classes.values():
        out.line()
        out.line()
        out.extend(lines)

    logger.debug("Emitted %d TypedDict declaration(s)", len(classes))
    return out.render()


def _describe_schema(
    registry: SchemaRegistry, schema: Schema, class_name: str, classes: dict[str, list[str]]
) -> None:
    if class_name in classes:
        return
    # Reserve the name first so cyclic references terminate
    classes[class_name] = []

    out = SourceBuilder()
    with out.block(f"class {class_name}(TypedDict):"):
        if not schema.properties:
            out.line("pass")
        for key, prop in schema.properties.items():
            inline_name = f"{class_name}{class_identifier(key)}"
            annotation = _annotation(registry, prop, inline_name, classes)
            if prop.optional:
                annotation = f"NotRequired[{annotation}]"
            if key.isidentifier():
                out.line(f"{key}: {annotation}")
            else:
                out.line(f"# {key!r}: {annotation} (not an identifier)")
    classes[class_name] = out.lines


def _annotation(
    registry: SchemaRegistry, prop: PropertySchema, inline_name: str, classes: dict[str, list[str]]
) -> str:
    if prop.type is PrimitiveType.ARRAY:
        if prop.item_schema is None:
            return "list[Any]"
        return f"list[{_annotation(registry, prop.item_schema, inline_name + 'Item', classes)}]"

    if prop.nested_schema_ref is not None and prop.nested_schema_ref in registry:
        referenced = prop.nested_schema_ref
        class_name = class_identifier(referenced)
        _describe_schema(registry, registry.schemas[referenced], class_name, classes)
        return class_name

    if prop.properties is not None:
        inline = Schema(name=inline_name, properties=prop.properties)
        _describe_schema(registry, inline, inline_name, classes)
        return inline_name

    return _PRIMITIVE_ANNOTATIONS[prop.type]
