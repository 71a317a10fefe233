"""
Type checks for primitive property types.

Each entry pairs the runtime predicate used by the interpreter with the
equivalent inline expression emitted by the compiler. Emitted expressions
test the local name `value`.
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from mycoassert.domain.enums import PrimitiveType


class TypeCheck(BaseModel):
    """Predicate and emitted expression for one primitive type."""

    model_config = ConfigDict(frozen=True)

    type: PrimitiveType
    predicate: Callable[[Any], bool]
    expression: str | None


def is_number(value: Any) -> bool:
    """True for int and float, never for bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


TYPE_CHECKS: dict[PrimitiveType, TypeCheck] = {
    PrimitiveType.STRING: TypeCheck(
        type=PrimitiveType.STRING,
        predicate=lambda value: isinstance(value, str),
        expression="isinstance(value, str)",
    ),
    PrimitiveType.NUMBER: TypeCheck(
        type=PrimitiveType.NUMBER,
        predicate=is_number,
        expression="isinstance(value, (int, float)) and not isinstance(value, bool)",
    ),
    PrimitiveType.BOOLEAN: TypeCheck(
        type=PrimitiveType.BOOLEAN,
        predicate=lambda value: isinstance(value, bool),
        expression="isinstance(value, bool)",
    ),
    PrimitiveType.ARRAY: TypeCheck(
        type=PrimitiveType.ARRAY,
        predicate=lambda value: isinstance(value, (list, tuple)),
        expression="isinstance(value, (list, tuple))",
    ),
    PrimitiveType.OBJECT: TypeCheck(
        type=PrimitiveType.OBJECT,
        predicate=lambda value: isinstance(value, Mapping),
        expression="isinstance(value, Mapping)",
    ),
    PrimitiveType.FUNCTION: TypeCheck(
        type=PrimitiveType.FUNCTION,
        predicate=callable,
        expression="callable(value)",
    ),
    # `any` accepts everything; the compiler emits no check
    PrimitiveType.ANY: TypeCheck(
        type=PrimitiveType.ANY,
        predicate=lambda value: True,
        expression=None,
    ),
}


def type_name(value: Any) -> str:
    """
    Name a runtime value in schema vocabulary for error messages.

    Example:
        >>> type_name(1.5)
        'number'
        >>> type_name(None)
        'null'
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return PrimitiveType.BOOLEAN.value
    if is_number(value):
        return PrimitiveType.NUMBER.value
    if isinstance(value, str):
        return PrimitiveType.STRING.value
    if isinstance(value, (list, tuple)):
        return PrimitiveType.ARRAY.value
    if isinstance(value, Mapping):
        return PrimitiveType.OBJECT.value
    if callable(value):
        return PrimitiveType.FUNCTION.value
    return type(value).__name__
