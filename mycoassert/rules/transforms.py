"""
Transform table: named rewrites applied to a value before type and rule checks.

String transforms leave non-string values untouched so that re-running a
schema over its own sanitized output is stable (`trim` then `toInt` on an
already converted 123 yields 123).

A transform signals failure by raising one of TRANSFORM_ERRORS. The
interpreter calls `apply`; the compiler inlines `emit`, a list of statements
that rewrite the local name `value` and raise the same exception types.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from mycoassert.domain.enums import TransformName

TRANSFORM_ERRORS = (TypeError, ValueError, OverflowError)


class TransformDefinition(BaseModel):
    """A named rewrite together with its inline source."""

    model_config = ConfigDict(frozen=True)

    name: TransformName
    apply: Callable[[Any], Any]
    emit: list[str]


def _string_method(method: str) -> Callable[[Any], Any]:
    def apply(value: Any) -> Any:
        if isinstance(value, str):
            return getattr(value, method)()
        return value

    return apply


def _string_method_source(method: str) -> list[str]:
    return [
        "if isinstance(value, str):",
        f"    value = value.{method}()",
    ]


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"cannot convert {type(value).__name__} to int")
    if isinstance(value, str):
        return int(value.strip(), 10)
    return int(value)


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"cannot convert {type(value).__name__} to float")
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


TRANSFORMS: dict[TransformName, TransformDefinition] = {
    TransformName.TRIM: TransformDefinition(
        name=TransformName.TRIM,
        apply=_string_method("strip"),
        emit=_string_method_source("strip"),
    ),
    TransformName.TO_LOWER_CASE: TransformDefinition(
        name=TransformName.TO_LOWER_CASE,
        apply=_string_method("lower"),
        emit=_string_method_source("lower"),
    ),
    TransformName.TO_UPPER_CASE: TransformDefinition(
        name=TransformName.TO_UPPER_CASE,
        apply=_string_method("upper"),
        emit=_string_method_source("upper"),
    ),
    TransformName.TO_INT: TransformDefinition(
        name=TransformName.TO_INT,
        apply=_to_int,
        emit=[
            "if isinstance(value, bool) or not isinstance(value, (str, int, float)):",
            "    raise TypeError('cannot convert to int')",
            "value = int(value.strip(), 10) if isinstance(value, str) else int(value)",
        ],
    ),
    TransformName.TO_FLOAT: TransformDefinition(
        name=TransformName.TO_FLOAT,
        apply=_to_float,
        emit=[
            "if isinstance(value, bool) or not isinstance(value, (str, int, float)):",
            "    raise TypeError('cannot convert to float')",
            "value = float(value.strip()) if isinstance(value, str) else float(value)",
        ],
    ),
}
