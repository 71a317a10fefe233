"""
Rule table: named predicates evaluated against a property value.

Each RuleDefinition holds four things that must stay in step:
- predicate: (value, argument) -> bool, used by the interpreter
- detail: argument -> message fragment, used by both strategies
- emit: inline expression for the compiler, testing the local `value`
- check_argument: load-time validation of the schema-supplied argument

A rule with a falsy switch argument (`isInteger: false`) always passes and
emits nothing.
"""

import math
import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from mycoassert.domain.enums import RuleName
from mycoassert.rules.types import is_number

# (prefix, source expression) -> module-level constant name
ConstantFactory = Callable[[str, str], str]

_SIZED = (str, list, tuple)
_SIZED_SOURCE = "(str, list, tuple)"
_NUMBER_SOURCE = "isinstance(value, (int, float)) and not isinstance(value, bool)"


class RuleDefinition(BaseModel):
    """A named predicate together with its message and emitter."""

    model_config = ConfigDict(frozen=True)

    name: RuleName
    predicate: Callable[[Any, Any], bool]
    detail: Callable[[Any], str]
    emit: Callable[[Any, ConstantFactory], str | None]
    check_argument: Callable[[Any], None]


# =============================================================================
# Argument checks
# =============================================================================


def _require_length(argument: Any) -> None:
    if isinstance(argument, bool) or not isinstance(argument, int) or argument < 0:
        raise ValueError(f"expected a non-negative integer, got {argument!r}")


def _require_number(argument: Any) -> None:
    if not is_number(argument) or not math.isfinite(argument):
        raise ValueError(f"expected a finite number, got {argument!r}")


def _require_string(argument: Any) -> None:
    if not isinstance(argument, str):
        raise ValueError(f"expected a string, got {argument!r}")


def _require_switch(argument: Any) -> None:
    if not isinstance(argument, bool):
        raise ValueError(f"expected true or false, got {argument!r}")


def _require_pattern(argument: Any) -> None:
    _require_string(argument)
    try:
        re.compile(argument)
    except re.error as e:
        raise ValueError(f"invalid regular expression {argument!r}: {e}") from e


def _require_options(argument: Any) -> None:
    if not isinstance(argument, (list, tuple)) or not argument:
        raise ValueError(f"expected a non-empty list of options, got {argument!r}")


# =============================================================================
# Predicates
# =============================================================================


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _matches_option(value: Any, options: Any) -> bool:
    # Same type and equal: True does not match 1, 1 does not match 1.0
    return any(type(value) is type(option) and value == option for option in options)


RULES: dict[RuleName, RuleDefinition] = {
    RuleName.MIN_LENGTH: RuleDefinition(
        name=RuleName.MIN_LENGTH,
        predicate=lambda value, argument: isinstance(value, _SIZED) and len(value) >= argument,
        detail=lambda argument: f"must have a length of at least {argument}",
        emit=lambda argument, constant: (
            f"isinstance(value, {_SIZED_SOURCE}) and len(value) >= {argument!r}"
        ),
        check_argument=_require_length,
    ),
    RuleName.MAX_LENGTH: RuleDefinition(
        name=RuleName.MAX_LENGTH,
        predicate=lambda value, argument: isinstance(value, _SIZED) and len(value) <= argument,
        detail=lambda argument: f"must have a length of at most {argument}",
        emit=lambda argument, constant: (
            f"isinstance(value, {_SIZED_SOURCE}) and len(value) <= {argument!r}"
        ),
        check_argument=_require_length,
    ),
    RuleName.PATTERN: RuleDefinition(
        name=RuleName.PATTERN,
        predicate=lambda value, argument: (
            isinstance(value, str) and re.fullmatch(argument, value) is not None
        ),
        detail=lambda argument: f"must match the pattern '{argument}'",
        emit=lambda argument, constant: (
            f"isinstance(value, str) and "
            f"{constant('_PATTERN', f're.compile({argument!r})')}.fullmatch(value) is not None"
        ),
        check_argument=_require_pattern,
    ),
    RuleName.ENUM: RuleDefinition(
        name=RuleName.ENUM,
        predicate=_matches_option,
        detail=lambda argument: "must be one of: " + ", ".join(str(o) for o in argument),
        emit=lambda argument, constant: (
            "any(type(value) is type(option) and value == option "
            f"for option in {constant('_OPTIONS', repr(tuple(argument)))})"
        ),
        check_argument=_require_options,
    ),
    RuleName.IS_INTEGER: RuleDefinition(
        name=RuleName.IS_INTEGER,
        predicate=lambda value, argument: not argument or _is_integral(value),
        detail=lambda argument: "must be an integer",
        emit=lambda argument, constant: (
            "(isinstance(value, int) and not isinstance(value, bool)) "
            "or (isinstance(value, float) and value.is_integer())"
            if argument
            else None
        ),
        check_argument=_require_switch,
    ),
    RuleName.MINIMUM: RuleDefinition(
        name=RuleName.MINIMUM,
        predicate=lambda value, argument: is_number(value) and value >= argument,
        detail=lambda argument: f"must be greater than or equal to {argument}",
        emit=lambda argument, constant: f"{_NUMBER_SOURCE} and value >= {argument!r}",
        check_argument=_require_number,
    ),
    RuleName.MAXIMUM: RuleDefinition(
        name=RuleName.MAXIMUM,
        predicate=lambda value, argument: is_number(value) and value <= argument,
        detail=lambda argument: f"must be less than or equal to {argument}",
        emit=lambda argument, constant: f"{_NUMBER_SOURCE} and value <= {argument!r}",
        check_argument=_require_number,
    ),
    RuleName.STARTS_WITH: RuleDefinition(
        name=RuleName.STARTS_WITH,
        predicate=lambda value, argument: isinstance(value, str) and value.startswith(argument),
        detail=lambda argument: f"must start with '{argument}'",
        emit=lambda argument, constant: (
            f"isinstance(value, str) and value.startswith({argument!r})"
        ),
        check_argument=_require_string,
    ),
    RuleName.ENDS_WITH: RuleDefinition(
        name=RuleName.ENDS_WITH,
        predicate=lambda value, argument: isinstance(value, str) and value.endswith(argument),
        detail=lambda argument: f"must end with '{argument}'",
        emit=lambda argument, constant: f"isinstance(value, str) and value.endswith({argument!r})",
        check_argument=_require_string,
    ),
}
