"""
Tests for the rule, transform and type tables.

These tests verify:
- Each rule predicate, including boundary values
- Emitted rule expressions agree with the predicates
- Transform behavior and failure signalling
- Type predicates and type names used in messages
"""

import re
from collections.abc import Mapping
from typing import Any

import pytest

from mycoassert.domain.enums import PrimitiveType, RuleName, TransformName
from mycoassert.rules import RULES, TRANSFORM_ERRORS, TRANSFORMS, TYPE_CHECKS, type_name


def _emitted_rule(name: RuleName, argument: Any):
    """Compile a rule's emitted expression into a callable over `value`."""
    namespace: dict[str, Any] = {"re": re}

    def constant(prefix: str, source: str) -> str:
        const_name = f"{prefix}_{len(namespace)}"
        namespace[const_name] = eval(source, {"re": re})
        return const_name

    expression = RULES[name].emit(argument, constant)
    if expression is None:
        return None
    code = compile(expression, "<rule>", "eval")
    return lambda value: eval(code, {**namespace, "value": value})


def _emitted_transform(name: TransformName):
    """Compile a transform's emitted statements into a callable."""
    body = "\n".join("    " + line for line in TRANSFORMS[name].emit)
    namespace: dict[str, Any] = {}
    exec(f"def run(value):\n{body}\n    return value\n", namespace)
    return namespace["run"]


# =============================================================================
# Rule Predicates
# =============================================================================


RULE_CASES = [
    (RuleName.MIN_LENGTH, 3, "abc", True),
    (RuleName.MIN_LENGTH, 3, "ab", False),
    (RuleName.MIN_LENGTH, 1, [], False),
    (RuleName.MIN_LENGTH, 1, ("a",), True),
    (RuleName.MIN_LENGTH, 0, 5, False),
    (RuleName.MAX_LENGTH, 2, "ab", True),
    (RuleName.MAX_LENGTH, 2, "abc", False),
    (RuleName.MAX_LENGTH, 2, [1, 2, 3], False),
    (RuleName.PATTERN, r"\d+", "123", True),
    (RuleName.PATTERN, r"\d+", "123a", False),
    (RuleName.PATTERN, r"\d+", 123, False),
    (RuleName.ENUM, ["a", "b"], "a", True),
    (RuleName.ENUM, ["a", "b"], "c", False),
    (RuleName.ENUM, [1, 2], True, False),
    (RuleName.ENUM, [1, 2], 1.0, False),
    (RuleName.ENUM, [None, "x"], None, True),
    (RuleName.IS_INTEGER, True, 4, True),
    (RuleName.IS_INTEGER, True, 4.0, True),
    (RuleName.IS_INTEGER, True, 4.5, False),
    (RuleName.IS_INTEGER, True, True, False),
    (RuleName.IS_INTEGER, True, "4", False),
    (RuleName.MINIMUM, 0, 0, True),
    (RuleName.MINIMUM, 0, -0.5, False),
    (RuleName.MINIMUM, 0, "1", False),
    (RuleName.MAXIMUM, 10.5, 10.5, True),
    (RuleName.MAXIMUM, 10.5, 11, False),
    (RuleName.MAXIMUM, 10, False, False),
    (RuleName.STARTS_WITH, "prod_", "prod_1", True),
    (RuleName.STARTS_WITH, "prod_", "item_1", False),
    (RuleName.STARTS_WITH, "prod_", ["prod_"], False),
    (RuleName.ENDS_WITH, ".com", "x.com", True),
    (RuleName.ENDS_WITH, ".com", "x.org", False),
]


class TestRulePredicates:
    """Interpreter-side rule predicates."""

    @pytest.mark.parametrize(("name", "argument", "value", "expected"), RULE_CASES)
    def test_predicate(self, name, argument, value, expected):
        """Each predicate accepts and rejects the expected values."""
        assert RULES[name].predicate(value, argument) is expected

    @pytest.mark.parametrize(("name", "argument", "value", "expected"), RULE_CASES)
    def test_emitted_expression_agrees(self, name, argument, value, expected):
        """The inline expression used by generated code gives the same answer."""
        emitted = _emitted_rule(name, argument)
        assert bool(emitted(value)) is expected

    def test_is_integer_false_always_passes(self):
        """isInteger: false is a no-op and emits nothing."""
        assert RULES[RuleName.IS_INTEGER].predicate(1.5, False) is True
        assert _emitted_rule(RuleName.IS_INTEGER, False) is None

    def test_every_rule_has_an_entry(self):
        """The table covers every rule name."""
        assert set(RULES) == set(RuleName)

    @pytest.mark.parametrize(
        ("name", "argument", "detail"),
        [
            (RuleName.MIN_LENGTH, 3, "must have a length of at least 3"),
            (RuleName.MAX_LENGTH, 20, "must have a length of at most 20"),
            (RuleName.PATTERN, "^a$", "must match the pattern '^a$'"),
            (RuleName.ENUM, ["active", "inactive"], "must be one of: active, inactive"),
            (RuleName.IS_INTEGER, True, "must be an integer"),
            (RuleName.MINIMUM, 0, "must be greater than or equal to 0"),
            (RuleName.MAXIMUM, 100000, "must be less than or equal to 100000"),
            (RuleName.STARTS_WITH, "class-", "must start with 'class-'"),
            (RuleName.ENDS_WITH, "S", "must end with 'S'"),
        ],
    )
    def test_detail(self, name, argument, detail):
        """Message fragments name the rule argument."""
        assert RULES[name].detail(argument) == detail


class TestRuleArguments:
    """Load-time argument checks."""

    @pytest.mark.parametrize(
        ("name", "argument"),
        [
            (RuleName.MIN_LENGTH, -1),
            (RuleName.MIN_LENGTH, "3"),
            (RuleName.MAX_LENGTH, True),
            (RuleName.PATTERN, "("),
            (RuleName.PATTERN, 5),
            (RuleName.ENUM, []),
            (RuleName.ENUM, "abc"),
            (RuleName.IS_INTEGER, "yes"),
            (RuleName.MINIMUM, float("inf")),
            (RuleName.MAXIMUM, "10"),
            (RuleName.STARTS_WITH, 1),
        ],
    )
    def test_invalid_argument(self, name, argument):
        """Arguments of the wrong shape raise ValueError."""
        with pytest.raises(ValueError):
            RULES[name].check_argument(argument)

    @pytest.mark.parametrize(
        ("name", "argument"),
        [
            (RuleName.MIN_LENGTH, 0),
            (RuleName.PATTERN, r"[a-z]+"),
            (RuleName.ENUM, ("a",)),
            (RuleName.IS_INTEGER, False),
            (RuleName.MINIMUM, -2.5),
            (RuleName.ENDS_WITH, ""),
        ],
    )
    def test_valid_argument(self, name, argument):
        """Well-formed arguments pass silently."""
        RULES[name].check_argument(argument)


# =============================================================================
# Transforms
# =============================================================================


TRANSFORM_CASES = [
    (TransformName.TRIM, "  a b  ", "a b"),
    (TransformName.TRIM, 5, 5),
    (TransformName.TO_LOWER_CASE, "AbC", "abc"),
    (TransformName.TO_LOWER_CASE, None, None),
    (TransformName.TO_UPPER_CASE, "AbC", "ABC"),
    (TransformName.TO_UPPER_CASE, ["a"], ["a"]),
    (TransformName.TO_INT, "123", 123),
    (TransformName.TO_INT, " -7 ", -7),
    (TransformName.TO_INT, 9.7, 9),
    (TransformName.TO_INT, 12, 12),
    (TransformName.TO_FLOAT, "1.5", 1.5),
    (TransformName.TO_FLOAT, 2, 2.0),
]

TRANSFORM_FAILURES = [
    (TransformName.TO_INT, "abc"),
    (TransformName.TO_INT, "1.5"),
    (TransformName.TO_INT, ""),
    (TransformName.TO_INT, True),
    (TransformName.TO_INT, None),
    (TransformName.TO_INT, float("inf")),
    (TransformName.TO_INT, float("nan")),
    (TransformName.TO_FLOAT, "one"),
    (TransformName.TO_FLOAT, [1]),
    (TransformName.TO_FLOAT, False),
]


class TestTransforms:
    """Transform table behavior."""

    @pytest.mark.parametrize(("name", "value", "expected"), TRANSFORM_CASES)
    def test_apply(self, name, value, expected):
        """Transforms rewrite values as documented."""
        assert TRANSFORMS[name].apply(value) == expected

    @pytest.mark.parametrize(("name", "value", "expected"), TRANSFORM_CASES)
    def test_emitted_statements_agree(self, name, value, expected):
        """The inline statements used by generated code give the same result."""
        assert _emitted_transform(name)(value) == expected

    @pytest.mark.parametrize(("name", "value"), TRANSFORM_FAILURES)
    def test_failure_raises_transform_error(self, name, value):
        """Unconvertible values raise one of TRANSFORM_ERRORS in both forms."""
        with pytest.raises(TRANSFORM_ERRORS):
            TRANSFORMS[name].apply(value)
        with pytest.raises(TRANSFORM_ERRORS):
            _emitted_transform(name)(value)

    @pytest.mark.parametrize("name", list(TransformName))
    def test_idempotent(self, name):
        """Applying a transform to its own output changes nothing."""
        transform = TRANSFORMS[name].apply
        value = transform(" 42 ")
        assert transform(value) == value

    def test_every_transform_has_an_entry(self):
        """The table covers every transform name."""
        assert set(TRANSFORMS) == set(TransformName)


# =============================================================================
# Types
# =============================================================================


class _Namespace(Mapping):
    def __init__(self, **members):
        self._members = members

    def __getitem__(self, key):
        return self._members[key]

    def __iter__(self):
        return iter(self._members)

    def __len__(self):
        return len(self._members)


class TestTypes:
    """Type predicates, emitted type expressions and type names."""

    @pytest.mark.parametrize(
        ("prop_type", "value", "expected"),
        [
            (PrimitiveType.STRING, "x", True),
            (PrimitiveType.STRING, b"x", False),
            (PrimitiveType.NUMBER, 1, True),
            (PrimitiveType.NUMBER, 1.5, True),
            (PrimitiveType.NUMBER, True, False),
            (PrimitiveType.NUMBER, "1", False),
            (PrimitiveType.BOOLEAN, False, True),
            (PrimitiveType.BOOLEAN, 0, False),
            (PrimitiveType.ARRAY, [], True),
            (PrimitiveType.ARRAY, (), True),
            (PrimitiveType.ARRAY, "abc", False),
            (PrimitiveType.OBJECT, {}, True),
            (PrimitiveType.OBJECT, _Namespace(a=1), True),
            (PrimitiveType.OBJECT, [], False),
            (PrimitiveType.OBJECT, None, False),
            (PrimitiveType.FUNCTION, len, True),
            (PrimitiveType.FUNCTION, "len", False),
            (PrimitiveType.ANY, None, True),
        ],
    )
    def test_predicate_and_expression(self, prop_type, value, expected):
        """Predicates and emitted expressions agree."""
        check = TYPE_CHECKS[prop_type]
        assert check.predicate(value) is expected
        if check.expression is not None:
            namespace = {"Mapping": Mapping, "value": value}
            assert bool(eval(check.expression, namespace)) is expected

    def test_any_emits_no_check(self):
        """`any` has no emitted expression."""
        assert TYPE_CHECKS[PrimitiveType.ANY].expression is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "null"),
            (True, "boolean"),
            (3, "number"),
            (2.5, "number"),
            ("s", "string"),
            ([1], "array"),
            ((1,), "array"),
            ({"a": 1}, "object"),
            (print, "function"),
            (b"raw", "bytes"),
        ],
    )
    def test_type_name(self, value, expected):
        """type_name uses schema vocabulary."""
        assert type_name(value) == expected
