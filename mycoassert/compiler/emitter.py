"""
Python source emission for compiled validators.

The emitter mirrors mycoassert.engine.interpreter one step at a time, with
every table lookup replaced by the inline source the tables provide:

- a `_walk_<schema>` function per schema, visiting properties in order
- a `_check_<schema>__<property>` function per property (and per array item
  schema), running transforms, the type check, the rules and recursion

Each check function returns `(value, [])` on success and `(None, issues)`
on failure, which keeps "stop at the first failing rule of a property" a
plain `return`.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

from mycoassert.core.errors import UnresolvedSchemaReference
from mycoassert.domain.enums import PrimitiveType
from mycoassert.rules.rules import RULES
from mycoassert.rules.transforms import TRANSFORMS
from mycoassert.rules.types import TYPE_CHECKS
from mycoassert.schema.models import PropertySchema, Schema, SchemaRegistry

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_IDENTIFIER = re.compile(r"\W+")

_TRANSFORM_ERRORS_SOURCE = "(TypeError, ValueError, OverflowError)"


def snake_identifier(name: str) -> str:
    """
    Turn a schema or property name into a snake_case identifier fragment.

    Example:
        >>> snake_identifier("UserProfile")
        'user_profile'
        >>> snake_identifier("order-line")
        'order_line'
    """
    snake = _CAMEL_BOUNDARY.sub("_", name).lower()
    return _NON_IDENTIFIER.sub("_", snake).strip("_") or "schema"


class SourceBuilder:
    """Accumulates indented source lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self._depth = 0

    def line(self, text: str = "") -> None:
        self.lines.append(("    " * self._depth + text) if text else "")

    def extend(self, lines: list[str]) -> None:
        for text in lines:
            self.line(text)

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        self.line(header)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


class ModuleEmitter:
    """
    Emits the private walker and check functions for a set of schemas.

    Constants (compiled patterns, enum option tuples) are hoisted to module
    level and numbered in emission order, so output is deterministic.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry
        self.constants: list[tuple[str, str]] = []
        self.functions: list[list[str]] = []
        self._walkers: dict[str, str] = {}
        self._taken: set[str] = set()

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def _allocate(self, base: str) -> str:
        name = base
        counter = 2
        while name in self._taken:
            name = f"{base}_{counter}"
            counter += 1
        self._taken.add(name)
        return name

    def constant(self, prefix: str, source: str) -> str:
        """Hoist `source` to a module-level constant, reusing identical ones."""
        for name, existing in self.constants:
            if existing == source and name.startswith(prefix):
                return name
        name = f"{prefix}_{len(self.constants)}"
        self.constants.append((name, source))
        return name

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def walker_for(self, schema_name: str) -> str:
        """Name of the walker for a registry schema, emitting it on first use."""
        if schema_name in self._walkers:
            return self._walkers[schema_name]
        schema = self.registry.schemas[schema_name]
        name = self._allocate(f"_walk_{snake_identifier(schema_name)}")
        # Registered before emission so cyclic references terminate
        self._walkers[schema_name] = name
        self._emit_walker(name, schema, snake_identifier(schema_name))
        return name

    def _emit_walker(self, name: str, schema: Schema, stem: str) -> None:
        checks = {
            key: self._emit_check(schema.name, prop, f"{stem}__{snake_identifier(key)}")
            for key, prop in schema.properties.items()
        }

        out = SourceBuilder()
        with out.block(f"def {name}(data, path, verbose):"):
            out.line("output = {}")
            out.line("issues = []")
            for key, prop in schema.properties.items():
                self._emit_property_visit(out, key, prop, checks[key])
            out.line("return output, issues")
        self.functions.append(out.lines)

    def _emit_property_visit(
        self, out: SourceBuilder, key: str, prop: PropertySchema, check: str
    ) -> None:
        key_literal = repr(key)
        path_source = f"_rt.join_path(path, {key_literal})"

        with out.block(f"if {key_literal} in data:"):
            out.line(f"value, found = {check}(data[{key_literal}], {path_source}, verbose)")
            with out.block("if found:"):
                out.line("issues.extend(found)")
                with out.block("if not verbose:"):
                    out.line("return output, issues")
            with out.block("else:"):
                out.line(f"output[{key_literal}] = value")

        if prop.optional:
            return

        with out.block("else:"):
            if prop.capability:
                out.line(f"issues.append(_rt.missing_capability_issue({path_source}))")
            else:
                out.line(f"issues.append(_rt.required_issue({path_source}))")
            with out.block("if not verbose:"):
                out.line("return output, issues")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _emit_check(self, schema_name: str, prop: PropertySchema, stem: str) -> str:
        name = self._allocate(f"_check_{stem}")

        item_check = None
        if prop.type is PrimitiveType.ARRAY and prop.item_schema is not None:
            item_check = self._emit_check(schema_name, prop.item_schema, f"{stem}__item")

        nested_walker = None
        if prop.properties is not None:
            inline = Schema(name=f"{schema_name}.{prop.key}", properties=prop.properties)
            nested_walker = self._allocate(f"_walk_{stem}")
            self._emit_walker(nested_walker, inline, stem)
        elif prop.nested_schema_ref is not None:
            if prop.nested_schema_ref not in self.registry:
                raise UnresolvedSchemaReference(schema_name, prop.key, prop.nested_schema_ref)
            nested_walker = self.walker_for(prop.nested_schema_ref)

        out = SourceBuilder()
        with out.block(f"def {name}(value, path, verbose):"):
            self._emit_transforms(out, prop)
            self._emit_type_check(out, prop)
            self._emit_rules(out, prop)
            if item_check is not None:
                self._emit_items(out, item_check)
            if nested_walker is not None:
                self._emit_nested(out, nested_walker)
            out.line("return value, []")
        self.functions.append(out.lines)
        return name

    def _emit_transforms(self, out: SourceBuilder, prop: PropertySchema) -> None:
        for transform in prop.transforms:
            out.line("original = value")
            with out.block("try:"):
                out.extend(TRANSFORMS[transform.name].emit)
            with out.block(f"except {_TRANSFORM_ERRORS_SOURCE}:"):
                out.line(
                    "return None, "
                    f"[_rt.transform_issue(path, {transform.name.value!r}, original)]"
                )

    def _emit_type_check(self, out: SourceBuilder, prop: PropertySchema) -> None:
        expression = TYPE_CHECKS[prop.type].expression
        if expression is None:
            return
        with out.block(f"if not ({expression}):"):
            if prop.capability:
                out.line("return None, [_rt.capability_issue(path, value)]")
            else:
                out.line(f"return None, [_rt.type_issue(path, {prop.type.value!r}, value)]")

    def _emit_rules(self, out: SourceBuilder, prop: PropertySchema) -> None:
        for rule in prop.rules:
            definition = RULES[rule.name]
            expression = definition.emit(rule.argument, self.constant)
            if expression is None:
                continue
            detail = definition.detail(rule.argument)
            with out.block(f"if not ({expression}):"):
                out.line(
                    "return None, "
                    f"[_rt.rule_issue(path, {rule.name.value!r}, {detail!r}, value)]"
                )

    def _emit_items(self, out: SourceBuilder, item_check: str) -> None:
        out.line("items = []")
        with out.block("for index, item in enumerate(value):"):
            out.line(
                f"item_value, item_issues = {item_check}(item, _rt.item_path(path, index), verbose)"
            )
            with out.block("if item_issues:"):
                out.line("return None, [_rt.item_issue(path, index, item_issues[0])]")
            out.line("items.append(item_value)")
        out.line("value = items")

    def _emit_nested(self, out: SourceBuilder, walker: str) -> None:
        out.line(f"value, nested_issues = {walker}(value, path, verbose)")
        with out.block("if nested_issues:"):
            out.line("return None, [_rt.nested_issue(issue) for issue in nested_issues]")
