"""
Tests for the interpreter entry points.

Behavior shared with generated validators lives in test_unit_equivalence.py;
these tests cover what only the interpreter offers:
- validate/assert_valid/evaluate argument forms
- Unresolved references surfacing at evaluation time
- Transform order on arrays, checked against generated code too
- Concurrent use of shared schemas
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from mycoassert import (
    RuleViolation,
    SchemaValidationError,
    TransformFailed,
    UnresolvedSchemaReference,
    ValidationResult,
    assert_valid,
    compile_registry,
    evaluate,
    load_compiled,
    load_registry,
    load_schema,
    validate,
)
from mycoassert.engine import Evaluator
from tests.schemas import RAW_REGISTRY, VALID_PRODUCT, VALID_USER


class TestEntryPoints:
    """Accepted argument forms."""

    def test_validate_raw_schema_mapping(self):
        """A raw schema mapping is loaded on the fly."""
        result = validate({"id": 1, "extra": 2}, {"id": {"type": "number", "isInteger": True}})
        assert result == {"id": 1}

    def test_validate_schema_name_with_raw_registry(self):
        """A schema name resolves against a raw registry mapping."""
        result = validate(dict(VALID_PRODUCT), "Product", RAW_REGISTRY)
        assert result["seller"] == {"sellerId": 1}

    def test_validate_schema_object(self, registry):
        """A loaded Schema is used directly."""
        schema = registry.resolve("Seller")
        assert validate({"sellerId": "5"}, schema, registry) == {"sellerId": 5}

    def test_validate_verbose_returns_result(self, registry):
        """verbose=True returns a ValidationResult."""
        result = validate({"sellerId": "x"}, "Seller", registry, verbose=True)

        assert isinstance(result, ValidationResult)
        assert result.is_valid is False
        assert result.value == {}

    def test_schema_name_without_registry(self):
        """A schema name cannot resolve without a registry."""
        with pytest.raises(UnresolvedSchemaReference) as exc_info:
            validate({}, "User")

        assert exc_info.value.reference == "User"

    def test_unknown_schema_name(self, registry):
        """Unknown names raise UnresolvedSchemaReference, never a validation error."""
        with pytest.raises(UnresolvedSchemaReference):
            validate({}, "Order", registry)

    def test_nested_reference_without_registry(self):
        """A schema with references evaluated without a registry is a definition error."""
        schema = load_schema("Product", {"seller": "Seller"})

        with pytest.raises(UnresolvedSchemaReference) as exc_info:
            evaluate(schema, {"seller": {}})

        assert exc_info.value.schema_name == "Product"
        assert exc_info.value.property_name == "seller"

    def test_absent_nested_reference_still_resolved(self):
        """An unresolved reference fails even when the data never reaches it."""
        schema = load_schema("Product", {"seller?": "Seller", "id": "number"})

        with pytest.raises(UnresolvedSchemaReference) as exc_info:
            evaluate(schema, {"id": 1})

        assert exc_info.value.schema_name == "Product"
        assert exc_info.value.property_name == "seller"
        assert exc_info.value.reference == "Seller"

    def test_unchecked_registry_rejected_like_compiler(self):
        """An unchecked registry fails the same way in both strategies."""
        registry = load_registry({"Product": {"seller?": "Seller"}}, check_references=False)

        with pytest.raises(UnresolvedSchemaReference):
            validate({}, "Product", registry)
        with pytest.raises(UnresolvedSchemaReference):
            validate({}, "Product", registry, verbose=True)
        with pytest.raises(UnresolvedSchemaReference):
            compile_registry(registry)

    def test_transitive_reference_checked(self):
        """References are followed through other schemas and array items."""
        registry = load_registry(
            {
                "Order": {"lines?": {"type": "array", "items": "Line"}},
                "Line": {"meta?": {"type": "object", "properties": {"tag?": "Tag"}}},
            },
            check_references=False,
        )

        with pytest.raises(UnresolvedSchemaReference) as exc_info:
            validate({}, "Order", registry)

        assert exc_info.value.schema_name == "Line"
        assert exc_info.value.property_name == "meta.tag"
        assert exc_info.value.reference == "Tag"

    def test_cyclic_references_checked_once(self, registry):
        """Cyclic schemas pass the reference check and still evaluate."""
        data = {"name": "tools", "children": [{"name": "hammers"}]}
        assert validate(data, "Category", registry)["children"] == [{"name": "HAMMERS"}]

    def test_assert_valid(self, registry):
        """assert_valid returns sanitized data or raises."""
        assert assert_valid({**VALID_USER, "username": " Bob "}, "User", registry)[
            "username"
        ] == "bob"

        with pytest.raises(SchemaValidationError) as exc_info:
            assert_valid({**VALID_USER, "status": "gone"}, "User", registry)

        assert isinstance(exc_info.value, RuleViolation)
        assert exc_info.value.details == {
            "property": "status",
            "rule": "enum",
            "kind": "RULE_VIOLATION",
        }

    def test_evaluate_non_verbose_valid(self, registry):
        """evaluate returns a result for valid data in either mode."""
        result = evaluate(registry.resolve("Seller"), {"sellerId": 1}, registry)

        assert result.is_valid is True
        assert result.value == {"sellerId": 1}


class TestArrayTransformOrder:
    """Outer transforms apply to the whole array before item transforms."""

    RAW = {
        "Batch": {
            "codes": {
                "type": "array",
                "transform": "toUpperCase",
                "items": {"type": "string", "transform": "toUpperCase", "startsWith": "A"},
            },
            "counts?": {"type": "array", "transform": "toInt", "items": "number"},
        }
    }

    def test_outer_transform_runs_first(self):
        """A failing outer transform is reported before any item is visited."""
        registry = load_registry(self.RAW)
        compiled = load_compiled(compile_registry(registry))
        data = {"codes": ["abc"], "counts": ["1", "x"]}

        for run in (
            lambda: validate(data, "Batch", registry),
            lambda: compiled.validate_batch(data),
        ):
            with pytest.raises(TransformFailed) as exc_info:
                run()
            assert exc_info.value.property == "counts"
            assert exc_info.value.issue.index is None

    def test_item_transforms_run_per_item(self):
        """String transforms leave the array alone and rewrite each item."""
        registry = load_registry(self.RAW)
        compiled = load_compiled(compile_registry(registry))
        data = {"codes": ["abc", "axe"]}

        assert validate(data, "Batch", registry)["codes"] == ["ABC", "AXE"]
        assert compiled.validate_batch(data)["codes"] == ["ABC", "AXE"]


class TestEvaluator:
    """The Evaluator walk object."""

    def test_walk_schema_with_path(self, registry):
        """walk_schema prefixes issue paths with the given path."""
        evaluator = Evaluator(registry=registry, verbose=True)
        _, issues = evaluator.walk_schema(registry.resolve("Seller"), {}, "order.seller")

        assert issues[0].property == "order.seller.sellerId"

    def test_non_verbose_stops_at_first_issue(self, registry):
        """Non-verbose walks collect exactly one issue."""
        evaluator = Evaluator(registry=registry)
        _, issues = evaluator.run(registry.resolve("User"), {})

        assert len(issues) == 1
        assert issues[0].property == "id"

    def test_concurrent_evaluation(self):
        """Shared registries can be evaluated from many threads."""
        registry = load_registry(RAW_REGISTRY)

        def run(index):
            data = {**VALID_USER, "id": index, "username": f"  User{index:03d}  "}
            return validate(data, "User", registry)["username"]

        with ThreadPoolExecutor(max_workers=8) as pool:
            names = list(pool.map(run, range(64)))

        assert names == [f"user{index:03d}" for index in range(64)]
