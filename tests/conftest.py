"""
Pytest configuration and shared fixtures.

Provides:
- registry fixtures built from tests.schemas.RAW_REGISTRY
- compiled_module: the generated validators for that registry
- run_validator: one callable per execution strategy, so behavioral tests
  run unchanged against the interpreter and the generated code
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Add package root to path for imports when running without an install
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mycoassert.compiler import compile_registry, load_compiled  # noqa: E402
from mycoassert.engine import validate  # noqa: E402
from mycoassert.schema import SchemaRegistry, load_registry  # noqa: E402
from tests.schemas import RAW_REGISTRY  # noqa: E402

Validator = Callable[..., Any]


@pytest.fixture(scope="session")
def registry() -> SchemaRegistry:
    return load_registry(RAW_REGISTRY)


@pytest.fixture(scope="session")
def compiled_source(registry: SchemaRegistry) -> str:
    return compile_registry(registry)


@pytest.fixture(scope="session")
def compiled_module(compiled_source: str) -> ModuleType:
    return load_compiled(compiled_source)


@pytest.fixture(params=["interpreter", "compiled"])
def strategy(request: pytest.FixtureRequest) -> str:
    return request.param


@pytest.fixture
def run_validator(
    strategy: str, registry: SchemaRegistry, compiled_module: ModuleType
) -> Callable[[str], Validator]:
    """
    Return a factory: schema name -> validator(data, verbose=False).

    Both strategies share the generated-validator calling convention.
    """

    def factory(schema_name: str) -> Validator:
        if strategy == "compiled":
            return compiled_module.VALIDATORS[schema_name]

        def interpreted(data: Any, verbose: bool = False) -> Any:
            return validate(data, schema_name, registry, verbose=verbose)

        return interpreted

    return factory
