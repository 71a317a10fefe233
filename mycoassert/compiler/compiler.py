"""
Static compiler for mycoassert schemas.

Compiles a schema registry into Python source defining one standalone
validator per requested schema. The generated functions perform the same
walk as the interpreter, with transforms, type checks and rules unrolled
into inline code, so nothing is looked up in the rule or transform tables at
call time.

Generated validators share one contract with mycoassert.engine.validate:

    validate_user(data)                -> sanitized data, or raises
    validate_user(data, verbose=True)  -> ValidationResult

Compilation is deterministic: the same registry always yields the same
source, and the module header records a digest of the schemas compiled.
"""

import logging
import time
import types
from collections.abc import Iterable

from mycoassert.compiler.canonicalizer import schema_digest
from mycoassert.compiler.emitter import ModuleEmitter, SourceBuilder, snake_identifier
from mycoassert.core.config import settings
from mycoassert.core.errors import CompilationError, UnresolvedSchemaReference
from mycoassert.core.observability import metrics
from mycoassert.schema.models import PropertySchema, SchemaRegistry

logger = logging.getLogger(__name__)

GENERATED_MODULE_NAME = "mycoassert_generated"


def compile_registry(
    registry: SchemaRegistry,
    schema_names: Iterable[str] | None = None,
    validator_prefix: str | None = None,
) -> str:
    """
    Compile a schema registry into validator source.

    This is the main entry point for compilation. It:
    1. Resolves the requested top-level schema names
    2. Collects every schema reachable through nested references
    3. Verifies all references resolve (fatal otherwise)
    4. Emits walker and check functions
    5. Emits one public validator per requested schema plus a VALIDATORS map

    Args:
        registry: Loaded schema registry
        schema_names: Schemas that get a public validator (default: all)
        validator_prefix: Public function name prefix (default from settings)

    Returns:
        Python module source text

    Raises:
        CompilationError: If a requested schema is unknown or names collide
        UnresolvedSchemaReference: If a nested reference cannot be resolved

    Example Output (abridged):
        def validate_seller(data, verbose=False):
            if not isinstance(data, Mapping):
                value, issues = None, [_rt.type_issue('', 'object', data)]
            else:
                value, issues = _walk_seller(data, '', verbose)
            result = _rt.finish(value, issues, verbose)
            return result if verbose else result.value
    """
    start_time = time.time()
    prefix = validator_prefix if validator_prefix is not None else settings.validator_prefix
    requested = list(schema_names) if schema_names is not None else registry.names()
    logger.info("Starting compilation of %d schema(s)", len(requested))

    try:
        _verify_requested(registry, requested)
        reachable = _collect_reachable(registry, requested)

        emitter = ModuleEmitter(registry)
        walkers = {name: emitter.walker_for(name) for name in requested}
        public_names = _public_names(requested, prefix)

        source = _render_module(registry, emitter, reachable, walkers, public_names)

        duration = time.time() - start_time
        source_bytes = len(source.encode("utf-8"))
        logger.info(
            "Compiled %d validator(s) from %d schema(s): duration=%.3fs, size=%d bytes",
            len(requested),
            len(reachable),
            duration,
            source_bytes,
        )
        _record_compiler_metrics("success", duration, len(requested), source_bytes)
        return source

    except Exception:
        _record_compiler_metrics("error", time.time() - start_time, 0, 0)
        raise


def load_compiled(source: str, module_name: str = GENERATED_MODULE_NAME) -> types.ModuleType:
    """
    Execute generated source into a fresh module.

    The module is not registered in sys.modules.

    Args:
        source: Output of compile_registry
        module_name: Name given to the module object

    Returns:
        Module exposing the validators and a VALIDATORS mapping

    Raises:
        CompilationError: If the source does not compile or execute
    """
    module = types.ModuleType(module_name)
    try:
        code = compile(source, f"<{module_name}>", "exec")
        exec(code, module.__dict__)
    except (SyntaxError, ImportError, NameError) as e:
        raise CompilationError(
            f"Generated source failed to load: {e}", details={"module": module_name}
        ) from e
    return module


def _record_compiler_metrics(
    status: str, duration: float, validator_count: int, source_bytes: int
) -> None:
    """
    Record compiler metrics to Prometheus.

    Args:
        status: "success" or "error"
        duration: Compilation duration in seconds
        validator_count: Number of public validators emitted
        source_bytes: Size of generated source in bytes
    """
    if not settings.metrics_enabled:
        return

    metrics.compiler_compilations_total.labels(status=status).inc()
    metrics.compiler_duration_seconds.observe(duration)

    if status == "success":
        metrics.compiler_validators_count.observe(validator_count)
        metrics.compiler_source_bytes.observe(source_bytes)


def _verify_requested(registry: SchemaRegistry, requested: list[str]) -> None:
    unknown = [name for name in requested if name not in registry]
    if unknown:
        raise CompilationError(
            "Cannot compile unknown schema(s): " + ", ".join(unknown),
            details={"unknown": unknown, "available": registry.names()},
        )


def _collect_reachable(registry: SchemaRegistry, requested: list[str]) -> list[str]:
    """
    Collect requested schemas and everything they reference, in discovery order.

    Raises:
        UnresolvedSchemaReference: On the first reference that does not resolve
    """
    reachable: list[str] = []
    pending = list(requested)
    while pending:
        name = pending.pop(0)
        if name in reachable:
            continue
        reachable.append(name)
        schema = registry.schemas[name]
        for prop in schema.properties.values():
            pending.extend(_references(registry, name, prop.key, prop))
    return reachable


def _references(
    registry: SchemaRegistry, schema_name: str, property_name: str, prop: PropertySchema
) -> list[str]:
    found = []
    if prop.nested_schema_ref is not None:
        if prop.nested_schema_ref not in registry:
            raise UnresolvedSchemaReference(schema_name, property_name, prop.nested_schema_ref)
        found.append(prop.nested_schema_ref)
    if prop.item_schema is not None:
        found.extend(_references(registry, schema_name, property_name, prop.item_schema))
    for child in (prop.properties or {}).values():
        found.extend(_references(registry, schema_name, f"{property_name}.{child.key}", child))
    return found


def _public_names(requested: list[str], prefix: str) -> dict[str, str]:
    public: dict[str, str] = {}
    for name in requested:
        function_name = prefix + snake_identifier(name)
        clash = next((other for other, fn in public.items() if fn == function_name), None)
        if clash is not None:
            raise CompilationError(
                f"Schemas '{clash}' and '{name}' both compile to '{function_name}'",
                details={"schemas": [clash, name], "function": function_name},
            )
        public[name] = function_name
    return public


def _render_module(
    registry: SchemaRegistry,
    emitter: ModuleEmitter,
    reachable: list[str],
    walkers: dict[str, str],
    public_names: dict[str, str],
) -> str:
    digest = schema_digest(
        {name: registry.schemas[name].model_dump(mode="json") for name in reachable}
    )

    out = SourceBuilder()
    out.line('"""')
    out.line("Validators generated by mycoassert. Do not edit.")
    out.line()
    out.line("Schemas: " + ", ".join(public_names))
    out.line(f"Digest: {digest}")
    out.line('"""')
    out.line()
    out.line("import re")
    out.line("from collections.abc import Mapping")
    out.line()
    out.line("from mycoassert.engine import runtime as _rt")
    out.line()

    if emitter.constants:
        for name, source in emitter.constants:
            out.line(f"{name} = {source}")
        out.line()

    for function_lines in emitter.functions:
        out.line()
        out.extend(function_lines)
        out.line()

    for schema_name, function_name in public_names.items():
        out.line()
        with out.block(f"def {function_name}(data, verbose=False):"):
            out.line(f'"""Validate and sanitize data against schema {schema_name!r}."""')
            with out.block("if not isinstance(data, Mapping):"):
                out.line("value, issues = None, [_rt.type_issue('', 'object', data)]")
            with out.block("else:"):
                out.line(f"value, issues = {walkers[schema_name]}(data, '', verbose)")
            out.line("result = _rt.finish(value, issues, verbose)")
            out.line("return result if verbose else result.value")
        out.line()

    out.line()
    with out.block("VALIDATORS = {"):
        for schema_name, function_name in public_names.items():
            out.line(f"{schema_name!r}: {function_name},")
    out.line("}")
    out.line()
    out.line("__all__ = [" + ", ".join(repr(fn) for fn in public_names.values()) + "]")

    return out.render()
