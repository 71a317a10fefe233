from mycoassert.schema.loader import load_contract, load_registry, load_registry_json, load_schema
from mycoassert.schema.models import PropertySchema, RuleRef, Schema, SchemaRegistry, TransformRef

__all__ = [
    "PropertySchema",
    "RuleRef",
    "Schema",
    "SchemaRegistry",
    "TransformRef",
    "load_contract",
    "load_registry",
    "load_registry_json",
    "load_schema",
]
