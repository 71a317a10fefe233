"""
Typed schema model.

These models are produced by mycoassert.schema.loader and consumed by the
interpreter, the compiler and the contract verifier. They never carry raw
key syntax: the optional marker is already folded into `optional`, rule and
transform names are already enum members.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mycoassert.core.errors import UnresolvedSchemaReference
from mycoassert.domain.enums import PrimitiveType, RuleName, TransformName


class RuleRef(BaseModel):
    """A rule applied to a property, with its schema-supplied argument."""

    model_config = ConfigDict(frozen=True)

    name: RuleName
    argument: Any = None


class TransformRef(BaseModel):
    """A transform applied to a property."""

    model_config = ConfigDict(frozen=True)

    name: TransformName


class PropertySchema(BaseModel):
    """
    Schema for one property.

    `nested_schema_ref` names a registry schema; `properties` describes an
    inline nested object (contract namespaces). At most one of them is set.
    `item_schema` is only set for arrays.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    type: PrimitiveType = PrimitiveType.ANY
    optional: bool = False
    transforms: list[TransformRef] = Field(default_factory=list)
    rules: list[RuleRef] = Field(default_factory=list)
    item_schema: PropertySchema | None = None
    nested_schema_ref: str | None = None
    properties: dict[str, PropertySchema] | None = None
    capability: bool = False


class Schema(BaseModel):
    """Ordered mapping of output key -> PropertySchema."""

    model_config = ConfigDict(frozen=True)

    name: str
    properties: dict[str, PropertySchema] = Field(default_factory=dict)

    def required_keys(self) -> list[str]:
        """Keys that must be present in valid data, in declaration order."""
        return [key for key, prop in self.properties.items() if not prop.optional]


class SchemaRegistry(BaseModel):
    """Named schemas used to resolve `nested_schema_ref`."""

    model_config = ConfigDict(frozen=True)

    schemas: dict[str, Schema] = Field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.schemas

    def names(self) -> list[str]:
        return list(self.schemas)

    def resolve(self, reference: str, schema_name: str = "", property_name: str = "") -> Schema:
        """
        Look up a referenced schema.

        Args:
            reference: Name of the referenced schema
            schema_name: Schema holding the reference (for error context)
            property_name: Property holding the reference (for error context)

        Raises:
            UnresolvedSchemaReference: If the name is not registered
        """
        schema = self.schemas.get(reference)
        if schema is None:
            raise UnresolvedSchemaReference(schema_name, property_name, reference)
        return schema

    def check_references(self) -> None:
        """
        Verify that every nested reference in the registry resolves.

        Cyclic references are legal and checked once per schema.

        Raises:
            UnresolvedSchemaReference: On the first reference that does not resolve
        """
        for schema in self.schemas.values():
            for prop in schema.properties.values():
                self._check_property(schema.name, prop.key, prop)

    def check_schema(self, schema: Schema) -> None:
        """
        Verify that every reference reachable from `schema` resolves.

        `schema` need not be registered. Referenced schemas are followed
        transitively, each once.

        Raises:
            UnresolvedSchemaReference: On the first reference that does not resolve
        """
        pending = [schema]
        seen: set[str] = set()
        while pending:
            current = pending.pop(0)
            for prop in current.properties.values():
                for reference in self._check_property(current.name, prop.key, prop):
                    if reference not in seen:
                        seen.add(reference)
                        pending.append(self.schemas[reference])

    def _check_property(
        self, schema_name: str, property_name: str, prop: PropertySchema
    ) -> list[str]:
        """Resolve references held by one property; returns the names found."""
        found = []
        if prop.nested_schema_ref is not None:
            self.resolve(prop.nested_schema_ref, schema_name, property_name)
            found.append(prop.nested_schema_ref)
        if prop.item_schema is not None:
            found.extend(self._check_property(schema_name, property_name, prop.item_schema))
        for child in (prop.properties or {}).values():
            found.extend(
                self._check_property(schema_name, f"{property_name}.{child.key}", child)
            )
        return found


PropertySchema.model_rebuild()
