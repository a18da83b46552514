"""
Type registry: per-entity field contracts derived from the built schema.

For every entity type the registry lists, in declaration order, each field's
named type, nullability and kind. Relation fields (``reference`` and ``list``)
must be backed by an explicit resolver on the strawberry type; scalar and enum
fields must be plain attributes. ``check_resolvers`` enforces both.
"""

from dataclasses import dataclass
from enum import Enum

import strawberry
from graphql import (
    GraphQLObjectType,
    GraphQLOutputType,
    get_named_type,
    get_nullable_type,
    is_enum_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
)

from .types.course import Course
from .types.department import Department
from .types.student import Student
from .types.teacher import Teacher

ENTITY_TYPES: tuple[type, ...] = (Student, Department, Teacher, Course)


class FieldKind(Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    REFERENCE = "reference"
    LIST = "list"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type_name: str
    nullable: bool
    kind: FieldKind

    @property
    def is_relation(self) -> bool:
        return self.kind in (FieldKind.REFERENCE, FieldKind.LIST)


def field_spec(name: str, field_type: GraphQLOutputType) -> FieldSpec:
    nullable = not is_non_null_type(field_type)
    inner = get_nullable_type(field_type)
    named = get_named_type(field_type)

    if is_list_type(inner):
        kind = FieldKind.LIST
    elif is_object_type(named):
        kind = FieldKind.REFERENCE
    elif is_enum_type(named):
        kind = FieldKind.ENUM
    else:
        kind = FieldKind.SCALAR

    return FieldSpec(name=name, type_name=named.name, nullable=nullable, kind=kind)


def describe_type(schema: strawberry.Schema, type_name: str) -> dict[str, FieldSpec]:
    """Ordered mapping of field name to FieldSpec for one object type."""
    graphql_type = schema._schema.get_type(type_name)
    if not isinstance(graphql_type, GraphQLObjectType):
        raise KeyError(f"{type_name} is not an object type of this schema")
    return {name: field_spec(name, field.type) for name, field in graphql_type.fields.items()}


def build_registry(schema: strawberry.Schema) -> dict[str, dict[str, FieldSpec]]:
    return {cls.__name__: describe_type(schema, cls.__name__) for cls in ENTITY_TYPES}


def check_resolvers(schema: strawberry.Schema) -> list[str]:
    """Return a description of every field whose resolver does not match its kind."""
    problems = []
    registry = build_registry(schema)
    name_converter = schema.config.name_converter

    for cls in ENTITY_TYPES:
        definition = cls.__strawberry_definition__
        resolvers = {
            name_converter.get_graphql_name(field): field.base_resolver
            for field in definition.fields
        }
        for name, spec in registry[cls.__name__].items():
            has_resolver = resolvers.get(name) is not None
            if spec.is_relation and not has_resolver:
                problems.append(f"{cls.__name__}.{name} is a relation without a resolver")
            elif not spec.is_relation and has_resolver:
                problems.append(f"{cls.__name__}.{name} is a scalar with a custom resolver")

    return problems
