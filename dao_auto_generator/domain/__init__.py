"""
Domain module for DAO Auto Generator.

This module contains the schema-to-object-model resolution engine, separated
from introspection and code rendering. It turns a :class:`Schema` snapshot
into one :class:`BeanDescriptor` per table.
"""

from .models import (
    Column,
    ForeignKeyConstraint,
    Index,
    Table,
    Schema,
    FieldType,
    CloneRule
)

from .naming import (
    NamingStrategy,
    to_snake_case,
    to_pascal_case,
    clean_field_name,
    singularize,
    pluralize,
    validate_python_identifier
)

from .schema_analyzer import SchemaAnalyzer

from .properties import (
    AbstractBeanPropertyDescriptor,
    ScalarBeanPropertyDescriptor,
    ObjectBeanPropertyDescriptor,
    CURRENT_TIMESTAMP
)

from .methods import (
    MethodDescriptor,
    DirectForeignKeyMethodDescriptor,
    PivotTableMethodsDescriptor
)

from .conflicts import NameConflictResolver

from .property_resolver import PropertyResolver, find_foreign_key

from .finders import (
    IndexFinderBuilder,
    FinderMethodDescriptor,
    FinderParameter,
    FilterBinding,
    remove_duplicate_indexes
)

from .bean_descriptor import BeanDescriptor, DescriptorState

__all__ = [
    # Schema models
    'Column',
    'ForeignKeyConstraint',
    'Index',
    'Table',
    'Schema',
    'FieldType',
    'CloneRule',

    # Naming
    'NamingStrategy',
    'to_snake_case',
    'to_pascal_case',
    'clean_field_name',
    'singularize',
    'pluralize',
    'validate_python_identifier',

    # Analysis and resolution
    'SchemaAnalyzer',
    'AbstractBeanPropertyDescriptor',
    'ScalarBeanPropertyDescriptor',
    'ObjectBeanPropertyDescriptor',
    'CURRENT_TIMESTAMP',
    'MethodDescriptor',
    'DirectForeignKeyMethodDescriptor',
    'PivotTableMethodsDescriptor',
    'NameConflictResolver',
    'PropertyResolver',
    'find_foreign_key',
    'IndexFinderBuilder',
    'FinderMethodDescriptor',
    'FinderParameter',
    'FilterBinding',
    'remove_duplicate_indexes',
    'BeanDescriptor',
    'DescriptorState'
]
