"""
Resolution of the bean properties of a table.
"""

from collections import OrderedDict
from typing import Dict, List, Optional

from dao_auto_generator.domain.conflicts import NameConflictResolver
from dao_auto_generator.domain.models import ForeignKeyConstraint, Table
from dao_auto_generator.domain.naming import NamingStrategy
from dao_auto_generator.domain.properties import (
    AbstractBeanPropertyDescriptor,
    ObjectBeanPropertyDescriptor,
    ScalarBeanPropertyDescriptor,
)
from dao_auto_generator.domain.schema_analyzer import SchemaAnalyzer


def find_foreign_key(table: Table, column_name: str) -> Optional[ForeignKeyConstraint]:
    """Return the first foreign key of the table containing the column, or None."""
    for fk in table.foreign_keys:
        if column_name in fk.local_columns:
            return fk
    return None


class PropertyResolver:
    """
    Classifies the columns of a table into scalar and object properties.

    The columns of the inheritance link are skipped and a composite foreign
    key yields a single object property.
    """

    def __init__(
        self,
        analyzer: SchemaAnalyzer,
        naming: NamingStrategy,
        conflict_resolver: Optional[NameConflictResolver] = None,
    ):
        self.analyzer = analyzer
        self.naming = naming
        self.conflict_resolver = conflict_resolver or NameConflictResolver()

    def resolve_for_table(self, table: Table) -> "OrderedDict[str, AbstractBeanPropertyDescriptor]":
        """
        Resolve the properties of one table, ignoring its ancestors.

        Returns:
            Properties keyed by variable name, in column declaration order
        """
        parent_fk = self.analyzer.get_parent_relationship(table.name)
        ignored_columns = set(parent_fk.local_columns) if parent_fk else set()

        descriptors: List[AbstractBeanPropertyDescriptor] = []
        seen_foreign_keys: List[ForeignKeyConstraint] = []
        for column in table.columns:
            if column.name in ignored_columns:
                continue

            fk = find_foreign_key(table, column.name)
            if fk is None:
                descriptors.append(ScalarBeanPropertyDescriptor(table, column, self.naming))
                continue

            if any(fk is seen for seen in seen_foreign_keys) or fk is parent_fk:
                continue
            seen_foreign_keys.append(fk)
            descriptors.append(ObjectBeanPropertyDescriptor(table, fk, self.naming))

        self.conflict_resolver.resolve_properties(table.name, descriptors)

        return OrderedDict((descriptor.variable_name, descriptor) for descriptor in descriptors)

    def resolve_for_table_with_ancestors(
        self, table: Table
    ) -> "OrderedDict[str, AbstractBeanPropertyDescriptor]":
        """
        Resolve the properties of a table and of all its ancestors.

        Ancestor properties come first. A table never overrides a primary key
        property of an ancestor, and its own primary key properties are
        never overlaid.

        Raises:
            SchemaIntegrityError: If a table of the chain has no primary key
        """
        properties: Dict[str, AbstractBeanPropertyDescriptor] = OrderedDict()
        for chain_table in self.analyzer.get_inheritance_chain(table.name):
            self.analyzer.get_primary_key_columns_or_fail(chain_table)
            local_properties = self.resolve_for_table(chain_table)
            if not properties:
                properties = local_properties
                continue
            for name, descriptor in local_properties.items():
                if descriptor.is_primary_key:
                    continue
                existing = properties.get(name)
                if existing is not None and existing.is_primary_key:
                    continue
                properties[name] = descriptor
        return properties
