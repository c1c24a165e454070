"""
Per-table orchestration of the bean model.

A :class:`BeanDescriptor` resolves, in a fixed order, the class a bean
extends, its properties, its relationship methods and its DAO finders, and
exposes the result to the code renderers.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from dao_auto_generator.domain.conflicts import NameConflictResolver
from dao_auto_generator.domain.finders import FinderMethodDescriptor, IndexFinderBuilder
from dao_auto_generator.domain.methods import (
    DirectForeignKeyMethodDescriptor,
    MethodDescriptor,
    PivotTableMethodsDescriptor,
)
from dao_auto_generator.domain.models import CloneRule, Table
from dao_auto_generator.domain.naming import NamingStrategy
from dao_auto_generator.domain.properties import (
    AbstractBeanPropertyDescriptor,
    ObjectBeanPropertyDescriptor,
)
from dao_auto_generator.domain.property_resolver import PropertyResolver
from dao_auto_generator.domain.schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class DescriptorState(Enum):
    CONSTRUCTED = "constructed"
    PROPERTIES_RESOLVED = "properties_resolved"
    READY = "ready"


class BeanDescriptor:
    """
    The resolved object model of one table.

    Properties are resolved on construction. Relationship methods and
    finders are resolved once, on first access, after which the descriptor
    is READY and every getter returns the same objects.
    """

    def __init__(
        self,
        table: Table,
        analyzer: SchemaAnalyzer,
        naming: Optional[NamingStrategy] = None,
        strict_finders: bool = False,
    ):
        self.state = DescriptorState.CONSTRUCTED
        self.table = table
        self.analyzer = analyzer
        self.naming = naming or NamingStrategy()
        self.strict_finders = strict_finders
        self.conflict_resolver = NameConflictResolver()

        self.parent_relationship = analyzer.get_parent_relationship(table.name)
        resolver = PropertyResolver(analyzer, self.naming, self.conflict_resolver)
        self._properties: Dict[str, AbstractBeanPropertyDescriptor] = resolver.resolve_for_table_with_ancestors(table)
        self.state = DescriptorState.PROPERTIES_RESOLVED

        self._method_descriptors: Optional[List[MethodDescriptor]] = None
        self._finder_descriptors: Optional[List[FinderMethodDescriptor]] = None

    def resolve(self) -> "BeanDescriptor":
        """Resolve relationship methods and finders. Idempotent."""
        if self.state is DescriptorState.READY:
            return self
        self._method_descriptors = self._build_method_descriptors()
        self._finder_descriptors = IndexFinderBuilder(
            self.analyzer, self.naming, strict=self.strict_finders
        ).build(self.table, self.get_exposed_properties_map())
        self.state = DescriptorState.READY
        logger.debug(
            f"Resolved bean '{self.bean_class_name}': {len(self._properties)} properties, "
            f"{len(self._method_descriptors)} relationship methods, {len(self._finder_descriptors)} finders"
        )
        return self

    # -- class names ---------------------------------------------------------

    @property
    def table_name(self) -> str:
        return self.table.name

    @property
    def bean_class_name(self) -> str:
        return self.naming.get_bean_class_name(self.table.name)

    @property
    def base_bean_class_name(self) -> str:
        return self.naming.get_base_bean_class_name(self.table.name)

    @property
    def dao_class_name(self) -> str:
        return self.naming.get_dao_class_name(self.table.name)

    @property
    def base_dao_class_name(self) -> str:
        return self.naming.get_base_dao_class_name(self.table.name)

    def get_extended_bean_class_name(self) -> Optional[str]:
        """Bean class of the parent table, or None when the bean has no parent."""
        if self.parent_relationship is None:
            return None
        return self.naming.get_bean_class_name(self.parent_relationship.foreign_table_name)

    # -- properties ----------------------------------------------------------

    def get_bean_property_descriptors(self) -> List[AbstractBeanPropertyDescriptor]:
        """All properties of the bean, ancestors' first."""
        return list(self._properties.values())

    def get_constructor_properties(self) -> List[AbstractBeanPropertyDescriptor]:
        """Compulsory properties of the bean and its ancestors, ancestors' first."""
        return [descriptor for descriptor in self._properties.values() if descriptor.is_compulsory]

    def get_exposed_properties_map(self) -> Dict[str, AbstractBeanPropertyDescriptor]:
        return {
            name: descriptor
            for name, descriptor in self._properties.items()
            if descriptor.table is self.table
        }

    def get_exposed_properties(self) -> List[AbstractBeanPropertyDescriptor]:
        """Properties declared by the bean's own table (getters and setters are generated for these)."""
        return list(self.get_exposed_properties_map().values())

    def get_properties_with_default(self) -> List[AbstractBeanPropertyDescriptor]:
        return [descriptor for descriptor in self.get_exposed_properties() if descriptor.has_default]

    def get_on_delete_properties(self) -> List[ObjectBeanPropertyDescriptor]:
        """Own object references, nulled out when the bean is deleted."""
        return [
            descriptor for descriptor in self.get_exposed_properties()
            if isinstance(descriptor, ObjectBeanPropertyDescriptor)
        ]

    def get_clone_rules(self) -> List[Tuple[AbstractBeanPropertyDescriptor, CloneRule]]:
        """Copy semantics of each own property; ancestors apply their own rules."""
        return [(descriptor, descriptor.clone_rule) for descriptor in self.get_exposed_properties()]

    @property
    def primary_key_columns(self) -> List[str]:
        return self.analyzer.get_primary_key_columns_or_fail(self.table)

    # -- methods -------------------------------------------------------------

    def _get_direct_foreign_key_descriptors(self) -> List[DirectForeignKeyMethodDescriptor]:
        return [
            DirectForeignKeyMethodDescriptor(fk, self.table, self.naming)
            for fk in self.analyzer.get_incoming_foreign_keys(self.table.name)
        ]

    def _get_pivot_table_descriptors(self) -> List[PivotTableMethodsDescriptor]:
        descriptors = []
        for pivot_table in self.analyzer.detect_junction_tables():
            first, second = pivot_table.foreign_keys
            first_matches = first.foreign_table_name == self.table.name
            second_matches = second.foreign_table_name == self.table.name
            if first_matches == second_matches:
                continue
            local_fk, remote_fk = (first, second) if first_matches else (second, first)
            descriptors.append(PivotTableMethodsDescriptor(pivot_table, local_fk, remote_fk, self.naming))
        return descriptors

    def _build_method_descriptors(self) -> List[MethodDescriptor]:
        descriptors: List[MethodDescriptor] = []
        descriptors.extend(self._get_direct_foreign_key_descriptors())
        descriptors.extend(self._get_pivot_table_descriptors())
        self.conflict_resolver.resolve_methods(self.table.name, descriptors)
        return descriptors

    def get_method_descriptors(self) -> List[MethodDescriptor]:
        self.resolve()
        return list(self._method_descriptors)

    def get_finder_method_descriptors(self) -> List[FinderMethodDescriptor]:
        self.resolve()
        return list(self._finder_descriptors)

    # -- emission helpers ----------------------------------------------------

    def get_used_classes(self) -> List[str]:
        """Bean class names the base bean module references, without duplicates."""
        classes = []
        extended = self.get_extended_bean_class_name()
        if extended:
            classes.append(extended)
        for descriptor in self._properties.values():
            if descriptor.class_name:
                classes.append(descriptor.class_name)
        for method in self.get_method_descriptors():
            classes.extend(method.used_classes)

        unique = []
        for class_name in classes:
            if class_name not in unique:
                unique.append(class_name)
        return unique

    def get_used_tables(self) -> List[str]:
        """Tables the bean is stored in, from the root ancestor to this table."""
        return [table.name for table in self.analyzer.get_inheritance_chain(self.table.name)]

    def __repr__(self) -> str:
        return f"BeanDescriptor({self.table.name!r}, state={self.state.value})"
