"""
Finder methods derived from table indexes.

Every non-primary index yields one ``find_by_...`` DAO method, except for
indexes covering exactly one foreign key: those are already reachable
through relationship navigation.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dao_auto_generator.domain.models import Index, Table
from dao_auto_generator.domain.naming import NamingStrategy
from dao_auto_generator.domain.properties import (
    AbstractBeanPropertyDescriptor,
    ObjectBeanPropertyDescriptor,
    ScalarBeanPropertyDescriptor,
)
from dao_auto_generator.domain.property_resolver import find_foreign_key
from dao_auto_generator.domain.schema_analyzer import SchemaAnalyzer
from dao_auto_generator.exceptions import NamingConflictError, UnsupportedSchemaShapeError

logger = logging.getLogger(__name__)


@dataclass
class FinderParameter:
    """One argument of a finder method."""

    name: str
    python_type: str
    required: bool
    class_name: Optional[str] = None

    @property
    def is_object(self) -> bool:
        return self.class_name is not None


@dataclass
class FilterBinding:
    """
    One entry of the finder filter.

    ``getter`` is None for scalar parameters; for object parameters it names
    the getter of the referenced bean returning the value of the column.
    """

    column: str
    parameter: str
    required: bool
    getter: Optional[str] = None


@dataclass
class FinderMethodDescriptor:
    """A DAO finder method built from one index."""

    name: str
    index_name: str
    is_unique: bool
    parameters: List[FinderParameter] = field(default_factory=list)
    bindings: List[FilterBinding] = field(default_factory=list)

    @property
    def used_classes(self) -> List[str]:
        classes = []
        for parameter in self.parameters:
            if parameter.class_name and parameter.class_name not in classes:
                classes.append(parameter.class_name)
        return classes


def remove_duplicate_indexes(indexes: List[Index]) -> List[Index]:
    """
    Merge indexes covering the same ordered columns.

    The merged index keeps the name and position of the first one and is
    primary (or unique) when any of the merged indexes is.
    """
    merged: Dict[tuple, Index] = OrderedDict()
    for index in indexes:
        key = tuple(index.columns)
        if key not in merged:
            merged[key] = Index(
                name=index.name,
                columns=list(index.columns),
                is_unique=index.is_unique,
                is_primary=index.is_primary,
            )
            continue
        existing = merged[key]
        logger.debug(f"Index '{index.name}' duplicates index '{existing.name}', merging")
        existing.is_primary = existing.is_primary or index.is_primary
        existing.is_unique = existing.is_unique or index.is_unique or existing.is_primary
    return list(merged.values())


class IndexFinderBuilder:
    """
    Builds finder descriptors for the indexes of a table.

    In tolerant mode (the default) a finder that would need to follow a
    foreign key pointing to another foreign key is skipped with a warning;
    with ``strict`` the error is raised.
    """

    def __init__(self, analyzer: SchemaAnalyzer, naming: NamingStrategy, strict: bool = False):
        self.analyzer = analyzer
        self.naming = naming
        self.strict = strict

    def build(
        self, table: Table, properties: Dict[str, AbstractBeanPropertyDescriptor]
    ) -> List[FinderMethodDescriptor]:
        """
        Build the finders of a table.

        Args:
            table: Table whose indexes are turned into finders
            properties: The table's own resolved properties, so that finder
                names match the bean property names

        Raises:
            NamingConflictError: If two finders get the same name
            UnsupportedSchemaShapeError: In strict mode, if an index needs a
                foreign key chain that cannot be followed
        """
        finders = []
        names = {}
        for index in remove_duplicate_indexes(table.indexes):
            if index.is_primary:
                continue
            try:
                finder = self.build_for_index(table, index, properties)
            except UnsupportedSchemaShapeError as e:
                if self.strict:
                    raise
                logger.warning(f"Skipping finder for index '{index.name}' of '{table.name}': {e.message}")
                continue
            if finder is None:
                continue
            if finder.name in names:
                raise NamingConflictError(
                    f"Indexes '{names[finder.name]}' and '{index.name}' of table '{table.name}' "
                    f"both generate the finder '{finder.name}'",
                    table=table.name,
                    name=finder.name,
                )
            names[finder.name] = index.name
            finders.append(finder)
        return finders

    def build_for_index(
        self, table: Table, index: Index, properties: Dict[str, AbstractBeanPropertyDescriptor]
    ) -> Optional[FinderMethodDescriptor]:
        """Build the finder of one index, or None if the index is only a foreign key."""
        elements = self._get_elements(table, index, properties)

        if len(elements) == 1 and isinstance(elements[0], ObjectBeanPropertyDescriptor):
            logger.debug(f"Index '{index.name}' of '{table.name}' only covers a foreign key, no finder")
            return None

        parameters = []
        bindings = []
        for position, element in enumerate(elements):
            required = position == 0
            parameters.append(FinderParameter(
                name=element.variable_name,
                python_type=element.python_type,
                required=required,
                class_name=element.class_name,
            ))
            if isinstance(element, ObjectBeanPropertyDescriptor):
                for local_column, foreign_column in element.foreign_key.column_mapping.items():
                    getter = self._get_target_getter(table, index, element, foreign_column)
                    bindings.append(FilterBinding(local_column, element.variable_name, required, getter))
            else:
                bindings.append(FilterBinding(element.column_name, element.variable_name, required))

        return FinderMethodDescriptor(
            name=self.naming.get_finder_name([element.variable_name for element in elements]),
            index_name=index.name,
            is_unique=index.is_unique,
            parameters=parameters,
            bindings=bindings,
        )

    def _get_elements(
        self, table: Table, index: Index, properties: Dict[str, AbstractBeanPropertyDescriptor]
    ) -> List[AbstractBeanPropertyDescriptor]:
        """Map index columns to properties, collapsing composite foreign keys."""
        parent_fk = self.analyzer.get_parent_relationship(table.name)
        elements: List[AbstractBeanPropertyDescriptor] = []
        for column_name in index.columns:
            column = table.get_column(column_name)

            if parent_fk is not None and column_name in parent_fk.local_columns:
                elements.append(ScalarBeanPropertyDescriptor(table, column, self.naming))
                continue

            fk = find_foreign_key(table, column_name)
            if fk is not None:
                if any(
                    isinstance(element, ObjectBeanPropertyDescriptor) and element.foreign_key is fk
                    for element in elements
                ):
                    continue
                elements.append(self._find_object_property(table, fk, properties))
            else:
                elements.append(self._find_scalar_property(table, column, properties))
        return elements

    def _find_object_property(self, table, fk, properties) -> ObjectBeanPropertyDescriptor:
        for descriptor in properties.values():
            if isinstance(descriptor, ObjectBeanPropertyDescriptor) and descriptor.foreign_key is fk:
                return descriptor
        return ObjectBeanPropertyDescriptor(table, fk, self.naming)

    def _find_scalar_property(self, table, column, properties) -> ScalarBeanPropertyDescriptor:
        for descriptor in properties.values():
            if isinstance(descriptor, ScalarBeanPropertyDescriptor) and descriptor.column_name == column.name:
                return descriptor
        return ScalarBeanPropertyDescriptor(table, column, self.naming)

    def _get_target_getter(
        self,
        table: Table,
        index: Index,
        element: ObjectBeanPropertyDescriptor,
        foreign_column: str,
    ) -> str:
        """
        Getter of the referenced bean returning ``foreign_column``.

        Inheritance links are followed up to the ancestor declaring the
        column. Any other foreign key on the target column is unsupported.
        """
        target_table = self.analyzer.get_table(element.foreign_table_name)
        column_name = foreign_column
        parent_fk = self.analyzer.get_parent_relationship(target_table.name)
        while parent_fk is not None and column_name in parent_fk.local_columns:
            column_name = parent_fk.column_mapping[column_name]
            target_table = self.analyzer.get_table(parent_fk.foreign_table_name)
            parent_fk = self.analyzer.get_parent_relationship(target_table.name)

        target_column = target_table.get_column(column_name)
        pointed_fk = find_foreign_key(target_table, target_column.name)
        if pointed_fk is not None:
            raise UnsupportedSchemaShapeError(
                f"Foreign key '{element.foreign_key.name}' points to '{target_table.name}.{column_name}', "
                f"which is itself part of foreign key '{pointed_fk.name}'",
                table=table.name,
                index=index.name,
                constraint=element.foreign_key.name,
            )

        return self.naming.get_getter_name(self.naming.get_scalar_property_name(target_column.name))
