"""
Relationship method descriptors.

One-to-many navigation comes from foreign keys of other tables pointing to
the bean's table; many-to-many navigation comes from junction tables.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from dao_auto_generator.constants import NamingDefaults
from dao_auto_generator.domain.models import ForeignKeyConstraint, Table
from dao_auto_generator.domain.naming import (
    NamingStrategy,
    clean_field_name,
    pluralize,
    singularize,
    to_snake_case,
)


class MethodDescriptor(ABC):
    """A group of generated methods sharing one base name."""

    def __init__(self, naming: NamingStrategy):
        self.naming = naming
        self._use_alternative_name = False

    def use_alternative_name(self) -> None:
        self._use_alternative_name = True

    @property
    def uses_alternative_name(self) -> bool:
        return self._use_alternative_name

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the main (getter) method, used for conflict detection."""

    @property
    @abstractmethod
    def used_classes(self) -> List[str]:
        """Bean class names referenced by the generated methods."""

    @property
    def is_serialized(self) -> bool:
        """True when the relationship is part of the bean JSON serialization."""
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class DirectForeignKeyMethodDescriptor(MethodDescriptor):
    """
    Getter returning the beans of another table whose foreign key points to
    the current bean (the "many" side of a one-to-many relationship).
    """

    def __init__(self, foreign_key: ForeignKeyConstraint, main_table: Table, naming: NamingStrategy):
        super().__init__(naming)
        self.foreign_key = foreign_key
        self.main_table = main_table

    @property
    def name(self) -> str:
        return self.naming.get_direct_foreign_key_method_name(
            self.foreign_key.local_table_name,
            self.foreign_key.local_columns,
            self._use_alternative_name,
        )

    @property
    def bean_class_name(self) -> str:
        return self.naming.get_bean_class_name(self.foreign_key.local_table_name)

    @property
    def used_classes(self) -> List[str]:
        return [self.bean_class_name]

    @property
    def filter_columns(self) -> Dict[str, str]:
        """'local_table.local_column' -> column of the main table holding the value."""
        return {
            f"{self.foreign_key.local_table_name}.{local}": foreign
            for local, foreign in self.foreign_key.column_mapping.items()
        }


class PivotTableMethodsDescriptor(MethodDescriptor):
    """
    Methods navigating a many-to-many relationship through a junction table:
    get_, add_, remove_, has_ and set_.
    """

    def __init__(
        self,
        pivot_table: Table,
        local_foreign_key: ForeignKeyConstraint,
        remote_foreign_key: ForeignKeyConstraint,
        naming: NamingStrategy,
    ):
        super().__init__(naming)
        self.pivot_table = pivot_table
        self.local_foreign_key = local_foreign_key
        self.remote_foreign_key = remote_foreign_key

    @property
    def remote_table_name(self) -> str:
        return self.remote_foreign_key.foreign_table_name

    @property
    def path_key(self) -> str:
        """Key identifying the relationship in the runtime storage."""
        return self.pivot_table.name

    def _method_name(self, prefix: str, plural: bool) -> str:
        return self.naming.get_pivot_method_name(
            prefix, self.remote_table_name, self.pivot_table.name, plural, self._use_alternative_name
        )

    @property
    def name(self) -> str:
        return self._method_name(NamingDefaults.GETTER_PREFIX, plural=True)

    @property
    def add_method_name(self) -> str:
        return self._method_name("add_", plural=False)

    @property
    def remove_method_name(self) -> str:
        return self._method_name("remove_", plural=False)

    @property
    def has_method_name(self) -> str:
        return self._method_name("has_", plural=False)

    @property
    def set_method_name(self) -> str:
        return self._method_name(NamingDefaults.SETTER_PREFIX, plural=True)

    @property
    def json_key(self) -> str:
        return self.name[len(NamingDefaults.GETTER_PREFIX):]

    @property
    def remote_variable_name(self) -> str:
        """Parameter name for one remote bean, e.g. 'role'."""
        return clean_field_name(singularize(to_snake_case(self.remote_table_name)))

    @property
    def remote_plural_variable_name(self) -> str:
        return pluralize(self.remote_variable_name)

    @property
    def remote_bean_class_name(self) -> str:
        return self.naming.get_bean_class_name(self.remote_table_name)

    @property
    def used_classes(self) -> List[str]:
        return [self.remote_bean_class_name]

    @property
    def is_serialized(self) -> bool:
        return True
