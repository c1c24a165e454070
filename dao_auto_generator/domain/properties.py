"""
Bean property descriptors.

A property is either a scalar mapped to one column or an object reference
mapped to a whole (possibly composite) foreign key. Descriptors carry a
mutable alternative-name flag set by the conflict resolver; every derived
name is recomputed from that flag on access.
"""

import re
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from dao_auto_generator.constants import (
    CURRENT_TIMESTAMP_DEFAULTS,
    FieldCategories,
    PYTHON_TYPE_MAP,
    TYPE_IMPORTS,
)
from dao_auto_generator.domain.models import CloneRule, Column, ForeignKeyConstraint, Table
from dao_auto_generator.domain.naming import NamingStrategy


class CurrentTimestamp:
    """Marker for a column defaulting to the current date/time."""

    def __repr__(self) -> str:
        return "CURRENT_TIMESTAMP"


CURRENT_TIMESTAMP = CurrentTimestamp()

_CAST_SUFFIX = re.compile(r"::[\w\s]+(\[\])?$")


class AbstractBeanPropertyDescriptor(ABC):
    """Common behaviour of scalar and object bean properties."""

    def __init__(self, table: Table, naming: NamingStrategy):
        self.table = table
        self.naming = naming
        self._use_alternative_name = False

    def use_alternative_name(self) -> None:
        """Switch every derived name of this property to its disambiguated form."""
        self._use_alternative_name = True

    @property
    def uses_alternative_name(self) -> bool:
        return self._use_alternative_name

    @property
    @abstractmethod
    def variable_name(self) -> str:
        """Name of the property, also used as the constructor parameter name."""

    @property
    def getter_name(self) -> str:
        return self.naming.get_getter_name(self.variable_name)

    @property
    def setter_name(self) -> str:
        return self.naming.get_setter_name(self.variable_name)

    @property
    def table_name(self) -> str:
        return self.table.name

    @property
    @abstractmethod
    def python_type(self) -> str:
        """Type hint of the property in generated code."""

    @property
    @abstractmethod
    def is_nullable(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_compulsory(self) -> bool:
        """True when the property must be passed to the bean constructor."""

    @property
    def has_default(self) -> bool:
        return False

    @property
    @abstractmethod
    def is_primary_key(self) -> bool:
        pass

    @property
    @abstractmethod
    def clone_rule(self) -> CloneRule:
        pass

    @property
    def class_name(self) -> Optional[str]:
        """Bean class referenced by this property, if any."""
        return None

    @property
    def type_imports(self) -> List[tuple]:
        """(module, name) pairs the type hint needs."""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.table.name}.{self.variable_name})"


class ScalarBeanPropertyDescriptor(AbstractBeanPropertyDescriptor):
    """A property mapped to a single column that is not part of a foreign key."""

    def __init__(self, table: Table, column: Column, naming: NamingStrategy):
        super().__init__(table, naming)
        self.column = column

    @property
    def column_name(self) -> str:
        return self.column.name

    @property
    def variable_name(self) -> str:
        # Column names are unique within a table: the alternative name is the name itself.
        return self.naming.get_scalar_property_name(self.column.name)

    @property
    def field_type_value(self) -> str:
        return self.column.field_type.value

    @property
    def python_type(self) -> str:
        return PYTHON_TYPE_MAP.get(self.field_type_value, "Any")

    @property
    def type_imports(self) -> List[tuple]:
        module = TYPE_IMPORTS.get(self.python_type)
        if module is None:
            return []
        return [(module, self.python_type)]

    @property
    def is_nullable(self) -> bool:
        return self.column.nullable

    @property
    def is_compulsory(self) -> bool:
        return not self.column.nullable and not self.has_default and not self.column.is_auto_increment

    @property
    def has_default(self) -> bool:
        return self.column.has_default

    @property
    def is_primary_key(self) -> bool:
        return self.column.name in self.table.primary_key_columns

    @property
    def is_auto_increment(self) -> bool:
        return self.column.is_auto_increment

    @property
    def is_temporal(self) -> bool:
        return self.field_type_value in FieldCategories.TEMPORAL_TYPES

    @property
    def is_stringified(self) -> bool:
        return self.field_type_value in FieldCategories.STRINGIFIED_TYPES

    @property
    def is_serializable(self) -> bool:
        return self.field_type_value not in FieldCategories.NOT_SERIALIZED_TYPES

    @property
    def clone_rule(self) -> CloneRule:
        if self.column.is_auto_increment:
            return CloneRule.RESET
        return CloneRule.SHALLOW

    def get_default_value(self) -> Any:
        """
        Return the Python value of the column default.

        Defaults meaning "now" return :data:`CURRENT_TIMESTAMP`. Literal
        defaults are unquoted, stripped of type casts and converted to the
        property type when possible; anything else is returned as a string.
        """
        if not self.has_default:
            return None

        raw = self.column.default
        if not isinstance(raw, str):
            return raw

        value = raw.strip()
        if value.lower() in CURRENT_TIMESTAMP_DEFAULTS:
            return CURRENT_TIMESTAMP

        value = _CAST_SUFFIX.sub("", value).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1].replace("''", "'")

        python_type = self.python_type
        try:
            if python_type == "int":
                return int(value)
            if python_type == "float":
                return float(value)
            if python_type == "Decimal":
                return str(Decimal(value))
            if python_type == "bool":
                return value.lower() in ("1", "true", "t", "yes", "b'1'")
        except (ValueError, InvalidOperation):
            return value
        return value


class ObjectBeanPropertyDescriptor(AbstractBeanPropertyDescriptor):
    """A property mapped to a whole foreign key, holding the referenced bean."""

    def __init__(self, table: Table, foreign_key: ForeignKeyConstraint, naming: NamingStrategy):
        super().__init__(table, naming)
        self.foreign_key = foreign_key

    @property
    def variable_name(self) -> str:
        return self.naming.get_object_property_name(
            self.foreign_key.local_columns,
            self.foreign_key.foreign_table_name,
            self._use_alternative_name,
        )

    @property
    def foreign_table_name(self) -> str:
        return self.foreign_key.foreign_table_name

    @property
    def class_name(self) -> str:
        return self.naming.get_bean_class_name(self.foreign_key.foreign_table_name)

    @property
    def python_type(self) -> str:
        return self.class_name

    @property
    def local_columns(self) -> List[str]:
        return list(self.foreign_key.local_columns)

    @property
    def is_nullable(self) -> bool:
        return any(self.table.get_column(name).nullable for name in self.foreign_key.local_columns)

    @property
    def is_compulsory(self) -> bool:
        return not self.is_nullable

    @property
    def is_primary_key(self) -> bool:
        return sorted(self.foreign_key.local_columns) == sorted(self.table.primary_key_columns)

    @property
    def clone_rule(self) -> CloneRule:
        return CloneRule.REFERENCE
