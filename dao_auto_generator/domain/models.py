"""
Core schema models for DAO Auto Generator.

These models are the read-only schema snapshot the resolution engine works
on. They are filled by the introspection layer (or built by hand in tests)
and never mutated by the engine.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum

from dao_auto_generator.exceptions import SchemaIntegrityError, SchemaIntrospectionError


class FieldType(Enum):
    """Categories of column types."""

    AUTO = "auto"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    UUID = "uuid"
    JSON = "json"
    BINARY = "binary"
    UNKNOWN = "unknown"


class CloneRule(Enum):
    """How a property is treated when a bean is cloned."""

    SHALLOW = "shallow"
    RESET = "reset"
    REFERENCE = "reference"


@dataclass
class Column:
    """
    Represents a database column.

    ``default`` holds the raw default expression reported by the database,
    or None when the column has no default.
    """

    name: str
    db_type_string: str
    nullable: bool = True
    default: Optional[Any] = None
    is_auto_increment: bool = False
    comment: Optional[str] = None

    field_type: Optional[FieldType] = None

    def __post_init__(self):
        """Infer the field type if it was not provided."""
        if self.field_type is None:
            self.field_type = self._infer_field_type()

    def _infer_field_type(self) -> FieldType:
        """Infer the field type from database type string."""
        db_type_lower = self.db_type_string.lower()

        if 'auto' in db_type_lower or 'serial' in db_type_lower or self.is_auto_increment:
            return FieldType.AUTO
        elif 'int' in db_type_lower:
            return FieldType.INTEGER
        elif any(t in db_type_lower for t in ['float', 'real', 'double']):
            return FieldType.FLOAT
        elif any(t in db_type_lower for t in ['decimal', 'numeric']):
            return FieldType.DECIMAL
        elif any(t in db_type_lower for t in ['uuid', 'guid']):
            return FieldType.UUID
        elif any(t in db_type_lower for t in ['char', 'varchar', 'email', 'slug', 'url']):
            return FieldType.STRING
        elif any(t in db_type_lower for t in ['text', 'clob']):
            return FieldType.TEXT
        elif any(t in db_type_lower for t in ['bool', 'bit']):
            return FieldType.BOOLEAN
        elif 'date' in db_type_lower and 'time' in db_type_lower:
            return FieldType.DATETIME
        elif 'timestamp' in db_type_lower:
            return FieldType.DATETIME
        elif 'date' in db_type_lower:
            return FieldType.DATE
        elif 'time' in db_type_lower:
            return FieldType.TIME
        elif 'json' in db_type_lower:
            return FieldType.JSON
        elif any(t in db_type_lower for t in ['blob', 'binary', 'bytea']):
            return FieldType.BINARY
        else:
            return FieldType.UNKNOWN

    @property
    def has_default(self) -> bool:
        """Check if the column has a default value (auto-increments excluded)."""
        return self.default is not None and not self.is_auto_increment


@dataclass(eq=False)
class ForeignKeyConstraint:
    """
    A (possibly composite) foreign key.

    Compared by identity: two constraints are the same relationship only if
    they are the same object.
    """

    name: str
    local_table_name: str
    local_columns: List[str]
    foreign_table_name: str
    foreign_columns: List[str]

    def __post_init__(self):
        if not self.local_columns:
            raise SchemaIntrospectionError(
                f"Foreign key '{self.name}' has no local columns",
                table=self.local_table_name,
            )
        if len(self.local_columns) != len(self.foreign_columns):
            raise SchemaIntrospectionError(
                f"Foreign key '{self.name}' maps {len(self.local_columns)} local columns "
                f"to {len(self.foreign_columns)} foreign columns",
                table=self.local_table_name,
            )

    @property
    def column_mapping(self) -> Dict[str, str]:
        """Local column name -> foreign column name, in declaration order."""
        return dict(zip(self.local_columns, self.foreign_columns))

    def __repr__(self) -> str:
        return (
            f"ForeignKeyConstraint({self.name!r}, {self.local_table_name}({', '.join(self.local_columns)}) -> "
            f"{self.foreign_table_name}({', '.join(self.foreign_columns)}))"
        )


@dataclass
class Index:
    """A database index (primary key, unique constraint or plain index)."""

    name: str
    columns: List[str]
    is_unique: bool = False
    is_primary: bool = False

    def __post_init__(self):
        if self.is_primary:
            self.is_unique = True


@dataclass(eq=False)
class Table:
    """
    Represents a database table.

    Columns are kept in declaration order; that order drives the order of
    the generated bean properties.
    """

    name: str
    columns: List[Column] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    foreign_keys: List[ForeignKeyConstraint] = field(default_factory=list)
    comment: Optional[str] = None

    @property
    def primary_index(self) -> Optional[Index]:
        return next((index for index in self.indexes if index.is_primary), None)

    @property
    def primary_key_columns(self) -> List[str]:
        """Primary key column names, or an empty list."""
        index = self.primary_index
        return list(index.columns) if index else []

    def get_column(self, name: str) -> Column:
        """Get a column by name, failing if it does not exist."""
        for col in self.columns:
            if col.name == name:
                return col
        raise SchemaIntegrityError(
            f"Column '{name}' does not exist in table '{self.name}'",
            table=self.name,
            context={'column': name},
        )

    def __repr__(self) -> str:
        return f"Table({self.name!r})"


@dataclass
class Schema:
    """A read-only snapshot of all tables, in declaration order."""

    tables: List[Table] = field(default_factory=list)

    def has_table(self, name: str) -> bool:
        return any(table.name == name for table in self.tables)

    def get_table(self, name: str) -> Table:
        """Get a table by name, failing if it does not exist."""
        for table in self.tables:
            if table.name == name:
                return table
        raise SchemaIntegrityError(f"Table '{name}' does not exist in the schema", table=name)
