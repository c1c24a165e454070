"""
Structural analysis of a schema snapshot.

The analyzer answers the structural questions the bean descriptors ask about
the schema: which foreign key makes a table inherit from another one, which
tables are pure many-to-many junction tables, and which foreign keys point to
a given table. Results are computed once and cached, the schema itself is
never modified.
"""

import logging
from typing import Dict, List, Optional

from dao_auto_generator.domain.models import ForeignKeyConstraint, Schema, Table
from dao_auto_generator.exceptions import SchemaIntegrityError

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """
    Analyzes inheritance and junction tables of a :class:`Schema`.

    A table inherits from another one when exactly one of its foreign keys
    maps its whole primary key onto the whole primary key of the referenced
    table (a one-to-one relationship on primary keys).
    """

    def __init__(self, schema: Schema):
        self.schema = schema
        self._parent_cache: Dict[str, Optional[ForeignKeyConstraint]] = {}
        self._chain_cache: Dict[str, List[Table]] = {}
        self._junction_tables: Optional[List[Table]] = None

    def get_tables(self) -> List[Table]:
        """All tables, in schema declaration order."""
        return list(self.schema.tables)

    def get_table(self, table_name: str) -> Table:
        return self.schema.get_table(table_name)

    # -- inheritance ---------------------------------------------------------

    def get_parent_relationship(self, table_name: str) -> Optional[ForeignKeyConstraint]:
        """
        Return the foreign key linking a table to its parent table, if any.

        Zero or several qualifying foreign keys mean the table has no parent.
        """
        if table_name not in self._parent_cache:
            self._parent_cache[table_name] = self._find_parent_relationship(self.get_table(table_name))
        return self._parent_cache[table_name]

    def _find_parent_relationship(self, table: Table) -> Optional[ForeignKeyConstraint]:
        primary_key = table.primary_key_columns
        if not primary_key:
            return None

        candidates = []
        for fk in table.foreign_keys:
            if fk.local_columns != primary_key:
                continue
            if fk.foreign_table_name == table.name:
                continue
            if not self.schema.has_table(fk.foreign_table_name):
                continue
            foreign_table = self.get_table(fk.foreign_table_name)
            if fk.foreign_columns != foreign_table.primary_key_columns:
                continue
            candidates.append(fk)

        if len(candidates) != 1:
            if candidates:
                logger.debug(
                    f"Table '{table.name}' has {len(candidates)} primary key foreign keys, "
                    f"not treated as inheritance"
                )
            return None

        return candidates[0]

    def get_inheritance_chain(self, table_name: str) -> List[Table]:
        """
        Return the tables of the inheritance chain of a table, root first.

        The last element is the table itself.

        Raises:
            SchemaIntegrityError: If the inheritance links form a cycle
        """
        if table_name in self._chain_cache:
            return list(self._chain_cache[table_name])

        chain = []
        seen = set()
        current = table_name
        while current is not None:
            if current in seen:
                raise SchemaIntegrityError(
                    f"Cyclic table inheritance detected through table '{current}'",
                    table=table_name,
                    context={'chain': ' -> '.join([t.name for t in reversed(chain)] + [current])},
                )
            seen.add(current)
            chain.append(self.get_table(current))
            parent_fk = self.get_parent_relationship(current)
            current = parent_fk.foreign_table_name if parent_fk else None

        chain.reverse()
        self._chain_cache[table_name] = chain
        return list(chain)

    def get_parent_table(self, table_name: str) -> Optional[Table]:
        parent_fk = self.get_parent_relationship(table_name)
        if parent_fk is None:
            return None
        return self.get_table(parent_fk.foreign_table_name)

    def is_inheritance_link(self, fk: ForeignKeyConstraint) -> bool:
        return self.get_parent_relationship(fk.local_table_name) is fk

    # -- junction tables -----------------------------------------------------

    def detect_junction_tables(self) -> List[Table]:
        """
        Return the tables that only implement a many-to-many relationship.

        A junction table has exactly two foreign keys, every column belongs
        to one of them except for an optional auto-incremented primary key,
        and no other table references it.
        """
        if self._junction_tables is None:
            candidates = [table for table in self.schema.tables if self._is_junction_table(table)]
            referenced = {
                fk.foreign_table_name
                for table in self.schema.tables
                for fk in table.foreign_keys
                if fk.local_table_name != fk.foreign_table_name
            }
            self._junction_tables = [table for table in candidates if table.name not in referenced]
            logger.debug(f"Detected junction tables: {[t.name for t in self._junction_tables]}")
        return list(self._junction_tables)

    def is_junction_table(self, table_name: str) -> bool:
        return any(table.name == table_name for table in self.detect_junction_tables())

    @staticmethod
    def _is_junction_table(table: Table) -> bool:
        if len(table.foreign_keys) != 2:
            return False

        fk_columns = {column for fk in table.foreign_keys for column in fk.local_columns}
        primary_key = table.primary_key_columns
        if not primary_key:
            return False

        other_columns = [column for column in table.columns if column.name not in fk_columns]
        if not other_columns:
            return set(primary_key) == fk_columns

        # A surrogate key is allowed, provided it is the auto-incremented primary key
        if len(other_columns) == 1:
            column = other_columns[0]
            return column.is_auto_increment and primary_key == [column.name]

        return False

    # -- incoming foreign keys -----------------------------------------------

    def get_incoming_foreign_keys(self, table_name: str) -> List[ForeignKeyConstraint]:
        """
        Foreign keys of other tables pointing to a table.

        Foreign keys of junction tables and inheritance links are excluded:
        they are exposed through many-to-many methods and class inheritance
        respectively. Self references are included.
        """
        junction_names = {table.name for table in self.detect_junction_tables()}
        incoming = []
        for table in self.schema.tables:
            if table.name in junction_names:
                continue
            for fk in table.foreign_keys:
                if fk.foreign_table_name != table_name:
                    continue
                if self.is_inheritance_link(fk):
                    continue
                incoming.append(fk)
        return incoming

    # -- primary keys --------------------------------------------------------

    def get_primary_key_columns_or_fail(self, table: Table) -> List[str]:
        """
        Return the primary key columns of a table.

        Raises:
            SchemaIntegrityError: If the table has no primary key
        """
        primary_key = table.primary_key_columns
        if not primary_key:
            raise SchemaIntegrityError(
                f"Table '{table.name}' has no primary key. A primary key is required on every table.",
                table=table.name,
            )
        return primary_key
