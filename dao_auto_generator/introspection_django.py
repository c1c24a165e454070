import logging
import django
from django.db import connections, DEFAULT_DB_ALIAS
from django.db.utils import DatabaseError
from django.conf import settings
from typing import List, Optional, Dict, Any, Tuple
from dataclasses import dataclass, field

from dao_auto_generator.domain.models import Column, ForeignKeyConstraint, Index, Schema, Table
from dao_auto_generator.exceptions import ConfigurationError, SchemaIntrospectionError


logger = logging.getLogger(__name__)


# --- Raw introspection results ---
@dataclass
class RawTableDescription:
    """What Django's introspection reports for one table, before conversion."""
    name: str
    columns: List[Column] = field(default_factory=list)
    # {constraint_name: {'columns': [...], 'primary_key': bool, 'unique': bool, 'index': bool, 'foreign_key': (table, column) | None}}
    constraints: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    # {column_name: (target_column, target_table)}
    relations: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    primary_key_column: Optional[str] = None


# --- Django Setup Helper ---
_django_setup_done = False

def setup_django(db_settings: Dict[str, Any], secret_key: str):
    """Configures minimal Django settings and runs django.setup()."""
    global _django_setup_done
    if _django_setup_done:
        logger.debug("Django setup already performed.")
        return

    logger.info("Configuring Django settings for introspection...")
    plain_db_settings: Dict[str, Dict[str, Any]] = {}
    for alias, db_model in db_settings.items():
        if hasattr(db_model, 'model_dump'):
            plain_db_settings[alias] = db_model.model_dump(exclude_none=True)
        elif isinstance(db_model, dict):
            plain_db_settings[alias] = db_model
        else:
            raise ConfigurationError(
                f"Invalid database settings type for alias '{alias}': {type(db_model).__name__}"
            )
    logger.debug(f"Using database aliases for Django: {list(plain_db_settings)}")

    settings.configure(
        SECRET_KEY=secret_key,
        DATABASES=plain_db_settings,
        TIME_ZONE='UTC',
        USE_TZ=True,
        DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
    )
    django.setup()
    _django_setup_done = True
    logger.info("Django setup complete.")


# --- Conversion to the schema model ---
def _is_auto_increment(db_type_string: str, description) -> bool:
    if getattr(description, 'is_autofield', False):
        return True
    return db_type_string.endswith('AutoField')


def build_column(description, db_type_string: str) -> Column:
    """Build a Column from a Django FieldInfo and its Django field type name."""
    auto_increment = _is_auto_increment(db_type_string, description)
    return Column(
        name=description.name,
        db_type_string=db_type_string,
        nullable=bool(description.null_ok),
        default=None if auto_increment else getattr(description, 'default', None),
        is_auto_increment=auto_increment,
        comment=getattr(description, 'comment', None),
    )


def _build_indexes(raw: RawTableDescription) -> List[Index]:
    indexes = []
    for name, data in raw.constraints.items():
        columns = [column for column in data.get('columns') or [] if column]
        if not columns:
            continue
        if data.get('primary_key'):
            indexes.append(Index(name=name, columns=columns, is_unique=True, is_primary=True))
        elif data.get('unique') or data.get('index'):
            if data.get('check'):
                continue
            indexes.append(Index(name=name, columns=columns, is_unique=bool(data.get('unique'))))

    if not any(index.is_primary for index in indexes) and raw.primary_key_column:
        indexes.insert(0, Index(name=f"{raw.name}_pkey", columns=[raw.primary_key_column], is_primary=True))
    return indexes


def _build_foreign_keys(raw: RawTableDescription, primary_keys: Dict[str, List[str]]) -> List[ForeignKeyConstraint]:
    """
    Build the foreign keys of a table.

    Django only reports the first referenced column of a constraint: the
    referenced columns of a composite key are taken from the referenced
    table's primary key.
    """
    foreign_keys = []
    covered = set()
    for name, data in raw.constraints.items():
        target = data.get('foreign_key')
        columns = list(data.get('columns') or [])
        if not target or not columns:
            continue
        target_table, target_column = target
        if len(columns) == 1:
            foreign_columns = [target_column]
        else:
            foreign_columns = primary_keys.get(target_table, [])
            if len(foreign_columns) != len(columns):
                raise SchemaIntrospectionError(
                    f"Cannot resolve the referenced columns of composite foreign key '{name}'",
                    table=raw.name,
                    context={'constraint': name, 'referenced_table': target_table},
                )
        foreign_keys.append(ForeignKeyConstraint(
            name=name,
            local_table_name=raw.name,
            local_columns=columns,
            foreign_table_name=target_table,
            foreign_columns=foreign_columns,
        ))
        covered.update(columns)

    # Relations not reported as named constraints (e.g. by some SQLite versions)
    for column, (target_column, target_table) in raw.relations.items():
        if column in covered:
            continue
        foreign_keys.append(ForeignKeyConstraint(
            name=f"fk_{raw.name}_{column}",
            local_table_name=raw.name,
            local_columns=[column],
            foreign_table_name=target_table,
            foreign_columns=[target_column],
        ))
    return foreign_keys


def build_schema(raw_tables: List[RawTableDescription]) -> Schema:
    """
    Convert raw introspection results into a Schema.

    Foreign keys to tables outside of the introspected set are dropped
    with a warning.
    """
    tables = []
    primary_keys: Dict[str, List[str]] = {}
    for raw in raw_tables:
        table = Table(name=raw.name, columns=list(raw.columns), indexes=_build_indexes(raw))
        primary_keys[raw.name] = table.primary_key_columns
        tables.append(table)

    for raw, table in zip(raw_tables, tables):
        for fk in _build_foreign_keys(raw, primary_keys):
            if fk.foreign_table_name not in primary_keys:
                logger.warning(
                    f"Skipping foreign key '{fk.name}' of '{table.name}': "
                    f"table '{fk.foreign_table_name}' is not part of the generated schema"
                )
                continue
            table.foreign_keys.append(fk)

    return Schema(tables=tables)


# --- Main Introspection Function ---
def _describe_table(introspector, cursor, table_name: str) -> RawTableDescription:
    try:
        table_description = introspector.get_table_description(cursor, table_name)
        constraints = introspector.get_constraints(cursor, table_name)
    except DatabaseError as e:
        raise SchemaIntrospectionError(f"Could not describe table '{table_name}': {e}", table=table_name) from e

    try:
        relations = introspector.get_relations(cursor, table_name)
    except NotImplementedError:
        logger.debug(f"Backend does not support get_relations, relying on constraints for '{table_name}'")
        relations = {}

    try:
        primary_key_column = introspector.get_primary_key_column(cursor, table_name)
    except NotImplementedError:
        primary_key_column = None

    columns = [
        build_column(description, introspector.get_field_type(description.type_code, description))
        for description in table_description
    ]
    return RawTableDescription(
        name=table_name,
        columns=columns,
        constraints=constraints,
        relations=relations,
        primary_key_column=primary_key_column,
    )


def introspect_schema_django(
    db_alias: str = DEFAULT_DB_ALIAS,
    include_tables: Optional[List[str]] = None,
    exclude_tables: Optional[List[str]] = None
) -> Schema:
    """Introspects the database schema using Django's connection.introspection."""
    if not _django_setup_done:
        raise SchemaIntrospectionError("Django has not been set up. Call setup_django() first.")

    logger.info(f"Introspecting schema using Django backend for alias '{db_alias}'...")
    conn = connections[db_alias]
    introspector = conn.introspection
    include_set = set(include_tables) if include_tables else None
    exclude_set = set(exclude_tables) if exclude_tables else set()

    raw_tables: List[RawTableDescription] = []
    try:
        with conn.cursor() as cursor:
            all_db_items = introspector.get_table_list(cursor)
            logger.info(f"Found {len(all_db_items)} database items (tables/views).")

            for item in all_db_items:
                table_name = item.name
                if getattr(item, 'type', 't') != 't':
                    logger.debug(f"Skipping view '{table_name}'.")
                    continue
                if table_name in exclude_set:
                    logger.info(f"Excluding table: {table_name}")
                    continue
                if include_set is not None and table_name not in include_set:
                    logger.debug(f"Skipping table '{table_name}' (not in include list).")
                    continue

                logger.debug(f"Introspecting table: {table_name}")
                raw_tables.append(_describe_table(introspector, cursor, table_name))
    except DatabaseError as e:
        raise SchemaIntrospectionError(f"Database error during introspection: {e}") from e

    if not raw_tables:
        logger.warning("No tables selected for introspection after filtering.")

    schema = build_schema(raw_tables)
    logger.info(f"Django introspection complete. Found {len(schema.tables)} tables.")
    return schema
