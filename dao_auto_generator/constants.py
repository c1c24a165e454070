"""
Centralized constants for DAO Auto Generator.

This module contains configuration defaults, naming conventions and the
database-type to Python-type mappings used when resolving bean properties.
Keeping them in one place makes it easier for contributors to change how
generated code looks.
"""

from typing import Dict, Set, List


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    # Output layout
    OUTPUT_DIR = "./generated_daos"
    BEAN_PACKAGE = "app.beans"
    DAO_PACKAGE = "app.daos"
    GENERATED_SUBPACKAGE = "generated"

    # Runtime module the generated classes import their base classes from
    RUNTIME_MODULE = "tdbm"

    # Generation options
    STRICT_FINDERS = False
    FORMAT_CODE = True


class NamingDefaults:
    """Default class name suffixes used by the naming strategy."""

    BEAN_SUFFIX = "Bean"
    BASE_BEAN_SUFFIX = "BaseBean"
    DAO_SUFFIX = "Dao"
    BASE_DAO_SUFFIX = "BaseDao"

    DAO_FACTORY_CLASS = "DaoFactory"
    DAO_FACTORY_MODULE = "dao_factory"

    # Name fragments used to derive property and method names
    GETTER_PREFIX = "get_"
    SETTER_PREFIX = "set_"
    FINDER_PREFIX = "find_by_"
    ALTERNATIVE_OBJECT_SUFFIX = "_object"


class SupportedDatabases:
    """Supported database engines."""

    POSTGRESQL = 'django.db.backends.postgresql'
    SQLITE = 'django.db.backends.sqlite3'
    MYSQL = 'django.db.backends.mysql'

    SUPPORTED = [POSTGRESQL, SQLITE, MYSQL]


# =============================================================================
# RUNTIME CLASSES
# =============================================================================

class RuntimeClasses:
    """Names of the runtime classes referenced by generated code."""

    ABSTRACT_OBJECT = "AbstractTDBMObject"
    RESULT_ITERATOR = "ResultIterator"
    ALTERABLE_RESULT_ITERATOR = "AlterableResultIterator"
    TDBM_SERVICE = "TDBMService"

    BEAN_IMPORTS: List[str] = [ABSTRACT_OBJECT, ALTERABLE_RESULT_ITERATOR, RESULT_ITERATOR]
    DAO_IMPORTS: List[str] = [RESULT_ITERATOR, TDBM_SERVICE]


# =============================================================================
# TYPE MAPPINGS
# =============================================================================

# Field type category (FieldType value) to the Python type hint used in generated code
PYTHON_TYPE_MAP: Dict[str, str] = {
    "auto": "int",
    "integer": "int",
    "float": "float",
    "decimal": "Decimal",
    "string": "str",
    "text": "str",
    "boolean": "bool",
    "date": "date",
    "datetime": "datetime",
    "time": "time",
    "uuid": "UUID",
    "json": "Any",
    "binary": "bytes",
    "unknown": "Any",
}

# Type hints that need an import in the generated module: name -> module
TYPE_IMPORTS: Dict[str, str] = {
    "Decimal": "decimal",
    "date": "datetime",
    "datetime": "datetime",
    "time": "datetime",
    "UUID": "uuid",
}


class FieldCategories:
    """Categorized field types driving serialization and defaults."""

    TEMPORAL_TYPES: Set[str] = {"date", "datetime", "time"}
    STRINGIFIED_TYPES: Set[str] = {"uuid", "decimal"}
    NOT_SERIALIZED_TYPES: Set[str] = {"binary"}


# Default expressions that mean "the current timestamp" across vendors
CURRENT_TIMESTAMP_DEFAULTS: Set[str] = {
    "current_timestamp", "current_timestamp()", "now()", "localtimestamp",
    "current_date", "current_time", "statement_timestamp()", "clock_timestamp()",
}


# =============================================================================
# NAMING CONVENTIONS
# =============================================================================

class FieldNames:
    """Common field names and patterns."""

    # Reserved Python keywords (for identifier validation)
    PYTHON_KEYWORDS: Set[str] = {
        "False", "None", "True", "and", "as", "assert", "async", "await",
        "break", "class", "continue", "def", "del", "elif", "else", "except",
        "finally", "for", "from", "global", "if", "import", "in", "is",
        "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
        "while", "with", "yield"
    }


class GenerationOptions:
    """Code generation options."""

    DEFAULT_LINE_LENGTH = 120

    # Template directory (relative to the package)
    TEMPLATE_DIR = "templates"
    BEAN_TEMPLATE = "bean.py.j2"
    DAO_TEMPLATE = "dao.py.j2"

    GENERATED_HEADER = (
        "This file has been automatically generated by DAO Auto Generator.\n"
        "DO NOT edit this file, as it might be overwritten.\n"
        "If you need to perform changes, edit the {class_name} class instead!"
    )
