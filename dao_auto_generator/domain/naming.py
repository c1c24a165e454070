"""
Naming convention utilities for DAO Auto Generator.

This module converts table and column names into the class, module,
property and method names used by the generated beans and DAOs. Every
derived name goes through :class:`NamingStrategy` so that conflict
resolution always compares names built the same way.
"""

import re
from typing import Iterable, List
import inflect

from ..constants import FieldNames, NamingDefaults


# Initialize inflect engine for pluralization
p = inflect.engine()


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Args:
        name: The string to convert to snake_case

    Returns:
        The converted snake_case string

    Example:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def singularize(name: str) -> str:
    """
    Return the singular form of a (snake_case) name.

    inflect returns False when the word is already singular, in which case
    the name is returned unchanged.
    """
    singular_name = p.singular_noun(name)
    if not singular_name:
        return name
    return singular_name


def pluralize(name: str) -> str:
    """
    Return the plural form of a (snake_case) name.

    The name is singularized first so that already plural table names
    ('users') are not pluralized twice.
    """
    return p.plural(singularize(name))


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case to PascalCase (ClassName) with smart singularization.

    Example:
        >>> to_pascal_case("user_accounts")
        'UserAccount'
        >>> to_pascal_case("categories")
        'Category'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    singular_name = singularize(to_snake_case(name))
    return "".join(word.capitalize() for word in singular_name.split("_"))


def clean_field_name(name: str) -> str:
    """
    Ensure a name is a valid Python identifier and not a reserved keyword.

    Example:
        >>> clean_field_name("class")
        'class_'
        >>> clean_field_name("123invalid")
        '_123invalid'
    """
    name = to_snake_case(name)
    # Remove invalid characters (allow underscore)
    name = re.sub(r"[^a-zA-Z0-9_]", "", name)
    # Ensure it starts with a letter or underscore
    if name and not name[0].isalpha() and name[0] != "_":
        name = "_" + name

    if name in FieldNames.PYTHON_KEYWORDS:
        name += "_"

    return name if name else "_field"


def strip_id_affix(column_name: str) -> str:
    """
    Remove an 'id_' prefix or an '_id' suffix from a column name.

    Returns the column name unchanged when stripping would leave nothing.

    Example:
        >>> strip_id_affix("country_id")
        'country'
        >>> strip_id_affix("id_manager")
        'manager'
    """
    lowered = column_name.lower()
    if lowered.startswith("id_") and len(column_name) > 3:
        return column_name[3:]
    if lowered.endswith("_id") and len(column_name) > 3:
        return column_name[:-3]
    return column_name


def validate_python_identifier(name: str) -> bool:
    """Check if a string is a valid Python identifier."""
    if not name:
        return False

    return (name.isidentifier() and
            name not in FieldNames.PYTHON_KEYWORDS)


def _join_columns(columns: Iterable[str]) -> str:
    return "_and_".join(clean_field_name(column) for column in columns)


class NamingStrategy:
    """
    Centralized naming convention for generated code.

    Class names are built from the singular PascalCase table name and a
    configurable suffix; module names are the snake_case class names.
    """

    def __init__(
        self,
        bean_suffix: str = NamingDefaults.BEAN_SUFFIX,
        base_bean_suffix: str = NamingDefaults.BASE_BEAN_SUFFIX,
        dao_suffix: str = NamingDefaults.DAO_SUFFIX,
        base_dao_suffix: str = NamingDefaults.BASE_DAO_SUFFIX,
    ):
        self.bean_suffix = bean_suffix
        self.base_bean_suffix = base_bean_suffix
        self.dao_suffix = dao_suffix
        self.base_dao_suffix = base_dao_suffix

    # -- classes and modules -------------------------------------------------

    def get_bean_class_name(self, table_name: str) -> str:
        return to_pascal_case(table_name) + self.bean_suffix

    def get_base_bean_class_name(self, table_name: str) -> str:
        return to_pascal_case(table_name) + self.base_bean_suffix

    def get_dao_class_name(self, table_name: str) -> str:
        return to_pascal_case(table_name) + self.dao_suffix

    def get_base_dao_class_name(self, table_name: str) -> str:
        return to_pascal_case(table_name) + self.base_dao_suffix

    @staticmethod
    def get_module_name(class_name: str) -> str:
        """Module holding a generated class, e.g. UserBaseBean -> user_base_bean."""
        return to_snake_case(class_name)

    def get_dao_factory_getter_name(self, table_name: str) -> str:
        """Accessor on the DAO factory, e.g. users -> get_user_dao."""
        return NamingDefaults.GETTER_PREFIX + to_snake_case(self.get_dao_class_name(table_name))

    # -- properties ----------------------------------------------------------

    @staticmethod
    def get_scalar_property_name(column_name: str) -> str:
        return clean_field_name(column_name)

    @staticmethod
    def get_object_property_name(
        local_columns: List[str],
        foreign_table_name: str,
        use_alternative_name: bool = False,
    ) -> str:
        """
        Name of the property representing a foreign key.

        A single-column key is named after its column without the id affix;
        a composite key is named after the singular referenced table.
        """
        if len(local_columns) == 1:
            name = strip_id_affix(local_columns[0])
            if use_alternative_name:
                name += NamingDefaults.ALTERNATIVE_OBJECT_SUFFIX
            return clean_field_name(name)

        name = singularize(to_snake_case(foreign_table_name))
        if use_alternative_name:
            name += "_by_" + "_and_".join(local_columns)
        return clean_field_name(name)

    @staticmethod
    def get_getter_name(property_name: str) -> str:
        return NamingDefaults.GETTER_PREFIX + property_name.rstrip("_")

    @staticmethod
    def get_setter_name(property_name: str) -> str:
        return NamingDefaults.SETTER_PREFIX + property_name.rstrip("_")

    # -- relationship methods ------------------------------------------------

    @staticmethod
    def get_direct_foreign_key_method_name(
        local_table_name: str,
        local_columns: List[str],
        use_alternative_name: bool = False,
    ) -> str:
        """Getter for the beans of another table pointing to this one."""
        name = NamingDefaults.GETTER_PREFIX + pluralize(clean_field_name(local_table_name))
        if use_alternative_name:
            name += "_by_" + _join_columns(local_columns)
        return name

    @staticmethod
    def get_pivot_method_name(
        prefix: str,
        remote_table_name: str,
        pivot_table_name: str,
        plural: bool,
        use_alternative_name: bool = False,
    ) -> str:
        """
        Name of one of the many-to-many methods (get_, add_, remove_, has_, set_).

        ``plural`` selects the plural remote bean name (get_roles, set_roles)
        over the singular one (add_role, has_role).
        """
        base = clean_field_name(singularize(to_snake_case(remote_table_name)))
        if plural:
            base = pluralize(base)
        name = prefix + base
        if use_alternative_name:
            name += "_by_" + clean_field_name(pivot_table_name)
        return name

    # -- finders -------------------------------------------------------------

    @staticmethod
    def get_finder_name(element_names: List[str]) -> str:
        return NamingDefaults.FINDER_PREFIX + "_and_".join(name.rstrip("_") for name in element_names)
