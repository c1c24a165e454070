# File: tests/conftest.py
# Contains pytest fixtures building schema snapshots for the resolution engine tests.

import pytest

from dao_auto_generator.ast_codegen import PackageLayout
from dao_auto_generator.domain import (
    Column,
    ForeignKeyConstraint,
    Index,
    NamingStrategy,
    Schema,
    SchemaAnalyzer,
    Table,
)


def make_fk(name, local_table, local_columns, foreign_table, foreign_columns):
    return ForeignKeyConstraint(
        name=name,
        local_table_name=local_table,
        local_columns=list(local_columns),
        foreign_table_name=foreign_table,
        foreign_columns=list(foreign_columns),
    )


def pk(table_name, *columns):
    return Index(name=f"{table_name}_pkey", columns=list(columns), is_primary=True)


def build_sample_schema() -> Schema:
    """
    person <- contact <- users inheritance, a self reference on contact,
    users_roles and roles_rights junction tables, a composite foreign key
    from city to state and a warehouse table with multi-column finders.
    """
    person = Table(
        name="person",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("name", "CharField", nullable=False),
            Column("created_at", "DateTimeField", nullable=False, default="CURRENT_TIMESTAMP"),
            Column("modified_at", "DateTimeField", nullable=True),
        ],
        indexes=[pk("person", "id"), Index("person_name_idx", ["name"])],
    )

    contact = Table(
        name="contact",
        columns=[
            Column("id", "IntegerField", nullable=False),
            Column("email", "CharField", nullable=False),
            Column("manager_id", "IntegerField", nullable=True),
        ],
        indexes=[pk("contact", "id"), Index("contact_email_key", ["email"], is_unique=True)],
    )
    contact.foreign_keys = [
        make_fk("fk_contact_person", "contact", ["id"], "person", ["id"]),
        make_fk("fk_contact_manager", "contact", ["manager_id"], "contact", ["id"]),
    ]

    country = Table(
        name="country",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("label", "CharField", nullable=False),
        ],
        indexes=[pk("country", "id"), Index("country_label_key", ["label"], is_unique=True)],
    )

    users = Table(
        name="users",
        columns=[
            Column("id", "IntegerField", nullable=False),
            Column("login", "CharField", nullable=False),
            Column("password", "CharField", nullable=True),
            Column("status", "CharField", nullable=False, default="'active'::character varying"),
            Column("country_id", "IntegerField", nullable=False),
        ],
        indexes=[
            pk("users", "id"),
            Index("users_login_key", ["login"], is_unique=True),
            Index("users_country_idx", ["country_id"]),
        ],
    )
    users.foreign_keys = [
        make_fk("fk_users_contact", "users", ["id"], "contact", ["id"]),
        make_fk("fk_users_country", "users", ["country_id"], "country", ["id"]),
    ]

    roles = Table(
        name="roles",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("name", "CharField", nullable=False),
            Column("created_at", "DateField", nullable=True),
            Column("status", "BooleanField", nullable=False, default="true"),
        ],
        indexes=[pk("roles", "id")],
    )

    users_roles = Table(
        name="users_roles",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("user_id", "IntegerField", nullable=False),
            Column("role_id", "IntegerField", nullable=False),
        ],
        indexes=[pk("users_roles", "id")],
    )
    users_roles.foreign_keys = [
        make_fk("fk_users_roles_user", "users_roles", ["user_id"], "users", ["id"]),
        make_fk("fk_users_roles_role", "users_roles", ["role_id"], "roles", ["id"]),
    ]

    rights = Table(
        name="rights",
        columns=[Column("label", "CharField", nullable=False)],
        indexes=[pk("rights", "label")],
    )

    roles_rights = Table(
        name="roles_rights",
        columns=[
            Column("role_id", "IntegerField", nullable=False),
            Column("right_label", "CharField", nullable=False),
        ],
        indexes=[pk("roles_rights", "role_id", "right_label")],
    )
    roles_rights.foreign_keys = [
        make_fk("fk_roles_rights_role", "roles_rights", ["role_id"], "roles", ["id"]),
        make_fk("fk_roles_rights_right", "roles_rights", ["right_label"], "rights", ["label"]),
    ]

    state = Table(
        name="state",
        columns=[
            Column("country_id", "IntegerField", nullable=False),
            Column("code", "CharField", nullable=False),
            Column("name", "CharField", nullable=False),
        ],
        indexes=[pk("state", "country_id", "code")],
    )
    state.foreign_keys = [
        make_fk("fk_state_country", "state", ["country_id"], "country", ["id"]),
    ]

    city = Table(
        name="city",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("name", "CharField", nullable=False),
            Column("country_id", "IntegerField", nullable=False),
            Column("state_code", "CharField", nullable=False),
        ],
        indexes=[
            pk("city", "id"),
            Index("city_name_state_idx", ["name", "country_id", "state_code"]),
        ],
    )
    city.foreign_keys = [
        make_fk("fk_city_state", "city", ["country_id", "state_code"], "state", ["country_id", "code"]),
    ]

    warehouse = Table(
        name="warehouse",
        columns=[
            Column("id", "AutoField", nullable=False, is_auto_increment=True),
            Column("name", "CharField", nullable=False),
            Column("city_id", "IntegerField", nullable=True),
            Column("manager_id", "IntegerField", nullable=True),
            Column("capacity", "DecimalField", nullable=True, default="'10.50'::numeric"),
            Column("picture", "BinaryField", nullable=True),
            Column("reference", "UUIDField", nullable=True),
        ],
        indexes=[
            pk("warehouse", "id"),
            Index("warehouse_name_city_key", ["name", "city_id"], is_unique=True),
            Index("warehouse_name_manager_idx", ["name", "manager_id"]),
        ],
    )
    warehouse.foreign_keys = [
        make_fk("fk_warehouse_city", "warehouse", ["city_id"], "city", ["id"]),
        make_fk("fk_warehouse_manager", "warehouse", ["manager_id"], "users", ["id"]),
    ]

    return Schema(tables=[
        person, contact, country, users, roles, users_roles, rights, roles_rights, state, city, warehouse,
    ])


@pytest.fixture
def sample_schema() -> Schema:
    return build_sample_schema()


@pytest.fixture
def analyzer(sample_schema) -> SchemaAnalyzer:
    return SchemaAnalyzer(sample_schema)


@pytest.fixture
def naming() -> NamingStrategy:
    return NamingStrategy()


@pytest.fixture
def layout(naming) -> PackageLayout:
    return PackageLayout(naming=naming)
