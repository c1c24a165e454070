"""
Tests for the conversion of Django introspection results into a Schema.
"""

import unittest
from collections import namedtuple
from unittest.mock import MagicMock, patch

from django.db.utils import DatabaseError

from dao_auto_generator.config_validation import DatabaseSettings
from dao_auto_generator.domain import FieldType
from dao_auto_generator.exceptions import ConfigurationError, SchemaIntrospectionError
from dao_auto_generator.introspection_django import (
    RawTableDescription,
    build_column,
    build_schema,
    introspect_schema_django,
    setup_django,
)


FieldInfo = namedtuple("FieldInfo", "name type_code null_ok default is_autofield comment")
TableInfo = namedtuple("TableInfo", "name type")

MODULE = "dao_auto_generator.introspection_django"


def _constraint(columns, primary_key=False, unique=False, index=False, foreign_key=None, check=False):
    return {
        "columns": columns,
        "primary_key": primary_key,
        "unique": unique,
        "index": index,
        "foreign_key": foreign_key,
        "check": check,
    }


class TestBuildColumn(unittest.TestCase):
    """Test cases for build_column"""

    def test_plain_column(self):
        column = build_column(FieldInfo("login", 1043, False, "'guest'", False, "User login"), "CharField")
        self.assertEqual(column.name, "login")
        self.assertFalse(column.nullable)
        self.assertEqual(column.default, "'guest'")
        self.assertEqual(column.comment, "User login")
        self.assertFalse(column.is_auto_increment)
        self.assertIs(column.field_type, FieldType.STRING)

    def test_auto_increment_column_drops_its_sequence_default(self):
        column = build_column(FieldInfo("id", 23, False, "nextval('users_id_seq')", True, None), "IntegerField")
        self.assertTrue(column.is_auto_increment)
        self.assertIsNone(column.default)

    def test_auto_field_type_name(self):
        description = namedtuple("OldFieldInfo", "name type_code null_ok")("id", 23, False)
        column = build_column(description, "BigAutoField")
        self.assertTrue(column.is_auto_increment)
        self.assertIsNone(column.comment)


class TestBuildSchema(unittest.TestCase):
    """Test cases for build_schema"""

    def setUp(self):
        self.country = RawTableDescription(
            name="country",
            columns=[build_column(FieldInfo("id", 23, False, None, True, None), "AutoField")],
            constraints={"country_pkey": _constraint(["id"], primary_key=True, unique=True, index=True)},
        )
        self.state = RawTableDescription(
            name="state",
            columns=[
                build_column(FieldInfo("country_id", 23, False, None, False, None), "IntegerField"),
                build_column(FieldInfo("code", 1043, False, None, False, None), "CharField"),
            ],
            constraints={
                "state_pkey": _constraint(["country_id", "code"], primary_key=True, unique=True),
                "fk_state_country": _constraint(["country_id"], foreign_key=("country", "id")),
            },
        )
        self.city = RawTableDescription(
            name="city",
            columns=[
                build_column(FieldInfo("id", 23, False, None, True, None), "AutoField"),
                build_column(FieldInfo("country_id", 23, False, None, False, None), "IntegerField"),
                build_column(FieldInfo("state_code", 1043, False, None, False, None), "CharField"),
                build_column(FieldInfo("zone_id", 23, True, None, False, None), "IntegerField"),
            ],
            constraints={
                "city_pkey": _constraint(["id"], primary_key=True, unique=True),
                "fk_city_state": _constraint(["country_id", "state_code"], foreign_key=("state", "country_id")),
                "city_zone_idx": _constraint(["zone_id"], index=True),
                "city_zone_check": _constraint(["zone_id"], index=True, check=True),
            },
            relations={"zone_id": ("id", "zone")},
        )

    def test_indexes(self):
        city = build_schema([self.country, self.state, self.city]).get_table("city")
        self.assertEqual([index.name for index in city.indexes], ["city_pkey", "city_zone_idx"])
        self.assertTrue(city.indexes[0].is_primary)
        self.assertFalse(city.indexes[1].is_unique)

    def test_primary_key_from_primary_key_column(self):
        raw = RawTableDescription(
            name="tag",
            columns=[build_column(FieldInfo("id", 23, False, None, True, None), "AutoField")],
            primary_key_column="id",
        )
        table = build_schema([raw]).get_table("tag")
        self.assertEqual(table.primary_key_columns, ["id"])
        self.assertEqual(table.indexes[0].name, "tag_pkey")

    def test_composite_foreign_key_targets_the_primary_key(self):
        city = build_schema([self.country, self.state, self.city]).get_table("city")
        fk = city.foreign_keys[0]
        self.assertEqual(fk.name, "fk_city_state")
        self.assertEqual(fk.local_columns, ["country_id", "state_code"])
        self.assertEqual(fk.foreign_columns, ["country_id", "code"])

    def test_foreign_keys_to_unknown_tables_are_skipped(self):
        with self.assertLogs(MODULE, level="WARNING") as logs:
            city = build_schema([self.country, self.state, self.city]).get_table("city")

        self.assertEqual([fk.name for fk in city.foreign_keys], ["fk_city_state"])
        self.assertIn("fk_city_zone_id", logs.output[0])

    def test_relations_without_constraint_become_foreign_keys(self):
        self.city.relations = {"zone_id": ("id", "country")}
        city = build_schema([self.country, self.state, self.city]).get_table("city")
        self.assertEqual([fk.name for fk in city.foreign_keys], ["fk_city_state", "fk_city_zone_id"])
        self.assertEqual(city.foreign_keys[1].foreign_table_name, "country")

    def test_unresolvable_composite_foreign_key(self):
        self.city.constraints["fk_city_state"] = _constraint(
            ["country_id", "state_code"], foreign_key=("country", "id")
        )
        with self.assertRaises(SchemaIntrospectionError) as context:
            build_schema([self.country, self.state, self.city])
        self.assertEqual(context.exception.context["constraint"], "fk_city_state")


class TestIntrospectSchemaDjango(unittest.TestCase):
    """Test cases for introspect_schema_django with a mocked connection"""

    def setUp(self):
        self.cursor = MagicMock()
        self.introspector = MagicMock()
        self.introspector.get_table_list.return_value = [
            TableInfo("users", "t"),
            TableInfo("audit", "t"),
            TableInfo("active_users", "v"),
        ]
        self.introspector.get_table_description.side_effect = lambda cursor, name: [
            FieldInfo("id", 23, False, None, True, None),
            FieldInfo("login", 1043, False, None, False, None),
        ]
        self.introspector.get_field_type.side_effect = (
            lambda type_code, description: "AutoField" if type_code == 23 else "CharField"
        )
        self.introspector.get_constraints.side_effect = lambda cursor, name: {
            f"{name}_pkey": _constraint(["id"], primary_key=True, unique=True),
        }
        self.introspector.get_relations.return_value = {}
        self.introspector.get_primary_key_column.return_value = "id"

        self.connection = MagicMock()
        self.connection.introspection = self.introspector
        self.connection.cursor.return_value.__enter__.return_value = self.cursor

        patcher = patch(f"{MODULE}.connections", {"default": self.connection})
        patcher.start()
        self.addCleanup(patcher.stop)
        setup_patcher = patch(f"{MODULE}._django_setup_done", True)
        setup_patcher.start()
        self.addCleanup(setup_patcher.stop)

    def test_views_are_skipped(self):
        schema = introspect_schema_django()
        self.assertEqual([table.name for table in schema.tables], ["users", "audit"])
        users = schema.get_table("users")
        self.assertEqual([column.name for column in users.columns], ["id", "login"])
        self.assertTrue(users.get_column("id").is_auto_increment)

    def test_include_and_exclude(self):
        schema = introspect_schema_django(include_tables=["users", "audit"], exclude_tables=["audit"])
        self.assertEqual([table.name for table in schema.tables], ["users"])

    def test_relations_not_implemented(self):
        self.introspector.get_relations.side_effect = NotImplementedError
        schema = introspect_schema_django(include_tables=["users"])
        self.assertEqual(schema.get_table("users").foreign_keys, [])

    def test_database_errors_are_wrapped(self):
        self.introspector.get_constraints.side_effect = DatabaseError("permission denied")
        with self.assertRaises(SchemaIntrospectionError) as context:
            introspect_schema_django()
        self.assertEqual(context.exception.context["table"], "users")

    def test_requires_setup(self):
        with patch(f"{MODULE}._django_setup_done", False):
            with self.assertRaises(SchemaIntrospectionError):
                introspect_schema_django()


class TestSetupDjango(unittest.TestCase):
    """Test cases for setup_django"""

    def setUp(self):
        # An explicit replacement keeps mock from inspecting the unconfigured LazySettings
        self.mock_settings = MagicMock()
        self.mock_django = MagicMock()
        for patcher in (
            patch(f"{MODULE}._django_setup_done", False),
            patch(f"{MODULE}.django", new=self.mock_django),
            patch(f"{MODULE}.settings", new=self.mock_settings),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_configures_settings_once(self):
        databases = {"default": DatabaseSettings(ENGINE="django.db.backends.postgresql", NAME="app", PORT="5432")}

        setup_django(databases, "secret")
        setup_django(databases, "secret")

        self.mock_settings.configure.assert_called_once()
        kwargs = self.mock_settings.configure.call_args.kwargs
        self.assertEqual(kwargs["SECRET_KEY"], "secret")
        self.assertEqual(
            kwargs["DATABASES"]["default"],
            {"ENGINE": "django.db.backends.postgresql", "NAME": "app", "PORT": 5432, "OPTIONS": {}},
        )
        self.mock_django.setup.assert_called_once()

    def test_invalid_settings_type(self):
        with self.assertRaises(ConfigurationError):
            setup_django({"default": "sqlite"}, "secret")
        self.mock_settings.configure.assert_not_called()


if __name__ == "__main__":
    unittest.main()
