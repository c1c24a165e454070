"""
Tests for NameConflictResolver on properties and relationship methods.
"""

from unittest import TestCase

from dao_auto_generator.domain import (
    Column,
    DirectForeignKeyMethodDescriptor,
    NameConflictResolver,
    NamingStrategy,
    PropertyResolver,
    Schema,
    SchemaAnalyzer,
    Table,
)
from dao_auto_generator.exceptions import NamingConflictError

from conftest import make_fk, pk


def _country_table():
    return Table(
        "country",
        [Column("id", "AutoField", nullable=False, is_auto_increment=True)],
        [pk("country", "id")],
    )


class TestPropertyConflicts(TestCase):
    """Test cases for the two-pass property resolution"""

    def _resolve(self, table, *others):
        schema = Schema(list(others) + [table])
        return PropertyResolver(SchemaAnalyzer(schema), NamingStrategy()).resolve_for_table(table)

    def test_both_colliding_properties_switch_to_alternative_names(self):
        address = Table(
            "address",
            [
                Column("id", "AutoField", nullable=False, is_auto_increment=True),
                Column("country", "CharField", nullable=True),
                Column("country_id", "IntegerField", nullable=True),
            ],
            [pk("address", "id")],
        )
        address.foreign_keys = [make_fk("fk_address_country", "address", ["country_id"], "country", ["id"])]

        properties = self._resolve(address, _country_table())

        self.assertEqual(list(properties), ["id", "country", "country_object"])
        self.assertTrue(properties["country"].uses_alternative_name)
        self.assertTrue(properties["country_object"].uses_alternative_name)
        self.assertFalse(properties["id"].uses_alternative_name)
        self.assertEqual(properties["country_object"].getter_name, "get_country_object")

    def test_unsolvable_conflict_names_table_and_property(self):
        address = Table(
            "address",
            [
                Column("id", "AutoField", nullable=False, is_auto_increment=True),
                Column("country", "CharField", nullable=True),
                Column("country_id", "IntegerField", nullable=True),
                Column("country_object", "CharField", nullable=True),
            ],
            [pk("address", "id")],
        )
        address.foreign_keys = [make_fk("fk_address_country", "address", ["country_id"], "country", ["id"])]

        with self.assertRaises(NamingConflictError) as context:
            self._resolve(address, _country_table())

        self.assertEqual(context.exception.context["table"], "address")
        self.assertEqual(context.exception.context["name"], "get_country_object")

    def test_keyword_column_collides_on_getter_name(self):
        lesson = Table(
            "lesson",
            [
                Column("id", "AutoField", nullable=False, is_auto_increment=True),
                Column("class", "CharField", nullable=True),
                Column("class_id", "IntegerField", nullable=True),
            ],
            [pk("lesson", "id")],
        )
        klass = Table("class", [Column("id", "AutoField", nullable=False, is_auto_increment=True)], [pk("class", "id")])
        lesson.foreign_keys = [make_fk("fk_lesson_class", "lesson", ["class_id"], "class", ["id"])]

        properties = self._resolve(lesson, klass)

        getters = [descriptor.getter_name for descriptor in properties.values()]
        self.assertEqual(getters, ["get_id", "get_class", "get_class_object"])


class TestMethodConflicts(TestCase):
    """Test cases for grouped relationship method resolution"""

    def setUp(self):
        self.users = Table("users", [Column("id", "AutoField", nullable=False, is_auto_increment=True)],
                           [pk("users", "id")])
        self.naming = NamingStrategy()

    def _descriptor(self, column):
        fk = make_fk(f"fk_messages_{column}", "messages", [column], "users", ["id"])
        return DirectForeignKeyMethodDescriptor(fk, self.users, self.naming)

    def test_every_member_of_a_group_is_flipped(self):
        sender = self._descriptor("sender_id")
        recipient = self._descriptor("recipient_id")

        NameConflictResolver().resolve_methods("users", [sender, recipient])

        self.assertEqual(sender.name, "get_messages_by_sender_id")
        self.assertEqual(recipient.name, "get_messages_by_recipient_id")

    def test_unique_names_are_kept(self):
        sender = self._descriptor("sender_id")

        NameConflictResolver().resolve_methods("users", [sender])

        self.assertFalse(sender.uses_alternative_name)
        self.assertEqual(sender.name, "get_messages")
