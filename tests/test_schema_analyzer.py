"""
Tests for SchemaAnalyzer: inheritance, junction tables and incoming foreign keys.
"""

import pytest

from dao_auto_generator.domain import Column, Index, Schema, SchemaAnalyzer, Table
from dao_auto_generator.exceptions import SchemaIntegrityError

from conftest import make_fk, pk


class TestInheritance:

    def test_parent_relationship_is_primary_key_to_primary_key(self, analyzer):
        fk = analyzer.get_parent_relationship("users")
        assert fk is not None
        assert fk.name == "fk_users_contact"
        assert analyzer.get_parent_relationship("person") is None

    def test_self_reference_is_not_inheritance(self, analyzer):
        assert analyzer.get_parent_relationship("contact").name == "fk_contact_person"
        manager_fk = analyzer.get_table("contact").foreign_keys[1]
        assert not analyzer.is_inheritance_link(manager_fk)

    def test_foreign_key_to_non_primary_columns_is_not_inheritance(self, analyzer):
        # state.country_id is only part of the composite primary key
        assert analyzer.get_parent_relationship("state") is None
        assert analyzer.get_parent_relationship("city") is None

    def test_inheritance_chain_is_root_first(self, analyzer):
        chain = analyzer.get_inheritance_chain("users")
        assert [table.name for table in chain] == ["person", "contact", "users"]
        assert [table.name for table in analyzer.get_inheritance_chain("person")] == ["person"]

    def test_parent_table(self, analyzer):
        assert analyzer.get_parent_table("users").name == "contact"
        assert analyzer.get_parent_table("country") is None

    def test_two_candidate_parents_mean_no_parent(self):
        a = Table("a", [Column("id", "IntegerField", nullable=False)], [pk("a", "id")])
        b = Table("b", [Column("id", "IntegerField", nullable=False)], [pk("b", "id")])
        c = Table("c", [Column("id", "IntegerField", nullable=False)], [pk("c", "id")])
        c.foreign_keys = [make_fk("fk_c_a", "c", ["id"], "a", ["id"]), make_fk("fk_c_b", "c", ["id"], "b", ["id"])]
        analyzer = SchemaAnalyzer(Schema([a, b, c]))

        assert analyzer.get_parent_relationship("c") is None

    def test_inheritance_cycle_is_an_integrity_error(self):
        a = Table("a", [Column("id", "IntegerField", nullable=False)], [pk("a", "id")])
        b = Table("b", [Column("id", "IntegerField", nullable=False)], [pk("b", "id")])
        a.foreign_keys = [make_fk("fk_a_b", "a", ["id"], "b", ["id"])]
        b.foreign_keys = [make_fk("fk_b_a", "b", ["id"], "a", ["id"])]
        analyzer = SchemaAnalyzer(Schema([a, b]))

        with pytest.raises(SchemaIntegrityError) as excinfo:
            analyzer.get_inheritance_chain("a")
        assert excinfo.value.context["table"] == "a"


class TestJunctionTables:

    def test_detects_junction_tables(self, analyzer):
        names = [table.name for table in analyzer.detect_junction_tables()]
        assert names == ["users_roles", "roles_rights"]
        assert analyzer.is_junction_table("users_roles")
        assert not analyzer.is_junction_table("warehouse")

    def test_table_with_extra_column_is_not_a_junction_table(self):
        left = Table("left", [Column("id", "AutoField", nullable=False, is_auto_increment=True)], [pk("left", "id")])
        right = Table("right", [Column("id", "AutoField", nullable=False, is_auto_increment=True)], [pk("right", "id")])
        link = Table(
            "link",
            [
                Column("left_id", "IntegerField", nullable=False),
                Column("right_id", "IntegerField", nullable=False),
                Column("weight", "IntegerField", nullable=True),
            ],
            [pk("link", "left_id", "right_id")],
        )
        link.foreign_keys = [
            make_fk("fk_link_left", "link", ["left_id"], "left", ["id"]),
            make_fk("fk_link_right", "link", ["right_id"], "right", ["id"]),
        ]

        assert SchemaAnalyzer(Schema([left, right, link])).detect_junction_tables() == []

    def test_referenced_table_is_not_a_junction_table(self, sample_schema):
        audit = Table(
            "audit",
            [
                Column("id", "AutoField", nullable=False, is_auto_increment=True),
                Column("user_role_id", "IntegerField", nullable=False),
            ],
            [pk("audit", "id")],
        )
        audit.foreign_keys = [make_fk("fk_audit_user_role", "audit", ["user_role_id"], "users_roles", ["id"])]
        sample_schema.tables.append(audit)

        analyzer = SchemaAnalyzer(sample_schema)
        assert not analyzer.is_junction_table("users_roles")
        assert analyzer.is_junction_table("roles_rights")


class TestIncomingForeignKeys:

    def test_excludes_junction_tables_and_inheritance_links(self, analyzer):
        assert [fk.name for fk in analyzer.get_incoming_foreign_keys("users")] == ["fk_warehouse_manager"]
        assert analyzer.get_incoming_foreign_keys("person") == []

    def test_includes_self_references(self, analyzer):
        assert [fk.name for fk in analyzer.get_incoming_foreign_keys("contact")] == ["fk_contact_manager"]

    def test_collects_every_referencing_table(self, analyzer):
        names = [fk.name for fk in analyzer.get_incoming_foreign_keys("country")]
        assert names == ["fk_users_country", "fk_state_country"]


class TestPrimaryKeys:

    def test_primary_key_columns(self, analyzer):
        assert analyzer.get_primary_key_columns_or_fail(analyzer.get_table("state")) == ["country_id", "code"]

    def test_missing_primary_key_fails(self):
        table = Table("log", [Column("message", "TextField")], [Index("log_message_idx", ["message"])])
        analyzer = SchemaAnalyzer(Schema([table]))

        with pytest.raises(SchemaIntegrityError):
            analyzer.get_primary_key_columns_or_fail(table)

    def test_unknown_table_fails(self, analyzer):
        with pytest.raises(SchemaIntegrityError):
            analyzer.get_table("missing")
