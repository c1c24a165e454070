"""
Tests for generating the bean and DAO packages of a whole schema.
"""

import ast
import logging

import pytest

from dao_auto_generator.ast_codegen_main import (
    build_bean_descriptors,
    create_package_layout,
    generate_dao_code_for_schema,
)
from dao_auto_generator.config_validation import validate_and_parse_config
from dao_auto_generator.exceptions import UnsupportedSchemaShapeError

from conftest import build_sample_schema


GENERATED_TABLES = ["person", "contact", "country", "users", "roles", "rights", "state", "city", "warehouse"]


def _config(output_dir, **overrides):
    values = {
        "databases": {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": "db.sqlite3"}},
        "output_dir": str(output_dir),
        "format_code": False,
    }
    values.update(overrides)
    return validate_and_parse_config(values)


class TestBuildBeanDescriptors:

    def test_one_resolved_descriptor_per_non_junction_table(self, analyzer, naming):
        descriptors = build_bean_descriptors(analyzer, naming)
        assert [descriptor.table_name for descriptor in descriptors] == GENERATED_TABLES

    def test_strict_finders_abort_the_batch(self, analyzer, naming):
        with pytest.raises(UnsupportedSchemaShapeError):
            build_bean_descriptors(analyzer, naming, strict_finders=True)


class TestGenerateDaoCodeForSchema:

    def test_sample_schema_is_generated(self, tmp_path, caplog):
        with caplog.at_level(logging.INFO):
            report = generate_dao_code_for_schema(build_sample_schema(), _config(tmp_path))

        assert "['roles_rights', 'users_roles']" in caplog.text
        # package files, four files per bean and the DAO factory
        assert len(report.written) == 5 + 4 * len(GENERATED_TABLES) + 1
        assert report.kept == []

        for relative in [
            "app/beans/generated/user_base_bean.py",
            "app/beans/role_bean.py",
            "app/daos/generated/warehouse_base_dao.py",
            "app/daos/city_dao.py",
            "app/daos/generated/dao_factory.py",
        ]:
            assert (tmp_path / relative).is_file()
        assert not (tmp_path / "app/beans/users_role_bean.py").exists()

        for path in report.written:
            ast.parse(path.read_text(encoding="utf-8"))

    def test_second_run_keeps_editable_files(self, tmp_path):
        config = _config(tmp_path)
        generate_dao_code_for_schema(build_sample_schema(), config)

        report = generate_dao_code_for_schema(build_sample_schema(), config)

        assert len(report.kept) == 2 * len(GENERATED_TABLES)
        assert tmp_path / "app/beans/user_bean.py" in report.kept

    def test_configured_names_are_used(self, tmp_path):
        config = _config(tmp_path, bean_package="model.beans", bean_suffix="", runtime_module="orm.runtime")

        generate_dao_code_for_schema(build_sample_schema(), config)

        code = (tmp_path / "model/beans/generated/user_base_bean.py").read_text(encoding="utf-8")
        assert "class UserBaseBean(Contact):" in code
        assert "from orm.runtime import" in code

    def test_strict_finders_from_the_configuration(self, tmp_path):
        with pytest.raises(UnsupportedSchemaShapeError):
            generate_dao_code_for_schema(build_sample_schema(), _config(tmp_path, strict_finders=True))


def test_create_package_layout(tmp_path, naming):
    layout = create_package_layout(_config(tmp_path, dao_package="model.daos", generated_subpackage="base"), naming)

    assert layout.bean_package == "app.beans"
    assert layout.dao_module("UserDao") == "model.daos.user_dao"
    assert layout.dao_factory_module == "model.daos.base.dao_factory"
