"""
Tests for writing the generated packages to disk.
"""

import ast
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from dao_auto_generator.ast_codegen import CodeGenerator, PackageLayout, generate_dao_package
from dao_auto_generator.ast_codegen.code_generator import CodeGeneratorFactory
from dao_auto_generator.ast_codegen_main import build_bean_descriptors
from dao_auto_generator.domain import NamingStrategy, SchemaAnalyzer
from dao_auto_generator.exceptions import CodeGenerationError

from conftest import build_sample_schema


class CodeGeneratorTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.tmp.name)
        self.layout = PackageLayout()
        self.descriptors = build_bean_descriptors(SchemaAnalyzer(build_sample_schema()), NamingStrategy())

    def tearDown(self):
        self.tmp.cleanup()


class TestGenerateDaoPackage(CodeGeneratorTestCase):
    """Test cases for generate_dao_package"""

    def test_junction_tables_get_no_bean(self):
        names = [descriptor.table_name for descriptor in self.descriptors]
        self.assertNotIn("users_roles", names)
        self.assertNotIn("roles_rights", names)
        self.assertIn("users", names)

    def test_files_are_laid_out_by_package(self):
        generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        expected = [
            "app/__init__.py",
            "app/beans/__init__.py",
            "app/beans/generated/__init__.py",
            "app/daos/__init__.py",
            "app/daos/generated/__init__.py",
            "app/beans/generated/user_base_bean.py",
            "app/beans/user_bean.py",
            "app/daos/generated/user_base_dao.py",
            "app/daos/user_dao.py",
            "app/daos/generated/dao_factory.py",
        ]
        for relative in expected:
            with self.subTest(path=relative):
                self.assertTrue((self.output_dir / relative).is_file())

        self.assertFalse((self.output_dir / "app/beans/users_role_bean.py").exists())

    def test_generated_files_are_valid_python(self):
        generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        for path in self.output_dir.rglob("*.py"):
            with self.subTest(path=str(path)):
                ast.parse(path.read_text(encoding="utf-8"))

    def test_editable_classes_extend_the_base_classes(self):
        generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        bean = (self.output_dir / "app/beans/user_bean.py").read_text(encoding="utf-8")
        self.assertIn("from app.beans.generated.user_base_bean import UserBaseBean", bean)
        self.assertIn("class UserBean(UserBaseBean):", bean)

        dao = (self.output_dir / "app/daos/user_dao.py").read_text(encoding="utf-8")
        self.assertIn("from app.daos.generated.user_base_dao import UserBaseDao", dao)
        self.assertIn("class UserDao(UserBaseDao):", dao)

    def test_black_formatting(self):
        generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=True)

        code = (self.output_dir / "app/beans/generated/user_base_bean.py").read_text(encoding="utf-8")
        self.assertIn('return self.get("login", "users")', code)
        ast.parse(code)

    def test_editable_files_are_never_overwritten(self):
        generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        editable = self.output_dir / "app/beans/user_bean.py"
        editable.write_text("# custom code\n", encoding="utf-8")
        base = self.output_dir / "app/beans/generated/user_base_bean.py"
        base.write_text("# stale\n", encoding="utf-8")

        report = generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        self.assertEqual(editable.read_text(encoding="utf-8"), "# custom code\n")
        self.assertIn("class UserBaseBean", base.read_text(encoding="utf-8"))
        self.assertIn(editable, report.kept)
        self.assertIn(base, report.written)

    def test_report_counts(self):
        report = generate_dao_package(self.descriptors, str(self.output_dir), self.layout, format_code=False)

        # 5 package files, 4 files per bean and the factory
        self.assertEqual(len(report.written), 5 + 4 * len(self.descriptors) + 1)
        self.assertEqual(report.kept, [])


class TestCodeGenerator(CodeGeneratorTestCase):
    """Test cases for the CodeGenerator facade"""

    def test_unknown_generator(self):
        with self.assertRaises(CodeGenerationError) as context:
            CodeGeneratorFactory.create("serializers")
        self.assertEqual(context.exception.context["component"], "serializers")

    def test_rendering_errors_are_wrapped(self):
        generator = CodeGenerator(str(self.output_dir), self.layout, format_code=False)
        descriptor = self.descriptors[0]

        with patch(
            "dao_auto_generator.ast_codegen.code_generator.generate_bean_code",
            side_effect=ValueError("boom"),
        ):
            with self.assertRaises(CodeGenerationError) as context:
                generator.generate_bean(descriptor)

        self.assertEqual(context.exception.context["component"], "base_bean")
        self.assertEqual(context.exception.context["table"], descriptor.table_name)

    def test_custom_layout(self):
        layout = PackageLayout(bean_package="model.beans", dao_package="model.daos", generated_subpackage="base")
        generate_dao_package(self.descriptors, str(self.output_dir), layout, format_code=False)

        self.assertTrue((self.output_dir / "model/beans/base/user_base_bean.py").is_file())
        self.assertTrue((self.output_dir / "model/daos/base/dao_factory.py").is_file())
        factory = (self.output_dir / "model/daos/base/dao_factory.py").read_text(encoding="utf-8")
        self.assertIn("from model.daos.user_dao import UserDao", factory)


if __name__ == "__main__":
    unittest.main()
