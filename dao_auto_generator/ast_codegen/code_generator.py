"""
DAO AST Code Generator

This module writes the generated bean and DAO packages to disk. Base
classes and the DAO factory are rendered from AST and always overwritten;
editable subclasses are rendered from Jinja2 templates and written only
once.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Type
from abc import ABC, abstractmethod
from jinja2 import Environment

from dao_auto_generator.ast_codegen.beans import generate_bean_code
from dao_auto_generator.ast_codegen.daos import generate_dao_code, generate_dao_factory_code
from dao_auto_generator.ast_codegen.layout import PackageLayout
from dao_auto_generator.codegen import generate_file_from_template, setup_jinja_env
from dao_auto_generator.codegen_utils import write_python_file
from dao_auto_generator.constants import GenerationOptions
from dao_auto_generator.domain.bean_descriptor import BeanDescriptor
from dao_auto_generator.exceptions import CodeGenerationError, DAOAutoGeneratorError

logger = logging.getLogger(__name__)

# ---- Design Patterns ----

# Strategy Pattern for different code generators
class CodeGeneratorStrategy(ABC):
    """Abstract Strategy for code generation"""

    @abstractmethod
    def generate_code(self, descriptors: List[BeanDescriptor], layout: PackageLayout, **kwargs) -> str:
        """Generate code for a specific component."""
        pass

# Concrete Strategy implementations
class BaseBeanGenerator(CodeGeneratorStrategy):
    """Generates the base bean of the ``descriptor`` keyword argument"""
    def generate_code(self, descriptors: List[BeanDescriptor], layout: PackageLayout, **kwargs) -> str:
        return generate_bean_code(kwargs["descriptor"], layout)

class BaseDaoGenerator(CodeGeneratorStrategy):
    """Generates the base DAO of the ``descriptor`` keyword argument"""
    def generate_code(self, descriptors: List[BeanDescriptor], layout: PackageLayout, **kwargs) -> str:
        return generate_dao_code(kwargs["descriptor"], layout)

class DaoFactoryGenerator(CodeGeneratorStrategy):
    """Generates the DAO factory of all beans"""
    def generate_code(self, descriptors: List[BeanDescriptor], layout: PackageLayout, **kwargs) -> str:
        return generate_dao_factory_code(descriptors, layout)


# Factory Pattern for creating generators
class CodeGeneratorFactory:
    """Factory for creating code generator strategies"""

    _registry: Dict[str, Type[CodeGeneratorStrategy]] = {
        'base_bean': BaseBeanGenerator,
        'base_dao': BaseDaoGenerator,
        'dao_factory': DaoFactoryGenerator,
    }

    @classmethod
    def register(cls, name: str, generator_class: Type[CodeGeneratorStrategy]) -> None:
        """Register a new generator strategy"""
        cls._registry[name] = generator_class

    @classmethod
    def create(cls, name: str) -> CodeGeneratorStrategy:
        """Create a generator strategy instance by name"""
        generator_class = cls._registry.get(name)
        if not generator_class:
            raise CodeGenerationError(f"Unknown generator type: {name}", component=name)
        return generator_class()


@dataclass
class GenerationReport:
    """Files touched by a generation run."""

    written: List[Path] = field(default_factory=list)
    kept: List[Path] = field(default_factory=list)

    def record(self, path: Path, written: bool) -> None:
        (self.written if written else self.kept).append(path)


# Facade Pattern for simplified interface
class CodeGenerator:
    """Facade for the code generation system"""

    def __init__(
        self,
        output_dir: str,
        layout: PackageLayout,
        env: Environment = None,
        format_code: bool = True,
    ):
        self.output_dir = Path(output_dir)
        self.layout = layout
        self.env = env or setup_jinja_env()
        self.format_code = format_code
        self.report = GenerationReport()

    def module_path(self, module: str) -> Path:
        return self.layout.module_path(self.output_dir, module)

    def generate_file(self, generator_name: str, output_path: Path, descriptors: List[BeanDescriptor], **kwargs) -> None:
        """Generate a file using a specific generator strategy, always overwriting it"""
        generator = CodeGeneratorFactory.create(generator_name)
        try:
            code = generator.generate_code(descriptors, self.layout, **kwargs)
        except DAOAutoGeneratorError:
            raise
        except (ValueError, TypeError, AttributeError, SyntaxError) as e:
            table = kwargs["descriptor"].table_name if "descriptor" in kwargs else None
            raise CodeGenerationError(
                f"Error generating '{output_path}': {e}", component=generator_name, table=table
            ) from e

        written = write_python_file(output_path, code, format_code=self.format_code)
        self.report.record(output_path, written)
        logger.info(f"Generated file: {output_path}")

    def generate_editable_file(self, template_name: str, output_path: Path, context: Dict[str, str]) -> None:
        """Generate an editable subclass from a template, unless the file already exists"""
        written = generate_file_from_template(
            self.env, template_name, context, output_path, overwrite=False, format_code=self.format_code
        )
        self.report.record(output_path, written)
        if written:
            logger.info(f"Generated file: {output_path}")
        else:
            logger.debug(f"Kept existing editable file: {output_path}")

    def ensure_packages(self) -> None:
        """Create the __init__.py files of every generated package."""
        packages = set()
        for package in (self.layout.generated_bean_package, self.layout.generated_dao_package):
            parts = package.split(".")
            for depth in range(1, len(parts) + 1):
                packages.add(tuple(parts[:depth]))

        for parts in sorted(packages):
            init_file = self.output_dir.joinpath(*parts) / "__init__.py"
            if init_file.exists():
                continue
            try:
                init_file.parent.mkdir(parents=True, exist_ok=True)
                init_file.touch()
            except OSError as e:
                raise CodeGenerationError(
                    f"Failed to create package file {init_file}: {e}", component="packages"
                ) from e
            self.report.record(init_file, True)

    def generate_bean(self, descriptor: BeanDescriptor) -> None:
        layout = self.layout
        self.generate_file(
            'base_bean',
            self.module_path(layout.base_bean_module(descriptor.base_bean_class_name)),
            [descriptor],
            descriptor=descriptor,
        )
        self.generate_editable_file(
            GenerationOptions.BEAN_TEMPLATE,
            self.module_path(layout.bean_module(descriptor.bean_class_name)),
            {
                'class_name': descriptor.bean_class_name,
                'base_class_name': descriptor.base_bean_class_name,
                'base_module': layout.base_bean_module(descriptor.base_bean_class_name),
                'table_name': descriptor.table_name,
            },
        )

    def generate_dao(self, descriptor: BeanDescriptor) -> None:
        layout = self.layout
        self.generate_file(
            'base_dao',
            self.module_path(layout.base_dao_module(descriptor.base_dao_class_name)),
            [descriptor],
            descriptor=descriptor,
        )
        self.generate_editable_file(
            GenerationOptions.DAO_TEMPLATE,
            self.module_path(layout.dao_module(descriptor.dao_class_name)),
            {
                'class_name': descriptor.dao_class_name,
                'base_class_name': descriptor.base_dao_class_name,
                'base_module': layout.base_dao_module(descriptor.base_dao_class_name),
                'bean_class_name': descriptor.bean_class_name,
                'table_name': descriptor.table_name,
            },
        )

    def generate_all(self, descriptors: List[BeanDescriptor]) -> GenerationReport:
        """Generate every bean, every DAO and the DAO factory."""
        self.ensure_packages()
        for descriptor in descriptors:
            self.generate_bean(descriptor)
            self.generate_dao(descriptor)
        self.generate_file('dao_factory', self.module_path(self.layout.dao_factory_module), descriptors)
        return self.report


# Helper function to simplify the code generation process
def generate_dao_package(
    descriptors: List[BeanDescriptor],
    output_dir: str,
    layout: PackageLayout,
    format_code: bool = True,
) -> GenerationReport:
    """Write the bean and DAO packages of the given descriptors"""
    generator = CodeGenerator(output_dir, layout, format_code=format_code)
    report = generator.generate_all(descriptors)

    logger.info(
        f"Successfully generated {len(descriptors)} beans and DAOs at {output_dir} "
        f"({len(report.written)} files written, {len(report.kept)} editable files kept)"
    )
    return report
