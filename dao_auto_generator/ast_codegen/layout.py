"""
Package layout of the generated code.
"""

from dataclasses import dataclass, field
from pathlib import Path

from dao_auto_generator.constants import DefaultConfig, NamingDefaults
from dao_auto_generator.domain.naming import NamingStrategy


@dataclass
class PackageLayout:
    """
    Where generated classes live.

    Editable classes go to ``bean_package`` / ``dao_package``; the base
    classes and the DAO factory go to the ``generated_subpackage`` of each.
    """

    bean_package: str = DefaultConfig.BEAN_PACKAGE
    dao_package: str = DefaultConfig.DAO_PACKAGE
    generated_subpackage: str = DefaultConfig.GENERATED_SUBPACKAGE
    runtime_module: str = DefaultConfig.RUNTIME_MODULE
    naming: NamingStrategy = field(default_factory=NamingStrategy)

    @property
    def generated_bean_package(self) -> str:
        return f"{self.bean_package}.{self.generated_subpackage}"

    @property
    def generated_dao_package(self) -> str:
        return f"{self.dao_package}.{self.generated_subpackage}"

    def bean_module(self, class_name: str) -> str:
        return f"{self.bean_package}.{self.naming.get_module_name(class_name)}"

    def base_bean_module(self, class_name: str) -> str:
        return f"{self.generated_bean_package}.{self.naming.get_module_name(class_name)}"

    def dao_module(self, class_name: str) -> str:
        return f"{self.dao_package}.{self.naming.get_module_name(class_name)}"

    def base_dao_module(self, class_name: str) -> str:
        return f"{self.generated_dao_package}.{self.naming.get_module_name(class_name)}"

    @property
    def dao_factory_module(self) -> str:
        return f"{self.generated_dao_package}.{NamingDefaults.DAO_FACTORY_MODULE}"

    @staticmethod
    def module_path(output_dir: Path, module: str) -> Path:
        """File of a dotted module name below the output directory."""
        return Path(output_dir).joinpath(*module.split(".")).with_suffix(".py")
