"""
DAO AST Code Generator Module

This module provides the AST-based rendering of base beans, base DAOs and
the DAO factory from resolved bean descriptors.
"""

from .beans import generate_bean_code
from .daos import generate_dao_code, generate_dao_factory_code
from .layout import PackageLayout
from .code_generator import CodeGenerator, GenerationReport, generate_dao_package


__all__ = [
    'generate_bean_code',
    'generate_dao_code',
    'generate_dao_factory_code',
    'PackageLayout',
    'CodeGenerator',
    'GenerationReport',
    'generate_dao_package'
]
