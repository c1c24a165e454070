"""
DAO Code Generation Main Module

This module turns an introspected schema into resolved bean descriptors and
writes the bean and DAO packages with the AST code generator.
"""

import logging
from typing import List

from dao_auto_generator.ast_codegen import PackageLayout, GenerationReport, generate_dao_package
from dao_auto_generator.colored_logging import log_highlight, log_progress
from dao_auto_generator.config_validation import ToolConfigSchema
from dao_auto_generator.domain.bean_descriptor import BeanDescriptor
from dao_auto_generator.domain.models import Schema
from dao_auto_generator.domain.naming import NamingStrategy
from dao_auto_generator.domain.schema_analyzer import SchemaAnalyzer


logger = logging.getLogger(__name__)


def create_package_layout(config: ToolConfigSchema, naming: NamingStrategy) -> PackageLayout:
    return PackageLayout(
        bean_package=config.bean_package,
        dao_package=config.dao_package,
        generated_subpackage=config.generated_subpackage,
        runtime_module=config.runtime_module,
        naming=naming,
    )


def build_bean_descriptors(
    analyzer: SchemaAnalyzer,
    naming: NamingStrategy,
    strict_finders: bool = False,
) -> List[BeanDescriptor]:
    """
    Build and resolve one bean descriptor per table, in schema order.

    Junction tables get no bean of their own: they surface as
    many-to-many methods on the two tables they link. The first error
    aborts the whole batch.
    """
    descriptors = []
    for table in analyzer.get_tables():
        if analyzer.is_junction_table(table.name):
            log_highlight(logger, f"Skipping junction table '{table.name}'")
            continue

        parent = analyzer.get_parent_table(table.name)
        if parent is not None:
            logger.debug(f"Detected inheritance: '{table.name}' extends '{parent.name}'")

        logger.debug(f"Resolving bean descriptor for table '{table.name}'")
        descriptor = BeanDescriptor(table, analyzer, naming=naming, strict_finders=strict_finders)
        descriptor.resolve()
        descriptors.append(descriptor)
    return descriptors


def generate_dao_code_for_schema(schema: Schema, config: ToolConfigSchema) -> GenerationReport:
    """
    Generate the bean and DAO packages of a schema.

    Args:
        schema: The introspected database schema
        config: Validated tool configuration

    Returns:
        The report of written and kept files
    """
    logger.info("Starting DAO code generation using AST...")
    naming = config.create_naming_strategy()
    analyzer = SchemaAnalyzer(schema)

    junction_tables = analyzer.detect_junction_tables()
    if junction_tables:
        log_highlight(logger, f"Found {len(junction_tables)} junction table(s): {sorted(table.name for table in junction_tables)}")

    log_progress(logger, "Resolving bean descriptors...")
    descriptors = build_bean_descriptors(analyzer, naming, strict_finders=config.strict_finders)

    log_progress(logger, f"Writing {len(descriptors)} beans and DAOs to {config.output_dir}...")
    return generate_dao_package(
        descriptors,
        config.output_dir,
        create_package_layout(config, naming),
        format_code=config.format_code,
    )
