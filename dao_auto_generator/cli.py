import argparse
import logging
import sys

from dao_auto_generator.introspection_django import setup_django, introspect_schema_django
from dao_auto_generator.config_validation import load_config
from dao_auto_generator.ast_codegen_main import generate_dao_code_for_schema
from dao_auto_generator.exceptions import DAOAutoGeneratorError
from dao_auto_generator.colored_logging import (
    setup_colored_logging,
    log_success,
    log_progress,
    log_section,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dao-auto-generator",
        description="Generate bean and DAO classes from an existing database schema using Django introspection.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file (containing Django DATABASES dict).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory to generate the bean and DAO packages in. Overrides config file setting.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "--strict-finders",
        action="store_true",
        default=None,
        help="Abort when an index finder needs an unsupported foreign key chain instead of skipping it.",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        # 1. Load Configuration
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        logger.debug(f"Effective configuration loaded: {config.model_dump(exclude={'SECRET_KEY'})}")

        # 2. Setup Django Environment
        setup_django(config.databases, config.SECRET_KEY)

        # 3. Introspect Database Schema
        log_section(logger, "Database Schema Introspection")
        schema = introspect_schema_django(
            include_tables=config.include_tables,
            exclude_tables=config.exclude_tables,
        )
        if not schema.tables:
            logger.warning("Introspection did not find any tables matching the criteria. Exiting.")
            return 0

        # 4. Generate beans and DAOs
        log_section(logger, "Bean and DAO Generation")
        report = generate_dao_code_for_schema(schema, config)

        # --- Success ---
        log_section(logger, "Completion")
        log_success(
            logger,
            f"Generation completed successfully: {len(report.written)} files written, "
            f"{len(report.kept)} editable files kept.",
        )
        return 0

    # --- Error Handling ---
    except DAOAutoGeneratorError as e:
        logger.error(str(e), exc_info=args.verbose)
        return 1
    except ImportError as e:
        logger.error(
            f"Import Error: {e}. Ensure Django and necessary database drivers are installed.",
            exc_info=args.verbose,
        )
        logger.error("Example: pip install django psycopg2-binary (for PostgreSQL)")
        return 1


# --- Script Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
