"""
Custom exception hierarchy for DAO Auto Generator.

Every error raised by the generator carries the offending table, column or
constraint in its context, plus suggestions on how to fix the schema or the
configuration. Generation is a one-shot deterministic compilation: none of
these errors is retried.
"""

from typing import Dict, Any, Optional, List


class DAOAutoGeneratorError(Exception):
    """
    Base exception for all DAO Auto Generator errors.

    Provides rich context and error recovery guidance.
    """

    default_suggestions: List[str] = []
    default_error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or list(self.default_suggestions)
        self.error_code = error_code or self.default_error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


def _build_context(base: Optional[Dict[str, Any]], **values: Any) -> Dict[str, Any]:
    """Merge non-empty keyword values into a context dictionary."""
    context = dict(base or {})
    for key, value in values.items():
        if value is not None:
            context[key] = value
    return context


class ConfigurationError(DAOAutoGeneratorError):
    """Raised when configuration is invalid or missing."""

    default_error_code = "CONFIG_ERROR"
    default_suggestions = [
        "Check the configuration file syntax",
        "Verify all required fields are present",
        "Check the documentation for configuration examples"
    ]

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = _build_context(kwargs.pop('context', None), config_file=config_file)
        super().__init__(message, context=context, **kwargs)


class SchemaIntrospectionError(DAOAutoGeneratorError):
    """Raised when database schema introspection fails."""

    default_error_code = "INTROSPECTION_ERROR"
    default_suggestions = [
        "Check database connection settings",
        "Verify the table/column exists in the database",
        "Check database user permissions",
        "Review the include/exclude table filters"
    ]

    def __init__(self, message: str, table: str = None, column: str = None, **kwargs):
        context = _build_context(kwargs.pop('context', None), table=table, column=column)
        super().__init__(message, context=context, **kwargs)


class SchemaIntegrityError(DAOAutoGeneratorError):
    """
    Raised when the schema cannot be turned into beans at all.

    Covers tables without a primary key, references to unknown tables and
    cyclic table inheritance. Aborts the whole run.
    """

    default_error_code = "SCHEMA_INTEGRITY_ERROR"
    default_suggestions = [
        "Add a primary key to every generated table",
        "Exclude the offending table with 'exclude_tables'",
        "Check that inheritance foreign keys do not form a cycle"
    ]

    def __init__(self, message: str, table: str = None, **kwargs):
        context = _build_context(kwargs.pop('context', None), table=table)
        super().__init__(message, context=context, **kwargs)


class NamingConflictError(DAOAutoGeneratorError):
    """
    Raised when two properties or two methods keep the same name even after
    alternative names were applied.
    """

    default_error_code = "NAMING_CONFLICT_ERROR"
    default_suggestions = [
        "Rename one of the conflicting columns or foreign keys",
        "Check for several single-column foreign keys pointing to the same table with similar column names"
    ]

    def __init__(self, message: str, table: str = None, name: str = None, **kwargs):
        context = _build_context(kwargs.pop('context', None), table=table, name=name)
        super().__init__(message, context=context, **kwargs)


class UnsupportedSchemaShapeError(DAOAutoGeneratorError):
    """
    Raised when a finder would need to follow a foreign key that points to
    another foreign key column (more than one hop).
    """

    default_error_code = "UNSUPPORTED_SCHEMA_SHAPE"
    default_suggestions = [
        "Point the foreign key to a primary key or a plain column instead",
        "Disable 'strict_finders' to skip this finder with a warning"
    ]

    def __init__(
        self,
        message: str,
        table: str = None,
        index: str = None,
        constraint: str = None,
        **kwargs
    ):
        context = _build_context(
            kwargs.pop('context', None), table=table, index=index, constraint=constraint
        )
        super().__init__(message, context=context, **kwargs)


class CodeGenerationError(DAOAutoGeneratorError):
    """Raised when rendering or writing generated code fails."""

    default_error_code = "CODE_GENERATION_ERROR"
    default_suggestions = [
        "Check that the output directory is writable",
        "Verify the configured package names are valid Python module paths"
    ]

    def __init__(self, message: str, component: str = None, table: str = None, **kwargs):
        context = _build_context(kwargs.pop('context', None), component=component, table=table)
        super().__init__(message, context=context, **kwargs)
