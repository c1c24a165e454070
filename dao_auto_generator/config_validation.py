from argparse import Namespace
import logging
import os
from typing import List, Optional, Dict, Any
from pathlib import Path

import yaml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
    ConfigDict,
)

from dao_auto_generator.constants import DefaultConfig, NamingDefaults, SupportedDatabases
from dao_auto_generator.domain.naming import NamingStrategy, validate_python_identifier
from dao_auto_generator.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# --- Pydantic Models for Configuration Schema ---
class DatabaseSettings(BaseModel):
    """Schema for a single database connection within the DATABASES dict."""

    ENGINE: str = Field(
        ...,
        min_length=1,
        description="Django database engine (e.g., 'django.db.backends.postgresql').",
    )
    NAME: str = Field(..., min_length=1, description="Database name.")
    USER: Optional[str] = Field(default=None, description="Database user.")
    PASSWORD: Optional[str] = Field(default=None, description="Database password.")
    HOST: Optional[str] = Field(default=None, description="Database host address.")
    PORT: Optional[int] = Field(default=None, description="Database port number.")
    OPTIONS: Dict[str, Any] = Field(
        default_factory=dict, description="Database engine specific options."
    )

    @field_validator("ENGINE")
    @classmethod
    def validate_engine(cls, v: str) -> str:
        """Ensure engine is a supported Django database engine."""
        if v not in SupportedDatabases.SUPPORTED:
            raise ValueError(
                f"Database engine: {v} is not supported. "
                f"Supported engines are: {', '.join(SupportedDatabases.SUPPORTED)}"
            )
        return v

    @field_validator("PORT", mode="before")
    @classmethod
    def validate_port(cls, v: Any) -> Optional[int]:
        """Ensure port is a number or string representation of one, and within range."""
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            raise ValueError("Port must be an integer, got a boolean")
        if isinstance(v, int):
            port_num = v
        elif isinstance(v, str):
            if not v.isdigit():
                raise ValueError(
                    f"Port must be a number or string containing only digits, got '{v}'"
                )
            port_num = int(v)
        else:
            raise ValueError(
                f"Port must be an integer or string containing digits, got {type(v).__name__}"
            )

        if not 0 <= port_num <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {port_num}")
        return port_num


class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    databases: Dict[str, DatabaseSettings] = Field(
        ...,
        description="Django DATABASES setting dictionary. Must contain a 'default' key.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Root directory the generated packages are written to.",
    )
    bean_package: str = Field(
        DefaultConfig.BEAN_PACKAGE,
        min_length=1,
        description="Dotted package of the editable bean classes.",
    )
    dao_package: str = Field(
        DefaultConfig.DAO_PACKAGE,
        min_length=1,
        description="Dotted package of the editable DAO classes.",
    )
    generated_subpackage: str = Field(
        DefaultConfig.GENERATED_SUBPACKAGE,
        min_length=1,
        description="Subpackage (of bean_package and dao_package) holding the regenerated base classes.",
    )
    runtime_module: str = Field(
        DefaultConfig.RUNTIME_MODULE,
        min_length=1,
        description="Module providing AbstractTDBMObject, ResultIterator and TDBMService.",
    )
    bean_suffix: str = Field(NamingDefaults.BEAN_SUFFIX, description="Suffix of bean class names.")
    base_bean_suffix: str = Field(NamingDefaults.BASE_BEAN_SUFFIX, min_length=1, description="Suffix of base bean class names.")
    dao_suffix: str = Field(NamingDefaults.DAO_SUFFIX, min_length=1, description="Suffix of DAO class names.")
    base_dao_suffix: str = Field(NamingDefaults.BASE_DAO_SUFFIX, min_length=1, description="Suffix of base DAO class names.")
    include_tables: Optional[List[str]] = Field(
        default=None,
        description="Optional list of specific table names (strings) to include.",
    )
    exclude_tables: Optional[List[str]] = Field(
        default=None, description="Optional list of table names (strings) to exclude."
    )
    strict_finders: bool = Field(
        default=DefaultConfig.STRICT_FINDERS,
        description="Abort instead of skipping finders that need unsupported foreign key chains.",
    )
    format_code: bool = Field(
        default=DefaultConfig.FORMAT_CODE,
        description="Format generated code with Black.",
    )

    # Internal field, usually added by load_config if not provided by user
    SECRET_KEY: Optional[str] = Field(
        default=None, description="Internal secret key for Django setup."
    )

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
    )

    @field_validator("bean_package", "dao_package", "runtime_module")
    @classmethod
    def check_dotted_module(cls, v: str) -> str:
        """Validate a dotted Python module path."""
        if not all(validate_python_identifier(part) for part in v.split(".")):
            raise ValueError(f"'{v}' is not a valid dotted Python module path.")
        return v

    @field_validator("generated_subpackage")
    @classmethod
    def check_valid_identifier(cls, v: str) -> str:
        if not validate_python_identifier(v):
            raise ValueError(f"'{v}' is not a valid Python identifier or is a reserved keyword.")
        return v

    @field_validator("include_tables", "exclude_tables", mode="before")
    @classmethod
    def check_table_names_list(cls, v: Optional[List[Any]]) -> Optional[List[str]]:
        """Ensure items in table lists are non-empty strings."""
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("include_tables/exclude_tables must be a list.")
        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            stripped_item = item.strip()
            if not stripped_item:
                raise ValueError(
                    f"Item at index {index} cannot be empty or just whitespace."
                )
            processed_list.append(stripped_item)
        return processed_list

    @model_validator(mode="after")
    def check_cross_fields(self) -> "ToolConfigSchema":
        """Perform cross-field validation checks."""
        if "default" not in self.databases:
            raise ValueError(
                "The 'databases' configuration dictionary must contain a 'default' key."
            )

        if self.bean_package == self.dao_package:
            raise ValueError("'bean_package' and 'dao_package' must be different packages.")

        if self.bean_suffix == self.base_bean_suffix or self.dao_suffix == self.base_dao_suffix:
            raise ValueError("Base class suffixes must differ from the editable class suffixes.")

        if self.include_tables and self.exclude_tables:
            overlap = set(self.include_tables) & set(self.exclude_tables)
            if overlap:
                logger.warning(f"Tables both included and excluded will be excluded: {sorted(overlap)}")

        return self

    def create_naming_strategy(self) -> NamingStrategy:
        return NamingStrategy(
            bean_suffix=self.bean_suffix,
            base_bean_suffix=self.base_bean_suffix,
            dao_suffix=self.dao_suffix,
            base_dao_suffix=self.base_dao_suffix,
        )


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the ToolConfigSchema.

    Raises:
        ConfigurationError: Listing every validation error
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
    except ValidationError as e:
        errors = {}
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            errors[loc_str] = error.get("msg", "Unknown validation error")
        raise ConfigurationError(
            f"Configuration validation failed with {len(errors)} error(s)",
            config_file=config_file,
            context=errors,
        ) from e

    logger.debug("Configuration dictionary parsed and validated successfully against schema.")
    return validated_config


def read_config_file(config_path: str) -> Dict[str, Any]:
    """
    Read a YAML configuration file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    config_file = Path(config_path)
    if not config_file.is_file():
        raise ConfigurationError(f"Config file not found at {config_path}", config_file=config_path)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {config_path}: {e}", config_file=config_path) from e

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Content in config file {config_path} is not a mapping", config_file=config_path
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


def load_config(config_path: Optional[str], cli_args: Namespace) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    """
    raw_config: Dict[str, Any] = read_config_file(config_path) if config_path else {}

    # CLI arguments override file values, only when explicitly provided
    overridden_keys = set()
    for key, value in vars(cli_args).items():
        if value is not None and key != "databases" and key in ToolConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    # Needed by django.setup()
    if "SECRET_KEY" not in raw_config:
        raw_config["SECRET_KEY"] = os.urandom(50).hex()

    logger.info("Loading and validating configuration...")
    validated_config = validate_and_parse_config(raw_config, config_file=config_path)

    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())
    logger.info("Configuration loaded and validated successfully.")
    return validated_config
