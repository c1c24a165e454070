import logging
from pathlib import Path
from typing import Dict, Any
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
)

from dao_auto_generator.codegen_utils import write_python_file
from dao_auto_generator.constants import GenerationOptions
from dao_auto_generator.exceptions import CodeGenerationError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / GenerationOptions.TEMPLATE_DIR


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment for the editable class templates."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # Templates render Python source, not markup
        undefined=StrictUndefined,
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
    )
    return env


def render_template(env: Environment, template_name: str, context: Dict[str, Any]) -> str:
    """Renders a Jinja template to a string."""
    try:
        template = env.get_template(template_name)
        return template.render(context)
    except TemplateError as e:
        raise CodeGenerationError(
            f"Error rendering template '{template_name}': {e}",
            component="templates",
            context={'template': template_name},
        ) from e


def generate_file_from_template(
    env: Environment,
    template_name: str,
    context: Dict[str, Any],
    output_path: Path,
    overwrite: bool = False,
    format_code: bool = True,
) -> bool:
    """
    Renders a Jinja template and saves the output to the specified path.

    Editable classes are only written once: an existing file is kept
    unless ``overwrite`` is set.

    Returns:
        True if the file was written
    """
    if not overwrite and output_path.exists():
        logger.debug(f"Keeping existing file: {output_path}")
        return False

    rendered_content = render_template(env, template_name, context)
    written = write_python_file(output_path, rendered_content, format_code=format_code, overwrite=overwrite)
    if written:
        logger.debug(f"Generated file from template '{template_name}': {output_path}")
    return written
