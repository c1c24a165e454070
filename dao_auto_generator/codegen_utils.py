import logging
from pathlib import Path

import black
from black import (
    FileMode,
    format_str as black_format_str,
    NothingChanged as BlackNothingChanged,
)

from dao_auto_generator.constants import GenerationOptions
from dao_auto_generator.exceptions import CodeGenerationError


logger = logging.getLogger(__name__)

BLACK_FORMATTER_MODE = FileMode(line_length=GenerationOptions.DEFAULT_LINE_LENGTH)


def format_python_code_using_black(filepath: Path, code_string: str) -> str:
    """Formats the given Python code using Black."""
    try:
        formatted_code = black_format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {filepath}")
        return formatted_code
    except BlackNothingChanged:
        logger.debug(f"Black formatter did not change the code: {filepath}")
        return code_string
    except black.InvalidInput as e:
        logger.error(f"Could not format Python code using Black: {e}", exc_info=False)
        logger.warning(f"Writing unformatted Python code for {filepath}.")
        return code_string


def write_python_file(filepath: Path, code_string: str, format_code: bool = True, overwrite: bool = True) -> bool:
    """
    Write generated Python code to a file, creating parent directories.

    Args:
        filepath: Destination file
        code_string: Python source to write
        format_code: Run Black on the code before writing
        overwrite: When False, an existing file is left untouched

    Returns:
        True if the file was written, False if it already existed and was kept

    Raises:
        CodeGenerationError: If the file cannot be written
    """
    if not overwrite and filepath.exists():
        logger.debug(f"Keeping existing file: {filepath}")
        return False

    if format_code:
        code_string = format_python_code_using_black(filepath, code_string)

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(code_string, encoding="utf-8")
    except OSError as e:
        raise CodeGenerationError(
            f"Failed to write {filepath}: {e}",
            component="writer",
            context={'path': str(filepath)},
        ) from e

    logger.debug(f"Wrote {filepath}")
    return True
