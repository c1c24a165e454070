"""
Colored logging formatter for DAO Auto Generator.

Console output of a generation run is colored by level, and INFO/DEBUG
messages are further highlighted by what they report (a finished step, a
step in progress, a schema finding or a section header).
"""

import logging
import sys
from typing import Dict, Optional, Tuple


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter adding ANSI color codes to log messages.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '',
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    # Message categories, checked in order: (name, color, indicators)
    CATEGORIES: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
        ('success', '\033[92m' + BOLD, ('✓', 'successfully', 'complete', 'generated file', 'written')),
        ('progress', '\033[94m', ('→', 'resolving', 'rendering', 'introspecting', 'loading', 'writing')),
        ('highlight', '\033[96m', ('•', 'junction', 'inheritance', 'skipping', 'detected', 'found', 'kept')),
    )

    SECTION_MARKER = '=' * 20

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors; ignored when stderr is not a TTY
        """
        super().__init__(fmt or "%(levelname)s: %(message)s")
        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def classify(self, record: logging.LogRecord) -> Optional[str]:
        """Return the category of an INFO or DEBUG message, or None."""
        if record.levelno > logging.INFO:
            return None
        message = record.getMessage()
        if self.SECTION_MARKER in message:
            return 'section'
        lowered = message.lower()
        for name, _, indicators in self.CATEGORIES:
            if any(indicator in lowered for indicator in indicators):
                return name
        return None

    def _color_for(self, record: logging.LogRecord) -> str:
        category = self.classify(record)
        if category == 'section':
            return self.BOLD + '\033[96m'
        colors: Dict[str, str] = {name: color for name, color, _ in self.CATEGORIES}
        if category is not None:
            return colors[category]
        return self.COLORS.get(record.levelname, '')

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        color = self._color_for(record)
        if not color:
            return formatted_message
        return f"{color}{formatted_message}{self.RESET}"


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Install the colored formatter on the root logger.

    Existing root handlers are removed so that repeated calls do not
    duplicate output.
    """
    formatter = ColoredFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


# Convenience functions for special message types
def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"→ {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"• {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header."""
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {section_name.upper()}")
    logger.info(separator)
