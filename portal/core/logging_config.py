import logging
import sys
import os
from typing import Optional

class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to log levels"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[1;91m',   # Bright Red Bold
        'CRITICAL': '\033[1;95m', # Bright Magenta Bold
        'RESET': '\033[0m'       # Reset
    }

    def __init__(self, format_string: str, use_colors: bool = True):
        super().__init__()
        self.use_colors = self._should_use_colors(use_colors)
        self.format_string = format_string
        self._plain = logging.Formatter(format_string)

    def _should_use_colors(self, use_colors: bool) -> bool:
        if not use_colors:
            return False

        if os.environ.get('NO_COLOR', '').lower() in ('1', 'true', 'yes'):
            return False

        if os.environ.get('FORCE_COLOR', '').lower() in ('1', 'true', 'yes'):
            return True

        if os.environ.get('TERM') == 'dumb':
            return False

        return sys.stdout.isatty()

    def format(self, record):
        if not self.use_colors:
            return self._plain.format(record)

        level_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        colored_format = self.format_string.replace(
            '%(levelname)s',
            f'{level_color}%(levelname)s{reset_color}'
        )
        # Light blue for logger names
        colored_format = colored_format.replace(
            '%(name)s',
            f'\033[94m%(name)s{reset_color}'
        )
        colored_format = colored_format.replace(
            '%(message)s',
            f'{level_color}%(message)s{reset_color}'
        )

        return logging.Formatter(colored_format).format(record)

def setup_logging(
    log_level: Optional[str] = None,
    format_string: Optional[str] = None,
    force_configure: bool = False,
    use_colors: bool = True
) -> None:
    """
    Setup logging configuration for the application with colors and formatting.
    """

    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")
    log_level = log_level.upper()

    if format_string is None:
        format_string = (
            '%(asctime)s │ %(name)-24s │ %(levelname)-8s │ '
            '[%(filename)s:%(lineno)d] │ %(message)s'
        )

    root_logger = logging.getLogger()

    if force_configure or not root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        numeric_level = logging.getLevelName(log_level)
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO
        root_logger.setLevel(numeric_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ColoredFormatter(format_string, use_colors=use_colors))
        root_logger.addHandler(console_handler)

        # SQL echo is noisy at DEBUG
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        # passlib warns about bcrypt version metadata on newer releases
        logging.getLogger("passlib").setLevel(logging.ERROR)

        root_logger.debug("Logging configured with level %s", log_level)

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.
    """
    logger = logging.getLogger(name)
    # Ensure it inherits from root logger and doesn't have its own handlers
    logger.handlers = []
    logger.propagate = True
    return logger
