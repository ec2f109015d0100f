import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from datetime import datetime
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

# -------------------- Configuration --------------------
LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H-%M-%S"

LOG_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[32m",       # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[38;5;88m",  # Dark Red (ANSI 256-color)
}
RESET_COLOR = "\033[0m"

# Set by enable_file_logging(); stays None when no log directory is configured
LOG_FILEPATH: Path | None = None

# Every logger handed out by get_logger, so file logging can be attached late
_configured_loggers: dict[str, logging.Logger] = {}

# -------------------- Formatters --------------------
class ColorFormatter(logging.Formatter):
    """
    Log formatter that wraps each record in an ANSI color chosen by level.

    DEBUG is cyan, INFO green, WARNING yellow, ERROR red and CRITICAL dark red.
    """

    def format(self, record: logging.LogRecord) -> str:
        color = LOG_COLORS.get(record.levelname, "")
        message = super().format(record)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """
    Logging handler that prints through prompt_toolkit.

    Using print_formatted_text keeps log lines from tearing an active prompt
    and renders the ANSI colors portably.

    Args:
        formatter (logging.Formatter | None): Optional formatter to apply to log records.
    """

    def __init__(self, formatter: logging.Formatter | None = None):
        super().__init__()
        if formatter:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            print_formatted_text(ANSI(msg))
        except Exception:
            self.handleError(record)


plain_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def should_use_color() -> bool:
    """
    Return True when stderr is attached to a terminal.
    """
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


color_formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain_formatter


# -------------------- Logger Setup --------------------

def _build_file_handler(log_filepath: Path) -> RotatingFileHandler:
    file_handler = RotatingFileHandler(
        log_filepath,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(plain_formatter)
    return file_handler


def enable_file_logging(directory: str | Path) -> Path:
    """Start writing every Thread Herder logger to a session log file.

    The file is named after the session start time and created inside
    ``directory``. Loggers created before this call get the handler too.
    Calling it again is a no-op and returns the existing path.

    Parameters
    ----------
    directory:
        Directory that receives the log file. Created if missing.

    Returns
    -------
    Path
        Path of the session log file.
    """
    global LOG_FILEPATH

    if LOG_FILEPATH is not None:
        return LOG_FILEPATH

    logs_dir = Path(directory).resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)
    LOG_FILEPATH = logs_dir / (datetime.now().strftime(DATE_FORMAT) + ".log")

    for logger in _configured_loggers.values():
        logger.addHandler(_build_file_handler(LOG_FILEPATH))

    return LOG_FILEPATH


def setup_logger(logger_name: str) -> logging.Logger:
    """Configure and return a logger with a console handler.

    A rotating file handler is attached as well once
    :func:`enable_file_logging` has been called.

    Parameters
    ----------
    logger_name:
        Name of the logger to configure.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)

    if logger.handlers:
        return logger

    base_level = logging.DEBUG
    logger.setLevel(base_level)
    logger.propagate = False

    console_handler = PromptToolkitHandler(formatter=color_formatter)
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    if LOG_FILEPATH is not None:
        logger.addHandler(_build_file_handler(LOG_FILEPATH))

    _configured_loggers[logger_name] = logger
    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Retrieve a logger configured for Thread Herder, creating it if necessary.

    Parameters
    ----------
    logger_name:
        Name of the logger requested by the caller.

    Returns
    -------
    logging.Logger
        Logger instance ready for use.
    """
    return setup_logger(logger_name)


# -------------------- Exception Handling --------------------
def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    Global exception hook that logs uncaught exceptions.

    KeyboardInterrupt is passed to the default hook so Ctrl+C still exits normally.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
    else:
        logging.error("Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback))


# -------------------- Suppress Noisy Libraries --------------------
NOISY_LOGGERS = [
    "discord", "discord.gateway", "discord.client", "discord.http",
    "websockets", "aiohttp",
]

for noisy_logger in NOISY_LOGGERS:
    lg = logging.getLogger(noisy_logger)
    lg.setLevel(logging.ERROR)
    lg.propagate = False
    # Drop library handlers so nothing bypasses ours
    lg.handlers = []


sys.excepthook = handle_exception
