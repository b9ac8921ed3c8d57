import logging
import sys
from pathlib import Path

import appdirs

APP_NAME = "YAM-Library"
APP_AUTHOR = "YAM"
LOGGER_NAME = "YAMLibrary"
CONSOLE_LEVEL = logging.WARNING


def get_log_path(log_file_name: str) -> Path:
    """Get the path of the log file inside the per-user log directory"""
    log_dir = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / log_file_name


def setup_logger(log_file_name="yam_library.log"):
    """
    Setups the initial logger.
    param: log_file_name: filename to be used for the logfile.
    return: logger instance created.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Check if the logger has already been configured
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)

        # stdout is reserved for command output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(CONSOLE_LEVEL)
        handlers = [console_handler]
        file_error = None
        try:
            handlers.append(logging.FileHandler(get_log_path(log_file_name), encoding="utf-8"))
        except OSError as e:
            file_error = e

        # Create formatter and add it to handlers
        log_format = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        for handler in handlers:
            handler.setFormatter(log_format)
            logger.addHandler(handler)

        # Prevent propagation to avoid duplicate logs
        logger.propagate = False

        if file_error is not None:
            logger.warning(f"Logging to console only, cannot open {log_file_name}: {file_error}")

    return logger


# Usage example
if __name__ == "__main__":
    logger = setup_logger()
    logger.info("This is a test log message")
    logger.info("This is a test logger.info message with an argument: %s", "test arg")
