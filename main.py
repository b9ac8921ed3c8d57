"""
YAM Library - command line entry point
"""

import logging

from yam_library.cli import cli
from yam_library.logger import setup_logger


if __name__ == "__main__":
    setup_logger()
    logging.getLogger("YAMLibrary").debug("YAM Library starting...")
    cli()
