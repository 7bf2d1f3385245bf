"""
Logging Setup
^^^^^^^^^^^^^
Provides a setup_logger function to configure logging from the
`logger.cfg` file shipped with the package.

Library modules only ever call `logging.getLogger(__name__)`; nothing is
configured until an application calls `setup_logger`.
"""
import configparser
import logging
import logging.config
import os
from typing import Optional

DEFAULT_CONFIG = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "logger.cfg"
)


def setup_logger(
    name: str = "ethereum_provider", config_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging from `config_file` (the packaged 'logger.cfg' by
    default) and return the logger called `name`.
    """
    config = configparser.ConfigParser()
    if not config.read(config_file or DEFAULT_CONFIG):
        raise FileNotFoundError(config_file or DEFAULT_CONFIG)
    logging.config.fileConfig(config, disable_existing_loggers=False)

    logger = logging.getLogger(name)

    return logger
