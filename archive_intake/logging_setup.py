"""
Logging configuration for the archive intake tool.
"""

import datetime
import logging
import os
import sys
from typing import Optional


def setup_logging(config, log_prefix: Optional[str] = None) -> None:
    """
    Configure logging based on settings.

    Args:
        config: Application configuration (AppConfig)
        log_prefix: Optional prefix for the log file name
    """
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.debug_mode:
        log_level = logging.DEBUG
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    log_file = config.log_file

    # Timestamped log file when only a prefix is given
    if not log_file and log_prefix:
        timestamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        log_file = f"{log_prefix}_{timestamp}.log"

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            filename=log_file,
            level=log_level,
            format=log_format
        )

        # Mirror to console in debug mode
        if config.debug_mode:
            console = logging.StreamHandler(sys.stdout)
            console.setLevel(log_level)
            console.setFormatter(logging.Formatter(log_format))
            logging.getLogger('').addHandler(console)
    else:
        logging.basicConfig(
            level=log_level,
            format=log_format
        )

    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    provider_type = getattr(config.provider, 'provider_type', 'unknown')
    logging.info(f"Logging initialized. Using AI provider: {provider_type}")

    if config.debug_mode:
        logging.debug("Debug mode enabled")
        logging.debug(f"Python version: {sys.version}")
        logging.debug(f"Platform: {sys.platform}")
        logging.debug(f"Configuration summary:")
        logging.debug(f"  Store path: {config.store_path}")
        logging.debug(f"  Autosave delay: {config.autosave_delay_ms} ms")
        logging.debug(f"  Max retries: {config.max_retries}")
        logging.debug(f"  Max workers: {config.max_workers}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Name for the logger

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
