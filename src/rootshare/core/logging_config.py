"""
RootShare - Sandboxed File Manager Server - Logging Configuration
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import constants


def setup_logging(level=logging.INFO, log_dir: Optional[Path] = None, file_logging: bool = True):
    """
    Configures application-wide logging to a rotating file and the console.
    This should be called once at application startup.
    """
    log_formatter = logging.Formatter(
        "%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    log_file = None
    if file_logging:
        log_dir = Path(log_dir) if log_dir else Path(constants.APP_DATA_PATH)
        log_file = log_dir / constants.LOG_FILENAME
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
            file_handler.setFormatter(log_formatter)
            root_logger.addHandler(file_handler)
        except Exception as e:
            # If file logging fails, log the error to the console as a last resort.
            log_file = None
            logging.basicConfig()
            logging.error(f"Failed to configure file logger: {e}")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    # uvicorn installs its own handlers; route them through ours instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True

    logging.info("=" * 50)
    if log_file:
        logging.info("Logging configured. Log file located at: %s", log_file)
    else:
        logging.info("Logging configured (console only).")
    logging.info("=" * 50)
    return log_file
