# filename: src/rootshare/core/constants.py
"""
RootShare - Sandboxed File Manager Server - Constants Module
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

from pathlib import Path

from .. import __app_name__
from .utils import get_app_data_path

# --- Application Metadata ---
APP_NAME = __app_name__

# --- Core Application Settings ---
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"
API_PREFIX = "/api/filemanager"
UI_PREFIX = "/ui"

# --- Streaming ---
# Every streaming path (upload, download, archive) reads and writes with a
# buffer of this size, regardless of file size.
DEFAULT_CHUNK_SIZE = 65536  # 64KB
MIN_CHUNK_SIZE = 4096

# --- File Names ---
CONFIG_FILENAME = "config.json"
LOG_FILENAME = "rootshare.log"
ARCHIVE_PREFIX = "rootshare_archive_"
ARCHIVE_DOWNLOAD_NAME = "Download_{timestamp}.zip"
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
COPY_SUFFIX = "-Copy"

# --- Application Paths ---
# Base directory for configuration and logs.
APP_DATA_PATH = get_app_data_path(APP_NAME)
CONFIG_FILE = APP_DATA_PATH / CONFIG_FILENAME

# The sandbox root used when neither the config file nor the CLI names one.
DEFAULT_ROOT_PATH = Path.home() / APP_NAME
