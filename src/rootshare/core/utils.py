# src/rootshare/core/utils.py

import logging
import os
import sys
import urllib.parse
from datetime import datetime
from pathlib import Path

log = logging.getLogger(__name__)


def get_app_data_path(app_name: str) -> Path:
    """
    Returns the per-user directory for configuration and logs:
    %APPDATA% on Windows, ~/Library/Application Support on macOS and
    $XDG_CONFIG_HOME (or ~/.config) everywhere else.
    """
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / app_name
        return Path.home() / "AppData" / "Roaming" / app_name
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / app_name
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / app_name.lower()
    return Path.home() / ".config" / app_name.lower()


def encode_filename_for_header(filename: str) -> str:
    """Builds an attachment Content-Disposition value, RFC 5987 encoded when needed."""
    try:
        filename.encode('ascii')
        if '"' not in filename:
            return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        pass
    encoded_filename = urllib.parse.quote(filename, safe='')
    return f"attachment; filename*=UTF-8''{encoded_filename}"


def archive_download_name(now: datetime | None = None) -> str:
    from .constants import ARCHIVE_DOWNLOAD_NAME, ARCHIVE_TIMESTAMP_FORMAT

    stamp = (now or datetime.now()).strftime(ARCHIVE_TIMESTAMP_FORMAT)
    return ARCHIVE_DOWNLOAD_NAME.format(timestamp=stamp)


def default_case_insensitive() -> bool:
    """Windows and macOS ship case-insensitive filesystems by default."""
    return sys.platform in ("win32", "darwin")


class DummyTty:
    """A dummy TTY-like object for environments where sys.stdout is None."""

    def isatty(self) -> bool:
        return False

    def write(self, msg: str):
        pass

    def flush(self):
        pass
