# src/rootshare/services/directory_lister.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import os
from pathlib import Path
from typing import List

from ..core.models import FileSystemItem, sort_items
from ..core.result import Err, Ok, Result, guard_operation
from .path_resolver import PathResolver

log = logging.getLogger(__name__)


def build_item(resolver: PathResolver, path: Path, is_dir: bool, stat: os.stat_result) -> FileSystemItem:
    return FileSystemItem(
        name=path.name,
        relative_path=resolver.to_relative(path),
        is_directory=is_dir,
        size_bytes=0 if is_dir else stat.st_size,
        last_modified_utc=FileSystemItem.mtime_to_utc(stat.st_mtime),
        extension=None if is_dir else os.path.splitext(path.name)[1],
    )


class DirectoryLister:
    """Non-recursive listing of one directory inside the root."""

    def __init__(self, resolver: PathResolver):
        self.resolver = resolver

    @guard_operation("list directory")
    def list(self, directory: Path) -> Result[List[FileSystemItem]]:
        if not directory.exists():
            return Err.not_found("Directory not found")
        if not directory.is_dir():
            return Err.invalid_path("Path is not a directory")
        if not os.access(directory, os.R_OK):
            return Err.from_os_error(PermissionError(directory), "read directory")

        items = []
        try:
            with os.scandir(directory) as scanner:
                for entry in scanner:
                    item = self._entry_to_item(entry)
                    if item is not None:
                        items.append(item)
        except OSError as e:
            log.error(f"Error reading directory {directory}: {e}")
            return Err.from_os_error(e, "read directory")
        return Ok(sort_items(items))

    def _entry_to_item(self, entry: os.DirEntry):
        try:
            if entry.is_symlink() and not self.resolver.is_contained(os.path.realpath(entry.path)):
                log.debug(f"Hiding symlink that points outside the root: {entry.path}")
                return None
            is_dir = entry.is_dir()
            return build_item(self.resolver, Path(entry.path), is_dir, entry.stat())
        except OSError as e:
            # Vanished or unreadable between enumeration and stat.
            log.warning(f"Could not access item {entry.path}: {e}")
            return None
