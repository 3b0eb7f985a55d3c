# src/rootshare/services/archive.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles

from ..core import constants
from ..core.config import FileManagerConfig
from ..core.exceptions import OperationCancelled
from ..core.result import Err, ErrorKind, Ok, Result, guard_operation
from .cancellation import CancellationToken, check_cancelled
from .path_resolver import PathResolver
from .tree_walker import TraversalPolicy, TreeWalker

log = logging.getLogger(__name__)


class ArchiveHandle:
    """
    A finished zip in a temporary file.

    ``stream()`` yields it in fixed-size chunks and deletes the file once the
    stream ends, fails or is abandoned. ``cleanup()`` is idempotent.
    """

    def __init__(self, path: Path, chunk_size: int, entry_count: int, skipped: List[str]):
        self.path = path
        self.chunk_size = chunk_size
        self.entry_count = entry_count
        self.skipped = skipped

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def cleanup(self):
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            log.error(f"Failed to delete temporary archive {self.path}: {e}")

    async def stream(self) -> AsyncIterator[bytes]:
        try:
            async with aiofiles.open(self.path, "rb") as f:
                while chunk := await f.read(self.chunk_size):
                    yield chunk
        finally:
            self.cleanup()


class ArchiveBuilder:
    """Builds a zip of selected files and directories for batch download."""

    def __init__(self, config: FileManagerConfig, resolver: PathResolver):
        self.config = config
        self.resolver = resolver

    @guard_operation("build archive")
    def build(self, paths: List[str], token: Optional[CancellationToken] = None) -> Result[ArchiveHandle]:
        if not paths:
            return Err.invalid_path("No files selected")

        fd, temp_name = tempfile.mkstemp(
            prefix=constants.ARCHIVE_PREFIX, suffix=".zip", dir=self.config.temp_dir
        )
        os.close(fd)
        archive_path = Path(temp_name)
        skipped: List[str] = []
        try:
            with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED, allowZip64=True) as zf:
                written = set()
                for relative_path in paths:
                    check_cancelled(token)
                    self._add_selection(zf, relative_path, written, skipped, token)
                entry_count = len(zf.infolist())
        except OperationCancelled:
            log.info("Archive build cancelled, removing temporary file")
            archive_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            log.error(f"Archive build failed: {e}")
            archive_path.unlink(missing_ok=True)
            return Err(ErrorKind.UNEXPECTED, f"Failed to build archive: {e}")

        log.info(f"Built archive with {entry_count} entries ({len(skipped)} selections skipped)")
        return Ok(ArchiveHandle(archive_path, self.config.chunk_size, entry_count, skipped))

    def _add_selection(self, zf: zipfile.ZipFile, relative_path: str, written: set,
                       skipped: List[str], token: Optional[CancellationToken]):
        resolved = self.resolver.resolve(relative_path)
        if not resolved.ok:
            log.warning(f"Skipping archive selection '{relative_path}': {resolved.message}")
            skipped.append(relative_path)
            return
        path = resolved.value

        if self.resolver.is_root(path):
            base_name = self.resolver.root.name or "root"
        else:
            base_name = path.name

        if path.is_file():
            self._write_file(zf, path, base_name, written, skipped)
        elif path.is_dir():
            self._write_directory(zf, path, base_name, written, skipped, token)
        else:
            log.warning(f"Skipping archive selection '{relative_path}': not found")
            skipped.append(relative_path)

    def _write_directory(self, zf: zipfile.ZipFile, directory: Path, base_name: str, written: set,
                         skipped: List[str], token: Optional[CancellationToken]):
        self._write_dir_entry(zf, f"{base_name}/", directory, written)
        walker = TreeWalker(self.resolver, policy=TraversalPolicy.CONTINUE, token=token)
        for entry in walker.walk(directory):
            arcname = f"{base_name}/{entry.path.relative_to(directory).as_posix()}"
            if entry.is_dir:
                if entry.is_symlink:
                    log.warning(f"Not following symlinked directory in archive: {entry.path}")
                    continue
                self._write_dir_entry(zf, f"{arcname}/", entry.path, written)
            else:
                self._write_file(zf, entry.path, arcname, written, skipped)
        skipped.extend(walker.skipped)

    def _write_dir_entry(self, zf: zipfile.ZipFile, arcname: str, directory: Path, written: set):
        if arcname in written:
            return
        try:
            info = zipfile.ZipInfo.from_file(directory, arcname)
        except OSError as e:
            log.warning(f"Could not stat directory {directory} for archive: {e}")
            info = zipfile.ZipInfo(arcname)
        zf.writestr(info, b"")
        written.add(arcname)

    def _write_file(self, zf: zipfile.ZipFile, path: Path, arcname: str, written: set, skipped: List[str]):
        if arcname in written:
            log.warning(f"Skipping duplicate archive entry '{arcname}'")
            skipped.append(str(path))
            return
        try:
            zf.write(path, arcname)
        except OSError as e:
            log.warning(f"Skipping file during compression: {path} ({e})")
            skipped.append(str(path))
            return
        written.add(arcname)
