# src/rootshare/services/mutations.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.constants import COPY_SUFFIX
from ..core.result import Err, Ok, Result, guard_operation
from ..core.validators import validate_filename
from .cancellation import CancellationToken, check_cancelled
from .path_resolver import PathResolver
from .tree_walker import TraversalPolicy, TreeWalker

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transfer:
    """Relative source and destination of a completed move or copy."""

    source: str
    destination: str


def copy_name_for(path: Path) -> Path:
    """
    First free sibling name with the copy suffix before the extension:
    report.txt -> report-Copy.txt -> report-Copy2.txt -> ...
    """
    stem, suffix = os.path.splitext(path.name)
    candidate = path.with_name(f"{stem}{COPY_SUFFIX}{suffix}")
    counter = 2
    while os.path.lexists(candidate):
        candidate = path.with_name(f"{stem}{COPY_SUFFIX}{counter}{suffix}")
        counter += 1
    return candidate


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def _copy_link(src: Path, dst: Path):
    """Recreates the symlink ``src`` at ``dst`` with the same, unresolved target."""
    os.symlink(os.readlink(src), dst, target_is_directory=os.path.isdir(src))


def _remove_partial(path: Path):
    if _is_real_dir(path):
        shutil.rmtree(path, ignore_errors=True)
    elif os.path.lexists(path):
        path.unlink(missing_ok=True)


class MutationOps:
    """Delete, move, copy and create-folder, confined to the root."""

    def __init__(self, resolver: PathResolver):
        self.resolver = resolver

    @guard_operation("delete item")
    def delete(self, path: str) -> Result[str]:
        resolved = self.resolver.resolve_entry(path)
        if not resolved.ok:
            return resolved
        target = resolved.value
        if self.resolver.is_root(target):
            return Err.invalid_path("The root directory cannot be deleted")
        if not os.path.lexists(target):
            return Err.not_found("File or directory not found")

        if _is_real_dir(target):
            shutil.rmtree(target)
        else:
            # A link is removed itself, never the tree it points at.
            target.unlink()
        log.info(f"Deleted {target}")
        return Ok(self.resolver.to_relative(target))

    @guard_operation("move item")
    def move(self, source: str, destination: str, token: Optional[CancellationToken] = None) -> Result[Transfer]:
        resolved_src = self.resolver.resolve_entry(source)
        if not resolved_src.ok:
            return resolved_src
        resolved_dst = self.resolver.resolve_entry(destination)
        if not resolved_dst.ok:
            return resolved_dst
        src, dst = resolved_src.value, resolved_dst.value

        if not os.path.lexists(src):
            return Err.not_found("Source not found")
        if self.resolver.is_root(src):
            return Err.invalid_path("The root directory cannot be moved")
        if str(src) == str(dst):
            return Err.invalid_path("Source and destination are the same")
        if _is_real_dir(src) and self.resolver.is_within(dst, src) and not self._is_case_rename(src, dst):
            return Err.invalid_path("Cannot move a directory into itself")
        if os.path.lexists(dst) and not self._is_case_rename(src, dst):
            return Err.already_exists("Destination already exists")

        dst.parent.mkdir(parents=True, exist_ok=True)
        try:
            os.rename(src, dst)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            log.info(f"Cross-device move of {src}, falling back to copy and delete")
            self._copy_then_delete(src, dst, token)

        log.info(f"Moved {src} -> {dst}")
        return Ok(Transfer(self.resolver.to_relative(src), self.resolver.to_relative(dst)))

    @guard_operation("copy item")
    def copy(
        self,
        source: str,
        destination: str,
        overwrite: bool = False,
        token: Optional[CancellationToken] = None,
    ) -> Result[Transfer]:
        resolved_src = self.resolver.resolve(source)
        if not resolved_src.ok:
            return resolved_src
        resolved_dst = self.resolver.resolve(destination)
        if not resolved_dst.ok:
            return resolved_dst
        src, dst = resolved_src.value, resolved_dst.value

        if not src.exists():
            return Err.not_found("Source not found")
        src_is_dir = src.is_dir()
        if src_is_dir and self.resolver.is_within(dst, src):
            return Err.invalid_path("Cannot copy a directory into itself")

        if dst.is_file():
            if not overwrite:
                dst = copy_name_for(dst)
            elif src_is_dir:
                return Err.already_exists("A file with the destination name already exists")
            elif self.resolver.same_path(src, dst):
                return Err.invalid_path("Cannot overwrite an item with itself")
        elif dst.is_dir() and not src_is_dir:
            return Err.already_exists("A directory with the destination name already exists")

        dst.parent.mkdir(parents=True, exist_ok=True)
        if src_is_dir:
            created = not os.path.lexists(dst)
            try:
                self._copy_tree(src, dst, token)
            except BaseException:
                # A merge into an existing directory keeps what it already had.
                if created:
                    _remove_partial(dst)
                raise
        else:
            check_cancelled(token)
            shutil.copy2(src, dst)

        log.info(f"Copied {src} -> {dst}")
        return Ok(Transfer(self.resolver.to_relative(src), self.resolver.to_relative(dst)))

    @guard_operation("create folder")
    def create_folder(self, parent_path: str | None, folder_name: str | None) -> Result[str]:
        if folder_name is None or not folder_name.strip():
            return Err.invalid_path("Folder name is required")
        checked = validate_filename(folder_name)
        if not checked.ok:
            return checked
        combined = f"{(parent_path or '').rstrip('/')}/{checked.value}"
        resolved = self.resolver.resolve(combined)
        if not resolved.ok:
            return resolved
        target = resolved.value

        if target.is_dir():
            return Err.already_exists("Folder already exists")
        if target.exists():
            return Err.already_exists("A file with this name already exists")

        target.mkdir(parents=True)
        log.info(f"Created folder {target}")
        return Ok(self.resolver.to_relative(target))

    def _copy_tree(self, src: Path, dst: Path, token: Optional[CancellationToken], keep_links: bool = False):
        """
        Deep copy; files that already exist inside ``dst`` are overwritten.

        With ``keep_links`` every symlink below ``src`` is recreated as a link,
        including ones that point outside the root. Otherwise linked files are
        copied by content and linked directories are left out.
        """
        dst.mkdir(parents=True, exist_ok=True)
        walker = TreeWalker(
            self.resolver,
            policy=TraversalPolicy.ABORT,
            token=token,
            include_escaping_links=keep_links,
        )
        for entry in walker.walk(src):
            target = dst / entry.path.relative_to(src)
            if entry.is_symlink and keep_links:
                _copy_link(entry.path, target)
            elif entry.is_dir:
                if entry.is_symlink:
                    log.warning(f"Not following symlinked directory during copy: {entry.path}")
                    continue
                target.mkdir(exist_ok=True)
            else:
                shutil.copy2(entry.path, target)
        shutil.copystat(src, dst)

    def _copy_then_delete(self, src: Path, dst: Path, token: Optional[CancellationToken]):
        src_is_dir = _is_real_dir(src)
        try:
            check_cancelled(token)
            if src.is_symlink():
                _copy_link(src, dst)
            elif src_is_dir:
                self._copy_tree(src, dst, token, keep_links=True)
            else:
                shutil.copy2(src, dst)
        except BaseException:
            # Never leave a half-written destination next to an intact source.
            _remove_partial(dst)
            raise
        if src_is_dir:
            shutil.rmtree(src)
        else:
            src.unlink()

    def _is_case_rename(self, src: Path, dst: Path) -> bool:
        """On case-insensitive filesystems 'a.txt' -> 'A.txt' is a rename, not a conflict."""
        if not self.resolver.config.case_insensitive or not self.resolver.same_path(src, dst):
            return False
        try:
            return os.path.samefile(src, dst)
        except OSError:
            return False
