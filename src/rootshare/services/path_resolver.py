# src/rootshare/services/path_resolver.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import ntpath
import os
from pathlib import Path

from ..core.config import FileManagerConfig
from ..core.result import Err, Ok, Result

log = logging.getLogger(__name__)


class PathResolver:
    """
    Turns client-relative paths into canonical absolute paths inside the root.

    This is the only place where client input becomes a filesystem path. Every
    other component receives paths that have already passed ``resolve``.
    """

    def __init__(self, config: FileManagerConfig):
        self.config = config
        self.root = config.root
        self._root_key = self._compare_key(str(config.root))
        self._root_prefix = self._root_key if self._root_key.endswith(os.sep) else self._root_key + os.sep

    def _compare_key(self, path_str: str) -> str:
        normalized = os.path.normcase(path_str)
        return normalized.casefold() if self.config.case_insensitive else normalized

    def is_contained(self, path: Path | str) -> bool:
        """True when ``path`` (already canonical) is the root or a true descendant of it."""
        key = self._compare_key(os.fspath(path))
        return key == self._root_key or key.startswith(self._root_prefix)

    def resolve(self, relative_path: str | None) -> Result[Path]:
        cleaned = self._clean(relative_path)
        if not cleaned.ok:
            return cleaned
        if not cleaned.value:
            return Ok(self.root)
        return self._canonicalize(cleaned.value, relative_path)

    def resolve_entry(self, relative_path: str | None) -> Result[Path]:
        """
        Like ``resolve``, but a symlink in the last segment is not followed.

        Only the parent is canonicalized, so the result names the directory
        entry itself. Delete and move act on links through this, never on
        whatever the link points at.
        """
        cleaned = self._clean(relative_path)
        if not cleaned.ok:
            return cleaned
        normalized = cleaned.value.replace(os.altsep, os.sep) if os.altsep else cleaned.value
        parent, _, name = normalized.rstrip(os.sep).rpartition(os.sep)
        if name in ("", os.curdir, os.pardir):
            return self.resolve(relative_path)

        resolved_parent = self._canonicalize(parent, relative_path) if parent else Ok(self.root)
        if not resolved_parent.ok:
            return resolved_parent
        return Ok(resolved_parent.value / name)

    def _clean(self, relative_path: str | None) -> Result[str]:
        """Validated root-relative form of the input; '' stands for the root."""
        if relative_path is None or not relative_path.strip():
            return Ok("")
        if "\x00" in relative_path:
            return Err.invalid_path("Path contains invalid characters")

        stripped = relative_path.lstrip("/\\")
        # A drive ("C:") or UNC prefix would replace the root when joined.
        if stripped and (ntpath.splitdrive(stripped)[0] or os.path.isabs(stripped)):
            log.warning(f"Rejected path with a drive or volume specifier: {relative_path!r}")
            return Err.invalid_path()
        return Ok(stripped)

    def _canonicalize(self, stripped: str, relative_path: str | None) -> Result[Path]:
        try:
            canonical = Path(os.path.realpath(os.path.join(self.root, stripped)))
        except (OSError, ValueError, RuntimeError) as e:
            log.warning(f"Could not canonicalize {relative_path!r}: {e}")
            return Err.invalid_path()

        if not self.is_contained(canonical):
            log.warning(f"Rejected path outside the sandbox root: {relative_path!r}")
            return Err.invalid_path()
        return Ok(canonical)

    def to_relative(self, path: Path | str) -> str:
        """Forward-slash path relative to the root; '' for the root itself."""
        rel = os.path.relpath(os.fspath(path), self.root)
        if rel == os.curdir:
            return ""
        return rel.replace(os.sep, "/")

    def is_root(self, path: Path) -> bool:
        return self._compare_key(str(path)) == self._root_key

    def same_path(self, first: Path, second: Path) -> bool:
        return self._compare_key(str(first)) == self._compare_key(str(second))

    def is_within(self, path: Path, ancestor: Path) -> bool:
        """True when ``path`` is ``ancestor`` or lies below it. Both must be canonical."""
        ancestor_key = self._compare_key(str(ancestor))
        prefix = ancestor_key if ancestor_key.endswith(os.sep) else ancestor_key + os.sep
        key = self._compare_key(str(path))
        return key == ancestor_key or key.startswith(prefix)
