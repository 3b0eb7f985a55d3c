# src/rootshare/services/tree_walker.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from .cancellation import CancellationToken, check_cancelled
from .path_resolver import PathResolver

log = logging.getLogger(__name__)


class TraversalPolicy(str, Enum):
    """What a walk does when a directory cannot be read."""

    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class WalkEntry:
    path: Path
    name: str
    is_dir: bool
    is_symlink: bool
    entry: os.DirEntry

    def stat(self) -> os.stat_result:
        return self.entry.stat()


class TreeWalker:
    """
    Depth-first walk over an explicit stack of pending directories.

    Each directory is read lazily with ``os.scandir`` and fully drained before
    the next one is opened, so at most one directory handle is open and depth
    is limited by memory rather than the call stack. A directory is always
    yielded before any of its descendants.

    Symlinked directories are yielded but never descended into. Symlinks whose
    target lies outside the root are not yielded at all unless
    ``include_escaping_links`` is set, in which case they come back as plain
    link entries so a caller can recreate them.
    """

    def __init__(
        self,
        resolver: PathResolver,
        policy: TraversalPolicy = TraversalPolicy.CONTINUE,
        token: Optional[CancellationToken] = None,
        include_escaping_links: bool = False,
    ):
        self.resolver = resolver
        self.policy = policy
        self.token = token
        self.include_escaping_links = include_escaping_links
        self.skipped: list[str] = []

    def walk(self, top: Path) -> Iterator[WalkEntry]:
        pending = [Path(top)]
        while pending:
            check_cancelled(self.token)
            current = pending.pop()
            try:
                scanner = os.scandir(current)
            except OSError as e:
                self._on_error(current, e)
                continue
            with scanner:
                while True:
                    try:
                        entry = next(scanner)
                    except StopIteration:
                        break
                    except OSError as e:
                        self._on_error(current, e)
                        break
                    check_cancelled(self.token)
                    walk_entry = self._classify(entry)
                    if walk_entry is None:
                        continue
                    yield walk_entry
                    if walk_entry.is_dir and not walk_entry.is_symlink:
                        pending.append(walk_entry.path)

    def _classify(self, entry: os.DirEntry) -> Optional[WalkEntry]:
        try:
            is_symlink = entry.is_symlink()
            if is_symlink:
                target = os.path.realpath(entry.path)
                if not self.resolver.is_contained(target) and not self.include_escaping_links:
                    log.warning(f"Skipping symlink that points outside the root: {entry.path}")
                    self.skipped.append(entry.path)
                    return None
                is_dir = os.path.isdir(target)
            else:
                is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            self._on_error(Path(entry.path), e)
            return None
        return WalkEntry(
            path=Path(entry.path),
            name=entry.name,
            is_dir=is_dir,
            is_symlink=is_symlink,
            entry=entry,
        )

    def _on_error(self, path: Path, error: OSError):
        if self.policy is TraversalPolicy.ABORT:
            raise error
        log.warning(f"Skipping unreadable path during walk: {path} ({error})")
        self.skipped.append(str(path))
