# src/rootshare/services/search.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
from typing import List, Optional

from ..core.exceptions import OperationCancelled
from ..core.models import FileSystemItem, sort_items
from ..core.result import Err, Ok, Result, guard_operation
from .cancellation import CancellationToken
from .directory_lister import build_item
from .path_resolver import PathResolver
from .tree_walker import TraversalPolicy, TreeWalker

log = logging.getLogger(__name__)


class RecursiveSearch:
    """Case-insensitive substring search over every name under the root."""

    def __init__(self, resolver: PathResolver, policy: TraversalPolicy = TraversalPolicy.CONTINUE):
        self.resolver = resolver
        self.policy = policy

    @guard_operation("search files")
    def search(
        self,
        query: str | None,
        include_files: bool = True,
        include_directories: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> Result[List[FileSystemItem]]:
        if query is None or not query.strip():
            return Err.invalid_path("Search query is required")
        if not include_files and not include_directories:
            return Ok([])

        needle = query.casefold()
        walker = TreeWalker(self.resolver, policy=self.policy, token=token)
        results = []
        try:
            for entry in walker.walk(self.resolver.root):
                if needle not in entry.name.casefold():
                    continue
                if entry.is_dir and not include_directories:
                    continue
                if not entry.is_dir and not include_files:
                    continue
                try:
                    stat = entry.stat()
                except OSError as e:
                    log.warning(f"Could not stat search match {entry.path}: {e}")
                    continue
                results.append(build_item(self.resolver, entry.path, entry.is_dir, stat))
        except OperationCancelled:
            raise
        except OSError as e:
            log.error(f"Search for '{query}' aborted: {e}")
            return Err.from_os_error(e, "search the directory tree")

        if walker.skipped:
            log.info(f"Search for '{query}' skipped {len(walker.skipped)} unreadable entries")
        return Ok(sort_items(results))
