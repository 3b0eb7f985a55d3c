# src/rootshare/services/file_service.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import logging
from typing import List, Optional, Sequence

from ..core.config import FileManagerConfig
from ..core.models import DirectoryListing, SearchResults
from ..core.result import Ok, Result
from .archive import ArchiveBuilder, ArchiveHandle
from .cancellation import CancellationToken, run_cancellable
from .directory_lister import DirectoryLister
from .mutations import MutationOps, Transfer
from .path_resolver import PathResolver
from .search import RecursiveSearch
from .transfers import DownloadHandle, IncomingFile, TransferStreaming

log = logging.getLogger(__name__)


class FileService:
    """
    Logic for sandboxed browsing, searching, file management, archives and
    transfers.

    Every blocking filesystem call is pushed to a worker thread so the event
    loop keeps serving other requests. Long operations get a cancellation
    token that is tripped when the awaiting request is cancelled.
    """

    def __init__(self, config: FileManagerConfig):
        self.config = config
        self.resolver = PathResolver(config)
        self.lister = DirectoryLister(self.resolver)
        self.searcher = RecursiveSearch(self.resolver)
        self.mutations = MutationOps(self.resolver)
        self.archives = ArchiveBuilder(config, self.resolver)
        self.transfers = TransferStreaming(config, self.resolver)

    @property
    def root(self):
        return self.config.root

    def _browse(self, path: Optional[str], token: CancellationToken) -> Result[DirectoryListing]:
        resolved = self.resolver.resolve(path)
        if not resolved.ok:
            return resolved
        listed = self.lister.list(resolved.value)
        if not listed.ok:
            return listed
        return Ok(DirectoryListing(
            current_path=self.resolver.to_relative(resolved.value),
            items=listed.value,
        ))

    async def browse(self, path: Optional[str]) -> Result[DirectoryListing]:
        return await run_cancellable(self._browse, path)

    async def search(self, query: str, include_files: bool = True,
                     include_directories: bool = True) -> Result[SearchResults]:
        def _search(token: CancellationToken):
            found = self.searcher.search(query, include_files, include_directories, token=token)
            if not found.ok:
                return found
            return Ok(SearchResults(query=query, results=found.value))

        return await run_cancellable(_search)

    async def delete(self, path: str) -> Result[str]:
        return await run_cancellable(lambda token: self.mutations.delete(path))

    async def move(self, source: str, destination: str) -> Result[Transfer]:
        return await run_cancellable(self.mutations.move, source, destination)

    async def copy(self, source: str, destination: str, overwrite: bool = False) -> Result[Transfer]:
        return await run_cancellable(self.mutations.copy, source, destination, overwrite)

    async def create_folder(self, parent_path: Optional[str], folder_name: str) -> Result[str]:
        return await run_cancellable(lambda token: self.mutations.create_folder(parent_path, folder_name))

    async def build_archive(self, paths: List[str]) -> Result[ArchiveHandle]:
        return await run_cancellable(self.archives.build, paths)

    async def upload(self, target_path: Optional[str], files: Sequence[IncomingFile]) -> Result[List[str]]:
        return await self.transfers.upload(target_path, files, token=CancellationToken())

    async def open_download(self, path: str) -> Result[DownloadHandle]:
        return await run_cancellable(lambda token: self.transfers.open_download(path))
