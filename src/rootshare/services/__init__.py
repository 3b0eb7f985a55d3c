# src/rootshare/services/__init__.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from .archive import ArchiveBuilder, ArchiveHandle
from .cancellation import CancellationToken, run_cancellable
from .directory_lister import DirectoryLister
from .file_service import FileService
from .mutations import MutationOps, Transfer
from .path_resolver import PathResolver
from .search import RecursiveSearch
from .transfers import DownloadHandle, TransferStreaming
from .tree_walker import TraversalPolicy, TreeWalker

__all__ = [
    "ArchiveBuilder",
    "ArchiveHandle",
    "CancellationToken",
    "DirectoryLister",
    "DownloadHandle",
    "FileService",
    "MutationOps",
    "PathResolver",
    "RecursiveSearch",
    "TransferStreaming",
    "TraversalPolicy",
    "TreeWalker",
    "Transfer",
    "run_cancellable",
]
