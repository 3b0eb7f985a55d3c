# src/rootshare/core/models.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase and accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileSystemItem(CamelModel):
    name: str
    relative_path: str
    is_directory: bool
    size_bytes: int
    last_modified_utc: datetime
    extension: Optional[str] = None

    @staticmethod
    def mtime_to_utc(mtime: float) -> datetime:
        return datetime.fromtimestamp(mtime, tz=timezone.utc)


class DirectoryListing(CamelModel):
    current_path: str
    items: List[FileSystemItem]


class SearchResults(CamelModel):
    query: str
    results: List[FileSystemItem]


def sort_items(items: List[FileSystemItem]) -> List[FileSystemItem]:
    """Directories first, then files; each group by case-folded name, exact name breaking ties."""
    return sorted(items, key=lambda item: (not item.is_directory, item.name.casefold(), item.name))
