# src/rootshare/services/transfers.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, List, Optional, Protocol, Sequence

import aiofiles

from ..core.config import FileManagerConfig
from ..core.result import Err, Ok, Result, guard_operation
from ..core.validators import validate_filename
from .cancellation import CancellationToken, check_cancelled
from .path_resolver import PathResolver

log = logging.getLogger(__name__)


class IncomingFile(Protocol):
    """The part of ``fastapi.UploadFile`` the upload path relies on."""

    filename: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class DownloadHandle:
    path: Path
    file_name: str
    size: int
    chunk_size: int

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        async with aiofiles.open(self.path, "rb") as f:
            while chunk := await f.read(self.chunk_size):
                yield chunk


class TransferStreaming:
    """Moves bytes between the HTTP boundary and disk with a constant-size buffer."""

    def __init__(self, config: FileManagerConfig, resolver: PathResolver):
        self.config = config
        self.resolver = resolver

    @guard_operation("upload files")
    async def upload(
        self,
        target_path: str | None,
        files: Sequence[IncomingFile],
        token: Optional[CancellationToken] = None,
    ) -> Result[List[str]]:
        resolved = self.resolver.resolve(target_path)
        if not resolved.ok:
            return resolved
        target_dir = resolved.value
        if not await asyncio.to_thread(target_dir.is_dir):
            return Err.not_found("Directory does not exist")
        if not files:
            return Err.invalid_path("No files uploaded")

        # Validate every name before the first byte hits the disk.
        destinations = []
        for upload in files:
            checked = validate_filename(upload.filename)
            if not checked.ok:
                return checked
            destination = target_dir / checked.value
            if await asyncio.to_thread(destination.is_dir):
                return Err.already_exists(f"A directory named '{checked.value}' already exists")
            destinations.append(destination)

        written = []
        for upload, destination in zip(files, destinations):
            size = await self._receive(upload, destination, token)
            log.info(f"Uploaded file: {destination} ({size} bytes)")
            written.append(self.resolver.to_relative(destination))
        return Ok(written)

    async def _receive(self, upload: IncomingFile, destination: Path, token: Optional[CancellationToken]) -> int:
        """Streams one upload into a hidden part file, then renames it into place."""
        part_file = destination.with_name(f".{uuid.uuid4().hex}.part")
        bytes_written = 0
        try:
            async with aiofiles.open(part_file, "wb") as out:
                while chunk := await upload.read(self.config.chunk_size):
                    check_cancelled(token)
                    await out.write(chunk)
                    bytes_written += len(chunk)
            await asyncio.to_thread(os.replace, part_file, destination)
        except BaseException:
            # Cancelled or failed: the partial upload must not look complete.
            try:
                part_file.unlink(missing_ok=True)
            except OSError as e:
                log.error(f"Failed to remove partial upload {part_file}: {e}")
            raise
        return bytes_written

    @guard_operation("download file")
    def open_download(self, path: str | None) -> Result[DownloadHandle]:
        resolved = self.resolver.resolve(path)
        if not resolved.ok:
            return resolved
        file_path = resolved.value
        if not file_path.is_file():
            return Err.not_found("File not found")

        # The client sees the name it asked for, not the name behind a link.
        entry = self.resolver.resolve_entry(path)
        file_name = entry.value.name if entry.ok else file_path.name

        log.info(f"Downloading file: {file_path}")
        return Ok(DownloadHandle(
            path=file_path,
            file_name=file_name,
            size=file_path.stat().st_size,
            chunk_size=self.config.chunk_size,
        ))
