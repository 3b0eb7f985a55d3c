# RootShare - Sandboxed File Manager Server - File Browser API Module
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.


import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..core.models import CamelModel, DirectoryListing, SearchResults
from ..core.result import Err
from ..core.utils import archive_download_name, encode_filename_for_header
from ..services.file_service import FileService

log = logging.getLogger(__name__)


# --- Pydantic Models ---
class PathPayload(CamelModel):
    path: str = ""


class MovePayload(CamelModel):
    source_path: str
    destination_path: str


class CopyPayload(MovePayload):
    overwrite: bool = False


class CreateFolderPayload(CamelModel):
    parent_path: str = ""
    folder_name: str = ""


class DownloadBatchPayload(CamelModel):
    paths: List[str] = []


# --- API Router ---
router = APIRouter()


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def error_response(err: Err) -> JSONResponse:
    return JSONResponse(status_code=err.kind.status_code, content={"error": err.message})


@router.get("/health")
async def health(service: FileService = Depends(get_file_service)):
    return {"status": "ok", "root": str(service.root)}


@router.get("/browse", response_model=DirectoryListing)
async def browse_directory(path: Optional[str] = Query(None), service: FileService = Depends(get_file_service)):
    result = await service.browse(path)
    if not result.ok:
        return error_response(result)
    return result.value


@router.get("/search", response_model=SearchResults)
async def search_files(
    query: Optional[str] = Query(None),
    include_files: bool = Query(True, alias="includeFiles"),
    include_directories: bool = Query(True, alias="includeDirectories"),
    service: FileService = Depends(get_file_service),
):
    result = await service.search(query, include_files, include_directories)
    if not result.ok:
        return error_response(result)
    return result.value


@router.delete("/delete")
async def delete_item(payload: PathPayload, service: FileService = Depends(get_file_service)):
    result = await service.delete(payload.path)
    if not result.ok:
        return error_response(result)
    return {"message": "Deleted successfully", "path": result.value}


@router.post("/move")
async def move_item(payload: MovePayload, service: FileService = Depends(get_file_service)):
    result = await service.move(payload.source_path, payload.destination_path)
    if not result.ok:
        return error_response(result)
    return {"message": "Moved successfully", "from": result.value.source, "to": result.value.destination}


@router.post("/copy")
async def copy_item(payload: CopyPayload, service: FileService = Depends(get_file_service)):
    result = await service.copy(payload.source_path, payload.destination_path, payload.overwrite)
    if not result.ok:
        return error_response(result)
    return {"message": "Copied successfully", "from": result.value.source, "to": result.value.destination}


@router.post("/createfolder")
async def create_folder(payload: CreateFolderPayload, service: FileService = Depends(get_file_service)):
    result = await service.create_folder(payload.parent_path, payload.folder_name)
    if not result.ok:
        return error_response(result)
    return {"message": "Folder created successfully", "path": result.value}


@router.post("/upload")
async def upload_files(
    path: str = Form(""),
    files: Optional[List[UploadFile]] = File(None),
    bracket_files: Optional[List[UploadFile]] = File(None, alias="files[]"),
    service: FileService = Depends(get_file_service),
):
    incoming = list(files or []) + list(bracket_files or [])
    try:
        result = await service.upload(path, incoming)
    finally:
        for upload in incoming:
            await upload.close()
    if not result.ok:
        return error_response(result)
    return {"message": "Upload successful", "files": result.value}


@router.get("/download")
async def download_file(path: Optional[str] = Query(None), service: FileService = Depends(get_file_service)):
    result = await service.open_download(path)
    if not result.ok:
        return error_response(result)
    handle = result.value
    headers = {
        "Content-Disposition": encode_filename_for_header(handle.file_name),
        "Content-Length": str(handle.size),
    }
    return StreamingResponse(handle.iter_chunks(), media_type="application/octet-stream", headers=headers)


@router.post("/download-batch")
async def download_batch(payload: DownloadBatchPayload, service: FileService = Depends(get_file_service)):
    result = await service.build_archive(payload.paths)
    if not result.ok:
        return error_response(result)
    handle = result.value
    headers = {
        "Content-Disposition": encode_filename_for_header(archive_download_name()),
        "Content-Length": str(handle.size),
    }
    # stream() removes the temp file itself; the background task covers a
    # response that is never iterated.
    return StreamingResponse(
        handle.stream(),
        media_type="application/zip",
        headers=headers,
        background=BackgroundTask(handle.cleanup),
    )
