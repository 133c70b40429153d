from typing import Optional

from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException
from fastapi.responses import FileResponse

import schemas
from dependencies import get_storage
from exceptions import FileStorageError, NotFoundError, StorageIOError
from logging_config import get_logger
from routers.directories import directory_with_stats
from storage import FileStorage

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["files"],
)

DEFAULT_MIME_TYPE = "application/octet-stream"

@router.get("/files", response_model=schemas.ListFilesResponse)
async def list_files(
    parent_directory_id: Optional[str] = None,
    storage: FileStorage = Depends(get_storage)
):
    parent_directory_id = parent_directory_id or None
    try:
        files = await storage.list_files(parent_directory_id)
        directories = await storage.list_directories(parent_directory_id)
        directory_responses = [await directory_with_stats(storage, d) for d in directories]
    except FileStorageError as e:
        logger.exception(f"Failed to list files under parent {parent_directory_id}")
        raise HTTPException(status_code=500, detail=f"Failed to list files: {str(e)}")

    return schemas.ListFilesResponse(
        files=[schemas.FileResponse.model_validate(f) for f in files],
        directories=directory_responses,
        total=len(files) + len(directory_responses)
    )

@router.post("/files", response_model=schemas.UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    parent_directory_id: Optional[str] = Form(None),
    storage: FileStorage = Depends(get_storage)
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    logger.info(f"Upload request for filename: '{file.filename}', content_type: '{file.content_type}'")
    try:
        content = await file.read()
    finally:
        await file.close()

    if not file.filename or not content:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        db_file = await storage.save_file(
            file.filename,
            content,
            mime_type=file.content_type,
            description=description,
            parent_directory_id=parent_directory_id or None
        )
    except FileStorageError as e:
        logger.exception(f"Error saving file '{file.filename}'")
        raise HTTPException(status_code=500, detail=f"Failed to save file: {str(e)}")

    logger.info(f"File uploaded successfully: {db_file.id}")
    return schemas.UploadResponse(
        success=True,
        file=schemas.FileResponse.model_validate(db_file),
        message="File uploaded successfully"
    )

@router.get("/files/{file_id}", response_model=schemas.FileResponse)
async def get_file_info(file_id: str, storage: FileStorage = Depends(get_storage)):
    try:
        db_file = await storage.get_file_metadata(file_id)
    except FileStorageError as e:
        logger.exception(f"Database error while reading file {file_id}")
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")
    if not db_file:
        raise HTTPException(status_code=404, detail="File not found")
    return db_file

@router.get("/files/{file_id}/download")
async def download_file(file_id: str, storage: FileStorage = Depends(get_storage)):
    logger.info(f"Download request for file_id: {file_id}")
    try:
        db_file, file_path = await storage.locate_blob(file_id)
    except NotFoundError:
        logger.warning(f"File not found for download: ID {file_id}")
        raise HTTPException(status_code=404, detail="File not found")
    except StorageIOError as e:
        logger.error(f"File {file_id} found in DB but not in storage: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to open file: {str(e)}")
    except FileStorageError as e:
        logger.exception(f"Database error while reading file {file_id}")
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")

    return FileResponse(
        path=file_path,
        filename=db_file.original_filename,
        media_type=db_file.mime_type or DEFAULT_MIME_TYPE
    )

@router.delete("/files/{file_id}", response_model=schemas.DeleteResponse)
async def delete_file(file_id: str, storage: FileStorage = Depends(get_storage)):
    try:
        deleted = await storage.delete_file(file_id)
    except FileStorageError as e:
        logger.exception(f"Failed to delete file {file_id}")
        raise HTTPException(status_code=500, detail=f"Failed to delete file: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail="File not found")
    return schemas.DeleteResponse(success=True, message="File deleted successfully")

@router.put("/files/{file_id}/move", response_model=schemas.FileResponse)
async def move_file(
    file_id: str,
    payload: schemas.MoveFileRequest,
    storage: FileStorage = Depends(get_storage)
):
    try:
        db_file = await storage.move_file(file_id, payload.parent_directory_id)
    except FileStorageError as e:
        logger.exception(f"Failed to move file {file_id}")
        raise HTTPException(status_code=500, detail=f"Failed to move file: {str(e)}")
    if not db_file:
        raise HTTPException(status_code=404, detail="File not found")
    return db_file
