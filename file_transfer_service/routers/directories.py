from fastapi import APIRouter, Depends, HTTPException

import models, schemas
from dependencies import get_storage
from exceptions import FileStorageError, InvalidMoveError
from logging_config import get_logger
from storage import FileStorage

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["directories"],
)

async def directory_with_stats(storage: FileStorage, directory: models.Directory) -> schemas.DirectoryResponse:
    file_count, total_size = await storage.get_directory_stats(directory.id)
    return schemas.DirectoryResponse.model_validate(directory).model_copy(
        update={"file_count": file_count, "total_size": total_size}
    )

@router.post("/directories", response_model=schemas.CreateDirectoryResponse)
async def create_directory(
    payload: schemas.CreateDirectoryRequest,
    storage: FileStorage = Depends(get_storage)
):
    try:
        directory = await storage.create_directory(payload.name, payload.parent_id or None)
        directory_response = await directory_with_stats(storage, directory)
    except FileStorageError as e:
        logger.exception(f"Failed to create directory '{payload.name}'")
        raise HTTPException(status_code=500, detail=f"Failed to create directory: {str(e)}")

    return schemas.CreateDirectoryResponse(
        success=True,
        directory=directory_response,
        message="Directory created successfully"
    )

@router.get("/directories/{directory_id}", response_model=schemas.DirectoryResponse)
async def get_directory_info(directory_id: str, storage: FileStorage = Depends(get_storage)):
    try:
        directory = await storage.get_directory(directory_id)
        if not directory:
            raise HTTPException(status_code=404, detail="Directory not found")
        return await directory_with_stats(storage, directory)
    except FileStorageError as e:
        logger.exception(f"Database error while reading directory {directory_id}")
        raise HTTPException(status_code=500, detail=f"Database error: {str(e)}")

@router.delete("/directories/{directory_id}", response_model=schemas.DeleteResponse)
async def delete_directory(directory_id: str, storage: FileStorage = Depends(get_storage)):
    try:
        deleted = await storage.delete_directory(directory_id)
    except FileStorageError as e:
        logger.exception(f"Failed to delete directory {directory_id}")
        raise HTTPException(status_code=500, detail=f"Failed to delete directory: {str(e)}")

    if not deleted:
        raise HTTPException(status_code=404, detail="Directory not found")
    return schemas.DeleteResponse(success=True, message="Directory deleted successfully")

@router.put("/directories/{directory_id}/move", response_model=schemas.DirectoryResponse)
async def move_directory(
    directory_id: str,
    payload: schemas.MoveDirectoryRequest,
    storage: FileStorage = Depends(get_storage)
):
    try:
        directory = await storage.move_directory(directory_id, payload.parent_id)
        if not directory:
            raise HTTPException(status_code=404, detail="Directory not found")
        return await directory_with_stats(storage, directory)
    except InvalidMoveError as e:
        logger.warning(f"Rejected move of directory {directory_id} to {payload.parent_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except FileStorageError as e:
        logger.exception(f"Failed to move directory {directory_id}")
        raise HTTPException(status_code=500, detail=f"Failed to move directory: {str(e)}")

@router.post("/bulk-delete", response_model=schemas.BulkDeleteResponse)
async def bulk_delete(
    payload: schemas.BulkDeleteRequest,
    storage: FileStorage = Depends(get_storage)
):
    try:
        deleted_files, deleted_directories = await storage.bulk_delete(payload.file_ids, payload.directory_ids)
    except FileStorageError as e:
        logger.exception("Failed to bulk delete")
        raise HTTPException(status_code=500, detail=f"Failed to bulk delete: {str(e)}")

    return schemas.BulkDeleteResponse(
        success=True,
        deleted_files=deleted_files,
        deleted_directories=deleted_directories,
        message=f"Deleted {deleted_files} files and {deleted_directories} directories"
    )
