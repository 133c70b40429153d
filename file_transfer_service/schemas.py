from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

class FileBase(BaseModel):
    filename: str
    original_filename: str
    file_size: int = Field(ge=0)
    mime_type: Optional[str] = None
    description: Optional[str] = None
    parent_directory_id: Optional[str] = None

class FileCreate(FileBase):
    id: str
    storage_path: str
    uploaded_at: str

class FileResponse(FileBase):
    id: str
    uploaded_at: str

    model_config = ConfigDict(from_attributes=True)

class DirectoryResponse(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    created_at: str
    updated_at: str
    file_count: int = 0
    total_size: int = 0

    model_config = ConfigDict(from_attributes=True)

class UploadResponse(BaseModel):
    success: bool
    file: FileResponse
    message: str

class DeleteResponse(BaseModel):
    success: bool
    message: str

class ListFilesResponse(BaseModel):
    files: List[FileResponse]
    directories: List[DirectoryResponse]
    total: int

class CreateDirectoryRequest(BaseModel):
    name: str = Field(min_length=1)
    parent_id: Optional[str] = None

class CreateDirectoryResponse(BaseModel):
    success: bool
    directory: DirectoryResponse
    message: str

class MoveFileRequest(BaseModel):
    parent_directory_id: Optional[str] = None

class MoveDirectoryRequest(BaseModel):
    parent_id: Optional[str] = None

class BulkDeleteRequest(BaseModel):
    file_ids: List[str] = []
    directory_ids: List[str] = []

class BulkDeleteResponse(BaseModel):
    success: bool
    deleted_files: int
    deleted_directories: int
    message: str
