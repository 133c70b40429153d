from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Union

import aiofiles
import aiofiles.os

from exceptions import StorageIOError
from logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

def file_extension(original_filename: str) -> str:
    if "." not in original_filename:
        return ""
    extension = original_filename.rsplit(".", 1)[1].lower()
    # the blob must stay inside upload_dir and be a valid OS path
    for forbidden in ("/", "\\", "\x00"):
        extension = extension.replace(forbidden, "")
    return extension

def derive_filename(file_id: str, original_filename: str) -> str:
    extension = file_extension(original_filename)
    if not extension:
        return file_id
    return f"{file_id}.{extension}"

class BlobStore:
    """Flat directory of blobs named ``<id>[.<ext>]``."""

    def __init__(self, upload_dir: PathLike):
        self.upload_dir = Path(upload_dir)

    async def init(self) -> None:
        try:
            await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Cannot create upload directory {self.upload_dir}: {e}") from e
        logger.info(f"Upload directory initialized at: {self.upload_dir}")

    def path_for(self, filename: str) -> Path:
        return self.upload_dir / filename

    async def write(self, filename: str, content: bytes) -> Path:
        file_path = self.path_for(filename)
        try:
            async with aiofiles.open(file_path, 'wb') as out_file:
                await out_file.write(content)
                await out_file.flush()
        except (OSError, ValueError) as e:
            logger.exception(f"Error writing blob to {file_path}")
            raise StorageIOError(f"Error writing blob {filename}: {e}") from e
        logger.debug(f"Wrote {len(content)} bytes to {file_path}")
        return file_path

    @asynccontextmanager
    async def open(self, path: PathLike) -> AsyncIterator:
        try:
            blob = await aiofiles.open(path, 'rb')
        except (OSError, ValueError) as e:
            raise StorageIOError(f"Cannot open blob at {path}: {e}") from e
        try:
            yield blob
        finally:
            await blob.close()

    async def remove(self, path: PathLike) -> bool:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.exception(f"Error removing blob at {path}")
            raise StorageIOError(f"Error removing blob at {path}: {e}") from e
        logger.info(f"File deleted from filesystem: {path}")
        return True

    async def exists(self, path: PathLike) -> bool:
        return await aiofiles.os.path.isfile(path)
