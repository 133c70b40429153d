"""Storage facade: couples the blob store with the metadata store.

Blob and metadata effects are ordered, not transactional. A create writes the
blob before inserting the row and a delete removes the blob before the row, so
a partial failure leaves an orphan blob or a row pointing at a missing blob.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Iterable, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import crud, models, schemas
from blob_store import BlobStore, derive_filename
from exceptions import ConflictError, InvalidMoveError, MetadataIOError, NotFoundError, StorageIOError
from logging_config import get_logger

logger = get_logger(__name__)

class FileStorage:
    def __init__(self, upload_dir: Union[str, Path], session_factory: async_sessionmaker[AsyncSession]):
        self.blob_store = BlobStore(upload_dir)
        self._session_factory = session_factory

    async def init(self) -> None:
        await self.blob_store.init()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as db:
            try:
                yield db
            except IntegrityError as e:
                await db.rollback()
                raise ConflictError(str(e)) from e
            except SQLAlchemyError as e:
                await db.rollback()
                raise MetadataIOError(str(e)) from e

    async def save_file(
        self,
        original_filename: str,
        content: bytes,
        mime_type: Optional[str] = None,
        description: Optional[str] = None,
        parent_directory_id: Optional[str] = None,
    ) -> models.File:
        file_id = models.new_id()
        stored_filename = derive_filename(file_id, original_filename)

        file_path = await self.blob_store.write(stored_filename, content)

        file_in = schemas.FileCreate(
            id=file_id,
            filename=stored_filename,
            original_filename=original_filename,
            file_size=len(content),
            mime_type=mime_type,
            storage_path=str(file_path),
            uploaded_at=models.utc_now_iso(),
            description=description,
            parent_directory_id=parent_directory_id
        )
        async with self._session() as db:
            db_file = await crud.create_file(db, file_in)
        logger.info(f"File saved: {original_filename} ({file_id})")
        return db_file

    async def get_file_metadata(self, file_id: str) -> Optional[models.File]:
        async with self._session() as db:
            return await crud.get_file(db, file_id)

    async def get_file_path(self, file_id: str) -> Optional[Path]:
        db_file = await self.get_file_metadata(file_id)
        if db_file is None:
            return None
        return Path(db_file.storage_path)

    async def locate_blob(self, file_id: str) -> Tuple[models.File, Path]:
        """Record and on-disk path of a file that is ready to be streamed.

        Raises NotFoundError for an unknown id and StorageIOError when the row
        points at a blob that is no longer on disk.
        """
        db_file = await self.get_file_metadata(file_id)
        if db_file is None:
            raise NotFoundError(f"File {file_id} not found")
        file_path = Path(db_file.storage_path)
        if not await self.blob_store.exists(file_path):
            raise StorageIOError(f"Blob for file {file_id} is missing at {file_path}")
        return db_file, file_path

    async def list_files(self, parent_directory_id: Optional[str] = None) -> List[models.File]:
        async with self._session() as db:
            return await crud.list_files(db, parent_directory_id)

    async def _remove_blob(self, db_file: models.File) -> None:
        removed = await self.blob_store.remove(db_file.storage_path)
        if not removed:
            logger.warning(f"Blob for file {db_file.id} already missing at {db_file.storage_path}")

    async def delete_file(self, file_id: str) -> bool:
        async with self._session() as db:
            db_file = await crud.get_file(db, file_id)
            if db_file is None:
                return False
            await self._remove_blob(db_file)
            deleted = await crud.delete_file(db, file_id)
        if deleted:
            logger.info(f"File deleted: {file_id}")
        return deleted

    async def create_directory(self, name: str, parent_id: Optional[str] = None) -> models.Directory:
        async with self._session() as db:
            directory = await crud.create_directory(db, name, parent_id)
        logger.info(f"Directory created: {directory.id} ('{name}', parent={parent_id})")
        return directory

    async def get_directory(self, directory_id: str) -> Optional[models.Directory]:
        async with self._session() as db:
            return await crud.get_directory(db, directory_id)

    async def list_directories(self, parent_id: Optional[str] = None) -> List[models.Directory]:
        async with self._session() as db:
            return await crud.list_directories(db, parent_id)

    async def get_directory_stats(self, directory_id: str) -> Tuple[int, int]:
        async with self._session() as db:
            return await crud.get_directory_stats(db, directory_id)

    async def delete_directory(self, directory_id: str) -> bool:
        """Deletes a directory with its descendant directories and all their files.

        Blobs of every file in the subtree are removed before the rows.
        """
        async with self._session() as db:
            directory = await crud.get_directory(db, directory_id)
            if directory is None:
                return False
            subtree_ids = await crud.collect_subtree_ids(db, directory_id)
            for db_file in await crud.list_files_in_directories(db, subtree_ids):
                await self._remove_blob(db_file)
            removed = await crud.delete_directory_tree(db, subtree_ids)
        logger.info(f"Directory deleted: {directory_id} ({removed} directories removed)")
        return removed > 0

    async def move_file(self, file_id: str, new_parent_directory_id: Optional[str] = None) -> Optional[models.File]:
        async with self._session() as db:
            db_file = await crud.get_file(db, file_id)
            if db_file is None:
                return None
            db_file = await crud.update_file_parent(db, db_file, new_parent_directory_id)
        logger.info(f"File {file_id} moved to parent {new_parent_directory_id}")
        return db_file

    async def move_directory(self, directory_id: str, new_parent_id: Optional[str] = None) -> Optional[models.Directory]:
        if new_parent_id == directory_id:
            raise InvalidMoveError("Cannot move a directory into itself")

        async with self._session() as db:
            directory = await crud.get_directory(db, directory_id)
            if directory is None:
                return None
            if new_parent_id is not None:
                await self._ensure_not_descendant(db, directory_id, new_parent_id)
            directory = await crud.update_directory_parent(db, directory, new_parent_id)
        logger.info(f"Directory {directory_id} moved to parent {new_parent_id}")
        return directory

    async def _ensure_not_descendant(self, db: AsyncSession, directory_id: str, new_parent_id: str) -> None:
        # Walk up from the proposed parent; meeting directory_id means a cycle.
        max_steps = await crud.count_directories(db)
        current_id: Optional[str] = new_parent_id
        steps = 0
        while current_id is not None:
            if current_id == directory_id:
                raise InvalidMoveError("Cannot move a directory into its own descendant")
            if steps > max_steps:
                raise MetadataIOError(f"Ancestor chain of directory {new_parent_id} is corrupt (cycle detected)")
            ancestor = await crud.get_directory(db, current_id)
            if ancestor is None:
                break
            current_id = ancestor.parent_id
            steps += 1

    async def bulk_delete(self, file_ids: Iterable[str], directory_ids: Iterable[str]) -> Tuple[int, int]:
        deleted_files = 0
        deleted_directories = 0

        for file_id in file_ids:
            if await self.delete_file(file_id):
                deleted_files += 1

        for directory_id in directory_ids:
            if await self.delete_directory(directory_id):
                deleted_directories += 1

        logger.info(f"Bulk delete completed: {deleted_files} files, {deleted_directories} directories")
        return deleted_files, deleted_directories
