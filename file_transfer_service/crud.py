from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

import models, schemas

async def get_file(db: AsyncSession, file_id: str) -> Optional[models.File]:
    result = await db.execute(select(models.File).filter(models.File.id == file_id))
    return result.scalars().first()

async def list_files(db: AsyncSession, parent_directory_id: Optional[str] = None) -> List[models.File]:
    query = select(models.File)
    if parent_directory_id is None:
        query = query.filter(models.File.parent_directory_id.is_(None))
    else:
        query = query.filter(models.File.parent_directory_id == parent_directory_id)
    result = await db.execute(query.order_by(models.File.uploaded_at.desc()))
    return list(result.scalars().all())

async def list_files_in_directories(db: AsyncSession, directory_ids: Sequence[str]) -> List[models.File]:
    if not directory_ids:
        return []
    result = await db.execute(select(models.File).filter(models.File.parent_directory_id.in_(directory_ids)))
    return list(result.scalars().all())

async def create_file(db: AsyncSession, file_in: schemas.FileCreate) -> models.File:
    db_file = models.File(**file_in.model_dump())
    db.add(db_file)
    await db.commit()
    await db.refresh(db_file)
    return db_file

async def delete_file(db: AsyncSession, file_id: str) -> bool:
    result = await db.execute(delete(models.File).where(models.File.id == file_id))
    await db.commit()
    return result.rowcount > 0

async def update_file_parent(db: AsyncSession, db_file: models.File, parent_directory_id: Optional[str]) -> models.File:
    db_file.parent_directory_id = parent_directory_id
    await db.commit()
    await db.refresh(db_file)
    return db_file

async def get_directory(db: AsyncSession, directory_id: str) -> Optional[models.Directory]:
    result = await db.execute(select(models.Directory).filter(models.Directory.id == directory_id))
    return result.scalars().first()

async def list_directories(db: AsyncSession, parent_id: Optional[str] = None) -> List[models.Directory]:
    query = select(models.Directory)
    if parent_id is None:
        query = query.filter(models.Directory.parent_id.is_(None))
    else:
        query = query.filter(models.Directory.parent_id == parent_id)
    result = await db.execute(query.order_by(models.Directory.name.asc()))
    return list(result.scalars().all())

async def create_directory(db: AsyncSession, name: str, parent_id: Optional[str] = None) -> models.Directory:
    now = models.utc_now_iso()
    db_directory = models.Directory(
        id=models.new_id(),
        name=name,
        parent_id=parent_id,
        created_at=now,
        updated_at=now
    )
    db.add(db_directory)
    await db.commit()
    await db.refresh(db_directory)
    return db_directory

async def update_directory_parent(db: AsyncSession, db_directory: models.Directory, parent_id: Optional[str]) -> models.Directory:
    db_directory.parent_id = parent_id
    db_directory.updated_at = models.utc_now_iso()
    await db.commit()
    await db.refresh(db_directory)
    return db_directory

async def get_directory_stats(db: AsyncSession, directory_id: str) -> Tuple[int, int]:
    result = await db.execute(
        select(func.count(models.File.id), func.coalesce(func.sum(models.File.file_size), 0))
        .filter(models.File.parent_directory_id == directory_id)
    )
    file_count, total_size = result.one()
    return int(file_count), int(total_size)

async def count_directories(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(models.Directory))
    return int(result.scalar_one())

async def collect_subtree_ids(db: AsyncSession, directory_id: str) -> List[str]:
    """Ids of ``directory_id`` and all of its descendant directories.

    UNION (not UNION ALL) so a corrupt parent cycle cannot recurse forever.
    """
    subtree = (
        select(models.Directory.id)
        .filter(models.Directory.id == directory_id)
        .cte(name="subtree", recursive=True)
    )
    subtree = subtree.union(
        select(models.Directory.id).filter(models.Directory.parent_id == subtree.c.id)
    )
    result = await db.execute(select(subtree.c.id))
    return list(result.scalars().all())

async def delete_directory_tree(db: AsyncSession, directory_ids: Sequence[str]) -> int:
    """Deletes the file rows and directory rows of a subtree in one transaction."""
    if not directory_ids:
        return 0
    await db.execute(delete(models.File).where(models.File.parent_directory_id.in_(directory_ids)))
    result = await db.execute(delete(models.Directory).where(models.Directory.id.in_(directory_ids)))
    await db.commit()
    return result.rowcount
