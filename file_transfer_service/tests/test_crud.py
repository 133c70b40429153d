import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import crud, models, schemas

def make_file(parent_directory_id=None, size=10, uploaded_at=None) -> schemas.FileCreate:
    file_id = models.new_id()
    return schemas.FileCreate(
        id=file_id,
        filename=f"{file_id}.txt",
        original_filename="notes.txt",
        file_size=size,
        mime_type="text/plain",
        storage_path=f"/tmp/{file_id}.txt",
        uploaded_at=uploaded_at or models.utc_now_iso(),
        parent_directory_id=parent_directory_id
    )

@pytest.mark.asyncio
async def test_create_and_get_file(db_session: AsyncSession):
    file_in = make_file()
    db_file = await crud.create_file(db_session, file_in)

    retrieved = await crud.get_file(db_session, file_in.id)
    assert retrieved is not None
    assert retrieved.id == db_file.id
    assert retrieved.original_filename == "notes.txt"
    assert retrieved.parent_directory_id is None

    assert await crud.get_file(db_session, models.new_id()) is None

@pytest.mark.asyncio
async def test_list_files_root_vs_directory_and_order(db_session: AsyncSession):
    directory = await crud.create_directory(db_session, "docs")
    older = await crud.create_file(db_session, make_file(uploaded_at="2024-01-01T10:00:00+00:00"))
    newer = await crud.create_file(db_session, make_file(uploaded_at="2024-01-02T10:00:00+00:00"))
    nested = await crud.create_file(db_session, make_file(parent_directory_id=directory.id))

    root_files = await crud.list_files(db_session)
    assert [f.id for f in root_files] == [newer.id, older.id]

    dir_files = await crud.list_files(db_session, directory.id)
    assert [f.id for f in dir_files] == [nested.id]

    assert await crud.list_files(db_session, models.new_id()) == []

@pytest.mark.asyncio
async def test_list_directories_sorted_by_name(db_session: AsyncSession):
    await crud.create_directory(db_session, "zeta")
    await crud.create_directory(db_session, "alpha")
    parent = await crud.create_directory(db_session, "mid")
    await crud.create_directory(db_session, "child", parent.id)

    root_names = [d.name for d in await crud.list_directories(db_session)]
    assert root_names == ["alpha", "mid", "zeta"]

    child_names = [d.name for d in await crud.list_directories(db_session, parent.id)]
    assert child_names == ["child"]

@pytest.mark.asyncio
async def test_create_directory_stamps_timestamps(db_session: AsyncSession):
    directory = await crud.create_directory(db_session, "docs")

    assert directory.created_at == directory.updated_at
    assert directory.created_at.endswith("+00:00")

@pytest.mark.asyncio
async def test_directory_stats_are_shallow(db_session: AsyncSession):
    parent = await crud.create_directory(db_session, "parent")
    child = await crud.create_directory(db_session, "child", parent.id)
    await crud.create_file(db_session, make_file(parent.id, size=5))
    await crud.create_file(db_session, make_file(parent.id, size=7))
    await crud.create_file(db_session, make_file(child.id, size=100))

    assert await crud.get_directory_stats(db_session, parent.id) == (2, 12)
    assert await crud.get_directory_stats(db_session, child.id) == (1, 100)
    assert await crud.get_directory_stats(db_session, models.new_id()) == (0, 0)

@pytest.mark.asyncio
async def test_collect_subtree_and_delete_tree(db_session: AsyncSession):
    root = await crud.create_directory(db_session, "root")
    child = await crud.create_directory(db_session, "child", root.id)
    grandchild = await crud.create_directory(db_session, "grandchild", child.id)
    sibling = await crud.create_directory(db_session, "sibling")
    await crud.create_file(db_session, make_file(grandchild.id))
    kept = await crud.create_file(db_session, make_file(sibling.id))

    subtree_ids = await crud.collect_subtree_ids(db_session, root.id)
    assert set(subtree_ids) == {root.id, child.id, grandchild.id}

    files = await crud.list_files_in_directories(db_session, subtree_ids)
    assert len(files) == 1

    removed = await crud.delete_directory_tree(db_session, subtree_ids)
    assert removed == 3
    assert await crud.get_directory(db_session, grandchild.id) is None
    assert await crud.list_files(db_session, grandchild.id) == []
    assert await crud.get_directory(db_session, sibling.id) is not None
    assert await crud.get_file(db_session, kept.id) is not None

@pytest.mark.asyncio
async def test_update_directory_parent_advances_updated_at(db_session: AsyncSession):
    target = await crud.create_directory(db_session, "target")
    directory = await crud.create_directory(db_session, "moving")
    directory.updated_at = "2000-01-01T00:00:00+00:00"
    await db_session.commit()

    moved = await crud.update_directory_parent(db_session, directory, target.id)

    assert moved.parent_id == target.id
    assert moved.updated_at > "2000-01-01T00:00:00+00:00"
    assert await crud.count_directories(db_session) == 2

@pytest.mark.asyncio
async def test_delete_file_reports_rowcount(db_session: AsyncSession):
    db_file = await crud.create_file(db_session, make_file())

    assert await crud.delete_file(db_session, db_file.id) is True
    assert await crud.delete_file(db_session, db_file.id) is False
