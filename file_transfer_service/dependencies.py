from config import settings
from database import AsyncSessionLocal
from storage import FileStorage

file_storage = FileStorage(settings.UPLOAD_DIR, AsyncSessionLocal)

def get_storage() -> FileStorage:
    return file_storage
