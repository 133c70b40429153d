import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, BigInteger, ForeignKey, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def new_id() -> str:
    return str(uuid.uuid4())

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

class Directory(Base):
    __tablename__ = "directories"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    parent_id = Column(String, ForeignKey("directories.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)
    updated_at = Column(String, nullable=False, default=utc_now_iso)

    def __repr__(self):
        return f"<Directory(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"

class File(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True, default=new_id)
    filename = Column(String, nullable=False)
    original_filename = Column(String, nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String, nullable=True)
    storage_path = Column(String, nullable=False)
    uploaded_at = Column(String, nullable=False, default=utc_now_iso)
    description = Column(String, nullable=True)
    parent_directory_id = Column(String, ForeignKey("directories.id", ondelete="CASCADE"), nullable=True, index=True)

    def __repr__(self):
        return f"<File(id={self.id}, name='{self.original_filename}', parent_directory_id={self.parent_directory_id})>"

Index("ix_files_uploaded_at", File.uploaded_at.desc())

