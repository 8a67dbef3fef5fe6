from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from datetime import datetime, timezone
import uuid

Base = declarative_base()

def generate_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class BaseModel(Base):
    __abstract__ = True

    seq = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

class DocumentRow(BaseModel):
    """One schema-less document; every collection shares this table"""
    __tablename__ = "documents"

    collection = Column(String(64), nullable=False)
    id = Column(String(32), nullable=False, default=generate_id)
    data = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index('ix_documents_collection_id', 'collection', 'id', unique=True),
        Index('ix_documents_collection', 'collection'),
    )
