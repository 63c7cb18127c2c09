"""SQLAlchemy ORM model backing the document store"""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_document_id() -> str:
    return uuid.uuid4().hex


class Document(Base):
    """One record in a named collection, stored as a JSON payload"""

    __tablename__ = "documents"

    collection = Column(Text, primary_key=True)
    id = Column(String(64), primary_key=True, default=new_document_id)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
