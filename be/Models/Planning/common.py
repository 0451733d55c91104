import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime


def new_id() -> str:
    return str(uuid.uuid4())


class FileColumns:
    """Metadata columns shared by every file attachment table. Contents live in object storage."""
    id = Column(String(36), primary_key=True, default=new_id)
    file_name = Column(String(255), nullable=False, default="")
    file_key = Column(String(500), nullable=False, default="")
    content_type = Column(String(150), nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
