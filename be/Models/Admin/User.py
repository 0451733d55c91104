from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean
from Database.session import Base
from Models.Planning.common import new_id


class User(Base):
    """Internal staff member. Lookup-only here: managed by the admin console."""
    __tablename__ = 'users'
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False, default="")
    email = Column(String(200), nullable=False, default="")
    login = Column(String(100), unique=True, index=True)
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
