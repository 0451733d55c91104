"""
Project Category and Project Type Models

Categories group project types (e.g. "software" -> "website", "erp").
A project optionally references one type.

Database Tables: project_categories, project_types
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from Database.session import Base
from Models.Planning.common import new_id


class ProjectCategory(Base):
    __tablename__ = "project_categories"
    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(100), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    types = relationship("ProjectType", back_populates="category")


class ProjectType(Base):
    __tablename__ = "project_types"
    id = Column(String(36), primary_key=True, default=new_id)
    category_id = Column(String(36), ForeignKey("project_categories.id", name="project_types_category_id_fkey"),
                         nullable=False, index=True)
    code = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("ProjectCategory", back_populates="types")

    @property
    def category_code(self):
        return self.category.code if self.category else ""

    @property
    def category_name(self):
        return self.category.name if self.category else ""


Index("project_types_code_lower_key", func.lower(ProjectType.code), unique=True)
Index("project_types_category_name_lower_key", ProjectType.category_id, func.lower(ProjectType.name), unique=True)
