"""
Project Aggregate Models

This module defines the project aggregate: the project row, its client and
manager links, its planning rows (phases and tasks, with their files and
task comments) and its financial rows (revenues with receipts and monthly
charges).

Database Tables: projects, project_clients, project_managers, project_phases,
project_phase_files, project_tasks, project_task_files, project_task_comments,
project_task_comment_files, project_revenues, project_revenue_receipts,
project_monthly_charges

A project exclusively owns every row in this module. All foreign keys back to
the project (directly or through a phase, task, comment or revenue) use
ON DELETE CASCADE, so deleting the project row removes the whole aggregate.

Task rows double as logical sub-phase containers: the hierarchy between tasks
lives in the planner-meta descriptor carried by `objective`, not in a foreign
key (see Planning.planner_meta).
"""

from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, Date, DateTime, Boolean, ForeignKey,
    CheckConstraint, Index, func,
)
from sqlalchemy.orm import relationship
from Database.session import Base
from Models.Planning.common import new_id, FileColumns
from Planning.planner_meta import parse_planner_meta


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    objective = Column(Text, nullable=False, default="")
    project_type_id = Column(String(36), ForeignKey("project_types.id", name="projects_project_type_id_fkey"),
                             nullable=True, index=True)
    lifecycle_type = Column(String(20), nullable=False, default="temporario")
    has_monthly_maintenance = Column(Boolean, nullable=False, default=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="planejamento")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("lifecycle_type IN ('temporario', 'recorrente')", name="projects_lifecycle_type_check"),
        CheckConstraint("status IN ('planejamento', 'andamento', 'concluido', 'cancelado')",
                        name="projects_status_check"),
    )

    project_type = relationship("ProjectType")
    client_links = relationship("ProjectClient", back_populates="project",
                                cascade="all, delete-orphan", passive_deletes=True)
    manager_links = relationship("ProjectManager", back_populates="project",
                                 cascade="all, delete-orphan", passive_deletes=True)
    phases = relationship(
        "ProjectPhase", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectPhase.starts_on.is_(None), ProjectPhase.starts_on, ProjectPhase.position,
                          ProjectPhase.created, ProjectPhase.id),
    )
    tasks = relationship(
        "ProjectTask", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectTask.starts_on.is_(None), ProjectTask.starts_on, ProjectTask.position,
                          ProjectTask.created, ProjectTask.id),
    )
    revenues = relationship(
        "ProjectRevenue", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectRevenue.expected_on.is_(None), ProjectRevenue.expected_on,
                          ProjectRevenue.created, ProjectRevenue.id),
    )
    monthly_charges = relationship(
        "ProjectMonthlyCharge", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectMonthlyCharge.due_day, ProjectMonthlyCharge.created, ProjectMonthlyCharge.id),
    )

    @property
    def project_type_name(self):
        return self.project_type.name if self.project_type else ""

    @property
    def project_category_name(self):
        return self.project_type.category_name if self.project_type else ""

    @property
    def clients(self):
        return sorted(self.client_links, key=lambda link: (link.name.lower(), link.client_id))

    @property
    def managers(self):
        return sorted(self.manager_links, key=lambda link: (link.name.lower(), link.user_id))

    @property
    def manager_user_ids(self):
        return {link.user_id for link in self.manager_links}


Index("projects_name_lower_key", func.lower(Project.name), unique=True)


class ProjectClient(Base):
    __tablename__ = "project_clients"
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    client_id = Column(String(36), ForeignKey("clients.id", name="project_clients_client_id_fkey"),
                       primary_key=True)
    role = Column(String(50), nullable=False, default="")

    project = relationship("Project", back_populates="client_links")
    client = relationship("Client", lazy="joined")

    @property
    def name(self):
        return self.client.name if self.client else ""

    @property
    def email(self):
        return self.client.email if self.client else ""

    @property
    def login(self):
        return (self.client.login or "") if self.client else ""


class ProjectManager(Base):
    __tablename__ = "project_managers"
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", name="project_managers_user_id_fkey"), primary_key=True)

    project = relationship("Project", back_populates="manager_links")
    user = relationship("User", lazy="joined")

    @property
    def name(self):
        return self.user.name if self.user else ""

    @property
    def email(self):
        return self.user.email if self.user else ""

    @property
    def login(self):
        return (self.user.login or "") if self.user else ""


class ProjectPhase(Base):
    __tablename__ = "project_phases"
    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    objective = Column(Text, nullable=False, default="")
    starts_on = Column(Date, nullable=True)
    ends_on = Column(Date, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="phases")
    files = relationship(
        "ProjectPhaseFile", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectPhaseFile.created, ProjectPhaseFile.id),
    )


class ProjectPhaseFile(FileColumns, Base):
    __tablename__ = "project_phase_files"
    project_phase_id = Column(String(36), ForeignKey("project_phases.id", ondelete="CASCADE"),
                              nullable=False, index=True)


class ProjectTask(Base):
    __tablename__ = "project_tasks"
    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    phase_id = Column("project_phase_id", String(36), ForeignKey("project_phases.id", ondelete="SET NULL"),
                      nullable=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    # free text, or a planner-meta descriptor marking the row as a sub-phase or a nested task
    objective = Column(Text, nullable=False, default="")
    responsible_user_id = Column(
        String(36),
        ForeignKey("users.id", name="project_tasks_responsible_user_id_fkey", ondelete="SET NULL"),
        nullable=True,
    )
    starts_on = Column(Date, nullable=True)
    ends_on = Column(Date, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="planejada")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('planejada', 'iniciada', 'concluida', 'cancelada')",
                        name="project_tasks_status_check"),
    )

    project = relationship("Project", back_populates="tasks")
    responsible_user = relationship("User")
    files = relationship(
        "ProjectTaskFile", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectTaskFile.created, ProjectTaskFile.id),
    )
    comments = relationship(
        "ProjectTaskComment", back_populates="task", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectTaskComment.created, ProjectTaskComment.id),
    )

    @property
    def planner_meta(self):
        meta, ok = parse_planner_meta(self.objective)
        return meta if ok else None

    @property
    def responsible_user_name(self):
        return self.responsible_user.name if self.responsible_user else ""


class ProjectTaskFile(FileColumns, Base):
    __tablename__ = "project_task_files"
    project_task_id = Column(String(36), ForeignKey("project_tasks.id", ondelete="CASCADE"),
                             nullable=False, index=True)


class ProjectTaskComment(Base):
    __tablename__ = "project_task_comments"
    id = Column(String(36), primary_key=True, default=new_id)
    project_task_id = Column(String(36), ForeignKey("project_tasks.id", ondelete="CASCADE"),
                             nullable=False, index=True)
    parent_comment_id = Column(String(36), ForeignKey("project_task_comments.id", ondelete="CASCADE"),
                               nullable=True)
    user_id = Column(String(36), ForeignKey("users.id", name="project_task_comments_user_id_fkey"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id", name="project_task_comments_client_id_fkey"),
                       nullable=True)
    comment = Column(Text, nullable=False)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("(user_id IS NULL) <> (client_id IS NULL)", name="project_task_comments_author_check"),
    )

    task = relationship("ProjectTask", back_populates="comments")
    user = relationship("User")
    client = relationship("Client")
    files = relationship(
        "ProjectTaskCommentFile", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectTaskCommentFile.created, ProjectTaskCommentFile.id),
    )

    @property
    def author_type(self):
        return "client" if self.client_id else "user"

    @property
    def author_name(self):
        author = self.client if self.client_id else self.user
        return author.name if author else ""


class ProjectTaskCommentFile(FileColumns, Base):
    __tablename__ = "project_task_comment_files"
    project_task_comment_id = Column(String(36), ForeignKey("project_task_comments.id", ondelete="CASCADE"),
                                     nullable=False, index=True)


class ProjectRevenue(Base):
    __tablename__ = "project_revenues"
    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    objective = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False, default=0)
    expected_on = Column(Date, nullable=True)
    received_on = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pendente")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="project_revenues_amount_check"),
        CheckConstraint("status IN ('pendente', 'recebido', 'cancelado')", name="project_revenues_status_check"),
    )

    project = relationship("Project", back_populates="revenues")
    receipts = relationship(
        "ProjectRevenueReceipt", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: (ProjectRevenueReceipt.created, ProjectRevenueReceipt.id),
    )


class ProjectRevenueReceipt(FileColumns, Base):
    __tablename__ = "project_revenue_receipts"
    project_revenue_id = Column(String(36), ForeignKey("project_revenues.id", ondelete="CASCADE"),
                                nullable=False, index=True)
    issued_on = Column(Date, nullable=True)


class ProjectMonthlyCharge(Base):
    __tablename__ = "project_monthly_charges"
    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    installment = Column(String(100), nullable=False, default="")
    amount = Column(Float, nullable=False, default=0)
    due_day = Column(Integer, nullable=False, default=1)
    starts_on = Column(Date, nullable=True)
    ends_on = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pendente")
    active = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="project_monthly_charges_amount_check"),
        CheckConstraint("due_day BETWEEN 1 AND 31", name="project_monthly_charges_due_day_check"),
        CheckConstraint("status IN ('pendente', 'pago', 'cancelada')", name="project_monthly_charges_status_check"),
        CheckConstraint("starts_on IS NULL OR ends_on IS NULL OR ends_on >= starts_on",
                        name="project_monthly_charges_dates_check"),
    )

    project = relationship("Project", back_populates="monthly_charges")
