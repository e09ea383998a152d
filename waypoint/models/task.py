from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from waypoint.database.base import Base

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("project.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    status = Column(String(20), nullable=False, default="not_started")
    priority = Column(String(20), nullable=False, default="medium")
    weight = Column(Integer, nullable=False, default=1)
    tags = Column(JSON, nullable=False, default=list)
    assignees = Column(JSON, nullable=False, default=list)

    # Back-reference to Sprint.tasks, owned by the cascade engine
    sprint_id = Column(Integer, nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    history = relationship(
        "TaskHistoryItem",
        back_populates="task",
        order_by="TaskHistoryItem.id",
        cascade="all, delete-orphan"
    )

class TaskHistoryItem(Base):
    """
    One immutable ledger entry of a task.
    Entries are only ever appended, or removed when their author is deleted.
    """
    __tablename__ = "task_history"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # creation, update, work_log, comment
    author_id = Column(Integer, nullable=True, index=True)

    comment = Column(Text, nullable=True)
    work_time = Column(Integer, nullable=True)  # milliseconds
    changes = Column(JSON, nullable=True)  # {field: {"from": ..., "to": ...}}

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    task = relationship("Task", back_populates="history")
