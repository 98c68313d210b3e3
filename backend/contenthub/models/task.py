from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SAEnum, ForeignKey, func
from contenthub.core.database import Base

TASK_PRIORITIES = ("high", "medium", "low")
TASK_STATUSES = ("pending", "in_progress", "completed")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(SAEnum(*TASK_PRIORITIES, name="task_priority"), nullable=False, default="medium")
    status = Column(SAEnum(*TASK_STATUSES, name="task_status"), nullable=False, default="pending")
    deadline = Column(DateTime, nullable=True)

    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(100), nullable=False, comment="作成者メール (非正規化)")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)
