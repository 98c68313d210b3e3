from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Literal, Optional

TaskPriority = Literal["high", "medium", "low"]
TaskStatus = Literal["pending", "in_progress", "completed"]


class _TaskFields(BaseModel):
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    # 旧クライアントは due_date で送ってくる
    deadline: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("deadline", "due_date")
    )

    @field_validator("priority", "status", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TaskCreate(_TaskFields):
    title: str = Field(min_length=1, max_length=100)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("タイトルは必須です")
        return v.strip()


class TaskUpdate(_TaskFields):
    title: Optional[str] = Field(None, min_length=1, max_length=100)


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    deadline: Optional[datetime] = None
    creator_id: int
    user_email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
