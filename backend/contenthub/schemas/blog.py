from datetime import datetime
from pydantic import BaseModel, Field
from typing import Literal, Optional

BlogStatus = Literal["draft", "published"]


class BlogCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1)
    category: Optional[str] = Field(None, max_length=50)
    tags: Optional[str] = Field(None, max_length=200)
    status: BlogStatus = "draft"


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, max_length=50)
    tags: Optional[str] = Field(None, max_length=200)
    status: Optional[BlogStatus] = None


class BlogOut(BaseModel):
    id: int
    title: str
    content: str
    category: Optional[str] = None
    tags: Optional[str] = None
    status: str
    likes: int
    user_id: int
    user_email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
