import json
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional, Union

WenjuanStatus = Literal["draft", "published"]


def as_json_text(v):
    """文字列配列が直接渡された場合はJSON文字列に変換して保存形式に揃える"""
    if isinstance(v, list):
        return json.dumps(v, ensure_ascii=False)
    return v


class WenjuanCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: Union[str, list[str]]
    status: WenjuanStatus = "draft"
    deadline: Optional[datetime] = None
    category_id: Optional[int] = Field(None, ge=1)

    @field_validator("content")
    @classmethod
    def normalize_content(cls, v):
        return as_json_text(v)


class WenjuanUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[Union[str, list[str]]] = None
    status: Optional[WenjuanStatus] = None
    deadline: Optional[datetime] = None

    @field_validator("content")
    @classmethod
    def normalize_content(cls, v):
        return as_json_text(v)


class AnswerSubmit(BaseModel):
    answer: Union[str, list[str]]

    @field_validator("answer")
    @classmethod
    def normalize_answer(cls, v):
        return as_json_text(v)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class WenjuanOut(BaseModel):
    id: int
    title: str
    content: str
    status: str
    deadline: Optional[datetime] = None
    is_pinned: bool
    creator_id: int
    user_email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AnswerOut(BaseModel):
    id: int
    wenjuan_id: int
    user_id: Optional[int] = None
    user_email: str
    answer: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
