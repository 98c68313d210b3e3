from pydantic import BaseModel, EmailStr
from typing import Literal, Optional


class UserUpdate(BaseModel):
    """管理者によるユーザー更新"""

    email: Optional[EmailStr] = None
    role: Optional[Literal["user", "admin"]] = None


class SelfUpdate(BaseModel):
    email: EmailStr
