from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


class SendCodeRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6)

    @field_validator("code")
    @classmethod
    def check_code_digits(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("認証コードは6桁の数字で入力してください")
        return v


class TokenClaims(BaseModel):
    """JWTから取り出した認証ユーザー情報"""

    id: int
    email: str
    role: str = "user"
    exp: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserInfo(BaseModel):
    id: int
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserInfo


class TokenResponse(BaseModel):
    status: str = "success"
    token: str


class MessageResponse(BaseModel):
    message: str
