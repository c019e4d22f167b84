from typing import Optional

from pydantic import BaseModel, Field

from models.enums import UserRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="用户名")
    password: str = Field(..., min_length=1, description="密码")


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    name: Optional[str] = None
    role: UserRole
    department_id: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True
