from datetime import datetime

from pydantic import BaseModel, Field


# ---- 请求 ----
# 字段均为可选：缺失/格式/强度/长度校验在 auth_service 中按固定顺序进行，以返回确定的提示信息

class RegisterRequest(BaseModel):
    username: str | None = Field(None, description="用户名（至多 50 位）")
    email: str | None = Field(None, description="邮箱")
    password: str | None = Field(None, description="密码（至少 8 位，含大小写字母和数字）")


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


# ---- 响应 ----

class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserBrief


class ErrorResponse(BaseModel):
    message: str
