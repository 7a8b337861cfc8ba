from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.database import get_db
from books_api.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RegisterResponse,
    LoginResponse,
    UserResponse,
    UserBrief,
    ErrorResponse,
)
from books_api.services.auth_service import (
    register_user,
    authenticate_user,
    build_token,
    get_profile,
)
from books_api.utils.deps import get_current_identity
from books_api.utils.security import Identity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    summary="Register a user",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(body: RegisterRequest | None = None, db: AsyncSession = Depends(get_db)):
    """用户名 + 邮箱 + 密码注册，返回不含密码哈希的用户信息"""
    body = body or RegisterRequest()  # 无请求体按空对象处理
    user = await register_user(db, body.username, body.email, body.password)
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(body: LoginRequest | None = None, db: AsyncSession = Depends(get_db)):
    """邮箱 + 密码登录，返回 24 小时有效的 JWT Token"""
    body = body or LoginRequest()
    user = await authenticate_user(db, body.email, body.password)
    return LoginResponse(
        message="Login successful",
        token=build_token(user),
        user=UserBrief.model_validate(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """根据 Token 返回当前登录用户信息"""
    user = await get_profile(db, identity)
    return UserResponse.model_validate(user)
