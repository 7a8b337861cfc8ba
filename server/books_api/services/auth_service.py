import logging

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from books_api.errors import AuthError, ConflictError, NotFoundError, ValidationError
from books_api.models.user import User
from books_api.utils.security import Identity, hash_password, verify_password, create_access_token
from books_api.utils.validation import is_valid_email, check_password_strength

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_USER = "User with this email or username already exists"
USERNAME_MAX_LENGTH = 50  # 与 users.username 列宽一致


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """根据邮箱查找用户"""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """根据 ID 查找用户"""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_existing_user(db: AsyncSession, email: str, username: str) -> User | None:
    """邮箱或用户名任一重复即视为已存在"""
    result = await db.execute(
        select(User).where(or_(User.email == email, User.username == username)).limit(1)
    )
    return result.scalar_one_or_none()


def validate_registration(username: str | None, email: str | None, password: str | None) -> None:
    """注册参数校验，顺序固定：必填 → 邮箱格式 → 密码强度 → 用户名长度"""
    if not username or not email or not password:
        raise ValidationError("Username, email, and password are required")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    problem = check_password_strength(password)
    if problem:
        raise ValidationError(problem)
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")


async def register_user(
    db: AsyncSession, username: str | None, email: str | None, password: str | None
) -> User:
    """注册新用户，返回 User 实例。邮箱或用户名重复时抛 ConflictError。"""
    validate_registration(username, email, password)

    if await find_existing_user(db, email, username):
        raise ConflictError(DUPLICATE_USER)

    user = User(
        username=username,
        email=email,
        password_hash=await run_in_threadpool(hash_password, password),
    )
    db.add(user)
    try:
        await db.flush()  # 获取 id 等默认值，但不 commit（由 get_db 统一提交）
    except IntegrityError:
        # 查重与插入之间被并发请求抢先
        await db.rollback()
        raise ConflictError(DUPLICATE_USER)
    await db.refresh(user)
    logger.info(f"User registered: id={user.id} username={user.username}")
    return user


async def authenticate_user(db: AsyncSession, email: str | None, password: str | None) -> User:
    """验证邮箱+密码，返回 User。

    用户不存在与密码错误返回同一提示，避免泄露账号是否存在。
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await get_user_by_email(db, email)
    if not user or not await run_in_threadpool(verify_password, password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)
    return user


def build_token(user: User) -> str:
    """签发携带 {userId, email} 的 Token"""
    return create_access_token(user.id, user.email)


async def get_profile(db: AsyncSession, identity: Identity) -> User:
    """当前调用者的公开信息"""
    user = await get_user_by_id(db, identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
