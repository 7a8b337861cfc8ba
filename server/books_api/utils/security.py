from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from passlib.context import CryptContext

from books_api.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """由已验证 Token 还原出的调用者身份，仅在单次请求内有效"""

    user_id: int
    email: str


def hash_password(password: str) -> str:
    """对密码进行 bcrypt 哈希"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: int, email: str, expires_delta: timedelta | None = None
) -> str:
    """生成 JWT Access Token，载荷为 {userId, email}"""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    """校验签名与过期时间并还原身份。

    jose 的 ExpiredSignatureError / JWTError 原样抛出，由调用方区分处理。
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    try:
        return Identity(user_id=int(payload["userId"]), email=str(payload["email"]))
    except (KeyError, TypeError, ValueError) as e:
        raise JWTError("Token payload is missing identity claims") from e
