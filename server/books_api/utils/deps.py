import logging

from fastapi import Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError

from books_api.errors import AuthError, InternalError
from books_api.utils.security import Identity, decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False：缺失/格式错误时由下方依赖统一返回 {"message": ...}
bearer_scheme = HTTPBearer(auto_error=False, description="Authorization: Bearer <token>")


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> Identity:
    """JWT 鉴权依赖：解析 Bearer Token → 校验签名与过期 → 返回不可变身份"""
    if credentials is None or not credentials.credentials:
        raise AuthError("No token provided")

    try:
        return decode_access_token(credentials.credentials)
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Invalid token")
    except Exception:
        logger.exception("Unexpected error while verifying token")
        raise InternalError()
