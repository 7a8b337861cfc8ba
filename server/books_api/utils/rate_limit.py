from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from books_api.config import settings

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

# 全局限流：按客户端地址的滑动窗口计数，对所有路由生效（由 SlowAPIMiddleware 执行）
limiter = Limiter(
    key_func=get_remote_address,
    strategy="moving-window",
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED and not settings.is_test,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # SlowAPIMiddleware 同步调用该处理器，不能声明为 async
    return JSONResponse(status_code=429, content={"message": RATE_LIMIT_MESSAGE})
