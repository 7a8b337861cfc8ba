"""全局中间件：安全响应头 + 请求日志"""

import logging
import time

from fastapi import FastAPI, Request

from books_api.config import settings

logger = logging.getLogger("books_api.access")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Opener-Policy": "same-origin",
}


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    if settings.is_test:
        return

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if settings.is_production:
            client = request.client.host if request.client else "-"
            logger.info(
                f'{client} "{request.method} {request.url.path} '
                f'HTTP/{request.scope.get("http_version", "1.1")}" '
                f'{response.status_code} "{request.headers.get("user-agent", "-")}" {elapsed_ms:.1f}ms'
            )
        else:
            logger.debug(f"{request.method} {request.url.path} {response.status_code} - {elapsed_ms:.1f} ms")
        return response
