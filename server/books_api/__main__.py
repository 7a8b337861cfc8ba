import logging

import uvicorn

from books_api.config import settings

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    # 测试环境下只导入应用，不监听端口
    if settings.is_test:
        logger.warning("ENVIRONMENT=test, not starting the HTTP server")
    else:
        uvicorn.run(
            "books_api.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.ENVIRONMENT == "development",
        )
