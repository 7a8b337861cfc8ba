from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 项目信息
    APP_NAME: str = "Books API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"  # development | production | test
    LOG_LEVEL: str | None = None

    # 监听地址
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # 数据库（默认值仅适用于本地开发）
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "booksdb"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DATABASE_URL: str = ""  # 设置后优先于以上各项

    # 连接池
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 2  # 秒，获取连接超时
    DB_POOL_RECYCLE: int = 30  # 秒，回收空闲连接

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # JWT
    JWT_SECRET_KEY: str = "your-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 小时

    # 限流
    RATE_LIMIT: str = "100/15 minutes"
    RATE_LIMIT_ENABLED: bool = True

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT == "test"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        if self.is_production:
            return "INFO"
        if self.is_test:
            return "WARNING"
        return "DEBUG"


settings = Settings()
