"""测试公共 Fixtures —— 内存 SQLite + 独立 TestClient"""

import os

# 必须在导入 books_api 之前设置：关闭限流/请求日志，并避免连接真实 PostgreSQL
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from books_api.database import Base, get_db  # noqa: E402
from books_api.models.book import Book  # noqa: E402
from books_api.models.user import User  # noqa: E402
from books_api.utils.security import hash_password, create_access_token  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Password1"


# ──────────── 内存数据库 ────────────

@pytest_asyncio.fixture
async def session_factory():
    """每个测试独立的内存库；StaticPool 保证所有会话共用同一连接"""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


# ──────────── FastAPI TestClient ────────────

@pytest_asyncio.fixture
async def client(session_factory):
    from books_api.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ──────────── 测试用户 ────────────

async def _create_user(session_factory, username: str, email: str) -> User:
    async with session_factory() as db:
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(TEST_PASSWORD),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


def _headers_for(user: User) -> dict:
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(session_factory) -> User:
    return await _create_user(session_factory, "alice", "alice@example.com")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _create_user(session_factory, "bob", "bob@example.com")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers_for(other_user)


# ──────────── 测试图书 ────────────

@pytest_asyncio.fixture
async def test_book(session_factory, test_user: User) -> Book:
    async with session_factory() as db:
        book = Book(title="Dune", author="Frank Herbert", year=1965, user_id=test_user.id)
        db.add(book)
        await db.commit()
        await db.refresh(book)
        return book
