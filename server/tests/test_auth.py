"""认证模块功能测试

覆盖端点：
- POST /api/auth/register
- POST /api/auth/login
- GET /api/auth/me
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from books_api.models.user import User
from books_api.utils.security import create_access_token, decode_access_token


TEST_PASSWORD = "Password1"  # conftest 中测试用户的密码

VALID_USER = {
    "username": "carol",
    "email": "carol@example.com",
    "password": "Password1",
}


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient):
        """注册成功 → 201，返回不含密码哈希的用户信息"""
        resp = await client.post("/api/auth/register", json=VALID_USER)
        assert resp.status_code == 201
        data = resp.json()
        assert data["message"] == "User registered successfully"
        assert data["user"]["username"] == "carol"
        assert data["user"]["email"] == "carol@example.com"
        assert isinstance(data["user"]["id"], int)
        assert "created_at" in data["user"]
        assert "password_hash" not in data["user"]
        assert "password" not in data["user"]

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_plaintext(self, client: AsyncClient, session_factory):
        await client.post("/api/auth/register", json=VALID_USER)
        async with session_factory() as db:
            user = (await db.execute(select(User).where(User.username == "carol"))).scalar_one()
        assert user.password_hash != VALID_USER["password"]
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["username", "email", "password"])
    async def test_register_missing_field(self, client: AsyncClient, missing):
        """缺少任一必填字段 → 400"""
        payload = {k: v for k, v in VALID_USER.items() if k != missing}
        resp = await client.post("/api/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username, email, and password are required"

    @pytest.mark.asyncio
    async def test_register_empty_string_counts_as_missing(self, client: AsyncClient):
        resp = await client.post("/api/auth/register", json={**VALID_USER, "username": ""})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username, email, and password are required"

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, client: AsyncClient):
        """无效邮箱格式 → 400"""
        resp = await client.post("/api/auth/register", json={
            "username": "testuser",
            "email": "invalid-email",
            "password": "Password1",
        })
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid email format"

    @pytest.mark.asyncio
    async def test_register_invalid_email_checked_before_password(self, client: AsyncClient):
        resp = await client.post("/api/auth/register", json={
            "username": "testuser",
            "email": "invalid-email",
            "password": "weak",
        })
        assert resp.json()["message"] == "Invalid email format"

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        """密码少于 8 位 → 400，优先于其他密码规则"""
        resp = await client.post("/api/auth/register", json={
            "username": "testuser",
            "email": "test@test.com",
            "password": "weak",
        })
        assert resp.status_code == 400
        assert resp.json()["message"] == "Password must be at least 8 characters"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password, message", [
        ("password1", "Password must contain at least one uppercase letter"),
        ("PASSWORD1", "Password must contain at least one lowercase letter"),
        ("Passwordx", "Password must contain at least one number"),
    ])
    async def test_register_weak_password_rules(self, client: AsyncClient, password, message):
        resp = await client.post("/api/auth/register", json={**VALID_USER, "password": password})
        assert resp.status_code == 400
        assert resp.json()["message"] == message

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, session_factory):
        """重复邮箱注册 → 409，且不会新增记录"""
        await client.post("/api/auth/register", json=VALID_USER)
        resp = await client.post("/api/auth/register", json={**VALID_USER, "username": "carol2"})
        assert resp.status_code == 409
        assert resp.json()["message"] == "User with this email or username already exists"

        async with session_factory() as db:
            count = (await db.execute(select(func.count()).select_from(User))).scalar()
        assert count == 1

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, client: AsyncClient, test_user):
        resp = await client.post("/api/auth/register", json={
            **VALID_USER, "username": test_user.username,
        })
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_register_wrong_field_type(self, client: AsyncClient):
        resp = await client.post("/api/auth/register", json={**VALID_USER, "username": ["x"]})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid value for 'username'"

    @pytest.mark.asyncio
    async def test_register_without_body(self, client: AsyncClient):
        """无请求体 → 按缺少全部字段处理"""
        resp = await client.post("/api/auth/register")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username, email, and password are required"

    @pytest.mark.asyncio
    async def test_register_long_password_accepted(self, client: AsyncClient):
        """密码没有长度上限"""
        resp = await client.post("/api/auth/register", json={**VALID_USER, "password": "Aa1" + "x" * 200})
        assert resp.status_code == 201

    @pytest.mark.asyncio
    async def test_register_username_too_long(self, client: AsyncClient):
        """用户名超长在密码规则之后检查"""
        resp = await client.post("/api/auth/register", json={**VALID_USER, "username": "u" * 51, "password": "weak"})
        assert resp.json()["message"] == "Password must be at least 8 characters"

        resp = await client.post("/api/auth/register", json={**VALID_USER, "username": "u" * 51})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username must be at most 50 characters"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_user):
        """正确邮箱+密码 → 登录成功，Token 载荷为 {userId, email}"""
        resp = await client.post("/api/auth/login", json={
            "email": test_user.email,
            "password": TEST_PASSWORD,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Login successful"
        assert data["user"] == {
            "id": test_user.id,
            "username": test_user.username,
            "email": test_user.email,
        }
        identity = decode_access_token(data["token"])
        assert identity.user_id == test_user.id
        assert identity.email == test_user.email

    @pytest.mark.asyncio
    async def test_register_then_login(self, client: AsyncClient):
        await client.post("/api/auth/register", json=VALID_USER)
        resp = await client.post("/api/auth/login", json={
            "email": VALID_USER["email"],
            "password": VALID_USER["password"],
        })
        assert resp.status_code == 200
        assert resp.json()["token"]

    @pytest.mark.asyncio
    async def test_login_missing_field(self, client: AsyncClient):
        """缺少邮箱或密码 → 400"""
        resp = await client.post("/api/auth/login", json={"email": "test@test.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email and password are required"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        """密码错误 → 401"""
        resp = await client.post("/api/auth/login", json={
            "email": test_user.email,
            "password": "WrongPassword1",
        })
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_nonexistent_user(self, client: AsyncClient):
        """不存在的用户 → 401，提示与密码错误一致"""
        resp = await client.post("/api/auth/login", json={
            "email": "nonexistent@test.com",
            "password": "Password1",
        })
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_without_body(self, client: AsyncClient):
        resp = await client.post("/api/auth/login")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email and password are required"


class TestGetMe:

    @pytest.mark.asyncio
    async def test_get_me(self, client: AsyncClient, auth_headers, test_user):
        """GET /api/auth/me → 返回当前用户信息"""
        resp = await client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == test_user.id
        assert data["email"] == test_user.email
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_get_me_no_token(self, client: AsyncClient):
        """无 Token → 401"""
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["message"] == "No token provided"

    @pytest.mark.asyncio
    async def test_get_me_user_vanished(self, client: AsyncClient):
        """Token 有效但用户已不存在 → 404"""
        token = create_access_token(9999, "ghost@example.com", expires_delta=timedelta(minutes=5))
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"
