"""Register, login and profile endpoints."""

from httpx import AsyncClient

REGISTER = {"username": "sansa", "email": "Sansa@Winterfell.example.com", "password": "lemon-cakes-4ever"}


async def _register(client: AsyncClient, **overrides) -> dict:
    body = {**REGISTER, **overrides}
    response = await client.post("/api/auth/register", json=body)
    assert response.status_code == 200, response.text
    return response.json()


class TestRegister:
    async def test_register_returns_token_and_profile(self, client: AsyncClient):
        data = await _register(client)
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == 3600
        assert data["user"]["username"] == "sansa"
        assert data["user"]["email"] == "sansa@winterfell.example.com"
        assert "passwordHash" not in data["user"]

    async def test_duplicate_username_rejected(self, client: AsyncClient):
        await _register(client)
        response = await client.post(
            "/api/auth/register", json={**REGISTER, "email": "other@example.com"}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Username or email already exists"

    async def test_duplicate_email_rejected_case_insensitive(self, client: AsyncClient):
        await _register(client)
        response = await client.post(
            "/api/auth/register",
            json={**REGISTER, "username": "sansa2", "email": "SANSA@winterfell.example.com"},
        )
        assert response.status_code == 400

    async def test_short_password_rejected(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={**REGISTER, "password": "short"})
        assert response.status_code == 400
        assert "at least" in response.json()["detail"]

    async def test_invalid_email_is_validation_error(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={**REGISTER, "email": "not-an-email"})
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    async def test_invalid_username_characters(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={**REGISTER, "username": "no spaces!"})
        assert response.status_code == 422


class TestLogin:
    async def test_login_success(self, client: AsyncClient):
        await _register(client)
        response = await client.post(
            "/api/auth/login", json={"username": "sansa", "password": REGISTER["password"]}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["user"]["username"] == "sansa"
        assert data["user"]["lastLogin"] is not None

    async def test_wrong_password(self, client: AsyncClient):
        await _register(client)
        response = await client.post("/api/auth/login", json={"username": "sansa", "password": "wrong-password"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"username": "nobody", "password": "whatever1"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"


class TestMe:
    async def test_me_with_token(self, client: AsyncClient):
        data = await _register(client)
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert response.status_code == 200
        assert response.json()["id"] == data["user"]["id"]
        assert response.json()["username"] == "sansa"

    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    async def test_me_for_deleted_user(self, client: AsyncClient):
        from wtd.auth.jwt import create_access_token

        token = create_access_token(user_id=9999, username="ghost")
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "User not found"
