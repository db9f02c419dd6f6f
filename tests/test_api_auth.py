"""Registration, login and the current-user endpoint."""

import pytest

from app.core.security import PasswordHasher, get_password_hasher
from tests.fakes import TEST_PASSWORD

PROBLEM_JSON = "application/problem+json"


async def register(client, email="new.user@example.com", password=TEST_PASSWORD):
    return await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "first_name": "New", "last_name": "User"},
    )


class TestRegister:
    async def test_new_user_gets_default_role(self, client, world):
        response = await register(client, email="New.User@Example.com")

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new.user@example.com"
        assert body["role"] == "USER"
        assert body["role_id"] == str(world.user_role.id)
        assert "password_hash" not in body

    async def test_duplicate_email_conflicts(self, client):
        response = await register(client, email="admin@example.com")

        assert response.status_code == 409
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["kind"] == "conflict"

    async def test_missing_default_role_is_server_fault(self, client, world):
        del world.roles.rows[world.user_role.id]

        response = await register(client)

        assert response.status_code == 500
        assert response.json()["kind"] == "not_found_integrity_fault"

    async def test_invalid_body(self, client):
        response = await client.post("/api/auth/register", json={"email": "nope", "password": "x"})

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "validation"
        fields = {e["field"] for e in body["errors"]}
        assert {"email", "password", "first_name", "last_name"} <= fields

    async def test_password_over_72_bytes_is_rejected(self, client):
        # 20 characters, 80 bytes in UTF-8
        response = await register(client, password="\U0001F600" * 20)

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "validation"
        assert [e["field"] for e in body["errors"]] == ["password"]
        assert "72 bytes" in body["errors"][0]["message"]

    async def test_password_of_exactly_72_bytes_is_accepted(self, client):
        response = await register(client, password="Aa1!" * 18)
        assert response.status_code == 201


class RecordingHasher(PasswordHasher):
    def __init__(self):
        super().__init__(rounds=4)
        self.compared = []

    def compare(self, plain: str, hashed: str) -> bool:
        self.compared.append(hashed)
        return super().compare(plain, hashed)


@pytest.fixture
def recording_hasher(api):
    recorder = RecordingHasher()
    api.dependency_overrides[get_password_hasher] = lambda: recorder
    return recorder


class TestLogin:
    async def test_login_then_me(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "regular@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "regular@example.com"

        me = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["role"] == "USER"

    async def test_registered_user_can_log_in(self, client):
        await register(client)

        response = await client.post(
            "/api/auth/login", json={"email": "new.user@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200

    async def test_wrong_password(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "regular@example.com", "password": "Wrong!Passw0rd"}
        )

        assert response.status_code == 401
        body = response.json()
        assert body["reason"] == "invalid-credentials"
        assert body["detail"] == "Invalid credentials"

    async def test_unknown_and_inactive_accounts_look_the_same(self, client):
        unknown = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD}
        )
        inactive = await client.post(
            "/api/auth/login", json={"email": "inactive@example.com", "password": TEST_PASSWORD}
        )
        deleted = await client.post(
            "/api/auth/login", json={"email": "deleted@example.com", "password": TEST_PASSWORD}
        )

        assert unknown.status_code == inactive.status_code == deleted.status_code == 401
        assert unknown.json()["detail"] == inactive.json()["detail"] == deleted.json()["detail"]

    async def test_unknown_email_still_runs_a_hash_comparison(self, client, recording_hasher):
        response = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 401
        assert recording_hasher.compared == [recording_hasher.dummy_hash]

    async def test_known_email_compares_against_the_stored_hash(self, client, world, recording_hasher):
        response = await client.post(
            "/api/auth/login", json={"email": "regular@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert recording_hasher.compared == [world.regular.password_hash]

    async def test_overlong_password_is_a_plain_credential_failure(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "regular@example.com", "password": "x" * 100}
        )

        assert response.status_code == 401
        assert response.json()["reason"] == "invalid-credentials"


class TestMe:
    async def test_requires_token(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["reason"] == "missing"

    async def test_guest_is_authenticated_without_permissions(self, client, world, bearer):
        response = await client.get("/api/auth/me", headers=bearer(world.guest))

        assert response.status_code == 200
        assert response.json()["role"] == "GUEST"
