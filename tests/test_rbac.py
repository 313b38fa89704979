"""Tests for access control endpoints."""

from httpx import AsyncClient

from tests.conftest import auth_header


class TestMyPermissions:
    """Tests for GET /rbac/me."""

    async def test_director(self, client: AsyncClient, director_token):
        """Test a Director sees their permissions."""
        response = await client.get("/api/v1/rbac/me", headers=auth_header(director_token))

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "Director"
        assert "payments:approve_delete" in data["permissions"]
        assert not any(p.startswith("users:") for p in data["permissions"])
        assert data["capabilities"]["can_manage_terms"] is True


class TestCheckPermission:
    """Tests for GET /rbac/check."""

    async def test_allowed(self, client: AsyncClient, school_admin_token):
        """Test an allowed pair."""
        response = await client.get(
            "/api/v1/rbac/check",
            headers=auth_header(school_admin_token),
            params={"resource": "payments", "action": "create"},
        )

        assert response.status_code == 200
        assert response.json()["allowed"] is True

    async def test_denied_with_reason(self, client: AsyncClient, school_admin_token):
        """Test a denied pair explains why."""
        response = await client.get(
            "/api/v1/rbac/check",
            headers=auth_header(school_admin_token),
            params={"resource": "term", "action": "override"},
        )

        data = response.json()
        assert data["allowed"] is False
        assert data["reason"]

    async def test_unrecognized_pair(self, client: AsyncClient, school_admin_token, super_admin_token):
        """Test unrecognized names are denied except for SuperAdmin."""
        params = {"resource": "spaceships", "action": "launch"}

        school_admin = await client.get(
            "/api/v1/rbac/check", headers=auth_header(school_admin_token), params=params
        )
        super_admin = await client.get(
            "/api/v1/rbac/check", headers=auth_header(super_admin_token), params=params
        )

        assert school_admin.json()["allowed"] is False
        assert super_admin.json()["allowed"] is True


class TestPermissionMatrix:
    """Tests for GET /rbac/matrix."""

    async def test_matrix(self, client: AsyncClient, super_admin_token):
        """Test SuperAdmin reads the full matrix."""
        response = await client.get("/api/v1/rbac/matrix", headers=auth_header(super_admin_token))

        assert response.status_code == 200
        data = response.json()
        assert set(data["roles"]) == {"SuperAdmin", "Director", "SchoolAdmin"}
        assert sorted(data["roles"]["SuperAdmin"]) == sorted(data["permissions"])
        assert "fees:delete" not in data["roles"]["SchoolAdmin"]

    async def test_matrix_forbidden(self, client: AsyncClient, director_token):
        """Test Director cannot manage users, so cannot read the matrix."""
        response = await client.get("/api/v1/rbac/matrix", headers=auth_header(director_token))

        assert response.status_code == 403

    async def test_matrix_school_admin_forbidden(self, client: AsyncClient, school_admin_token):
        """Test SchoolAdmin cannot read the matrix."""
        response = await client.get("/api/v1/rbac/matrix", headers=auth_header(school_admin_token))

        assert response.status_code == 403
        assert response.json()["detail"] == "Not enough permissions"
