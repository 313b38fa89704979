"""Tests for grade endpoints."""

import uuid

from httpx import AsyncClient

from tests.conftest import auth_header


class TestGrades:
    """Tests for grade CRUD."""

    async def test_create_grade(self, client: AsyncClient, school_admin_token):
        """Test SchoolAdmin creates a grade."""
        response = await client.post(
            "/api/v1/grades",
            headers=auth_header(school_admin_token),
            json={"name": "Grade 7"},
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Grade 7"

    async def test_create_duplicate(self, client: AsyncClient, school_admin_token, grade):
        """Test grade names are unique."""
        response = await client.post(
            "/api/v1/grades",
            headers=auth_header(school_admin_token),
            json={"name": "Grade 1"},
        )

        assert response.status_code == 409

    async def test_list_grades(self, client: AsyncClient, director_token, grade):
        """Test listing grades."""
        response = await client.get("/api/v1/grades", headers=auth_header(director_token))

        assert response.status_code == 200
        assert [g["name"] for g in response.json()] == ["Grade 1"]

    async def test_rename_grade(self, client: AsyncClient, school_admin_token, grade):
        """Test renaming a grade."""
        response = await client.patch(
            f"/api/v1/grades/{grade.id}",
            headers=auth_header(school_admin_token),
            json={"name": "Grade One"},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Grade One"

    async def test_get_grade_not_found(self, client: AsyncClient, school_admin_token):
        """Test getting a non-existent grade."""
        response = await client.get(f"/api/v1/grades/{uuid.uuid4()}", headers=auth_header(school_admin_token))

        assert response.status_code == 404


class TestDeleteGrade:
    """Tests for DELETE /grades/{id}."""

    async def test_school_admin_cannot_delete(self, client: AsyncClient, school_admin_token, grade):
        """Test SchoolAdmin never deletes."""
        response = await client.delete(f"/api/v1/grades/{grade.id}", headers=auth_header(school_admin_token))

        assert response.status_code == 403

    async def test_delete_grade(self, client: AsyncClient, director_token, grade):
        """Test Director deletes an empty grade."""
        response = await client.delete(f"/api/v1/grades/{grade.id}", headers=auth_header(director_token))

        assert response.status_code == 204

    async def test_delete_grade_with_pupils(self, client: AsyncClient, director_token, grade, pupil):
        """Test a grade with pupils cannot be deleted."""
        response = await client.delete(f"/api/v1/grades/{grade.id}", headers=auth_header(director_token))

        assert response.status_code == 400
