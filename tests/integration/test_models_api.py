"""Integration tests for model endpoints."""

import uuid

import pytest
from httpx import AsyncClient

from modelvault.kernel.storage import ArtifactVariant


async def create_model(client: AsyncClient, headers: dict, user_id, name: str = "Bridge") -> dict:
    response = await client.post(
        f"/api/v1/models/{user_id}",
        json={"name": name},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestCreateModel:
    """Tests for POST /api/v1/models/{user_id}."""

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()

        data = await create_model(client, admin_headers, anna.id)

        assert data["name"] == "Bridge"
        assert data["owners"] == [str(anna.id)]
        assert data["file_exists"] is False
        assert data["variant_file_exists"] is False
        uuid.UUID(data["id"])

    @pytest.mark.asyncio
    async def test_owner_list_in_body_is_discarded(self, client: AsyncClient, admin_headers, make_user):
        anna, jan = await make_user(), await make_user()

        response = await client.post(
            f"/api/v1/models/{anna.id}",
            json={"name": "Bridge", "user": [str(jan.id)]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["owners"] == [str(anna.id)]

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, make_user, headers_for):
        anna = await make_user()

        response = await client.post(
            f"/api/v1/models/{anna.id}",
            json={"name": "Bridge"},
            headers=headers_for(anna),
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Access forbidden."

    @pytest.mark.asyncio
    async def test_missing_user(self, client: AsyncClient, admin_headers):
        response = await client.post(
            f"/api/v1/models/{uuid.uuid4()}",
            json={"name": "Bridge"},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found..."

    @pytest.mark.asyncio
    async def test_invalid_user_id(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/v1/models/not-an-id",
            json={"name": "Bridge"},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid user id..."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["ab", "x" * 101])
    async def test_name_length(self, client: AsyncClient, admin_headers, make_user, name):
        anna = await make_user()

        response = await client.post(
            f"/api/v1/models/{anna.id}",
            json={"name": name},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Validation error"

    @pytest.mark.asyncio
    async def test_empty_owner_list_is_rejected(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()

        response = await client.post(
            f"/api/v1/models/{anna.id}",
            json={"name": "Bridge", "user": []},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == '"user" must contain at least 1 items'

        listed = await client.get(f"/api/v1/models/{anna.id}", headers=admin_headers)
        assert listed.json() == []


class TestReadModels:
    """Tests for GET /api/v1/models/{user_id}[/{model_id}]."""

    @pytest.mark.asyncio
    async def test_user_lists_own_models(self, client: AsyncClient, admin_headers, make_user, headers_for):
        anna = await make_user()
        first = await create_model(client, admin_headers, anna.id, "First")
        second = await create_model(client, admin_headers, anna.id, "Second")

        response = await client.get(f"/api/v1/models/{anna.id}", headers=headers_for(anna))

        assert response.status_code == 200
        assert {m["id"] for m in response.json()} == {first["id"], second["id"]}

    @pytest.mark.asyncio
    async def test_user_cannot_list_other_users_models(
        self, client: AsyncClient, make_user, headers_for
    ):
        anna, jan = await make_user(), await make_user()

        response = await client.get(f"/api/v1/models/{anna.id}", headers=headers_for(jan))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_lists_missing_user(self, client: AsyncClient, admin_headers):
        response = await client.get(f"/api/v1/models/{uuid.uuid4()}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found..."

    @pytest.mark.asyncio
    async def test_get_reflects_files_on_disk(self, client: AsyncClient, admin_headers, make_user, store):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)
        store.write(uuid.UUID(model["id"]), ArtifactVariant.PLATFORM_VARIANT, b"ios")

        response = await client.get(f"/api/v1/models/{anna.id}/{model['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["file_exists"] is False
        assert response.json()["variant_file_exists"] is True

    @pytest.mark.asyncio
    async def test_get_unowned_model(self, client: AsyncClient, admin_headers, make_user):
        anna, jan = await make_user(), await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.get(f"/api/v1/models/{jan.id}/{model['id']}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Model or user not found"

    @pytest.mark.asyncio
    async def test_get_invalid_model_id(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()

        response = await client.get(f"/api/v1/models/{anna.id}/nope", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid id..."


class TestUpdateModel:
    """Tests for PUT /api/v1/models/{user_id}/{model_id}."""

    @pytest.mark.asyncio
    async def test_share_and_rename(self, client: AsyncClient, admin_headers, make_user):
        anna, jan = await make_user(), await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Tower", "user": [str(anna.id), str(jan.id)]},
            headers=admin_headers,
        )

        assert response.status_code == 200, response.text
        assert response.json()["name"] == "Tower"
        assert response.json()["owners"] == [str(anna.id), str(jan.id)]

        listed = await client.get(f"/api/v1/models/{jan.id}", headers=admin_headers)
        assert [m["id"] for m in listed.json()] == [model["id"]]

    @pytest.mark.asyncio
    async def test_rename_keeps_owners(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Tower"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["owners"] == [str(anna.id)]

    @pytest.mark.asyncio
    async def test_empty_owner_list(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Tower", "user": []},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == '"user" must contain at least 1 items'

        unchanged = await client.get(f"/api/v1/models/{anna.id}/{model['id']}", headers=admin_headers)
        assert unchanged.json()["name"] == "Bridge"
        assert unchanged.json()["owners"] == [str(anna.id)]

    @pytest.mark.asyncio
    async def test_empty_owner_list_checked_before_lookup(
        self, client: AsyncClient, admin_headers, make_user
    ):
        anna = await make_user()

        response = await client.put(
            f"/api/v1/models/{anna.id}/{uuid.uuid4()}",
            json={"name": "Tower", "user": []},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == '"user" must contain at least 1 items'

    @pytest.mark.asyncio
    async def test_unknown_owner(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Tower", "user": [str(uuid.uuid4())]},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "User in user property not found ..."

    @pytest.mark.asyncio
    async def test_model_of_someone_else(self, client: AsyncClient, admin_headers, make_user):
        anna, jan = await make_user(), await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{jan.id}/{model['id']}",
            json={"name": "Tower", "user": [str(jan.id)]},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Model not found..."

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, admin_headers, make_user, headers_for):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Tower"},
            headers=headers_for(anna),
        )

        assert response.status_code == 403


class TestDeleteModel:
    """Tests for DELETE /api/v1/models/..."""

    @pytest.mark.asyncio
    async def test_remove_missing_user(self, client: AsyncClient, admin_headers, make_user):
        anna = await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.delete(
            f"/api/v1/models/{uuid.uuid4()}/{model['id']}",
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found..."

    @pytest.mark.asyncio
    async def test_remove_from_non_owner(self, client: AsyncClient, admin_headers, make_user):
        anna, jan = await make_user(), await make_user()
        model = await create_model(client, admin_headers, anna.id)

        response = await client.delete(
            f"/api/v1/models/{jan.id}/{model['id']}",
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Model not found..."

    @pytest.mark.asyncio
    async def test_explicit_delete(self, client: AsyncClient, admin_headers, make_user, store):
        anna, jan = await make_user(), await make_user()
        model = await create_model(client, admin_headers, anna.id)
        await client.put(
            f"/api/v1/models/{anna.id}/{model['id']}",
            json={"name": "Bridge", "user": [str(anna.id), str(jan.id)]},
            headers=admin_headers,
        )
        model_id = uuid.UUID(model["id"])
        store.write(model_id, ArtifactVariant.PRIMARY, b"android")
        store.write(model_id, ArtifactVariant.PLATFORM_VARIANT, b"ios")

        response = await client.delete(f"/api/v1/models/{model_id}", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["owners"] == [str(anna.id), str(jan.id)]
        assert data["file_exists"] is True
        assert not store.exists(model_id, ArtifactVariant.PRIMARY)
        assert not store.exists(model_id, ArtifactVariant.PLATFORM_VARIANT)

        listed = await client.get(f"/api/v1/models/{jan.id}", headers=admin_headers)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_explicit_delete_missing(self, client: AsyncClient, admin_headers):
        response = await client.delete(f"/api/v1/models/{uuid.uuid4()}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Model not found..."

    @pytest.mark.asyncio
    async def test_explicit_delete_requires_admin(self, client: AsyncClient, make_user, headers_for):
        anna = await make_user()

        response = await client.delete(f"/api/v1/models/{uuid.uuid4()}", headers=headers_for(anna))

        assert response.status_code == 403
