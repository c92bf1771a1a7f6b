"""
Tests for the savings pipeline and PR helper endpoints.
"""
import uuid
import pytest
from httpx import AsyncClient

from app.models.user import UserRole

IDEA = {
    "title": "Rightsize m5.4xlarge fleet",
    "service": "EC2",
    "owner": "platform",
    "est_monthly_saving_usd": 1000,
    "confidence": 0.8,
    "notes": "CPU < 20% for 30 days",
}


@pytest.fixture
async def editor(auth_headers):
    return await auth_headers(UserRole.ANALYST)


@pytest.fixture
async def viewer(auth_headers):
    return await auth_headers(UserRole.VIEWER)


async def create_idea(ac: AsyncClient, headers, **overrides):
    response = await ac.post("/api/savings", json={**IDEA, **overrides}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
class TestSavingsCrud:
    async def test_create_defaults_to_proposed(self, ac: AsyncClient, editor):
        idea = await create_idea(ac, editor)

        assert idea["status"] == "PROPOSED"
        assert idea["est_monthly_saving_usd"] == 1000.0
        assert idea["confidence"] == 0.8
        uuid.UUID(idea["id"])

    async def test_create_requires_title_service_owner(self, ac: AsyncClient, editor):
        response = await ac.post("/api/savings", json={"title": "x", "service": "EC2"}, headers=editor)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    async def test_viewer_can_list_but_not_mutate(self, ac: AsyncClient, editor, viewer):
        idea = await create_idea(ac, editor)

        listed = await ac.get("/api/savings", headers=viewer)
        assert listed.status_code == 200
        assert [i["id"] for i in listed.json()] == [idea["id"]]

        for response in (
            await ac.post("/api/savings", json=IDEA, headers=viewer),
            await ac.put("/api/savings", json={"id": idea["id"], "status": "APPROVED"}, headers=viewer),
            await ac.delete(f"/api/savings?id={idea['id']}", headers=viewer),
        ):
            assert response.status_code == 403

    async def test_list_requires_session(self, ac: AsyncClient):
        assert (await ac.get("/api/savings")).status_code == 401

    async def test_list_newest_first_and_status_filter(self, ac: AsyncClient, editor):
        older = await create_idea(ac, editor, title="older")
        newer = await create_idea(ac, editor, title="newer", status="APPROVED")

        everything = (await ac.get("/api/savings", headers=editor)).json()
        assert [i["id"] for i in everything] == [newer["id"], older["id"]]

        approved = (await ac.get("/api/savings?status=APPROVED", headers=editor)).json()
        assert [i["id"] for i in approved] == [newer["id"]]

        # Unknown status is ignored
        ignored = (await ac.get("/api/savings?status=BOGUS", headers=editor)).json()
        assert len(ignored) == 2

    async def test_update_any_transition(self, ac: AsyncClient, editor):
        idea = await create_idea(ac, editor, status="REALIZED")

        response = await ac.put(
            "/api/savings",
            json={"id": idea["id"], "status": "PROPOSED", "confidence": 0.5},
            headers=editor,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["status"] == "PROPOSED"
        assert updated["confidence"] == 0.5
        assert updated["title"] == idea["title"]

    async def test_update_missing_id(self, ac: AsyncClient, editor):
        response = await ac.put("/api/savings", json={"status": "APPROVED"}, headers=editor)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing ID"}

    async def test_update_unknown_id(self, ac: AsyncClient, editor):
        response = await ac.put("/api/savings", json={"id": str(uuid.uuid4()), "title": "x"}, headers=editor)

        assert response.status_code == 404
        assert response.json() == {"error": "Saving idea not found"}

    async def test_delete(self, ac: AsyncClient, editor):
        idea = await create_idea(ac, editor)

        response = await ac.delete(f"/api/savings?id={idea['id']}", headers=editor)
        assert response.status_code == 200
        assert response.json() == {"message": "Deleted successfully"}

        again = await ac.delete(f"/api/savings?id={idea['id']}", headers=editor)
        assert again.status_code == 404

    async def test_delete_missing_id(self, ac: AsyncClient, editor):
        response = await ac.delete("/api/savings", headers=editor)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing ID"}


@pytest.mark.asyncio
class TestPrHelper:
    async def test_generates_markdown(self, ac: AsyncClient, editor, viewer):
        idea = await create_idea(ac, editor)

        response = await ac.post("/api/pr-helper", json={"id": idea["id"]}, headers=viewer)

        assert response.status_code == 200
        markdown = response.json()["markdown"]
        assert markdown.startswith("## Change\nRightsize m5.4xlarge fleet (EC2)")
        assert "Estimated Monthly: $1000 × Confidence 0.8 = **$800.00**" in markdown
        assert "- Owner: platform" in markdown
        assert markdown.endswith("**Status:** PROPOSED")

    async def test_missing_id(self, ac: AsyncClient, viewer):
        response = await ac.post("/api/pr-helper", json={}, headers=viewer)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing ID"}

    async def test_unknown_id(self, ac: AsyncClient, viewer):
        response = await ac.post("/api/pr-helper", json={"id": str(uuid.uuid4())}, headers=viewer)

        assert response.status_code == 404
        assert response.json() == {"error": "Saving idea not found"}

    async def test_requires_session(self, ac: AsyncClient):
        response = await ac.post("/api/pr-helper", json={"id": str(uuid.uuid4())})
        assert response.status_code == 401
