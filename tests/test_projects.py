import uuid

import pytest
from sqlalchemy import func, select, update

from app.db.models import Chapter, Character, ContentNode, Project, Revision
from app.services.projects import ProjectService


DEFAULT_LABELS = {"level1": "Chapter", "level2": "Section", "level3": "Beat"}


@pytest.mark.anyio
async def test_create_with_default_level_config(client):
    resp = await client.post("/v1/projects", json={"title": "Untitled", "description": "A draft"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Untitled"
    assert body["description"] == "A draft"
    assert body["level_config"] == DEFAULT_LABELS

    listed = (await client.get("/v1/projects")).json()
    assert [p["project_id"] for p in listed] == [body["project_id"]]


@pytest.mark.anyio
async def test_create_with_custom_level_config(client):
    resp = await client.post(
        "/v1/projects",
        json={"title": "Play", "level_config": {"level1": " Act ", "level2": "Scene", "level3": "Line"}},
    )
    assert resp.json()["level_config"] == {"level1": "Act", "level2": "Scene", "level3": "Line"}

    resp = await client.post(
        "/v1/projects",
        json={"title": "Play", "level_config": {"level1": "Act", "level2": "  ", "level3": "Line"}},
    )
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_update_level_config_and_apply_preset(client):
    project_id = (await client.post("/v1/projects", json={"title": "P"})).json()["project_id"]

    resp = await client.put(
        f"/v1/projects/{project_id}/level-config",
        json={"level1": "Book", "level2": "Part", "level3": "Passage"},
    )
    assert resp.status_code == 200
    assert resp.json()["level_config"]["level3"] == "Passage"

    resp = await client.post(
        f"/v1/projects/{project_id}/level-config/preset",
        json={"preset": "Classic Screenplay"},
    )
    assert resp.json()["level_config"] == {"level1": "Act", "level2": "Scene", "level3": "Beat"}

    tree = (await client.get(f"/v1/projects/{project_id}/content-tree")).json()
    assert tree["level_config"]["level1"] == "Act"


@pytest.mark.anyio
async def test_patch_only_touches_supplied_fields(client):
    project_id = (
        await client.post("/v1/projects", json={"title": "Old", "description": "keep me"})
    ).json()["project_id"]

    resp = await client.patch(f"/v1/projects/{project_id}", json={"title": "New"})
    assert resp.json()["title"] == "New"
    assert resp.json()["description"] == "keep me"

    resp = await client.patch(f"/v1/projects/{project_id}", json={"description": None})
    assert resp.json()["title"] == "New"
    assert resp.json()["description"] is None


@pytest.mark.anyio
async def test_delete_project_removes_everything(client, db):
    project_id = (await client.post("/v1/projects", json={"title": "Doomed"})).json()["project_id"]
    keeper_id = (await client.post("/v1/projects", json={"title": "Keeper"})).json()["project_id"]
    act = (await client.post(f"/v1/projects/{project_id}/nodes", json={"title": "A", "level": 1})).json()
    scene = (
        await client.post(
            f"/v1/projects/{project_id}/nodes",
            json={"title": "S", "level": 2, "parent_id": act["node_id"]},
        )
    ).json()
    await client.post(
        f"/v1/projects/{project_id}/nodes",
        json={"title": "B", "level": 3, "parent_id": scene["node_id"]},
    )
    await client.post(f"/v1/projects/{project_id}/chapters", json={"title": "Legacy"})
    await client.post(f"/v1/projects/{project_id}/characters", json={"name": "Gone"})
    await client.post(f"/v1/projects/{keeper_id}/characters", json={"name": "Stays"})

    resp = await client.delete(f"/v1/projects/{project_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/v1/projects/{project_id}")).status_code == 404

    pid = uuid.UUID(project_id)
    for model in (ContentNode, Chapter, Character):
        count = db.execute(select(func.count()).select_from(model).where(model.project_id == pid)).scalar_one()
        assert count == 0
    assert db.execute(select(func.count()).select_from(Revision)).scalar_one() == 0
    assert db.execute(select(func.count()).select_from(Character)).scalar_one() == 1


def test_backfill_fills_missing_level_config(db):
    service = ProjectService(db)
    legacy = service.create_project("Legacy")
    modern = service.create_project("Modern", level_config={"level1": "Act", "level2": "Scene", "level3": "Beat"})
    db.execute(update(Project).where(Project.project_id == legacy.project_id).values(level_config=None))
    db.commit()

    assert service.backfill_level_configs() == 1
    db.expire_all()
    assert service.get_project(legacy.project_id).level_config == DEFAULT_LABELS
    assert service.get_project(modern.project_id).level_config["level1"] == "Act"
    assert service.backfill_level_configs() == 0


@pytest.mark.anyio
async def test_missing_level_config_reads_as_defaults(client, db):
    project_id = (await client.post("/v1/projects", json={"title": "Old"})).json()["project_id"]
    db.execute(update(Project).where(Project.project_id == uuid.UUID(project_id)).values(level_config=None))
    db.commit()

    resp = await client.get(f"/v1/projects/{project_id}")
    assert resp.json()["level_config"] == DEFAULT_LABELS
