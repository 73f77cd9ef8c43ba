import pytest
from hypothesis import given, strategies as st, settings

from app.core.character_defaults import clamp_trait
from app.services.characters import fill_character_defaults


async def _project(client):
    return (await client.post("/v1/projects", json={"title": "Cast"})).json()["project_id"]


def test_defaults_fill_sparse_payload():
    fields = fill_character_defaults({"name": "  Mira  "})

    assert fields["name"] == "Mira"
    assert fields["role"] == "supporting"
    assert fields["archetype"] is None
    assert fields["importance_level"] == 3
    assert fields["relationships"] == {}
    assert fields["appearance"] == {
        "age": 25,
        "height": "average",
        "build": "average",
        "hair_color": "brown",
        "eye_color": "brown",
        "distinctive_features": [],
    }
    assert fields["personality"] == {
        "courage": 50,
        "intelligence": 50,
        "charisma": 50,
        "kindness": 50,
        "humor": 50,
        "determination": 50,
    }
    assert fields["description"] is None


def test_archetype_prepopulates_personality():
    fields = fill_character_defaults({"name": "Rook", "archetype": "trickster"})
    assert fields["personality"]["humor"] == 95
    assert fields["personality"]["intelligence"] == 75
    assert fields["personality"]["courage"] == 50


def test_explicit_personality_wins_over_archetype():
    fields = fill_character_defaults(
        {"name": "Rook", "archetype": "trickster", "personality": {"humor": 10}}
    )
    assert fields["personality"]["humor"] == 10
    assert fields["personality"]["intelligence"] == 50


@pytest.mark.parametrize(
    "payload",
    [
        {"name": ""},
        {"name": "X", "role": "narrator"},
        {"name": "X", "archetype": "wizard-king"},
        {"name": "X", "importance_level": 9},
        {"name": "X", "appearance": {"hair_color": "plaid"}},
        {"name": "X", "appearance": {"height": "Tall"}},
    ],
)
def test_invalid_payloads(payload):
    with pytest.raises(ValueError):
        fill_character_defaults(payload)


@pytest.mark.property
class TestTraitClamping:
    @given(value=st.one_of(st.integers(min_value=-10**6, max_value=10**6), st.floats(allow_nan=False)))
    @settings(max_examples=100, deadline=None)
    def test_clamped_into_slider_range(self, value):
        assert 0 <= clamp_trait(value) <= 100

    def test_missing_values_use_midpoint(self):
        assert clamp_trait(None) == 50
        assert clamp_trait("") == 50
        assert clamp_trait(True) == 50
        assert clamp_trait("72") == 72

    def test_infinities_pin_to_the_bounds(self):
        assert clamp_trait(float("inf")) == 100
        assert clamp_trait(float("-inf")) == 0
        assert clamp_trait("inf") == 100
        assert clamp_trait(10**400) == 100

    @pytest.mark.parametrize("value", [float("nan"), "nan", "brave", [1], {"a": 1}])
    def test_non_numeric_values_are_rejected(self, value):
        with pytest.raises(ValueError):
            clamp_trait(value)


@pytest.mark.anyio
async def test_create_clamps_and_lists_by_name(client):
    project_id = await _project(client)

    resp = await client.post(
        f"/v1/projects/{project_id}/characters",
        json={"name": "Zed", "role": "antagonist", "personality": {"courage": 150, "kindness": -5}},
    )
    assert resp.status_code == 200
    zed = resp.json()
    assert zed["personality"]["courage"] == 100
    assert zed["personality"]["kindness"] == 0
    assert zed["personality"]["humor"] == 50
    assert zed["role"] == "antagonist"

    await client.post(f"/v1/projects/{project_id}/characters", json={"name": "Anna", "archetype": "hero"})

    listed = (await client.get(f"/v1/projects/{project_id}/characters")).json()
    assert [c["name"] for c in listed] == ["Anna", "Zed"]
    assert listed[0]["personality"]["determination"] == 85


@pytest.mark.anyio
async def test_update_is_full_replace(client):
    project_id = await _project(client)
    created = (
        await client.post(
            f"/v1/projects/{project_id}/characters",
            json={
                "name": "Mira",
                "role": "protagonist",
                "motivation": "Find her brother",
                "importance_level": 5,
                "appearance": {"hair_color": "red", "distinctive_features": ["scar"]},
            },
        )
    ).json()
    assert created["appearance"]["hair_color"] == "red"
    assert created["appearance"]["build"] == "average"

    resp = await client.put(f"/v1/characters/{created['character_id']}", json={"name": "Mira Vale"})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["name"] == "Mira Vale"
    assert updated["role"] == "supporting"
    assert updated["motivation"] is None
    assert updated["importance_level"] == 3
    assert updated["appearance"]["hair_color"] == "brown"
    assert updated["appearance"]["distinctive_features"] == []


@pytest.mark.anyio
async def test_delete_leaves_dangling_relationships(client):
    project_id = await _project(client)
    villain = (await client.post(f"/v1/projects/{project_id}/characters", json={"name": "Villain"})).json()
    hero = (
        await client.post(
            f"/v1/projects/{project_id}/characters",
            json={"name": "Hero", "relationships": {villain["character_id"]: "nemesis"}},
        )
    ).json()

    resp = await client.delete(f"/v1/characters/{villain['character_id']}")
    assert resp.status_code == 204
    assert (await client.get(f"/v1/characters/{villain['character_id']}")).status_code == 404

    hero_after = (await client.get(f"/v1/characters/{hero['character_id']}")).json()
    assert hero_after["relationships"] == {villain["character_id"]: "nemesis"}


@pytest.mark.anyio
async def test_validation_errors(client):
    project_id = await _project(client)

    resp = await client.post(f"/v1/projects/{project_id}/characters", json={"name": "X", "role": "narrator"})
    assert resp.status_code == 400

    resp = await client.post(f"/v1/projects/{project_id}/characters", json={"name": "X", "importance_level": 0})
    assert resp.status_code == 422

    resp = await client.post(
        f"/v1/projects/{project_id}/characters",
        json={"name": "X", "appearance": {"eye_color": "plaid"}},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "unknown eye_color: plaid"

    resp = await client.post(
        "/v1/projects/00000000-0000-0000-0000-000000000000/characters",
        json={"name": "X"},
    )
    assert resp.status_code == 404


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw,expected",
    [("1e999", 100), ("-1e999", 0), ("Infinity", 100), ('"inf"', 100)],
)
async def test_non_finite_slider_values_are_clamped(client, raw, expected):
    project_id = await _project(client)

    resp = await client.post(
        f"/v1/projects/{project_id}/characters",
        content='{"name": "X", "personality": {"courage": ' + raw + "}}",
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 200
    assert resp.json()["personality"]["courage"] == expected


@pytest.mark.anyio
@pytest.mark.parametrize("raw", ["[1]", '{"a": 1}', '"brave"', "NaN"])
async def test_non_numeric_slider_values_are_422(client, raw):
    project_id = await _project(client)

    resp = await client.post(
        f"/v1/projects/{project_id}/characters",
        content='{"name": "X", "personality": {"courage": ' + raw + "}}",
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 422
