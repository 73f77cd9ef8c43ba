#!/usr/bin/env python3
"""Create a demo project with a small content tree and print IDs for manual testing."""

import sys

import httpx

BASE_URL = "http://127.0.0.1:8000"


def _post(client: httpx.Client, path: str, payload: dict) -> dict:
    resp = client.post(path, json=payload)
    if resp.status_code != 200:
        print(f"Failed POST {path}: {resp.status_code} {resp.text}", file=sys.stderr)
        sys.exit(1)
    return resp.json()


def main():
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)

    project = _post(client, "/v1/projects", {"title": "demo", "description": "Seeded for manual testing"})
    project_id = project["project_id"]
    _post(client, f"/v1/projects/{project_id}/level-config/preset", {"preset": "Classic Screenplay"})
    print(f"PROJECT_ID={project_id}")

    act = _post(client, f"/v1/projects/{project_id}/nodes", {"title": "Act I", "level": 1})
    scene = _post(
        client,
        f"/v1/projects/{project_id}/nodes",
        {"title": "A rainy alley", "level": 2, "parent_id": act["node_id"]},
    )
    beat = _post(
        client,
        f"/v1/projects/{project_id}/nodes",
        {"title": "The figure turns", "level": 3, "parent_id": scene["node_id"]},
    )
    _post(
        client,
        f"/v1/nodes/{beat['node_id']}/revisions",
        {"content": "A detective enters a rainy alley and spots a mysterious figure.", "author_name": "Demo"},
    )
    print(f"NODE_ID={beat['node_id']}")

    character = _post(
        client,
        f"/v1/projects/{project_id}/characters",
        {"name": "Detective Han", "role": "protagonist", "archetype": "sage"},
    )
    print(f"CHARACTER_ID={character['character_id']}")

    # Export as shell variables
    print("\n# Export for shell (copy-paste):")
    print(f"export PROJECT_ID={project_id}")
    print(f"export NODE_ID={beat['node_id']}")
    print(f"export CHARACTER_ID={character['character_id']}")


if __name__ == "__main__":
    main()
