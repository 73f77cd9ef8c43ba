import uuid
from unittest.mock import MagicMock

from app.core import settings as settings_module
from app.services.tree_cache import ContentTreeCache, notify_content_changed, tree_cache


def test_second_read_is_served_from_cache():
    cache = ContentTreeCache()
    project_id = uuid.uuid4()
    loader = MagicMock(return_value=["tree"])

    assert cache.get_or_load(project_id, loader) == ["tree"]
    assert cache.get_or_load(project_id, loader) == ["tree"]
    assert loader.call_count == 1


def test_invalidate_forces_reload():
    cache = ContentTreeCache()
    project_id = uuid.uuid4()
    loader = MagicMock(side_effect=[["v1"], ["v2"]])

    cache.get_or_load(project_id, loader)
    cache.invalidate(project_id)

    assert not cache.is_cached(project_id)
    assert cache.get_or_load(project_id, loader) == ["v2"]


def test_load_racing_with_invalidation_is_not_cached():
    cache = ContentTreeCache()
    project_id = uuid.uuid4()

    def loader():
        cache.invalidate(project_id)
        return ["stale"]

    assert cache.get_or_load(project_id, loader) == ["stale"]
    assert not cache.is_cached(project_id)


def test_disabled_cache_always_loads(monkeypatch):
    monkeypatch.setattr(settings_module.settings, "tree_cache_enabled", False)
    cache = ContentTreeCache()
    project_id = uuid.uuid4()
    loader = MagicMock(return_value=[])

    cache.get_or_load(project_id, loader)
    cache.get_or_load(project_id, loader)

    assert loader.call_count == 2
    assert not cache.is_cached(project_id)


def test_notify_content_changed_invalidates_shared_cache():
    project_id = uuid.uuid4()
    tree_cache.get_or_load(project_id, lambda: [])
    assert tree_cache.is_cached(project_id)

    notify_content_changed(project_id, "content_node", "created")

    assert not tree_cache.is_cached(project_id)
