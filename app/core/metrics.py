from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

CONTENT_MUTATIONS_TOTAL = Counter(
    "storyweave_content_mutations_total",
    "Number of mutating operations by entity and action.",
    ["entity", "action"],
    registry=registry,
)

TREE_CACHE_LOOKUPS_TOTAL = Counter(
    "storyweave_tree_cache_lookups_total",
    "Content tree cache lookups partitioned by hit/miss.",
    ["result"],
    registry=registry,
)

TREE_BUILD_DURATION = Histogram(
    "storyweave_tree_build_duration_seconds",
    "Duration (seconds) of fetching and assembling a project's content tree.",
    registry=registry,
)

REVISIONS_SAVED_TOTAL = Counter(
    "storyweave_revisions_saved_total",
    "Number of revisions appended, labeled by owner kind.",
    ["owner"],
    registry=registry,
)


def record_content_mutation(entity: str, action: str) -> None:
    CONTENT_MUTATIONS_TOTAL.labels(entity=entity, action=action).inc()


def record_tree_cache_lookup(hit: bool) -> None:
    TREE_CACHE_LOOKUPS_TOTAL.labels(result="hit" if hit else "miss").inc()


@contextmanager
def track_tree_build():
    with TREE_BUILD_DURATION.time():
        yield


def record_revision_saved(owner: str) -> None:
    REVISIONS_SAVED_TOTAL.labels(owner=owner).inc()


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
