"""Unit and property tests for assembling flat node rows into a forest."""

import uuid
from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st, settings

from app.services.content_tree import build_content_tree, iter_tree


PROJECT_ID = uuid.uuid4()


def _row(title, level, order, parent_id=None, node_id=None):
    return SimpleNamespace(
        node_id=node_id or uuid.uuid4(),
        project_id=PROJECT_ID,
        parent_id=parent_id,
        title=title,
        level=level,
        order=order,
        head_notes=None,
        foot_notes=None,
        created_at=None,
    )


def _sorted(rows):
    return sorted(rows, key=lambda r: (r.level, r.order))


def test_empty_input_gives_empty_forest():
    assert build_content_tree([]) == []


def test_children_attach_in_order():
    act_one = _row("Act I", 1, 0)
    act_two = _row("Act II", 1, 1)
    opening = _row("Opening", 2, 0, parent_id=act_one.node_id)
    meeting = _row("Meeting", 2, 1, parent_id=act_one.node_id)
    first_line = _row("First line", 3, 0, parent_id=opening.node_id)

    roots = build_content_tree(_sorted([meeting, first_line, act_two, opening, act_one]))

    assert [r.title for r in roots] == ["Act I", "Act II"]
    assert [c.title for c in roots[0].children] == ["Opening", "Meeting"]
    assert [c.title for c in roots[0].children[0].children] == ["First line"]
    assert roots[1].children == []


def test_orphan_is_promoted_to_root():
    act_one = _row("Act I", 1, 0)
    orphan = _row("Lost scene", 2, 0, parent_id=uuid.uuid4())

    roots = build_content_tree(_sorted([act_one, orphan]))

    assert [r.title for r in roots] == ["Act I", "Lost scene"]
    assert roots[1].parent_id == orphan.parent_id


def test_iter_tree_visits_parents_before_children():
    act_one = _row("Act I", 1, 0)
    scene = _row("Scene", 2, 0, parent_id=act_one.node_id)
    beat = _row("Beat", 3, 0, parent_id=scene.node_id)
    act_two = _row("Act II", 1, 1)

    titles = [n.title for n in iter_tree(build_content_tree(_sorted([act_one, scene, beat, act_two])))]

    assert titles == ["Act I", "Scene", "Beat", "Act II"]


@st.composite
def forests(draw):
    """Random well-formed three-level forests as flat rows."""
    rows = []
    for root_order in range(draw(st.integers(min_value=0, max_value=4))):
        root = _row(f"r{root_order}", 1, root_order)
        rows.append(root)
        for mid_order in range(draw(st.integers(min_value=0, max_value=3))):
            mid = _row(f"m{root_order}.{mid_order}", 2, mid_order, parent_id=root.node_id)
            rows.append(mid)
            for leaf_order in range(draw(st.integers(min_value=0, max_value=3))):
                rows.append(_row(f"l{root_order}.{mid_order}.{leaf_order}", 3, leaf_order, parent_id=mid.node_id))
    return rows


@pytest.mark.property
class TestTreeAssemblyProperties:
    @given(rows=forests(), shuffle_seed=st.randoms())
    @settings(max_examples=75, deadline=None)
    def test_every_row_appears_exactly_once(self, rows, shuffle_seed):
        shuffled = list(rows)
        shuffle_seed.shuffle(shuffled)

        roots = build_content_tree(_sorted(shuffled))
        seen = [node.node_id for node in iter_tree(roots)]

        assert sorted(seen) == sorted(r.node_id for r in rows)
        assert len(seen) == len(set(seen))

    @given(rows=forests())
    @settings(max_examples=75, deadline=None)
    def test_siblings_are_ordered_and_one_level_deeper(self, rows):
        roots = build_content_tree(_sorted(rows))

        assert [r.order for r in roots] == sorted(r.order for r in roots)
        assert all(r.level == 1 for r in roots)
        for node in iter_tree(roots):
            orders = [c.order for c in node.children]
            assert orders == sorted(orders)
            assert all(c.level == node.level + 1 for c in node.children)
            assert all(c.parent_id == node.node_id for c in node.children)
