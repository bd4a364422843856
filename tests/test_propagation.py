import pytest

from servicetree.errors import DataIntegrityError
from servicetree.tree.propagation import classify, propagate_all


def test_classify_keeps_last_satisfied_slot():
    # slots 1..3 are met (0, 10, 20), slot 4 (30) is not
    assert classify([0, 10, 20, 30, 40, 50], 25) == 2


def test_classify_does_not_sort_thresholds():
    # slots 1, 2 and 4 are met (0, 10, 20); slot 4 is the last one
    assert classify([0, 10, 50, 20, 40, 30], 25) == 3


def test_classify_below_every_threshold_is_normal():
    assert classify([5, 10, 20, 30, 40, 50], 1) == 0


def test_classify_reaches_critical():
    assert classify([0, 10, 20, 30, 40, 50], 50) == 5


def test_internal_node_takes_status_from_children_weights(store, tree):
    root = tree.node("root", thresholds=[0, 10, 20, 30, 40, 50])
    tree.node("a", status=2, weights=[0, 5, 15, 0, 0, 0], parent=root)
    tree.node("b", status=1, weights=[0, 10, 0, 0, 0, 0], parent=root)

    report = propagate_all(store)

    assert store.get_node(root).status == 2
    assert report.roots == 1
    assert report.visited == 3
    assert [(c.service_id, c.old_status, c.new_status) for c in report.changes] == [(root, 0, 2)]


def test_non_monotonic_thresholds_are_applied_literally(store, tree):
    root = tree.node("root", thresholds=[0, 10, 50, 20, 40, 30])
    tree.node("a", status=0, weights=[25, 0, 0, 0, 0, 0], parent=root)

    propagate_all(store)

    assert store.get_node(root).status == 3


def test_parent_weight_uses_the_new_status(store, tree):
    root = tree.node("root", thresholds=[0, 2, 4, 6, 8, 10])
    middle = tree.node("middle", status=0, weights=[1, 2, 3, 4, 5, 6],
                       thresholds=[0, 10, 20, 30, 40, 50], parent=root)
    tree.node("leaf", status=3, weights=[0, 0, 0, 30, 0, 0], parent=middle)

    propagate_all(store)

    assert store.get_node(middle).status == 3
    # middle now weighs 4 (its weight at status 3), which puts root at status 2
    assert store.get_node(root).status == 2


def test_second_run_writes_nothing(store, tree):
    root = tree.node("root")
    middle = tree.node("middle", parent=root)
    tree.node("leaf1", status=4, parent=middle)
    tree.node("leaf2", status=1, parent=root)

    first = propagate_all(store)
    second = propagate_all(store)

    assert first.changes
    assert second.changes == []


def test_leaves_are_never_reclassified(store, tree):
    root = tree.node("root")
    leaf = tree.node("leaf", status=3, weights=[0, 0, 0, 7, 0, 0],
                     thresholds=[100, 100, 100, 100, 100, 100], parent=root)

    before = store.get_weight(leaf).values[store.get_node(leaf).status]
    report = propagate_all(store)
    after = store.get_weight(leaf).values[store.get_node(leaf).status]

    assert store.get_node(leaf).status == 3
    assert before == after == 7
    assert leaf not in [change.service_id for change in report.changes]


def test_leaf_without_threshold_row_is_fine(store, tree):
    root = tree.node("root")
    tree.node("leaf", status=1, thresholds=None, parent=root)

    propagate_all(store)

    assert store.get_node(root).status == 1


def test_missing_threshold_on_internal_node_is_fatal(store, tree):
    root = tree.node("root", thresholds=None)
    tree.node("leaf", parent=root)

    with pytest.raises(DataIntegrityError) as exc_info:
        propagate_all(store)
    assert exc_info.value.service_id == root


def test_missing_weight_is_fatal(store, tree):
    root = tree.node("root")
    leaf = tree.node("leaf", weights=None, parent=root)

    with pytest.raises(DataIntegrityError) as exc_info:
        propagate_all(store)
    assert exc_info.value.service_id == leaf
    assert "service_weight" in str(exc_info.value)


def test_no_roots_is_fatal(store):
    with pytest.raises(DataIntegrityError, match="No root nodes"):
        propagate_all(store)


def test_cycle_is_reported(store, tree):
    root = tree.node("root")
    a = tree.node("a", parent=root)
    b = tree.node("b", parent=a)
    tree.link(b, a)

    with pytest.raises(DataIntegrityError, match="cycle"):
        propagate_all(store)


def test_deep_tree_does_not_hit_recursion_limit(store, tree):
    depth = 1500
    parent = tree.node("level-0")
    top = parent
    for level in range(1, depth):
        parent = tree.node(f"level-{level}", parent=parent)
    store.update_status(parent, 5)

    report = propagate_all(store)

    assert store.get_node(top).status == 5
    assert len(report.changes) == depth - 1
