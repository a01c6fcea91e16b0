from eadkit.core.storage import StorageLocationNode, normalize_storage_hierarchy, plan_storage_hierarchy
from eadkit.core.storage.hierarchy import SUBCONTAINER_FAILURE


def _node(identifier=None, parent=None, type="folder"):
    return StorageLocationNode.create(identifier=identifier, parent=parent, type=type, value="1")


def test_three_level_chain_flattens_to_root():
    root = _node("r", type="box")
    a = _node("a", "r")
    b = _node("b", "a", type="item")

    outcome = normalize_storage_hierarchy([root, a, b])

    assert outcome.success
    assert outcome.diagnostics == []
    assert a.parent == "r" and a.identifier is None
    assert b.parent == "r" and b.identifier is None
    assert root.identifier == "r" and root.parent is None


def test_independent_forests_do_not_mix():
    r1, a1, b1 = _node("r1"), _node("a1", "r1"), _node("b1", "a1")
    r2, a2 = _node("r2"), _node("a2", "r2")

    outcome = normalize_storage_hierarchy([r1, r2, b1, a2, a1])

    assert outcome.success
    assert (a1.parent, b1.parent) == ("r1", "r1")
    assert a2.parent == "r2"
    assert [n.identifier for n in (a1, b1, a2)] == [None, None, None]


def test_duplicate_parent_aborts_without_changes():
    root = _node("r")
    a = _node("a", "r")
    b = _node("b", "r")

    outcome = normalize_storage_hierarchy([root, a, b])

    assert not outcome.success
    assert outcome.diagnostics[0] == SUBCONTAINER_FAILURE
    assert len(outcome.diagnostics) == 2
    assert (a.identifier, a.parent) == ("a", "r")
    assert (b.identifier, b.parent) == ("b", "r")


def test_missing_identifier_mid_chain_leaves_every_node_untouched():
    root = _node("r")
    a = _node("a", "r")
    b = _node(None, "a")

    outcome = normalize_storage_hierarchy([root, a, b])

    assert not outcome.success
    assert "@id" in outcome.diagnostics[1]
    assert (a.identifier, a.parent) == ("a", "r")
    assert b.parent == "a"


def test_cycle_is_reported():
    root = _node("r")
    a = _node("r", "r")

    outcome = normalize_storage_hierarchy([root, a])

    assert not outcome.success
    assert a.identifier == "r"


def test_roots_without_identifier_and_orphans_are_left_alone():
    anon = _node(None, type="box")
    orphan = _node("o", "missing")

    outcome = normalize_storage_hierarchy([anon, orphan])

    assert outcome.success
    assert anon.identifier is None
    assert (orphan.identifier, orphan.parent) == ("o", "missing")


def test_plan_does_not_mutate():
    root, a = _node("r"), _node("a", "r")
    plan, problems = plan_storage_hierarchy([root, a])

    assert problems == []
    assert plan == [(a, "r")]
    assert a.identifier == "a"


def test_empty_input_succeeds():
    assert normalize_storage_hierarchy([]).success


def test_node_to_dict():
    n = StorageLocationNode.create(identifier="x", type="box", label="Box [123]", value=" 4 ")
    assert n.to_dict() == {"id": "x", "parent": None, "type": "box", "label": "Box [123]", "value": "4"}
