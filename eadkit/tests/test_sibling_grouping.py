from eadkit.core.description import DescriptionNode, group, is_groupable
from eadkit.core.settings import ProcessingConfig


def _nodes(*levels):
    return [DescriptionNode(identifier=f"n{i}", level=lv) for i, lv in enumerate(levels)]


def test_all_groupable_become_one_wrapper():
    nodes = _nodes(*["file"] * 6)
    out = group(nodes)

    assert len(out) == 1
    wrapper = out[0]
    assert wrapper.identifier == "items001"
    assert wrapper.level == "dl-presentation"
    assert wrapper.title == "Inventory"
    assert wrapper.children == nodes


def test_run_between_protected_nodes():
    nodes = _nodes("series", "series", "file", "item", "file", "series", "subseries")
    out = group(nodes)

    assert len(out) == 5
    assert out[0] is nodes[0]
    assert out[1] is nodes[1]
    assert out[2].identifier == "items001"
    assert out[2].children == nodes[2:5]
    assert out[3] is nodes[5]
    assert out[4] is nodes[6]


def test_empty_input():
    assert group([]) == []


def test_all_protected_input_is_unchanged():
    nodes = _nodes("series", "subseries", "otherlevel", "recordgrp", "subgrp", "dl-presentation")
    out = group(nodes)
    assert out == nodes
    assert all(a is b for a, b in zip(out, nodes))


def test_wrapper_ids_increase_per_run_and_restart_per_call():
    nodes = _nodes("file", "series", "file", "file", "series", "item")
    out = group(nodes)
    assert [n.identifier for n in out] == ["items001", "n1", "items002", "n4", "items003"]

    again = group(nodes)
    assert again[0].identifier == "items001"


def test_input_list_is_not_modified():
    nodes = _nodes("file", "series")
    before = list(nodes)
    group(nodes)
    assert nodes == before


def test_level_comparison_ignores_case():
    assert not is_groupable(DescriptionNode(level="Series"))
    assert is_groupable(DescriptionNode(level="file"))
    assert is_groupable(DescriptionNode(level=""))


def test_custom_config():
    cfg = ProcessingConfig(
        protected_levels=frozenset({"box"}),
        wrapper_title="Contents",
        wrapper_id_prefix="grp",
        wrapper_id_width=2,
    )
    nodes = _nodes("series", "box")
    out = group(nodes, cfg)
    assert out[0].identifier == "grp01"
    assert out[0].title == "Contents"
    assert out[1] is nodes[1]


def test_mixed_case_config_keeps_wrappers_protected(monkeypatch):
    monkeypatch.setenv("EADKIT_WRAPPER_LEVEL", "DL-Presentation")
    monkeypatch.setenv("EADKIT_PROTECTED_LEVELS", "Series")
    cfg = ProcessingConfig.from_env()

    once = group(_nodes("file", "series"), cfg)
    twice = group(once, cfg)

    assert [n.identifier for n in twice] == ["items001", "n1"]
    assert twice[0] is once[0]
    assert cfg.is_protected(once[0].level)


def test_uppercase_protected_levels_are_normalized():
    cfg = ProcessingConfig(protected_levels=frozenset({"SERIES", " Box "}), wrapper_level="Wrap")
    assert cfg.protected_levels == frozenset({"series", "box"})
    assert cfg.wrapper_level == "wrap"
    assert cfg.is_protected("series")
    assert cfg.is_protected("WRAP")
