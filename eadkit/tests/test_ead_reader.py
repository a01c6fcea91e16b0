from pathlib import Path

import pytest

from eadkit.core.description import NameEntry, read_finding_aid
from eadkit.core.errors import ReaderError

FIXTURE = Path(__file__).parent / "fixtures" / "mos_2021.xml"


@pytest.fixture()
def aid():
    return read_finding_aid(FIXTURE.read_bytes(), source_file="mos_2021.xml")


def test_header_fields(aid):
    assert aid.eadid == "mos_2021"
    assert aid.repository == "Fales Library and Special Collections"
    assert aid.guide_title == "Megan O'Shea's One Resource to Rule Them All"
    assert aid.source_file == "mos_2021.xml"
    assert [t.type for t in aid.title_propers] == ["filing", ""]


def test_archdesc(aid):
    archdesc = aid.archdesc
    assert archdesc.level == "collection"
    assert archdesc.unitid == "MOS.2021"
    assert archdesc.unitdates == ["2020-2021"]
    assert [c.identifier for c in archdesc.children] == ["ser1", "ser2"]
    assert [f.name for f in archdesc.notes] == ["abstract", "physdesc", "bioghist", "bioghist", "scopecontent"]


def test_components_in_document_order(aid):
    ser1 = aid.archdesc.children[0]
    assert [c.identifier for c in ser1.children] == ["f01", "f02", "ss1", "f03"]
    assert ser1.children[2].level == "subseries"
    assert [c.identifier for c in ser1.children[2].children] == ["i01"]


def test_digital_objects_read_by_local_name(aid):
    f01 = aid.archdesc.children[0].children[0]
    dao = f01.digital_objects[0]
    assert dao.href == "https://hdl.handle.net/2333.1/audio01"
    assert dao.role == "audio-service"
    assert dao.title == "Interview 1"
    assert dao.owner is None


def test_containers(aid):
    f02 = aid.archdesc.children[0].children[1]
    assert [(c.identifier, c.parent, c.type) for c in f02.containers] == [
        ("c3", None, "box"),
        ("c4", "c3", "folder"),
        ("c5", "c4", "item"),
    ]


def test_unittitle_kept_as_raw_markup(aid):
    ser2 = aid.archdesc.children[1]
    assert "<title" in ser2.title
    assert ser2.title.startswith("Series II: ")


def test_non_namespaced_document():
    data = b"""<ead><eadheader><eadid>a_b</eadid></eadheader>
    <archdesc level="collection"><did><unittitle>T</unittitle></did>
    <dsc><c id="x" level="file"><did><unittitle>X</unittitle>
    <dao href="https://x.org/" role="image-service"/></did></c></dsc></archdesc></ead>"""
    aid = read_finding_aid(data)

    assert aid.eadid == "a_b"
    child = aid.archdesc.children[0]
    assert child.identifier == "x"
    assert child.digital_objects[0].role == "image-service"


def test_unparsable_input():
    with pytest.raises(ReaderError):
        read_finding_aid(b"<ead>")


def test_wrong_root_element():
    with pytest.raises(ReaderError):
        read_finding_aid(b"<html/>")


def test_missing_archdesc():
    with pytest.raises(ReaderError, match="archdesc"):
        read_finding_aid(b"<ead><eadheader/></ead>")


def test_note_heads_are_carried_on_each_paragraph(aid):
    bioghist = [f for f in aid.archdesc.notes if f.name == "bioghist"]
    assert [f.head for f in bioghist] == ["Biographical Note", "Biographical Note"]
    assert aid.archdesc.notes[0].head == ""


def test_note_without_paragraphs_excludes_head():
    data = b"""<ead><eadheader><eadid>a_b</eadid></eadheader>
    <archdesc level="collection"><odd><head>Other</head>Loose <emph>text</emph></odd></archdesc></ead>"""
    odd = read_finding_aid(data).archdesc.notes[0]
    assert odd.head == "Other"
    assert odd.raw == "Loose <emph>text</emph>"


def test_names_with_roles(aid):
    assert aid.names == [
        NameEntry(context="origination", element="persname", text="O'Shea, Megan", role="aut"),
        NameEntry(context="controlaccess", element="corpname", text="Omega Press", role="pbl"),
    ]
