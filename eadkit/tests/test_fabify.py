from pathlib import Path

from eadkit.core.document import attr, iter_local, parse_document
from eadkit.core.storage import fabify_ead, normalize_document
from eadkit.core.storage.hierarchy import SUBCONTAINER_FAILURE

FIXTURE = Path(__file__).parent / "fixtures" / "mos_2021.xml"

DUPLICATE_PARENTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<ead xmlns="urn:isbn:1-931666-22-9">
  <archdesc level="collection">
    <did>
      <unitid type="aspace_uri">/repositories/2/resources/1</unitid>
      <origination label="Creator"><persname>X</persname></origination>
      <container id="b1" type="box">1</container>
      <container id="f1" parent="b1" type="folder">1</container>
      <container id="f2" parent="b1" type="folder">2</container>
    </did>
  </archdesc>
</ead>
"""


def test_fabify_fixture():
    xml_text, diagnostics = fabify_ead(FIXTURE.read_bytes())

    assert diagnostics == []
    assert xml_text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert 'xmlns="urn:isbn:1-931666-22-9"' in xml_text
    assert "ns0:" not in xml_text
    assert 'label="creator"' in xml_text
    assert 'label="Creator"' not in xml_text
    assert "aspace_uri" not in xml_text

    root = parse_document(xml_text.encode("utf-8"))
    by_id = {c.get("id"): c for c in iter_local(root, "container") if c.get("id")}
    assert set(by_id) == {"c1", "c3"}

    rewritten = [c for c in iter_local(root, "container") if c.get("id") is None]
    assert [c.get("parent") for c in rewritten] == ["c1", "c3", "c3"]


def test_fabify_keeps_xlink_prefix():
    xml_text, _ = fabify_ead(FIXTURE.read_bytes())
    assert "xlink:href=" in xml_text

    root = parse_document(xml_text.encode("utf-8"))
    dao = next(iter_local(root, "dao"))
    assert attr(dao, "href") == "https://hdl.handle.net/2333.1/audio01"


def test_fabify_unparsable_input():
    xml_text, diagnostics = fabify_ead(b"this is not xml")

    assert xml_text == ""
    assert diagnostics[0] == "Unable to parse XML file"
    assert len(diagnostics) == 2


def test_fabify_refuses_entity_declarations():
    data = b'<!DOCTYPE ead [<!ENTITY x "boom">]><ead>&x;</ead>'
    xml_text, diagnostics = fabify_ead(data)

    assert xml_text == ""
    assert diagnostics[0] == "Unable to parse XML file"


def test_failed_normalization_skips_side_transforms():
    root = parse_document(DUPLICATE_PARENTS)
    outcome = normalize_document(root)

    assert not outcome.success
    assert outcome.diagnostics[0] == SUBCONTAINER_FAILURE
    assert next(iter_local(root, "origination")).get("label") == "Creator"
    assert len(list(iter_local(root, "unitid"))) == 1
    assert [c.get("id") for c in iter_local(root, "container")] == ["b1", "f1", "f2"]


def test_fabify_reports_normalization_failure():
    xml_text, diagnostics = fabify_ead(DUPLICATE_PARENTS)

    assert xml_text == ""
    assert diagnostics[0] == SUBCONTAINER_FAILURE


def test_fabify_keeps_comments_and_processing_instructions():
    data = (
        b'<ead xmlns="urn:isbn:1-931666-22-9"><!-- keep me -->'
        b'<?render mode="print"?><archdesc level="collection"/></ead>'
    )
    xml_text, diagnostics = fabify_ead(data)

    assert diagnostics == []
    assert "<!-- keep me -->" in xml_text
    assert '<?render mode="print"?>' in xml_text
    assert '<ead xmlns="urn:isbn:1-931666-22-9">' in xml_text


def test_parse_document_drops_comments_by_default():
    root = parse_document(b"<ead><!-- note --><archdesc/></ead>")
    assert [c.tag for c in root] == ["archdesc"]

    kept = parse_document(b"<ead><!-- note --><archdesc/></ead>", keep_comments=True)
    assert len(kept) == 2
