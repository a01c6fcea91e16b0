import json
from pathlib import Path

from eadkit.cli.main import main

FIXTURE = Path(__file__).parent / "fixtures" / "mos_2021.xml"


def test_validate_ok(capsys):
    rc = main(["validate", str(FIXTURE)])
    assert rc == 0
    assert capsys.readouterr().out.strip() == "ok"


def test_validate_reports_diagnostics(tmp_path, capsys):
    bad = tmp_path / "bad.xml"
    bad.write_bytes(FIXTURE.read_bytes().replace(b">mos_2021<", b">mos.2021<"))

    rc = main(["validate", "--json", str(bad)])
    assert rc == 1
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    assert len(out["diagnostics"]) == 1


def test_validate_missing_file(tmp_path, capsys):
    rc = main(["validate", str(tmp_path / "nope.xml")])
    assert rc == 2
    assert "error: file not found" in capsys.readouterr().err


def test_validate_bad_profile(tmp_path, capsys):
    prof = tmp_path / "p.json"
    prof.write_text("[]", encoding="utf-8")
    rc = main(["validate", "--profile", str(prof), str(FIXTURE)])
    assert rc == 2
    assert capsys.readouterr().err.startswith("error:")


def test_transcode_text(capsys):
    assert main(["transcode", "--text", "a<lb/>b"]) == 0
    assert capsys.readouterr().out.strip() == "a<br>b"

    assert main(["transcode", "--literal", "--text", "a<lb/>b"]) == 0
    assert capsys.readouterr().out.strip() == 'a<span class="ead-lb"></span>b'


def test_transcode_file(tmp_path, capsys):
    p = tmp_path / "frag.txt"
    p.write_text('<emph render="bold">x</emph>', encoding="utf-8")
    assert main(["transcode", str(p)]) == 0
    assert capsys.readouterr().out.strip() == '<span class="ead-emph ead-emph-bold">x</span>'


def test_transcode_malformed(capsys):
    assert main(["transcode", "--text", "<emph>"]) == 2
    assert "error: malformed markup" in capsys.readouterr().err


def test_transcode_invalid_utf8(tmp_path, capsys):
    p = tmp_path / "latin1.txt"
    p.write_bytes(b"caf\xe9 <emph>x</emph>")
    assert main(["transcode", str(p)]) == 2
    assert "error: input is not valid UTF-8" in capsys.readouterr().err


def test_transcode_without_input(capsys):
    assert main(["transcode"]) == 2


def test_fabify_writes_output(tmp_path):
    out = tmp_path / "out.xml"
    assert main(["fabify", str(FIXTURE), "-o", str(out)]) == 0
    text = out.read_text(encoding="utf-8")
    assert 'label="creator"' in text
    assert "aspace_uri" not in text


def test_fabify_failure_exit_code(tmp_path, capsys):
    bad = tmp_path / "bad.xml"
    bad.write_bytes(b"<ead>")
    assert main(["fabify", str(bad)]) == 1
    assert "Unable to parse XML file" in capsys.readouterr().err


def test_census_json(capsys):
    assert main(["census", "--json", str(FIXTURE)]) == 0
    counts = json.loads(capsys.readouterr().out)
    assert counts["all"] == 14
    assert counts["video-reading-room"] == 1


def test_census_not_ead(tmp_path, capsys):
    bad = tmp_path / "x.xml"
    bad.write_bytes(b"<html/>")
    assert main(["census", str(bad)]) == 2


def test_to_json(tmp_path, capsys):
    info = tmp_path / "dao.json"
    info.write_text(json.dumps({"https://hdl.handle.net/2333.1/m63xss7g": {"type": "image_set", "count": 6}}), encoding="utf-8")

    rc = main(["to-json", str(FIXTURE), "--themeid", "t1", "--donor", " a ", "--donor", "b", "--dao-info", str(info)])
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["pubinfo"]["themeid"] == "t1"
    assert data["donors"] == ["a", "b"]
    assert data["runinfo"]["sourcefile"] == "mos_2021.xml"
    images = data["archdesc"]["children"][1]["children"][0]["children"][0]["digital_objects"]
    assert images[1]["count"] == 6


def test_to_json_no_group(capsys):
    assert main(["to-json", "--no-group", str(FIXTURE)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [c["id"] for c in data["archdesc"]["children"][0]["children"]] == ["f01", "f02", "ss1", "f03"]


def test_to_json_bad_dao_info(tmp_path, capsys):
    info = tmp_path / "dao.json"
    info.write_text("[1, 2]", encoding="utf-8")
    assert main(["to-json", "--dao-info", str(info), str(FIXTURE)]) == 2
