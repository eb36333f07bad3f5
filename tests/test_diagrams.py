import base64
import zlib
from urllib.parse import quote

import pytest
from lxml import etree

from dualfont.diagrams import (
    decode_diagram,
    open_diagram,
    parse_style,
    render_style,
    set_style_value,
)
from dualfont.errors import DiagramFormatError, UnsupportedFileTypeError
from dualfont.formatter import apply_formatting

SIMSUN = '<span style="font-family: SimSun;">'
TIMES = '<span style="font-family: Times New Roman;">'

MODEL_XML = (
    "<mxGraphModel><root>"
    '<mxCell id="0"/><mxCell id="1" parent="0"/>'
    '<mxCell id="7" value="压缩 zip" style="text;" vertex="1" parent="1"/>'
    "</root></mxGraphModel>"
)


def _compress(xml: str) -> str:
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    data = compressor.compress(quote(xml, safe="").encode("utf-8")) + compressor.flush()
    return base64.b64encode(data).decode("ascii")


def _cells(path):
    root = etree.parse(str(path)).getroot()
    return {element.get("id"): element for element in root.iter("mxCell", "object")}


def test_parse_style_keeps_order_and_bare_entries():
    entries = parse_style("ellipse;whiteSpace=wrap;html=1;")
    assert list(entries.items()) == [("ellipse", None), ("whiteSpace", "wrap"), ("html", "1")]
    assert render_style(entries) == "ellipse;whiteSpace=wrap;html=1;"


def test_set_style_value_adds_or_replaces():
    assert set_style_value("rounded=0;html=1;", "fontFamily", "SimSun") == (
        "rounded=0;html=1;fontFamily=SimSun;"
    )
    assert set_style_value("fontFamily=Arial;rounded=1", "fontFamily", "SimSun") == (
        "fontFamily=SimSun;rounded=1;"
    )
    assert set_style_value(None, "html", "1") == "html=1;"


def test_extract_label_units(diagram_path):
    units = open_diagram(diagram_path).extract_label_units()
    assert [unit.unit_id for unit in units] == ["Page-1#2", "Page-1#3", "Page-1#4"]
    assert [unit.label for unit in units] == ["Hello世界", "你好", "<b>Test测试</b>"]
    assert units[0].location == "Page-1, cell 2"


def test_results_are_written_back(diagram_path, tmp_path):
    document = open_diagram(diagram_path)
    for unit in document.extract_label_units():
        unit.apply(apply_formatting(unit.label))
    output = tmp_path / "out.drawio"
    document.save(output)

    cells = _cells(output)
    assert cells["2"].get("value") == f"{TIMES}Hello</span>{SIMSUN}世界</span>"
    assert cells["2"].get("style") == "rounded=0;whiteSpace=wrap;html=1;"
    assert cells["3"].get("value") == "你好"
    assert cells["3"].get("style") == "ellipse;whiteSpace=wrap;html=1;fontFamily=SimSun;"
    assert cells["4"].get("label") == (
        f"<b>{TIMES}Test</span>{SIMSUN}测试</span></b>"
    )
    assert cells["4"].find("mxCell").get("style") == "text;html=1;"


def test_failed_results_leave_cells_alone(tmp_path):
    path = tmp_path / "broken.drawio"
    path.write_text(
        '<mxGraphModel><root><mxCell id="2" value="&lt;b&gt;x&lt;/i&gt;" style="text;"/>'
        "</root></mxGraphModel>",
        encoding="utf-8",
    )
    document = open_diagram(path)
    (unit,) = document.extract_label_units()
    unit.apply(apply_formatting(unit.label))
    document.save(path)
    cell = _cells(path)["2"]
    assert cell.get("value") == "<b>x</i>"
    assert cell.get("style") == "text;"


def test_compressed_diagrams_are_inflated(tmp_path):
    path = tmp_path / "compressed.drawio"
    path.write_text(
        f'<mxfile><diagram id="c" name="Zipped">{_compress(MODEL_XML)}</diagram></mxfile>',
        encoding="utf-8",
    )
    document = open_diagram(path)
    (unit,) = document.extract_label_units()
    assert unit.unit_id == "Zipped#7"
    assert unit.label == "压缩 zip"


def test_decode_diagram_round_trip():
    assert decode_diagram(_compress(MODEL_XML)) == MODEL_XML


def test_decode_diagram_rejects_garbage():
    with pytest.raises(DiagramFormatError):
        decode_diagram("not base64!")


def test_unsupported_suffix(tmp_path):
    with pytest.raises(UnsupportedFileTypeError):
        open_diagram(tmp_path / "notes.docx")


def test_malformed_xml(tmp_path):
    path = tmp_path / "bad.drawio"
    path.write_text("<mxfile><diagram>", encoding="utf-8")
    with pytest.raises(DiagramFormatError):
        open_diagram(path)


def test_unexpected_root(tmp_path):
    path = tmp_path / "other.xml"
    path.write_text("<svg/>", encoding="utf-8")
    with pytest.raises(DiagramFormatError):
        open_diagram(path)
