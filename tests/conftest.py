"""Shared fixtures for the dual-font tests."""

from __future__ import annotations

import pathlib

import pytest

DIAGRAM_XML = (
    '<mxfile host="test"><diagram id="d1" name="Page-1"><mxGraphModel><root>'
    '<mxCell id="0"/>'
    '<mxCell id="1" parent="0"/>'
    '<mxCell id="2" value="Hello世界" style="rounded=0;whiteSpace=wrap;" vertex="1" parent="1">'
    '<mxGeometry x="0" y="0" width="120" height="60" as="geometry"/>'
    "</mxCell>"
    '<mxCell id="3" value="你好" style="ellipse;whiteSpace=wrap;html=1;" vertex="1" parent="1"/>'
    '<object label="&lt;b&gt;Test测试&lt;/b&gt;" id="4">'
    '<mxCell style="text;" vertex="1" parent="1"/>'
    "</object>"
    "</root></mxGraphModel></diagram></mxfile>"
)


@pytest.fixture
def diagram_path(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "sample.drawio"
    path.write_text(DIAGRAM_XML, encoding="utf-8")
    return path
