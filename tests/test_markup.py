import pytest

from dualfont.markup import (
    contains_markup,
    escape_markup,
    render_styled_unit,
    serialize,
    styled_font,
)
from dualfont.segmenter import segment
from dualfont.structures import FontPolicy, Run, ScriptClass
from dualfont.tree import text_content


def test_escape_markup_handles_reserved_characters_once():
    assert escape_markup("& < > \" '") == "&amp; &lt; &gt; &quot; &#x27;"
    assert escape_markup("&lt;") == "&amp;lt;"


@pytest.mark.parametrize(
    "label",
    ["<p>x</p>", "a<br>b", "<B>bold</B>", '<span style="color: red">x</span>'],
)
def test_tags_are_detected(label):
    assert contains_markup(label)


@pytest.mark.parametrize("label", ["Hello", "1 < 2", "a <b", "3 > 2", "中文 & English"])
def test_plain_text_is_not_detected_as_markup(label):
    assert not contains_markup(label)


def test_serialize_wraps_each_run_with_its_font():
    runs = [Run("Hello", ScriptClass.OTHER), Run("世界", ScriptClass.CJK)]
    assert serialize(runs) == (
        '<span style="font-family: Times New Roman;">Hello</span>'
        '<span style="font-family: SimSun;">世界</span>'
    )


def test_serialize_uses_the_policy_table():
    policy = FontPolicy(cjk_font="KaiTi", latin_font="Arial")
    runs = [Run("你好", ScriptClass.CJK), Run("!", ScriptClass.OTHER)]
    assert serialize(runs, policy) == (
        '<span style="font-family: KaiTi;">你好</span>'
        '<span style="font-family: Arial;">!</span>'
    )


def test_render_styled_unit_escapes_text():
    assert render_styled_unit("a<b>&c", "Arial") == (
        '<span style="font-family: Arial;">a&lt;b&gt;&amp;c</span>'
    )


def test_styled_font_reads_single_declaration_only():
    assert styled_font("font-family: SimSun;") == "SimSun"
    assert styled_font("font-family:Times New Roman") == "Times New Roman"
    assert styled_font("color: red; font-family: SimSun;") is None
    assert styled_font("") is None


@pytest.mark.parametrize(
    "text",
    ["Hello世界", "Tom & Jerry 猫和老鼠", "if a < b 则 \"x\" 'y' > c", "第1章 Intro"],
)
def test_serialized_markup_preserves_text_content(text):
    assert text_content(serialize(segment(text))) == text
