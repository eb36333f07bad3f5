import pytest

from dualfont.errors import MarkupParseError
from dualfont.structures import MarkupElement, MarkupRaw, MarkupText
from dualfont.tree import (
    check_balance,
    escape_unknown_entities,
    parse_markup,
    render_tree,
    text_content,
)


def test_parse_builds_fragment_root():
    tree = parse_markup("<p>测试Test</p>")
    assert tree.tag is None
    (paragraph,) = tree.children
    assert isinstance(paragraph, MarkupElement)
    assert paragraph.tag == "p"
    assert paragraph.children == [MarkupText("测试Test")]


def test_leading_and_trailing_text_are_kept():
    tree = parse_markup(" lead <b>x</b> tail ")
    assert tree.children[0] == MarkupText(" lead ")
    assert tree.children[-1] == MarkupText(" tail ")


@pytest.mark.parametrize(
    "markup",
    [
        '<p class="a b">x<br>y</p>',
        "<b>x</b><!-- note -->",
        '<div style="font-family: Arial; color: red;">A<i>B</i>C</div>',
        "<span>a</span> <span>b</span>",
    ],
)
def test_render_reproduces_normalised_markup(markup):
    assert render_tree(parse_markup(markup)) == markup


def test_comments_become_raw_nodes():
    tree = parse_markup("x<!-- keep -->")
    assert tree.children[1] == MarkupRaw("<!-- keep -->")


def test_void_elements_have_no_children():
    tree = parse_markup("a<br/>b<img src='x.png'>")
    br, img = tree.children[1], tree.children[3]
    assert br.void and br.children == []
    assert img.void and img.attrs == {"src": "x.png"}
    assert render_tree(tree) == 'a<br>b<img src="x.png">'


def test_entities_decode_into_text():
    assert text_content("<p>a<b>b</b>&amp;&lt;</p>") == "ab&<"


def test_unknown_entities_survive_parsing():
    assert text_content("R&D; &amp; &nbsp;x") == "R&D; & \u00a0x"
    assert escape_unknown_entities("a &D; &amp;") == "a &amp;D; &amp;"
    protected = "<!-- &D; --><style>&D;</style>"
    assert escape_unknown_entities(protected) == protected


@pytest.mark.parametrize("markup", ["<b>bold</i>", "text</p>", "<b><i>x</b></i>"])
def test_malformed_markup_raises(markup):
    with pytest.raises(MarkupParseError):
        parse_markup(markup)


def test_parse_error_reports_tag_and_offset():
    with pytest.raises(MarkupParseError) as excinfo:
        check_balance("<b>bold</i>")
    assert excinfo.value.tag == "i"
    assert excinfo.value.offset == 7


@pytest.mark.parametrize(
    "markup",
    [
        "<p>unclosed",
        "<ul><li>a<li>b</ul>",
        "<div><p>a<p>b</div>",
        "a<br>b</br>",
        '<span title="a>b">x</span>',
        "<!-- </b> -->text",
    ],
)
def test_tolerated_markup_parses(markup):
    parse_markup(markup)
