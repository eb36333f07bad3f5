"""Parsing labels into markup trees and rendering them back."""

from __future__ import annotations

import logging
import re
from typing import Iterator, List

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.element import NavigableString, PreformattedString, Tag

from .errors import MarkupParseError
from .markup import escape_markup
from .structures import MarkupElement, MarkupNode, MarkupRaw, MarkupText

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

# Elements whose end tag HTML lets an enclosing end tag imply.
OPTIONAL_END_ELEMENTS = frozenset(
    {
        "colgroup",
        "dd",
        "dt",
        "li",
        "optgroup",
        "option",
        "p",
        "rp",
        "rt",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
    }
)

TAG_PATTERN = re.compile(
    r"<(?P<closing>/?)(?P<name>[A-Za-z][\w:.-]*)"
    r"(?:\s+[^\s=/>]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>]+))?)*"
    r"\s*(?P<selfclosing>/?)>"
)
IGNORED_MARKUP_PATTERN = re.compile(r"<!--.*?-->|<!\[CDATA\[.*?\]\]>|<[!?][^>]*>", re.DOTALL)
# Comments, declarations and raw-text elements match first and are left alone.
ENTITY_SCAN_PATTERN = re.compile(
    r"(?P<protected><!--.*?-->|<!\[CDATA\[.*?\]\]>|<[!?][^>]*>"
    r"|<(?P<raw>script|style)\b.*?(?:</(?P=raw)\s*>|\Z))"
    r"|&(?P<entity>[A-Za-z][-.A-Za-z0-9]*);",
    re.DOTALL | re.IGNORECASE,
)


def _blank_out(match: re.Match[str]) -> str:
    return " " * len(match.group(0))


def check_balance(markup: str) -> None:
    """Reject end tags that close nothing or cross an element still open."""

    scannable = IGNORED_MARKUP_PATTERN.sub(_blank_out, markup)
    stack: List[str] = []
    for match in TAG_PATTERN.finditer(scannable):
        name = match.group("name").lower()
        if name in VOID_ELEMENTS:
            continue
        if not match.group("closing"):
            if not match.group("selfclosing"):
                stack.append(name)
            continue
        if name not in stack:
            raise MarkupParseError(
                f"Unexpected end tag </{name}> at offset {match.start()}.",
                tag=name,
                offset=match.start(),
            )
        while stack[-1] != name:
            open_name = stack[-1]
            if open_name not in OPTIONAL_END_ELEMENTS:
                raise MarkupParseError(
                    f"End tag </{name}> at offset {match.start()} "
                    f"crosses the open element <{open_name}>.",
                    tag=name,
                    offset=match.start(),
                )
            stack.pop()
        stack.pop()


def _escape_unknown_entity(match: re.Match[str]) -> str:
    name = match.group("entity")
    if name is None or name in EntitySubstitution.HTML_ENTITY_TO_CHARACTER:
        return match.group(0)
    return f"&amp;{name};"


def escape_unknown_entities(markup: str) -> str:
    """Escape the ampersand of ``&name;`` references no HTML entity defines.

    ``html.parser`` turns such a reference into ``&name`` and loses the
    semicolon, while a browser shows it as written.
    """

    return ENTITY_SCAN_PATTERN.sub(_escape_unknown_entity, markup)


def _convert(node: Tag) -> List[MarkupNode]:
    children: List[MarkupNode] = []
    for child in node.children:
        if isinstance(child, Tag):
            element = MarkupElement(
                tag=child.name,
                attrs={key: str(value) for key, value in child.attrs.items()},
                void=child.name in VOID_ELEMENTS,
            )
            element.children = _convert(child)
            children.append(element)
        elif isinstance(child, PreformattedString):
            children.append(MarkupRaw(markup=child.output_ready()))
        elif isinstance(child, NavigableString):
            if node.name in RAW_TEXT_ELEMENTS:
                children.append(MarkupRaw(markup=str(child)))
            else:
                children.append(MarkupText(text=str(child)))
    return children


def parse_markup(markup: str) -> MarkupElement:
    """Parse a markup label into a tree rooted at a tag-less fragment element.

    Raises :class:`MarkupParseError` before any tree is built when the markup
    is malformed.
    """

    check_balance(markup)
    try:
        soup = BeautifulSoup(
            escape_unknown_entities(markup), "html.parser", multi_valued_attributes=None
        )
    except ParserRejectedMarkup as exc:
        raise MarkupParseError(f"Markup rejected by the parser: {exc}") from exc
    root = MarkupElement(tag=None)
    root.children = _convert(soup)
    logger.debug("Parsed markup into %d top-level nodes", len(root.children))
    return root


def _render_attrs(attrs: dict) -> str:
    return "".join(f' {key}="{escape_markup(value)}"' for key, value in attrs.items())


def render_node(node: MarkupNode) -> str:
    if isinstance(node, MarkupText):
        return escape_markup(node.text)
    if isinstance(node, MarkupRaw):
        return node.markup
    inner = "".join(render_node(child) for child in node.children)
    if node.tag is None:
        return inner
    opening = f"<{node.tag}{_render_attrs(node.attrs)}>"
    if node.void and not node.children:
        return opening
    return f"{opening}{inner}</{node.tag}>"


def render_tree(tree: MarkupElement) -> str:
    """Serialise a tree back into a markup string."""

    return render_node(tree)


def iter_text_nodes(node: MarkupNode) -> Iterator[MarkupText]:
    """Yield the text nodes below node in document order."""

    if isinstance(node, MarkupText):
        yield node
    elif isinstance(node, MarkupElement):
        for child in node.children:
            yield from iter_text_nodes(child)


def text_content(markup: str) -> str:
    """Return the concatenated text of a markup string with all tags stripped."""

    return "".join(node.text for node in iter_text_nodes(parse_markup(markup)))
