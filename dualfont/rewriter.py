"""Rewriting the text nodes of a markup tree into font-carrying spans."""

from __future__ import annotations

import logging
from typing import List, Optional

from .markup import STYLED_UNIT_TAG, font_style, styled_font
from .segmenter import segment
from .structures import FontPolicy, MarkupElement, MarkupNode, MarkupText

logger = logging.getLogger(__name__)


def make_styled_unit(text: str, font: str) -> MarkupElement:
    return MarkupElement(
        tag=STYLED_UNIT_TAG,
        attrs={"style": font_style(font)},
        children=[MarkupText(text=text)],
    )


def is_styled_unit(node: MarkupNode, policy: FontPolicy) -> bool:
    """Recognise a span this formatter produced under the given policy."""

    if not isinstance(node, MarkupElement) or node.tag != STYLED_UNIT_TAG:
        return False
    if set(node.attrs) != {"style"}:
        return False
    if not all(isinstance(child, MarkupText) for child in node.children):
        return False
    return styled_font(node.attrs["style"]) in policy.managed_fonts


def _flatten(children: List[MarkupNode], policy: FontPolicy) -> List[MarkupNode]:
    """Unwrap previously produced styled units and merge adjacent text nodes."""

    flattened: List[MarkupNode] = []
    for child in children:
        expanded = child.children if is_styled_unit(child, policy) else [child]
        for node in expanded:
            previous: Optional[MarkupNode] = flattened[-1] if flattened else None
            if isinstance(node, MarkupText) and isinstance(previous, MarkupText):
                flattened[-1] = MarkupText(text=previous.text + node.text)
            else:
                flattened.append(node)
    return flattened


def _rewrite_text(node: MarkupText, policy: FontPolicy) -> List[MarkupNode]:
    runs = segment(node.text)
    if not runs:
        # blank text stays as it is
        return [node]
    return [make_styled_unit(run.text, policy.font_for(run.script)) for run in runs]


def _rewrite_element(element: MarkupElement, policy: FontPolicy) -> None:
    rewritten: List[MarkupNode] = []
    for child in _flatten(element.children, policy):
        if isinstance(child, MarkupText):
            rewritten.extend(_rewrite_text(child, policy))
        else:
            if isinstance(child, MarkupElement):
                _rewrite_element(child, policy)
            rewritten.append(child)
    element.children = rewritten


def rewrite(tree: MarkupElement, policy: Optional[FontPolicy] = None) -> MarkupElement:
    """Wrap every text run of the tree in a styled unit, in place.

    Element nodes keep their tag and attributes; only text nodes are replaced
    and the replacements occupy the position of the text they came from.
    Styled units left by an earlier pass are unwrapped first and rebuilt from
    the text, so rewriting is idempotent.
    """

    policy = policy or FontPolicy()
    _rewrite_element(tree, policy)
    logger.debug("Rewrote markup tree with %d top-level nodes", len(tree.children))
    return tree
