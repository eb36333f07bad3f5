"""Formatting entry point: route a label to the plain-text or markup path."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import MarkupParseError
from .markup import contains_markup, serialize
from .rewriter import rewrite
from .scripts import is_blank, script_composition
from .segmenter import segment
from .structures import FontPolicy, FormatResult
from .tree import parse_markup, render_tree

logger = logging.getLogger(__name__)


def _format_markup(label: str, policy: FontPolicy) -> FormatResult:
    try:
        tree = parse_markup(label)
    except MarkupParseError as exc:
        logger.debug("Markup label could not be parsed: %s", exc)
        return FormatResult(value=label, is_markup=True, error=exc)

    value = render_tree(rewrite(tree, policy))
    return FormatResult(value=value, is_markup=True, changed=value != label)


def _format_plain(label: str, policy: FontPolicy) -> FormatResult:
    composition = script_composition(label)
    if len(composition) == 1:
        (script,) = composition
        return FormatResult(
            value=label,
            is_markup=False,
            font=policy.font_for(script),
            changed=False,
        )

    runs = segment(label)
    logger.debug("Split mixed label into %d runs", len(runs))
    value = serialize(runs, policy)
    return FormatResult(value=value, is_markup=True, changed=True)


def apply_formatting(label: str, policy: Optional[FontPolicy] = None) -> FormatResult:
    """Format a label so that each script run carries its own font.

    Blank labels come back unchanged. Labels holding markup are parsed and
    their text nodes rewritten; a parse failure is reported through
    ``FormatResult.error`` with the label untouched. Plain labels written in a
    single script get a whole-label font instead of markup.
    """

    policy = policy or FontPolicy()
    if is_blank(label):
        return FormatResult(value=label, is_markup=False)
    if contains_markup(label):
        return _format_markup(label, policy)
    return _format_plain(label, policy)
