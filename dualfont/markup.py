"""Styled-markup serialisation of script runs."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .structures import FontPolicy, Run

MARKUP_PATTERN = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
FONT_FAMILY_PATTERN = re.compile(r"^\s*font-family:\s*(?P<font>[^;]+?)\s*;?\s*$")

STYLED_UNIT_TAG = "span"

# "&" must come first so the entities produced below are not escaped again.
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)


def contains_markup(label: str) -> bool:
    """Heuristically detect whether a label holds at least one tag."""

    return MARKUP_PATTERN.search(label) is not None


def escape_markup(text: str) -> str:
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def font_style(font: str) -> str:
    """Inline style declaration used by styled units."""

    return f"font-family: {font};"


def styled_font(style: str) -> Optional[str]:
    """Return the font of a style holding exactly one font-family declaration."""

    match = FONT_FAMILY_PATTERN.match(style)
    if not match:
        return None
    return match.group("font")


def render_styled_unit(text: str, font: str) -> str:
    return (
        f'<{STYLED_UNIT_TAG} style="{escape_markup(font_style(font))}">'
        f"{escape_markup(text)}</{STYLED_UNIT_TAG}>"
    )


def serialize(runs: Sequence[Run], policy: Optional[FontPolicy] = None) -> str:
    """Wrap each run in a styled unit carrying the font of its script."""

    policy = policy or FontPolicy()
    return "".join(
        render_styled_unit(run.text, policy.font_for(run.script)) for run in runs
    )
