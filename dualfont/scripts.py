"""Script classification of single characters."""

from __future__ import annotations

from typing import FrozenSet, Tuple

from .structures import ScriptClass

CJK_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0x3000, 0x303F),  # CJK Symbols and Punctuation
    (0xFF00, 0xFF60),  # Fullwidth forms
    (0xFF61, 0xFFEF),  # Halfwidth forms
)


def is_cjk(char: str) -> bool:
    """Return True when the character falls inside one of the CJK ranges."""

    code = ord(char)
    for start, end in CJK_RANGES:
        if start <= code <= end:
            return True
    return False


def classify(char: str) -> ScriptClass:
    """Classify one character. Anything outside the CJK table is OTHER."""

    return ScriptClass.CJK if is_cjk(char) else ScriptClass.OTHER


def is_blank(text: str) -> bool:
    return not text or text.isspace()


def script_composition(text: str) -> FrozenSet[ScriptClass]:
    """Return the script classes used by the non-whitespace characters of text."""

    found = set()
    for char in text:
        if char.isspace():
            continue
        found.add(classify(char))
        if len(found) == len(ScriptClass):
            break
    return frozenset(found)
