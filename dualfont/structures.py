"""Core data structures for the dual-font formatter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Union

DEFAULT_CJK_FONT = "SimSun"
DEFAULT_LATIN_FONT = "Times New Roman"


class ScriptClass(Enum):
    """Binary script classification of a character."""

    CJK = "cjk"
    OTHER = "other"


@dataclass(frozen=True)
class Run:
    """A maximal stretch of text sharing one script class."""

    text: str
    script: ScriptClass


@dataclass(frozen=True)
class FontPolicy:
    """Maps each script class to the font family used for it."""

    cjk_font: str = DEFAULT_CJK_FONT
    latin_font: str = DEFAULT_LATIN_FONT

    def font_for(self, script: ScriptClass) -> str:
        if script is ScriptClass.CJK:
            return self.cjk_font
        return self.latin_font

    @property
    def managed_fonts(self) -> FrozenSet[str]:
        """Fonts this policy writes into styled units."""

        return frozenset({self.cjk_font, self.latin_font})


@dataclass
class MarkupText:
    """A text node of a markup tree."""

    text: str


@dataclass
class MarkupRaw:
    """Markup kept verbatim (comments, declarations, processing instructions)."""

    markup: str


@dataclass
class MarkupElement:
    """An element node owning an ordered list of children.

    The fragment root produced by the parser has ``tag`` set to ``None`` and
    renders only its children.
    """

    tag: Optional[str]
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["MarkupNode"] = field(default_factory=list)
    void: bool = False


MarkupNode = Union[MarkupText, MarkupElement, MarkupRaw]


@dataclass
class FormatResult:
    """Outcome of formatting one label.

    ``font`` is only set when the whole label uses a single script and the
    caller should apply that font to the label's container instead of
    inserting markup. ``error`` holds the parse failure of a label that looked
    like markup; ``value`` is then the untouched input.
    """

    value: str
    is_markup: bool
    font: Optional[str] = None
    changed: bool = False
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


LabelApplier = Callable[[FormatResult], None]


@dataclass
class LabelUnit:
    """Represents a single diagram label ready for formatting."""

    unit_id: str
    label: str
    location: str
    apply: LabelApplier
