"""Splitting text into maximal same-script runs."""

from __future__ import annotations

from typing import List, Sequence

from .scripts import classify, is_blank
from .structures import Run


def segment(text: str) -> List[Run]:
    """Split text into runs of consecutive characters sharing a script class.

    Blank text yields no runs. Whitespace inside non-blank text classifies as
    OTHER like any non-CJK character.
    """

    if is_blank(text):
        return []

    runs: List[Run] = []
    current_script = classify(text[0])
    start = 0
    for index in range(1, len(text)):
        script = classify(text[index])
        if script is current_script:
            continue
        runs.append(Run(text=text[start:index], script=current_script))
        current_script = script
        start = index
    runs.append(Run(text=text[start:], script=current_script))
    return runs


def runs_text(runs: Sequence[Run]) -> str:
    """Concatenate the text of the runs."""

    return "".join(run.text for run in runs)

