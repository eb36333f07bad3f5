"""High-level orchestration for formatting a whole diagram."""

from __future__ import annotations

import logging
import pathlib
import time
from dataclasses import dataclass, field
from typing import List

from .diagrams import open_diagram
from .errors import DualFontError, ErrorCategory, OverwriteRefusedError
from .formatter import apply_formatting
from .policy import ErrorPolicy
from .structures import FontPolicy, LabelUnit

logger = logging.getLogger(__name__)


@dataclass
class FormattingSummary:
    """Report returned after processing a diagram."""

    input_path: pathlib.Path
    output_path: pathlib.Path
    total_units: int
    markup_units: int
    font_units: int
    unchanged_units: int
    failed_units: int
    total_errors: int
    cjk_font: str
    latin_font: str
    elapsed_seconds: float
    error_messages: List[str] = field(default_factory=list)


class FormattingRunner:
    """Coordinates extraction, formatting, and reinsertion."""

    def __init__(
        self,
        *,
        input_path: pathlib.Path,
        output_path: pathlib.Path,
        policy: FontPolicy,
        interactive: bool,
        verbose: bool,
    ) -> None:
        self.input_path = input_path
        self.output_path = output_path
        self.policy = policy
        self.interactive = interactive
        self.verbose = verbose

        self.error_policy = ErrorPolicy(interactive=interactive)

    def run(self) -> FormattingSummary:
        start_time = time.time()

        document = open_diagram(self.input_path)
        units = document.extract_label_units()
        if self.verbose:
            print(f"Found {len(units)} labelled cells.")

        markup_units = 0
        font_units = 0
        unchanged_units = 0
        failed_units = 0

        for unit in units:
            outcome = self._format_unit(unit)
            if outcome == "markup":
                markup_units += 1
            elif outcome == "font":
                font_units += 1
            elif outcome == "unchanged":
                unchanged_units += 1
            else:
                failed_units += 1

        document.save(self.output_path)

        elapsed = time.time() - start_time
        return FormattingSummary(
            input_path=self.input_path,
            output_path=self.output_path,
            total_units=len(units),
            markup_units=markup_units,
            font_units=font_units,
            unchanged_units=unchanged_units,
            failed_units=failed_units,
            total_errors=len(self.error_policy.records),
            cjk_font=self.policy.cjk_font,
            latin_font=self.policy.latin_font,
            elapsed_seconds=elapsed,
            error_messages=[record.message for record in self.error_policy.records],
        )

    def _format_unit(self, unit: LabelUnit) -> str:
        result = apply_formatting(unit.label, self.policy)
        if not result.ok:
            self.error_policy.handle_error(
                ErrorCategory.MARKUP,
                f"Could not parse the label at {unit.location}. Leaving it unchanged.",
                details=str(result.error),
            )
            return "failed"

        try:
            unit.apply(result)
        except ValueError as exc:
            self.error_policy.handle_error(
                ErrorCategory.FORMAT,
                f"Could not update the label at {unit.location}. Leaving it unchanged.",
                details=str(exc),
            )
            return "failed"

        self.error_policy.record_success()
        logger.debug("Formatted %s (markup=%s)", unit.unit_id, result.is_markup)
        if result.is_markup:
            return "markup" if result.changed else "unchanged"
        if result.font:
            return "font"
        return "unchanged"


def validate_paths(
    input_path: pathlib.Path,
    output_path: pathlib.Path,
    force_overwrite: bool,
) -> None:
    """Validate input/output path combinations and overwrite policy."""

    if not input_path.exists():
        raise FileNotFoundError(
            "Input file not found. Please provide a readable .drawio or .xml file."
        )
    if not input_path.is_file():
        raise DualFontError("Input path must be a file.")

    if input_path.resolve() == output_path.resolve():
        raise OverwriteRefusedError(
            "The output path matches the input diagram. Refusing to overwrite the source file."
        )

    if output_path.exists() and not force_overwrite:
        raise OverwriteRefusedError(
            "The output file already exists. Rename it or use the overwrite flag."
        )
