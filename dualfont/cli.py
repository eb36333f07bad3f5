"""Command line interface for the dual-font formatter."""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Iterable, Optional

from .configuration import build_font_policy, get_settings
from .errors import (
    AbortRequested,
    ConfigurationError,
    DiagramFormatError,
    DualFontError,
    NonInteractiveAbort,
    OverwriteRefusedError,
    UnsupportedFileTypeError,
)
from .formatter import apply_formatting
from .runner import FormattingRunner, FormattingSummary, validate_paths
from .structures import FontPolicy

OUTPUT_SUFFIX = "dualfont"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dualfont",
        description=(
            "Give CJK and non-CJK text their own fonts in draw.io labels."
        ),
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        help="Path to the .drawio or .xml diagram to format.",
    )
    parser.add_argument(
        "-l",
        "--label",
        help="Format a single label and print the result instead of a diagram.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file path. Defaults to appending '_dualfont' to the input name.",
    )
    parser.add_argument(
        "--cjk-font",
        help="Font family for CJK text (default from configuration: SimSun).",
    )
    parser.add_argument(
        "--latin-font",
        help="Font family for all other text (default from configuration: Times New Roman).",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow overwriting the output file if it already exists.",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Disable prompts and enforce automatic decisions (suitable for CI).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    return parser


def derive_output_path(input_path: pathlib.Path) -> pathlib.Path:
    return input_path.with_name(f"{input_path.stem}_{OUTPUT_SUFFIX}{input_path.suffix}")


def resolve_policy(
    policy: FontPolicy,
    *,
    cjk_font: str | None,
    latin_font: str | None,
) -> FontPolicy:
    """Apply command line font overrides on top of the configured policy."""

    return FontPolicy(
        cjk_font=(cjk_font or "").strip() or policy.cjk_font,
        latin_font=(latin_font or "").strip() or policy.latin_font,
    )


def format_single_label(label: str, policy: FontPolicy) -> tuple[int, str]:
    """Format one label and return the exit code and the text to print."""

    result = apply_formatting(label, policy)
    if not result.ok:
        return 1, f"Could not parse the label: {result.error}"
    if result.font:
        return 0, f"fontFamily={result.font}"
    return 0, result.value


def execute_formatting(
    *,
    input_file: str,
    output_file: str | None,
    policy: FontPolicy,
    force_overwrite: bool,
    non_interactive: bool,
    verbose: bool,
) -> tuple[int, FormattingSummary | None, str | None]:
    """Format a diagram and return the exit code, summary, and message."""

    input_path = pathlib.Path(input_file).expanduser().resolve()
    output_path = (
        pathlib.Path(output_file).expanduser().resolve()
        if output_file
        else derive_output_path(input_path)
    )

    try:
        validate_paths(input_path, output_path, force_overwrite=force_overwrite)
    except FileNotFoundError as exc:
        return 1, None, str(exc)
    except DualFontError as exc:
        return 1, None, str(exc)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    runner = FormattingRunner(
        input_path=input_path,
        output_path=output_path,
        policy=policy,
        interactive=not non_interactive,
        verbose=verbose,
    )

    try:
        summary = runner.run()
    except (UnsupportedFileTypeError, DiagramFormatError, OverwriteRefusedError) as exc:
        return 1, None, str(exc)
    except NonInteractiveAbort as exc:
        return 2, None, str(exc)
    except AbortRequested:
        return 2, None, "Formatting aborted at your request."
    except DualFontError as exc:
        return 1, None, str(exc)
    except OSError as exc:
        return 1, None, f"Could not read or write the diagram: {exc}"
    except KeyboardInterrupt:
        return 2, None, "Formatting interrupted by user."

    return 0, summary, None


def print_summary(summary: FormattingSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nFormatting complete.")
    print(f"  Input file:      {summary.input_path}")
    print(f"  Output file:     {summary.output_path}")
    print(
        "  Labels:          "
        f"{summary.markup_units} marked up, {summary.font_units} font only, "
        f"{summary.unchanged_units} unchanged, {summary.failed_units} failed "
        f"({summary.total_units} total)"
    )
    print(f"  Fonts:           {summary.cjk_font} / {summary.latin_font}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.total_errors:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(exc)
        return 1

    verbose = bool(args.verbose or settings.DUALFONT_VERBOSE)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    policy = resolve_policy(
        build_font_policy(settings),
        cjk_font=args.cjk_font,
        latin_font=args.latin_font,
    )

    if args.label is not None:
        exit_code, output = format_single_label(args.label, policy)
        print(output)
        return exit_code

    if args.input_file is None:
        parser.error("either input_file or --label is required")

    exit_code, summary, message = execute_formatting(
        input_file=args.input_file,
        output_file=args.output,
        policy=policy,
        force_overwrite=args.force,
        non_interactive=args.non_interactive,
        verbose=verbose,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
