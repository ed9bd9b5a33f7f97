"""
texomml CLI Entrypoint.

This module provides the command-line interface for converting LaTeX math to OMML.

Features:
    - Read source from `.tex` files or inline strings.
    - Parse and emit inline (`m:oMath`) or block (`m:oMathPara`) markup.
    - Dump the parsed expression tree as JSON instead of markup.
    - Output to console or file.

Example usage:
    texomml formula.tex
    texomml -s "\\frac{a}{b}" -d block
    texomml formula.tex -o formula.xml
    texomml -s "x^2" --ast

Configuration:
    TEXOMML_DISPLAY: Default display mode ("inline" or "block") when `-d` is not given.

Functions:
    run_texomml(source: str, is_string: bool = False, display: str = "inline",
                out: str | None = None, ast: bool = False, pretty: bool = False) -> None:
        Executes the full pipeline (read → parse → emit → output).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments, runs the pipeline and returns the exit status.
"""

import argparse
import json
import logging
import os
import sys

from texomml.tex_transpile import (
    NESTING_TOO_DEEP,
    ConversionError,
    Transpiler,
    parse_latex,
    to_display,
)

logger = logging.getLogger(__name__)

DISPLAY_ENV = "TEXOMML_DISPLAY"


def run_texomml(
    source: str,
    is_string: bool = False,
    display: str = "inline",
    out: str | None = None,
    ast: bool = False,
    pretty: bool = False,
) -> None:
    """
    Run the texomml pipeline: read, parse, emit, and print or write the result.

    Args:
        source (str): The LaTeX source or path to a `.tex` file.
        is_string (bool): If True, treats `source` as raw LaTeX instead of a file path.
        display (str): "inline" or "block". Defaults to "inline".
        out (str | None): Optional path to write the output. If None, prints to stdout.
        ast (bool): If True, emits the expression tree as JSON instead of OMML.
        pretty (bool): If True, prints formatted banners around the output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.tex'.
        ConversionError: If the source has an unbalanced group or is nested too deeply.
    """
    if not is_string and not source.endswith(".tex"):
        raise ValueError("Only .tex files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    mode = to_display(display)
    exps = parse_latex(source)
    logger.info("Parsed %d top-level expression(s)", len(exps))

    try:
        if ast:
            result = json.dumps(
                [exp.to_dict() for exp in exps], indent=2, ensure_ascii=False
            )
        else:
            result = Transpiler("omml").transpile(exps, mode)
    except RecursionError as exc:
        raise ConversionError(exc, NESTING_TOO_DEEP) from exc

    if pretty:
        banner = "=" * 20
        title = "Expression Tree" if ast else f"OMML ({mode.value})"
        print(f"{banner}\n{title}\n{banner}\n{result}\n{banner}\n")
    elif not out:
        print(result)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(result)
        if pretty:
            print(f"(wrote to {out})")


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the texomml CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw LaTeX string instead of a file path.
        - `-d`, `--display`: 'inline' or 'block' (default: $TEXOMML_DISPLAY or 'inline').
        - `-o`, `--out`: Write output to a file.
        - `--ast`: Print the parsed expression tree as JSON.
        - `-p`, `--pretty`: Show output with banners.
        - `--verbose`: Log parser and emitter diagnostics to stderr.

    Returns:
        int: 0 on success, 1 if the input could not be converted.
    """
    parser = argparse.ArgumentParser(prog="texomml")
    parser.add_argument("source", help="Filename or raw LaTeX (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-d",
        "--display",
        choices=("inline", "block"),
        default=os.environ.get(DISPLAY_ENV, "inline").lower(),
        help=f"Display mode (default: ${DISPLAY_ENV} or inline)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--ast", action="store_true", help="Print the parsed expression tree as JSON"
    )
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log diagnostics to stderr"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_texomml(
            source=args.source,
            is_string=args.string,
            display=args.display,
            out=args.out,
            ast=args.ast,
            pretty=args.pretty,
        )
    except (ConversionError, ValueError, OSError) as exc:
        print(f"[error] >>> {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())
