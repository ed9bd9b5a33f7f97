"""
Provides the `Transpiler` class and the `latex_to_omml` entry point.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters. Requires `__init__`,
      `emit_document` and `get_output`.
    - Transpiler: Uses the appropriate emitter based on the selected target (currently
      "omml") and hands it a parsed formula.
    - ConversionError: Raised by `latex_to_omml` when the source cannot be parsed.

Usage:
    The Transpiler takes a tuple of `Exp` nodes and returns markup in the desired format.

Example:
    >>> latex_to_omml(r"\\frac{1}{2}", "block")
    '<m:oMathPara>...'

Raises:
    ValueError: If the target format or display mode is not supported.
    TypeError: If the expression sequence contains non-Exp items.
    ConversionError: If the LaTeX source has an unbalanced group or is nested too deeply.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from texomml.emitters.omml_emitter import OmmlEmitter
from texomml.emitters.omml_node import XMLNode
from texomml.tex_ast import DisplayType, Exp, is_exp
from texomml.tex_parser import UnbalancedGroupError, read_tex

logger = logging.getLogger(__name__)


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all math markup emitters.

    Methods:
        __init__(): Initializes the emitter.
        emit_document(display, exps): Builds the markup tree for a whole formula.
        get_output(): Returns the serialized markup of the last document.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def emit_document(
        self, display: DisplayType, exps: Sequence[Exp]
    ) -> XMLNode: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "omml": OmmlEmitter,
}


class ConversionError(Exception):
    """Raised when a LaTeX formula cannot be converted.

    Attributes:
        cause (Exception): The underlying parser error.
    """

    def __init__(self, cause: Exception, detail: str | None = None) -> None:
        super().__init__(f"Failed to convert LaTeX to OMML: {detail or cause}")
        self.cause = cause


NESTING_TOO_DEEP = "nesting too deep"


def parse_latex(latex: str) -> tuple[Exp, ...]:
    """Parses LaTeX source, wrapping parser failures in `ConversionError`."""
    try:
        return read_tex(latex)
    except UnbalancedGroupError as exc:
        logger.debug("Parse failed for %r: %s", latex, exc)
        raise ConversionError(exc) from exc
    except RecursionError as exc:
        logger.debug("Parse of %d characters exceeded the recursion limit", len(latex))
        raise ConversionError(exc, NESTING_TOO_DEEP) from exc


def to_display(display: DisplayType | str) -> DisplayType:
    """Normalizes a display selector ("inline", "block" or a DisplayType).

    Raises:
        ValueError: If the value names no display mode.
    """
    if isinstance(display, DisplayType):
        return display
    try:
        return DisplayType(str(display).lower())
    except ValueError:
        raise ValueError(f"Unknown display mode: {display!r}") from None


class Transpiler:
    """Dispatches a parsed formula to the emitter for the output format.

    Attributes:
        emitter (Emitter): The selected emitter instance for the output target.
    """

    def __init__(self, target: str = "omml") -> None:
        """Initializes the transpiler with the desired output target.

        Args:
            target: The desired output format ("omml").

        Raises:
            ValueError: If the target format is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown transpilation target: {target!r}")
        self.emitter: Emitter = EMITTERS[target]()

    def transpile(
        self, exps: Sequence[Exp], display: DisplayType | str = DisplayType.INLINE
    ) -> str:
        """Renders parsed expressions as markup for the selected target.

        Args:
            exps: The expressions returned by the parser.
            display: Block (centred paragraph) or inline.

        Returns:
            The serialized markup.

        Raises:
            TypeError: If any element is not an Exp node.
        """
        if not all(is_exp(exp) for exp in exps):
            raise TypeError("All items must be Exp instances.")
        self.emitter.emit_document(to_display(display), exps)
        return self.emitter.get_output()


def latex_to_omml(latex: str, display: DisplayType | str = DisplayType.INLINE) -> str:
    """
    Converts a LaTeX math formula to OMML markup.

    Unsupported commands and environments are skipped; only an unbalanced brace or
    bracket group aborts the conversion.

    Args:
        latex: The formula source, without `$` delimiters.
        display: `"inline"` for a bare `m:oMath`, `"block"` for a centred
            `m:oMathPara`.

    Returns:
        str: The serialized OMML.

    Raises:
        ConversionError: If a required `}` or `]` is missing, or the formula is
            nested too deeply to convert.
        ValueError: If `display` names no display mode.
    """
    mode = to_display(display)
    exps = parse_latex(latex)
    try:
        return Transpiler("omml").transpile(exps, mode)
    except RecursionError as exc:
        raise ConversionError(exc, NESTING_TOO_DEEP) from exc


__all__ = ["ConversionError", "Emitter", "Transpiler", "latex_to_omml", "parse_latex"]
