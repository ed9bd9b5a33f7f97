"""
TeX Math Parser

Parses TeX math notation into a tuple of `Exp` nodes.

This module implements a scannerless recursive-descent reader over a `Lexer`. It
accepts a best-effort subset of the LaTeX math grammar and degrades silently: an
unrecognized construct ends the current production and whatever was accumulated so
far is returned. The one hard failure is a missing closing brace or bracket.

Supported Constructs
--------------------
- Atoms: numbers (`3.14`), single-letter identifiers, operators (`+ - = <`),
  prime runs (`f''`), enclosures (`( ) [ ] |`) and symbol-table commands
  (`\\alpha`, `\\sum`, `\\to`, `\\sin`, `\\,` ...)
- Scripts: `x_i`, `x^2`, `x_i^2`, `x^2_i`, `f^{\\prime}`, `f^''`
- Limits: `\\lim_{x \\to 0}`, `\\max_x`, `\\operatorname*{argmax}_x`,
  `\\sum\\limits_{i}`
- Fractions and roots: `\\frac`, `\\dfrac`, `\\tfrac`, `\\sqrt[n]{x}`
- Stacking: `\\overset`, `\\underset`, `\\stackrel`, accents, over/under bars
  and braces
- Delimiters: `\\left( ... \\middle| ... \\right)`, `\\big(`-family sizes
- Text and style: `\\text{...}`, `\\mathbf{...}`, `\\operatorname{...}`
- Decorations: `\\boxed`, `\\phantom`, `\\cancel`, `\\bcancel`, `\\xcancel`
- Spacing: `\\quad`, `\\,`, `\\hspace{1em}`, `~`
- Environments: `matrix`, `pmatrix`, `bmatrix`, `Bmatrix`, `vmatrix`,
  `Vmatrix`, `smallmatrix`, `array`, `align`, `aligned`, `eqnarray`, `cases`

Post-processing
---------------
Binary operators that cannot be binary in context (first in the sequence, or
following another operator, relation, opening delimiter or punctuation) are
reclassified as ordinary symbols. Only the top-level sequence is processed.

Entry Points
------------
- `read_tex()`: Parse a whole formula.
- `Parser.parse()`: Same, on an explicit parser instance.

Raises
------
UnbalancedGroupError
    Raised when a `{` or `[` group is never closed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import replace
from typing import TypeVar

from texomml.tex_ast import (
    Alignment,
    Array,
    Boxed,
    Cancel,
    Delimited,
    Exp,
    Fraction,
    FractionType,
    Grouped,
    Identifier,
    MathOperator,
    Number,
    Over,
    Phantom,
    Root,
    Row,
    Scaled,
    Separator,
    Space,
    Sqrt,
    StrokeType,
    Sub,
    SubExp,
    SubSup,
    Super,
    Symbol,
    SymbolType,
    Text,
    Under,
    UnderOver,
    group,
)
from texomml.tex_lexer import CharacterStream, Lexer
from texomml.tex_symbols import (
    ENCLOSURE_CHARS,
    ENCLOSURES,
    LIMIT_OPERATORS,
    MATRIX_DELIMITERS,
    OPERATORS,
    PRIME_RUNS,
    PRIMES,
    SCALERS,
    STYLE_OPS,
    SYMBOLS,
    TEXT_OPS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Widths in em; an em is taken as 10pt.
UNIT_WIDTHS: dict[str, float] = {
    "em": 1.0,
    "ex": 0.43,
    "pt": 0.1,
    "pc": 1.2,
    "mu": 1 / 18,
    "mm": 0.285,
    "cm": 2.85,
    "in": 7.23,
    "bp": 0.1,
}
DEFAULT_HSPACE = 0.333
DIMENSION_RE = re.compile(r"^\s*(-?\d*\.?\d+)\s*([a-z]{2})\s*$")

COLUMN_ALIGNMENTS: dict[str, Alignment] = {
    "l": Alignment.LEFT,
    "c": Alignment.CENTER,
    "r": Alignment.RIGHT,
}

# Previous-symbol classes that force a following Bin to be ordinary.
_BIN_BLOCKERS = frozenset(
    {SymbolType.BIN, SymbolType.OP, SymbolType.REL, SymbolType.OPEN, SymbolType.PUN}
)
# Symbol classes that force a preceding Bin to be ordinary.
_BIN_TERMINATORS = frozenset({SymbolType.REL, SymbolType.CLOSE, SymbolType.PUN})


class UnbalancedGroupError(SyntaxError):
    """Raised when a brace or bracket group is not closed.

    Attributes:
        position (int): Offset in the source where the closing character was expected.
        line (int): 1-based line of that offset.
        col (int): 1-based column of that offset.
    """

    def __init__(self, message: str, position: int, line: int = 0, col: int = 0):
        super().__init__(f"{message} at position {position} (line {line}, col {col})")
        self.position = position
        self.line = line
        self.col = col


def _is_bin(exp: Exp) -> bool:
    return isinstance(exp, Symbol) and exp.symbol_type == SymbolType.BIN


def fix_bin_list(exps: list[Exp]) -> list[Exp]:
    """Reclassifies binary operators that cannot act as binary in context.

    A single left-to-right pass over one sequence (not its sub-trees):

    - a Bin symbol becomes Ord if it is first, or if the previous retained element is
      a Bin, Op, Rel, Open or Pun symbol;
    - a Rel, Close or Pun symbol turns a directly preceding Bin symbol into Ord.
    """
    result: list[Exp] = []
    for exp in exps:
        if not isinstance(exp, Symbol):
            result.append(exp)
            continue
        if exp.symbol_type == SymbolType.BIN:
            prev = result[-1] if result else None
            if prev is None or (
                isinstance(prev, Symbol) and prev.symbol_type in _BIN_BLOCKERS
            ):
                exp = replace(exp, symbol_type=SymbolType.ORD)
        elif exp.symbol_type in _BIN_TERMINATORS and result and _is_bin(result[-1]):
            result[-1] = replace(result[-1], symbol_type=SymbolType.ORD)  # type: ignore[type-var]
        result.append(exp)
    return result


def exp_to_text(exp: Exp) -> str:
    """Flattens the textual leaves of an expression (used for operator names)."""
    if isinstance(exp, (Identifier, Number, MathOperator, Text, Symbol)):
        return exp.value
    if isinstance(exp, Grouped):
        return "".join(exp_to_text(e) for e in exp.items)
    return ""


def parse_dimension(raw: str) -> float:
    """Converts a TeX dimension such as `1.5em` or `-3pt` to em."""
    m = DIMENSION_RE.match(raw)
    if m is None or m.group(2) not in UNIT_WIDTHS:
        return DEFAULT_HSPACE
    return float(m.group(1)) * UNIT_WIDTHS[m.group(2)]


class Parser:
    """
    TeX Math Parser Class

    Turns TeX math source into a tuple of `Exp` nodes by recursive descent over a
    `Lexer`. Each `parse_*` method either consumes a construct and returns its node
    or returns None ("nothing matched here"); only unclosed groups raise.

    Attributes
    ----------
    lexer : Lexer
        Cursor over the source text.
    commands : dict[str, Callable[[], Exp | None]]
        Dedicated sub-parsers for structural commands (`\\frac`, `\\left`, ...).

    Methods
    -------
    parse() -> tuple[Exp, ...]
        Parse the whole input and apply the binary-operator post-pass.
    parse_expr() -> Exp | None
        Parse one expression including trailing scripts.
    parse_expr1() -> Exp | None
        Parse one expression without scripts.
    parse_command() -> Exp | None
        Parse a control sequence and its arguments.
    parse_delimited() -> Exp | None
        Parse the body of `\\left ... \\right`.
    parse_environment() -> Exp | None
        Parse `\\begin{name} ... \\end{name}`.

    Raises
    ------
    UnbalancedGroupError
        When a `{` or `[` group is not closed.
    """

    def __init__(self, source: str) -> None:
        self.lexer = Lexer(CharacterStream(source))
        self.commands: dict[str, Callable[[], Exp | None]] = {
            "\\frac": lambda: self.parse_frac(FractionType.NORMAL),
            "\\dfrac": lambda: self.parse_frac(FractionType.DISPLAY),
            "\\tfrac": lambda: self.parse_frac(FractionType.INLINE),
            "\\sqrt": self.parse_sqrt,
            "\\overset": self.parse_overset,
            "\\stackrel": self.parse_overset,
            "\\underset": self.parse_underset,
            "\\left": self.parse_delimited,
            "\\operatorname": self.parse_operator_name,
            "\\boxed": lambda: self.parse_wrapped(Boxed),
            "\\phantom": lambda: self.parse_wrapped(Phantom),
            "\\cancel": lambda: self.parse_cancel(StrokeType.FORWARD_SLASH),
            "\\bcancel": lambda: self.parse_cancel(StrokeType.BACK_SLASH),
            "\\xcancel": lambda: self.parse_cancel(StrokeType.X_SLASH),
            "\\begin": self.parse_environment,
            "\\hspace": self.parse_hspace,
        }

    # Scanning helpers

    def _fail(self, message: str) -> UnbalancedGroupError:
        stream = self.lexer.stream
        return UnbalancedGroupError(message, stream.position, stream.line, stream.column)

    def read_braces(self, body: Callable[[], T]) -> T | None:
        """Runs `body` inside a `{...}` group; None if no group starts here."""
        self.lexer.skip_ignorable()
        if self.lexer.peek() != "{":
            return None
        self.lexer.advance()
        self.lexer.skip_ignorable()
        result = body()
        self.lexer.skip_ignorable()
        if self.lexer.peek() != "}":
            raise self._fail("Expected closing brace")
        self.lexer.advance()
        self.lexer.skip_ignorable()
        return result

    def read_brackets(self, body: Callable[[], T]) -> T | None:
        """Runs `body` inside a `[...]` group; None if no group starts here."""
        self.lexer.skip_ignorable()
        if self.lexer.peek() != "[":
            return None
        self.lexer.advance()
        self.lexer.skip_ignorable()
        result = body()
        self.lexer.skip_ignorable()
        if self.lexer.peek() != "]":
            raise self._fail("Expected closing bracket")
        self.lexer.advance()
        self.lexer.skip_ignorable()
        return result

    def read_raw_braces(self) -> str | None:
        """Reads the verbatim text of a `{...}` group, honouring nested braces."""
        self.lexer.skip_ignorable()
        if self.lexer.peek() != "{":
            return None
        self.lexer.advance()
        depth = 0
        text = ""
        while not self.lexer.end_of_file():
            ch = self.lexer.peek()
            if ch == "}" and depth == 0:
                break
            if ch == "\\":
                # an escape pair is consumed whole
                text += self.lexer.advance(2)
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
            text += self.lexer.advance()
        if self.lexer.peek() != "}":
            raise self._fail("Expected closing brace")
        self.lexer.advance()
        self.lexer.skip_ignorable()
        return text

    def parse_many(self, closer: str) -> list[Exp]:
        """Parses expressions until `closer` (not consumed) or end of input.

        Unrecognized commands are skipped; a character nothing can parse is dropped.
        """
        exps: list[Exp] = []
        while True:
            self.lexer.skip_ignorable()
            if self.lexer.end_of_file() or self.lexer.peek() == closer:
                break
            before = self.lexer.position
            exp = self.parse_expr()
            if exp is not None:
                exps.append(exp)
            elif self.lexer.position == before:
                logger.debug(
                    "Dropping unparseable character %r at position %d",
                    self.lexer.peek(),
                    before,
                )
                self.lexer.advance()
        return exps

    def parse_group_body(self, closer: str = "}") -> Exp:
        return group(self.parse_many(closer))

    # Top level

    def parse(self) -> tuple[Exp, ...]:
        """Parse the whole input into a tuple of top-level expressions."""
        self.lexer.skip_ignorable()
        exps: list[Exp] = []
        while not self.lexer.end_of_file():
            exp = self.parse_expr()
            if exp is None:
                logger.debug(
                    "Stopped at position %d; returning partial result",
                    self.lexer.position,
                )
                break
            exps.append(exp)
            self.lexer.skip_ignorable()
        return tuple(fix_bin_list(exps))

    def parse_expr(self) -> Exp | None:
        self.lexer.skip_ignorable()
        base = self.parse_expr1()
        if base is None:
            return None
        self.lexer.skip_ignorable()
        limits = self._takes_limits(base)
        modifier = self.lexer.peek_control_sequence()
        if modifier in ("\\limits", "\\nolimits"):
            self.lexer.read_control_sequence()
            self.lexer.skip_ignorable()
            limits = modifier == "\\limits"
        scripted = self.parse_sub_sup(base, limits)
        return scripted if scripted is not None else base

    def _takes_limits(self, base: Exp) -> bool:
        if not isinstance(base, MathOperator):
            return False
        return base.limits or base.value in LIMIT_OPERATORS

    def parse_expr1(self) -> Exp | None:
        """Ordered choice over the atom parsers; a consumed unknown command ends it."""
        self.lexer.skip_ignorable()
        before = self.lexer.position
        for attempt in (
            self.parse_in_braces,
            self.parse_number,
            self.parse_variable,
            self.parse_command,
            self.parse_operator,
            self.parse_enclosure,
        ):
            exp = attempt()
            if exp is not None:
                return exp
            if self.lexer.position != before:
                return None
        return None

    def parse_in_braces(self) -> Exp | None:
        items = self.read_braces(lambda: self.parse_many("}"))
        if items is None:
            return None
        return group(items)

    def parse_number(self) -> Exp | None:
        lexer = self.lexer
        start = lexer.mark()
        digits = ""
        while lexer.peek().isdigit() and lexer.peek().isascii():
            digits += lexer.advance()
        if lexer.peek() == ".":
            dot = lexer.mark()
            lexer.advance()
            if lexer.peek().isdigit() and lexer.peek().isascii():
                digits += "."
                while lexer.peek().isdigit() and lexer.peek().isascii():
                    digits += lexer.advance()
            elif not digits:
                lexer.reset(dot)
                return None
            else:
                digits += "."
        if not digits:
            lexer.reset(start)
            return None
        lexer.skip_ignorable()
        return Number(digits)

    def parse_variable(self) -> Exp | None:
        ch = self.lexer.peek()
        if ch and ch.isascii() and ch.isalpha():
            self.lexer.advance()
            self.lexer.skip_ignorable()
            return Identifier(ch)
        return None

    def parse_operator(self) -> Exp | None:
        for run in PRIME_RUNS:
            if self.lexer.match(run):
                self.lexer.skip_ignorable()
                return OPERATORS[run]
        ch = self.lexer.peek()
        if ch and ch in OPERATORS:
            self.lexer.advance()
            self.lexer.skip_ignorable()
            return OPERATORS[ch]
        return None

    def parse_enclosure(self) -> Exp | None:
        ch = self.lexer.peek()
        if ch and ch in ENCLOSURE_CHARS:
            self.lexer.advance()
            self.lexer.skip_ignorable()
            return ENCLOSURES[ch]
        return None

    # Scripts

    def parse_sub_sup(self, base: Exp, limits: bool = False) -> Exp | None:
        """Attaches `_` / `^` scripts following `base`, if any."""
        lexer = self.lexer
        lexer.skip_ignorable()
        ch = lexer.peek()

        if ch == "_":
            lexer.advance()
            lexer.skip_ignorable()
            sub = self.parse_expr1()
            if sub is None:
                return None
            lexer.skip_ignorable()
            if lexer.peek() == "^":
                lexer.advance()
                lexer.skip_ignorable()
                sup = self.parse_expr1()
                if sup is not None:
                    return self._scripts(base, sub, sup, limits)
            return self._scripts(base, sub, None, limits)

        if ch == "^":
            lexer.advance()
            lexer.skip_ignorable()
            if lexer.peek() == "'":
                count = 0
                while lexer.peek() == "'":
                    count += 1
                    lexer.advance()
                sup = Symbol(SymbolType.PUN, PRIMES[min(count, 4)])
            else:
                parsed = self.parse_expr1()
                if parsed is None:
                    return None
                sup = parsed
            lexer.skip_ignorable()
            if lexer.peek() == "_":
                lexer.advance()
                lexer.skip_ignorable()
                sub = self.parse_expr1()
                if sub is not None:
                    return self._scripts(base, sub, sup, limits)
            return self._scripts(base, None, sup, limits)

        return None

    @staticmethod
    def _scripts(base: Exp, sub: Exp | None, sup: Exp | None, limits: bool) -> Exp:
        if limits:
            if sub is not None and sup is not None:
                return UnderOver(True, base, sub, sup)
            if sub is not None:
                return Under(True, base, sub)
            assert sup is not None  # for mypy
            return Over(True, base, sup)
        if sub is not None and sup is not None:
            return SubSup(base, sub, sup)
        if sub is not None:
            return Sub(base, sub)
        assert sup is not None  # for mypy
        return Super(base, sup)

    # Commands

    def parse_command(self) -> Exp | None:
        """Parse a control sequence; unknown commands are consumed and yield None."""
        cmd = self.lexer.read_control_sequence()
        if cmd is None:
            return None
        self.lexer.skip_ignorable()

        if cmd in SYMBOLS:
            sym = SYMBOLS[cmd]
            if isinstance(sym, Symbol) and sym.symbol_type in (
                SymbolType.ACCENT,
                SymbolType.TOVER,
            ):
                arg = self.parse_expr1()
                if arg is not None:
                    return Over(False, arg, sym)
            elif isinstance(sym, Symbol) and sym.symbol_type == SymbolType.TUNDER:
                arg = self.parse_expr1()
                if arg is not None:
                    return Under(False, arg, sym)
            return sym

        if cmd in self.commands:
            return self.commands[cmd]()
        if cmd in TEXT_OPS:
            return self.parse_text_op(cmd)
        if cmd in STYLE_OPS:
            return self.parse_style_op(cmd)
        if cmd in SCALERS:
            return self.parse_scaled(SCALERS[cmd])
        if cmd in ENCLOSURES:
            return ENCLOSURES[cmd]

        logger.debug("Skipping unrecognized command %s", cmd)
        return None

    def parse_frac(self, fraction_type: FractionType) -> Exp | None:
        num = self.read_braces(self.parse_group_body)
        den = self.read_braces(self.parse_group_body)
        if num is None or den is None:
            return None
        return Fraction(fraction_type, num, den)

    def parse_sqrt(self) -> Exp | None:
        index = self.read_brackets(lambda: self.parse_group_body("]"))
        base = self.read_braces(self.parse_group_body)
        if base is None:
            base = self.parse_expr1()
        if base is None:
            return None
        if index is not None:
            return Root(index, base)
        return Sqrt(base)

    def parse_overset(self) -> Exp | None:
        over = self.read_braces(self.parse_group_body)
        base = self.read_braces(self.parse_group_body)
        if over is None or base is None:
            return None
        return Over(False, base, over)

    def parse_underset(self) -> Exp | None:
        under = self.read_braces(self.parse_group_body)
        base = self.read_braces(self.parse_group_body)
        if under is None or base is None:
            return None
        return Under(False, base, under)

    def _parse_argument(self) -> Exp | None:
        arg = self.read_braces(self.parse_group_body)
        return arg if arg is not None else self.parse_expr1()

    def parse_wrapped(self, wrapper: Callable[[Exp], Exp]) -> Exp | None:
        arg = self._parse_argument()
        return wrapper(arg) if arg is not None else None

    def parse_cancel(self, stroke: StrokeType) -> Exp | None:
        arg = self._parse_argument()
        return Cancel(stroke, arg) if arg is not None else None

    def parse_text_op(self, cmd: str) -> Exp | None:
        text = self.read_raw_braces()
        if text is None:
            return None
        return TEXT_OPS[cmd](text)

    def parse_style_op(self, cmd: str) -> Exp | None:
        items = self.read_braces(lambda: self.parse_many("}"))
        if items is None:
            single = self.parse_expr1()
            items = [single] if single is not None else []
        if not items:
            return None
        return STYLE_OPS[cmd](items)

    def parse_operator_name(self) -> Exp | None:
        starred = self.lexer.match("*")
        self.lexer.skip_ignorable()

        def name_parts() -> str:
            parts: list[str] = []
            while self.lexer.peek() not in ("}", ""):
                exp = self.parse_expr1()
                if exp is None:
                    break
                parts.append(exp_to_text(exp))
            return "".join(parts)

        name = self.read_braces(name_parts)
        if not name:
            return None
        return MathOperator(name, limits=starred)

    def parse_hspace(self) -> Exp | None:
        self.lexer.match("*")
        raw = self.read_raw_braces()
        if raw is None:
            return None
        return Space(parse_dimension(raw))

    def parse_scaled(self, scale: float) -> Exp | None:
        self.lexer.skip_ignorable()
        sym = self._read_delimiter_symbol()
        if sym is None:
            sym = self.parse_operator()
        if sym is None:
            return None
        return Scaled(scale, sym)

    def _read_delimiter_symbol(self) -> Exp | None:
        ch = self.lexer.peek()
        if ch and ch in ENCLOSURE_CHARS:
            self.lexer.advance()
            self.lexer.skip_ignorable()
            return ENCLOSURES[ch]
        cmd = self.lexer.peek_control_sequence()
        if cmd in ENCLOSURES:
            self.lexer.read_control_sequence()
            self.lexer.skip_ignorable()
            return ENCLOSURES[cmd]
        return None

    # Delimiters

    def parse_delimiter(self) -> str | None:
        """Reads the delimiter after `\\left`, `\\middle` or `\\right`.

        Returns:
            str | None: The delimiter glyph, "" for the null delimiter `.`, or None.
        """
        lexer = self.lexer
        lexer.skip_ignorable()
        if lexer.peek() == ".":
            lexer.advance()
            lexer.skip_ignorable()
            return ""
        sym = self._read_delimiter_symbol()
        if isinstance(sym, Symbol):
            return sym.value
        return None

    def parse_delimited(self) -> Exp | None:
        open_ = self.parse_delimiter()
        if open_ is None:
            return None

        content: list[Separator | SubExp] = []
        while True:
            self.lexer.skip_ignorable()
            if self.lexer.end_of_file():
                break
            cmd = self.lexer.peek_control_sequence()
            if cmd == "\\right":
                self.lexer.read_control_sequence()
                break
            if cmd == "\\middle":
                self.lexer.read_control_sequence()
                delim = self.parse_delimiter()
                if delim is not None:
                    content.append(Separator(delim))
                continue
            before = self.lexer.position
            exp = self.parse_expr()
            if exp is not None:
                content.append(SubExp(exp))
            elif self.lexer.position == before:
                break

        close = self.parse_delimiter()
        return Delimited(open_, close if close is not None else "", tuple(content))

    # Environments

    def parse_environment(self) -> Exp | None:
        name = self.read_raw_braces()
        if not name:
            return None
        name = name.strip()

        if "matrix" in name:
            return self.parse_matrix(name)
        if name == "array":
            spec = self.read_raw_braces() or ""
            rows = self.parse_rows()
            columns = [COLUMN_ALIGNMENTS[c] for c in spec if c in COLUMN_ALIGNMENTS]
            return Array(self._pad(columns, rows, Alignment.CENTER), rows)
        if "align" in name or name == "eqnarray":
            rows = self.parse_rows()
            width = self._width(rows)
            alignments = tuple(
                Alignment.RIGHT if i % 2 == 0 else Alignment.LEFT for i in range(width)
            )
            return Array(alignments, rows)
        if name == "cases":
            rows = self.parse_rows()
            array = Array(self._pad([], rows, Alignment.LEFT), rows)
            return Delimited("{", "", (SubExp(array),))

        logger.debug("Skipping unsupported environment %r", name)
        return None

    def parse_matrix(self, name: str) -> Exp:
        rows = self.parse_rows()
        array = Array(self._pad([], rows, Alignment.CENTER), rows)
        if name in MATRIX_DELIMITERS:
            open_, close = MATRIX_DELIMITERS[name]
            return Delimited(open_, close, (SubExp(array),))
        return array

    @staticmethod
    def _width(rows: tuple[Row, ...]) -> int:
        return max((len(row) for row in rows), default=0)

    def _pad(
        self, columns: list[Alignment], rows: tuple[Row, ...], fill: Alignment
    ) -> tuple[Alignment, ...]:
        width = self._width(rows)
        return tuple(columns[:width]) + (fill,) * max(0, width - len(columns))

    def _at_end(self) -> bool:
        return self.lexer.peek_control_sequence() == "\\end"

    def parse_rows(self) -> tuple[Row, ...]:
        """Parses `&`/`\\\\`-separated cells up to and including `\\end{name}`."""
        rows: list[Row] = []
        while True:
            self.lexer.skip_ignorable()
            if self._at_end():
                self.lexer.read_control_sequence()
                self.read_raw_braces()
                break
            if self.lexer.end_of_file():
                break
            row, stalled = self.parse_row()
            rows.append(row)
            if stalled:
                break
        return tuple(rows)

    def parse_row(self) -> tuple[Row, bool]:
        """Parses one row; the flag reports a stop on something unparseable."""
        cells: list[tuple[Exp, ...]] = []
        cell: list[Exp] = []
        while True:
            self.lexer.skip_ignorable()
            if self.lexer.peek() == "&":
                self.lexer.advance()
                cells.append(tuple(cell))
                cell = []
                continue
            if self.lexer.match("\\\\"):
                self.read_brackets(lambda: self.lexer.read_until("]"))
                cells.append(tuple(cell))
                return tuple(cells), False
            if self.lexer.end_of_file() or self._at_end():
                cells.append(tuple(cell))
                return tuple(cells), False
            before = self.lexer.position
            exp = self.parse_expr()
            if exp is not None:
                cell.append(exp)
            elif self.lexer.position == before:
                cells.append(tuple(cell))
                return tuple(cells), True


def read_tex(source: str) -> tuple[Exp, ...]:
    """Parses TeX math source into a tuple of expressions.

    Args:
        source: The TeX math text, without `$` delimiters.

    Returns:
        The top-level expressions; possibly shorter than the input if an
        unrecognized construct was reached.

    Raises:
        UnbalancedGroupError: If a brace or bracket group is not closed.
    """
    return Parser(source).parse()


__all__ = ["Parser", "UnbalancedGroupError", "fix_bin_list", "read_tex"]
