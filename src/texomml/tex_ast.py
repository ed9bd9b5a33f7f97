"""
Defines the abstract syntax tree (AST) for TeX math expressions.

Classes:
    Exp variants:
        A closed set of frozen dataclasses, one per syntactic construct of the math
        grammar (numbers, identifiers, symbols, scripts, fractions, roots, delimited
        regions, arrays, styled runs, ...). `Exp` is the union of all of them.

    ExpDict:
        TypedDict representation for serializing Exp nodes to plain Python dictionaries,
        suitable for JSON output or debugging.

Enumerations:
    SymbolType, Alignment, FractionType, StrokeType, TextType, DisplayType

Every node exposes:
    kind (str): A stable name for the construct (e.g., "fraction", "sub", "delimited").
    to_dict(): Converts the node (and all descendants) into nested dictionaries.

Usage:
    This module is the contract between the parser (which builds nodes bottom-up) and
    the OMML emitter (which only reads them). Nodes are immutable; children are tuples.

Example:
    node = Fraction(FractionType.NORMAL, Number("1"), Number("2"))
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, TypedDict, Union


class SymbolType(str, Enum):
    """Classification attached to a bare symbol."""

    ORD = "Ord"
    OP = "Op"
    BIN = "Bin"
    REL = "Rel"
    OPEN = "Open"
    CLOSE = "Close"
    PUN = "Pun"
    ACCENT = "Accent"
    FENCE = "Fence"
    TOVER = "TOver"
    TUNDER = "TUnder"
    ALPHA = "Alpha"
    BOT_ACCENT = "BotAccent"
    RAD = "Rad"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FractionType(str, Enum):
    NORMAL = "normal"
    DISPLAY = "display"
    INLINE = "inline"
    NO_LINE = "noline"


class StrokeType(str, Enum):
    FORWARD_SLASH = "forward"
    BACK_SLASH = "back"
    X_SLASH = "both"


class TextType(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    MONOSPACE = "monospace"
    SANS_SERIF = "sans-serif"
    DOUBLE_STRUCK = "double-struck"
    SCRIPT = "script"
    FRAKTUR = "fraktur"
    BOLD_ITALIC = "bold-italic"
    SANS_SERIF_BOLD = "sans-serif-bold"
    SANS_SERIF_BOLD_ITALIC = "sans-serif-bold-italic"
    BOLD_SCRIPT = "bold-script"
    BOLD_FRAKTUR = "bold-fraktur"
    SANS_SERIF_ITALIC = "sans-serif-italic"


class DisplayType(str, Enum):
    """Whether a formula is typeset as its own centred block or inline with text."""

    BLOCK = "block"
    INLINE = "inline"


class ExpDict(TypedDict, total=False):
    """
    TypedDict representation of an Exp node used for serialization.

    Fields:
        kind (str): The construct name (e.g., "fraction", "symbol").
        Any other key is the name of a payload field of the variant; nested nodes
        become nested ExpDicts, tuples become lists and enums become their value.
    """

    kind: str


def _dump(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_dump(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


class Node:
    """Shared behaviour of every AST variant; never instantiated directly."""

    kind: ClassVar[str] = "node"

    def to_dict(self) -> ExpDict:
        out: dict[str, Any] = {"kind": self.kind}
        for f in fields(self):  # type: ignore[arg-type]
            out[f.name] = _dump(getattr(self, f.name))
        return out  # type: ignore[return-value]


# Leaves


@dataclass(frozen=True)
class Number(Node):
    kind: ClassVar[str] = "number"
    value: str


@dataclass(frozen=True)
class Identifier(Node):
    kind: ClassVar[str] = "identifier"
    value: str


@dataclass(frozen=True)
class MathOperator(Node):
    """A named operator such as `sin` or `lim`, rendered upright."""

    kind: ClassVar[str] = "math_operator"
    value: str
    limits: bool = False


@dataclass(frozen=True)
class Symbol(Node):
    kind: ClassVar[str] = "symbol"
    symbol_type: SymbolType
    value: str


@dataclass(frozen=True)
class Space(Node):
    """Horizontal space; `width` is in em."""

    kind: ClassVar[str] = "space"
    width: float


@dataclass(frozen=True)
class Text(Node):
    kind: ClassVar[str] = "text"
    text_type: TextType
    value: str


# Unary wrappers


@dataclass(frozen=True)
class Grouped(Node):
    kind: ClassVar[str] = "grouped"
    items: tuple[Exp, ...] = ()


@dataclass(frozen=True)
class Sqrt(Node):
    kind: ClassVar[str] = "sqrt"
    value: Exp


@dataclass(frozen=True)
class Root(Node):
    kind: ClassVar[str] = "root"
    index: Exp
    base: Exp


@dataclass(frozen=True)
class Phantom(Node):
    kind: ClassVar[str] = "phantom"
    value: Exp


@dataclass(frozen=True)
class Boxed(Node):
    kind: ClassVar[str] = "boxed"
    value: Exp


@dataclass(frozen=True)
class Cancel(Node):
    kind: ClassVar[str] = "cancel"
    stroke: StrokeType
    value: Exp


@dataclass(frozen=True)
class Scaled(Node):
    kind: ClassVar[str] = "scaled"
    scale: float
    value: Exp


# Positional


@dataclass(frozen=True)
class Sub(Node):
    kind: ClassVar[str] = "sub"
    base: Exp
    sub: Exp


@dataclass(frozen=True)
class Super(Node):
    kind: ClassVar[str] = "super"
    base: Exp
    sup: Exp


@dataclass(frozen=True)
class SubSup(Node):
    kind: ClassVar[str] = "subsup"
    base: Exp
    sub: Exp
    sup: Exp


@dataclass(frozen=True)
class Fraction(Node):
    kind: ClassVar[str] = "fraction"
    fraction_type: FractionType
    numerator: Exp
    denominator: Exp


@dataclass(frozen=True)
class Over(Node):
    """`over` stacked above `base`; `convertible` allows rewriting as a superscript."""

    kind: ClassVar[str] = "over"
    convertible: bool
    base: Exp
    over: Exp


@dataclass(frozen=True)
class Under(Node):
    kind: ClassVar[str] = "under"
    convertible: bool
    base: Exp
    under: Exp


@dataclass(frozen=True)
class UnderOver(Node):
    kind: ClassVar[str] = "underover"
    convertible: bool
    base: Exp
    under: Exp
    over: Exp


# Compound


@dataclass(frozen=True)
class Separator(Node):
    """A `\\middle` delimiter inside a delimited region."""

    kind: ClassVar[str] = "separator"
    value: str


@dataclass(frozen=True)
class SubExp(Node):
    """An ordinary expression inside a delimited region."""

    kind: ClassVar[str] = "subexp"
    value: Exp


@dataclass(frozen=True)
class Delimited(Node):
    kind: ClassVar[str] = "delimited"
    open: str
    close: str
    content: tuple[Separator | SubExp, ...] = ()

    def expressions(self) -> tuple[Exp, ...]:
        """Returns the enclosed expressions in source order, separators dropped."""
        return tuple(item.value for item in self.content if isinstance(item, SubExp))


Cell = tuple["Exp", ...]
Row = tuple[Cell, ...]


@dataclass(frozen=True)
class Array(Node):
    kind: ClassVar[str] = "array"
    alignments: tuple[Alignment, ...]
    rows: tuple[Row, ...]


@dataclass(frozen=True)
class Styled(Node):
    kind: ClassVar[str] = "styled"
    text_type: TextType
    items: tuple[Exp, ...]


Exp = Union[
    Number,
    Identifier,
    MathOperator,
    Symbol,
    Space,
    Text,
    Grouped,
    Sqrt,
    Root,
    Phantom,
    Boxed,
    Cancel,
    Scaled,
    Sub,
    Super,
    SubSup,
    Fraction,
    Over,
    Under,
    UnderOver,
    Delimited,
    Array,
    Styled,
]
"""Any node of a math expression tree."""

EXP_TYPES: tuple[type, ...] = Exp.__args__  # type: ignore[attr-defined]

EMPTY_GROUP = Grouped(())
"""The empty placeholder used for missing limits and empty braces."""


def is_exp(value: Any) -> bool:
    return isinstance(value, EXP_TYPES)


def is_empty_group(exp: Exp) -> bool:
    return isinstance(exp, Grouped) and not exp.items


def group(items: list[Exp] | tuple[Exp, ...]) -> Exp:
    """Collapses a parsed sequence: one item stands alone, otherwise it is grouped."""
    if len(items) == 1:
        return items[0]
    return Grouped(tuple(items))
