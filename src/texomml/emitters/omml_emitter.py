"""
Translates TeX math AST nodes into Office Math Markup (OMML).

This module defines the `OmmlEmitter` class, responsible for converting a tuple of
`Exp` nodes into the `m:`-namespaced node tree that word processors embed for
equations. It is used by the `Transpiler` as the backend of the conversion pipeline.

Supported Features:
    - Runs: numbers, identifiers, symbols, named operators, text and spacing
      (`m:r` with optional `m:rPr` style properties)
    - Scripts: `m:sSub`, `m:sSup`, `m:sSubSup`
    - Big operators with limits: `m:nary` (sum, product, coproduct, integrals)
    - Stacking: `m:limLow`, `m:limUpp`, `m:acc`, `m:bar`, `m:groupChr`
    - Fractions and radicals: `m:f`, `m:rad`
    - Delimiters and matrices: `m:d`, `m:m`
    - Decorations: `m:borderBox` (boxed, cancel), `m:phant`, `m:box` operator emulation

Behavior:
    - A pre-pass over the top-level sequence pairs each big operator carrying limits
      with the operand that follows it, so both become a single `m:nary`.
    - Style properties flow down the recursion as an explicit tuple; a styled run
      only affects its own sub-tree.
    - Emission is total: every node renders, constructs OMML cannot express
      (scaled delimiters) fall back to their plain content.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from texomml.emitters.omml_node import XMLNode, m_node, m_val, node_to_string
from texomml.tex_ast import (
    EMPTY_GROUP,
    Alignment,
    Array,
    Boxed,
    Cancel,
    Delimited,
    DisplayType,
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
    Scaled,
    Separator,
    Space,
    Sqrt,
    StrokeType,
    Styled,
    Sub,
    SubSup,
    Super,
    Symbol,
    SymbolType,
    Text,
    TextType,
    Under,
    UnderOver,
    is_empty_group,
)

logger = logging.getLogger(__name__)

Props = tuple[XMLNode, ...]

ZERO_WIDTH_SPACE = "\u200b"

NARY_CHARS = frozenset("∫∬∭∮∯∰∏∐∑")
BAR_CHARS = frozenset({"\u203e", "\u00af", "\u0304", "\u0333", "_"})
UPPERCASE_GREEK = frozenset("ΓΔΘΛΞΠΣΥΦΨΩ")

_PUNCTUATION_RE = re.compile(r"[^\w\s]")

# Order of run properties required by the OMML schema.
_PROP_ORDER = {"m:nor": 0, "m:scr": 1, "m:sty": 2}

FRACTION_TYPES: dict[FractionType, str] = {
    FractionType.NORMAL: "bar",
    FractionType.DISPLAY: "bar",
    FractionType.INLINE: "lin",
    FractionType.NO_LINE: "noBar",
}

TEXT_STYLES: dict[TextType, tuple[str | None, str]] = {
    TextType.NORMAL: (None, "p"),
    TextType.BOLD: (None, "b"),
    TextType.ITALIC: (None, "i"),
    TextType.MONOSPACE: ("monospace", "p"),
    TextType.SANS_SERIF: ("sans-serif", "p"),
    TextType.DOUBLE_STRUCK: ("double-struck", "p"),
    TextType.SCRIPT: ("script", "p"),
    TextType.FRAKTUR: ("fraktur", "p"),
    TextType.BOLD_ITALIC: (None, "bi"),
    TextType.SANS_SERIF_BOLD: ("sans-serif", "b"),
    TextType.SANS_SERIF_BOLD_ITALIC: ("sans-serif", "bi"),
    TextType.BOLD_SCRIPT: ("script", "b"),
    TextType.BOLD_FRAKTUR: ("fraktur", "b"),
    TextType.SANS_SERIF_ITALIC: ("sans-serif", "i"),
}


def set_props(text_type: TextType) -> Props:
    """Run properties (`m:scr`, `m:sty`) for a text style."""
    script, style = TEXT_STYLES[text_type]
    props: list[XMLNode] = []
    if script is not None:
        props.append(m_val("scr", script))
    props.append(m_val("sty", style))
    return tuple(props)


def merge_props(inner: Props, outer: Props) -> Props:
    """Prepends `inner` to `outer`, dropping outer properties `inner` already sets."""
    seen = {p.tag for p in inner}
    merged = list(inner) + [p for p in outer if p.tag not in seen]
    return tuple(sorted(merged, key=lambda p: _PROP_ORDER.get(p.tag, len(_PROP_ORDER))))


def default_to(text_type: TextType, props: Props) -> Props:
    return props if props else set_props(text_type)


def run(props: Props, text: str) -> XMLNode:
    """An `m:r` text run, with `m:rPr` only when there are properties."""
    children: list[XMLNode | str] = []
    if props:
        children.append(m_node("rPr", children=list(props)))
    children.append(m_node("t", children=[text]))
    return m_node("r", children=children)


def is_nary(exp: Exp) -> bool:
    return (
        isinstance(exp, Symbol)
        and exp.symbol_type == SymbolType.OP
        and exp.value in NARY_CHARS
    )


def _nary_limits(exp: Exp) -> Exp | None:
    """The explicit limit form of a big operator, or None if `exp` is not one."""
    if is_nary(exp):
        return UnderOver(True, exp, EMPTY_GROUP, EMPTY_GROUP)
    if isinstance(exp, Over) and is_nary(exp.base):
        return UnderOver(exp.convertible, exp.base, EMPTY_GROUP, exp.over)
    if isinstance(exp, Under) and is_nary(exp.base):
        return UnderOver(exp.convertible, exp.base, exp.under, EMPTY_GROUP)
    if isinstance(exp, UnderOver) and is_nary(exp.base):
        return exp
    if isinstance(exp, Sub) and is_nary(exp.base):
        return SubSup(exp.base, exp.sub, EMPTY_GROUP)
    if isinstance(exp, Super) and is_nary(exp.base):
        return SubSup(exp.base, EMPTY_GROUP, exp.sup)
    if isinstance(exp, SubSup) and is_nary(exp.base):
        return exp
    return None


def _inline_limits(exp: Exp) -> Exp:
    """Turns convertible limits into scripts, as inline math sets them."""
    if isinstance(exp, Over) and exp.convertible:
        return Super(exp.base, exp.over)
    if isinstance(exp, Under) and exp.convertible:
        return Sub(exp.base, exp.under)
    if isinstance(exp, UnderOver) and exp.convertible:
        return SubSup(exp.base, exp.under, exp.over)
    return exp


def handle_downup(display: DisplayType, exps: Sequence[Exp]) -> list[Exp]:
    """
    Rewrites a top-level sequence before emission.

    Each big operator (bare, or carrying limits as over/under/sub/super scripts) is
    merged with the element after it (or an empty group at the end of the sequence)
    into `Grouped((limit_form, operand))`; the operand is consumed. In inline display,
    other convertible over/under limits become ordinary scripts.

    Args:
        display: Block or inline typesetting.
        exps: The top-level expressions produced by the parser.

    Returns:
        list[Exp]: New sequence; input nodes are never modified.
    """
    result: list[Exp] = []
    i = 0
    while i < len(exps):
        exp = exps[i]
        limit_form = _nary_limits(exp)
        if limit_form is not None:
            operand = exps[i + 1] if i + 1 < len(exps) else EMPTY_GROUP
            result.append(Grouped((limit_form, operand)))
            i += 2
            continue
        if display == DisplayType.INLINE:
            exp = _inline_limits(exp)
        result.append(exp)
        i += 1
    return result


class OmmlEmitter:
    """Emits an OMML node tree from TeX math AST nodes.

    Attributes:
        root (XMLNode | None): The last document emitted by `emit_document`.

    Methods:
        emit_document(display, exps): Pre-pass, emission and display wrapper.
        emit(exp, props): Dispatches one node to its `emit_<kind>` method.
        get_output(): Serialized text of the last emitted document.
    """

    def __init__(self) -> None:
        self.root: XMLNode | None = None

    def get_output(self) -> str:
        return node_to_string(self.root) if self.root is not None else ""

    def emit_document(self, display: DisplayType, exps: Sequence[Exp]) -> XMLNode:
        nodes: list[XMLNode | str] = []
        for exp in handle_downup(display, exps):
            nodes.extend(self.emit(exp))
        if display == DisplayType.BLOCK:
            self.root = m_node(
                "oMathPara",
                children=[
                    m_node("oMathParaPr", children=[m_val("jc", "center")]),
                    m_node("oMath", children=nodes),
                ],
            )
        else:
            self.root = m_node("oMath", children=nodes)
        return self.root

    def emit(self, exp: Exp, props: Props = ()) -> list[XMLNode]:
        method = getattr(self, f"emit_{exp.kind}", None)
        if method is None:
            logger.debug("No OMML mapping for %s; rendering placeholder", exp.kind)
            return [run(props, ZERO_WIDTH_SPACE)]
        nodes: list[XMLNode] = method(exp, props)
        return nodes

    def emit_all(self, exps: Sequence[Exp], props: Props = ()) -> list[XMLNode | str]:
        out: list[XMLNode | str] = []
        for exp in exps:
            out.extend(self.emit(exp, props))
        return out

    def _slot(self, tag: str, exp: Exp, props: Props) -> XMLNode:
        return m_node(tag, children=self.emit_all([exp], props))

    # Leaves

    def emit_number(self, exp: Number, props: Props) -> list[XMLNode]:
        return [run(props, exp.value)]

    def emit_identifier(self, exp: Identifier, props: Props) -> list[XMLNode]:
        if exp.value == "":
            return [run(props, ZERO_WIDTH_SPACE)]
        if exp.value in UPPERCASE_GREEK and not props:
            return [run(set_props(TextType.NORMAL), exp.value)]
        return [run(props, exp.value)]

    def emit_math_operator(self, exp: MathOperator, props: Props) -> list[XMLNode]:
        return [run(merge_props(props, set_props(TextType.NORMAL)), exp.value)]

    def emit_symbol(self, exp: Symbol, props: Props) -> list[XMLNode]:
        """
        Emits a bare symbol.

        Single punctuation-like characters and ordinary symbols become plain upright
        runs. Multi-character or word-like operators, binary operators and relations
        are wrapped in an `m:box` with operator emulation on.
        """
        text_run = run(default_to(TextType.NORMAL, props), exp.value)
        if len(exp.value) == 1 and _PUNCTUATION_RE.match(exp.value):
            return [text_run]
        if exp.symbol_type in (SymbolType.OP, SymbolType.BIN, SymbolType.REL):
            return [
                m_node(
                    "box",
                    children=[
                        m_node("boxPr", children=[m_val("opEmu", "on")]),
                        m_node("e", children=[text_run]),
                    ],
                )
            ]
        return [text_run]

    def emit_space(self, exp: Space, props: Props) -> list[XMLNode]:
        width = exp.width
        if width <= 0:
            char = ZERO_WIDTH_SPACE
        elif width <= 0.17:
            char = "\u2009"
        elif width <= 0.23:
            char = "\u2005"
        elif width <= 0.5:
            char = "\u2004"
        elif width <= 1.8:
            char = "\u2001"
        else:
            char = "\u2001\u2001"
        return [run(props, char)]

    def emit_text(self, exp: Text, props: Props) -> list[XMLNode]:
        return [run((m_node("nor"),) + set_props(exp.text_type), exp.value)]

    # Wrappers

    def emit_grouped(self, exp: Grouped, props: Props) -> list[XMLNode]:
        if not exp.items:
            return [run(props, ZERO_WIDTH_SPACE)]
        if len(exp.items) == 2:
            first, operand = exp.items
            if isinstance(first, UnderOver) and is_nary(first.base):
                nary = self.make_nary(
                    props, "undOvr", first.base, first.under, first.over, operand
                )
                return [nary]
            if isinstance(first, SubSup) and is_nary(first.base):
                nary = self.make_nary(
                    props, "subSup", first.base, first.sub, first.sup, operand
                )
                return [nary]
        return self.emit_all(exp.items, props)  # type: ignore[return-value]

    def make_nary(
        self, props: Props, lim_loc: str, base: Exp, sub: Exp, sup: Exp, operand: Exp
    ) -> XMLNode:
        """Builds `m:nary`; an empty limit is hidden."""
        symbol = base.value if isinstance(base, Symbol) else ""
        return m_node(
            "nary",
            children=[
                m_node(
                    "naryPr",
                    children=[
                        m_val("chr", symbol),
                        m_val("limLoc", lim_loc),
                        m_val("subHide", "on" if is_empty_group(sub) else "off"),
                        m_val("supHide", "on" if is_empty_group(sup) else "off"),
                    ],
                ),
                self._slot("sub", sub, props),
                self._slot("sup", sup, props),
                self._slot("e", operand, props),
            ],
        )

    def emit_sqrt(self, exp: Sqrt, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "rad",
                children=[
                    m_node("radPr", children=[m_val("degHide", "on")]),
                    m_node("deg"),
                    self._slot("e", exp.value, props),
                ],
            )
        ]

    def emit_root(self, exp: Root, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "rad",
                children=[
                    self._slot("deg", exp.index, props),
                    self._slot("e", exp.base, props),
                ],
            )
        ]

    def emit_phantom(self, exp: Phantom, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "phant",
                children=[
                    m_node("phantPr", children=[m_val("show", "off")]),
                    self._slot("e", exp.value, props),
                ],
            )
        ]

    def emit_boxed(self, exp: Boxed, props: Props) -> list[XMLNode]:
        return [m_node("borderBox", children=[self._slot("e", exp.value, props)])]

    def emit_cancel(self, exp: Cancel, props: Props) -> list[XMLNode]:
        flags = [
            m_val("hideTop", "1"),
            m_val("hideBot", "1"),
            m_val("hideLeft", "1"),
            m_val("hideRight", "1"),
        ]
        if exp.stroke in (StrokeType.FORWARD_SLASH, StrokeType.X_SLASH):
            flags.append(m_val("strikeBLTR", "1"))
        if exp.stroke in (StrokeType.BACK_SLASH, StrokeType.X_SLASH):
            flags.append(m_val("strikeTLBR", "1"))
        return [
            m_node(
                "borderBox",
                children=[
                    m_node("borderBoxPr", children=list(flags)),
                    self._slot("e", exp.value, props),
                ],
            )
        ]

    def emit_scaled(self, exp: Scaled, props: Props) -> list[XMLNode]:
        # OMML has no scaling construct; delimiters grow on their own in m:d.
        logger.debug("Dropping scale %.3f; OMML has no scaled construct", exp.scale)
        return self.emit(exp.value, props)

    # Positional

    def emit_sub(self, exp: Sub, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "sSub",
                children=[self._slot("e", exp.base, props), self._slot("sub", exp.sub, props)],
            )
        ]

    def emit_super(self, exp: Super, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "sSup",
                children=[self._slot("e", exp.base, props), self._slot("sup", exp.sup, props)],
            )
        ]

    def emit_subsup(self, exp: SubSup, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "sSubSup",
                children=[
                    self._slot("e", exp.base, props),
                    self._slot("sub", exp.sub, props),
                    self._slot("sup", exp.sup, props),
                ],
            )
        ]

    def emit_fraction(self, exp: Fraction, props: Props) -> list[XMLNode]:
        return [
            m_node(
                "f",
                children=[
                    m_node("fPr", children=[m_val("type", FRACTION_TYPES[exp.fraction_type])]),
                    self._slot("num", exp.numerator, props),
                    self._slot("den", exp.denominator, props),
                ],
            )
        ]

    def _bar(self, pos: str, base: Exp, props: Props) -> XMLNode:
        return m_node(
            "bar",
            children=[
                m_node("barPr", children=[m_val("pos", pos)]),
                self._slot("e", base, props),
            ],
        )

    def _group_chr(self, char: str, pos: str, vert_jc: str, base: Exp, props: Props) -> XMLNode:
        return m_node(
            "groupChr",
            children=[
                m_node(
                    "groupChrPr",
                    children=[m_val("chr", char), m_val("pos", pos), m_val("vertJc", vert_jc)],
                ),
                self._slot("e", base, props),
            ],
        )

    def emit_under(self, exp: Under, props: Props) -> list[XMLNode]:
        mark = exp.under
        if isinstance(mark, Symbol) and mark.symbol_type == SymbolType.TUNDER:
            if mark.value in BAR_CHARS:
                return [self._bar("bot", exp.base, props)]
            return [self._group_chr(mark.value, "bot", "top", exp.base, props)]
        return [
            m_node(
                "limLow",
                children=[self._slot("e", exp.base, props), self._slot("lim", exp.under, props)],
            )
        ]

    def emit_over(self, exp: Over, props: Props) -> list[XMLNode]:
        mark = exp.over
        if isinstance(mark, Symbol):
            if mark.symbol_type == SymbolType.TOVER and mark.value in BAR_CHARS:
                return [self._bar("top", exp.base, props)]
            if mark.symbol_type == SymbolType.ACCENT:
                return [
                    m_node(
                        "acc",
                        children=[
                            m_node("accPr", children=[m_val("chr", mark.value)]),
                            self._slot("e", exp.base, props),
                        ],
                    )
                ]
            if mark.symbol_type == SymbolType.TOVER:
                return [self._group_chr(mark.value, "top", "bot", exp.base, props)]
        return [
            m_node(
                "limUpp",
                children=[self._slot("e", exp.base, props), self._slot("lim", exp.over, props)],
            )
        ]

    def emit_underover(self, exp: UnderOver, props: Props) -> list[XMLNode]:
        under = Under(exp.convertible, exp.base, exp.under)
        return self.emit_over(Over(exp.convertible, under, exp.over), props)

    # Compound

    def emit_delimited(self, exp: Delimited, props: Props) -> list[XMLNode]:
        separators = [item.value for item in exp.content if isinstance(item, Separator)]
        groups: list[list[Exp]] = []
        current: list[Exp] = []
        for item in exp.content:
            if isinstance(item, Separator):
                if current:
                    groups.append(current)
                    current = []
            else:
                current.append(item.value)
        if current:
            groups.append(current)

        return [
            m_node(
                "d",
                children=[
                    m_node(
                        "dPr",
                        children=[
                            m_val("begChr", exp.open),
                            m_val("sepChr", separators[0] if separators else ""),
                            m_val("endChr", exp.close),
                            m_node("grow"),
                        ],
                    ),
                    *[m_node("e", children=self.emit_all(g, props)) for g in groups],
                ],
            )
        ]

    def emit_array(self, exp: Array, props: Props) -> list[XMLNode]:
        columns = [
            m_node(
                "mc",
                children=[
                    m_node(
                        "mcPr",
                        children=[m_val("mcJc", Alignment(a).value), m_val("count", "1")],
                    )
                ],
            )
            for a in exp.alignments
        ]
        m_pr = m_node(
            "mPr",
            children=[
                m_val("baseJc", "center"),
                m_val("plcHide", "on"),
                m_node("mcs", children=list(columns)),
            ],
        )
        rows = [
            m_node(
                "mr",
                children=[m_node("e", children=self.emit_all(cell, props)) for cell in row],
            )
            for row in exp.rows
        ]
        return [m_node("m", children=[m_pr, *rows])]

    def emit_styled(self, exp: Styled, props: Props) -> list[XMLNode]:
        styled = merge_props(set_props(exp.text_type), props)
        return self.emit_all(exp.items, styled)  # type: ignore[return-value]


def write_omml(display: DisplayType, exps: Sequence[Exp]) -> str:
    """Renders a parsed formula as serialized OMML.

    Args:
        display: `DisplayType.BLOCK` wraps the formula in `m:oMathPara`, centred;
            `DisplayType.INLINE` produces a bare `m:oMath`.
        exps: Top-level expressions, as returned by `read_tex`.

    Returns:
        str: The OMML markup.
    """
    emitter = OmmlEmitter()
    emitter.emit_document(display, exps)
    return emitter.get_output()


__all__ = ["OmmlEmitter", "handle_downup", "write_omml"]
