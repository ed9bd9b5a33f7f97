"""
Static lookup tables for the TeX math reader.

Maps command tokens (a backslash-prefixed name or a single character) to the
prebuilt AST leaves the parser emits for them. The tables are read-only
process-wide configuration; the parser consults them and never mutates them.

Tables:
    SYMBOLS: Generic commands (Greek letters, operators, relations, arrows, big
        operators, accents, over/under bars, named operators, spacing).
    OPERATORS: Single-character operators and prime runs.
    ENCLOSURES: Delimiter characters and delimiter commands.
    STYLE_OPS: Style commands, each a constructor from parsed items to `Styled`.
    TEXT_OPS: Text commands, each a constructor from raw text to `Text`.
    SCALERS: `\\big`-family size commands and their scale factors.
    LIMIT_OPERATORS: Named operators whose scripts attach as limits.
"""

from collections.abc import Callable

from texomml.tex_ast import (
    Exp,
    Identifier,
    MathOperator,
    Space,
    Styled,
    Symbol,
    SymbolType,
    Text,
    TextType,
)

ORD = SymbolType.ORD
OP = SymbolType.OP
BIN = SymbolType.BIN
REL = SymbolType.REL
OPEN = SymbolType.OPEN
CLOSE = SymbolType.CLOSE
PUN = SymbolType.PUN
ACCENT = SymbolType.ACCENT
FENCE = SymbolType.FENCE
TOVER = SymbolType.TOVER
TUNDER = SymbolType.TUNDER


def _table(symbol_type: SymbolType, pairs: dict[str, str]) -> dict[str, Exp]:
    return {cmd: Symbol(symbol_type, value) for cmd, value in pairs.items()}


GREEK: dict[str, str] = {
    "\\alpha": "α",
    "\\beta": "β",
    "\\gamma": "γ",
    "\\delta": "δ",
    "\\epsilon": "ϵ",
    "\\varepsilon": "ε",
    "\\zeta": "ζ",
    "\\eta": "η",
    "\\theta": "θ",
    "\\vartheta": "ϑ",
    "\\iota": "ι",
    "\\kappa": "κ",
    "\\lambda": "λ",
    "\\mu": "μ",
    "\\nu": "ν",
    "\\xi": "ξ",
    "\\omicron": "ο",
    "\\pi": "π",
    "\\varpi": "ϖ",
    "\\rho": "ρ",
    "\\varrho": "ϱ",
    "\\sigma": "σ",
    "\\varsigma": "ς",
    "\\tau": "τ",
    "\\upsilon": "υ",
    "\\phi": "ϕ",
    "\\varphi": "φ",
    "\\chi": "χ",
    "\\psi": "ψ",
    "\\omega": "ω",
    "\\Gamma": "Γ",
    "\\Delta": "Δ",
    "\\Theta": "Θ",
    "\\Lambda": "Λ",
    "\\Xi": "Ξ",
    "\\Pi": "Π",
    "\\Sigma": "Σ",
    "\\Upsilon": "Υ",
    "\\Phi": "Φ",
    "\\Psi": "Ψ",
    "\\Omega": "Ω",
}

BINARY: dict[str, str] = {
    "\\pm": "±",
    "\\mp": "∓",
    "\\times": "×",
    "\\div": "÷",
    "\\cdot": "⋅",
    "\\ast": "∗",
    "\\star": "⋆",
    "\\circ": "∘",
    "\\bullet": "∙",
    "\\cup": "∪",
    "\\cap": "∩",
    "\\setminus": "∖",
    "\\wedge": "∧",
    "\\land": "∧",
    "\\vee": "∨",
    "\\lor": "∨",
    "\\oplus": "⊕",
    "\\ominus": "⊖",
    "\\otimes": "⊗",
    "\\oslash": "⊘",
    "\\odot": "⊙",
    "\\sqcup": "⊔",
    "\\sqcap": "⊓",
    "\\uplus": "⊎",
    "\\amalg": "⨿",
    "\\wr": "≀",
}

RELATIONS: dict[str, str] = {
    "\\leq": "≤",
    "\\le": "≤",
    "\\geq": "≥",
    "\\ge": "≥",
    "\\neq": "≠",
    "\\ne": "≠",
    "\\equiv": "≡",
    "\\approx": "≈",
    "\\sim": "∼",
    "\\simeq": "≃",
    "\\cong": "≅",
    "\\propto": "∝",
    "\\in": "∈",
    "\\notin": "∉",
    "\\ni": "∋",
    "\\subset": "⊂",
    "\\supset": "⊃",
    "\\subseteq": "⊆",
    "\\supseteq": "⊇",
    "\\ll": "≪",
    "\\gg": "≫",
    "\\prec": "≺",
    "\\succ": "≻",
    "\\preceq": "⪯",
    "\\succeq": "⪰",
    "\\perp": "⊥",
    "\\parallel": "∥",
    "\\mid": "∣",
    "\\models": "⊨",
    "\\vdash": "⊢",
    "\\dashv": "⊣",
    "\\asymp": "≍",
    "\\doteq": "≐",
    "\\to": "→",
    "\\rightarrow": "→",
    "\\leftarrow": "←",
    "\\gets": "←",
    "\\leftrightarrow": "↔",
    "\\Rightarrow": "⇒",
    "\\Leftarrow": "⇐",
    "\\Leftrightarrow": "⇔",
    "\\implies": "⟹",
    "\\impliedby": "⟸",
    "\\iff": "⟺",
    "\\mapsto": "↦",
    "\\longrightarrow": "⟶",
    "\\longleftarrow": "⟵",
    "\\Longrightarrow": "⟹",
    "\\Longleftarrow": "⟸",
    "\\longmapsto": "⟼",
    "\\uparrow": "↑",
    "\\downarrow": "↓",
    "\\Uparrow": "⇑",
    "\\Downarrow": "⇓",
    "\\hookrightarrow": "↪",
    "\\hookleftarrow": "↩",
    "\\rightleftharpoons": "⇌",
}

BIG_OPERATORS: dict[str, str] = {
    "\\sum": "∑",
    "\\prod": "∏",
    "\\coprod": "∐",
    "\\int": "∫",
    "\\iint": "∬",
    "\\iiint": "∭",
    "\\oint": "∮",
    "\\oiint": "∯",
    "\\oiiint": "∰",
    "\\bigcup": "⋃",
    "\\bigcap": "⋂",
    "\\bigvee": "⋁",
    "\\bigwedge": "⋀",
    "\\bigoplus": "⨁",
    "\\bigotimes": "⨂",
    "\\bigodot": "⨀",
    "\\biguplus": "⨄",
    "\\bigsqcup": "⨆",
}

ORDINARY: dict[str, str] = {
    "\\infty": "∞",
    "\\partial": "∂",
    "\\nabla": "∇",
    "\\forall": "∀",
    "\\exists": "∃",
    "\\nexists": "∄",
    "\\emptyset": "∅",
    "\\varnothing": "∅",
    "\\hbar": "ℏ",
    "\\ell": "ℓ",
    "\\aleph": "ℵ",
    "\\Re": "ℜ",
    "\\Im": "ℑ",
    "\\wp": "℘",
    "\\angle": "∠",
    "\\triangle": "△",
    "\\neg": "¬",
    "\\lnot": "¬",
    "\\prime": "′",
    "\\top": "⊤",
    "\\bot": "⊥",
    "\\degree": "°",
    "\\dagger": "†",
    "\\ddagger": "‡",
    "\\checkmark": "✓",
    "\\%": "%",
    "\\$": "$",
    "\\#": "#",
    "\\&": "&",
    "\\_": "_",
}

PUNCTUATION: dict[str, str] = {
    "\\ldots": "…",
    "\\dots": "…",
    "\\cdots": "⋯",
    "\\vdots": "⋮",
    "\\ddots": "⋱",
    "\\colon": ":",
}

ACCENTS: dict[str, str] = {
    "\\hat": "\u0302",
    "\\widehat": "\u0302",
    "\\tilde": "\u0303",
    "\\widetilde": "\u0303",
    "\\bar": "\u0304",
    "\\vec": "\u20D7",
    "\\dot": "\u0307",
    "\\ddot": "\u0308",
    "\\dddot": "\u20DB",
    "\\acute": "\u0301",
    "\\grave": "\u0300",
    "\\breve": "\u0306",
    "\\check": "\u030C",
    "\\mathring": "\u030A",
}

OVERS: dict[str, str] = {
    "\\overline": "¯",
    "\\overbrace": "⏞",
    "\\overrightarrow": "→",
    "\\overleftarrow": "←",
    "\\overleftrightarrow": "↔",
}

UNDERS: dict[str, str] = {
    "\\underline": "_",
    "\\underbrace": "⏟",
    "\\underrightarrow": "→",
    "\\underleftarrow": "←",
}

NAMED_OPERATORS: tuple[str, ...] = (
    "arccos",
    "arcsin",
    "arctan",
    "arg",
    "cos",
    "cosh",
    "cot",
    "coth",
    "csc",
    "deg",
    "det",
    "dim",
    "exp",
    "gcd",
    "hom",
    "inf",
    "ker",
    "lg",
    "lim",
    "liminf",
    "limsup",
    "ln",
    "log",
    "max",
    "min",
    "Pr",
    "sec",
    "sin",
    "sinh",
    "sup",
    "tan",
    "tanh",
)

LIMIT_OPERATORS: frozenset[str] = frozenset(
    {"det", "gcd", "inf", "lim", "liminf", "limsup", "max", "min", "Pr", "sup"}
)

SPACES: dict[str, float] = {
    "\\,": 0.167,
    "\\thinspace": 0.167,
    "\\:": 0.222,
    "\\>": 0.222,
    "\\medspace": 0.222,
    "\\;": 0.278,
    "\\thickspace": 0.278,
    "\\!": -0.167,
    "\\ ": 0.333,
    "\\enspace": 0.5,
    "\\quad": 1.0,
    "\\qquad": 2.0,
}

SYMBOLS: dict[str, Exp] = {
    **{cmd: Identifier(value) for cmd, value in GREEK.items()},
    **_table(BIN, BINARY),
    **_table(REL, RELATIONS),
    **_table(OP, BIG_OPERATORS),
    **_table(ORD, ORDINARY),
    **_table(PUN, PUNCTUATION),
    **_table(ACCENT, ACCENTS),
    **_table(TOVER, OVERS),
    **_table(TUNDER, UNDERS),
    **{f"\\{name}": MathOperator(name) for name in NAMED_OPERATORS},
    **{cmd: Space(width) for cmd, width in SPACES.items()},
}

OPERATORS: dict[str, Exp] = {
    "+": Symbol(BIN, "+"),
    "-": Symbol(BIN, "−"),
    "*": Symbol(BIN, "∗"),
    "/": Symbol(ORD, "/"),
    "=": Symbol(REL, "="),
    "<": Symbol(REL, "<"),
    ">": Symbol(REL, ">"),
    ",": Symbol(PUN, ","),
    ";": Symbol(PUN, ";"),
    ":": Symbol(REL, ":"),
    "!": Symbol(CLOSE, "!"),
    "?": Symbol(CLOSE, "?"),
    ".": Symbol(ORD, "."),
    "~": Space(0.333),
    "'": Symbol(ORD, "′"),
    "''": Symbol(ORD, "″"),
    "'''": Symbol(ORD, "‴"),
    "''''": Symbol(ORD, "⁗"),
}

PRIME_RUNS: tuple[str, ...] = ("''''", "'''", "''", "'")
"""Prime runs, longest first."""

PRIMES: dict[int, str] = {1: "′", 2: "″", 3: "‴", 4: "⁗"}

ENCLOSURE_CHARS = "()[]|"

ENCLOSURES: dict[str, Exp] = {
    "(": Symbol(OPEN, "("),
    ")": Symbol(CLOSE, ")"),
    "[": Symbol(OPEN, "["),
    "]": Symbol(CLOSE, "]"),
    "|": Symbol(FENCE, "|"),
    "\\{": Symbol(OPEN, "{"),
    "\\}": Symbol(CLOSE, "}"),
    "\\lbrace": Symbol(OPEN, "{"),
    "\\rbrace": Symbol(CLOSE, "}"),
    "\\lbrack": Symbol(OPEN, "["),
    "\\rbrack": Symbol(CLOSE, "]"),
    "\\langle": Symbol(OPEN, "⟨"),
    "\\rangle": Symbol(CLOSE, "⟩"),
    "\\lvert": Symbol(OPEN, "|"),
    "\\rvert": Symbol(CLOSE, "|"),
    "\\vert": Symbol(FENCE, "|"),
    "\\|": Symbol(FENCE, "‖"),
    "\\Vert": Symbol(FENCE, "‖"),
    "\\lVert": Symbol(OPEN, "‖"),
    "\\rVert": Symbol(CLOSE, "‖"),
    "\\lceil": Symbol(OPEN, "⌈"),
    "\\rceil": Symbol(CLOSE, "⌉"),
    "\\lfloor": Symbol(OPEN, "⌊"),
    "\\rfloor": Symbol(CLOSE, "⌋"),
}


def _styler(text_type: TextType) -> Callable[[list[Exp]], Exp]:
    return lambda items: Styled(text_type, tuple(items))


def _texter(text_type: TextType) -> Callable[[str], Exp]:
    return lambda text: Text(text_type, text)


STYLE_OPS: dict[str, Callable[[list[Exp]], Exp]] = {
    "\\mathrm": _styler(TextType.NORMAL),
    "\\mathup": _styler(TextType.NORMAL),
    "\\mathbf": _styler(TextType.BOLD),
    "\\mathit": _styler(TextType.ITALIC),
    "\\mathtt": _styler(TextType.MONOSPACE),
    "\\mathsf": _styler(TextType.SANS_SERIF),
    "\\mathbb": _styler(TextType.DOUBLE_STRUCK),
    "\\mathcal": _styler(TextType.SCRIPT),
    "\\mathscr": _styler(TextType.SCRIPT),
    "\\mathfrak": _styler(TextType.FRAKTUR),
    "\\boldsymbol": _styler(TextType.BOLD_ITALIC),
    "\\bm": _styler(TextType.BOLD_ITALIC),
    "\\mathbfit": _styler(TextType.BOLD_ITALIC),
    "\\mathsfbf": _styler(TextType.SANS_SERIF_BOLD),
    "\\mathsfit": _styler(TextType.SANS_SERIF_ITALIC),
    "\\mathbfsfit": _styler(TextType.SANS_SERIF_BOLD_ITALIC),
    "\\mathbfscr": _styler(TextType.BOLD_SCRIPT),
    "\\mathbffrak": _styler(TextType.BOLD_FRAKTUR),
}

TEXT_OPS: dict[str, Callable[[str], Exp]] = {
    "\\text": _texter(TextType.NORMAL),
    "\\textrm": _texter(TextType.NORMAL),
    "\\textup": _texter(TextType.NORMAL),
    "\\mbox": _texter(TextType.NORMAL),
    "\\hbox": _texter(TextType.NORMAL),
    "\\textbf": _texter(TextType.BOLD),
    "\\textit": _texter(TextType.ITALIC),
    "\\textsl": _texter(TextType.ITALIC),
    "\\textsf": _texter(TextType.SANS_SERIF),
    "\\texttt": _texter(TextType.MONOSPACE),
}

SCALERS: dict[str, float] = {
    "\\big": 1.2,
    "\\bigl": 1.2,
    "\\bigr": 1.2,
    "\\bigm": 1.2,
    "\\Big": 1.623,
    "\\Bigl": 1.623,
    "\\Bigr": 1.623,
    "\\Bigm": 1.623,
    "\\bigg": 2.047,
    "\\biggl": 2.047,
    "\\biggr": 2.047,
    "\\biggm": 2.047,
    "\\Bigg": 2.470,
    "\\Biggl": 2.470,
    "\\Biggr": 2.470,
    "\\Biggm": 2.470,
}

MATRIX_DELIMITERS: dict[str, tuple[str, str]] = {
    "pmatrix": ("(", ")"),
    "bmatrix": ("[", "]"),
    "Bmatrix": ("{", "}"),
    "vmatrix": ("|", "|"),
    "Vmatrix": ("∥", "∥"),
}

__all__ = [
    "ENCLOSURES",
    "ENCLOSURE_CHARS",
    "LIMIT_OPERATORS",
    "MATRIX_DELIMITERS",
    "OPERATORS",
    "PRIMES",
    "PRIME_RUNS",
    "SCALERS",
    "STYLE_OPS",
    "SYMBOLS",
    "TEXT_OPS",
]
