import logging
from dataclasses import replace

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from texomml.tex_ast import (
    EMPTY_GROUP,
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
    Scaled,
    Separator,
    Space,
    Sqrt,
    StrokeType,
    Styled,
    Sub,
    SubExp,
    SubSup,
    Super,
    Symbol,
    SymbolType,
    Text,
    TextType,
    Under,
    UnderOver,
)
from texomml.tex_parser import Parser, UnbalancedGroupError, fix_bin_list, parse_dimension, read_tex


def parse(source: str) -> tuple[Exp, ...]:
    return Parser(source).parse()


def one(source: str) -> Exp:
    exps = parse(source)
    assert len(exps) == 1, exps
    return exps[0]


def bin_(value: str) -> Symbol:
    return Symbol(SymbolType.BIN, value)


def ord_(value: str) -> Symbol:
    return Symbol(SymbolType.ORD, value)


def rel(value: str) -> Symbol:
    return Symbol(SymbolType.REL, value)


# Atoms


def test_empty_input() -> None:
    assert parse("") == ()
    assert parse("   % just a comment") == ()


def test_numbers() -> None:
    assert one("3.14") == Number("3.14")
    assert one("2.") == Number("2.")
    assert parse("12 34") == (Number("12"), Number("34"))


def test_lone_dot_is_an_operator() -> None:
    assert parse(".5") == (Number(".5"),)
    assert parse("x.") == (Identifier("x"), ord_("."))


def test_single_letter_identifiers() -> None:
    assert parse("ab") == (Identifier("a"), Identifier("b"))


def test_greek_and_operator_names() -> None:
    assert one("\\alpha") == Identifier("α")
    assert one("\\sin") == MathOperator("sin")


def test_operators_and_primes() -> None:
    assert parse("f''") == (Identifier("f"), ord_("″"))
    assert parse("a<b") == (Identifier("a"), rel("<"), Identifier("b"))


def test_minus_maps_to_unicode_minus() -> None:
    assert parse("a-b")[1] == bin_("−")


def test_tilde_is_a_space() -> None:
    assert parse("a~b")[1] == Space(0.333)


def test_braces_group_or_collapse() -> None:
    assert one("{x}") == Identifier("x")
    assert one("{}") == EMPTY_GROUP
    assert one("{x y}") == Grouped((Identifier("x"), Identifier("y")))


# Binary-operator reclassification


def test_bin_after_relation_is_ordinary() -> None:
    assert fix_bin_list([rel("="), bin_("−")]) == [rel("="), ord_("−")]


def test_lone_bin_is_ordinary() -> None:
    assert fix_bin_list([bin_("+")]) == [ord_("+")]


def test_bin_between_ordinaries_stays_binary() -> None:
    exps = [ord_("a"), bin_("+"), ord_("b")]
    assert fix_bin_list(exps) == exps


def test_bin_before_relation_becomes_ordinary() -> None:
    assert fix_bin_list([Identifier("a"), bin_("+"), rel("=")])[1] == ord_("+")


def test_bin_before_close_becomes_ordinary() -> None:
    close = Symbol(SymbolType.CLOSE, ")")
    assert fix_bin_list([Identifier("a"), bin_("+"), close])[1] == ord_("+")


def test_reclassification_is_top_level_only() -> None:
    assert parse("-x") == (ord_("−"), Identifier("x"))
    assert one("{-x}") == Grouped((bin_("−"), Identifier("x")))


# Scripts


def test_superscript() -> None:
    assert one("x^2") == Super(Identifier("x"), Number("2"))


def test_sub_then_sup_and_sup_then_sub() -> None:
    expected = SubSup(Identifier("x"), Identifier("i"), Number("2"))
    assert one("x_i^2") == expected
    assert one("x^2_i") == expected


def test_prime_superscript() -> None:
    assert one("f^''") == Super(Identifier("f"), Symbol(SymbolType.PUN, "″"))
    assert one("f^'_0") == SubSup(
        Identifier("f"), Number("0"), Symbol(SymbolType.PUN, "′")
    )


def test_sum_with_limits_is_subsup() -> None:
    exps = parse("\\sum_{i=1}^{n} i")
    assert exps[0] == SubSup(
        Symbol(SymbolType.OP, "∑"),
        Grouped((Identifier("i"), rel("="), Number("1"))),
        Identifier("n"),
    )
    assert exps[1] == Identifier("i")


def test_limit_operator_takes_under() -> None:
    lim = one("\\lim_{x \\to 0}")
    assert isinstance(lim, Under)
    assert lim.convertible
    assert lim.base == MathOperator("lim")


def test_operatorname_star_takes_limits() -> None:
    exp = one("\\operatorname*{argmax}_x^y")
    assert exp == UnderOver(
        True, MathOperator("argmax", limits=True), Identifier("x"), Identifier("y")
    )


def test_operatorname_star_marks_the_node() -> None:
    op = one("\\operatorname*{argmax}")
    assert op == MathOperator("argmax", limits=True)
    assert Parser("")._takes_limits(replace(op, value="argmin"))
    assert not Parser("")._takes_limits(MathOperator("sgn"))


def test_operatorname_without_star_takes_scripts() -> None:
    assert one("\\operatorname{sgn}_x") == Sub(MathOperator("sgn"), Identifier("x"))


def test_limits_and_nolimits_modifiers() -> None:
    assert isinstance(one("\\int\\limits_0^1"), UnderOver)
    assert isinstance(one("\\max\\nolimits_x"), Sub)


# Commands


def test_fraction() -> None:
    frac = one("\\frac{1}{2}")
    assert frac == Fraction(FractionType.NORMAL, Number("1"), Number("2"))
    assert one("\\tfrac{a}{b}").fraction_type == FractionType.INLINE  # type: ignore[union-attr]
    assert one("\\dfrac{a}{b}").fraction_type == FractionType.DISPLAY  # type: ignore[union-attr]


def test_sqrt_wraps_group() -> None:
    assert one("\\sqrt{x+1}") == Sqrt(Grouped((Identifier("x"), bin_("+"), Number("1"))))


def test_root_with_index() -> None:
    assert one("\\sqrt[3]{x}") == Root(Number("3"), Identifier("x"))


def test_accent_and_overline() -> None:
    hat = one("\\hat{x}")
    assert isinstance(hat, Over)
    assert not hat.convertible
    assert hat.over == Symbol(SymbolType.ACCENT, "\u0302")
    assert one("\\underbrace{ab}").under == Symbol(SymbolType.TUNDER, "⏟")  # type: ignore[union-attr]


def test_overset_and_underset() -> None:
    assert one("\\overset{!}{=}") == Over(False, rel("="), Symbol(SymbolType.CLOSE, "!"))
    assert one("\\underset{n}{x}") == Under(False, Identifier("x"), Identifier("n"))


def test_text_keeps_raw_content() -> None:
    assert one("\\text{if }") == Text(TextType.NORMAL, "if ")
    assert one("\\text{a {b} c}") == Text(TextType.NORMAL, "a {b} c")


def test_text_keeps_escape_pairs_together() -> None:
    assert one("\\text{a\\\\}") == Text(TextType.NORMAL, "a\\\\")
    assert one("\\text{a\\}b}") == Text(TextType.NORMAL, "a\\}b")
    assert read_tex("\\text{C:\\\\} + x") == (
        Text(TextType.NORMAL, "C:\\\\"),
        bin_("+"),
        Identifier("x"),
    )


def test_text_with_trailing_escape_is_unbalanced() -> None:
    with pytest.raises(UnbalancedGroupError):
        read_tex("\\text{a\\}")


def test_style_ops() -> None:
    assert one("\\mathbf{x y}") == Styled(TextType.BOLD, (Identifier("x"), Identifier("y")))
    assert one("\\mathbb R") == Styled(TextType.DOUBLE_STRUCK, (Identifier("R"),))


def test_decorations() -> None:
    assert one("\\boxed{x+y}") == Boxed(Grouped((Identifier("x"), bin_("+"), Identifier("y"))))
    assert one("\\phantom{x}") == Phantom(Identifier("x"))
    assert one("\\xcancel{x}") == Cancel(StrokeType.X_SLASH, Identifier("x"))
    assert one("\\bcancel x") == Cancel(StrokeType.BACK_SLASH, Identifier("x"))


def test_spaces() -> None:
    assert parse("a\\quad b")[1] == Space(1.0)
    assert parse("a\\,b")[1] == Space(0.167)
    assert one("\\hspace{2em}") == Space(2.0)


def test_parse_dimension() -> None:
    assert parse_dimension("1.5em") == pytest.approx(1.5)
    assert parse_dimension("-10pt") == pytest.approx(-1.0)
    assert parse_dimension("fill") == pytest.approx(0.333)


def test_scaled_delimiter() -> None:
    assert one("\\big(") == Scaled(1.2, Symbol(SymbolType.OPEN, "("))
    assert one("\\Bigr\\rangle") == Scaled(1.623, Symbol(SymbolType.CLOSE, "⟩"))


# Delimiters


def test_left_right() -> None:
    d = one("\\left( x \\right)")
    assert d == Delimited("(", ")", (SubExp(Identifier("x")),))


def test_middle_inserts_separator() -> None:
    d = one("\\left\\langle a \\middle| b \\right\\rangle")
    assert isinstance(d, Delimited)
    assert d.content == (
        SubExp(Identifier("a")),
        Separator("|"),
        SubExp(Identifier("b")),
    )
    assert (d.open, d.close) == ("⟨", "⟩")


def test_null_and_missing_delimiters() -> None:
    assert one("\\left. x \\right|") == Delimited("", "|", (SubExp(Identifier("x")),))
    assert one("\\left[ x") == Delimited("[", "", (SubExp(Identifier("x")),))


def test_delimited_flattening_preserves_order() -> None:
    d = one("\\left( a + b \\right)")
    assert isinstance(d, Delimited)
    assert d.expressions() == (Identifier("a"), bin_("+"), Identifier("b"))


# Environments


def test_pmatrix() -> None:
    d = one("\\begin{pmatrix} a & b \\\\ c & d \\end{pmatrix}")
    assert isinstance(d, Delimited)
    assert (d.open, d.close) == ("(", ")")
    (inner,) = d.expressions()
    assert isinstance(inner, Array)
    assert inner.alignments == (Alignment.CENTER, Alignment.CENTER)
    assert inner.rows == (
        ((Identifier("a"),), (Identifier("b"),)),
        ((Identifier("c"),), (Identifier("d"),)),
    )


def test_plain_matrix_and_trailing_row_break() -> None:
    arr = one("\\begin{matrix} 1 & 2 \\\\ \\end{matrix}")
    assert arr == Array(
        (Alignment.CENTER, Alignment.CENTER), (((Number("1"),), (Number("2"),)),)
    )


def test_row_break_with_dimension() -> None:
    arr = one("\\begin{matrix} a \\\\[2pt] b \\end{matrix}")
    assert isinstance(arr, Array)
    assert len(arr.rows) == 2


def test_alignments_follow_widest_row() -> None:
    arr = one("\\begin{matrix} a \\\\ b & c & d \\end{matrix}")
    assert isinstance(arr, Array)
    assert len(arr.alignments) == 3


def test_array_column_spec() -> None:
    arr = one("\\begin{array}{lr} a & b \\end{array}")
    assert isinstance(arr, Array)
    assert arr.alignments == (Alignment.LEFT, Alignment.RIGHT)


def test_aligned_alternates_right_left() -> None:
    arr = one("\\begin{aligned} x &= 1 \\\\ y &= 2 \\end{aligned}")
    assert isinstance(arr, Array)
    assert arr.alignments == (Alignment.RIGHT, Alignment.LEFT)
    assert arr.rows[0][1] == (rel("="), Number("1"))


def test_cases_is_left_braced_array() -> None:
    d = one("\\begin{cases} 1 & x > 0 \\\\ 0 & x \\le 0 \\end{cases}")
    assert isinstance(d, Delimited)
    assert (d.open, d.close) == ("{", "")
    (arr,) = d.expressions()
    assert isinstance(arr, Array)
    assert set(arr.alignments) == {Alignment.LEFT}


def test_unknown_environment_yields_nothing() -> None:
    assert parse("\\begin{tikzpicture} x \\end{tikzpicture}") == ()


# Degradation and errors


def test_unknown_command_returns_partial_result(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="texomml.tex_parser"):
        assert parse("\\binom{n}{k}") == ()
        assert parse("x + \\foo y") == (Identifier("x"), bin_("+"))
    assert "\\binom" in caplog.text


def test_unknown_command_inside_group_is_skipped() -> None:
    assert one("{a \\foo b}") == Grouped((Identifier("a"), Identifier("b")))


def test_unbalanced_brace_position() -> None:
    with pytest.raises(UnbalancedGroupError) as exc:
        read_tex("\\frac{1}{2")
    assert exc.value.position == 10
    assert exc.value.line == 1
    assert exc.value.col == 11
    assert isinstance(exc.value, SyntaxError)


def test_unbalanced_bracket() -> None:
    with pytest.raises(UnbalancedGroupError, match="bracket"):
        read_tex("\\sqrt[3{x}")


def test_unbalanced_position_on_later_line() -> None:
    with pytest.raises(UnbalancedGroupError) as exc:
        read_tex("x\n{y")
    assert exc.value.line == 2


@settings(max_examples=200)  # type: ignore[misc]
@given(st.text(alphabet="\\{}[]^_&abcxy12+-=()|.' \nfracsqrtleftrightbeginend"))  # type: ignore[misc]
def test_parser_only_raises_unbalanced(source: str) -> None:
    try:
        result = read_tex(source)
    except UnbalancedGroupError:
        return
    assert isinstance(result, tuple)
