import dataclasses
import json
from typing import Any

import hypothesis.strategies as st
import pytest
from hypothesis import given

from texomml.tex_ast import (
    EMPTY_GROUP,
    EXP_TYPES,
    Alignment,
    Array,
    Delimited,
    Fraction,
    FractionType,
    Grouped,
    Identifier,
    MathOperator,
    Number,
    Separator,
    SubExp,
    SubSup,
    Symbol,
    SymbolType,
    group,
    is_empty_group,
    is_exp,
)


def kinds(node: Any) -> list[str]:
    """Collects every `kind` in a to_dict() dump, depth first."""
    out: list[str] = []
    if isinstance(node, dict):
        if "kind" in node:
            out.append(node["kind"])
        for v in node.values():
            out.extend(kinds(v))
    elif isinstance(node, list):
        for v in node:
            out.extend(kinds(v))
    return out


def test_nodes_are_frozen() -> None:
    n = Number("1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        n.value = "2"  # type: ignore[misc]


def test_nodes_compare_by_value() -> None:
    assert Identifier("x") == Identifier("x")
    assert Identifier("x") != Identifier("y")
    assert Symbol(SymbolType.BIN, "+") != Symbol(SymbolType.ORD, "+")


def test_nodes_are_hashable() -> None:
    assert len({Number("1"), Number("1"), Identifier("1")}) == 2


def test_kind_is_stable_per_variant() -> None:
    assert Number("1").kind == "number"
    assert SubSup(Identifier("x"), Number("1"), Number("2")).kind == "subsup"
    assert Delimited("(", ")").kind == "delimited"


def test_every_variant_has_unique_kind() -> None:
    names = [t.kind for t in EXP_TYPES]  # type: ignore[attr-defined]
    assert len(names) == len(set(names)) == 23


def test_to_dict_nested() -> None:
    frac = Fraction(FractionType.NORMAL, Number("1"), Grouped((Identifier("x"), Number("2"))))
    d = frac.to_dict()
    assert d["kind"] == "fraction"
    assert d["fraction_type"] == "normal"
    assert d["numerator"] == {"kind": "number", "value": "1"}
    assert isinstance(d["denominator"]["items"], list)
    assert kinds(d) == ["fraction", "number", "grouped", "identifier", "number"]


def test_to_dict_is_json_serializable() -> None:
    arr = Array(
        (Alignment.CENTER, Alignment.LEFT),
        (((Number("1"),), (Identifier("a"),)),),
    )
    d = Delimited("[", "]", (SubExp(arr), Separator("|"))).to_dict()
    text = json.dumps(d)
    assert '"alignments": ["center", "left"]' in text
    assert d["content"][1] == {"kind": "separator", "value": "|"}


def test_delimited_expressions_skip_separators() -> None:
    d = Delimited(
        "(",
        ")",
        (SubExp(Identifier("a")), Separator("|"), SubExp(Identifier("b"))),
    )
    assert d.expressions() == (Identifier("a"), Identifier("b"))


def test_group_collapses_single_item() -> None:
    assert group([Identifier("x")]) == Identifier("x")
    assert group([]) == EMPTY_GROUP
    assert group([Number("1"), Number("2")]) == Grouped((Number("1"), Number("2")))


def test_is_empty_group() -> None:
    assert is_empty_group(Grouped(()))
    assert not is_empty_group(Grouped((Number("1"),)))
    assert not is_empty_group(Number("1"))


def test_is_exp_excludes_content_markers() -> None:
    assert is_exp(Number("1"))
    assert not is_exp(Separator("|"))
    assert not is_exp(SubExp(Number("1")))
    assert not is_exp("x")


def test_math_operator_dump_carries_limits_flag() -> None:
    assert MathOperator("sin").to_dict() == {
        "kind": "math_operator",
        "value": "sin",
        "limits": False,
    }
    assert MathOperator("argmax", limits=True).to_dict()["limits"] is True


@given(st.text())  # type: ignore[misc]
def test_leaf_to_dict_keeps_value(value: str) -> None:
    assert Identifier(value).to_dict() == {"kind": "identifier", "value": value}


@given(st.sampled_from(list(SymbolType)), st.text(min_size=1))  # type: ignore[misc]
def test_symbol_to_dict_uses_enum_value(symbol_type: SymbolType, value: str) -> None:
    d = Symbol(symbol_type, value).to_dict()
    assert d["symbol_type"] == symbol_type.value
    assert d["value"] == value
