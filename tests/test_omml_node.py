import xml.etree.ElementTree as ET
from xml.sax.saxutils import unescape

from hypothesis import given
from hypothesis import strategies as st

from texomml.emitters.omml_node import XMLNode, escape_xml, m_node, m_val, node_to_string

xml_text = st.text(
    alphabet=st.characters(blacklist_categories=("Cc", "Cs", "Cn")), min_size=1
)


def test_m_node_prefixes_tag() -> None:
    node = m_node("r")
    assert node.tag == "m:r"
    assert node.attrs == {}
    assert node.children == []


def test_m_val_sets_val_attribute() -> None:
    assert m_val("sty", "p").attrs == {"m:val": "p"}


def test_empty_element_is_self_closed() -> None:
    assert node_to_string(m_val("sty", "p")) == '<m:sty m:val="p"/>'


def test_single_text_child_is_inline() -> None:
    assert node_to_string(m_node("t", children=["x"])) == "<m:t>x</m:t>"


def test_nested_children_are_indented() -> None:
    run = m_node("r", children=[m_node("t", children=["1"])])
    assert node_to_string(run) == "<m:r>\n  <m:t>1</m:t>\n</m:r>"
    assert node_to_string(run, 1).startswith("  <m:r>")


def test_escape_covers_five_characters() -> None:
    assert escape_xml("&<>\"'") == "&amp;&lt;&gt;&quot;&apos;"


def test_attribute_values_are_escaped() -> None:
    assert node_to_string(m_val("chr", "<")) == '<m:chr m:val="&lt;"/>'


def test_find_iter_and_text() -> None:
    tree = m_node(
        "f",
        children=[
            m_node("num", children=[m_node("r", children=[m_node("t", children=["1"])])]),
            m_node("den", children=[m_node("r", children=[m_node("t", children=["2"])])]),
        ],
    )
    assert tree.find("m:den") is not None
    assert tree.find("m:sub") is None
    assert len(tree.iter("m:t")) == 2
    assert tree.text() == "12"
    assert str(tree) == node_to_string(tree)


@given(xml_text)  # type: ignore[misc]
def test_escape_round_trip(text: str) -> None:
    escaped = escape_xml(text)
    assert unescape(escaped, {"&quot;": '"', "&apos;": "'"}) == text


@given(xml_text, xml_text)  # type: ignore[misc]
def test_serialized_markup_reparses(value: str, text: str) -> None:
    node = XMLNode("chr", {"val": value}, [XMLNode("t", {}, [text])])
    parsed = ET.fromstring(node_to_string(node))
    assert parsed.get("val") == value
    child = parsed.find("t")
    assert child is not None
    assert child.text == text
