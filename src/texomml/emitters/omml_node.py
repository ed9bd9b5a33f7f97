"""
Generic XML node tree used as the OMML emitter's intermediate output.

Classes:
    XMLNode: A qualified tag, ordered attributes and ordered children (nodes or text).

Functions:
    m_node(tag, attrs, children): Builds a node in the `m:` math namespace.
    m_val(tag, val, children): Builds an `m:` node carrying a single `m:val` attribute.
    escape_xml(text): Escapes `& < > " '` for element text and attribute values.
    node_to_string(node, indent): Serializes a node tree, one element per line.

The tree is write-once: the emitter builds it bottom-up, `node_to_string` flattens
it to text and it is discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from xml.sax.saxutils import escape

M_PREFIX = "m"
INDENT = "  "

_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass
class XMLNode:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[XMLNode | str] = field(default_factory=list)

    def find(self, tag: str) -> XMLNode | None:
        """Returns the first direct child element with the given tag."""
        for child in self.children:
            if isinstance(child, XMLNode) and child.tag == tag:
                return child
        return None

    def find_all(self, tag: str) -> list[XMLNode]:
        return [c for c in self.children if isinstance(c, XMLNode) and c.tag == tag]

    def iter(self, tag: str | None = None) -> list[XMLNode]:
        """All descendant elements (self included) in document order, optionally by tag."""
        out = [self] if tag is None or self.tag == tag else []
        for child in self.children:
            if isinstance(child, XMLNode):
                out.extend(child.iter(tag))
        return out

    def text(self) -> str:
        """Concatenated text of the whole sub-tree."""
        return "".join(c if isinstance(c, str) else c.text() for c in self.children)

    def __str__(self) -> str:
        return node_to_string(self)


def m_node(
    tag: str,
    attrs: dict[str, str] | None = None,
    children: list[XMLNode | str] | None = None,
) -> XMLNode:
    return XMLNode(f"{M_PREFIX}:{tag}", dict(attrs or {}), list(children or []))


def m_val(tag: str, val: str, children: list[XMLNode | str] | None = None) -> XMLNode:
    return m_node(tag, {f"{M_PREFIX}:val": val}, children)


def escape_xml(text: str) -> str:
    return escape(text, _ENTITIES)


def node_to_string(node: XMLNode | str, indent: int = 0) -> str:
    """
    Serializes a node tree to text.

    Rules:
        - Each element starts on its own line, indented two spaces per level.
        - Attributes are written inline as `name="escaped-value"`.
        - An element without children is self-closed.
        - An element whose only child is text is written on one line.
        - Any other element has its children on the following lines, one level deeper.

    Args:
        node: The root element (or a bare text leaf).
        indent: Nesting level of `node`.

    Returns:
        str: The serialized markup, without a trailing newline.
    """
    pad = INDENT * indent
    if isinstance(node, str):
        return pad + escape_xml(node)

    attrs = "".join(f' {k}="{escape_xml(v)}"' for k, v in node.attrs.items())
    if not node.children:
        return f"{pad}<{node.tag}{attrs}/>"

    if len(node.children) == 1 and isinstance(node.children[0], str):
        return f"{pad}<{node.tag}{attrs}>{escape_xml(node.children[0])}</{node.tag}>"

    inner = "\n".join(node_to_string(child, indent + 1) for child in node.children)
    return f"{pad}<{node.tag}{attrs}>\n{inner}\n{pad}</{node.tag}>"


__all__ = ["XMLNode", "escape_xml", "m_node", "m_val", "node_to_string"]
