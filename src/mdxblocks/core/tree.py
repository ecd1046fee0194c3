"""Owned syntax tree built from markdown-it tokens"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Optional

from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode


FLOW_COMPONENT = "mdx_block"
TEXT_COMPONENT = "mdx_inline"


@dataclass
class Node:
    """One syntax tree node; parents own their children outright.

    ``rewritten`` marks nodes whose subtree differs from the source text, so
    they must be re-serialised rather than sliced from the source lines.
    """
    type:      str
    tag:       str = ""
    children:  list["Node"] = field(default_factory=list)
    content:   str = ""
    markup:    str = ""
    info:      str = ""
    attrs:     dict[str, Any] = field(default_factory=dict)
    meta:      dict[str, Any] = field(default_factory=dict)
    map:       Optional[tuple[int, int]] = None
    hidden:    bool = False
    rewritten: bool = False

    def with_children(self, children: list["Node"]) -> "Node":
        """Return a rewritten copy of this node with a new child list."""
        return replace(self, children=children, rewritten=True)

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def contains(self, types: set[str]) -> bool:
        return any(n.type in types for n in self.walk())


def text_node(text: str, **meta) -> Node:
    return Node(type="text", content=text, meta=dict(meta), rewritten=True)


def _convert(node: SyntaxTreeNode) -> Node:
    return Node(
        type=node.type,
        tag=node.tag,
        children=[_convert(c) for c in node.children],
        content=node.content,
        markup=node.markup,
        info=node.info,
        attrs=dict(node.attrs),
        meta=dict(node.meta or {}),
        map=tuple(node.map) if node.map else None,
        hidden=node.hidden,
    )


def build_tree(tokens: list[Token]) -> list[Node]:
    """Convert a markdown-it token stream into top-level Nodes."""
    return [_convert(child) for child in SyntaxTreeNode(tokens).children]
