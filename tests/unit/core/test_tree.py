"""Unit tests for core/tree.py"""

from mdxblocks.core.tree import FLOW_COMPONENT, Node, build_tree, text_node


def test_build_tree_owns_component_meta(parser):
    """Component nodes carry name and attributes copied from their token."""
    nodes = build_tree(parser.parse('<Section id="a">\n\nText\n\n</Section>\n'))
    assert len(nodes) == 1
    section = nodes[0]
    assert section.type == FLOW_COMPONENT
    assert section.name == "Section"
    assert section.map == (0, 5)
    assert section.children[0].type == "paragraph"


def test_with_children_returns_rewritten_copy():
    """with_children leaves the original node untouched."""
    node = Node(type="paragraph", children=[text_node("a")])
    copy = node.with_children([text_node("b")])
    assert copy.rewritten and not node.rewritten
    assert node.children[0].content == "a"
    assert copy.children[0].content == "b"


def test_walk_and_contains(parser):
    """walk visits descendants depth first; contains checks their types."""
    nodes = build_tree(parser.parse("Call <Phone /> now\n"))
    types = [n.type for n in nodes[0].walk()]
    assert types[:2] == ["paragraph", "inline"]
    assert nodes[0].contains({"mdx_inline"})
    assert not nodes[0].contains({"mdx_block"})
