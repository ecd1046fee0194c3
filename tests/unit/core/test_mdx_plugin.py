"""Unit tests for core/mdx.py"""

import pytest

from mdxblocks.core.mdx import find_closing_tag, scan_braces, scan_tag
from mdxblocks.core.models import TagAttribute


def _inline_types(tokens) -> list[str]:
    return [t.type for tok in tokens if tok.type == "inline" for t in tok.children]


def test_scan_tag_attribute_kinds():
    """scan_tag captures quoted strings, brace expressions, and flags in order."""
    src = '<Comp a="x" b=\'y\' c={1} d empty="" />'
    tag = scan_tag(src, 0, len(src))
    assert tag.name == "Comp"
    assert tag.self_closing
    assert tag.end == len(src)
    assert tag.attributes == [
        TagAttribute("a", "string", "x"),
        TagAttribute("b", "string", "y"),
        TagAttribute("c", "expression", "1"),
        TagAttribute("d", "flag"),
        TagAttribute("empty", "string", ""),
    ]


def test_scan_tag_multiline_attributes():
    """Attributes may span several lines."""
    src = '<Comp\n  a="1"\n  b={[1, 2]}\n/>'
    tag = scan_tag(src, 0, len(src))
    assert [a.name for a in tag.attributes] == ["a", "b"]
    assert tag.attributes[1].value == "[1, 2]"


def test_scan_tag_skips_spread():
    """Spread attributes are ignored."""
    src = '<Comp {...rest} a="1" />'
    tag = scan_tag(src, 0, len(src))
    assert tag.attributes == [TagAttribute("a", "string", "1")]


def test_scan_tag_open_and_closing():
    """Open tags are not self-closing; closing tags are flagged."""
    src = '<Section id="a">'
    assert not scan_tag(src, 0, len(src)).self_closing
    close = scan_tag("</Section>", 0, 10)
    assert close.closing and close.name == "Section"


@pytest.mark.parametrize("src", ["<div>", "<Comp a=b />", '<Comp a="unclosed />', "<Comp"])
def test_scan_tag_rejects(src):
    """Lower-case names, unquoted values, and unterminated tags do not scan."""
    assert scan_tag(src, 0, len(src)) is None


def test_scan_braces_nested_and_quoted():
    """scan_braces balances nested braces and ignores braces inside strings."""
    src = '{{"a": "}"}} tail'
    assert src[:scan_braces(src, 0, len(src))] == '{{"a": "}"}}'


def test_find_closing_tag_nested():
    """find_closing_tag skips nested tags of the same name."""
    src = "<A><A></A></A>"
    close = find_closing_tag(src, "A", 3, len(src))
    assert close.start == 10


def test_self_closing_flow_tag(parser):
    """A self-closing tag on its own line is a block token with name and attributes."""
    tokens = parser.parse('<RatesTable provider="x" />\n')
    assert [t.type for t in tokens] == ["mdx_block"]
    assert tokens[0].meta["name"] == "RatesTable"
    assert tokens[0].meta["attributes"] == [TagAttribute("provider", "string", "x")]
    assert tokens[0].map == [0, 1]


def test_paired_flow_tag_children(parser):
    """A paired flow tag wraps its children parsed as markdown blocks."""
    tokens = parser.parse('<Section id="a">\n\nText\n\n</Section>\n')
    assert [t.type for t in tokens] == [
        "mdx_block_open", "paragraph_open", "inline", "paragraph_close", "mdx_block_close",
    ]


def test_indented_children_are_not_code(parser):
    """Children indented under a wrapper are paragraphs, not indented code."""
    tokens = parser.parse('<Section id="a">\n    Indented text\n</Section>\n')
    assert "code_block" not in [t.type for t in tokens]
    assert "paragraph_open" in [t.type for t in tokens]


def test_unclosed_flow_tag_runs_to_end(parser):
    """An unclosed paired tag takes the rest of its container as children."""
    tokens = parser.parse('<Section id="a">\n\nOne\n\nTwo\n')
    assert tokens[0].type == "mdx_block_open"
    assert tokens[-1].type == "mdx_block_close"
    assert sum(1 for t in tokens if t.type == "paragraph_open") == 2


def test_inline_tag_in_paragraph(parser):
    """A tag inside text is an inline token between text tokens."""
    tokens = parser.parse('Call <Phone type="main" /> now\n')
    assert _inline_types(tokens) == ["text", "mdx_inline", "text"]


def test_self_closing_tag_with_trailing_text_is_inline(parser):
    """A tag that starts a line but is followed by text stays inside the paragraph."""
    tokens = parser.parse("<Phone /> is our number\n")
    assert tokens[0].type == "paragraph_open"
    assert "mdx_inline" in _inline_types(tokens)


def test_paired_inline_tag_keeps_inner(parser):
    """A paired inline tag keeps its inner markup in meta."""
    tokens = parser.parse("See <Tooltip tip=\"x\">the **term**</Tooltip> here\n")
    tag = next(t for tok in tokens if tok.type == "inline" for t in tok.children if t.type == "mdx_inline")
    assert tag.meta["inner"] == "the **term**"


def test_inline_expression(parser):
    """Brace expressions in text become expression tokens."""
    tokens = parser.parse("Total {count} items\n")
    expr = [t for tok in tokens if tok.type == "inline" for t in tok.children if t.type == "mdx_expression"]
    assert expr[0].content == "count"


def test_flow_expression_and_esm(parser):
    """Expressions on their own line and top-level import/export are block tokens."""
    tokens = parser.parse('import X from "./x"\n\n{/* note */}\n\n# Title\n')
    assert [t.type for t in tokens][:2] == ["mdx_esm", "mdx_expression_block"]


def test_lowercase_html_untouched(parser):
    """Lower-case HTML keeps markdown-it's html_block handling."""
    tokens = parser.parse("<div>\nhi\n</div>\n")
    assert tokens[0].type == "html_block"
