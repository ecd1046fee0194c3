"""Unit tests for core/extract/inline.py"""

import pytest

from mdxblocks.core.errors import UnmappedComponentError, UnsupportedUsageError
from mdxblocks.core.extract.inline import needs_encoding
from mdxblocks.core.parse import parse_text
from mdxblocks.core.richtext.placeholders import encode_placeholder
from mdxblocks.core.utils.markdown import render_block


def _first(text: str):
    return parse_text(text).tree[0]


def test_needs_encoding():
    """Only subtrees holding components or expressions need encoding."""
    assert not needs_encoding(_first("Plain *text*.\n"))
    assert needs_encoding(_first("Call <Phone />.\n"))
    assert needs_encoding(_first("Total {n}.\n"))


def test_encode_inline_component(encoder):
    """An accepted inline component becomes placeholder text and a reference."""
    encoded = encoder.encode(_first('Call <Phone type="main" /> today.\n'))
    token = encode_placeholder("Phone", {"type": "main"})
    assert render_block(encoded) == f"Call {token} today."
    assert [(r.name, r.props, r.usage) for r in encoder.references] == [("Phone", {"type": "main"}, "inline")]


def test_encode_leaves_original_untouched(encoder):
    """Encoding returns rewritten copies; the parsed node is unchanged."""
    node = _first("Call <Phone />.\n")
    encoded = encoder.encode(node)
    assert encoded.rewritten and not node.rewritten
    assert node.contains({"mdx_inline"})
    assert not encoded.contains({"mdx_inline"})


def test_encode_drops_expressions(encoder):
    """Inline expressions become empty text."""
    assert render_block(encoder.encode(_first("Total {count} items\n"))) == "Total  items"


def test_encode_unmapped_fail_fast(encoder):
    """An unknown inline component raises in fail-fast mode."""
    with pytest.raises(UnmappedComponentError) as exc:
        encoder.encode(_first("Hi <Mystery /> there\n"))
    assert exc.value.usage == "inline"
    assert exc.value.diagnostic.location == "doc.mdx:1"


def test_encode_block_only_used_inline(encoder):
    """A block-only component inside text is an unsupported usage."""
    with pytest.raises(UnsupportedUsageError):
        encoder.encode(_first("See <Banner /> here\n"))


def test_encode_collect_mode_falls_back(collect_encoder, tally):
    """In collect mode the component is tallied and shown as [Name] text."""
    encoded = collect_encoder.encode(_first("Hi <Mystery /> and <Mystery /> there\n"))
    assert render_block(encoded) == "Hi \\[Mystery\\] and \\[Mystery\\] there"
    assert [(u.name, u.usage_count, u.component_type) for u in tally.as_list()] == [("Mystery", 2, "inline")]
    assert collect_encoder.references == []


def test_encode_malformed_props_advisory(encoder):
    """Opaque prop expressions are kept as text and reported as advisories."""
    encoder.encode(_first("Call <Phone type={user.phone} />\n"))
    assert encoder.references[0].props == {"type": "user.phone"}
    assert [w.error_type for w in encoder.warnings] == ["malformed_props"]


def test_encode_nested_flow_component_in_list(encoder):
    """A flow component nested in a list item is encoded as inline usage."""
    node = _first("- Item one\n\n  <Phone type=\"x\" />\n")
    encoded = encoder.encode(node)
    assert not encoded.contains({"mdx_block"})
    assert encode_placeholder("Phone", {"type": "x"}) in render_block(encoded)
