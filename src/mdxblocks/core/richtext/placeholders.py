"""Placeholder tokens that carry inline component references through conversion.

A token looks like ``⟦mdx:Name:PAYLOAD⟧`` where PAYLOAD is the unpadded
RFC 4648 base32 encoding of the compact JSON props. Base32 uses only A-Z and
2-7, so no markdown emphasis, escape, link, or block delimiter characters
can appear in it; the brackets are U+27E6 and U+27E7.
"""

import base64
import binascii
import json
import logging
import re
from typing import Any, Optional

from mdxblocks.core.registry import CapabilityLookup
from mdxblocks.core.richtext import nodes as lx
from mdxblocks.core.utils.slug import lower_camel


logger = logging.getLogger(__name__)

OPEN, CLOSE = "⟦", "⟧"
PREFIX = OPEN + "mdx:"
# names may pick up backslash escapes from a converter, e.g. My\_Widget
TOKEN_RE = re.compile(PREFIX + r'((?:\\.|[^\s\\' + OPEN + CLOSE + r'])+?):([A-Z2-7]*)' + CLOSE)
UNESCAPE_RE = re.compile(r'\\(.)')


def encode_placeholder(name: str, props: dict[str, Any]) -> str:
    """Return the token text for an inline component reference."""
    payload = json.dumps(props, separators=(",", ":"), ensure_ascii=False, sort_keys=False)
    b32 = base64.b32encode(payload.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{PREFIX}{name}:{b32}{CLOSE}"


def decode_token(match: re.Match) -> tuple[str, Optional[dict[str, Any]]]:
    """Return (name, props) for a token match; props is None if undecodable."""
    name = UNESCAPE_RE.sub(r'\1', match.group(1))
    b32 = match.group(2)
    try:
        raw = base64.b32decode(b32 + "=" * (-len(b32) % 8))
        props = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError):
        return name, None
    return name, props if isinstance(props, dict) else None


def has_placeholder(value: str) -> bool:
    return PREFIX in value


def _accepts(lookup: Optional[CapabilityLookup], name: str, allow_placeholder: bool) -> Optional[str]:
    """Return the inline block type for name, or None when it must fall back to text."""
    if lookup is None:
        return lower_camel(name)
    cap = lookup.lookup(name)
    if cap is None or not cap.can_render_inline:
        return None
    if cap.status != "implemented" and not (allow_placeholder and cap.status == "placeholder"):
        return None
    return cap.block_slug or lower_camel(name)


def _split(node: dict[str, Any], lookup, allow_placeholder: bool) -> list[dict[str, Any]]:
    value = node["text"]
    out: list[dict[str, Any]] = []

    def emit_text(fragment: str) -> None:
        if fragment:
            out.append({**node, "text": fragment})

    pos = 0
    for m in TOKEN_RE.finditer(value):
        emit_text(value[pos:m.start()])
        name, props = decode_token(m)
        block_type = _accepts(lookup, name, allow_placeholder) if props is not None else None
        if block_type is None:
            logger.warning("Placeholder for <%s /> could not be decoded; using text fallback", name)
            emit_text(f"[{name}]")
        else:
            out.append(lx.inline_block(block_type, props))
        pos = m.end()
    emit_text(value[pos:])
    return out


def decode_placeholders(
    tree: dict[str, Any],
    lookup: Optional[CapabilityLookup] = None,
    allow_placeholder: bool = False,
    ) -> dict[str, Any]:
    """Replace placeholder tokens in text nodes with inlineBlock nodes, in place.

    Text between tokens keeps the original node's formatting. Nodes without
    tokens are left untouched. Returns tree.
    """
    for _, children in lx.element_lists(tree):
        if not any(lx.is_text(c) and has_placeholder(c["text"]) for c in children):
            continue
        rebuilt: list[dict[str, Any]] = []
        for child in children:
            if lx.is_text(child) and has_placeholder(child["text"]):
                rebuilt.extend(_split(child, lookup, allow_placeholder))
            else:
                rebuilt.append(child)
        children[:] = rebuilt
    return tree
