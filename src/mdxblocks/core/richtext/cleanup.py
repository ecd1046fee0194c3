"""Remove bracket and parenthesis residue left by link and placeholder rewriting"""

import re
from typing import Any

from mdxblocks.core.richtext import nodes as lx


PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r'\\\['), ''),                  # escaped [
    (re.compile(r'\]\\\([^)]*$'), ''),          # ]\(url with no closing paren
    (re.compile(r'\]\\\([^)]*\)'), ''),         # ]\(url)
    (re.compile(r'\\\]'), ''),                  # escaped ]
]
RESIDUE_RE = re.compile(r'^[\s\\\[\]()]+$')
LINK_RESIDUE_RE = re.compile(r'^[\\\[\]()]+$')
LINK_TAIL_RE = re.compile(r'^\]\([^)]*\)')
LONE_PAREN_RE = re.compile(r'^\s*\)\s*$')


def clean_text(text: str) -> str:
    for pattern, repl in PATTERNS:
        text = pattern.sub(repl, text)
    return text


def _is_inline_block(node: dict[str, Any] | None) -> bool:
    return node is not None and node.get("type") == "inlineBlock"


def _is_link(node: dict[str, Any] | None) -> bool:
    return node is not None and node.get("type") == "link"


def _trim(value: str, prev: dict[str, Any] | None, nxt: dict[str, Any] | None) -> str:
    """Trim cleaned text, keeping the edge that faces a link."""
    if RESIDUE_RE.match(value):
        spaced = any(c.isspace() for c in value)
        return " " if spaced and (_is_link(prev) or _is_link(nxt)) else ""
    if not _is_link(prev):
        value = value.lstrip()
    if not _is_link(nxt):
        value = value.rstrip()
    return value


def _unwrap_component_links(children: list[dict[str, Any]]) -> None:
    """Drop the '[' and '](url)' around an inline block that replaced a link's text."""
    for i, child in enumerate(children):
        if not _is_inline_block(child) or i == 0 or i + 1 >= len(children):
            continue
        prev, nxt = children[i - 1], children[i + 1]
        if lx.is_text(prev) and lx.is_text(nxt) and prev["text"].endswith("[") and LINK_TAIL_RE.match(nxt["text"]):
            prev["text"] = prev["text"][:-1]
            nxt["text"] = LINK_TAIL_RE.sub("", nxt["text"], count=1)


def _clean_children(children: list[dict[str, Any]], inside_link: bool) -> list[dict[str, Any]]:
    if not inside_link:
        _unwrap_component_links(children)
    cleaned: list[dict[str, Any]] = []
    for i, child in enumerate(children):
        if not lx.is_text(child):
            cleaned.append(child)
            continue
        original = child["text"]
        value = clean_text(original)
        if not inside_link and _is_inline_block(children[i - 1] if i else None) and LONE_PAREN_RE.match(value):
            value = ""
        if value != original:
            if inside_link:
                value = "" if LINK_RESIDUE_RE.match(value) else value
            else:
                prev = children[i - 1] if i else None
                nxt = children[i + 1] if i + 1 < len(children) else None
                value = _trim(value, prev, nxt)
        if value:
            cleaned.append(child if value == original else {**child, "text": value})
    return cleaned


def cleanup_artifacts(tree: dict[str, Any]) -> dict[str, Any]:
    """Strip leftover escaped brackets and dangling link fragments, in place.

    Text changed by cleanup is trimmed, except inside links and on an edge
    next to a link, where the space separates words. Text nodes left empty
    are removed. Returns tree.
    """
    for parent, children in lx.element_lists(tree):
        children[:] = _clean_children(children, parent.get("type") == "link")
    return tree
