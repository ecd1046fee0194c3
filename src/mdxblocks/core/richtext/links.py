"""Link decoding and whitespace repair around links in converted trees"""

import logging
import re
from typing import Any

from mdxblocks.core.richtext import nodes as lx


logger = logging.getLogger(__name__)

LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')
BEFORE_LINK_RE = re.compile(r'(\S+)\s+\[')
AFTER_LINK_RE = re.compile(r'\]\([^)]+\)\s+(\S+)')
NBSP = "\u00a0"


def _fragment(value: str, original: dict[str, Any]) -> dict[str, Any]:
    return lx.text(value, original.get("format", 0)) | {
        "mode": original.get("mode", "normal"),
        "style": original.get("style", ""),
        "detail": original.get("detail", 0),
    }


def split_links(node: dict[str, Any]) -> list[dict[str, Any]]:
    """Split one text node on [text](url) into text and link siblings.

    Link text inherits the original node's formatting.
    """
    value = node["text"]
    out: list[dict[str, Any]] = []
    pos = 0
    for m in LINK_RE.finditer(value):
        if m.start() > pos:
            out.append(_fragment(value[pos:m.start()], node))
        out.append(lx.link(m.group(2).strip(), [_fragment(m.group(1), node)]))
        pos = m.end()
    if pos < len(value):
        out.append(_fragment(value[pos:], node))
    return out or [node]


def _merge_whitespace(pieces: list[dict[str, Any]], out: list[dict[str, Any]]) -> None:
    """Append pieces to out, folding whitespace-only text into a neighbour.

    Whitespace moves forward into the next link's text or next text node,
    else backward into the previous text node as non-breaking spaces, else
    stays as a standalone non-breaking space.
    """
    for i, piece in enumerate(pieces):
        if lx.is_text(piece) and piece["text"] and not piece["text"].strip():
            nxt = pieces[i + 1] if i + 1 < len(pieces) else None
            prev = out[-1] if out else None
            if nxt is not None and nxt.get("type") == "link" and nxt["children"] and lx.is_text(nxt["children"][0]):
                nxt["children"][0]["text"] = piece["text"] + nxt["children"][0]["text"]
                continue
            if nxt is not None and lx.is_text(nxt):
                nxt["text"] = piece["text"] + nxt["text"]
                continue
            if prev is not None and lx.is_text(prev):
                prev["text"] += piece["text"].replace(" ", NBSP)
                continue
            piece["text"] = piece["text"].replace(" ", NBSP)
        out.append(piece)


def process_links(tree: dict[str, Any]) -> dict[str, Any]:
    """Replace residual markdown link syntax in text nodes with link nodes, in place."""
    for _, children in lx.element_lists(tree):
        if not any(lx.is_text(c) and LINK_RE.search(c["text"]) for c in children):
            continue
        rebuilt: list[dict[str, Any]] = []
        for child in children:
            if lx.is_text(child) and LINK_RE.search(child["text"]):
                _merge_whitespace(split_links(child), rebuilt)
            else:
                rebuilt.append(child)
        children[:] = rebuilt
    return tree


def restore_link_spacing(tree: dict[str, Any], markdown: str) -> list[str]:
    """Re-insert single spaces next to links that conversion trimmed, in place.

    Words seen as ``word [`` or ``](url) word`` in the source markdown mark
    text nodes that should end or start with a space beside a link. The first
    matching word wins; nodes matched by more than one distinct word are
    reported. Returns the ambiguity messages.
    """
    before = list(dict.fromkeys(BEFORE_LINK_RE.findall(markdown)))
    after = list(dict.fromkeys(AFTER_LINK_RE.findall(markdown)))
    if not before and not after:
        return []

    ambiguous: list[str] = []
    for parent, children in lx.element_lists(tree):
        if parent.get("type") != "paragraph":
            continue
        for i, child in enumerate(children):
            if not lx.is_text(child):
                continue
            trimmed = child["text"].strip()
            if not trimmed:
                continue
            prev = children[i - 1] if i > 0 else None
            nxt = children[i + 1] if i + 1 < len(children) else None

            if nxt is not None and nxt.get("type") == "link" and not child["text"].endswith((" ", NBSP)):
                matches = [w for w in before if trimmed.endswith(w)]
                if matches:
                    child["text"] += " "
                    if len(matches) > 1:
                        ambiguous.append(f"text before link {trimmed[-20:]!r} matches {matches}")

            if prev is not None and prev.get("type") == "link" and not child["text"].startswith((" ", NBSP)):
                matches = [w for w in after if trimmed.startswith(w)]
                if matches:
                    child["text"] = " " + child["text"]
                    if len(matches) > 1:
                        ambiguous.append(f"text after link {trimmed[:20]!r} matches {matches}")

    for message in ambiguous:
        logger.info("Ambiguous link spacing repair: %s", message)
    return ambiguous
