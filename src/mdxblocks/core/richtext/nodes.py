"""Lexical editor-state node factories and tree helpers"""

from typing import Any, Iterator, Optional

from mdxblocks.core.utils.hashing import short_id


IS_BOLD = 1
IS_ITALIC = 1 << 1
IS_STRIKETHROUGH = 1 << 2
IS_UNDERLINE = 1 << 3
IS_CODE = 1 << 4


def _element(type_: str, children: list[dict], **extra) -> dict[str, Any]:
    node = {
        "type": type_,
        "children": children,
        "direction": "ltr" if children else None,
        "format": "",
        "indent": 0,
        "version": 1,
    }
    node.update(extra)
    return node


def root(children: list[dict]) -> dict[str, Any]:
    return {"root": _element("root", children)}


def paragraph(children: list[dict]) -> dict[str, Any]:
    return _element("paragraph", children, textFormat=0)


def heading(tag: str, children: list[dict]) -> dict[str, Any]:
    return _element("heading", children, tag=tag)


def quote(children: list[dict]) -> dict[str, Any]:
    return _element("quote", children)


def list_node(list_type: str, children: list[dict], start: int = 1) -> dict[str, Any]:
    """list_type is 'bullet' or 'number'."""
    return _element("list", children, listType=list_type, start=start,
                    tag="ol" if list_type == "number" else "ul")


def listitem(children: list[dict], value: int = 1) -> dict[str, Any]:
    return _element("listitem", children, value=value)


def code(text_value: str, language: Optional[str] = None) -> dict[str, Any]:
    return _element("code", [text(text_value)] if text_value else [], language=language or None)


def horizontal_rule() -> dict[str, Any]:
    return {"type": "horizontalrule", "version": 1}


def linebreak() -> dict[str, Any]:
    return {"type": "linebreak", "version": 1}


def text(value: str, fmt: int = 0) -> dict[str, Any]:
    return {
        "type": "text",
        "text": value,
        "format": fmt,
        "mode": "normal",
        "style": "",
        "detail": 0,
        "version": 1,
    }


def link(url: str, children: list[dict], new_tab: bool = False) -> dict[str, Any]:
    """Link with a deterministic id, so equal input always gives equal output."""
    label = "".join(c.get("text", "") for c in children)
    return {
        "type": "link",
        "version": 3,
        "children": children,
        "direction": "ltr",
        "format": "",
        "indent": 0,
        "id": short_id(url, label),
        "fields": {"url": url, "newTab": new_tab, "linkType": "custom"},
    }


def inline_block(block_type: str, props: dict[str, Any]) -> dict[str, Any]:
    return {"type": "inlineBlock", "version": 1, "fields": {"blockType": block_type, **props}}


def is_text(node: dict[str, Any]) -> bool:
    return node.get("type") == "text"


def element_lists(tree: dict[str, Any]) -> Iterator[tuple[dict[str, Any], list[dict]]]:
    """Yield (parent, children) for every element in the tree, parents first.

    Callers may replace the contents of each children list in place.
    """
    start = tree.get("root", tree)
    stack = [start]
    while stack:
        node = stack.pop()
        children = node.get("children")
        if not isinstance(children, list):
            continue
        yield node, children
        stack.extend(reversed([c for c in children if isinstance(c.get("children"), list)]))


def iter_text(tree: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield every text node in document order."""
    for _, children in element_lists(tree):
        yield from (c for c in children if is_text(c))


def plain_text(tree: dict[str, Any]) -> str:
    """Concatenated text content, one line per top-level element."""
    lines = []
    for top in tree.get("root", tree).get("children", []):
        lines.append("".join(t["text"] for t in iter_text({"root": top})))
    return "\n".join(lines)


def has_content(tree: dict[str, Any]) -> bool:
    """True if the tree holds any visible text, inline block, link, rule, or code."""
    stack = list(tree.get("root", tree).get("children", []))
    while stack:
        node = stack.pop()
        if node.get("type") in ("inlineBlock", "horizontalrule", "link", "code"):
            return True
        if is_text(node) and node.get("text", "").strip():
            return True
        stack.extend(node.get("children") or [])
    return False
