"""Serialise owned syntax tree nodes back to markdown text"""

import re

from mdxblocks.core.tree import Node


ESCAPE_RE = re.compile(r'([\\`*_\[\]<])')
ALIGN_RE = re.compile(r'text-align:\s*(left|right|center)')


def escape_text(text: str) -> str:
    return ESCAPE_RE.sub(r'\\\1', text)


def render_inline(nodes: list[Node]) -> str:
    """Render inline children (text, marks, links, breaks) to markdown."""
    return "".join(_inline(n) for n in nodes)


def _inline(node: Node) -> str:
    t = node.type
    if t == "text":
        return node.content if node.meta.get("raw") else escape_text(node.content)
    if t in ("em", "strong", "s"):
        markup = node.markup or {"em": "*", "strong": "**", "s": "~~"}[t]
        return f"{markup}{render_inline(node.children)}{markup}"
    if t == "code_inline":
        ticks = node.markup or "`"
        pad = " " if node.content.startswith("`") or node.content.endswith("`") else ""
        return f"{ticks}{pad}{node.content}{pad}{ticks}"
    if t == "link":
        href = node.attrs.get("href", "")
        title = node.attrs.get("title")
        suffix = f' "{title}"' if title else ""
        return f"[{render_inline(node.children)}]({href}{suffix})"
    if t == "image":
        alt = render_inline(node.children) or node.content
        return f"![{alt}]({node.attrs.get('src', '')})"
    if t == "softbreak":
        return "\n"
    if t == "hardbreak":
        return "\\\n"
    if t in ("html_inline", "text_special"):
        return node.content
    if t in ("mdx_expression", "mdx_inline_close"):
        return ""
    if node.children:
        return render_inline(node.children)
    return node.content


def _indent(text: str, prefix: str, first: str = None) -> str:
    lines = text.split("\n")
    head = (first if first is not None else prefix) + lines[0]
    rest = [(prefix + ln) if ln.strip() else ln.rstrip() for ln in lines[1:]]
    return "\n".join([head] + rest)


def _list(node: Node) -> str:
    ordered = node.type == "ordered_list"
    start = int(node.attrs.get("start", 1) or 1)
    tight = all(
        c.hidden for item in node.children for c in item.children
        if c.type == "paragraph" and not c.meta.get("synthetic")
    )
    items = []
    for i, item in enumerate(node.children):
        marker = f"{start + i}{node.markup or '.'} " if ordered else f"{node.markup or '-'} "
        body = ("\n" if tight else "\n\n").join(render_block(c) for c in item.children)
        items.append(_indent(body, " " * len(marker), first=marker))
    return ("\n" if tight else "\n\n").join(items)


def _table(node: Node) -> str:
    rows: list[list[str]] = []
    aligns: list[str] = []
    for section in node.children:
        for tr in section.children:
            cells = []
            for cell in tr.children:
                cells.append(render_inline(cell.children[0].children) if cell.children else "")
                if section.type == "thead":
                    m = ALIGN_RE.search(str(cell.attrs.get("style", "")))
                    aligns.append(m.group(1) if m else "")
            rows.append(cells)
    if not rows:
        return ""
    sep = {"left": ":---", "right": "---:", "center": ":---:", "": "---"}
    lines = ["| " + " | ".join(c.replace("|", "\\|") for c in row) + " |" for row in rows]
    lines.insert(1, "| " + " | ".join(sep[a] for a in aligns) + " |")
    return "\n".join(lines)


def render_block(node: Node) -> str:
    """Render one block-level node to markdown without trailing newline."""
    t = node.type
    if t == "paragraph":
        return render_inline(node.children[0].children) if node.children else ""
    if t == "inline":
        return render_inline(node.children)
    if t == "heading":
        level = int(node.tag[1:]) if node.tag[1:].isdigit() else 1
        text = render_inline(node.children[0].children) if node.children else ""
        return f"{'#' * level} {text}"
    if t in ("bullet_list", "ordered_list"):
        return _list(node)
    if t == "blockquote":
        inner = "\n\n".join(render_block(c) for c in node.children)
        return _indent(inner, "> ").replace("\n\n", "\n>\n")
    if t == "fence":
        fence = node.markup or "```"
        return f"{fence}{node.info}\n{node.content}{fence}"
    if t == "code_block":
        return _indent(node.content.rstrip("\n"), "    ")
    if t == "hr":
        return "---"
    if t == "table":
        return _table(node)
    if t in ("html_block", "mdx_block"):
        return node.content.rstrip()
    if t in ("mdx_expression_block", "mdx_esm"):
        return ""
    return "\n\n".join(render_block(c) for c in node.children)
