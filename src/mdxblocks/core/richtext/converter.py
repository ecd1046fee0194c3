"""Markdown to Lexical rich-text conversion"""

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdxblocks.core.richtext import nodes as lx
from mdxblocks.core.richtext.links import split_links


ALL_FEATURES = frozenset({
    "heading", "bold", "italic", "strikethrough", "underline",
    "list", "blockquote", "code", "link",
})
PARAGRAPH_SPLIT_RE = re.compile(r'\n[ \t]*\n+')


@dataclass(frozen=True)
class ConverterConfig:
    """Editor features the target accepts; disabled syntax degrades to plain text."""
    features:       frozenset[str] = ALL_FEATURES
    heading_levels: frozenset[int] = frozenset(range(1, 7))
    parser_config:  str = "gfm-like"

    def enabled(self, feature: str) -> bool:
        return feature in self.features

    def without(self, *features: str) -> "ConverterConfig":
        return ConverterConfig(self.features - set(features), self.heading_levels, self.parser_config)


class RichTextConverter(Protocol):
    """Turns a markdown buffer into a Lexical editor state."""

    def convert(self, markdown: str, config: ConverterConfig) -> dict[str, Any]: ...


def _append_text(out: list[dict], value: str, fmt: int) -> None:
    """Append text, merging into the previous node when the format matches."""
    if not value:
        return
    if out and lx.is_text(out[-1]) and out[-1]["format"] == fmt:
        out[-1]["text"] += value
    else:
        out.append(lx.text(value, fmt))


@dataclass
class LexicalConverter:
    """Full-fidelity converter built on markdown-it."""
    _parsers: dict[str, MarkdownIt] = field(default_factory=dict, repr=False)

    def _parser(self, preset: str) -> MarkdownIt:
        if preset not in self._parsers:
            self._parsers[preset] = MarkdownIt(preset, options_update={"linkify": False})
        return self._parsers[preset]

    def convert(self, markdown: str, config: ConverterConfig = ConverterConfig()) -> dict[str, Any]:
        tree = SyntaxTreeNode(self._parser(config.parser_config).parse(markdown))
        children: list[dict] = []
        for node in tree.children:
            children.extend(self._block(node, config))
        return lx.root(children)

    # --- blocks ---

    def _inline_of(self, node: SyntaxTreeNode, config: ConverterConfig) -> list[dict]:
        out: list[dict] = []
        for child in node.children:
            if child.type == "inline":
                self._inline(child.children, 0, config, out)
        return out

    def _block(self, node: SyntaxTreeNode, config: ConverterConfig) -> list[dict]:
        t = node.type
        if t == "paragraph":
            return [lx.paragraph(self._inline_of(node, config))]
        if t == "heading":
            level = int(node.tag[1:])
            inline = self._inline_of(node, config)
            if config.enabled("heading") and level in config.heading_levels:
                return [lx.heading(node.tag, inline)]
            return [lx.paragraph(inline)]
        if t in ("bullet_list", "ordered_list"):
            return self._list(node, config)
        if t == "blockquote":
            inline = self._joined(node.children, config)
            return [lx.quote(inline)] if config.enabled("blockquote") else [lx.paragraph(inline)]
        if t in ("fence", "code_block"):
            body = node.content.rstrip("\n")
            if config.enabled("code"):
                return [lx.code(body, node.info.strip() or None)]
            return [lx.paragraph([lx.text(line)]) for line in body.split("\n") if line]
        if t == "hr":
            return [lx.horizontal_rule()]
        if t == "table":
            return self._table(node, config)
        if t == "html_block":
            value = node.content.strip()
            return [lx.paragraph([lx.text(value)])] if value else []
        out: list[dict] = []
        for child in node.children:
            out.extend(self._block(child, config))
        return out

    def _joined(self, blocks: list[SyntaxTreeNode], config: ConverterConfig) -> list[dict]:
        """Inline content of several blocks, separated by line breaks."""
        out: list[dict] = []
        for block in blocks:
            converted = self._block(block, config)
            for element in converted:
                if out:
                    out.append(lx.linebreak())
                out.extend(element.get("children", []))
        return out

    def _list(self, node: SyntaxTreeNode, config: ConverterConfig) -> list[dict]:
        ordered = node.type == "ordered_list"
        start = int(node.attrs.get("start", 1)) if ordered else 1
        if not config.enabled("list"):
            return [b for item in node.children for child in item.children for b in self._block(child, config)]
        items = []
        for i, item in enumerate(node.children):
            content: list[dict] = []
            nested: list[dict] = []
            for child in item.children:
                if child.type in ("bullet_list", "ordered_list"):
                    nested.extend(self._list(child, config))
                    continue
                for element in self._block(child, config):
                    if content:
                        content.append(lx.linebreak())
                    content.extend(element.get("children", []))
            items.append(lx.listitem(content, value=start + i))
            if nested:
                items.append(lx.listitem(nested, value=start + i + 1) | {"indent": 1})
        return [lx.list_node("number" if ordered else "bullet", items, start=start)]

    def _table(self, node: SyntaxTreeNode, config: ConverterConfig) -> list[dict]:
        rows = []
        for section in node.children:
            for tr in section.children:
                cells: list[dict] = []
                for cell in tr.children:
                    if cells:
                        _append_text(cells, " | ", 0)
                    for child in cell.children:
                        self._inline(child.children, 0, config, cells)
                rows.append(lx.paragraph(cells))
        return rows

    # --- inline ---

    def _inline(self, nodes: list[SyntaxTreeNode], fmt: int, config: ConverterConfig, out: list[dict]) -> None:
        marks = {"strong": ("bold", lx.IS_BOLD), "em": ("italic", lx.IS_ITALIC),
                 "s": ("strikethrough", lx.IS_STRIKETHROUGH)}
        for node in nodes:
            t = node.type
            if t in ("text", "text_special", "html_inline"):
                _append_text(out, node.content, fmt)
            elif t in marks:
                feature, bit = marks[t]
                self._inline(node.children, fmt | bit if config.enabled(feature) else fmt, config, out)
            elif t == "code_inline":
                _append_text(out, node.content, fmt | lx.IS_CODE if config.enabled("code") else fmt)
            elif t == "softbreak":
                _append_text(out, " ", fmt)
            elif t == "hardbreak":
                out.append(lx.linebreak())
            elif t == "link":
                href = str(node.attrs.get("href", ""))
                if config.enabled("link"):
                    label: list[dict] = []
                    self._inline(node.children, fmt, config, label)
                    out.append(lx.link(href, label))
                else:
                    # left as literal syntax for the link pass
                    _append_text(out, "[", fmt)
                    self._inline(node.children, fmt, config, out)
                    _append_text(out, f"]({href})", fmt)
            elif t == "image":
                continue
            elif node.children:
                self._inline(node.children, fmt, config, out)


class FallbackConverter:
    """Minimal converter: blank-line paragraphs, plain text, and [text](url) links."""

    def convert(self, markdown: str, config: ConverterConfig = ConverterConfig()) -> dict[str, Any]:
        paragraphs = []
        for chunk in PARAGRAPH_SPLIT_RE.split(markdown.strip()):
            value = " ".join(line.strip() for line in chunk.split("\n") if line.strip())
            if value:
                paragraphs.append(lx.paragraph(split_links(lx.text(value))))
        return lx.root(paragraphs)


CONVERTERS: dict[str, type] = {
    "lexical":  LexicalConverter,
    "fallback": FallbackConverter,
}


def get_converter(name: str) -> RichTextConverter:
    """Return a converter instance by name."""
    try:
        return CONVERTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown converter {name!r}; expected one of {sorted(CONVERTERS)}") from None
