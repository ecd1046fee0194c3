"""markdown-it plugin for MDX component tags, expressions, and ESM statements.

Token types produced:

    mdx_block               self-closing flow tag on its own line(s)
    mdx_block_open/close    paired flow tag; children are parsed as markdown blocks
    mdx_expression_block    a ``{...}`` expression filling its own line(s)
    mdx_esm                 a top-level ``import``/``export`` statement
    mdx_inline              a text-level tag (paired tags keep inner text in meta)
    mdx_inline_close        a stray text-level closing tag
    mdx_expression          a text-level ``{...}`` expression

Tag tokens carry ``meta = {"name": str, "attributes": list[TagAttribute]}``.
Only capitalised tag names are components; lower-case tags are left to
markdown-it's own HTML rules.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from markdown_it import MarkdownIt
from markdown_it.rules_block import html_block

from mdxblocks.core.models import TagAttribute


NAME_RE = re.compile(r'[A-Z][A-Za-z0-9_.:-]*')
ATTR_NAME_RE = re.compile(r'[A-Za-z_$:][A-Za-z0-9_$:.-]*')
ESM_RE = re.compile(r'^(import|export)\b')
COMPONENT_START_RE = re.compile(r"</?[A-Z]")
PARTIAL_LINES_KEY = "mdx_partial_lines"


@dataclass
class TagMatch:
    """A scanned component tag: src[start:end] is the whole tag."""
    name:         str
    start:        int
    end:          int
    self_closing: bool
    closing:      bool = False
    attributes:   list[TagAttribute] = field(default_factory=list)


def _skip_ws(src: str, pos: int, limit: int) -> int:
    while pos < limit and src[pos] in ' \t\r\n':
        pos += 1
    return pos


def scan_braces(src: str, pos: int, limit: int) -> Optional[int]:
    """Return the index just past the '}' balancing src[pos] == '{', else None.

    Quoted strings and template literals inside the braces are skipped.
    """
    depth = 0
    i = pos
    while i < limit:
        ch = src[i]
        if ch in '"\'`':
            i += 1
            while i < limit and src[i] != ch:
                i += 2 if src[i] == '\\' else 1
            if i >= limit:
                return None
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def scan_tag(src: str, pos: int, limit: int) -> Optional[TagMatch]:
    """Scan a component tag starting at src[pos] == '<'. Attributes may span lines."""
    if pos + 1 >= limit or src[pos] != '<':
        return None
    i = pos + 1
    closing = src[i] == '/'
    if closing:
        i += 1
    m = NAME_RE.match(src, i, limit)
    if not m:
        return None
    name = m.group()
    i = m.end()
    if closing:
        i = _skip_ws(src, i, limit)
        if i < limit and src[i] == '>':
            return TagMatch(name=name, start=pos, end=i + 1, self_closing=False, closing=True)
        return None

    attributes: list[TagAttribute] = []
    while True:
        j = _skip_ws(src, i, limit)
        if j >= limit:
            return None
        if src.startswith('/>', j):
            return TagMatch(name, pos, j + 2, True, attributes=attributes)
        if src[j] == '>':
            return TagMatch(name, pos, j + 1, False, attributes=attributes)
        if j == i:
            return None     # attributes must be separated by whitespace
        if src[j] == '{':
            # spread attribute {...props}: no name to bind, skip it
            end = scan_braces(src, j, limit)
            if end is None:
                return None
            i = end
            continue
        am = ATTR_NAME_RE.match(src, j, limit)
        if not am:
            return None
        attr_name = am.group()
        k = _skip_ws(src, am.end(), limit)
        if k < limit and src[k] == '=':
            k = _skip_ws(src, k + 1, limit)
            if k >= limit:
                return None
            quote = src[k]
            if quote in '"\'':
                close = src.find(quote, k + 1, limit)
                if close < 0:
                    return None
                attributes.append(TagAttribute(attr_name, "string", src[k + 1:close]))
                i = close + 1
            elif quote == '{':
                end = scan_braces(src, k, limit)
                if end is None:
                    return None
                attributes.append(TagAttribute(attr_name, "expression", src[k + 1:end - 1]))
                i = end
            else:
                return None
        else:
            attributes.append(TagAttribute(attr_name, "flag"))
            i = am.end()


def find_closing_tag(src: str, name: str, pos: int, limit: int) -> Optional[TagMatch]:
    """Find the '</name>' balancing an open tag that ends at pos, honouring nesting."""
    pattern = re.compile(r'<(/?)' + re.escape(name) + r'(?=[\s/>])')
    depth = 1
    i = pos
    while True:
        m = pattern.search(src, i, limit)
        if not m:
            return None
        tag = scan_tag(src, m.start(), limit)
        if tag is None or tag.name != name:
            i = m.end()
            continue
        if tag.closing:
            depth -= 1
            if depth == 0:
                return tag
        elif not tag.self_closing:
            depth += 1
        i = tag.end


def _line_of(state, pos: int, start_line: int, end_line: int) -> int:
    line = start_line
    while line < end_line - 1 and pos > state.eMarks[line]:
        line += 1
    return line


def _mark_partial(state, line: int) -> None:
    state.env.setdefault(PARTIAL_LINES_KEY, set()).add(line)


def mdx_flow(state, startLine: int, endLine: int, silent: bool) -> bool:
    """Block rule: component tags that start a line."""
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False
    pos = state.bMarks[startLine] + state.tShift[startLine]
    src = state.src
    if not src.startswith('<', pos) or pos + 1 >= len(src) or not src[pos + 1].isupper():
        return False

    limit = state.eMarks[endLine - 1]
    tag = scan_tag(src, pos, limit)
    if tag is None or tag.closing:
        return False
    tag_line = _line_of(state, tag.end, startLine, endLine)
    rest = src[tag.end:state.eMarks[tag_line]]

    if tag.self_closing:
        if rest.strip():
            return False    # text follows: an inline usage inside a paragraph
        if silent:
            return True
        token = state.push("mdx_block", "", 0)
        token.meta = {"name": tag.name, "attributes": tag.attributes}
        token.content = src[tag.start:tag.end]
        token.map = [startLine, tag_line + 1]
        token.block = True
        state.line = tag_line + 1
        return True

    close = find_closing_tag(src, tag.name, tag.end, limit)
    if close is not None:
        close_line = _line_of(state, close.start, tag_line, endLine)
        if src[close.end:state.eMarks[close_line]].strip():
            return False
    if silent:
        return True

    # children region [child_start, child_end), trimming partial first/last lines
    saved: list[tuple[int, int, int, int, int]] = []

    def adjust(line: int, begin: int, end: int) -> None:
        saved.append((line, state.bMarks[line], state.eMarks[line],
                      state.tShift[line], state.sCount[line]))
        text = src[begin:end]
        shift = len(text) - len(text.lstrip(' \t'))
        state.bMarks[line], state.eMarks[line] = begin, end
        state.tShift[line] = shift
        state.sCount[line] = state.blkIndent + shift
        _mark_partial(state, line)

    child_start = tag_line + 1
    if rest.strip():
        adjust(tag_line, tag.end, state.eMarks[tag_line])
        child_start = tag_line
    if close is None:
        child_end = endLine
        next_line = endLine
    else:
        next_line = close_line + 1
        before_close = src[state.bMarks[close_line]:close.start]
        if before_close.strip():
            if close_line == tag_line and saved:
                state.eMarks[close_line] = close.start
            else:
                adjust(close_line, state.bMarks[close_line], close.start)
            child_end = close_line + 1
        else:
            child_end = close_line

    token = state.push("mdx_block_open", "", 1)
    token.meta = {"name": tag.name, "attributes": tag.attributes}
    token.content = src[tag.start:tag.end]
    token.map = [startLine, next_line]
    token.block = True

    old_parent, old_line_max, old_indent = state.parentType, state.lineMax, state.blkIndent
    partial = {line for line, *_ in saved}
    indents = [
        state.sCount[ln] for ln in range(child_start, child_end)
        if ln not in partial and not state.isEmpty(ln)
    ]
    state.parentType = "mdx_block"
    state.lineMax = child_end
    if indents:
        state.blkIndent = max(state.blkIndent, min(indents))
    try:
        state.md.block.tokenize(state, child_start, child_end)
    finally:
        state.parentType, state.lineMax, state.blkIndent = old_parent, old_line_max, old_indent
        for line, b, e, t, s in reversed(saved):
            state.bMarks[line], state.eMarks[line] = b, e
            state.tShift[line], state.sCount[line] = t, s

    token = state.push("mdx_block_close", "", -1)
    token.meta = {"name": tag.name}
    token.block = True
    state.line = next_line
    return True


def mdx_expression_flow(state, startLine: int, endLine: int, silent: bool) -> bool:
    """Block rule: a brace expression that fills its own line(s)."""
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False
    pos = state.bMarks[startLine] + state.tShift[startLine]
    if not state.src.startswith('{', pos):
        return False
    end = scan_braces(state.src, pos, state.eMarks[endLine - 1])
    if end is None:
        return False
    last = _line_of(state, end, startLine, endLine)
    if state.src[end:state.eMarks[last]].strip():
        return False
    if silent:
        return True
    token = state.push("mdx_expression_block", "", 0)
    token.content = state.src[pos + 1:end - 1]
    token.map = [startLine, last + 1]
    token.block = True
    state.line = last + 1
    return True


def mdx_esm(state, startLine: int, endLine: int, silent: bool) -> bool:
    """Block rule: unindented top-level import/export statements up to a blank line."""
    if state.parentType != "root" or state.blkIndent != 0 or state.sCount[startLine] != 0:
        return False
    pos = state.bMarks[startLine] + state.tShift[startLine]
    if not ESM_RE.match(state.src[pos:state.eMarks[startLine]]):
        return False
    if silent:
        return False
    next_line = startLine + 1
    while next_line < endLine and not state.isEmpty(next_line):
        next_line += 1
    token = state.push("mdx_esm", "", 0)
    token.content = state.src[pos:state.eMarks[next_line - 1]]
    token.map = [startLine, next_line]
    token.block = True
    state.line = next_line
    return True


def mdx_inline(state, silent: bool) -> bool:
    """Inline rule: component tags inside text."""
    pos, src = state.pos, state.src
    if src[pos] != '<' or pos + 1 >= state.posMax:
        return False
    nxt = src[pos + 1]
    if not (nxt.isupper() or (nxt == '/' and src[pos + 2:pos + 3].isupper())):
        return False
    tag = scan_tag(src, pos, state.posMax)
    if tag is None:
        return False

    if tag.closing:
        if not silent:
            token = state.push("mdx_inline_close", "", 0)
            token.meta = {"name": tag.name}
            token.content = src[tag.start:tag.end]
        state.pos = tag.end
        return True

    end, inner = tag.end, None
    if not tag.self_closing:
        close = find_closing_tag(src, tag.name, tag.end, state.posMax)
        if close is not None:
            inner = src[tag.end:close.start]
            end = close.end
    if not silent:
        token = state.push("mdx_inline", "", 0)
        token.meta = {"name": tag.name, "attributes": tag.attributes, "inner": inner}
        token.content = src[pos:end]
    state.pos = end
    return True


def mdx_expression(state, silent: bool) -> bool:
    """Inline rule: brace expressions inside text."""
    pos = state.pos
    if state.src[pos] != '{':
        return False
    end = scan_braces(state.src, pos, state.posMax)
    if end is None:
        return False
    if not silent:
        token = state.push("mdx_expression", "", 0)
        token.content = state.src[pos + 1:end - 1]
    state.pos = end
    return True


def html_block_except_components(state, startLine: int, endLine: int, silent: bool) -> bool:
    """markdown-it html_block, minus capitalised tags such as <Section> or <Details>."""
    pos = state.bMarks[startLine] + state.tShift[startLine]
    if COMPONENT_START_RE.match(state.src, pos):
        return False
    return html_block(state, startLine, endLine, silent)


def mdx_plugin(md: MarkdownIt) -> None:
    """Register the MDX rules on a MarkdownIt instance."""
    md.block.ruler.at(
        "html_block", html_block_except_components,
        {"alt": ["paragraph", "reference", "blockquote"]},
    )
    md.block.ruler.before("html_block", "mdx_esm", mdx_esm)
    md.block.ruler.before("html_block", "mdx_flow", mdx_flow)
    md.block.ruler.before("html_block", "mdx_expression_flow", mdx_expression_flow)
    md.inline.ruler.before("html_inline", "mdx_inline", mdx_inline)
    md.inline.ruler.before("html_inline", "mdx_expression", mdx_expression)
