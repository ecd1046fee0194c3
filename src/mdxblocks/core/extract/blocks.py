"""Buffered content nodes to markdown text, using source line positions"""

from mdxblocks.core.models import ImageRef
from mdxblocks.core.tree import Node
from mdxblocks.core.utils.markdown import render_block


CONTENT_TYPES: set[str] = {
    'paragraph',
    'heading',
    'bullet_list',
    'ordered_list',
    'blockquote',
    'fence',
    'code_block',
    'table',
    'hr',
    'html_block',
}

DROPPED_TYPES: set[str] = {'mdx_expression_block', 'mdx_esm'}


def _source_slice(node: Node, source_lines: list[str], partial_lines: set[int]) -> str | None:
    """Raw source for an untouched node via its line map, else None."""
    if node.rewritten or not node.map:
        return None
    start, end = node.map
    if any(line in partial_lines for line in range(start, end)):
        return None
    return ''.join(source_lines[start:end]).rstrip()


def node_markdown(node: Node, source_lines: list[str], partial_lines: set[int] = frozenset()) -> str:
    """Exact source text when the node is untouched, else the re-serialised node."""
    text = None if node.type == 'code_block' else _source_slice(node, source_lines, partial_lines)
    if text is None:
        return render_block(node).rstrip()
    # nested wrapper children keep their source indentation
    lines = text.split('\n')
    indent = min((len(ln) - len(ln.lstrip()) for ln in lines if ln.strip()), default=0)
    return '\n'.join(ln[indent:] for ln in lines) if indent else text


def buffer_markdown(
    nodes: list[Node],
    source_lines: list[str],
    partial_lines: set[int] = frozenset(),
    ) -> str:
    """Join buffered nodes into one markdown text, separated by blank lines."""
    parts = (node_markdown(n, source_lines, partial_lines) for n in nodes)
    return '\n\n'.join(p for p in parts if p.strip())


def collect_images(node: Node, position: int) -> list[ImageRef]:
    """Markdown images anywhere under node."""
    images = []
    for n in node.walk():
        if n.type == 'image':
            alt = ''.join(c.content for c in n.children if c.type == 'text') or n.content
            images.append(ImageRef(url=str(n.attrs.get('src', '')), alt=alt, position=position))
    return images
