"""File discovery, frontmatter extraction, and MDX-aware markdown-it parsing"""

import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt

from mdxblocks.core.mdx import PARTIAL_LINES_KEY, mdx_plugin
from mdxblocks.core.models import ParsedDoc
from mdxblocks.core.tree import build_tree
from mdxblocks.core.utils.slug import slugify


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
# [<Phone />](tel:<Phone />) and [<Email />](mailto:<Email />) carry the component twice
LINK_WRAPPER_RE = re.compile(r'\[(<[A-Z][^>]*?/>)\]\((?:tel:|mailto:)<[A-Z][^>]*?/>\)')
MD_EXTENSIONS = {'.md', '.mdx'}
NEWLINE_RE = re.compile(r'\r\n?')


@lru_cache(maxsize=None)
def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name, with MDX rules."""
    return MarkdownIt(preset, options_update={"linkify": False}).use(mdx_plugin)


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def unwrap_link_wrappers(text: str) -> str:
    """Collapse [<Comp />](tel:<Comp />)-style wrappers to the bare component."""
    return LINK_WRAPPER_RE.sub(r'\1', text)


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def _source_lines(body: str) -> list[str]:
    """Split body into lines the way markdown-it numbers them in token maps.

    Only line feeds end a line (CRLF and CR are normalised first); other
    characters str.splitlines treats as breaks stay inside their line.
    """
    lines = NEWLINE_RE.sub('\n', body).split('\n')
    return [ln + '\n' for ln in lines[:-1]] + [lines[-1]]


def parse_text(text: str, path: Path | str = "<string>", parser_config: str = 'gfm-like') -> ParsedDoc:
    """Parse MDX source text into a ParsedDoc with an owned syntax tree."""
    path = Path(path)
    frontmatter, body = _strip_frontmatter(text)
    body = unwrap_link_wrappers(body)
    env: dict[str, Any] = {}
    tokens = _make_parser(parser_config).parse(body, env)
    slug = frontmatter.get('slug') or slugify(path.stem)
    return ParsedDoc(
        path=path,
        slug=str(slug),
        raw_markdown=text,
        markdown=body,
        frontmatter=frontmatter,
        tree=build_tree(tokens),
        source_lines=_source_lines(body),
        partial_lines=set(env.get(PARTIAL_LINES_KEY, ())),
    )


def parse_file(path: Path, parser_config: str = 'gfm-like') -> ParsedDoc:
    """Parse a single .md/.mdx file into a ParsedDoc."""
    return parse_text(path.read_text(encoding='utf-8'), path, parser_config)
