"""Segmentation Engine: top-level nodes to an ordered list of content blocks"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from mdxblocks.core.extract.blocks import CONTENT_TYPES, DROPPED_TYPES, buffer_markdown, collect_images
from mdxblocks.core.extract.inline import InlineEncoder, Mode, needs_encoding, placeholder_paragraph
from mdxblocks.core.extract.sections import SectionEnd, SectionStack, frame_from_props
from mdxblocks.core.models import (
    ComponentBlock,
    ContentBlock,
    ImageRef,
    ParsedContent,
    ParsedDoc,
    RichTextBlock,
    ValidationDiagnostic,
)
from mdxblocks.core.registry import CapabilityLookup
from mdxblocks.core.richtext import nodes as lx
from mdxblocks.core.richtext.cleanup import cleanup_artifacts
from mdxblocks.core.richtext.converter import ConverterConfig, LexicalConverter, RichTextConverter
from mdxblocks.core.richtext.links import process_links, restore_link_spacing
from mdxblocks.core.richtext.placeholders import decode_placeholders
from mdxblocks.core.tree import FLOW_COMPONENT, Node
from mdxblocks.core.utils.slug import lower_camel
from mdxblocks.core.validate import UnhandledTally, advisory, check_component


logger = logging.getLogger(__name__)

WorkItem = Union[Node, SectionEnd]


@dataclass
class ExtractOptions:
    """Per-run knobs for segmentation."""
    mode:              Mode = "fail-fast"
    allow_placeholder: bool = False
    converter:         Optional[RichTextConverter] = None
    converter_config:  ConverterConfig = field(default_factory=ConverterConfig)


class Segmenter:
    """Walks one document's top-level nodes and emits blocks in source order.

    Prose accumulates in a buffer and becomes one rich-text block when a
    component block, a section boundary, or the end of the document is reached.
    Wrapper components are flattened: their children are spliced into the work
    list right after the wrapper, followed by a SectionEnd marker when the
    wrapper opened a section.
    """

    def __init__(self, parsed: ParsedDoc, lookup: CapabilityLookup, options: ExtractOptions = None):
        self.parsed = parsed
        self.lookup = lookup
        self.options = options or ExtractOptions()
        self.converter = self.options.converter or LexicalConverter()
        self.tally = UnhandledTally()
        self.encoder = InlineEncoder(
            lookup, parsed.path, self.options.mode, self.tally, self.options.allow_placeholder,
        )
        self.sections = SectionStack()
        self.blocks: list[ContentBlock] = []
        self.images: list[ImageRef] = []
        self.warnings: list[ValidationDiagnostic] = []
        self._buffer: list[Node] = []

    def run(self) -> ParsedContent:
        work: list[WorkItem] = list(self.parsed.tree)
        i = 0
        while i < len(work):
            item = work[i]
            if isinstance(item, SectionEnd):
                self.flush()
                self.sections.pop(item.frame)
            elif item.type == FLOW_COMPONENT:
                work[i + 1:i + 1] = self._component(item)
            elif item.type in CONTENT_TYPES:
                self._append(item)
            elif item.type not in DROPPED_TYPES:
                logger.debug("Skipping top-level %s node", item.type)
            i += 1
        self.flush()

        if len(self.sections):
            raise RuntimeError(f"{len(self.sections)} section(s) left open after segmentation")

        return ParsedContent(
            blocks=self.blocks,
            images=self.images,
            unhandled=self.tally.as_list(),
            inline_components=self.encoder.references,
            warnings=self.encoder.warnings + self.warnings,
        )

    # --- top-level components ---

    def _component(self, node: Node) -> list[WorkItem]:
        """Handle one flow component; return work items to splice after it."""
        name = node.meta["name"]
        line = node.map[0] if node.map else None
        cap = self.lookup.lookup(name)

        if cap is not None and cap.component_type == "wrapper":
            return self._wrapper(node, line)

        if cap is not None and cap.can_render_inline and not cap.can_render_block:
            # inline-only component alone on its line stays inside the prose
            self._append(placeholder_paragraph(self.encoder.component(node, line), node))
            return []

        self.flush()
        props = self.encoder.props(node, "block", line)
        location = self.encoder.location(line)
        diagnostic = check_component(name, "block", self.lookup, location, props, self.options.allow_placeholder)
        if diagnostic is not None:
            self.encoder.reject(diagnostic)
            self._emit_inert(name)
            return []

        kind = cap.block_slug or lower_camel(name)
        self.blocks.append(ComponentBlock(kind=kind, fields=props, section=self.sections.current))
        logger.debug("Block <%s /> -> %s at %s", name, kind, location)
        return []

    def _wrapper(self, node: Node, line: Optional[int]) -> list[WorkItem]:
        self.flush()
        props = self.encoder.props(node, "block", line)
        spliced: list[WorkItem] = list(node.children)
        frame = frame_from_props(props)
        if frame is not None:
            self.sections.push(frame)
            spliced.append(SectionEnd(frame))
        logger.debug("Flatten wrapper <%s /> (%d children)", node.meta["name"], len(node.children))
        return spliced

    def _emit_inert(self, name: str) -> None:
        """Stand-in for a rejected block so the surrounding order is kept."""
        tree = lx.root([lx.paragraph([lx.text(f"[{name}]")])])
        self.blocks.append(RichTextBlock(content=tree, section=self.sections.current))

    # --- prose ---

    def _append(self, node: Node) -> None:
        if needs_encoding(node):
            node = self.encoder.encode(node)
        self.images.extend(collect_images(node, len(self.blocks)))
        self._buffer.append(node)

    def flush(self) -> None:
        """Convert buffered prose into one rich-text block; no-op when empty."""
        if not self._buffer:
            return
        nodes, self._buffer = self._buffer, []
        markdown = buffer_markdown(nodes, self.parsed.source_lines, self.parsed.partial_lines)
        if not markdown.strip():
            return
        line = nodes[0].map[0] if nodes[0].map else None
        tree = self.render(markdown, self.encoder.location(line))
        if lx.has_content(tree):
            self.blocks.append(RichTextBlock(content=tree, section=self.sections.current))

    def render(self, markdown: str, location: str) -> dict[str, Any]:
        """Markdown buffer to a finished rich-text tree."""
        tree = self.converter.convert(markdown, self.options.converter_config)
        decode_placeholders(tree, self.lookup, self.options.allow_placeholder)
        process_links(tree)
        for message in restore_link_spacing(tree, markdown):
            self.warnings.append(advisory(
                "", "inline", location, f"Ambiguous link spacing: {message}", "spacing_ambiguous",
            ))
        return cleanup_artifacts(tree)


def segment(parsed: ParsedDoc, lookup: CapabilityLookup, options: ExtractOptions = None) -> ParsedContent:
    """Segment one parsed document into blocks."""
    return Segmenter(parsed, lookup, options).run()
