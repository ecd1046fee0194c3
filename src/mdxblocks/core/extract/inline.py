"""Inline Reference Encoder: replace component nodes inside content with placeholder text"""

import logging
from pathlib import Path
from typing import Literal, Optional

from mdxblocks.core.errors import raise_for
from mdxblocks.core.extract.props import extract_props
from mdxblocks.core.models import ComponentReference, Usage, ValidationDiagnostic
from mdxblocks.core.registry import CapabilityLookup
from mdxblocks.core.richtext.placeholders import encode_placeholder
from mdxblocks.core.tree import FLOW_COMPONENT, TEXT_COMPONENT, Node, text_node
from mdxblocks.core.validate import UnhandledTally, advisory, check_component


logger = logging.getLogger(__name__)

Mode = Literal["fail-fast", "collect"]
ENCODED_TYPES = {
    FLOW_COMPONENT, TEXT_COMPONENT,
    "mdx_expression", "mdx_expression_block", "mdx_inline_close",
}


def needs_encoding(node: Node) -> bool:
    """True if node's subtree holds component tags or expressions."""
    return any(n.type in ENCODED_TYPES for n in node.walk() if n is not node)


def placeholder_paragraph(inline: Node, source: Node) -> Node:
    """Wrap one inline text node in a synthetic paragraph."""
    return Node(
        type="paragraph", tag="p",
        children=[Node(type="inline", children=[inline], rewritten=True)],
        map=source.map, meta={"synthetic": True}, rewritten=True,
    )


class InlineEncoder:
    """Rewrites content-bearing subtrees for one document.

    Accepted references are collected in ``references``; rejected ones are
    tallied (collect mode) or raised (fail-fast mode) and become ``[Name]``
    text. Malformed prop advisories accumulate in ``warnings``.
    """

    def __init__(
        self,
        lookup: CapabilityLookup,
        path: Path | str = "<string>",
        mode: Mode = "fail-fast",
        tally: Optional[UnhandledTally] = None,
        allow_placeholder: bool = False,
        ):
        self.lookup = lookup
        self.path = str(path)
        self.mode = mode
        self.tally = tally if tally is not None else UnhandledTally()
        self.allow_placeholder = allow_placeholder
        self.references: list[ComponentReference] = []
        self.warnings: list[ValidationDiagnostic] = []

    def location(self, line: Optional[int]) -> str:
        return f"{self.path}:{line + 1}" if line is not None else self.path

    def props(self, node: Node, usage: Usage, line: Optional[int]) -> dict:
        """Extract props, recording an advisory for opaque expressions."""
        malformed: list[str] = []
        props = extract_props(node.meta.get("attributes", []), malformed)
        if malformed:
            name = node.meta.get("name", "?")
            loc = self.location(line)
            logger.info("<%s /> at %s: props kept as expression text: %s", name, loc, ", ".join(malformed))
            self.warnings.append(advisory(
                name, usage, loc,
                f"Props of <{name} /> kept as expression text: {', '.join(malformed)}",
                "malformed_props",
            ))
        return props

    def reject(self, diagnostic: ValidationDiagnostic) -> None:
        """Raise in fail-fast mode; otherwise tally and continue."""
        if self.mode == "fail-fast":
            raise_for(diagnostic)
        self.tally.record(diagnostic.component_name, diagnostic.usage, diagnostic.location)
        logger.warning("Unhandled <%s /> (%s) at %s", diagnostic.component_name,
                       diagnostic.usage, diagnostic.location)

    def component(self, node: Node, line: Optional[int]) -> Node:
        """Return the placeholder (or [Name] fallback) text node for a component node."""
        name = node.meta["name"]
        line = node.map[0] if node.map else line
        props = self.props(node, "inline", line)
        diagnostic = check_component(
            name, "inline", self.lookup, self.location(line), props, self.allow_placeholder,
        )
        if diagnostic is not None:
            self.reject(diagnostic)
            return text_node(f"[{name}]")
        self.references.append(ComponentReference(name=name, props=props, usage="inline"))
        logger.debug("Encoded inline <%s /> at %s", name, self.location(line))
        return text_node(encode_placeholder(name, props), raw=True, placeholder=True)

    def encode(self, node: Node, line: Optional[int] = None) -> Node:
        """Recursively rewrite node; nodes without children come back unchanged."""
        if not node.children:
            return node
        line = node.map[0] if node.map else line
        children: list[Node] = []
        for child in node.children:
            children.extend(self._rewrite(child, line))
        return node.with_children(children)

    def _rewrite(self, child: Node, line: Optional[int]) -> list[Node]:
        t = child.type
        if t in ("mdx_expression", "mdx_inline_close"):
            return [text_node("")]
        if t == "mdx_expression_block":
            return []
        if t == TEXT_COMPONENT:
            return [self.component(child, line)]
        if t == FLOW_COMPONENT:
            cap = self.lookup.lookup(child.meta["name"])
            if cap is not None and cap.component_type == "wrapper":
                # a wrapper inside content cannot open a section; keep its children in place
                out: list[Node] = []
                for grandchild in child.children:
                    out.extend(self._rewrite(grandchild, child.map[0] if child.map else line))
                return out
            return [placeholder_paragraph(self.component(child, line), child)]
        return [self.encode(child, line)]
