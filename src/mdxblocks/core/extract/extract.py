"""Convert a ParsedDoc into ordered content blocks"""

from mdxblocks.core.extract.segment import ExtractOptions, segment
from mdxblocks.core.models import ConvertedDoc, ParsedContent, ParsedDoc
from mdxblocks.core.registry import CapabilityLookup


__all__ = ["ExtractOptions", "extract_doc", "convert_doc"]


def extract_doc(parsed: ParsedDoc, lookup: CapabilityLookup, options: ExtractOptions = None) -> ParsedContent:
    """Segment a ParsedDoc into rich-text and component blocks."""
    return segment(parsed, lookup, options)


def convert_doc(parsed: ParsedDoc, lookup: CapabilityLookup, options: ExtractOptions = None) -> ConvertedDoc:
    """Wrap extract_doc output with the document's identity and frontmatter."""
    return ConvertedDoc(
        slug=parsed.slug,
        path=str(parsed.path),
        frontmatter=parsed.frontmatter,
        content=extract_doc(parsed, lookup, options),
    )
