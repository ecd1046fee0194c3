"""Data models for the parse, segment, and convert pipeline"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Usage = Literal["block", "inline"]
ErrorType = Literal[
    "unmapped",
    "unsupported_usage",
    "not_implemented",
    "malformed_props",
    "spacing_ambiguous",
]


@dataclass
class TagAttribute:
    """One raw attribute of a component tag, as written in the source."""
    name:  str
    kind:  Literal["flag", "string", "expression"]
    value: Optional[str] = None     # None for flags; unquoted text or brace contents otherwise


@dataclass
class ParsedDoc:
    """Internal parse result carrying the owned syntax tree; not persisted."""
    path:          Path
    slug:          str
    raw_markdown:  str          # full file content (includes frontmatter)
    markdown:      str          # body only (frontmatter stripped, link wrappers unwrapped)
    frontmatter:   dict[str, Any]
    tree:          list         # top-level core.tree.Node objects
    source_lines:  list[str] = field(default_factory=list)
    partial_lines: set[int] = field(default_factory=set)    # lines shared with a component tag


class CamelModel(BaseModel):
    """Base for models whose JSON form uses camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionContext(CamelModel):
    """Active named section attached to every block produced inside it."""
    id:            str
    title:         Optional[str] = None
    heading_level: Optional[int] = None


class ComponentReference(BaseModel):
    """A component tag found in the document, with its extracted props."""
    name:  str
    props: dict[str, Any] = {}
    usage: Usage


class RichTextBlock(BaseModel):
    """A run of converted prose: the target rich-text tree plus its section."""
    kind:    Literal["richText"] = "richText"
    content: dict[str, Any]
    section: Optional[SectionContext] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the backend block shape."""
        return _with_section({"blockType": self.kind, "content": self.content}, self.section)


class ComponentBlock(BaseModel):
    """An atomic component block; kind is the lowerCamel component name."""
    kind:    str
    fields:  dict[str, Any] = {}
    section: Optional[SectionContext] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the backend block shape with fields spread at the top level."""
        return _with_section({"blockType": self.kind, **self.fields}, self.section)


ContentBlock = Union[RichTextBlock, ComponentBlock]


def _with_section(payload: dict[str, Any], section: Optional[SectionContext]) -> dict[str, Any]:
    if section is not None:
        payload["_section"] = section.model_dump(by_alias=True, exclude_none=True)
    return payload


class ValidationDiagnostic(CamelModel):
    """Why a component could not be migrated, and what to change to fix it."""
    component_name: str
    usage:          Usage
    location:       str                 # "path:line"
    message:        str
    suggestion:     str = ""
    error_type:     ErrorType

    def render(self) -> str:
        """Format for terminal output: message, location, then suggested steps."""
        text = f"{self.message}\n  at {self.location} (usage: {self.usage})"
        if self.suggestion:
            text += "\n\n" + self.suggestion
        return text


class UnhandledComponent(CamelModel):
    """Aggregated record of a component that could not be migrated."""
    name:                str
    usage_count:         int = 1
    component_type:      Usage
    first_seen_location: str


class ImageRef(BaseModel):
    """A markdown image found in prose, with the block index it precedes or sits in."""
    url:      str
    alt:      str = ""
    position: int


class ParsedContent(CamelModel):
    """Everything the pipeline produces for one document."""
    blocks:            list[ContentBlock] = []
    images:            list[ImageRef] = []
    unhandled:         list[UnhandledComponent] = []
    inline_components: list[ComponentReference] = []
    warnings:          list[ValidationDiagnostic] = []


class ConvertedDoc(BaseModel):
    """Output contract written per source document."""
    slug:        str
    path:        str
    frontmatter: dict[str, Any] = {}
    content:     ParsedContent = Field(default_factory=ParsedContent)

    def to_payload(self) -> dict[str, Any]:
        """Return the document in the backend's import shape."""
        return {
            "slug": self.slug,
            "path": self.path,
            "frontmatter": self.frontmatter,
            "content": [b.to_payload() for b in self.content.blocks],
        }
