"""Section context tracking for wrapper components that name a section"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from mdxblocks.core.models import SectionContext


logger = logging.getLogger(__name__)

HEADING_LEVEL_RE = re.compile(r'^[hH]?([1-6])$')


@dataclass(frozen=True)
class SectionEnd:
    """Work-list marker spliced after a section wrapper's children."""
    frame: SectionContext


def _heading_level(value: Any) -> Optional[int]:
    """Accept 2, "2", or "h2"; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 1 <= value <= 6 else None
    if isinstance(value, str):
        m = HEADING_LEVEL_RE.match(value.strip())
        return int(m.group(1)) if m else None
    return None


def frame_from_props(props: dict[str, Any]) -> Optional[SectionContext]:
    """Build a SectionContext from wrapper props, or None when there is no id."""
    section_id = props.get("id")
    if section_id is None or section_id is True or section_id == "":
        return None
    title = props.get("title")
    return SectionContext(
        id=str(section_id),
        title=str(title) if isinstance(title, (str, int, float)) and not isinstance(title, bool) else None,
        heading_level=_heading_level(props.get("headingLevel")),
    )


class SectionStack:
    """Strictly nested (LIFO) stack of active section frames.

    Popping an empty stack, or a frame that is not on top, is a programming
    error and raises RuntimeError.
    """

    def __init__(self):
        self._frames: list[SectionContext] = []

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def current(self) -> Optional[SectionContext]:
        return self._frames[-1] if self._frames else None

    def push(self, frame: SectionContext) -> None:
        self._frames.append(frame)
        logger.debug("Enter section %s (depth %d)", frame.id, len(self._frames))

    def pop(self, frame: Optional[SectionContext] = None) -> SectionContext:
        if not self._frames:
            raise RuntimeError("Section stack underflow: pop without matching push")
        if frame is not None and self._frames[-1] is not frame:
            raise RuntimeError(
                f"Section stack mismatch: closing {frame.id!r} but {self._frames[-1].id!r} is open"
            )
        top = self._frames.pop()
        logger.debug("Exit section %s", top.id)
        return top
