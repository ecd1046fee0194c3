"""Unit tests for core/extract/sections.py"""

import pytest

from mdxblocks.core.extract.sections import SectionStack, frame_from_props
from mdxblocks.core.models import SectionContext


@pytest.mark.parametrize("level,expected", [(2, 2), ("3", 3), ("h4", 4), ("H1", 1), ("h9", None), (True, None)])
def test_frame_heading_level(level, expected):
    """headingLevel accepts ints, digit strings, and hN strings."""
    frame = frame_from_props({"id": "s", "headingLevel": level})
    assert frame.heading_level == expected


def test_frame_from_props():
    """id and title are copied into the frame."""
    frame = frame_from_props({"id": "rates", "title": "Rates", "other": 1})
    assert frame == SectionContext(id="rates", title="Rates")


@pytest.mark.parametrize("props", [{}, {"title": "x"}, {"id": ""}, {"id": True}])
def test_frame_requires_id(props):
    """Wrappers without a usable id open no section."""
    assert frame_from_props(props) is None


def test_stack_push_pop_current():
    """current is the innermost frame; pop restores the outer one."""
    stack = SectionStack()
    outer, inner = SectionContext(id="outer"), SectionContext(id="inner")
    assert stack.current is None
    stack.push(outer)
    stack.push(inner)
    assert stack.current is inner
    assert stack.pop(inner) is inner
    assert stack.current is outer
    assert len(stack) == 1


def test_stack_underflow():
    """Popping an empty stack is an error."""
    with pytest.raises(RuntimeError, match="underflow"):
        SectionStack().pop()


def test_stack_mismatch():
    """Closing a frame that is not on top is an error."""
    stack = SectionStack()
    stack.push(SectionContext(id="a"))
    with pytest.raises(RuntimeError, match="mismatch"):
        stack.pop(SectionContext(id="b"))
