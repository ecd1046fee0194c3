"""Typed prop extraction from raw component tag attributes"""

import json
import re
from typing import Any, Optional

from mdxblocks.core.models import TagAttribute


KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None, "undefined": None}
NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
INT_RE = re.compile(r'^[+-]?\d+$')
QUOTED_RE = re.compile(r'^(["\'`])(.*)\1$', re.DOTALL)


def _parse_collection(text: str) -> tuple[bool, Any]:
    """Try an array/object literal as JSON, then with single quotes swapped for double."""
    for candidate in (text, text.replace("'", '"')):
        try:
            return True, json.loads(candidate)
        except ValueError:
            pass
    return False, None


def parse_expression(expr: str) -> tuple[bool, Any]:
    """Interpret a brace expression as a literal.

    Returns (True, value) when it is a keyword, collection, quoted string, or
    number; otherwise (False, stripped expression text).
    """
    text = expr.strip()
    if text in KEYWORDS:
        return True, KEYWORDS[text]
    if text and text[0] in "[{":
        ok, value = _parse_collection(text)
        if ok:
            return True, value
    m = QUOTED_RE.match(text)
    if m and "${" not in text:
        return True, m.group(2)
    if NUMBER_RE.match(text):
        return True, int(text) if INT_RE.match(text) else float(text)
    return False, text


def extract_props(
    attributes: list[TagAttribute],
    malformed: Optional[list[str]] = None,
    ) -> dict[str, Any]:
    """Map raw attributes to typed values in source order. Never raises.

    Flags become True, quoted values stay verbatim (including ""), and
    expressions go through parse_expression. Names of expressions that fell
    back to opaque text are appended to malformed when given.
    """
    props: dict[str, Any] = {}
    for attr in attributes:
        if attr.kind == "flag":
            props[attr.name] = True
        elif attr.kind == "string":
            props[attr.name] = attr.value if attr.value is not None else ""
        else:
            ok, value = parse_expression(attr.value or "")
            props[attr.name] = value
            if not ok and malformed is not None:
                malformed.append(attr.name)
    return props
