"""Unit tests for core/extract/props.py"""

import pytest

from mdxblocks.core.extract.props import extract_props, parse_expression
from mdxblocks.core.models import TagAttribute


@pytest.mark.parametrize("expr,expected", [
    ("true", True),
    ("false", False),
    ("null", None),
    ("undefined", None),
    ("42", 42),
    ("-3.5", -3.5),
    ("1e3", 1000.0),
    ('"hello"', "hello"),
    ("'hello'", "hello"),
    ("`plain template`", "plain template"),
    ("[1, 2, 3]", [1, 2, 3]),
    ("['a', 'b']", ["a", "b"]),
    ('{"a": 1, "b": [true]}', {"a": 1, "b": [True]}),
    ("  7  ", 7),
])
def test_parse_expression_literals(expr, expected):
    """Keywords, numbers, strings, and collection literals become typed values."""
    assert parse_expression(expr) == (True, expected)


@pytest.mark.parametrize("expr", [
    "user.name",
    "`Hi ${name}`",
    "fn(1)",
    "a + b",
    "",
    "{a: 1, b: 'x'}",
    "{d: 2024-01-01}",
    "{country: NO, on: yes, t: 17:30}",
])
def test_parse_expression_opaque(expr):
    """Anything else is kept as its stripped source text."""
    assert parse_expression(expr) == (False, expr.strip())


def test_extract_props_empty_string_and_flag():
    """An explicit empty string stays "" and a valueless attribute is True."""
    props = extract_props([TagAttribute("label", "string", ""), TagAttribute("open", "flag")])
    assert props == {"label": "", "open": True}


def test_extract_props_keeps_strings_verbatim():
    """Quoted values are never type-converted."""
    props = extract_props([TagAttribute("n", "string", "42"), TagAttribute("b", "string", "true")])
    assert props == {"n": "42", "b": "true"}


def test_extract_props_source_order():
    """Props come back in attribute order."""
    attrs = [TagAttribute("z", "flag"), TagAttribute("a", "expression", "1"), TagAttribute("m", "string", "x")]
    assert list(extract_props(attrs)) == ["z", "a", "m"]


def test_extract_props_records_malformed():
    """Opaque expressions are reported by name and kept as text."""
    malformed: list[str] = []
    props = extract_props(
        [TagAttribute("ok", "expression", "1"), TagAttribute("bad", "expression", "config.value")],
        malformed,
    )
    assert props == {"ok": 1, "bad": "config.value"}
    assert malformed == ["bad"]
