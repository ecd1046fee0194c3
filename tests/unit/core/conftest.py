"""Shared fixtures for core unit tests"""

import pytest

from mdxblocks.core.extract.inline import InlineEncoder
from mdxblocks.core.parse import _make_parser
from mdxblocks.core.validate import UnhandledTally


SAMPLE_MDX = """\
---
title: Rates
slug: rates
---

import { RatesTable } from "../components"

# Current rates

Call <Phone type="main" /> for details.

<Section id="savings" title="Savings" headingLevel="h2">

Savings intro with a [link](https://example.com).

<RatesTable category="savings" limit={5} />

</Section>

Closing paragraph.
"""


@pytest.fixture(name="sample_mdx")
def sample_mdx_fixture():
    return SAMPLE_MDX


@pytest.fixture(name="parser")
def parser_fixture():
    return _make_parser("gfm-like")


@pytest.fixture(name="tally")
def tally_fixture():
    return UnhandledTally()


@pytest.fixture(name="encoder")
def encoder_fixture(registry, tally):
    return InlineEncoder(registry, "doc.mdx", "fail-fast", tally)


@pytest.fixture(name="collect_encoder")
def collect_encoder_fixture(registry, tally):
    return InlineEncoder(registry, "doc.mdx", "collect", tally)
