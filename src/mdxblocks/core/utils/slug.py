"""Slug and block-kind name generation"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def lower_camel(name: str) -> str:
    """Lower-case only the first character: 'RatesTable' -> 'ratesTable'."""
    return name[:1].lower() + name[1:]
