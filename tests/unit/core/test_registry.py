"""Unit tests for core/registry.py"""

import pytest

from mdxblocks.core.models import UnhandledComponent
from mdxblocks.core.registry import (
    ComponentCapability,
    ComponentRegistry,
    dump_registry,
    implementation_report,
    load_registry,
    register_unhandled,
)


def test_load_registry_camel_case_keys(registry):
    """YAML camelCase keys map onto the capability fields."""
    cap = registry.lookup("RatesTable")
    assert cap.status == "implemented"
    assert cap.component_type == "block"
    assert cap.can_render_block and not cap.can_render_inline


def test_lookup_fills_block_slug(registry):
    """lookup supplies the lowerCamel block slug when none is declared."""
    assert registry.lookup("RatesTable").block_slug == "ratesTable"
    assert registry.entry("RatesTable").block_slug is None


def test_lookup_unknown_is_none(registry):
    """Names without an entry are unmapped."""
    assert registry.lookup("Nope") is None
    assert "Nope" not in registry


def test_alias_resolves_to_target(registry):
    """An alias takes its target's capability and block slug."""
    cap = registry.lookup("Tel")
    assert cap.status == "implemented"
    assert cap.can_render_inline
    assert cap.block_slug == "phone"


def test_alias_cycle_is_unmapped():
    """A cyclic alias chain resolves to None."""
    registry = ComponentRegistry({
        "A": ComponentCapability(status="alias", component_type="block", alias_of="B"),
        "B": ComponentCapability(status="alias", component_type="block", alias_of="A"),
    })
    assert registry.lookup("A") is None


def test_by_status(registry):
    """by_status filters raw entries."""
    assert [n for n, _ in registry.by_status("needs-work")] == ["Tooltip"]


def test_load_registry_missing_file(tmp_path):
    """A missing registry file gives an empty registry."""
    registry = load_registry(tmp_path / "missing.yaml")
    assert len(registry) == 0


def test_load_registry_invalid_yaml(tmp_path):
    """Invalid YAML raises ValueError."""
    path = tmp_path / "bad.yaml"
    path.write_text("components: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid registry"):
        load_registry(path)


def test_load_registry_invalid_entry(tmp_path):
    """An entry with an unknown status raises ValueError naming the entry."""
    path = tmp_path / "bad.yaml"
    path.write_text("components:\n  Foo:\n    status: finished\n    componentType: block\n")
    with pytest.raises(ValueError, match="'Foo'"):
        load_registry(path)


def test_register_unhandled_returns_new_snapshot(registry):
    """register_unhandled adds needs-work stubs without touching the input registry."""
    unhandled = [
        UnhandledComponent(name="Widget", usage_count=3, component_type="block", first_seen_location="a.mdx:4"),
        UnhandledComponent(name="Tooltip", usage_count=2, component_type="inline", first_seen_location="b.mdx:1"),
    ]
    updated = register_unhandled(registry, unhandled)
    assert "Widget" not in registry
    stub = updated.entry("Widget")
    assert stub.status == "needs-work"
    assert stub.can_render_block and not stub.can_render_inline
    assert stub.usage_count == 3
    assert "a.mdx:4" in stub.notes
    assert updated.entry("Tooltip").usage_count == 2
    assert registry.entry("Tooltip").usage_count == 0


def test_dump_registry_round_trip(registry, tmp_path):
    """dump_registry writes a file load_registry reads back unchanged."""
    path = tmp_path / "out.yaml"
    dump_registry(registry, path)
    assert "canRenderBlock" in path.read_text()
    reloaded = load_registry(path)
    assert reloaded.items() == registry.items()


def test_implementation_report(registry):
    """The report summarises counts and lists needs-work TODOs."""
    report = implementation_report(registry)
    assert report.startswith("# Component Implementation Report")
    assert f"- **Total Components**: {len(registry)}" in report
    assert "### Tooltip" in report
    assert "  - [ ] Create the tooltip inline block" in report
    assert "## Deprecated Components" in report
