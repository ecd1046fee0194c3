"""Root test configuration: shared component registry fixtures"""

import pytest

from mdxblocks.core.registry import ComponentRegistry, load_registry


REGISTRY_YAML = """\
components:
  Section:
    status: implemented
    componentType: wrapper
  Details:
    status: implemented
    componentType: wrapper
  RatesTable:
    status: implemented
    componentType: block
    canRenderBlock: true
  Callout:
    status: implemented
    componentType: block
    canRenderBlock: true
  Phone:
    status: implemented
    componentType: inline
    canRenderInline: true
  Tel:
    status: alias
    componentType: inline
    aliasOf: Phone
  Tooltip:
    status: needs-work
    componentType: inline
    canRenderInline: true
    todos:
      - Create the tooltip inline block
  Draft:
    status: placeholder
    componentType: block
    canRenderBlock: true
  Banner:
    status: implemented
    componentType: block
    canRenderBlock: true
  Legacy:
    status: deprecated
    componentType: block
    canRenderBlock: true
    notes: Replaced by Callout
"""


@pytest.fixture(name="registry_file")
def registry_file_fixture(tmp_path):
    path = tmp_path / "components.yaml"
    path.write_text(REGISTRY_YAML)
    return path


@pytest.fixture(name="registry")
def registry_fixture(registry_file) -> ComponentRegistry:
    return load_registry(registry_file)
