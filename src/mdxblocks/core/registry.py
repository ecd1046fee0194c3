"""Component capability registry: read-only snapshot loaded from YAML"""

import logging
from pathlib import Path
from typing import Iterable, Literal, Optional, Protocol

import yaml
from pydantic import ConfigDict, ValidationError

from mdxblocks.core.models import CamelModel, UnhandledComponent
from mdxblocks.core.utils.slug import lower_camel


logger = logging.getLogger(__name__)

Status = Literal["implemented", "placeholder", "needs-work", "deprecated", "alias"]
ComponentType = Literal["block", "inline", "wrapper"]

STATUSES: tuple[str, ...] = ("implemented", "placeholder", "needs-work", "deprecated", "alias")
MAX_ALIAS_DEPTH = 8


class ComponentField(CamelModel):
    """A prop the component declares."""
    model_config = ConfigDict(frozen=True)

    name:        str
    type:        str = "string"
    required:    bool = False
    description: Optional[str] = None


class ComponentCapability(CamelModel):
    """What the registry knows about one component name."""
    model_config = ConfigDict(frozen=True)

    status:            Status
    component_type:    ComponentType
    can_render_block:  bool = False
    can_render_inline: bool = False
    block_slug:        Optional[str] = None    # backend block kind; lowerCamel(name) if unset
    alias_of:          Optional[str] = None
    fields:            tuple[ComponentField, ...] = ()
    notes:             Optional[str] = None
    todos:             tuple[str, ...] = ()
    usage_count:       int = 0


class CapabilityLookup(Protocol):
    """Anything that can answer lookup(name) -> capability or None."""

    def lookup(self, name: str) -> Optional[ComponentCapability]: ...


class ComponentRegistry:
    """Immutable name -> capability snapshot.

    Aliases resolve to the capability of their target, with the target's block
    slug, so callers never see status 'alias'. Producing a changed registry
    (see register_unhandled) always returns a new snapshot.
    """

    def __init__(self, entries: dict[str, ComponentCapability] = None):
        self._entries: dict[str, ComponentCapability] = dict(entries or {})

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def entry(self, name: str) -> Optional[ComponentCapability]:
        """Return the raw entry for name, without alias resolution."""
        return self._entries.get(name)

    def items(self) -> list[tuple[str, ComponentCapability]]:
        return sorted(self._entries.items())

    def lookup(self, name: str) -> Optional[ComponentCapability]:
        """Return the effective capability for name, resolving aliases."""
        current, cap = name, self._entries.get(name)
        for _ in range(MAX_ALIAS_DEPTH):
            if cap is None or cap.status != "alias":
                break
            if not cap.alias_of:
                logger.warning("Alias %s has no alias_of target", current)
                return None
            current, cap = cap.alias_of, self._entries.get(cap.alias_of)
        else:
            logger.warning("Alias chain for %s is too deep or cyclic", name)
            return None
        if cap is None:
            return None
        if cap.block_slug is None:
            cap = cap.model_copy(update={"block_slug": lower_camel(current)})
        return cap

    def by_status(self, status: str) -> list[tuple[str, ComponentCapability]]:
        return [(n, c) for n, c in self.items() if c.status == status]


def load_registry(path: Path) -> ComponentRegistry:
    """Load a registry snapshot from YAML with a top-level 'components' mapping.

    A missing file yields an empty registry, so every component is unmapped.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Component registry %s not found; all components are unmapped", path)
        return ComponentRegistry()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid registry {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid registry {path}: expected a mapping, got {type(data).__name__}")

    entries: dict[str, ComponentCapability] = {}
    for name, raw in (data.get("components") or {}).items():
        try:
            entries[str(name)] = ComponentCapability.model_validate(raw or {})
        except ValidationError as e:
            raise ValueError(f"Invalid registry entry {name!r} in {path}: {e}") from e
    logger.debug("Loaded %d registry entries from %s", len(entries), path)
    return ComponentRegistry(entries)


def dump_registry(registry: ComponentRegistry, path: Path) -> None:
    """Write registry as YAML using camelCase keys, omitting defaults."""
    components = {
        name: cap.model_dump(by_alias=True, exclude_defaults=True, mode="json")
        for name, cap in registry.items()
    }
    Path(path).write_text(
        yaml.safe_dump({"components": components}, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )


def register_unhandled(
    registry: ComponentRegistry,
    unhandled: Iterable[UnhandledComponent],
    ) -> ComponentRegistry:
    """Return a new snapshot with needs-work stubs for every unhandled component.

    Existing entries are kept as-is apart from their usage count.
    """
    entries = dict(registry.items())
    for u in unhandled:
        existing = entries.get(u.name)
        if existing is not None:
            entries[u.name] = existing.model_copy(
                update={"usage_count": existing.usage_count + u.usage_count}
            )
            continue
        inline = u.component_type == "inline"
        entries[u.name] = ComponentCapability(
            status="needs-work",
            component_type=u.component_type,
            can_render_block=not inline,
            can_render_inline=inline,
            usage_count=u.usage_count,
            notes=f"Auto-registered from scan; first seen at {u.first_seen_location}",
            todos=(
                f"Declare the props of <{u.name} /> under fields",
                f"Create the '{lower_camel(u.name)}' block on the backend",
                "Set status to implemented",
            ),
        )
    return ComponentRegistry(entries)


def implementation_report(registry: ComponentRegistry) -> str:
    """Render a markdown status report of the registry."""
    caps = [c for _, c in registry.items()]
    total = len(caps)
    lines = ["# Component Implementation Report", "", "## Summary", ""]
    lines.append(f"- **Total Components**: {total}")
    for status in STATUSES:
        lines.append(f"- **{status}**: {len(registry.by_status(status))}")
    lines += ["", "### By Type"]
    for ctype in ("block", "inline", "wrapper"):
        lines.append(f"- **{ctype}**: {sum(1 for c in caps if c.component_type == ctype)}")
    implemented = len(registry.by_status("implemented"))
    percent = (implemented / total * 100) if total else 0.0
    lines += ["", f"**{percent:.1f}%** of components fully implemented", ""]

    needs_work = sorted(registry.by_status("needs-work"), key=lambda nc: -nc[1].usage_count)
    if needs_work:
        lines += ["## Needs Work", ""]
        for name, cap in needs_work:
            lines.append(f"### {name}")
            lines.append(f"- **Usage**: {cap.usage_count} times")
            lines.append(f"- **Type**: {cap.component_type}")
            if cap.notes:
                lines.append(f"- **Notes**: {cap.notes}")
            if cap.todos:
                lines.append("- **TODOs**:")
                lines += [f"  - [ ] {t}" for t in cap.todos]
            lines.append("")

    deprecated = registry.by_status("deprecated")
    if deprecated:
        lines += ["## Deprecated Components", ""]
        for name, cap in deprecated:
            lines.append(f"### {name}")
            lines.append(f"- **Notes**: {cap.notes or 'No notes'}")
            lines.append("")
    return "\n".join(lines).rstrip() + "\n"
