"""Component validation against the capability lookup, and unhandled tallies"""

import logging
from typing import Any, Iterable, Optional

from mdxblocks.core.models import UnhandledComponent, Usage, ValidationDiagnostic
from mdxblocks.core.registry import CapabilityLookup, ComponentCapability
from mdxblocks.core.utils.slug import lower_camel


logger = logging.getLogger(__name__)


def _prop_names(props: dict[str, Any]) -> str:
    return ", ".join(props) or "none"


def _suggest_unmapped(name: str, usage: Usage, props: dict[str, Any]) -> str:
    kind = "block" if usage == "block" else "inline"
    flags = (
        "canRenderBlock: true, canRenderInline: false"
        if usage == "block" else
        "canRenderInline: true, canRenderBlock: false"
    )
    lines = [
        f"ACTION REQUIRED: add <{name}> to the component registry",
        f"  1. Add a '{name}' entry to the registry file",
        f"     - componentType: {kind}",
        f"     - {flags}",
        f"     - fields: {_prop_names(props)}",
        "     - status: needs-work",
        f"  2. Create the '{lower_camel(name)}' {kind} on the backend",
        "  3. Set status to implemented",
    ]
    if usage == "block":
        lines += ["", f"ALTERNATIVE: if <{name}> only groups other content, register it with componentType: wrapper"]
    else:
        lines += ["", f"ALTERNATIVE: move <{name}> onto its own line and register it as a block"]
    return "\n".join(lines)


def _suggest_not_implemented(name: str, cap: ComponentCapability, props: dict[str, Any]) -> str:
    lines = [f"ACTION REQUIRED: <{name}> is registered but its status is '{cap.status}'"]
    if cap.todos:
        lines.append("  TODOs from the registry:")
        lines += [f"    {i}. {todo}" for i, todo in enumerate(cap.todos, 1)]
    else:
        lines.append("  Finish the backend block, then set status to implemented")
    lines.append(f"  Props: {_prop_names(props)}")
    return "\n".join(lines)


def _suggest_unsupported(name: str, usage: Usage, cap: ComponentCapability) -> str:
    flag = "canRenderBlock" if usage == "block" else "canRenderInline"
    return "\n".join([
        f"ACTION REQUIRED: <{name}> is a {cap.component_type} component used as {usage}",
        f"  Either set {flag}: true in its registry entry and support it on the backend,",
        f"  or rewrite the source so <{name}> is only used where it can render",
    ])


def check_component(
    name: str,
    usage: Usage,
    lookup: CapabilityLookup,
    location: str,
    props: Optional[dict[str, Any]] = None,
    allow_placeholder: bool = False,
    ) -> Optional[ValidationDiagnostic]:
    """Return a diagnostic if name cannot be migrated in this usage, else None.

    Checks run in order: registered, implemented, usage supported.
    """
    props = props or {}
    cap = lookup.lookup(name)
    if cap is None:
        return ValidationDiagnostic(
            component_name=name, usage=usage, location=location,
            message=f"Unknown component <{name} />: not registered in the component registry",
            suggestion=_suggest_unmapped(name, usage, props),
            error_type="unmapped",
        )

    if cap.status == "placeholder" and allow_placeholder:
        logger.warning("<%s /> is a placeholder; migrating anyway (%s)", name, location)
    elif cap.status != "implemented":
        return ValidationDiagnostic(
            component_name=name, usage=usage, location=location,
            message=f"Component <{name} /> is not implemented (status: {cap.status})",
            suggestion=_suggest_not_implemented(name, cap, props),
            error_type="not_implemented",
        )

    supported = cap.can_render_block if usage == "block" else cap.can_render_inline
    if not supported:
        return ValidationDiagnostic(
            component_name=name, usage=usage, location=location,
            message=f"Component <{name} /> cannot be used as {usage}",
            suggestion=_suggest_unsupported(name, usage, cap),
            error_type="unsupported_usage",
        )
    return None


def advisory(name: str, usage: Usage, location: str, message: str, error_type: str) -> ValidationDiagnostic:
    """Build a non-fatal diagnostic (malformed props, ambiguous spacing)."""
    return ValidationDiagnostic(
        component_name=name, usage=usage, location=location,
        message=message, error_type=error_type,
    )


class UnhandledTally:
    """Count unhandled components by name, keeping type and location of first use."""

    def __init__(self):
        self._items: dict[str, UnhandledComponent] = {}

    def __len__(self) -> int:
        return len(self._items)

    def record(self, name: str, usage: Usage, location: str) -> None:
        item = self._items.get(name)
        if item is None:
            self._items[name] = UnhandledComponent(
                name=name, usage_count=1, component_type=usage, first_seen_location=location,
            )
        else:
            item.usage_count += 1

    def merge(self, items: Iterable[UnhandledComponent]) -> None:
        """Add another document's tally; first-seen data of earlier documents wins."""
        for u in items:
            item = self._items.get(u.name)
            if item is None:
                self._items[u.name] = u.model_copy()
            else:
                item.usage_count += u.usage_count

    def as_list(self) -> list[UnhandledComponent]:
        """Entries sorted by usage count descending, then name."""
        return sorted(self._items.values(), key=lambda u: (-u.usage_count, u.name))


def format_diagnostics(diagnostics: list[ValidationDiagnostic]) -> str:
    """Render several diagnostics as one numbered report."""
    if not diagnostics:
        return "All components are mapped"
    rule = "-" * 60
    parts = [f"MIGRATION FAILED: {len(diagnostics)} component problem(s) found"]
    for i, d in enumerate(diagnostics, 1):
        parts += [rule, f"Error #{i}: {d.render()}"]
    parts.append(rule)
    return "\n".join(parts)


def format_unhandled(items: list[UnhandledComponent], limit: int = 5) -> str:
    """Render the top unhandled components by usage."""
    lines = [f"{len(items)} unhandled component(s):"]
    for u in items[:limit]:
        lines.append(
            f"  <{u.name} /> {u.usage_count}x ({u.component_type}), first seen at {u.first_seen_location}"
        )
    if len(items) > limit:
        lines.append(f"  ... and {len(items) - limit} more")
    return "\n".join(lines)
