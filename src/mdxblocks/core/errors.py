"""
Component migration exceptions.

Exception Hierarchy:
    MigrationError
    └── ComponentError
        ├── UnmappedComponentError
        ├── UnsupportedUsageError
        └── ComponentNotImplementedError

Malformed props and ambiguous spacing repairs are advisory: they are logged
and collected as warnings diagnostics, never raised.
"""

from mdxblocks.core.models import ValidationDiagnostic


class MigrationError(Exception):
    """Base exception for document migration failures."""


class ComponentError(MigrationError):
    """
    A component tag that cannot be migrated in fail-fast mode.

    Attributes:
        diagnostic: The full diagnostic, including the suggested registry change
    """

    def __init__(self, diagnostic: ValidationDiagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    @property
    def component_name(self) -> str:
        return self.diagnostic.component_name

    @property
    def usage(self) -> str:
        return self.diagnostic.usage

    def __str__(self) -> str:
        return self.diagnostic.render()


class UnmappedComponentError(ComponentError):
    """The component has no capability registry entry at all."""


class UnsupportedUsageError(ComponentError):
    """The registry entry does not allow the component in this usage context."""


class ComponentNotImplementedError(ComponentError):
    """The registry entry exists but its status is not 'implemented'."""


ERROR_CLASSES: dict[str, type[ComponentError]] = {
    "unmapped":          UnmappedComponentError,
    "unsupported_usage": UnsupportedUsageError,
    "not_implemented":   ComponentNotImplementedError,
}


def raise_for(diagnostic: ValidationDiagnostic) -> None:
    """Raise the exception class matching the diagnostic's error type."""
    raise ERROR_CLASSES.get(diagnostic.error_type, ComponentError)(diagnostic)
