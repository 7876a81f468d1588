"""Domain error taxonomy for the grant workflow."""

from dataclasses import dataclass


@dataclass(slots=True)
class GrantWizardDomainError(Exception):
    """Base class for failures reported by grant services."""

    message: str
    code: str

    def __str__(self) -> str:
        return self.message


class CatalogLoadError(GrantWizardDomainError):
    """Raised when the capability or object catalog cannot be loaded."""


class PreviewError(GrantWizardDomainError):
    """Raised when the statement preview cannot be produced."""


class ApplyError(GrantWizardDomainError):
    """Raised when grant statements fail to apply; message carries server detail."""


class ServiceUnavailableError(GrantWizardDomainError):
    """Raised for transport failures talking to the grant service."""
