"""Domain error taxonomy and result envelopes."""

from grantwizard.domain.errors import (
    ApplyError,
    CatalogLoadError,
    GrantWizardDomainError,
    PreviewError,
    ServiceUnavailableError,
)
from grantwizard.domain.results import CommandResult, GuardResult

__all__ = [
    "ApplyError",
    "CatalogLoadError",
    "CommandResult",
    "GrantWizardDomainError",
    "GuardResult",
    "PreviewError",
    "ServiceUnavailableError",
]
