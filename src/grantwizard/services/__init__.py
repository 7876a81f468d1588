"""Grant service contracts and implementations."""

from grantwizard.services.contracts import GrantService, Notifier, RecordingNotifier

__all__ = ["GrantService", "Notifier", "RecordingNotifier"]
