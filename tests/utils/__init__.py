"""Shared test helpers."""

from tests.utils.fakes import FakeGrantService, make_object

__all__ = ["FakeGrantService", "make_object"]
