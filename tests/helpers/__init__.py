"""Test helpers for the governance pipeline tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    make_principle, make_submission, make_session, make_entry: factories

Usage:
    from tests.helpers import FakeTimeAuthority
"""

from tests.helpers.factories import (
    make_entry,
    make_principle,
    make_session,
    make_submission,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = [
    "FakeTimeAuthority",
    "make_entry",
    "make_principle",
    "make_session",
    "make_submission",
]
