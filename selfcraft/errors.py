"""
Error taxonomy shared by transitions, the record store and the façade.

Domain failures are raised as typed exceptions and converted into
natural-language tool results at the executor boundary, so the agent can
explain what went wrong instead of the host process crashing.
"""

from __future__ import annotations


class SelfcraftError(Exception):
    """Base class for every error raised on purpose by selfcraft."""


class InvalidArgument(SelfcraftError, ValueError):
    """Malformed or missing input: an empty key, arguments that fail the schema."""


class InvalidState(SelfcraftError, RuntimeError):
    """A transition's precondition does not hold (e.g. unlocking an unlocked safe)."""


class StorageFailure(SelfcraftError, OSError):
    """A backend read or write failed.

    Raised by key-value backends only. The record store always recovers from
    it locally, so capability callers never see this type.
    """
