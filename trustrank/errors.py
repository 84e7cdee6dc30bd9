from __future__ import annotations


class TrustRankError(Exception):
    """Base class for engine errors."""


class InvalidInputError(TrustRankError, ValueError):
    """A required identifier or argument is missing or malformed."""


class DataUnavailableError(TrustRankError):
    """A store could not serve a read.

    Stores raise this; the facades catch it and fall back to their empty
    default, so it never reaches callers of the engine.
    """
