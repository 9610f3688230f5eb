from __future__ import annotations


class DotGlobeError(Exception):
    """Base class for errors raised by the dot globe engine."""


class InvalidArgument(DotGlobeError, ValueError):
    """A count, radius, coordinate or buffer is outside its accepted range."""


class OutOfBounds(DotGlobeError, IndexError):
    """A pixel coordinate lies outside the image it is read from."""


class InvalidState(DotGlobeError, RuntimeError):
    """An operation was attempted on a map that cannot answer it."""
