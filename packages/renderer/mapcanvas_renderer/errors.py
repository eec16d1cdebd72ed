"""Typed errors raised by decoders, the normalizer, and the dispatcher."""

from __future__ import annotations


class CanvasError(Exception):
    """Base class for every error this package raises on purpose."""


class FetchError(CanvasError):
    """Source bytes could not be fetched (network or transport failure)."""


class DecodeError(CanvasError):
    """Source bytes are malformed or in an unsupported format."""


class LayoutError(CanvasError):
    """Text cannot be laid out on the canvas."""


class InvalidSourceKind(CanvasError):
    """Degenerate source, e.g. an image with zero width or height."""


class UnsupportedKind(CanvasError):
    """Content kind outside the closed set. Indicates a programming error."""
