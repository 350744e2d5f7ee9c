"""Exception types raised by the isotropic wavelet engine.

Every error derives from ``IsowaveError`` and from the built-in exception a
caller would naturally catch, so ``except ValueError`` keeps working for
configuration problems and ``except IndexError`` for bad output indices.
"""


class IsowaveError(Exception):
    """Base class for all isowave errors."""


class ConfigurationError(IsowaveError, ValueError):
    """Raised when a transform, filter bank or wavelet option is invalid.

    Detected eagerly, when the option is set or before a decomposition
    starts, so a partially computed pyramid is never exposed.
    """


class IndexOutOfRange(IsowaveError, IndexError):
    """Raised for an output, level or band index beyond the pyramid bounds."""


class DimensionMismatch(IsowaveError, ValueError):
    """Raised when array rank and per-axis metadata disagree."""


class TransformCancelled(IsowaveError, RuntimeError):
    """Raised when a cooperative cancellation check stops a decomposition."""
