class TabulaError(Exception):
    """Base class for every error raised by the tabular core."""


class StorageError(TabulaError):
    """The storage engine or a file reader/writer rejected an operation."""


class ValidationError(TabulaError, ValueError):
    """A caller-supplied position or range is invalid."""


class UnsupportedFormatError(TabulaError):
    """No format adapter is registered for the requested kind."""
