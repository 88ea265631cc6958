"""Error taxonomy shared by the layout, record and request layers."""


class ScanTextError(Exception):
    """Base class for all scantext errors."""


class ValidationError(ScanTextError):
    """Input rejected before any work started (e.g. no owning user)."""


class NotFoundOrForbidden(ScanTextError):
    """Record missing or owned by another user.

    The two cases are reported identically so callers cannot probe for
    other users' records.
    """


class InvalidTransition(ScanTextError):
    """Record status change not allowed from its current state."""


class RecognitionFailure(ScanTextError):
    """The recognition engine raised while processing an image."""


class PersistenceFailure(ScanTextError):
    """The record store rejected a read or write."""
