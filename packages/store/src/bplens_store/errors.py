"""Exceptions raised by the suppression ledger and the XML formatter.

Load failures and save failures have separate bases so callers can tell a
suppression file that could not be read apart from one that could not be
written. Nothing here is fatal: the CLI turns every LedgerError into an
error screen and keeps the process alive.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all suppression ledger failures."""


class LedgerLoadError(LedgerError):
    """The suppression file could not be read."""


class LedgerNotFoundError(LedgerLoadError):
    """The suppression file does not exist."""


class LedgerParseError(LedgerLoadError):
    """The suppression file is not well-formed XML or has the wrong shape."""


class LedgerSaveError(LedgerError):
    """The suppression file could not be written back."""


class LedgerSerializeError(LedgerSaveError):
    """The in-memory ledger could not be turned into XML."""


class LedgerWriteError(LedgerSaveError):
    """The serialized XML could not be written to disk."""


class FormatError(LedgerSerializeError):
    """Input to the XML formatter is not well-formed."""
