"""
Error types for kotoba-dict.

Import errors are scoped to a single dictionary import call: when importing
a batch, each failing dictionary is reported and the others continue.
Source and codec errors are not caught by the library.
"""

from typing import Optional


class KotobaDictError(Exception):
    """Base class for all kotoba-dict errors."""
    pass


# ============================================================================
# Structured dictionary import
# ============================================================================

class DictionaryImportError(KotobaDictError):
    """Base class for errors that abort one dictionary import."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MissingManifest(DictionaryImportError):
    """The dictionary has no `index.json`."""
    pass


class ParseError(DictionaryImportError, ValueError):
    """
    Malformed JSON or an unexpected row shape in a manifest or bank file.

    Attributes:
        filename: Bank or manifest file name, when known
        row: 0-based position of the offending row, when known
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        filename: Optional[str] = None,
        row: Optional[int] = None,
    ):
        if filename is not None:
            where = filename if row is None else f"{filename} row {row}"
            message = f"{where}: {message}"
        super().__init__(message, path)
        self.filename = filename
        self.row = row


class BankReadError(DictionaryImportError, OSError):
    """A dictionary directory, archive or bank file could not be read."""
    pass


# ============================================================================
# External sources
# ============================================================================

class SourceError(KotobaDictError):
    """Base class for errors coming from an external dictionary service."""
    pass


class SourceUnavailable(SourceError):
    """The external service could not be reached or returned an HTTP error."""
    pass


class InvalidResponse(SourceError):
    """The external service answered with data of an unexpected shape."""
    pass


# ============================================================================
# Codec
# ============================================================================

class EncodingInconsistency(KotobaDictError, ValueError):
    """Compact data references a code the name map does not know."""
    pass
