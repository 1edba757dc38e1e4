"""Exception types raised by the snippet manager."""

from __future__ import annotations


class SnippetError(Exception):
    """Base class for all snippet manager failures."""


class SnippetValidationError(SnippetError):
    """A draft or record is missing required fields."""


class NotSignedInError(SnippetValidationError):
    """A remote data operation was attempted without an identity."""

    def __init__(self, message: str = "Please sign in to manage snippets") -> None:
        super().__init__(message)


class MalformedImportError(SnippetError):
    """An import payload is not a JSON array of snippets."""


class StoreError(SnippetError):
    """The backing store failed to complete an operation."""


__all__ = [
    "SnippetError",
    "SnippetValidationError",
    "NotSignedInError",
    "MalformedImportError",
    "StoreError",
]
