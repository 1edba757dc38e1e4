"""Core package for the code snippet manager."""

from .auth import AuthSession, Identity
from .snippet import Language, Snippet, SnippetDraft, filter_snippets
from .store import LocalSnippetStore, MongoSnippetStore, SnippetStore
from .viewmodel import SnippetViewModel

__all__ = [
    "AuthSession",
    "Identity",
    "Language",
    "LocalSnippetStore",
    "MongoSnippetStore",
    "Snippet",
    "SnippetDraft",
    "SnippetStore",
    "SnippetViewModel",
    "filter_snippets",
]
