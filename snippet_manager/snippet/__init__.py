"""Snippet records, search and import/export helpers."""

from .model import (
    DEFAULT_LANGUAGE,
    ImportedSnippet,
    Language,
    Snippet,
    SnippetDraft,
    parse_tags,
)
from .search import filter_snippets
from .transfer import (
    EXPORT_FILENAME,
    EXPORT_MEDIA_TYPE,
    ImportResult,
    dump_snippets,
    load_import_payload,
)

__all__ = [
    "DEFAULT_LANGUAGE",
    "EXPORT_FILENAME",
    "EXPORT_MEDIA_TYPE",
    "ImportResult",
    "ImportedSnippet",
    "Language",
    "Snippet",
    "SnippetDraft",
    "dump_snippets",
    "filter_snippets",
    "load_import_payload",
    "parse_tags",
]
