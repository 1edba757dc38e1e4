"""JSON export and import of snippet collections."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from pydantic import ValidationError

from ..errors import MalformedImportError
from .model import ImportedSnippet, Snippet

logger = logging.getLogger("snippet_manager")

EXPORT_FILENAME = "code-snippets.json"
EXPORT_MEDIA_TYPE = "application/json"


@dataclass(slots=True)
class ImportResult:
    """Outcome of parsing or applying an import payload."""

    entries: List[ImportedSnippet] = field(default_factory=list)
    skipped: int = 0
    imported: int = 0


def dump_snippets(snippets: Sequence[Snippet]) -> bytes:
    """Serialize the full collection as pretty-printed JSON."""
    documents = [snippet.to_document() for snippet in snippets]
    return json.dumps(documents, indent=2, ensure_ascii=False).encode("utf-8")


def load_import_payload(data: bytes | str) -> ImportResult:
    """Parse and validate an import payload.

    Raises ``MalformedImportError`` when the payload is not a JSON array.
    Entries that do not fit the snippet schema are skipped.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedImportError(
                "Error importing snippets. Please check the file format."
            ) from exc

    try:
        parsed: Any = json.loads(data)
    except json.JSONDecodeError as exc:
        raise MalformedImportError(
            "Error importing snippets. Please check the file format."
        ) from exc

    if not isinstance(parsed, list):
        raise MalformedImportError(
            "Error importing snippets. Expected a JSON array of snippets."
        )

    result = ImportResult()
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            logger.warning("Skipping import entry %d: not an object", index)
            result.skipped += 1
            continue
        try:
            result.entries.append(ImportedSnippet.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping import entry %d: %d validation error(s)",
                index,
                exc.error_count(),
            )
            result.skipped += 1

    return result


__all__ = [
    "EXPORT_FILENAME",
    "EXPORT_MEDIA_TYPE",
    "ImportResult",
    "dump_snippets",
    "load_import_payload",
]
