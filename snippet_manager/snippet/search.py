from __future__ import annotations

from typing import Iterable, List

from .model import Snippet


def filter_snippets(snippets: Iterable[Snippet], term: str | None) -> List[Snippet]:
    """Return snippets whose title, description or tags contain ``term``.

    Matching is a case-insensitive substring test. Input order is kept and an
    empty term matches everything.
    """
    snippet_list = list(snippets)
    if not term:
        return snippet_list
    return [snippet for snippet in snippet_list if snippet.matches(term)]


__all__ = ["filter_snippets"]
