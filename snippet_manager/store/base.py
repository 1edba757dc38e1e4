from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Sequence

from ..snippet import Snippet

ProgressCallback = Callable[[int, int], None]


class SnippetStore(ABC):
    """Persistence contract shared by the local and remote stores."""

    #: Every operation needs a signed-in owner.
    requires_identity: bool = False
    #: Newly created records are shown before older ones.
    newest_first: bool = False

    @abstractmethod
    async def load(self, owner_id: str | None = None) -> List[Snippet]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, snippet: Snippet) -> Snippet:
        """Persist ``snippet`` and return it with its assigned id."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, snippet_id: str, owner_id: str | None = None) -> bool:
        """Remove a record. Returns ``False`` when the id is unknown.

        Stores partitioned by owner only delete records of ``owner_id``.
        """
        raise NotImplementedError

    async def create_many(
        self,
        snippets: Sequence[Snippet],
        progress: ProgressCallback | None = None,
    ) -> List[Snippet]:
        """Create records one after another; earlier ones stay on failure."""
        created: List[Snippet] = []
        total = len(snippets)
        for snippet in snippets:
            created.append(await self.create(snippet))
            if progress is not None:
                progress(len(created), total)
        return created

    async def close(self) -> None:
        return None


__all__ = ["ProgressCallback", "SnippetStore"]
