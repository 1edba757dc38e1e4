"""Pydantic models for the public API surface."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from ..snippet import DEFAULT_LANGUAGE, Language, Snippet, SnippetDraft


class SnippetCreateRequest(BaseModel):
    title: str = Field("", description="Snippet title")
    description: str = Field("", description="Optional free-text description")
    code: str = Field("", description="Code to store")
    tags: str | List[str] = Field(
        "", description="Comma-separated tags, or a list of tags"
    )
    language: Language = Field(DEFAULT_LANGUAGE, description="Snippet language")

    def to_draft(self) -> SnippetDraft:
        tags = self.tags if isinstance(self.tags, str) else ",".join(self.tags)
        return SnippetDraft(
            title=self.title,
            description=self.description,
            code=self.code,
            tags=tags,
            language=self.language,
        )


class SnippetResponse(BaseModel):
    id: str | None = None
    title: str
    description: str
    code: str
    language: str
    tags: List[str]
    created: datetime

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetResponse":
        return cls(
            id=snippet.id,
            title=snippet.title,
            description=snippet.description,
            code=snippet.code,
            language=snippet.language,
            tags=list(snippet.tags),
            created=snippet.created,
        )


class SnippetListResponse(BaseModel):
    query: str
    total: int
    results: List[SnippetResponse]


class ImportResponse(BaseModel):
    imported: int
    skipped: int


__all__ = [
    "ImportResponse",
    "SnippetCreateRequest",
    "SnippetListResponse",
    "SnippetResponse",
]
