from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    """Languages offered by the add form."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    RUBY = "ruby"
    OTHER = "other"

    @property
    def label(self) -> str:
        return LANGUAGE_LABELS[self]


LANGUAGE_LABELS = {
    Language.JAVASCRIPT: "JavaScript",
    Language.PYTHON: "Python",
    Language.JAVA: "Java",
    Language.CPP: "C++",
    Language.RUBY: "Ruby",
    Language.OTHER: "Other",
}

DEFAULT_LANGUAGE = Language.JAVASCRIPT


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_tags(raw: str | None) -> List[str]:
    """Split comma-separated tag text into trimmed, non-empty tokens."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def _clean_tag_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return parse_tags(value)
    if isinstance(value, (list, tuple)):
        cleaned: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError("tags must be text")
            if item.strip():
                cleaned.append(item.strip())
        return cleaned
    raise ValueError("tags must be a list of text or comma-separated text")


class Snippet(BaseModel):
    """A stored code snippet."""

    id: str | None = None
    title: str
    description: str = ""
    code: str
    language: Language = DEFAULT_LANGUAGE
    tags: List[str] = Field(default_factory=list)
    created: datetime = Field(default_factory=utcnow)
    user_id: str | None = Field(default=None, alias="userId")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("title", "code")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: Any) -> List[str]:
        return _clean_tag_list(value)

    @field_validator("created")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        # MongoDB hands back naive UTC datetimes.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON shape used by exports and the local slot."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def matches(self, term: str) -> bool:
        needle = term.lower()
        if needle in self.title.lower() or needle in self.description.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)


class SnippetDraft(BaseModel):
    """Contents of the add-snippet form before it is saved."""

    title: str = ""
    description: str = ""
    code: str = ""
    tags: str = ""
    language: Language = DEFAULT_LANGUAGE

    model_config = ConfigDict(use_enum_values=True)

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.title:
            missing.append("title")
        if not self.code:
            missing.append("code")
        return missing

    def to_snippet(self, *, user_id: str | None = None) -> Snippet:
        return Snippet(
            title=self.title,
            description=self.description,
            code=self.code,
            language=self.language,
            tags=parse_tags(self.tags),
            created=utcnow(),
            user_id=user_id,
        )


class ImportedSnippet(BaseModel):
    """Schema for one entry of an imported snippet file.

    Prior ``id``, ``userId`` and ``created`` values are dropped; imported
    entries are always stored as new records.
    """

    title: str
    description: str = ""
    code: str
    language: Language = DEFAULT_LANGUAGE
    tags: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("title", "code")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("language", mode="before")
    @classmethod
    def _coerce_language(cls, value: Any) -> Language:
        if value is None or value == "":
            return DEFAULT_LANGUAGE
        if isinstance(value, Language):
            return value
        try:
            return Language(str(value).strip().lower())
        except ValueError:
            return Language.OTHER

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: Any) -> List[str]:
        return _clean_tag_list(value)

    def to_snippet(self, *, user_id: str | None = None) -> Snippet:
        return Snippet(
            title=self.title,
            description=self.description,
            code=self.code,
            language=self.language,
            tags=list(self.tags),
            created=utcnow(),
            user_id=user_id,
        )


__all__ = [
    "DEFAULT_LANGUAGE",
    "ImportedSnippet",
    "LANGUAGE_LABELS",
    "Language",
    "Snippet",
    "SnippetDraft",
    "parse_tags",
    "utcnow",
]
