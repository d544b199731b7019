"""Typed value objects for notebooks, their pages and summaries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from notebook_mcp.utils import find_page_key, page_key, utc_now


class _Frozen(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @field_validator("created_at", "modified_at", mode="after", check_fields=False)
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class NotebookPage(_Frozen):
    page: str
    text: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)


class Notebook(_Frozen):
    name: str
    description: Optional[str] = None
    pages: Dict[str, NotebookPage] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)

    @staticmethod
    def new(name: str, description: Optional[str] = None) -> "Notebook":
        now = utc_now()
        return Notebook(name=name, description=description, created_at=now, modified_at=now)

    @field_serializer("pages", mode="wrap")
    def _sorted_pages(self, value: Dict[str, NotebookPage], handler: Any) -> Dict[str, Any]:
        data = handler(value)
        return {k: data[k] for k in sorted(data, key=page_key)}

    def get_page(self, page: str) -> Optional[NotebookPage]:
        key = find_page_key(self.pages, page)
        return self.pages[key] if key is not None else None

    def with_description(self, description: Optional[str]) -> "Notebook":
        return self.model_copy(update={"description": description or ""})

    def with_page(self, page: str, text: str, now: Optional[datetime] = None) -> "Notebook":
        """Insert or overwrite a page, keeping the stored spelling and creation time."""
        stamp = now or utc_now()
        key = find_page_key(self.pages, page)
        if key is None:
            entry = NotebookPage(page=page, text=text, created_at=stamp, modified_at=stamp)
            key = page
        else:
            entry = self.pages[key].model_copy(update={"text": text, "modified_at": stamp})
        pages = dict(self.pages)
        pages[key] = entry
        return self.model_copy(update={"pages": pages})

    def without_page(self, page: str) -> Optional["Notebook"]:
        """Return a copy without ``page``, or None when there is no such page."""
        key = find_page_key(self.pages, page)
        if key is None:
            return None
        pages = {k: v for k, v in self.pages.items() if k != key}
        return self.model_copy(update={"pages": pages})

    def touched(self, now: Optional[datetime] = None) -> "Notebook":
        stamp = now or utc_now()
        return self.model_copy(update={"modified_at": max(stamp, self.modified_at)})


class NotebookSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str = ""
    pages: List[str] = Field(default_factory=list)

    @staticmethod
    def empty() -> "NotebookSummary":
        return NotebookSummary(description="", pages=[])
