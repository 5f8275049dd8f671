"""Category scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Category:
    """Aggregate of one fixed cleanup category at scan time."""

    id: str
    title: str
    description: str
    size_bytes: int = 0
    file_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sizeBytes": self.size_bytes,
            "fileCount": self.file_count,
        }


@dataclass(slots=True)
class CategoryItem:
    """Single file matched by a category rule."""

    path: str
    size_bytes: int
    modified_ms: int | None = None

    def to_dict(self) -> dict:
        return {"path": self.path, "sizeBytes": self.size_bytes, "modifiedMs": self.modified_ms}


@dataclass(slots=True)
class CategoryItems:
    """A capped listing of category items.

    ``has_more`` is set when more matching items exist than were returned.
    """

    items: list[CategoryItem] = field(default_factory=list)
    has_more: bool = False

    def to_dict(self) -> dict:
        return {"items": [i.to_dict() for i in self.items], "hasMore": self.has_more}
