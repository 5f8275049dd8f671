"""Large file/folder dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LargeItem:
    """File or directory above the large-item threshold.

    When ``category_id`` is set the item lies inside that category and its
    checked state is governed by the category's include/exclude overrides.
    ``None`` means the item is standalone.
    """

    path: str
    name: str
    size_bytes: int
    is_dir: bool = False
    suspicious: bool = False
    category_id: str | None = None

    @property
    def is_standalone(self) -> bool:
        return self.category_id is None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "name": self.name,
            "sizeBytes": self.size_bytes,
            "isDir": self.is_dir,
            "suspicious": self.suspicious,
            "categoryId": self.category_id,
        }
