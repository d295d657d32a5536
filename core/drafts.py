"""Editable drafts of generated discovery content.

A draft keeps the last committed list next to a working copy so callers can
tell whether anything needs saving. Two sessions editing the same case are
not reconciled; whichever saves last wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.models import DiscoveryContent, DocumentType
from core.validation import validate_index


class ContentDraft:
    """Working copy of an ordered list of paragraphs."""

    def __init__(self, items: list[str] | None = None, label: str = "item"):
        self.label = label
        self._committed = list(items or [])
        self._working = list(self._committed)

    @property
    def items(self) -> list[str]:
        return list(self._working)

    @property
    def committed(self) -> list[str]:
        return list(self._committed)

    @property
    def dirty(self) -> bool:
        return self._working != self._committed

    def __len__(self) -> int:
        return len(self._working)

    def set_item(self, index: int, text: str) -> None:
        validate_index(index, self._working, self.label)
        self._working[index] = text

    def add_item(self, text: str = "") -> int:
        """Append a paragraph and return its index."""
        self._working.append(text)
        return len(self._working) - 1

    def remove_item(self, index: int) -> str:
        validate_index(index, self._working, self.label)
        return self._working.pop(index)

    def replace(self, items: list[str]) -> None:
        self._working = list(items)

    def commit(self) -> list[str]:
        """Accept the working copy as the new baseline."""
        self._committed = list(self._working)
        return self.committed

    def discard(self) -> None:
        self._working = list(self._committed)


@dataclass
class DocumentDraft:
    """Definitions and requests of one discovery document being edited."""

    document_type: DocumentType
    definitions: ContentDraft = field(default_factory=lambda: ContentDraft(label="definition"))
    items: ContentDraft = field(default_factory=ContentDraft)

    @classmethod
    def from_content(cls, content: DiscoveryContent) -> DocumentDraft:
        return cls(
            document_type=content.document_type,
            definitions=ContentDraft(content.definitions, label="definition"),
            items=ContentDraft(content.items),
        )

    @property
    def dirty(self) -> bool:
        return self.definitions.dirty or self.items.dirty

    def to_content(self) -> DiscoveryContent:
        return DiscoveryContent(
            document_type=self.document_type,
            definitions=self.definitions.items,
            items=self.items.items,
        )

    def commit(self) -> DiscoveryContent:
        self.definitions.commit()
        self.items.commit()
        return self.to_content()

    def discard(self) -> None:
        self.definitions.discard()
        self.items.discard()
